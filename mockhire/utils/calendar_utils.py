import logging
import uuid
from datetime import datetime
from typing import Dict, List, Optional

from google.oauth2 import service_account
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from mockhire.base.config import settings

logger = logging.getLogger("calendar_utils")

SCOPES = ["https://www.googleapis.com/auth/calendar"]


class GoogleCalendarClient:
    """Creates and removes interview events with an attached Google Meet link."""

    def __init__(self, calendar_id: Optional[str] = None, timezone: Optional[str] = None):
        self.calendar_id = calendar_id or settings.GOOGLE_CALENDAR_ID
        self.timezone = timezone or settings.CALENDAR_TIMEZONE
        self.service = self._init_service()

    def _init_service(self):
        try:
            credentials = service_account.Credentials.from_service_account_file(
                settings.GOOGLE_CREDENTIALS_FILE, scopes=SCOPES
            )
            service = build("calendar", "v3", credentials=credentials, cache_discovery=False)
            logger.info("[GoogleCalendar] Authenticated with service account.")
            return service
        except Exception as e:
            logger.exception(f"[GoogleCalendar] Failed to authenticate: {e}")
            raise

    def create_meeting(
        self,
        summary: str,
        start: datetime,
        end: datetime,
        description: str = "",
        attendees: Optional[List[str]] = None,
    ) -> Optional[Dict[str, str]]:
        """
        Returns {"event_id", "meet_link"} or None when the API rejects the request.
        ``start``/``end`` are wall-clock times in the calendar timezone.
        """
        event = {
            "summary": summary,
            "description": description,
            "start": {"dateTime": start.isoformat(), "timeZone": self.timezone},
            "end": {"dateTime": end.isoformat(), "timeZone": self.timezone},
            "attendees": [{"email": a} for a in attendees or []],
            "conferenceData": {
                "createRequest": {
                    "requestId": str(uuid.uuid4()),
                    "conferenceSolutionKey": {"type": "hangoutsMeet"},
                }
            },
            "reminders": {"useDefault": True},
        }

        try:
            created = self.service.events().insert(
                calendarId=self.calendar_id,
                body=event,
                conferenceDataVersion=1,
                sendUpdates="all",
            ).execute()
        except HttpError as e:
            logger.error(f"[EventCreate] Failed: {e}")
            return None

        meet_link = created.get("hangoutLink")
        logger.info(f"[EventCreate] Created: {created.get('htmlLink')}")
        return {"event_id": created.get("id"), "meet_link": meet_link}

    def delete_event(self, event_id: str) -> bool:
        try:
            self.service.events().delete(calendarId=self.calendar_id, eventId=event_id).execute()
            logger.info(f"[EventDelete] Deleted event ID: {event_id}")
            return True
        except HttpError as e:
            logger.warning(f"[EventDelete] Failed: {e}")
            return False
