"""
Time-slot value type shared by matching, reservations and booking.

The wire format exchanged with the frontend is ``"<Weekday>, DD/MM/YYYY HH:MM-HH:MM"``.
It is parsed once at the API boundary into a :class:`TimeSlot` and formatted back
only when a human-readable string is needed. Slot times are India Standard Time
wall-clock values; no timezone conversion is applied anywhere.
"""

import logging
import datetime as dt
import re
from datetime import date, datetime, time, timedelta
from typing import Optional

from pydantic import BaseModel, ConfigDict

logger = logging.getLogger("time_slots")

WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")
DEFAULT_AVAILABILITY_DAYS = WEEKDAYS[:5]

SLOT_PATTERN = re.compile(
    r"^\s*(?P<weekday>[A-Za-z]+),\s*"
    r"(?P<day>\d{1,2})/(?P<month>\d{1,2})/(?P<year>\d{4})\s+"
    r"(?P<sh>\d{1,2}):(?P<sm>\d{2})"
    r"(?:\s*-\s*(?P<eh>\d{1,2}):(?P<em>\d{2}))?\s*$"
)


class TimeSlot(BaseModel):
    model_config = ConfigDict(frozen=True)

    date: dt.date
    start_time: time
    end_time: time

    @property
    def weekday(self) -> str:
        return WEEKDAYS[self.date.weekday()]

    @property
    def start_datetime(self) -> datetime:
        return datetime.combine(self.date, self.start_time)

    @property
    def end_datetime(self) -> datetime:
        return datetime.combine(self.date, self.end_time)

    @property
    def duration_minutes(self) -> int:
        return int((self.end_datetime - self.start_datetime).total_seconds() // 60)

    def overlaps(self, other: "TimeSlot") -> bool:
        return self.date == other.date and times_overlap(
            self.start_time, self.end_time, other.start_time, other.end_time
        )


def times_overlap(a_start: time, a_end: time, b_start: time, b_end: time) -> bool:
    """Half-open interval overlap: [a_start, a_end) against [b_start, b_end)."""
    return a_start < b_end and b_start < a_end


def parse_time_slot(text: Optional[str], duration_minutes: Optional[int] = None) -> Optional[TimeSlot]:
    """
    Parse ``"Tuesday, 02/09/2025 17:30-18:00"`` into a TimeSlot.

    When ``duration_minutes`` is given it overrides the end time in the text; when
    the text has no end time and no duration is given, the slot lasts one hour.
    Returns None for anything that does not match the format or names an
    impossible date or time.
    """
    if not text:
        return None

    match = SLOT_PATTERN.match(text)
    if not match:
        logger.debug(f"[SlotParse] Unrecognised time slot: {text!r}")
        return None

    try:
        slot_date = date(int(match["year"]), int(match["month"]), int(match["day"]))
        start = time(int(match["sh"]), int(match["sm"]))
        if duration_minutes:
            end_dt = datetime.combine(slot_date, start) + timedelta(minutes=duration_minutes)
            if end_dt.date() != slot_date:
                return None
            end = end_dt.time()
        elif match["eh"] is not None:
            end = time(int(match["eh"]), int(match["em"]))
        else:
            end = (datetime.combine(slot_date, start) + timedelta(hours=1)).time()
    except ValueError:
        logger.debug(f"[SlotParse] Invalid date/time in slot: {text!r}")
        return None

    if end <= start:
        return None

    if match["weekday"].capitalize() != WEEKDAYS[slot_date.weekday()]:
        logger.warning(f"[SlotParse] Weekday {match['weekday']} does not match {slot_date}; using the date")

    return TimeSlot(date=slot_date, start_time=start, end_time=end)


def format_time_slot(slot: TimeSlot) -> str:
    return (
        f"{slot.weekday}, {slot.date.strftime('%d/%m/%Y')} "
        f"{slot.start_time.strftime('%H:%M')}-{slot.end_time.strftime('%H:%M')}"
    )


def parse_clock_range(value: str) -> Optional[tuple]:
    """``"10:00-11:00"`` -> (time(10), time(11))."""
    try:
        start_txt, end_txt = value.split("-")
        start = datetime.strptime(start_txt.strip(), "%H:%M").time()
        end = datetime.strptime(end_txt.strip(), "%H:%M").time()
    except ValueError:
        return None
    return (start, end) if end > start else None
