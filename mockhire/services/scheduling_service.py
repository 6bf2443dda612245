# mockhire/services/scheduling_service.py

import logging
from typing import Any, Dict, List, Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from mockhire.base.config import settings
from mockhire.base.models import InterviewResponse, ScheduleInterviewRequest
from mockhire.models.tables import (
    InterviewerModel,
    InterviewModel,
    InterviewStatus,
    ProfileModel,
    new_id,
)
from mockhire.services.notification_service import NotificationService
from mockhire.services.pricing_service import PricingService
from mockhire.services.reservation_service import ReservationService
from mockhire.utils.time_slots import TimeSlot, format_time_slot, parse_time_slot

logger = logging.getLogger("scheduling_service")


def default_calendar_client():
    if not settings.GOOGLE_CALENDAR_ENABLED:
        return None
    from mockhire.utils.calendar_utils import GoogleCalendarClient

    try:
        return GoogleCalendarClient()
    except Exception as e:
        logger.warning(f"[Calendar] Disabled, client init failed: {e}")
        return None


class InterviewSchedulingService:
    """
    Handles the creation, rescheduling, cancellation and completion of interviews,
    with optional Google Calendar events and email notifications.
    """

    def __init__(
        self,
        calendar_client=None,
        notifier: Optional[NotificationService] = None,
        reservations: Optional[ReservationService] = None,
        pricing: Optional[PricingService] = None,
    ):
        self.calendar = calendar_client if calendar_client is not None else default_calendar_client()
        self.notifier = notifier or NotificationService()
        self.reservations = reservations or ReservationService()
        self.pricing = pricing or PricingService()

    def _get_interview(self, interview_id: str, db: Session) -> InterviewModel:
        interview = db.query(InterviewModel).filter_by(id=interview_id).first()
        if not interview:
            raise HTTPException(status_code=404, detail="Interview not found")
        return interview

    def _attach_meeting(self, interview: InterviewModel, slot: TimeSlot) -> None:
        link, event_id = None, None
        if self.calendar is not None:
            try:
                created = self.calendar.create_meeting(
                    summary=f"Mock Interview: {interview.target_role or 'General'}",
                    start=slot.start_datetime,
                    end=slot.end_datetime,
                    description=f"Candidate: {interview.candidate_name or interview.candidate_email}",
                    attendees=[e for e in (interview.candidate_email, interview.interviewer_email) if e],
                )
            except Exception as e:
                logger.warning(f"[Calendar] Failed to create event for {interview.id}: {e}")
                created = None
            if created:
                link, event_id = created.get("meet_link"), created.get("event_id")

        interview.meeting_link = link or settings.FALLBACK_MEETING_LINK
        interview.calendar_event_id = event_id

    def _drop_calendar_event(self, interview: InterviewModel) -> None:
        if self.calendar is None or not interview.calendar_event_id:
            return
        try:
            self.calendar.delete_event(interview.calendar_event_id)
        except Exception as e:
            logger.warning(f"[Calendar] Failed to delete event {interview.calendar_event_id}: {e}")

    def _confirm(self, interview: InterviewModel, db: Session) -> None:
        if self.notifier.send_interview_confirmation(interview):
            interview.email_confirmation_sent = True
            db.commit()

    def _resolve_interviewer_contact(self, interviewer: InterviewerModel, db: Session) -> Dict[str, Optional[str]]:
        profile = db.query(ProfileModel).filter_by(id=interviewer.user_id).first()
        return {
            "email": profile.email if profile else None,
            "name": (profile.full_name if profile else None) or interviewer.company or "Professional Interviewer",
        }

    def schedule_interview(
        self,
        req: ScheduleInterviewRequest,
        slot: TimeSlot,
        db: Session,
        payment_session_id: Optional[str] = None,
        selected_add_ons: Optional[List[Dict[str, Any]]] = None,
        add_ons_total: float = 0,
        block_slot: bool = True,
    ) -> InterviewModel:
        """
        ``block_slot=False`` is used when the slot is already held by a reservation
        that the caller promotes itself.
        """
        interviewer = db.query(InterviewerModel).filter_by(id=req.interviewer_id).first()
        if not interviewer:
            raise HTTPException(status_code=404, detail="Interviewer not found")

        contact = self._resolve_interviewer_contact(interviewer, db)
        interview = InterviewModel(
            id=new_id(),
            interviewer_id=interviewer.id,
            candidate_id=req.candidate_id or req.candidate_email,
            candidate_name=req.candidate_name,
            candidate_email=req.candidate_email,
            interviewer_email=req.interviewer_email or contact["email"],
            interviewer_name=req.interviewer_name or contact["name"],
            target_role=req.target_role,
            experience=req.experience,
            scheduled_time=slot.start_datetime,
            status=InterviewStatus.SCHEDULED.value,
            resume_url=req.resume_url,
            selected_plan=req.selected_plan,
            interview_duration=slot.duration_minutes,
            plan_details=req.plan_details,
            selected_add_ons=selected_add_ons or [],
            add_ons_total=add_ons_total,
            payment_session_id=payment_session_id,
        )

        try:
            db.add(interview)
            if block_slot:
                self.reservations.create_permanent_block(interviewer.id, slot, interview.id, db)
            self._attach_meeting(interview, slot)
            db.commit()
        except HTTPException:
            db.rollback()
            raise
        db.refresh(interview)

        logger.info(f"[Create] Interview {interview.id} with {interviewer.id} at {format_time_slot(slot)}")
        self._confirm(interview, db)
        return interview

    def schedule_from_request(self, req: ScheduleInterviewRequest, db: Session) -> InterviewModel:
        duration = req.duration_minutes or self.pricing.get_plan_duration(req.selected_plan)
        slot = parse_time_slot(req.time_slot, duration_minutes=duration)
        if slot is None:
            raise HTTPException(status_code=400, detail=f"Invalid time slot format: {req.time_slot}")
        return self.schedule_interview(req, slot, db)

    def reschedule_interview(self, interview_id: str, time_slot: str, db: Session) -> InterviewModel:
        old = self._get_interview(interview_id, db)
        if old.status not in (InterviewStatus.SCHEDULED.value,):
            raise HTTPException(status_code=400, detail=f"Cannot reschedule a {old.status} interview")

        duration = old.interview_duration or settings.DEFAULT_INTERVIEW_MINUTES
        slot = parse_time_slot(time_slot, duration_minutes=duration)
        if slot is None:
            raise HTTPException(status_code=400, detail=f"Invalid time slot format: {time_slot}")

        new = InterviewModel(
            id=new_id(),
            interviewer_id=old.interviewer_id,
            candidate_id=old.candidate_id,
            candidate_name=old.candidate_name,
            candidate_email=old.candidate_email,
            interviewer_email=old.interviewer_email,
            interviewer_name=old.interviewer_name,
            target_role=old.target_role,
            experience=old.experience,
            scheduled_time=slot.start_datetime,
            status=InterviewStatus.SCHEDULED.value,
            resume_url=old.resume_url,
            selected_plan=old.selected_plan,
            interview_duration=slot.duration_minutes,
            plan_details=old.plan_details,
            selected_add_ons=old.selected_add_ons or [],
            add_ons_total=old.add_ons_total or 0,
            payment_session_id=old.payment_session_id,
            rescheduled_from_id=old.id,
        )

        try:
            # The old block goes first so a slot overlapping the old time is allowed
            self.reservations.release_interview_blocks(old.id, db)
            db.add(new)
            self.reservations.create_permanent_block(old.interviewer_id, slot, new.id, db)
            old.status = InterviewStatus.RESCHEDULED.value
            self._drop_calendar_event(old)
            self._attach_meeting(new, slot)
            db.commit()
        except HTTPException:
            db.rollback()
            raise
        db.refresh(new)

        logger.info(f"[Reschedule] Interview {old.id} -> {new.id} at {format_time_slot(slot)}")
        self._confirm(new, db)
        return new

    def cancel_interview(self, interview_id: str, db: Session) -> InterviewModel:
        interview = self._get_interview(interview_id, db)
        if interview.status == InterviewStatus.COMPLETED.value:
            raise HTTPException(status_code=400, detail="Cannot cancel a completed interview")
        if interview.status == InterviewStatus.CANCELLED.value:
            return interview

        released = self.reservations.release_interview_blocks(interview.id, db)
        interview.status = InterviewStatus.CANCELLED.value
        self._drop_calendar_event(interview)
        db.commit()

        logger.info(f"[Cancel] Interview {interview_id} cancelled, {released} block(s) released")
        return interview

    def complete_interview(self, interview_id: str, db: Session) -> InterviewModel:
        interview = self._get_interview(interview_id, db)
        if interview.status in (InterviewStatus.CANCELLED.value, InterviewStatus.RESCHEDULED.value):
            raise HTTPException(status_code=400, detail=f"Cannot complete a {interview.status} interview")
        if interview.status == InterviewStatus.COMPLETED.value:
            return interview

        interview.status = InterviewStatus.COMPLETED.value
        db.commit()

        self.notifier.send_feedback_request(interview)
        logger.info(f"[Complete] Interview {interview_id} completed")
        return interview

    def send_reminder(self, interview_id: str, db: Session) -> Dict[str, Any]:
        interview = self._get_interview(interview_id, db)
        if interview.status != InterviewStatus.SCHEDULED.value:
            raise HTTPException(status_code=400, detail=f"Interview is {interview.status}")
        sent = self.notifier.send_interview_reminder(interview)
        return {"interview_id": interview_id, "sent": sent}

    def list_interviews(
        self, db: Session, candidate_email: Optional[str] = None, interviewer_id: Optional[str] = None
    ) -> List[InterviewResponse]:
        if not candidate_email and not interviewer_id:
            raise HTTPException(status_code=400, detail="candidate_email or interviewer_id is required")

        query = db.query(InterviewModel)
        if candidate_email:
            query = query.filter(InterviewModel.candidate_email == candidate_email)
        if interviewer_id:
            query = query.filter(InterviewModel.interviewer_id == interviewer_id)

        interviews = query.order_by(InterviewModel.scheduled_time.asc()).all()
        logger.info(f"[List] {len(interviews)} interviews")
        return [InterviewResponse.model_validate(i) for i in interviews]
