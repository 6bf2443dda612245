# mockhire/services/booking_service.py

import logging
from typing import Any, Dict, Optional

from fastapi import HTTPException
from pydantic import ValidationError
from sqlalchemy.orm import Session

from mockhire.base.logging_config import booking_logger
from mockhire.base.metrics import booking_outcomes
from mockhire.base.models import AutoBookRequest, AutoBookResponse, InterviewResponse, ScheduleInterviewRequest
from mockhire.models.tables import InterviewModel, PaymentSessionModel, PaymentStatus, ProfileModel
from mockhire.services.pricing_service import PricingService
from mockhire.services.reservation_service import ReservationNotFound, ReservationService
from mockhire.services.scheduling_service import InterviewSchedulingService
from mockhire.utils.time_slots import TimeSlot, parse_time_slot

logger = logging.getLogger("booking_service")


def _pick(data: Dict[str, Any], *keys: str) -> Optional[Any]:
    """First non-empty value among snake_case / camelCase spellings."""
    for key in keys:
        value = data.get(key)
        if value not in (None, ""):
            return value
    return None


class BookingService:
    """
    Turns a completed payment into a scheduled interview with the interviewer
    matched before checkout. Safe to call repeatedly for the same session.
    """

    def __init__(
        self,
        scheduler: Optional[InterviewSchedulingService] = None,
        reservations: Optional[ReservationService] = None,
        pricing: Optional[PricingService] = None,
    ):
        self.reservations = reservations or ReservationService()
        self.pricing = pricing or PricingService()
        self._scheduler = scheduler

    @property
    def scheduler(self) -> InterviewSchedulingService:
        # Built on first use so the calendar client is not created at import time
        if self._scheduler is None:
            self._scheduler = InterviewSchedulingService(reservations=self.reservations, pricing=self.pricing)
        return self._scheduler

    def _promote_reservation(
        self, session: PaymentSessionModel, interviewer_id: str, slot: TimeSlot, interview_id: str, db: Session
    ) -> bool:
        reservation_id = session.reservation_id
        if not reservation_id:
            block = self.reservations.find_temporary_block(interviewer_id, slot, db)
            reservation_id = block.id if block else None
        if not reservation_id:
            booking_logger.warning(f"[AutoBook] No temporary reservation found for session {session.id}")
            return False

        try:
            try:
                self.reservations.update_temporary_to_permanent(reservation_id, interview_id, db, slot=slot)
            except HTTPException as e:
                # The tail of the interview is taken; keep at least the held part
                db.rollback()
                booking_logger.error(
                    f"[AutoBook] Hold {reservation_id} cannot cover {slot.duration_minutes} min: {e.detail}"
                )
                self.reservations.update_temporary_to_permanent(reservation_id, interview_id, db)
        except ReservationNotFound as e:
            booking_logger.warning(f"[AutoBook] Could not promote reservation: {e}")
            return False
        except Exception as e:
            db.rollback()
            booking_logger.error(f"[AutoBook] Reservation promotion failed for {reservation_id}: {e}")
            return False
        return True

    def _block_without_hold(self, interviewer_id: str, slot: TimeSlot, interview_id: str, db: Session) -> bool:
        try:
            self.reservations.create_permanent_block(interviewer_id, slot, interview_id, db)
            db.commit()
        except HTTPException as e:
            db.rollback()
            booking_logger.error(f"[AutoBook] Interview {interview_id} left unblocked: {e.detail}")
            return False
        return True

    def auto_book(self, req: AutoBookRequest, db: Session) -> AutoBookResponse:
        # Row lock held until the booking commits, so a webhook retry racing the
        # client call sees interview_matched set
        session = (
            db.query(PaymentSessionModel)
            .filter_by(id=req.payment_session_id, user_id=req.user_id, payment_status=PaymentStatus.COMPLETED.value)
            .with_for_update()
            .first()
        )
        if not session:
            raise HTTPException(status_code=404, detail="Payment session not found or not completed")

        if session.interview_matched:
            booking_outcomes.labels(outcome="already_booked").inc()
            existing = db.query(InterviewModel).filter_by(id=session.interview_id).first() if session.interview_id else None
            booking_logger.info(f"[AutoBook] Session {session.id} already booked")
            return AutoBookResponse(
                success=True,
                message="Interview already booked",
                interview_matched=True,
                interview=InterviewResponse.model_validate(existing) if existing else None,
            )

        candidate = session.candidate_data or {}
        slot_text = _pick(candidate, "time_slot", "timeSlot")
        if not slot_text:
            booking_outcomes.labels(outcome="no_slot").inc()
            return AutoBookResponse(success=False, message="No specific time slot selected")

        matched = session.matched_interviewer or {}
        interviewer_id = _pick(matched, "interviewer_id", "id")
        if not interviewer_id:
            raise HTTPException(status_code=404, detail="No matched interviewer stored for this session")

        duration = self.pricing.get_plan_duration(session.selected_plan)
        slot = parse_time_slot(slot_text, duration_minutes=duration)
        if slot is None:
            raise HTTPException(status_code=400, detail=f"Invalid time slot format: {slot_text}")

        profile = db.query(ProfileModel).filter_by(id=session.user_id).first()
        try:
            schedule_req = ScheduleInterviewRequest(
                interviewer_id=interviewer_id,
                candidate_id=session.user_id,
                candidate_name=_pick(candidate, "full_name", "fullName", "name") or (profile.full_name if profile else None),
                candidate_email=_pick(candidate, "email") or (profile.email if profile else None),
                interviewer_email=_pick(matched, "interviewer_email", "email"),
                interviewer_name=_pick(matched, "interviewer_name", "name"),
                target_role=_pick(candidate, "target_role", "targetRole") or "Not specified",
                experience=str(_pick(candidate, "experience", "experience_years", "experienceYears") or "Not specified"),
                time_slot=slot_text,
                resume_url=_pick(candidate, "resume_url", "resumeUrl"),
                selected_plan=session.selected_plan,
            )
        except ValidationError as e:
            raise HTTPException(status_code=400, detail=f"Incomplete candidate data: {e.errors()[0]['msg']}")

        # Committed together with the interview inside schedule_interview
        session.interview_matched = True
        try:
            interview = self.scheduler.schedule_interview(
                schedule_req,
                slot,
                db,
                payment_session_id=session.id,
                selected_add_ons=session.selected_add_ons or [],
                add_ons_total=session.add_ons_total or 0,
                block_slot=False,
            )
        except Exception:
            db.rollback()
            raise

        promoted = self._promote_reservation(session, interviewer_id, slot, interview.id, db)
        if not promoted:
            self._block_without_hold(interviewer_id, slot, interview.id, db)

        session.interview_id = interview.id
        db.commit()

        booking_outcomes.labels(outcome="booked").inc()
        booking_logger.info(
            f"[AutoBook] Session {session.id} -> interview {interview.id} (reservation promoted={promoted})"
        )
        return AutoBookResponse(
            success=True,
            message="Interview booked",
            interview_matched=True,
            interview=InterviewResponse.model_validate(interview),
            interviewer={"id": interviewer_id, "name": interview.interviewer_name, "email": interview.interviewer_email},
        )
