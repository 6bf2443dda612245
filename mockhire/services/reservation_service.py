# mockhire/services/reservation_service.py

import logging
from datetime import datetime, timedelta
from typing import Callable, List, Optional

from fastapi import HTTPException
from sqlalchemy import and_, delete, or_, update
from sqlalchemy.orm import Session

from mockhire.base.config import settings
from mockhire.base.metrics import reservation_events
from mockhire.base.models import ManualBlockRequest, ReservationResponse, TimeBlockResponse
from mockhire.models.tables import (
    BlockReason,
    InterviewerModel,
    InterviewerTimeBlockModel,
    new_id,
    utc_now,
)
from mockhire.utils.time_slots import TimeSlot, format_time_slot, parse_time_slot

logger = logging.getLogger("reservation_service")


def live_blocks_filter(now: datetime):
    # Permanent blocks never expire; temporary ones only count until expires_at
    return or_(
        InterviewerTimeBlockModel.is_temporary.is_(False),
        InterviewerTimeBlockModel.expires_at.is_(None),
        InterviewerTimeBlockModel.expires_at > now,
    )


class ReservationNotFound(Exception):
    """The reservation is gone: expired and swept, released, or already promoted."""

    def __init__(self, reservation_id: str):
        super().__init__(f"Temporary reservation {reservation_id} not found or no longer temporary")
        self.reservation_id = reservation_id


class ReservationService:
    """
    Short-lived holds on an interviewer's time while the candidate pays.

    A hold is an ``interviewer_time_blocks`` row with ``is_temporary=True`` and an
    ``expires_at`` deadline. Expired holds are ignored by every availability check
    and swept lazily before new holds are written.
    """

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        self.clock = clock or utc_now

    def _overlapping_live_block(
        self, interviewer_id: str, slot: TimeSlot, db: Session, exclude_id: Optional[str] = None
    ):
        query = db.query(InterviewerTimeBlockModel).filter(
            InterviewerTimeBlockModel.interviewer_id == interviewer_id,
            InterviewerTimeBlockModel.blocked_date == slot.date,
            InterviewerTimeBlockModel.start_time < slot.end_time,
            InterviewerTimeBlockModel.end_time > slot.start_time,
            live_blocks_filter(self.clock()),
        )
        if exclude_id:
            query = query.filter(InterviewerTimeBlockModel.id != exclude_id)
        return query.first()

    def _sweep_expired(self, db: Session, interviewer_id: Optional[str] = None, on_date=None) -> int:
        conditions = [
            InterviewerTimeBlockModel.is_temporary.is_(True),
            InterviewerTimeBlockModel.expires_at < self.clock(),
        ]
        if interviewer_id:
            conditions.append(InterviewerTimeBlockModel.interviewer_id == interviewer_id)
        if on_date:
            conditions.append(InterviewerTimeBlockModel.blocked_date == on_date)
        result = db.execute(delete(InterviewerTimeBlockModel).where(and_(*conditions)))
        return result.rowcount or 0

    def is_time_slot_available(self, interviewer_id: str, slot: TimeSlot, db: Session) -> bool:
        return self._overlapping_live_block(interviewer_id, slot, db) is None

    def create_temporary_reservation(
        self,
        interviewer_id: str,
        time_slot: str,
        user_id: str,
        db: Session,
        duration_minutes: int = 30,
    ) -> ReservationResponse:
        slot = parse_time_slot(time_slot, duration_minutes=duration_minutes)
        if slot is None:
            raise HTTPException(status_code=400, detail=f"Invalid time slot format: {time_slot}")

        expires_at = self.clock() + timedelta(minutes=settings.RESERVATION_TTL_MINUTES)
        try:
            # Row lock on the interviewer serialises concurrent holds (no-op on SQLite)
            interviewer = db.query(InterviewerModel).filter_by(id=interviewer_id).with_for_update().first()
            if not interviewer:
                raise HTTPException(status_code=404, detail="Interviewer not found")

            self._sweep_expired(db, interviewer_id=interviewer_id, on_date=slot.date)

            conflict = self._overlapping_live_block(interviewer_id, slot, db)
            if conflict is not None:
                db.rollback()
                reservation_events.labels(event="conflict").inc()
                logger.info(f"[Reserve] Conflict for {interviewer_id} at {format_time_slot(slot)} (block {conflict.id})")
                raise HTTPException(status_code=409, detail="Time slot is no longer available")

            block = InterviewerTimeBlockModel(
                id=new_id(),
                interviewer_id=interviewer_id,
                blocked_date=slot.date,
                start_time=slot.start_time,
                end_time=slot.end_time,
                is_temporary=True,
                expires_at=expires_at,
                block_reason=BlockReason.TEMPORARY_RESERVATION.value,
                reserved_by_user_id=user_id,
            )
            db.add(block)
            db.commit()
        except HTTPException:
            raise
        except Exception:
            db.rollback()
            raise

        reservation_events.labels(event="created").inc()
        logger.info(f"[Reserve] {block.id} for user {user_id} on {interviewer_id} until {expires_at}")
        return ReservationResponse(
            reservation_id=block.id,
            interviewer_id=interviewer_id,
            time_slot=format_time_slot(slot),
            expires_at=expires_at,
        )

    def update_temporary_to_permanent(
        self, reservation_id: str, interview_id: str, db: Session, slot: Optional[TimeSlot] = None
    ) -> None:
        """
        Turn a live hold into the interview's permanent block, exactly once.

        When ``slot`` is given the block is resized to it, so a 30 minute hold
        covers the whole interview once promoted. Raises 409 if the resized
        window overlaps another live block.
        """
        values = dict(
            is_temporary=False,
            expires_at=None,
            block_reason=BlockReason.INTERVIEW_SCHEDULED.value,
            interview_id=interview_id,
            updated_at=utc_now(),
        )
        if slot is not None:
            hold = (
                db.query(InterviewerTimeBlockModel)
                .filter_by(id=reservation_id, is_temporary=True)
                .with_for_update()
                .first()
            )
            if hold is not None:
                conflict = self._overlapping_live_block(hold.interviewer_id, slot, db, exclude_id=reservation_id)
                if conflict is not None:
                    reservation_events.labels(event="conflict").inc()
                    logger.warning(
                        f"[Promote] {reservation_id} cannot grow to {format_time_slot(slot)}: overlaps block {conflict.id}"
                    )
                    raise HTTPException(status_code=409, detail="Interviewer is not available at the requested time")
            values.update(blocked_date=slot.date, start_time=slot.start_time, end_time=slot.end_time)

        result = db.execute(
            update(InterviewerTimeBlockModel)
            .where(
                InterviewerTimeBlockModel.id == reservation_id,
                InterviewerTimeBlockModel.is_temporary.is_(True),
            )
            .values(**values)
        )
        db.commit()

        if result.rowcount == 0:
            reservation_events.labels(event="promote_failed").inc()
            logger.warning(f"[Promote] Reservation {reservation_id} missing or already permanent")
            raise ReservationNotFound(reservation_id)

        reservation_events.labels(event="promoted").inc()
        logger.info(f"[Promote] Reservation {reservation_id} -> interview {interview_id}")

    def find_temporary_block(self, interviewer_id: str, slot: TimeSlot, db: Session):
        return (
            db.query(InterviewerTimeBlockModel)
            .filter_by(
                interviewer_id=interviewer_id,
                blocked_date=slot.date,
                start_time=slot.start_time,
                is_temporary=True,
                block_reason=BlockReason.TEMPORARY_RESERVATION.value,
            )
            .first()
        )

    def release_temporary_reservation(self, reservation_id: str, db: Session, user_id: Optional[str] = None) -> bool:
        """Delete a hold. With ``user_id`` only that user's own hold is touched."""
        conditions = [
            InterviewerTimeBlockModel.id == reservation_id,
            InterviewerTimeBlockModel.is_temporary.is_(True),
        ]
        if user_id is not None:
            conditions.append(InterviewerTimeBlockModel.reserved_by_user_id == user_id)
        result = db.execute(delete(InterviewerTimeBlockModel).where(and_(*conditions)))
        db.commit()
        released = bool(result.rowcount)
        if released:
            reservation_events.labels(event="released").inc()
            logger.info(f"[Release] Reservation {reservation_id} released")
        return released

    def cleanup_expired_reservations(self, db: Session) -> int:
        removed = self._sweep_expired(db)
        db.commit()
        if removed:
            reservation_events.labels(event="expired").inc(removed)
        logger.info(f"[Cleanup] Removed {removed} expired reservations")
        return removed

    def get_reservation(self, reservation_id: str, db: Session) -> TimeBlockResponse:
        block = db.query(InterviewerTimeBlockModel).filter_by(id=reservation_id).first()
        if not block:
            raise HTTPException(status_code=404, detail="Reservation not found")
        return TimeBlockResponse.model_validate(block)

    def get_user_temporary_reservations(self, user_id: str, db: Session) -> List[TimeBlockResponse]:
        blocks = (
            db.query(InterviewerTimeBlockModel)
            .filter(
                InterviewerTimeBlockModel.reserved_by_user_id == user_id,
                InterviewerTimeBlockModel.is_temporary.is_(True),
                InterviewerTimeBlockModel.expires_at > self.clock(),
            )
            .order_by(InterviewerTimeBlockModel.created_at.desc())
            .all()
        )
        return [TimeBlockResponse.model_validate(b) for b in blocks]

    # === Permanent blocks ===

    def create_permanent_block(
        self, interviewer_id: str, slot: TimeSlot, interview_id: str, db: Session
    ) -> InterviewerTimeBlockModel:
        """Block the slot for a booked interview; caller commits."""
        if self._overlapping_live_block(interviewer_id, slot, db) is not None:
            raise HTTPException(status_code=409, detail="Interviewer is not available at the requested time")
        block = InterviewerTimeBlockModel(
            interviewer_id=interviewer_id,
            blocked_date=slot.date,
            start_time=slot.start_time,
            end_time=slot.end_time,
            is_temporary=False,
            block_reason=BlockReason.INTERVIEW_SCHEDULED.value,
            interview_id=interview_id,
        )
        db.add(block)
        return block

    def release_interview_blocks(self, interview_id: str, db: Session) -> int:
        """Remove the permanent blocks of an interview; caller commits."""
        result = db.execute(
            delete(InterviewerTimeBlockModel).where(
                InterviewerTimeBlockModel.interview_id == interview_id,
                InterviewerTimeBlockModel.is_temporary.is_(False),
            )
        )
        return result.rowcount or 0

    def create_manual_block(self, req: ManualBlockRequest, db: Session) -> TimeBlockResponse:
        if req.end_time <= req.start_time:
            raise HTTPException(status_code=400, detail="end_time must be after start_time")
        if not db.query(InterviewerModel.id).filter_by(id=req.interviewer_id).first():
            raise HTTPException(status_code=404, detail="Interviewer not found")

        slot = TimeSlot(date=req.blocked_date, start_time=req.start_time, end_time=req.end_time)
        if self._overlapping_live_block(req.interviewer_id, slot, db) is not None:
            raise HTTPException(status_code=409, detail="Overlaps an existing block")

        block = InterviewerTimeBlockModel(
            interviewer_id=req.interviewer_id,
            blocked_date=req.blocked_date,
            start_time=req.start_time,
            end_time=req.end_time,
            is_temporary=False,
            block_reason=BlockReason.MANUAL.value,
        )
        db.add(block)
        db.commit()
        db.refresh(block)
        logger.info(f"[Block] Manual block {block.id} for {req.interviewer_id} on {req.blocked_date}")
        return TimeBlockResponse.model_validate(block)

    def remove_manual_block(self, block_id: str, db: Session) -> dict:
        block = db.query(InterviewerTimeBlockModel).filter_by(id=block_id).first()
        if not block or block.block_reason != BlockReason.MANUAL.value:
            raise HTTPException(status_code=404, detail="Manual block not found")
        db.delete(block)
        db.commit()
        logger.info(f"[Block] Manual block {block_id} removed")
        return {"status": "removed", "block_id": block_id}
