# mockhire/routers/bookings.py

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from mockhire.base.database import get_db
from mockhire.base.models import (
    AutoBookRequest,
    AutoBookResponse,
    InterviewResponse,
    RescheduleRequest,
    ScheduleInterviewRequest,
)
from mockhire.base.security import get_current_user_id, verify_api_key
from mockhire.services.booking_service import BookingService

router = APIRouter(tags=["Bookings"])
booking = BookingService()
logger = logging.getLogger("bookings_router")


@router.post("/auto-book", summary="Book the matched interviewer after payment", response_model=AutoBookResponse)
def auto_book(
    req: AutoBookRequest,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    if req.user_id != user_id:
        raise HTTPException(status_code=403, detail="Cannot book for another user")
    return booking.auto_book(req, db)


@router.post("/interviews", summary="Schedule an interview directly", response_model=InterviewResponse,
             status_code=201, dependencies=[Depends(verify_api_key)])
def schedule_interview(req: ScheduleInterviewRequest, db: Session = Depends(get_db)):
    return booking.scheduler.schedule_from_request(req, db)


@router.get("/interviews", summary="List interviews", response_model=List[InterviewResponse],
            dependencies=[Depends(verify_api_key)])
def list_interviews(
    candidate_email: Optional[str] = None,
    interviewer_id: Optional[str] = None,
    db: Session = Depends(get_db),
):
    return booking.scheduler.list_interviews(db, candidate_email=candidate_email, interviewer_id=interviewer_id)


@router.post("/interviews/{interview_id}/reschedule", response_model=InterviewResponse,
             dependencies=[Depends(verify_api_key)])
def reschedule_interview(interview_id: str, req: RescheduleRequest, db: Session = Depends(get_db)):
    return booking.scheduler.reschedule_interview(interview_id, req.time_slot, db)


@router.post("/interviews/{interview_id}/cancel", response_model=InterviewResponse,
             dependencies=[Depends(verify_api_key)])
def cancel_interview(interview_id: str, db: Session = Depends(get_db)):
    return booking.scheduler.cancel_interview(interview_id, db)


@router.post("/interviews/{interview_id}/complete", response_model=InterviewResponse,
             dependencies=[Depends(verify_api_key)])
def complete_interview(interview_id: str, db: Session = Depends(get_db)):
    return booking.scheduler.complete_interview(interview_id, db)


@router.post("/interviews/{interview_id}/reminder", summary="Email a reminder to both parties",
             dependencies=[Depends(verify_api_key)])
def send_reminder(interview_id: str, db: Session = Depends(get_db)):
    return booking.scheduler.send_reminder(interview_id, db)
