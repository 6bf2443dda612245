# mockhire/routers/matching.py

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from mockhire.base.database import get_db
from mockhire.base.models import AvailableSlotsResponse, MatchRequest, MatchResult, PreviewedInterviewerResponse
from mockhire.base.security import get_current_user_id
from mockhire.services.interviewer_matcher_service import InterviewerMatcherService

router = APIRouter(tags=["Matching"])
matcher = InterviewerMatcherService()
logger = logging.getLogger("matching_router")


@router.post("/find", summary="Find the best interviewer for a candidate", response_model=MatchResult)
def find_interviewer(
    req: MatchRequest,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    try:
        logger.info(f"[Match] Request from {user_id}: exp={req.experience_years} slot={req.time_slot!r}")
        return matcher.find_best_interviewer(req, db)
    except HTTPException:
        raise
    except Exception:
        logger.exception("[Match] Matching failed.")
        raise HTTPException(status_code=500, detail="Interviewer matching failed. Please try again.")


@router.get(
    "/interviewers/{interviewer_id}/available-slots",
    summary="Free standard slots in the coming week",
    response_model=AvailableSlotsResponse,
)
def available_slots(interviewer_id: str, db: Session = Depends(get_db)):
    return matcher.get_available_slots(interviewer_id, db)


@router.get(
    "/interviewers/{interviewer_id}/preview",
    summary="Re-check the previewed interviewer and preferred slot before checkout",
    response_model=PreviewedInterviewerResponse,
)
def previewed_interviewer(
    interviewer_id: str,
    time_slot: Optional[str] = None,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    logger.info(f"[Preview] Request from {user_id} for {interviewer_id} slot={time_slot!r}")
    return matcher.check_previewed_interviewer(interviewer_id, time_slot, db)
