# mockhire/routers/reservations.py

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from mockhire.base.database import get_db
from mockhire.base.models import (
    CleanupResponse,
    ManualBlockRequest,
    PromoteRequest,
    ReservationRequest,
    ReservationResponse,
    TimeBlockResponse,
)
from mockhire.base.security import get_current_user_id, verify_api_key
from mockhire.services.reservation_service import ReservationService

router = APIRouter(tags=["Reservations"])
reservations = ReservationService()
logger = logging.getLogger("reservations_router")


@router.post("", summary="Hold a slot while the candidate pays", response_model=ReservationResponse, status_code=201)
def create_reservation(
    req: ReservationRequest,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    return reservations.create_temporary_reservation(
        req.interviewer_id, req.time_slot, user_id, db, duration_minutes=req.duration_minutes
    )


@router.post("/cleanup", summary="Delete expired holds", response_model=CleanupResponse,
             dependencies=[Depends(verify_api_key)])
def cleanup_expired(db: Session = Depends(get_db)):
    return CleanupResponse(removed=reservations.cleanup_expired_reservations(db))


@router.post("/manual", summary="Block interviewer time by hand", response_model=TimeBlockResponse, status_code=201,
             dependencies=[Depends(verify_api_key)])
def create_manual_block(req: ManualBlockRequest, db: Session = Depends(get_db)):
    return reservations.create_manual_block(req, db)


@router.delete("/manual/{block_id}", summary="Remove a manual block", dependencies=[Depends(verify_api_key)])
def remove_manual_block(block_id: str, db: Session = Depends(get_db)):
    return reservations.remove_manual_block(block_id, db)


@router.get("/user/{user_id}", summary="Live holds of a user", response_model=List[TimeBlockResponse])
def list_user_reservations(
    user_id: str,
    db: Session = Depends(get_db),
    current_user_id: str = Depends(get_current_user_id),
):
    if user_id != current_user_id:
        raise HTTPException(status_code=403, detail="Cannot view another user's reservations")
    return reservations.get_user_temporary_reservations(user_id, db)


@router.get("/{reservation_id}", response_model=TimeBlockResponse)
def get_reservation(reservation_id: str, db: Session = Depends(get_db)):
    return reservations.get_reservation(reservation_id, db)


@router.post("/{reservation_id}/promote", summary="Make a hold permanent for an interview",
             response_model=TimeBlockResponse, dependencies=[Depends(verify_api_key)])
def promote_reservation(reservation_id: str, req: PromoteRequest, db: Session = Depends(get_db)):
    # ReservationNotFound is answered with 409 by the registered exception handler
    reservations.update_temporary_to_permanent(reservation_id, req.interview_id, db)
    return reservations.get_reservation(reservation_id, db)


@router.delete("/{reservation_id}", summary="Release a hold")
def release_reservation(
    reservation_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    # Another user's hold is left alone and reported as not released
    released = reservations.release_temporary_reservation(reservation_id, db, user_id=user_id)
    return {"reservation_id": reservation_id, "released": released}
