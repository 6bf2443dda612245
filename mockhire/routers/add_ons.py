# mockhire/routers/add_ons.py

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from mockhire.base.database import get_db
from mockhire.base.models import AddOnResponse, AddOnValidationRequest, AddOnValidationResult
from mockhire.base.security import get_current_user_id
from mockhire.services.add_on_service import AddOnService

router = APIRouter(tags=["Add-ons"])
add_ons = AddOnService()


@router.get("", summary="All active add-ons", response_model=List[AddOnResponse])
def list_add_ons(db: Session = Depends(get_db)):
    return add_ons.get_available_add_ons(db)


@router.get("/plan/{plan_type}", summary="Add-ons available for a plan", response_model=List[AddOnResponse])
def list_add_ons_for_plan(plan_type: str, db: Session = Depends(get_db)):
    return add_ons.get_add_ons_for_plan(plan_type, db)


@router.post("/validate", summary="Validate an add-on selection", response_model=AddOnValidationResult)
def validate_add_ons(req: AddOnValidationRequest, db: Session = Depends(get_db)):
    return add_ons.validate_add_ons(req.plan_type, req.selected_add_ons, db)


@router.post(
    "/payment-session/{session_id}",
    summary="Attach validated add-ons to a payment session",
    response_model=AddOnValidationResult,
)
def attach_add_ons(
    session_id: str,
    req: AddOnValidationRequest,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    return add_ons.attach_to_payment_session(session_id, req.plan_type, req.selected_add_ons, db, user_id=user_id)
