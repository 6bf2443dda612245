# mockhire/routers/payments.py

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from mockhire.base.database import get_db
from mockhire.base.models import CheckoutRequest, CheckoutResponse, PaymentSessionCreate, PaymentSessionResponse
from mockhire.base.security import get_current_user_id
from mockhire.services.payment_service import PaymentService

router = APIRouter(tags=["Payments"])
payments = PaymentService()


@router.post("/sessions", summary="Record a pending payment session", response_model=PaymentSessionResponse,
             status_code=201)
def create_session(
    req: PaymentSessionCreate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    return payments.create_payment_session(user_id, req, db)


@router.post("/checkout", summary="Create a hosted-checkout order", response_model=CheckoutResponse)
def create_checkout(
    req: CheckoutRequest,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    return payments.create_checkout(user_id, req, db)


@router.get("/sessions/{session_id}", summary="Poll a payment session", response_model=PaymentSessionResponse)
def get_session(
    session_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    return payments.get_payment_session(session_id, user_id, db)
