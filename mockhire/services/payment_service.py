# mockhire/services/payment_service.py

import logging
from typing import Any, Dict, Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from mockhire.base.config import settings
from mockhire.base.logging_config import payment_logger
from mockhire.base.models import (
    CheckoutRequest,
    CheckoutResponse,
    PaymentSessionCreate,
    PaymentSessionResponse,
)
from mockhire.models.tables import PaymentSessionModel, PaymentStatus
from mockhire.services.add_on_service import AddOnService
from mockhire.utils.payment_gateway import PaymentGatewayClient, PaymentGatewayError, sanitize_customer_id

logger = logging.getLogger("payment_service")

PLAN_TAG_KEYS = ("id", "name", "price", "duration")
CANDIDATE_TAG_KEYS = ("target_role", "experience", "time_slot", "interviewer_id")


def _tag(value: Any) -> str:
    return "" if value is None else str(value)


def build_order_tags(req: CheckoutRequest, user_id: str) -> Dict[str, str]:
    """Flatten plan and candidate metadata into the provider's string-only tags."""
    tags: Dict[str, str] = {"user_id": user_id}
    if req.payment_session_id:
        tags["payment_session_id"] = req.payment_session_id
    if req.selected_plan:
        tags["selected_plan"] = req.selected_plan

    plan = req.plan_details or {}
    for key in PLAN_TAG_KEYS:
        if plan.get(key) is not None:
            tags[f"plan_{key}"] = _tag(plan.get(key))

    metadata = req.metadata or {}
    for key in CANDIDATE_TAG_KEYS:
        if metadata.get(key) is not None:
            tags[key] = _tag(metadata.get(key))
    for key, value in metadata.items():
        if key not in tags and isinstance(value, (str, int, float, bool)):
            tags[key] = _tag(value)
    return tags


class PaymentService:
    """Local payment sessions and hosted-checkout orders."""

    def __init__(self, gateway: Optional[PaymentGatewayClient] = None, add_ons: Optional[AddOnService] = None):
        self.gateway = gateway
        self.add_ons = add_ons or AddOnService()

    def _gateway(self) -> PaymentGatewayClient:
        if self.gateway is None:
            self.gateway = PaymentGatewayClient()
        return self.gateway

    def create_payment_session(self, user_id: str, req: PaymentSessionCreate, db: Session) -> PaymentSessionResponse:
        plan_type = req.selected_plan or ""
        validation = self.add_ons.validate_add_ons(plan_type, req.selected_add_ons, db)
        if not validation.is_valid:
            raise HTTPException(status_code=400, detail=validation.error_message)

        session = PaymentSessionModel(
            user_id=user_id,
            candidate_data=req.candidate_data,
            amount=req.amount,
            currency=req.currency,
            payment_status=PaymentStatus.PENDING.value,
            matched_interviewer=req.matched_interviewer,
            reservation_id=req.reservation_id,
            selected_plan=req.selected_plan,
            coupon_code=(req.coupon_code or "").strip().upper() or None,
            selected_add_ons=[v.model_dump() for v in validation.validated_add_ons],
            add_ons_total=validation.total_price,
        )
        db.add(session)
        db.commit()
        db.refresh(session)

        payment_logger.info(f"[Session] Created {session.id} for user {user_id} amount={session.amount}")
        return PaymentSessionResponse.model_validate(session)

    def get_payment_session(self, session_id: str, user_id: str, db: Session) -> PaymentSessionResponse:
        session = db.query(PaymentSessionModel).filter_by(id=session_id, user_id=user_id).first()
        if not session:
            raise HTTPException(status_code=404, detail="Payment session not found")
        return PaymentSessionResponse.model_validate(session)

    def create_checkout(self, user_id: str, req: CheckoutRequest, db: Session) -> CheckoutResponse:
        """
        Create a provider order for the candidate. Each call creates a new order;
        retries are not deduplicated.
        """
        if not req.amount or req.amount <= 0:
            raise HTTPException(status_code=400, detail="Missing or invalid amount")
        if not req.customer_email:
            raise HTTPException(status_code=400, detail="Missing customer_email")
        if not req.order_id:
            raise HTTPException(status_code=400, detail="Missing order_id")

        session = None
        if req.payment_session_id:
            session = db.query(PaymentSessionModel).filter_by(id=req.payment_session_id, user_id=user_id).first()
            if not session:
                raise HTTPException(status_code=404, detail="Payment session not found")
            if session.payment_status not in (PaymentStatus.PENDING.value, PaymentStatus.PROCESSING.value):
                raise HTTPException(status_code=409, detail=f"Payment session is already {session.payment_status}")

        payload = {
            "order_id": req.order_id,
            "order_amount": float(req.amount),
            "order_currency": req.currency or settings.CURRENCY,
            "customer_details": {
                "customer_id": sanitize_customer_id(req.customer_email),
                "customer_name": req.customer_name or "Customer",
                "customer_email": req.customer_email,
                "customer_phone": req.customer_phone or settings.DEFAULT_CUSTOMER_PHONE,
            },
            "order_meta": {
                "return_url": req.return_url or settings.PAYMENT_RETURN_URL,
                "notify_url": req.notify_url or settings.PAYMENT_NOTIFY_URL,
            },
            "order_note": f"Mock interview - {req.selected_plan or 'interview'}",
            "order_tags": build_order_tags(req, user_id),
        }

        try:
            data = self._gateway().create_order(payload)
        except PaymentGatewayError as e:
            payment_logger.error(f"[Checkout] Order {req.order_id} failed: {e.message}")
            raise HTTPException(status_code=e.status_code, detail=e.message)

        if session is not None:
            session.provider_order_id = data.get("order_id") or req.order_id
            session.payment_status = PaymentStatus.PROCESSING.value
            db.commit()

        payment_logger.info(f"[Checkout] Order {req.order_id} created for user {user_id}")
        return CheckoutResponse(
            payment_session_id=data["payment_session_id"],
            order_id=data.get("order_id") or req.order_id,
            order_status=data.get("order_status"),
        )
