# mockhire/services/webhook_service.py

import logging
from typing import Any, Dict, Optional

from fastapi import HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from mockhire.base.config import settings
from mockhire.base.logging_config import payment_logger
from mockhire.base.metrics import webhook_events
from mockhire.base.models import AutoBookRequest, WebhookAck
from mockhire.models.tables import PaymentSessionModel, PaymentStatus
from mockhire.services.booking_service import BookingService
from mockhire.services.reservation_service import ReservationService

logger = logging.getLogger("webhook_service")

SUCCESS_EVENT = "PAYMENT_SUCCESS_WEBHOOK"
FAILED_EVENT = "PAYMENT_FAILED_WEBHOOK"

TERMINAL_STATES = (PaymentStatus.COMPLETED.value, PaymentStatus.FAILED.value)

MANUAL_STATUS_MAP = {
    "SUCCESS": PaymentStatus.COMPLETED.value,
    "COMPLETED": PaymentStatus.COMPLETED.value,
    "FAILED": PaymentStatus.FAILED.value,
}


def is_test_ping(payload: Dict[str, Any]) -> bool:
    data = payload.get("data")
    return (
        not payload.get("type")
        or len(payload) < 3
        or not isinstance(data, dict)
        or not data.get("order")
    )


class PaymentWebhookService:
    """
    Applies provider payment notifications to local payment sessions.

    Sessions move pending -> processing -> completed | failed. A session in a
    terminal state is never changed again, so provider retries are harmless.
    """

    def __init__(self, booking: Optional[BookingService] = None, reservations: Optional[ReservationService] = None):
        self.reservations = reservations or ReservationService()
        self.booking = booking or BookingService(reservations=self.reservations)

    def handle(self, payload: Dict[str, Any], db: Session) -> WebhookAck:
        if "order_id" in payload and "payment_status" in payload and "type" not in payload:
            status = MANUAL_STATUS_MAP.get(str(payload["payment_status"]).upper())
            if status is None:
                raise HTTPException(status_code=400, detail=f"Unsupported payment_status: {payload['payment_status']}")
            webhook_events.labels(type="MANUAL").inc()
            payment_logger.info(f"[Webhook] Manual update for order {payload['order_id']} -> {status}")
            return self._apply(str(payload["order_id"]), status, payload.get("payment_id"), db)

        if is_test_ping(payload):
            webhook_events.labels(type="TEST").inc()
            payment_logger.info("[Webhook] Test webhook acknowledged")
            return WebhookAck(status="received", message="Test webhook acknowledged")

        event_type = payload["type"]
        data = payload["data"]
        order_id = str(data["order"].get("order_id") or "")
        payment_id = (data.get("payment") or {}).get("cf_payment_id")
        webhook_events.labels(type=event_type).inc()

        if not order_id:
            raise HTTPException(status_code=400, detail="Missing order_id in webhook payload")

        if event_type == SUCCESS_EVENT:
            return self._apply(order_id, PaymentStatus.COMPLETED.value, payment_id, db)
        if event_type == FAILED_EVENT:
            return self._apply(order_id, PaymentStatus.FAILED.value, payment_id, db)

        payment_logger.info(f"[Webhook] Ignoring event {event_type} for order {order_id}")
        return WebhookAck(status="received", message=f"Event {event_type} ignored", order_id=order_id)

    def _apply(self, order_id: str, status: str, payment_id: Optional[Any], db: Session) -> WebhookAck:
        try:
            session = db.query(PaymentSessionModel).filter_by(provider_order_id=order_id).first()
            if not session:
                payment_logger.warning(f"[Webhook] No payment session for order {order_id}")
                raise HTTPException(status_code=404, detail=f"Payment session not found for order {order_id}")

            if session.payment_status in TERMINAL_STATES:
                payment_logger.info(
                    f"[Webhook] Session {session.id} already {session.payment_status}; {status} ignored"
                )
                if session.payment_status == PaymentStatus.COMPLETED.value and status == PaymentStatus.COMPLETED.value:
                    # Retried success: booking is idempotent, make sure it happened
                    self._auto_book(session, db)
                return WebhookAck(
                    status="received", message=f"Payment already {session.payment_status}", order_id=order_id
                )

            session.payment_status = status
            if payment_id is not None:
                session.provider_payment_id = str(payment_id)
            db.commit()
        except HTTPException:
            raise
        except SQLAlchemyError as e:
            db.rollback()
            payment_logger.error(f"[Webhook] Database error for order {order_id}: {e}")
            raise HTTPException(status_code=500, detail=f"Failed to update payment session: {e}")

        if status == PaymentStatus.COMPLETED.value:
            payment_logger.info(f"[Webhook] Session {session.id} completed")
            self._auto_book(session, db)
            return WebhookAck(status="success", message="Payment processed successfully", order_id=order_id)

        if session.reservation_id:
            self.reservations.release_temporary_reservation(session.reservation_id, db)
        payment_logger.info(f"[Webhook] Session {session.id} failed")
        return WebhookAck(status="failed", message="Payment failure recorded", order_id=order_id)

    def _auto_book(self, session: PaymentSessionModel, db: Session) -> None:
        if not settings.ENABLE_AUTO_BOOKING:
            return
        try:
            result = self.booking.auto_book(
                AutoBookRequest(payment_session_id=session.id, user_id=session.user_id), db
            )
            payment_logger.info(f"[Webhook] Auto-booking for {session.id}: {result.message}")
        except Exception as e:
            db.rollback()
            payment_logger.error(f"[Webhook] Auto-booking failed for {session.id}: {e}")
