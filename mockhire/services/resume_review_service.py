# mockhire/services/resume_review_service.py

import logging
import time
from typing import Any, Dict, Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from mockhire.base.config import settings
from mockhire.base.logging_config import payment_logger
from mockhire.base.metrics import webhook_events
from mockhire.base.models import ResumeReviewCreate, ResumeReviewResponse, ReviewPaymentResponse, WebhookAck
from mockhire.models.tables import ResumeReviewModel, ResumeReviewPaymentModel, ReviewStatus, utc_now
from mockhire.services.notification_service import NotificationService
from mockhire.services.webhook_service import SUCCESS_EVENT, is_test_ping
from mockhire.utils.payment_gateway import PaymentGatewayClient, PaymentGatewayError, sanitize_customer_id

logger = logging.getLogger("resume_review_service")


def review_order_id(review_id: str) -> str:
    return f"RR_{review_id}_{int(time.time())}"


class ResumeReviewService:
    """Paid resume reviews: submission, payment, admin hand-off and report delivery."""

    def __init__(self, gateway: Optional[PaymentGatewayClient] = None, notifier: Optional[NotificationService] = None):
        self.gateway = gateway
        self.notifier = notifier or NotificationService()

    def _gateway(self) -> PaymentGatewayClient:
        if self.gateway is None:
            self.gateway = PaymentGatewayClient()
        return self.gateway

    def _get(self, review_id: str, db: Session) -> ResumeReviewModel:
        review = db.query(ResumeReviewModel).filter_by(id=review_id).first()
        if not review:
            raise HTTPException(status_code=404, detail="Resume review not found")
        return review

    def create_review(self, req: ResumeReviewCreate, db: Session, user_id: Optional[str] = None) -> ResumeReviewResponse:
        review = ResumeReviewModel(
            user_id=user_id,
            user_email=req.user_email,
            user_name=req.user_name,
            target_role=req.target_role,
            experience_years=req.experience_years,
            resume_url=req.resume_url,
            status=ReviewStatus.PENDING.value,
            payment_status="pending",
        )
        db.add(review)
        db.commit()
        db.refresh(review)
        logger.info(f"[Review] Created {review.id} for {review.user_email}")
        return ResumeReviewResponse.model_validate(review)

    def get_review(self, review_id: str, db: Session) -> ResumeReviewResponse:
        return ResumeReviewResponse.model_validate(self._get(review_id, db))

    def create_review_payment(self, review_id: str, db: Session) -> ReviewPaymentResponse:
        review = self._get(review_id, db)
        if review.payment_status == "paid":
            raise HTTPException(status_code=409, detail="Resume review is already paid")

        amount = float(settings.RESUME_REVIEW_PRICE)
        order_id = review_order_id(review.id)
        payload = {
            "order_id": order_id,
            "order_amount": amount,
            "order_currency": settings.CURRENCY,
            "customer_details": {
                "customer_id": sanitize_customer_id(review.user_email),
                "customer_name": review.user_name or "Customer",
                "customer_email": review.user_email,
                "customer_phone": settings.DEFAULT_CUSTOMER_PHONE,
            },
            "order_meta": {
                "return_url": settings.PAYMENT_RETURN_URL,
                "notify_url": settings.RESUME_REVIEW_NOTIFY_URL,
            },
            "order_note": "Resume review",
            "order_tags": {"resume_review_id": review.id, "service": "resume_review"},
        }

        try:
            data = self._gateway().create_order(payload)
        except PaymentGatewayError as e:
            payment_logger.error(f"[ReviewPayment] Order {order_id} failed: {e.message}")
            raise HTTPException(status_code=e.status_code, detail=e.message)

        db.add(ResumeReviewPaymentModel(resume_review_id=review.id, provider_order_id=order_id, amount=amount))
        db.commit()

        payment_logger.info(f"[ReviewPayment] Order {order_id} created for review {review.id}")
        return ReviewPaymentResponse(
            review_id=review.id,
            payment_session_id=data["payment_session_id"],
            order_id=order_id,
            order_status=data.get("order_status"),
            amount=amount,
        )

    def handle_review_webhook(self, payload: Dict[str, Any], db: Session) -> WebhookAck:
        """
        Always answers 200 once the payload is understood, including for unknown
        orders, so the provider does not keep retrying.
        """
        if is_test_ping(payload):
            return WebhookAck(status="received", message="Test webhook acknowledged")

        event_type = payload["type"]
        order_id = str(payload["data"]["order"].get("order_id") or "")
        payment_id = (payload["data"].get("payment") or {}).get("cf_payment_id")
        webhook_events.labels(type=f"RESUME_REVIEW_{event_type}").inc()

        payment = db.query(ResumeReviewPaymentModel).filter_by(provider_order_id=order_id).first()
        if not payment:
            payment_logger.warning(f"[ReviewWebhook] Unknown order {order_id}")
            return WebhookAck(status="error", message="Payment record not found", order_id=order_id)

        if payment.status == "paid":
            return WebhookAck(status="received", message="Payment already processed", order_id=order_id)

        review = db.query(ResumeReviewModel).filter_by(id=payment.resume_review_id).first()
        payment.raw_payload = payload

        if event_type != SUCCESS_EVENT:
            payment.status = "failed"
            if review:
                review.payment_status = "failed"
            db.commit()
            payment_logger.info(f"[ReviewWebhook] Order {order_id} marked failed ({event_type})")
            return WebhookAck(status="failed", message="Payment failure recorded", order_id=order_id)

        payment.status = "paid"
        payment.provider_payment_id = str(payment_id) if payment_id is not None else None
        notify = False
        if review:
            review.payment_status = "paid"
            review.payment_reference = payment.provider_payment_id
            review.payment_amount = payment.amount
            review.payment_verified_at = utc_now()
            if review.status == ReviewStatus.PENDING.value:
                review.status = ReviewStatus.PROCESSING.value
                notify = True
        db.commit()

        if notify:
            self.notifier.send_resume_review_admin_notification(review)
        payment_logger.info(f"[ReviewWebhook] Order {order_id} paid")
        return WebhookAck(status="success", message="Payment processed successfully", order_id=order_id)

    def complete_review(self, review_id: str, report_url: str, db: Session) -> ResumeReviewResponse:
        review = self._get(review_id, db)
        if review.payment_status != "paid":
            raise HTTPException(status_code=400, detail="Resume review has not been paid")

        review.status = ReviewStatus.COMPLETED.value
        review.report_url = report_url
        review.report_generated_at = utc_now()
        db.commit()

        if review.email_sent_at is None and self.notifier.send_resume_review_report(review):
            review.email_sent_at = utc_now()
            db.commit()

        logger.info(f"[Review] {review_id} completed")
        return ResumeReviewResponse.model_validate(review)
