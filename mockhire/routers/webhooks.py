# mockhire/routers/webhooks.py

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException
from sqlalchemy.orm import Session

from mockhire.base.database import get_db
from mockhire.base.models import WebhookAck
from mockhire.services.webhook_service import PaymentWebhookService

router = APIRouter(tags=["Webhooks"])
webhooks = PaymentWebhookService()
logger = logging.getLogger("webhooks_router")


@router.post("/payment", summary="Payment provider notifications", response_model=WebhookAck)
def payment_webhook(payload: Any = Body(...), db: Session = Depends(get_db)):
    if not isinstance(payload, dict):
        raise HTTPException(status_code=400, detail="Webhook body must be a JSON object")

    logger.info(f"[Webhook] Received type={payload.get('type')}")
    return webhooks.handle(payload, db)
