# mockhire/routers/resume_reviews.py

from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Header, HTTPException
from sqlalchemy.orm import Session

from mockhire.base.database import get_db
from mockhire.base.models import (
    ResumeReviewCreate,
    ResumeReviewResponse,
    ReviewCompleteRequest,
    ReviewPaymentResponse,
    WebhookAck,
)
from mockhire.base.security import get_current_user_id, verify_api_key
from mockhire.services.resume_review_service import ResumeReviewService

router = APIRouter(tags=["Resume Reviews"])
reviews = ResumeReviewService()


def optional_user_id(authorization: Optional[str] = Header(None)) -> Optional[str]:
    # Guests may order a review; signed-in users get it linked to their account
    return get_current_user_id(authorization) if authorization else None


@router.post("", summary="Submit a resume for review", response_model=ResumeReviewResponse, status_code=201)
def create_review(
    req: ResumeReviewCreate,
    db: Session = Depends(get_db),
    user_id: Optional[str] = Depends(optional_user_id),
):
    return reviews.create_review(req, db, user_id=user_id)


@router.post("/webhook", summary="Payment notifications for resume reviews", response_model=WebhookAck)
def review_webhook(payload: Any = Body(...), db: Session = Depends(get_db)):
    if not isinstance(payload, dict):
        raise HTTPException(status_code=400, detail="Webhook body must be a JSON object")
    return reviews.handle_review_webhook(payload, db)


@router.post("/{review_id}/payment", summary="Create the payment order for a review",
             response_model=ReviewPaymentResponse)
def create_review_payment(review_id: str, db: Session = Depends(get_db)):
    return reviews.create_review_payment(review_id, db)


@router.post("/{review_id}/complete", summary="Deliver the review report", response_model=ResumeReviewResponse,
             dependencies=[Depends(verify_api_key)])
def complete_review(review_id: str, req: ReviewCompleteRequest, db: Session = Depends(get_db)):
    return reviews.complete_review(review_id, req.report_url, db)


@router.get("/{review_id}", response_model=ResumeReviewResponse)
def get_review(review_id: str, db: Session = Depends(get_db)):
    return reviews.get_review(review_id, db)
