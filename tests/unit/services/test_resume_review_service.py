"""Tests for paid resume reviews."""

from unittest.mock import MagicMock

import pytest
from fastapi import HTTPException

from mockhire.base.models import ResumeReviewCreate
from mockhire.models.tables import ResumeReviewPaymentModel
from mockhire.services.resume_review_service import ResumeReviewService


@pytest.fixture
def gateway():
    gateway = MagicMock()
    gateway.create_order.return_value = {"payment_session_id": "session_rr", "order_status": "ACTIVE"}
    return gateway


@pytest.fixture
def notifier():
    notifier = MagicMock()
    notifier.send_resume_review_report.return_value = True
    return notifier


@pytest.fixture
def reviews(gateway, notifier):
    return ResumeReviewService(gateway=gateway, notifier=notifier)


@pytest.fixture
def review(reviews, db):
    return reviews.create_review(
        ResumeReviewCreate(user_email="ravi@example.com", user_name="Ravi", resume_url="https://cdn/cv.pdf"), db
    )


def event(event_type, order_id):
    return {
        "type": event_type,
        "event_time": "2025-09-01T10:00:00+05:30",
        "data": {"order": {"order_id": order_id}, "payment": {"cf_payment_id": 42}},
    }


def pay(reviews, db, review):
    order = reviews.create_review_payment(review.id, db)
    return order.order_id


def test_create_review(review):
    assert review.status == "pending"
    assert review.payment_status == "pending"


def test_payment_order_is_persisted(reviews, gateway, db, review):
    order = reviews.create_review_payment(review.id, db)

    assert order.order_id.startswith(f"RR_{review.id}_")
    assert order.amount == 199
    assert db.query(ResumeReviewPaymentModel).filter_by(provider_order_id=order.order_id).one().status == "created"
    assert gateway.create_order.call_args.args[0]["order_tags"]["resume_review_id"] == review.id


def test_success_webhook_marks_paid_and_notifies_admin(reviews, notifier, db, review):
    order_id = pay(reviews, db, review)

    ack = reviews.handle_review_webhook(event("PAYMENT_SUCCESS_WEBHOOK", order_id), db)

    assert ack.status == "success"
    current = reviews.get_review(review.id, db)
    assert current.payment_status == "paid"
    assert current.status == "processing"
    notifier.send_resume_review_admin_notification.assert_called_once()


def test_repeated_success_is_a_no_op(reviews, notifier, db, review):
    order_id = pay(reviews, db, review)
    reviews.handle_review_webhook(event("PAYMENT_SUCCESS_WEBHOOK", order_id), db)

    ack = reviews.handle_review_webhook(event("PAYMENT_SUCCESS_WEBHOOK", order_id), db)

    assert ack.message == "Payment already processed"
    notifier.send_resume_review_admin_notification.assert_called_once()


def test_failed_webhook(reviews, db, review):
    order_id = pay(reviews, db, review)
    ack = reviews.handle_review_webhook(event("PAYMENT_FAILED_WEBHOOK", order_id), db)

    assert ack.status == "failed"
    assert reviews.get_review(review.id, db).payment_status == "failed"


def test_unknown_order_is_acknowledged(reviews, db):
    ack = reviews.handle_review_webhook(event("PAYMENT_SUCCESS_WEBHOOK", "RR_missing_1"), db)
    assert ack.status == "error"


def test_test_ping(reviews, db):
    assert reviews.handle_review_webhook({"type": "TEST"}, db).status == "received"


def test_complete_requires_payment(reviews, db, review):
    with pytest.raises(HTTPException) as exc:
        reviews.complete_review(review.id, "https://cdn/report.pdf", db)
    assert exc.value.status_code == 400


def test_complete_sends_report_once(reviews, notifier, db, review):
    order_id = pay(reviews, db, review)
    reviews.handle_review_webhook(event("PAYMENT_SUCCESS_WEBHOOK", order_id), db)

    done = reviews.complete_review(review.id, "https://cdn/report.pdf", db)
    reviews.complete_review(review.id, "https://cdn/report.pdf", db)

    assert done.status == "completed"
    assert done.report_url == "https://cdn/report.pdf"
    notifier.send_resume_review_report.assert_called_once()


def test_cannot_pay_twice(reviews, db, review):
    order_id = pay(reviews, db, review)
    reviews.handle_review_webhook(event("PAYMENT_SUCCESS_WEBHOOK", order_id), db)
    with pytest.raises(HTTPException) as exc:
        reviews.create_review_payment(review.id, db)
    assert exc.value.status_code == 409
