"""Tests for payment webhook handling and the auto-booking it triggers."""

from unittest.mock import MagicMock

import pytest
from fastapi import HTTPException

from mockhire.models.tables import InterviewerTimeBlockModel, InterviewModel
from mockhire.services.booking_service import BookingService
from mockhire.services.reservation_service import ReservationService
from mockhire.services.scheduling_service import InterviewSchedulingService
from mockhire.services.webhook_service import PaymentWebhookService, is_test_ping


@pytest.fixture
def reservations():
    return ReservationService()


@pytest.fixture
def webhooks(reservations):
    scheduler = InterviewSchedulingService(calendar_client=None, notifier=MagicMock(), reservations=reservations)
    booking = BookingService(scheduler=scheduler, reservations=reservations)
    return PaymentWebhookService(booking=booking, reservations=reservations)


def provider_event(event_type, order_id, payment_id=555001):
    return {
        "type": event_type,
        "event_time": "2025-09-01T10:00:00+05:30",
        "data": {
            "order": {"order_id": order_id, "order_amount": 999, "order_currency": "INR"},
            "payment": {"cf_payment_id": payment_id, "payment_status": "SUCCESS"},
        },
    }


@pytest.fixture
def booked_setup(db, interviewer_factory, payment_session_factory, upcoming_slot, reservations):
    interviewer = interviewer_factory()
    _, slot = upcoming_slot("Thursday", "15:00", "16:00")
    hold = reservations.create_temporary_reservation(interviewer.id, slot, "user-1", db)
    session = payment_session_factory(interviewer=interviewer, time_slot=slot, reservation_id=hold.reservation_id)
    return interviewer, session, hold


@pytest.mark.parametrize(
    "payload",
    [
        {},
        {"type": "PAYMENT_SUCCESS_WEBHOOK", "data": {"order": {"order_id": "x"}}},
        {"type": "PAYMENT_SUCCESS_WEBHOOK", "data": {}, "event_time": "now"},
        {"data": {"order": {"order_id": "x"}}, "event_time": "now", "extra": 1},
    ],
)
def test_test_pings_are_acknowledged(webhooks, db, payload):
    assert is_test_ping(payload)
    ack = webhooks.handle(payload, db)
    assert ack.status == "received"
    assert ack.message == "Test webhook acknowledged"


def test_success_completes_and_books(webhooks, db, booked_setup):
    interviewer, session, hold = booked_setup

    ack = webhooks.handle(provider_event("PAYMENT_SUCCESS_WEBHOOK", session.provider_order_id), db)

    assert ack.status == "success"
    db.refresh(session)
    assert session.payment_status == "completed"
    assert session.provider_payment_id == "555001"
    assert session.interview_matched is True

    interview = db.query(InterviewModel).one()
    assert session.interview_id == interview.id
    assert interview.interviewer_id == interviewer.id
    assert interview.payment_session_id == session.id

    block = db.query(InterviewerTimeBlockModel).filter_by(id=hold.reservation_id).one()
    db.refresh(block)
    assert block.is_temporary is False
    assert block.interview_id == interview.id


def test_repeated_success_books_once(webhooks, db, booked_setup):
    _, session, _ = booked_setup
    event = provider_event("PAYMENT_SUCCESS_WEBHOOK", session.provider_order_id)

    webhooks.handle(event, db)
    ack = webhooks.handle(event, db)

    assert ack.message == "Payment already completed"
    assert db.query(InterviewModel).count() == 1


def test_failure_releases_hold(webhooks, db, booked_setup):
    _, session, hold = booked_setup

    ack = webhooks.handle(provider_event("PAYMENT_FAILED_WEBHOOK", session.provider_order_id), db)

    assert ack.status == "failed"
    db.refresh(session)
    assert session.payment_status == "failed"
    assert db.query(InterviewerTimeBlockModel).filter_by(id=hold.reservation_id).first() is None
    assert db.query(InterviewModel).count() == 0


def test_terminal_state_is_immutable(webhooks, db, booked_setup):
    _, session, _ = booked_setup
    webhooks.handle(provider_event("PAYMENT_FAILED_WEBHOOK", session.provider_order_id), db)
    webhooks.handle(provider_event("PAYMENT_SUCCESS_WEBHOOK", session.provider_order_id), db)

    db.refresh(session)
    assert session.payment_status == "failed"
    assert db.query(InterviewModel).count() == 0


def test_late_failure_after_success_is_ignored(webhooks, db, booked_setup):
    _, session, _ = booked_setup
    webhooks.handle(provider_event("PAYMENT_SUCCESS_WEBHOOK", session.provider_order_id), db)
    webhooks.handle(provider_event("PAYMENT_FAILED_WEBHOOK", session.provider_order_id), db)

    db.refresh(session)
    assert session.payment_status == "completed"


def test_unknown_order(webhooks, db):
    with pytest.raises(HTTPException) as exc:
        webhooks.handle(provider_event("PAYMENT_SUCCESS_WEBHOOK", "order_missing"), db)
    assert exc.value.status_code == 404


def test_session_found_by_mapping_not_prefix(webhooks, db, payment_session_factory):
    session = payment_session_factory(provider_order_id="order_abc")
    with pytest.raises(HTTPException):
        webhooks.handle(provider_event("PAYMENT_SUCCESS_WEBHOOK", f"ORDER_{session.id}"), db)


def test_manual_update(webhooks, db, booked_setup):
    _, session, _ = booked_setup

    ack = webhooks.handle({"order_id": session.provider_order_id, "payment_status": "SUCCESS"}, db)

    assert ack.status == "success"
    db.refresh(session)
    assert session.payment_status == "completed"
    assert session.interview_matched is True


def test_manual_update_rejects_unknown_status(webhooks, db, payment_session_factory):
    session = payment_session_factory()
    with pytest.raises(HTTPException) as exc:
        webhooks.handle({"order_id": session.provider_order_id, "payment_status": "MAYBE"}, db)
    assert exc.value.status_code == 400


def test_booking_failure_does_not_fail_webhook(db, payment_session_factory):
    booking = MagicMock()
    booking.auto_book.side_effect = RuntimeError("calendar down")
    webhooks = PaymentWebhookService(booking=booking, reservations=ReservationService())
    session = payment_session_factory()

    ack = webhooks.handle(provider_event("PAYMENT_SUCCESS_WEBHOOK", session.provider_order_id), db)

    assert ack.status == "success"
    db.refresh(session)
    assert session.payment_status == "completed"


def test_other_events_are_acknowledged(webhooks, db, payment_session_factory):
    session = payment_session_factory()
    ack = webhooks.handle(provider_event("USER_DROPPED_WEBHOOK", session.provider_order_id), db)
    assert ack.status == "received"
    db.refresh(session)
    assert session.payment_status == "processing"
