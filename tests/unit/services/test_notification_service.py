"""Tests for transactional email dispatch."""

from datetime import datetime
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest

from mockhire.services.notification_service import NotificationService


@pytest.fixture
def interview():
    return SimpleNamespace(
        id="iv-1",
        candidate_name="Ravi Kumar",
        candidate_email="ravi@example.com",
        interviewer_name="Asha Rao",
        interviewer_email="asha@example.com",
        target_role="Backend Engineer",
        experience="5",
        resume_url=None,
        scheduled_time=datetime(2025, 9, 2, 10, 0),
        interview_duration=60,
        meeting_link="https://meet.google.com/abc",
    )


@pytest.fixture
def smtp_enabled():
    with patch("mockhire.services.notification_service.settings") as settings:
        settings.SMTP_ENABLED = True
        settings.DEFAULT_INTERVIEW_MINUTES = 60
        settings.ADMIN_EMAIL = "admin@example.com"
        yield settings


def test_disabled_smtp_only_logs(interview):
    sender = MagicMock()
    service = NotificationService(sender=sender)

    assert service.send_interview_confirmation(interview) is False
    sender.assert_not_called()


def test_confirmation_goes_to_both_parties(smtp_enabled, interview):
    sender = MagicMock()
    service = NotificationService(sender=sender)

    assert service.send_interview_confirmation(interview) is True

    recipients = [call.args[0] for call in sender.call_args_list]
    assert recipients == [["ravi@example.com"], ["asha@example.com"]]
    assert "Tuesday, 02 September 2025 at 10:00 IST" in sender.call_args_list[0].args[2]


def test_send_failure_returns_false(smtp_enabled, interview):
    sender = MagicMock(side_effect=ConnectionRefusedError("smtp down"))
    service = NotificationService(sender=sender)

    assert service.send_interview_reminder(interview) is False


def test_missing_recipient_is_skipped(smtp_enabled):
    sender = MagicMock()
    service = NotificationService(sender=sender)

    assert service.send_interviewer_welcome("", "Asha") is False
    sender.assert_not_called()


def test_admin_notification_for_resume_review(smtp_enabled):
    sender = MagicMock()
    review = SimpleNamespace(
        id="rr-1", user_name="Ravi", user_email="ravi@example.com", target_role=None,
        experience_years=3, resume_url="https://files.example.com/cv.pdf",
    )

    assert NotificationService(sender=sender).send_resume_review_admin_notification(review) is True
    assert sender.call_args.args[0] == ["admin@example.com"]
    assert "cv.pdf" in sender.call_args.args[2]


def test_client_text_is_escaped_in_email_html(smtp_enabled, interview):
    interview.candidate_name = "<script>alert(1)</script>"
    interview.target_role = "R&D <b>lead</b>"
    sender = MagicMock()

    NotificationService(sender=sender).send_interview_confirmation(interview)

    candidate_html = sender.call_args_list[0].args[2]
    interviewer_html = sender.call_args_list[1].args[2]
    assert "<script>" not in candidate_html + interviewer_html
    assert "&lt;script&gt;alert(1)&lt;/script&gt;" in candidate_html
    assert "R&amp;D &lt;b&gt;lead&lt;/b&gt;" in interviewer_html


def test_review_report_link_is_escaped(smtp_enabled):
    review = SimpleNamespace(
        user_name='Meera" onmouseover="x', user_email="meera@example.com", report_url="https://cdn/r.pdf?a=1&b=2"
    )
    sender = MagicMock()

    NotificationService(sender=sender).send_resume_review_report(review)

    html = sender.call_args.args[2]
    assert 'Meera&quot; onmouseover=&quot;x' in html
    assert 'href="https://cdn/r.pdf?a=1&amp;b=2"' in html
