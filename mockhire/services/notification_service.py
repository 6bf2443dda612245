# mockhire/services/notification_service.py

import logging
from html import escape
from typing import Callable, List, Optional

from mockhire.base.config import settings
from mockhire.base.metrics import emails_sent
from mockhire.utils import email_utils

logger = logging.getLogger("notification_service")


def _text(value, fallback: str = "") -> str:
    """Client-supplied value, HTML-escaped for the email body."""
    if value is None or value == "":
        return fallback
    return escape(str(value))


def _wrap(title: str, body: str) -> str:
    return (
        "<div style=\"font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;\">"
        f"<h2 style=\"color: #2563eb;\">{title}</h2>{body}"
        "<p style=\"color: #6b7280; font-size: 12px;\">MockHire</p></div>"
    )


class NotificationService:
    """
    Transactional email. Every method returns True/False and never raises, so a
    failed email cannot undo a booking or a payment.
    """

    def __init__(self, sender: Optional[Callable[..., None]] = None):
        self.sender = sender or email_utils.send_email

    def _send(self, template: str, to_emails: List[str], subject: str, html: str, text: Optional[str] = None) -> bool:
        recipients = [e for e in to_emails if e]
        if not recipients:
            logger.warning(f"[Email:{template}] No recipients, skipped")
            emails_sent.labels(template=template, result="skipped").inc()
            return False

        if not settings.SMTP_ENABLED:
            logger.info(f"[Email:{template}] SMTP disabled, would send '{subject}' to {recipients}")
            emails_sent.labels(template=template, result="disabled").inc()
            return False

        try:
            self.sender(recipients, subject, html, text_body=text)
        except Exception as e:
            logger.error(f"[Email:{template}] Failed to send to {recipients}: {e}")
            emails_sent.labels(template=template, result="failed").inc()
            return False

        emails_sent.labels(template=template, result="sent").inc()
        return True

    def send_interview_confirmation(self, interview) -> bool:
        when = interview.scheduled_time.strftime("%A, %d %B %Y at %H:%M IST")
        link = interview.meeting_link or "The meeting link will be shared before the session."
        candidate_html = _wrap(
            "Your mock interview is confirmed",
            f"<p>Hi {_text(interview.candidate_name, 'there')},</p>"
            f"<p>Your interview for <b>{_text(interview.target_role, 'your target role')}</b> "
            f"with {_text(interview.interviewer_name, 'your interviewer')} is scheduled for <b>{when}</b>.</p>"
            f"<p>Duration: {interview.interview_duration or settings.DEFAULT_INTERVIEW_MINUTES} minutes</p>"
            f"<p>Meeting link: {_text(link)}</p>",
        )
        interviewer_html = _wrap(
            "New interview assigned",
            f"<p>Hi {_text(interview.interviewer_name, 'there')},</p>"
            f"<p>You have a mock interview with <b>{_text(interview.candidate_name) or _text(interview.candidate_email)}</b> "
            f"for <b>{_text(interview.target_role, 'Not specified')}</b> on <b>{when}</b>.</p>"
            f"<p>Experience: {_text(interview.experience, 'Not specified')}</p>"
            f"<p>Resume: {_text(interview.resume_url, 'Not provided')}</p>"
            f"<p>Meeting link: {_text(link)}</p>",
        )

        candidate_ok = self._send(
            "confirmation_candidate", [interview.candidate_email], "Your mock interview is confirmed", candidate_html
        )
        interviewer_ok = self._send(
            "confirmation_interviewer", [interview.interviewer_email], "New mock interview scheduled", interviewer_html
        )
        logger.info(f"[Confirm] Interview {interview.id}: candidate={candidate_ok} interviewer={interviewer_ok}")
        return candidate_ok and interviewer_ok

    def send_interview_reminder(self, interview) -> bool:
        when = interview.scheduled_time.strftime("%A, %d %B %Y at %H:%M IST")
        html = _wrap(
            "Interview reminder",
            f"<p>This is a reminder that your mock interview is scheduled for <b>{when}</b>.</p>"
            f"<p>Meeting link: {_text(interview.meeting_link, 'to be shared')}</p>",
        )
        return self._send(
            "reminder", [interview.candidate_email, interview.interviewer_email], "Upcoming mock interview", html
        )

    def send_feedback_request(self, interview) -> bool:
        html = _wrap(
            "How did your interview go?",
            f"<p>Hi {_text(interview.candidate_name, 'there')},</p>"
            "<p>Your mock interview is complete. Your interviewer's feedback report will follow shortly.</p>",
        )
        return self._send("feedback", [interview.candidate_email], "Your mock interview is complete", html)

    def send_interviewer_welcome(self, email: str, full_name: Optional[str]) -> bool:
        html = _wrap(
            "Welcome to MockHire",
            f"<p>Hi {_text(full_name, 'there')},</p>"
            "<p>Thanks for joining as an interviewer. Set your availability to start receiving interviews.</p>",
        )
        return self._send("interviewer_welcome", [email], "Welcome to MockHire", html)

    def send_resume_review_admin_notification(self, review) -> bool:
        html = _wrap(
            "New paid resume review",
            f"<p>Review ID: {review.id}</p>"
            f"<p>Candidate: {_text(review.user_name)} &lt;{_text(review.user_email)}&gt;</p>"
            f"<p>Target role: {_text(review.target_role, 'Not specified')}</p>"
            f"<p>Experience: {_text(review.experience_years, 'Not specified')}</p>"
            f"<p>Resume: {_text(review.resume_url)}</p>",
        )
        return self._send("resume_review_admin", [settings.ADMIN_EMAIL], f"Resume review request {review.id}", html)

    def send_resume_review_report(self, review) -> bool:
        html = _wrap(
            "Your resume review is ready",
            f"<p>Hi {_text(review.user_name, 'there')},</p>"
            f"<p>Your resume review report is available here: <a href=\"{_text(review.report_url)}\">{_text(review.report_url)}</a></p>",
        )
        return self._send("resume_review_report", [review.user_email], "Your resume review is ready", html)
