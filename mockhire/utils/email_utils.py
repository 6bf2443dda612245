import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import List, Optional

from mockhire.base.config import settings

logger = logging.getLogger("email_utils")


def send_email(
    to_emails: List[str],
    subject: str,
    html_body: str,
    text_body: Optional[str] = None,
    sender: Optional[str] = None,
    reply_to: Optional[str] = None,
) -> None:
    """
    Sends one message over SMTP (STARTTLS). Raises on any transport error;
    callers decide whether a failed email matters.
    """
    message = MIMEMultipart("alternative")
    message["From"] = sender or settings.DEFAULT_SENDER
    message["To"] = ", ".join(to_emails)
    message["Subject"] = subject
    if reply_to:
        message["Reply-To"] = reply_to

    if text_body:
        message.attach(MIMEText(text_body, "plain"))
    message.attach(MIMEText(html_body, "html"))

    with smtplib.SMTP(settings.SMTP_SERVER, settings.SMTP_PORT, timeout=10) as server:
        server.starttls()
        server.login(settings.SMTP_USER, settings.SMTP_PASSWORD)
        server.send_message(message)

    logger.info(f"[Email] Sent '{subject}' to {to_emails}")
