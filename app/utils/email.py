"""Plain-text SMTP delivery for moderation notices."""

from __future__ import annotations

import logging
import smtplib
from email.message import EmailMessage

from app.config import settings

logger = logging.getLogger(__name__)


def is_email_enabled() -> bool:
    """Return True when email notifications are configured and enabled."""
    if not settings.EMAIL_NOTIFICATIONS_ENABLED:
        return False
    if not settings.SMTP_SERVER:
        return False
    if not settings.EMAIL_FROM:
        return False
    return True


def build_message(*, to_email: str, subject: str, body_text: str) -> EmailMessage:
    msg = EmailMessage()
    msg["From"] = settings.EMAIL_FROM
    msg["To"] = to_email
    msg["Subject"] = subject
    # Banned accounts are told to contact support; replies should land there.
    if settings.SUPPORT_EMAIL:
        msg["Reply-To"] = settings.SUPPORT_EMAIL
    msg.set_content(body_text)
    return msg


def _open_smtp() -> smtplib.SMTP:
    if settings.SMTP_USE_SSL:
        return smtplib.SMTP_SSL(
            settings.SMTP_SERVER,
            settings.SMTP_PORT,
            timeout=settings.SMTP_TIMEOUT_SECONDS,
        )
    return smtplib.SMTP(
        settings.SMTP_SERVER,
        settings.SMTP_PORT,
        timeout=settings.SMTP_TIMEOUT_SECONDS,
    )


def send_email(*, to_email: str, subject: str, body_text: str) -> bool:
    """
    Send a plain-text email using SMTP settings.

    Returns True on success. Failures are logged and False is returned.
    """
    if not is_email_enabled():
        return False

    msg = build_message(to_email=to_email, subject=subject, body_text=body_text)
    username = settings.SMTP_USERNAME or settings.EMAIL_FROM
    password = settings.EMAIL_PASSWORD or ""

    try:
        with _open_smtp() as server:
            if settings.SMTP_USE_TLS and not settings.SMTP_USE_SSL:
                server.starttls()
            if password:
                server.login(username, password)
            server.send_message(msg)
    except (smtplib.SMTPException, OSError) as exc:
        logger.warning("Email send failed for '%s': %s", to_email, exc)
        return False

    logger.info("Moderation email sent to '%s' (%s)", to_email, subject)
    return True
