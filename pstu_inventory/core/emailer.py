# FILE: pstu_inventory/core/emailer.py
from __future__ import annotations

import logging
import smtplib
import ssl
from email.message import EmailMessage
from typing import Optional

from pstu_inventory.core.config import settings

logger = logging.getLogger(__name__)

def email_configured() -> bool:
    return bool(settings.EMAIL_ENABLED and settings.SMTP_HOST
                and (settings.SMTP_FROM or settings.SMTP_USER))


def _get_from_email() -> str:
    """
    Decide FROM email:
    - Prefer settings.SMTP_FROM
    - Fallback to settings.SMTP_USER (Gmail requires the account address)
    """
    from_email = settings.SMTP_FROM or settings.SMTP_USER
    if not from_email:
        raise RuntimeError(
            "No FROM email configured. Set SMTP_FROM or SMTP_USER in settings."
        )
    return from_email


def _build_message(
    to_email: str,
    subject: str,
    body: str,
    html: Optional[str] = None,
) -> EmailMessage:
    msg = EmailMessage()
    msg["From"] = _get_from_email()
    msg["To"] = to_email
    msg["Subject"] = subject
    msg.set_content(body)
    if html:
        msg.add_alternative(html, subtype="html")

    return msg


def send_email(
    to_email: str,
    subject: str,
    body: str,
    *,
    html: Optional[str] = None,
) -> None:
    """
    Send one message through the configured SMTP relay.

    Raises on transport errors; callers that treat mail as best-effort go
    through pstu_inventory.services.notifications instead.
    """
    if not to_email:
        raise ValueError("send_email: recipient is required")
    if not settings.SMTP_HOST:
        raise RuntimeError("SMTP_HOST is not configured")

    msg = _build_message(to_email, subject, body, html=html)

    context = ssl.create_default_context()
    if settings.SMTP_SSL:
        with smtplib.SMTP_SSL(settings.SMTP_HOST, settings.SMTP_PORT, context=context) as server:
            if settings.SMTP_USER and settings.SMTP_PASSWORD:
                server.login(settings.SMTP_USER, settings.SMTP_PASSWORD)
            server.send_message(msg)
    elif settings.SMTP_TLS:
        with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT) as server:
            server.starttls(context=context)
            if settings.SMTP_USER and settings.SMTP_PASSWORD:
                server.login(settings.SMTP_USER, settings.SMTP_PASSWORD)
            server.send_message(msg)
    else:
        with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT) as server:
            if settings.SMTP_USER and settings.SMTP_PASSWORD:
                server.login(settings.SMTP_USER, settings.SMTP_PASSWORD)
            server.send_message(msg)
    logger.info("Email '%s' sent to %s", subject, to_email)
