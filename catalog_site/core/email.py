from __future__ import annotations

import logging
import smtplib
from email.message import EmailMessage
from typing import Iterable

from catalog_site import schemas
from catalog_site.core.config import Settings

logger = logging.getLogger("catalog_site.email")


def send_email(settings: Settings, subject: str, body: str, to: Iterable[str]) -> bool:
    """Send a plain-text email. Logs a warning when SMTP is not configured."""
    recipients = list(to)
    if not settings.smtp_host or not settings.smtp_sender:
        logger.warning("smtp_not_configured", extra={"subject": subject, "to": recipients})
        return False

    msg = EmailMessage()
    msg["Subject"] = subject
    msg["From"] = settings.smtp_sender
    msg["To"] = ", ".join(recipients)
    msg.set_content(body)

    try:
        with smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=10) as server:
            if settings.smtp_use_tls:
                server.starttls()
            if settings.smtp_username and settings.smtp_password:
                server.login(settings.smtp_username, settings.smtp_password)
            server.send_message(msg)
    except (smtplib.SMTPException, OSError) as exc:
        logger.error("smtp_send_failed", extra={"error": str(exc), "subject": subject})
        return False
    return True


def notification_recipients(settings: Settings) -> list[str]:
    if settings.notification_email:
        return [settings.notification_email]
    if settings.smtp_sender:
        return [settings.smtp_sender]
    return []


def notify_contact_request(settings: Settings, contact: schemas.ContactRequest) -> None:
    recipients = notification_recipients(settings)
    if not recipients:
        return
    callback = "yes" if contact.request_call_back else "no"
    send_email(
        settings,
        subject=f"New contact request from {contact.name}",
        body=(
            f"Name: {contact.name}\nEmail: {contact.email}\nPhone: {contact.phone}\n"
            f"Call back requested: {callback}\n"
            f"Message:\n{contact.message or ''}"
        ),
        to=recipients,
    )
