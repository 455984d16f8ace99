"""Mailer - outgoing HTML email over SMTP.

Invariants:
    - Every failure surfaces as EmailDeliveryError (core/errors.py), one per recipient
    - A missing smtp_host fails each send; it never raises at construction time
    - The blocking smtplib call runs in a worker thread (asyncio.to_thread)

Design Decisions:
    - Mailer is a Protocol: the report runner depends on send_html only, tests
      swap in a recording fake via the get_mailer dependency
    - One SMTP connection per message: report fan-out is small and sequential
"""

import asyncio
import logging
import smtplib
from email.message import EmailMessage
from typing import Protocol

from alphacore.config import Settings, get_settings
from alphacore.core.errors import EmailDeliveryError

logger = logging.getLogger(__name__)


class Mailer(Protocol):
    async def send_html(self, to: str, subject: str, html: str) -> None:
        ...


class SmtpMailer:
    """Sends through the SMTP server named in settings."""

    def __init__(self, settings: Settings):
        self._settings = settings

    def _build_message(self, to: str, subject: str, html: str) -> EmailMessage:
        msg = EmailMessage()
        msg["Subject"] = subject
        msg["From"] = self._settings.email_from
        msg["To"] = to
        msg.set_content("Bu e-posta HTML olarak görüntülenmelidir.")
        msg.add_alternative(html, subtype="html")
        return msg

    def _send_blocking(self, msg: EmailMessage) -> None:
        s = self._settings
        with smtplib.SMTP(s.smtp_host, s.smtp_port, timeout=s.smtp_timeout_seconds) as smtp:
            if s.smtp_use_tls:
                smtp.starttls()
            if s.smtp_username:
                smtp.login(s.smtp_username, s.smtp_password or "")
            smtp.send_message(msg)

    async def send_html(self, to: str, subject: str, html: str) -> None:
        if not self._settings.smtp_host:
            raise EmailDeliveryError("SMTP is not configured", to)
        msg = self._build_message(to, subject, html)
        try:
            await asyncio.to_thread(self._send_blocking, msg)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(
                f"SMTP send failed: {e}", extra={"recipient": to},
            )
            raise EmailDeliveryError(str(e), to)
        logger.info("Email sent", extra={"recipient": to})


def get_mailer() -> Mailer:
    """FastAPI dependency (overridden in tests)."""
    return SmtpMailer(get_settings())
