"""
Outbound e-mail over SMTP.

Configuration (env):
- SMTP_HOST / SMTP_PORT          server, e.g. smtp.gmail.com / 587
- SMTP_USER / SMTP_PASSWORD      login; SMTP_USER is also the sender address
- SMTP_STARTTLS                  "0" to skip STARTTLS (default on)
- MAIL_FROM_NAME                 display name in From:

Without SMTP_HOST the message is logged instead of sent, which keeps local
development usable without credentials.
"""

from __future__ import annotations

import logging
import smtplib
from email.message import EmailMessage
from email.utils import formataddr

from fastapi.concurrency import run_in_threadpool

from . import settings

logger = logging.getLogger(__name__)

SMTP_TIMEOUT_S = 30.0


# Mail failures are explicit and separable from other runtime errors.
class MailerError(RuntimeError):
    pass


def smtp_host() -> str:
    return settings.env_str("SMTP_HOST", "")


def smtp_port() -> int:
    return settings.env_int("SMTP_PORT", 587)


def smtp_user() -> str:
    return settings.env_str("SMTP_USER", "")


def smtp_password() -> str:
    return settings.env_str("SMTP_PASSWORD", "")


def from_name() -> str:
    return settings.env_str("MAIL_FROM_NAME", "Smart Soap Dispenser")


def build_message(*, to: str, subject: str, text: str | None = None, html: str | None = None) -> EmailMessage:
    to = (to or "").strip()
    if not to:
        raise MailerError("Recipient address is empty.")
    if not text and not html:
        raise MailerError("Mail body is empty.")

    msg = EmailMessage()
    msg["From"] = formataddr((from_name(), smtp_user() or "noreply@localhost"))
    msg["To"] = to
    msg["Subject"] = subject
    if text:
        msg.set_content(text)
        if html:
            msg.add_alternative(html, subtype="html")
    else:
        msg.set_content(html or "", subtype="html")
    return msg


def _send_blocking(msg: EmailMessage) -> None:
    host = smtp_host()
    try:
        with smtplib.SMTP(host, smtp_port(), timeout=SMTP_TIMEOUT_S) as smtp:
            if settings.env_bool("SMTP_STARTTLS", True):
                smtp.starttls()
            user = smtp_user()
            if user:
                smtp.login(user, smtp_password())
            smtp.send_message(msg)
    except (smtplib.SMTPException, OSError) as exc:
        raise MailerError(f"SMTP delivery to {msg['To']} failed: {exc}") from exc


async def send_mail(*, to: str, subject: str, text: str | None = None, html: str | None = None) -> None:
    """
    Send one message. Raises MailerError on any delivery failure.
    """
    msg = build_message(to=to, subject=subject, text=text, html=html)
    if not smtp_host():
        logger.info("mail_console to=%s subject=%r body=%r", msg["To"], subject, text or html)
        return None

    await run_in_threadpool(_send_blocking, msg)
    logger.info("mail_sent to=%s subject=%r", msg["To"], subject)
