import asyncio
import logging
from email.message import EmailMessage

import aiosmtplib

from ..core.config import settings
from .errors import EmailDeliveryError

logger = logging.getLogger(__name__)


async def _send_async(msg: EmailMessage) -> None:
    await aiosmtplib.send(
        msg,
        hostname=settings.SMTP_HOST,
        port=settings.SMTP_PORT,
        username=settings.SMTP_USERNAME or None,
        password=settings.SMTP_PASSWORD or None,
        start_tls=bool(settings.SMTP_USERNAME),
    )


def build_message(recipient: str, subject: str, body: str, reply_to: str | None = None) -> EmailMessage:
    msg = EmailMessage()
    msg["From"] = settings.SMTP_FROM
    msg["To"] = recipient
    msg["Subject"] = subject
    if reply_to:
        msg["Reply-To"] = reply_to
    msg.set_content(body)
    return msg


def send_email(recipient: str, subject: str, body: str, reply_to: str | None = None) -> None:
    """Send an email via SMTP.

    Raises ``EmailDeliveryError`` when the SMTP exchange fails so callers
    decide whether the failure matters to their request.
    """
    msg = build_message(recipient, subject, body, reply_to)
    try:
        asyncio.run(_send_async(msg))
    except (aiosmtplib.SMTPException, OSError) as exc:
        logger.error("Failed to send email to %s: %s", recipient, exc)
        raise EmailDeliveryError(f"Could not deliver email to {recipient}") from exc
    logger.info("Sent email to %s", recipient)
