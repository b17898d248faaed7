"""Emails sent when clients reach out to artists."""

import logging
from typing import Optional

from app.core.config import settings
from ..models.artist import Artist
from ..models.contact_inquiry import ContactInquiry
from ..utils import metrics
from ..utils.email import send_email
from ..utils.errors import EmailDeliveryError
from .monitoring_service import monitoring_service

logger = logging.getLogger(__name__)


def _inquiry_body(artist: Artist, inquiry: ContactInquiry) -> str:
    lines = [
        f"Hello {artist.stage_name},",
        "",
        f"{inquiry.full_name} sent you a new {inquiry.project_type.value} request on Blottr.",
        "",
        f"Subject: {inquiry.subject}",
        "",
        inquiry.message,
        "",
    ]
    for label, value in (
        ("Budget", inquiry.budget),
        ("Preferred date", inquiry.preferred_date),
        ("Placement", inquiry.placement),
        ("Size", inquiry.size),
    ):
        if value:
            lines.append(f"{label}: {value}")
    lines += ["", f"Reply from your inbox: {settings.FRONTEND_URL}/inbox/{inquiry.id}"]
    return "\n".join(lines)


def notify_artist_of_inquiry(artist: Optional[Artist], inquiry: ContactInquiry) -> bool:
    """Email the artist about a new inquiry.

    Returns whether an email went out. Delivery failures are logged and
    counted, never raised.
    """
    if artist is None or artist.user is None or not artist.user.email:
        return False
    try:
        send_email(
            artist.user.email,
            f"New inquiry: {inquiry.subject}",
            _inquiry_body(artist, inquiry),
            reply_to=inquiry.email,
        )
    except EmailDeliveryError as exc:
        monitoring_service.log_error(exc, {"inquiry_id": inquiry.id, "artist_id": artist.id})
        return False
    metrics.incr("inquiry.notified")
    return True
