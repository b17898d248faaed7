import enum
import uuid
from typing import Optional

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, JSON, String, Text
from sqlalchemy.orm import relationship

from .base import BaseModel, utcnow
from .types import CaseInsensitiveEnum
from ..utils.formatting import time_ago


class InquiryStatus(str, enum.Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    REPLIED = "replied"
    CLOSED = "closed"
    SPAM = "spam"


class ProjectType(str, enum.Enum):
    CONSULTATION = "consultation"
    QUOTE = "quote"
    APPOINTMENT = "appointment"
    QUESTION = "question"


class InquirySource(str, enum.Enum):
    WEBSITE = "website"
    QUICK_FORM = "quick_form"
    SOCIAL_MEDIA = "social_media"
    REFERRAL = "referral"


DEFAULT_PRIORITY = {
    ProjectType.APPOINTMENT: 8,
    ProjectType.QUOTE: 6,
    ProjectType.CONSULTATION: 5,
}
FALLBACK_PRIORITY = 3
MIN_PRIORITY = 1
MAX_PRIORITY = 10
URGENT_PRIORITY = 8


def default_priority(project_type: Optional[ProjectType]) -> int:
    return DEFAULT_PRIORITY.get(project_type, FALLBACK_PRIORITY)


def clamp_priority(value: int) -> int:
    return max(MIN_PRIORITY, min(MAX_PRIORITY, int(value)))


def priority_label(priority: int) -> str:
    if priority >= 9:
        return "critical"
    if priority >= 7:
        return "high"
    if priority >= 5:
        return "normal"
    if priority >= 3:
        return "low"
    return "very_low"


class ContactInquiry(BaseModel):
    """Client message addressed to an artist (or to the platform)."""

    __tablename__ = "contact_inquiries"

    id                   = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    # Contact
    full_name            = Column(String(100), nullable=False)
    email                = Column(String(254), nullable=False, index=True)
    phone                = Column(String(20), nullable=True)
    subject              = Column(String(200), nullable=False)
    message              = Column(Text, nullable=False)

    # Project
    project_type         = Column(CaseInsensitiveEnum(ProjectType), default=ProjectType.QUESTION, nullable=False)
    budget               = Column(String(50), nullable=True)
    preferred_date       = Column(String(100), nullable=True)
    location             = Column(String(200), nullable=True)
    tattoo_styles        = Column(JSON, nullable=True)
    size                 = Column(String(20), nullable=True)
    placement            = Column(String(100), nullable=True)
    has_existing_tattoos = Column(Boolean, default=False, nullable=False)
    reference_images     = Column(JSON, nullable=True)

    # Links
    artist_id            = Column(Integer, ForeignKey("artists.id", ondelete="SET NULL"), nullable=True, index=True)
    tattoo_id            = Column(Integer, ForeignKey("tattoos.id", ondelete="SET NULL"), nullable=True)

    # Tracking
    status               = Column(
        CaseInsensitiveEnum(InquiryStatus),
        default=InquiryStatus.PENDING,
        nullable=False,
        index=True,
    )
    source               = Column(CaseInsensitiveEnum(InquirySource), default=InquirySource.WEBSITE, nullable=False)
    priority             = Column(Integer, default=FALLBACK_PRIORITY, nullable=False, index=True)
    is_read              = Column(Boolean, default=False, nullable=False, index=True)
    is_starred           = Column(Boolean, default=False, nullable=False)

    # Request info
    ip_address           = Column(String(45), nullable=True)
    user_agent           = Column(Text, nullable=True)
    extra_metadata       = Column("metadata", JSON, nullable=True)

    # Replies
    first_replied_at     = Column(DateTime, nullable=True)
    last_replied_at      = Column(DateTime, nullable=True)
    replies_count        = Column(Integer, default=0, nullable=False)

    artist = relationship("Artist")
    tattoo = relationship("Tattoo")

    @property
    def is_pending(self) -> bool:
        return self.status == InquiryStatus.PENDING

    @property
    def is_urgent(self) -> bool:
        return (self.priority or 0) >= URGENT_PRIORITY or self.project_type == ProjectType.APPOINTMENT

    @property
    def time_ago(self) -> Optional[str]:
        return time_ago(self.created_at)

    @property
    def response_time_hours(self) -> Optional[float]:
        if not self.first_replied_at or not self.created_at:
            return None
        return round((self.first_replied_at - self.created_at).total_seconds() / 3600, 2)

    @property
    def priority_label(self) -> str:
        return priority_label(self.priority or FALLBACK_PRIORITY)

    def set_priority(self, value: int) -> None:
        self.priority = clamp_priority(value)

    def apply_default_priority(self) -> None:
        self.set_priority(default_priority(self.project_type))

    def mark_as_read(self) -> None:
        self.is_read = True

    def toggle_starred(self) -> bool:
        self.is_starred = not self.is_starred
        return self.is_starred

    def update_status(self, status: InquiryStatus) -> None:
        self.status = status

    def record_reply(self) -> None:
        now = utcnow()
        if self.first_replied_at is None:
            self.first_replied_at = now
        self.last_replied_at = now
        self.replies_count = (self.replies_count or 0) + 1
        self.status = InquiryStatus.REPLIED
