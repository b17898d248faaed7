import enum
import math
from typing import Optional

from sqlalchemy import (
    Boolean,
    Column,
    Float,
    ForeignKey,
    Integer,
    JSON,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from .base import BaseModel
from .types import CaseInsensitiveEnum


class TagCategory(str, enum.Enum):
    STYLE = "style"
    SUBJECT = "subject"
    BODY_PART = "body_part"
    COLOR = "color"
    SIZE = "size"
    TECHNIQUE = "technique"
    MOOD = "mood"
    CULTURAL = "cultural"
    CUSTOM = "custom"


class TagAssignment(str, enum.Enum):
    MANUAL = "manual"
    AUTO = "auto"
    AI_SUGGESTED = "ai_suggested"


DEFAULT_LOCALE = "fr"


def compute_popularity(usage_count: int, is_featured: bool, is_trending: bool) -> float:
    score = math.log((usage_count or 0) + 1) * 2
    if is_featured:
        score += 2
    if is_trending:
        score += 1.5
    return round(min(10.0, score), 2)


class Tag(BaseModel):
    __tablename__ = "tags"

    id                = Column(Integer, primary_key=True, index=True)
    name              = Column(String(100), nullable=False)
    slug              = Column(String(120), unique=True, index=True, nullable=False)
    description       = Column(Text, nullable=True)
    category          = Column(CaseInsensitiveEnum(TagCategory), default=TagCategory.CUSTOM, nullable=False, index=True)
    parent_tag_id     = Column(Integer, ForeignKey("tags.id", ondelete="SET NULL"), nullable=True)
    level             = Column(Integer, default=0, nullable=False)
    color_code        = Column(String(7), nullable=True)
    icon_name         = Column(String(50), nullable=True)
    display_order     = Column(Integer, default=0, nullable=False)
    usage_count       = Column(Integer, default=0, nullable=False)
    is_featured       = Column(Boolean, default=False, nullable=False)
    is_trending       = Column(Boolean, default=False, nullable=False)
    popularity_score  = Column(Float, default=0, nullable=False)
    requires_approval = Column(Boolean, default=False, nullable=False)
    is_approved       = Column(Boolean, default=True, nullable=False)
    created_by        = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    approved_by       = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    # {"en": {"name": "Rose", "description": "..."}}
    translations      = Column(JSON, nullable=True)

    parent = relationship("Tag", remote_side=[id], back_populates="children")
    children = relationship("Tag", back_populates="parent")
    tattoo_links = relationship("TattooTag", back_populates="tag", cascade="all, delete-orphan")

    @property
    def is_hierarchical(self) -> bool:
        return (self.level or 0) > 0 or self.parent_tag_id is not None

    def localized_name(self, locale: str = DEFAULT_LOCALE) -> str:
        entry = (self.translations or {}).get(locale) or {}
        return entry.get("name") or self.name

    @property
    def display_name(self) -> str:
        return self.localized_name(DEFAULT_LOCALE)

    @property
    def is_popular(self) -> bool:
        return (self.popularity_score or 0) > 7 and (self.usage_count or 0) > 50

    def increment_usage(self) -> None:
        self.usage_count = (self.usage_count or 0) + 1
        self.popularity_score = compute_popularity(
            self.usage_count, bool(self.is_featured), bool(self.is_trending)
        )

    def approve(self, approved_by: Optional[int] = None) -> None:
        self.is_approved = True
        self.approved_by = approved_by

    def set_translation(self, locale: str, name: str, description: Optional[str] = None) -> None:
        translations = dict(self.translations or {})
        translations[locale] = {"name": name, "description": description}
        # Reassign so the JSON column is flagged dirty
        self.translations = translations


class TattooTag(BaseModel):
    __tablename__ = "tattoo_tags"
    __table_args__ = (UniqueConstraint("tag_id", "tattoo_id", name="uq_tattoo_tag"),)

    id              = Column(Integer, primary_key=True, index=True)
    tag_id          = Column(Integer, ForeignKey("tags.id", ondelete="CASCADE"), nullable=False, index=True)
    tattoo_id       = Column(Integer, ForeignKey("tattoos.id", ondelete="CASCADE"), nullable=False, index=True)
    relevance_score = Column(Float, default=1.0, nullable=False)
    is_primary      = Column(Boolean, default=False, nullable=False)
    assignment_type = Column(CaseInsensitiveEnum(TagAssignment), default=TagAssignment.MANUAL, nullable=False)
    is_approved     = Column(Boolean, default=True, nullable=False)

    tag = relationship("Tag", back_populates="tattoo_links")
    tattoo = relationship("Tattoo", back_populates="tag_links")
