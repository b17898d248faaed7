from typing import Optional
import enum

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    JSON,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from .base import BaseModel, utcnow
from .types import CaseInsensitiveEnum


class TattooStatus(str, enum.Enum):
    DRAFT = "draft"
    PENDING_REVIEW = "pending_review"
    PUBLISHED = "published"
    ARCHIVED = "archived"


class TattooStyle(str, enum.Enum):
    TRADITIONAL = "traditional"
    NEO_TRADITIONAL = "neo_traditional"
    REALISTIC = "realistic"
    BLACK_AND_GREY = "black_and_grey"
    WATERCOLOR = "watercolor"
    GEOMETRIC = "geometric"
    MINIMALIST = "minimalist"
    JAPANESE = "japanese"
    TRIBAL = "tribal"
    BIOMECHANICAL = "biomechanical"
    PORTRAIT = "portrait"
    ABSTRACT = "abstract"
    DOTWORK = "dotwork"
    LINEWORK = "linework"


class BodyPlacement(str, enum.Enum):
    ARM = "arm"
    LEG = "leg"
    BACK = "back"
    CHEST = "chest"
    SHOULDER = "shoulder"
    HAND = "hand"
    FOOT = "foot"
    NECK = "neck"
    FACE = "face"
    TORSO = "torso"
    RIBS = "ribs"
    THIGH = "thigh"
    CALF = "calf"
    FOREARM = "forearm"


class SizeCategory(str, enum.Enum):
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"
    FULL_PIECE = "full_piece"


class ColorType(str, enum.Enum):
    BLACK_AND_GREY = "black_and_grey"
    COLOR = "color"
    SINGLE_COLOR = "single_color"


# Weighted engagement formula
VIEW_WEIGHT = 0.1
LIKE_WEIGHT = 0.5
SHARE_WEIGHT = 1.0
MAX_ENGAGEMENT = 999.99
HIGH_ENGAGEMENT_THRESHOLD = 8.0
PRICE_SPREAD = 0.3


def compute_engagement(views: int, likes: int, shares: int) -> float:
    raw = (views or 0) * VIEW_WEIGHT + (likes or 0) * LIKE_WEIGHT + (shares or 0) * SHARE_WEIGHT
    return round(min(MAX_ENGAGEMENT, raw), 2)


class Tattoo(BaseModel):
    __tablename__ = "tattoos"

    id                = Column(Integer, primary_key=True, index=True)
    artist_id         = Column(Integer, ForeignKey("artists.id", ondelete="CASCADE"), nullable=False, index=True)
    title             = Column(String(255), nullable=False)
    description       = Column(Text, nullable=True)
    slug              = Column(String(255), unique=True, index=True, nullable=False)

    # Image storage
    original_filename = Column(String(255), nullable=True)
    storage_path      = Column(String(500), nullable=True)
    image_variants    = Column(JSON, nullable=True)
    primary_color     = Column(String(7), nullable=True)
    file_size         = Column(Integer, nullable=True)
    dimensions        = Column(JSON, nullable=True)
    content_type      = Column(String(50), nullable=True)
    content_hash      = Column(String(64), nullable=True, index=True)

    # Classification
    style             = Column(CaseInsensitiveEnum(TattooStyle), nullable=True, index=True)
    body_placement    = Column(CaseInsensitiveEnum(BodyPlacement), nullable=True, index=True)
    size_category     = Column(CaseInsensitiveEnum(SizeCategory), nullable=True)
    color_type        = Column(CaseInsensitiveEnum(ColorType), nullable=True)
    session_count     = Column(Integer, nullable=True)
    estimated_hours   = Column(Numeric(5, 2), nullable=True)

    status            = Column(
        CaseInsensitiveEnum(TattooStatus),
        default=TattooStatus.DRAFT,
        nullable=False,
        index=True,
    )
    is_featured       = Column(Boolean, default=False, nullable=False)
    is_portfolio_highlight = Column(Boolean, default=False, nullable=False)
    display_order     = Column(Integer, default=0, nullable=False)

    view_count        = Column(Integer, default=0, nullable=False)
    like_count        = Column(Integer, default=0, nullable=False)
    share_count       = Column(Integer, default=0, nullable=False)
    engagement_score  = Column(Numeric(5, 2), default=0, nullable=False, index=True)

    allows_inquiries  = Column(Boolean, default=True, nullable=False)
    shows_pricing     = Column(Boolean, default=False, nullable=False)
    price_estimate    = Column(Numeric(8, 2), nullable=True)
    price_currency    = Column(String(3), default="EUR", nullable=False)

    alt_text          = Column(String(500), nullable=True)
    search_keywords   = Column(JSON, nullable=True)
    meta_title        = Column(String(255), nullable=True)
    meta_description  = Column(Text, nullable=True)
    published_at      = Column(DateTime, nullable=True, index=True)

    artist = relationship("Artist", back_populates="tattoos")
    tag_links = relationship(
        "TattooTag",
        back_populates="tattoo",
        cascade="all, delete-orphan",
    )

    @property
    def is_published(self) -> bool:
        return self.status == TattooStatus.PUBLISHED and self.published_at is not None

    def _variant(self, name: str) -> Optional[str]:
        variants = self.image_variants or {}
        return variants.get(name) or variants.get("original") or self.storage_path

    @property
    def thumbnail_url(self) -> Optional[str]:
        return self._variant("thumbnail")

    @property
    def display_url(self) -> Optional[str]:
        return self._variant("medium")

    @property
    def full_size_url(self) -> Optional[str]:
        return self._variant("large")

    @property
    def aspect_ratio(self) -> Optional[float]:
        dims = self.dimensions or {}
        if dims.get("aspect_ratio"):
            return float(dims["aspect_ratio"])
        width, height = dims.get("width"), dims.get("height")
        if width and height:
            return round(float(width) / float(height), 2)
        return None

    @property
    def is_high_engagement(self) -> bool:
        return float(self.engagement_score or 0) >= HIGH_ENGAGEMENT_THRESHOLD

    @property
    def estimated_price_range(self) -> Optional[str]:
        if not self.shows_pricing or not self.price_estimate:
            return None
        base = float(self.price_estimate)
        low = round(base * (1 - PRICE_SPREAD))
        high = round(base * (1 + PRICE_SPREAD))
        return f"{low} - {high} {self.price_currency or 'EUR'}"

    # ─── lifecycle ────────────────────────────────────────────────────────

    def submit_for_review(self) -> None:
        if self.status != TattooStatus.DRAFT:
            raise ValueError("Only draft tattoos can be submitted for review")
        self.status = TattooStatus.PENDING_REVIEW

    def publish(self) -> None:
        if self.status == TattooStatus.ARCHIVED:
            raise ValueError("Archived tattoos cannot be published")
        self.status = TattooStatus.PUBLISHED
        self.published_at = utcnow()

    def unpublish(self) -> None:
        if self.status == TattooStatus.ARCHIVED:
            raise ValueError("Archived tattoos cannot be unpublished")
        self.status = TattooStatus.DRAFT
        self.published_at = None

    def archive(self) -> None:
        self.status = TattooStatus.ARCHIVED

    # ─── engagement ───────────────────────────────────────────────────────

    def update_engagement(self) -> float:
        self.engagement_score = compute_engagement(self.view_count, self.like_count, self.share_count)
        return float(self.engagement_score)

    def increment_view(self) -> None:
        self.view_count = (self.view_count or 0) + 1
        self.update_engagement()

    def increment_like(self) -> None:
        self.like_count = (self.like_count or 0) + 1
        self.update_engagement()

    def increment_share(self) -> None:
        self.share_count = (self.share_count or 0) + 1
        self.update_engagement()

    @property
    def tags(self) -> list[str]:
        ordered = sorted(self.tag_links, key=lambda link: (not link.is_primary, -(link.relevance_score or 0)))
        return [link.tag.slug for link in ordered if link.is_approved]
