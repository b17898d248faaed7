from datetime import date
from typing import Optional
import enum

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    JSON,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from .base import BaseModel, utcnow
from .types import CaseInsensitiveEnum
from .verification_status import VerificationStatus
from ..utils.formatting import format_price_range


class ExperienceLevel(str, enum.Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"
    EXPERT = "expert"


class SalonRelationship(str, enum.Enum):
    PRIMARY = "primary"
    GUEST = "guest"
    FREELANCE = "freelance"


class Artist(BaseModel):
    """Public professional profile of a tattoo artist."""

    __tablename__ = "artists"

    id                 = Column(Integer, primary_key=True, index=True)
    user_id            = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
        index=True,
    )
    stage_name         = Column(String(100), nullable=False)
    slug               = Column(String(120), unique=True, index=True, nullable=False)
    bio                = Column(Text, nullable=True)
    short_bio          = Column(String(500), nullable=True)
    specialty          = Column(String(100), nullable=True)
    years_experience   = Column(Integer, nullable=True)
    started_tattooing_at = Column(Date, nullable=True)
    experience_level   = Column(
        CaseInsensitiveEnum(ExperienceLevel),
        default=ExperienceLevel.INTERMEDIATE,
        nullable=False,
    )
    art_styles         = Column(JSON, nullable=True)

    city_id            = Column(Integer, ForeignKey("cities.id", ondelete="SET NULL"), nullable=True, index=True)
    primary_salon_id   = Column(Integer, ForeignKey("salons.id", ondelete="SET NULL"), nullable=True)

    accepts_bookings   = Column(Boolean, default=True, nullable=False)
    appointment_only   = Column(Boolean, default=True, nullable=False)
    min_price          = Column(Numeric(8, 2), nullable=True)
    max_price          = Column(Numeric(8, 2), nullable=True)
    currency           = Column(String(3), default="EUR", nullable=False)
    availability       = Column(JSON, nullable=True)
    portfolio_images   = Column(JSON, nullable=True)

    instagram_handle   = Column(String(100), nullable=True)
    instagram_url      = Column(String(500), nullable=True)
    website            = Column(String(500), nullable=True)
    social_links       = Column(JSON, nullable=True)

    verification_status = Column(
        CaseInsensitiveEnum(VerificationStatus),
        default=VerificationStatus.UNVERIFIED,
        nullable=False,
        index=True,
    )
    verified_at        = Column(DateTime, nullable=True)
    verified_by        = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    verification_notes = Column(Text, nullable=True)

    has_health_certificate = Column(Boolean, default=False, nullable=False)
    has_professional_insurance = Column(Boolean, default=False, nullable=False)
    health_certificate_expires_at = Column(Date, nullable=True)

    is_active          = Column(Boolean, default=True, nullable=False, index=True)
    is_featured        = Column(Boolean, default=False, nullable=False)
    is_accepting_new_clients = Column(Boolean, default=True, nullable=False)
    priority           = Column(Integer, default=0, nullable=False)

    average_rating     = Column(Float, default=0, nullable=False)
    total_reviews      = Column(Integer, default=0, nullable=False)
    total_tattoos      = Column(Integer, default=0, nullable=False)
    profile_views      = Column(Integer, default=0, nullable=False)
    last_activity_at   = Column(DateTime, nullable=True)

    user = relationship("User", back_populates="artist_profile", foreign_keys=[user_id])
    city = relationship("City", back_populates="artists")
    primary_salon = relationship("Salon", foreign_keys=[primary_salon_id])
    salon_links = relationship(
        "ArtistSalon",
        back_populates="artist",
        cascade="all, delete-orphan",
    )
    tattoos = relationship(
        "Tattoo",
        back_populates="artist",
        cascade="all, delete-orphan",
    )

    @property
    def price_range(self) -> Optional[str]:
        return format_price_range(self.min_price, self.max_price, self.currency or "EUR")

    @property
    def experience_years(self) -> Optional[int]:
        if self.years_experience is not None:
            return self.years_experience
        if self.started_tattooing_at:
            return max(0, (date.today() - self.started_tattooing_at).days // 365)
        return None

    @property
    def is_experienced(self) -> bool:
        return self.experience_level in (ExperienceLevel.ADVANCED, ExperienceLevel.EXPERT)

    @property
    def is_verified(self) -> bool:
        return self.verification_status == VerificationStatus.VERIFIED

    @property
    def is_profile_complete(self) -> bool:
        return bool(
            self.bio
            and self.specialty
            and self.art_styles
            and self.min_price is not None
            and len(self.portfolio_images or []) >= 3
        )

    @property
    def has_health_credentials(self) -> bool:
        if not self.has_health_certificate:
            return False
        expires = self.health_certificate_expires_at
        return expires is None or expires >= date.today()

    @property
    def active_salons(self):
        return [link.salon for link in self.salon_links if link.is_active]

    def update_verification_status(
        self,
        status: VerificationStatus,
        verified_by: Optional[int] = None,
        notes: Optional[str] = None,
    ) -> None:
        self.verification_status = status
        if notes is not None:
            self.verification_notes = notes
        if status == VerificationStatus.VERIFIED:
            self.verified_at = utcnow()
            self.verified_by = verified_by
        else:
            self.verified_at = None
            self.verified_by = None

    def mark_as_verified(self, verified_by: Optional[int] = None, notes: Optional[str] = None) -> None:
        self.update_verification_status(VerificationStatus.VERIFIED, verified_by, notes)

    def increment_profile_views(self) -> None:
        self.profile_views = (self.profile_views or 0) + 1

    def touch_activity(self) -> None:
        self.last_activity_at = utcnow()


class ArtistSalon(BaseModel):
    """Working relationship between an artist and a salon."""

    __tablename__ = "artist_salons"
    __table_args__ = (UniqueConstraint("artist_id", "salon_id", name="uq_artist_salon"),)

    id                    = Column(Integer, primary_key=True, index=True)
    artist_id             = Column(Integer, ForeignKey("artists.id", ondelete="CASCADE"), nullable=False, index=True)
    salon_id              = Column(Integer, ForeignKey("salons.id", ondelete="CASCADE"), nullable=False, index=True)
    relationship_type     = Column(
        CaseInsensitiveEnum(SalonRelationship),
        default=SalonRelationship.GUEST,
        nullable=False,
    )
    is_active             = Column(Boolean, default=True, nullable=False)
    schedule              = Column(JSON, nullable=True)
    hourly_rate           = Column(Numeric(8, 2), nullable=True)
    commission_rate       = Column(Numeric(5, 2), nullable=True)
    started_working_at    = Column(Date, nullable=True)
    ended_working_at      = Column(Date, nullable=True)
    notes                 = Column(Text, nullable=True)
    can_book_appointments = Column(Boolean, default=True, nullable=False)
    can_manage_schedule   = Column(Boolean, default=False, nullable=False)
    has_salon_key         = Column(Boolean, default=False, nullable=False)

    artist = relationship("Artist", back_populates="salon_links")
    salon = relationship("Salon", back_populates="artist_links")
