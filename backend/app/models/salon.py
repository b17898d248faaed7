from datetime import datetime
from typing import Optional, Tuple

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Float,
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
from .verification_status import VerificationStatus
from ..utils.formatting import format_price_range
from ..utils.geo import haversine_km

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


def _parse_hhmm(value: str) -> Optional[Tuple[int, int]]:
    try:
        hours, minutes = value.split(":", 1)
        return int(hours), int(minutes)
    except (AttributeError, ValueError):
        return None


class Salon(BaseModel):
    __tablename__ = "salons"

    id                  = Column(Integer, primary_key=True, index=True)
    name                = Column(String(255), nullable=False)
    slug                = Column(String(255), unique=True, index=True, nullable=False)
    description         = Column(Text, nullable=True)
    short_description   = Column(String(500), nullable=True)
    email               = Column(String(254), nullable=True)
    phone               = Column(String(20), nullable=True)
    website             = Column(String(500), nullable=True)

    city_id             = Column(Integer, ForeignKey("cities.id", ondelete="SET NULL"), nullable=True, index=True)
    address             = Column(String(255), nullable=True)
    postal_code         = Column(String(10), nullable=True)
    latitude            = Column(Float, nullable=True)
    longitude           = Column(Float, nullable=True)

    # {"monday": {"open": "10:00", "close": "19:00"}, "sunday": null, ...}
    opening_hours       = Column(JSON, nullable=True)
    services            = Column(JSON, nullable=True)
    price_range_min     = Column(Numeric(10, 2), nullable=True)
    price_range_max     = Column(Numeric(10, 2), nullable=True)
    currency            = Column(String(3), default="EUR", nullable=False)

    instagram_handle    = Column(String(100), nullable=True)
    facebook_url        = Column(String(500), nullable=True)
    tiktok_handle       = Column(String(100), nullable=True)
    gallery_images      = Column(JSON, nullable=True)

    verification_status = Column(
        CaseInsensitiveEnum(VerificationStatus),
        default=VerificationStatus.UNVERIFIED,
        nullable=False,
        index=True,
    )
    verified_at         = Column(DateTime, nullable=True)
    verified_by         = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    verification_notes  = Column(Text, nullable=True)

    is_active           = Column(Boolean, default=True, nullable=False)
    is_featured         = Column(Boolean, default=False, nullable=False)
    accepts_walk_ins    = Column(Boolean, default=False, nullable=False)
    appointment_required = Column(Boolean, default=True, nullable=False)
    priority            = Column(Integer, default=0, nullable=False)

    meta_title          = Column(String(255), nullable=True)
    meta_description    = Column(Text, nullable=True)

    average_rating      = Column(Float, default=0, nullable=False)
    total_reviews       = Column(Integer, default=0, nullable=False)
    total_artists       = Column(Integer, default=0, nullable=False)
    last_activity_at    = Column(DateTime, nullable=True)

    city = relationship("City", back_populates="salons")
    artist_links = relationship(
        "ArtistSalon",
        back_populates="salon",
        cascade="all, delete-orphan",
    )

    @property
    def is_verified(self) -> bool:
        return self.verification_status == VerificationStatus.VERIFIED

    @property
    def coordinates(self) -> Optional[Tuple[float, float]]:
        if self.latitude is None or self.longitude is None:
            return None
        return (self.latitude, self.longitude)

    @property
    def price_range(self) -> Optional[str]:
        return format_price_range(
            self.price_range_min, self.price_range_max, self.currency or "EUR", decimals=0
        )

    @property
    def full_address(self) -> Optional[str]:
        parts = [p for p in (self.address, self.postal_code) if p]
        return ", ".join(parts) if parts else None

    def is_open_at(self, moment: datetime) -> bool:
        """Whether the opening hours cover ``moment`` (local time)."""
        hours = (self.opening_hours or {}).get(WEEKDAYS[moment.weekday()])
        if not hours or hours.get("closed"):
            return False
        opens = _parse_hhmm(hours.get("open", ""))
        closes = _parse_hhmm(hours.get("close", ""))
        if opens is None or closes is None:
            return False
        now = (moment.hour, moment.minute)
        if opens <= closes:
            return opens <= now < closes
        # Overnight range such as 20:00 -> 02:00
        return now >= opens or now < closes

    @property
    def is_open(self) -> bool:
        return self.is_open_at(datetime.now())

    def distance_to_km(self, lat: float, lng: float) -> Optional[float]:
        if self.coordinates is None:
            return None
        return round(haversine_km(self.latitude, self.longitude, lat, lng), 2)

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

    def touch_activity(self) -> None:
        self.last_activity_at = utcnow()
