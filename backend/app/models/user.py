# backend/app/models/user.py

from datetime import date
from sqlalchemy import Boolean, Column, Date, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from .base import BaseModel, utcnow
from .types import CaseInsensitiveEnum
import enum


class UserRole(str, enum.Enum):
    """Enumeration of all supported user roles."""

    CLIENT = "client"
    ARTIST = "artist"


class User(BaseModel):
    __tablename__ = "users"

    id           = Column(Integer, primary_key=True, index=True)
    full_name    = Column(String(255), nullable=True)
    email        = Column(String(254), unique=True, index=True, nullable=False)
    password     = Column(String, nullable=False)
    role         = Column(CaseInsensitiveEnum(UserRole), nullable=False, default=UserRole.CLIENT)
    phone        = Column(String(20), nullable=True)
    bio          = Column(Text, nullable=True)
    avatar_url   = Column(String(500), nullable=True)
    birth_date   = Column(Date, nullable=True)
    gender       = Column(String(32), nullable=True)

    city_id      = Column(Integer, ForeignKey("cities.id", ondelete="SET NULL"), nullable=True, index=True)
    address      = Column(String(255), nullable=True)
    postal_code  = Column(String(10), nullable=True)
    latitude     = Column(Float, nullable=True)
    longitude    = Column(Float, nullable=True)

    email_verified    = Column(Boolean, default=False, nullable=False)
    email_verified_at = Column(DateTime, nullable=True)
    phone_verified    = Column(Boolean, default=False, nullable=False)
    phone_verified_at = Column(DateTime, nullable=True)
    is_active         = Column(Boolean, default=True, nullable=False)
    last_login_at     = Column(DateTime, nullable=True)

    # Session/refresh token hardening
    refresh_token_hash = Column(String, nullable=True)
    refresh_token_expires_at = Column(DateTime, nullable=True)

    city = relationship("City", back_populates="users")

    # If this user is an artist, they get exactly one profile here
    artist_profile = relationship(
        "Artist",
        back_populates="user",
        foreign_keys="Artist.user_id",
        uselist=False,
        cascade="all, delete-orphan",
    )

    @property
    def display_name(self) -> str:
        if self.full_name:
            return self.full_name
        return (self.email or "").split("@", 1)[0]

    @property
    def is_artist(self) -> bool:
        return self.role == UserRole.ARTIST

    @property
    def is_profile_complete(self) -> bool:
        return bool(self.full_name and self.phone and self.city_id)

    @property
    def is_fully_verified(self) -> bool:
        return bool(self.email_verified and self.phone_verified)

    @property
    def age(self) -> int | None:
        if not self.birth_date:
            return None
        today = date.today()
        years = today.year - self.birth_date.year
        if (today.month, today.day) < (self.birth_date.month, self.birth_date.day):
            years -= 1
        return years

    def mark_email_verified(self) -> None:
        self.email_verified = True
        self.email_verified_at = utcnow()

    def mark_phone_verified(self) -> None:
        self.phone_verified = True
        self.phone_verified_at = utcnow()

    def update_last_login(self) -> None:
        self.last_login_at = utcnow()

    def deactivate(self) -> None:
        self.is_active = False
        self.refresh_token_hash = None
        self.refresh_token_expires_at = None

    def change_email(self, email: str) -> None:
        """Switch to a new address; it has to be verified again."""
        if email == self.email:
            return
        self.email = email
        self.email_verified = False
        self.email_verified_at = None
