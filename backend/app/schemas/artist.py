# app/schemas/artist.py

from datetime import date, datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from ..models.artist import ExperienceLevel, SalonRelationship
from ..models.verification_status import VerificationStatus


#
# ─── 1. SHARED FIELDS FOR CREATION/UPDATE ────────────────────────────────
#
class ArtistBase(BaseModel):
    stage_name: Optional[str] = Field(default=None, min_length=2, max_length=100)
    bio: Optional[str] = None
    short_bio: Optional[str] = Field(default=None, max_length=500)
    specialty: Optional[str] = Field(default=None, max_length=100)
    years_experience: Optional[int] = Field(default=None, ge=0, le=80)
    started_tattooing_at: Optional[date] = None
    experience_level: Optional[ExperienceLevel] = None
    art_styles: Optional[List[str]] = None
    city_id: Optional[int] = None
    accepts_bookings: Optional[bool] = None
    appointment_only: Optional[bool] = None
    is_accepting_new_clients: Optional[bool] = None
    min_price: Optional[float] = Field(default=None, ge=0)
    max_price: Optional[float] = Field(default=None, ge=0)
    currency: Optional[str] = Field(default=None, min_length=3, max_length=3)
    availability: Optional[Dict[str, object]] = None
    portfolio_images: Optional[List[str]] = None
    instagram_handle: Optional[str] = Field(default=None, max_length=100)
    instagram_url: Optional[str] = Field(default=None, max_length=500)
    website: Optional[str] = Field(default=None, max_length=500)
    social_links: Optional[Dict[str, str]] = None
    has_health_certificate: Optional[bool] = None
    has_professional_insurance: Optional[bool] = None
    health_certificate_expires_at: Optional[date] = None

    @field_validator("art_styles")
    @classmethod
    def normalize_styles(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        if v is None:
            return v
        seen: List[str] = []
        for style in v:
            s = style.strip().lower()
            if s and s not in seen:
                seen.append(s)
        return seen

    @field_validator("instagram_handle")
    @classmethod
    def strip_at(cls, v: Optional[str]) -> Optional[str]:
        return v.strip().lstrip("@") or None if v else v

    @field_validator(
        "stage_name",
        "currency",
        "accepts_bookings",
        "appointment_only",
        "is_accepting_new_clients",
        "has_health_certificate",
        "has_professional_insurance",
    )
    @classmethod
    def not_null(cls, v, info):
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return v

    @model_validator(mode="after")
    def check_price_order(self) -> "ArtistBase":
        if self.min_price is not None and self.max_price is not None and self.min_price > self.max_price:
            raise ValueError("min_price must not exceed max_price")
        return self


class ArtistCreate(ArtistBase):
    stage_name: str = Field(min_length=2, max_length=100)


class ArtistUpdate(ArtistBase):
    pass


#
# ─── 2. RESPONSE MODEL(S) ──────────────────────────────────────────────────
#
class ArtistSummary(BaseModel):
    id: int
    stage_name: str
    slug: str
    short_bio: Optional[str] = None
    specialty: Optional[str] = None
    art_styles: Optional[List[str]] = None
    city_id: Optional[int] = None
    price_range: Optional[str] = None
    experience_level: ExperienceLevel
    verification_status: VerificationStatus
    is_verified: bool
    is_featured: bool
    is_accepting_new_clients: bool
    average_rating: float = 0
    total_reviews: int = 0
    total_tattoos: int = 0

    model_config = {"from_attributes": True}


class ArtistSalonResponse(BaseModel):
    salon_id: int
    salon_name: str
    salon_slug: str
    relationship_type: SalonRelationship
    is_active: bool
    commission_rate: Optional[float] = None
    hourly_rate: Optional[float] = None
    started_working_at: Optional[date] = None
    ended_working_at: Optional[date] = None


class ArtistResponse(ArtistSummary):
    user_id: int
    bio: Optional[str] = None
    years_experience: Optional[int] = None
    experience_years: Optional[int] = None
    is_experienced: bool
    primary_salon_id: Optional[int] = None
    accepts_bookings: bool
    appointment_only: bool
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    currency: str = "EUR"
    availability: Optional[dict] = None
    portfolio_images: Optional[List[str]] = None
    instagram_handle: Optional[str] = None
    instagram_url: Optional[str] = None
    website: Optional[str] = None
    social_links: Optional[dict] = None
    has_health_credentials: bool
    has_professional_insurance: bool
    is_profile_complete: bool
    profile_views: int = 0
    verified_at: Optional[datetime] = None
    last_activity_at: Optional[datetime] = None
    salons: List[ArtistSalonResponse] = Field(default_factory=list)


class ArtistSalonCreate(BaseModel):
    salon_id: int
    relationship_type: SalonRelationship = SalonRelationship.GUEST
    schedule: Optional[Dict[str, object]] = None
    hourly_rate: Optional[float] = Field(default=None, ge=0)
    commission_rate: Optional[float] = Field(default=None, ge=0, le=100)
    started_working_at: Optional[date] = None
    notes: Optional[str] = None
    can_book_appointments: bool = True
    can_manage_schedule: bool = False
    has_salon_key: bool = False


class PrimarySalonUpdate(BaseModel):
    salon_id: int
