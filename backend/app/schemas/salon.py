from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from ..models.artist import SalonRelationship
from ..models.verification_status import VerificationStatus


class SalonBase(BaseModel):
    name: Optional[str] = Field(default=None, min_length=2, max_length=255)
    description: Optional[str] = None
    short_description: Optional[str] = Field(default=None, max_length=500)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(default=None, max_length=20)
    website: Optional[str] = Field(default=None, max_length=500)
    city_id: Optional[int] = None
    address: Optional[str] = Field(default=None, max_length=255)
    postal_code: Optional[str] = Field(default=None, max_length=10)
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)
    opening_hours: Optional[Dict[str, Optional[Dict[str, object]]]] = None
    services: Optional[List[str]] = None
    price_range_min: Optional[float] = Field(default=None, ge=0)
    price_range_max: Optional[float] = Field(default=None, ge=0)
    instagram_handle: Optional[str] = Field(default=None, max_length=100)
    facebook_url: Optional[str] = Field(default=None, max_length=500)
    tiktok_handle: Optional[str] = Field(default=None, max_length=100)
    gallery_images: Optional[List[str]] = None
    accepts_walk_ins: Optional[bool] = None
    appointment_required: Optional[bool] = None
    is_featured: Optional[bool] = None
    is_active: Optional[bool] = None
    priority: Optional[int] = None
    meta_title: Optional[str] = Field(default=None, max_length=255)
    meta_description: Optional[str] = None

    @field_validator(
        "name",
        "accepts_walk_ins",
        "appointment_required",
        "is_featured",
        "is_active",
        "priority",
    )
    @classmethod
    def not_null(cls, v, info):
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return v


class SalonCreate(SalonBase):
    name: str = Field(min_length=2, max_length=255)


class SalonUpdate(SalonBase):
    pass


class SalonResponse(BaseModel):
    id: int
    name: str
    slug: str
    short_description: Optional[str] = None
    city_id: Optional[int] = None
    address: Optional[str] = None
    postal_code: Optional[str] = None
    full_address: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    price_range: Optional[str] = None
    verification_status: VerificationStatus
    is_verified: bool
    is_featured: bool
    accepts_walk_ins: bool
    appointment_required: bool
    average_rating: float = 0
    total_reviews: int = 0
    total_artists: int = 0

    model_config = {"from_attributes": True}


class SalonArtist(BaseModel):
    id: int
    stage_name: str
    slug: str
    relationship_type: SalonRelationship


class SalonDetail(SalonResponse):
    description: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    website: Optional[str] = None
    opening_hours: Optional[dict] = None
    is_open: bool = False
    services: Optional[List[str]] = None
    gallery_images: Optional[List[str]] = None
    instagram_handle: Optional[str] = None
    facebook_url: Optional[str] = None
    tiktok_handle: Optional[str] = None
    verified_at: Optional[datetime] = None
    artists: List[SalonArtist] = Field(default_factory=list)


class SalonNearby(SalonResponse):
    distance_km: float


class VerificationUpdate(BaseModel):
    status: VerificationStatus
    notes: Optional[str] = Field(default=None, max_length=2000)


class SalonArtistLink(BaseModel):
    artist_id: int
    relationship_type: SalonRelationship = SalonRelationship.GUEST
