from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from ..models.tattoo import BodyPlacement, ColorType, SizeCategory, TattooStatus, TattooStyle


class TattooBase(BaseModel):
    title: Optional[str] = Field(default=None, min_length=2, max_length=255)
    description: Optional[str] = None
    original_filename: Optional[str] = Field(default=None, max_length=255)
    storage_path: Optional[str] = Field(default=None, max_length=500)
    image_variants: Optional[Dict[str, str]] = None
    primary_color: Optional[str] = Field(default=None, pattern=r"^#[0-9a-fA-F]{6}$")
    file_size: Optional[int] = Field(default=None, ge=0)
    dimensions: Optional[Dict[str, float]] = None
    content_type: Optional[str] = Field(default=None, max_length=50)
    style: Optional[TattooStyle] = None
    body_placement: Optional[BodyPlacement] = None
    size_category: Optional[SizeCategory] = None
    color_type: Optional[ColorType] = None
    session_count: Optional[int] = Field(default=None, ge=1)
    estimated_hours: Optional[float] = Field(default=None, ge=0)
    is_portfolio_highlight: Optional[bool] = None
    display_order: Optional[int] = None
    allows_inquiries: Optional[bool] = None
    shows_pricing: Optional[bool] = None
    price_estimate: Optional[float] = Field(default=None, ge=0)
    price_currency: Optional[str] = Field(default=None, min_length=3, max_length=3)
    alt_text: Optional[str] = Field(default=None, max_length=500)
    search_keywords: Optional[List[str]] = None
    meta_title: Optional[str] = Field(default=None, max_length=255)
    meta_description: Optional[str] = None

    # Columns that are NOT NULL; omit them instead of sending null
    @field_validator(
        "title",
        "is_portfolio_highlight",
        "display_order",
        "allows_inquiries",
        "shows_pricing",
        "price_currency",
    )
    @classmethod
    def not_null(cls, v, info):
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return v


class TattooCreate(TattooBase):
    title: str = Field(min_length=2, max_length=255)


class TattooUpdate(TattooBase):
    pass


class TattooResponse(BaseModel):
    id: int
    artist_id: int
    title: str
    slug: str
    description: Optional[str] = None
    thumbnail_url: Optional[str] = None
    display_url: Optional[str] = None
    full_size_url: Optional[str] = None
    aspect_ratio: Optional[float] = None
    primary_color: Optional[str] = None
    style: Optional[TattooStyle] = None
    body_placement: Optional[BodyPlacement] = None
    size_category: Optional[SizeCategory] = None
    color_type: Optional[ColorType] = None
    status: TattooStatus
    is_published: bool
    is_featured: bool
    view_count: int = 0
    like_count: int = 0
    share_count: int = 0
    engagement_score: float = 0
    is_high_engagement: bool
    allows_inquiries: bool
    estimated_price_range: Optional[str] = None
    alt_text: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    published_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class TattooTagsAttach(BaseModel):
    slugs: List[str] = Field(min_length=1, max_length=20)
    primary: Optional[str] = None
