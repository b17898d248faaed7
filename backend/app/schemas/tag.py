from typing import Dict, Optional

from pydantic import BaseModel, Field

from ..models.tag import TagCategory


class TagCreate(BaseModel):
    name: str = Field(min_length=2, max_length=100)
    description: Optional[str] = None
    category: TagCategory = TagCategory.CUSTOM
    parent_tag_id: Optional[int] = None
    color_code: Optional[str] = Field(default=None, pattern=r"^#[0-9a-fA-F]{6}$")
    icon_name: Optional[str] = Field(default=None, max_length=50)
    display_order: int = 0
    is_featured: bool = False


class TagResponse(BaseModel):
    id: int
    name: str
    slug: str
    display_name: str
    description: Optional[str] = None
    category: TagCategory
    parent_tag_id: Optional[int] = None
    level: int = 0
    is_hierarchical: bool
    color_code: Optional[str] = None
    icon_name: Optional[str] = None
    usage_count: int = 0
    popularity_score: float = 0
    is_popular: bool
    is_featured: bool
    is_trending: bool
    is_approved: bool
    translations: Optional[Dict[str, Dict[str, Optional[str]]]] = None

    model_config = {"from_attributes": True}


class TranslationUpdate(BaseModel):
    locale: str = Field(min_length=2, max_length=5, pattern=r"^[a-z]{2}(-[A-Z]{2})?$")
    name: str = Field(min_length=1, max_length=100)
    description: Optional[str] = None
