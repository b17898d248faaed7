import re
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from ..models.contact_inquiry import InquirySource, InquiryStatus, ProjectType

# French landline/mobile numbers, with or without +33/0033 prefix
FRENCH_PHONE_RE = re.compile(r"^(?:(?:\+|00)33|0)\s*[1-9](?:[\s.-]*\d{2}){4}$")

TattooSize = Literal["small", "medium", "large", "full-sleeve", "full-back"]


def _strip(v: Optional[str]) -> Optional[str]:
    if v is None:
        return None
    v = v.strip()
    return v or None


class _InquiryContact(BaseModel):
    email: EmailStr
    artist_id: Optional[int] = Field(default=None, gt=0)
    tattoo_id: Optional[int] = Field(default=None, gt=0)

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v):
        return v.strip().lower() if isinstance(v, str) else v


class ContactInquiryCreate(_InquiryContact):
    full_name: str = Field(min_length=2, max_length=100)
    phone: Optional[str] = None
    subject: str = Field(min_length=5, max_length=200)
    message: str = Field(min_length=10, max_length=2000)
    project_type: ProjectType = ProjectType.QUESTION
    budget: Optional[str] = Field(default=None, max_length=50)
    preferred_date: Optional[str] = Field(default=None, max_length=100)
    location: Optional[str] = Field(default=None, max_length=200)
    tattoo_styles: Optional[List[str]] = None
    size: Optional[TattooSize] = None
    placement: Optional[str] = Field(default=None, max_length=100)
    has_existing_tattoos: bool = False

    @field_validator("full_name", "subject", "message", mode="before")
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("budget", "preferred_date", "location", "placement", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        return _strip(v) if isinstance(v, str) else v

    @field_validator("phone", mode="before")
    @classmethod
    def check_phone(cls, v):
        v = _strip(v) if isinstance(v, str) else v
        if v is None:
            return None
        if not FRENCH_PHONE_RE.match(v):
            raise ValueError("Phone number must be a valid French number")
        return v

    @field_validator("tattoo_styles")
    @classmethod
    def clean_styles(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        if v is None:
            return None
        cleaned = [s.strip() for s in v if s and s.strip()]
        return cleaned or None


class QuickInquiryCreate(_InquiryContact):
    name: str = Field(min_length=2, max_length=100)
    message: str = Field(min_length=10, max_length=1000)

    @field_validator("name", "message", mode="before")
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v


class InquiryStatusUpdate(BaseModel):
    status: InquiryStatus
    priority: Optional[int] = Field(default=None, ge=1, le=10)


class InquiryReply(BaseModel):
    message: str = Field(min_length=2, max_length=5000)


class BatchIds(BaseModel):
    ids: List[str] = Field(min_length=1, max_length=200)


class BatchStatusUpdate(BatchIds):
    status: InquiryStatus


class InquiryFilters(BaseModel):
    status: Optional[List[InquiryStatus]] = None
    project_type: Optional[List[ProjectType]] = None
    artist_id: Optional[int] = None
    is_read: Optional[bool] = None
    is_starred: Optional[bool] = None
    priority_min: Optional[int] = Field(default=None, ge=1, le=10)
    priority_max: Optional[int] = Field(default=None, ge=1, le=10)
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None
    search: Optional[str] = Field(default=None, max_length=200)


class ContactInquirySummary(BaseModel):
    """Confirmation view shared with the person who sent the inquiry."""

    id: str
    status: InquiryStatus
    created_at: datetime
    subject: str
    full_name: str
    email: str
    project_type: ProjectType
    time_ago: Optional[str] = None
    priority_label: str

    model_config = {"from_attributes": True}


class ContactInquiryResponse(ContactInquirySummary):
    phone: Optional[str] = None
    message: str
    budget: Optional[str] = None
    preferred_date: Optional[str] = None
    location: Optional[str] = None
    tattoo_styles: Optional[List[str]] = None
    size: Optional[str] = None
    placement: Optional[str] = None
    has_existing_tattoos: bool = False
    reference_images: Optional[List[str]] = None
    artist_id: Optional[int] = None
    tattoo_id: Optional[int] = None
    source: InquirySource
    priority: int
    is_read: bool
    is_starred: bool
    is_pending: bool
    is_urgent: bool
    first_replied_at: Optional[datetime] = None
    last_replied_at: Optional[datetime] = None
    replies_count: int = 0
    response_time_hours: Optional[float] = None
    updated_at: Optional[datetime] = None
