# backend/app/schemas/user.py

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from ..models.user import UserRole
from ..utils.auth import PASSWORD_MAX_LENGTH, PASSWORD_MIN_LENGTH, password_problems


class UserBase(BaseModel):
    email: EmailStr
    full_name: Optional[str] = Field(default=None, max_length=255)
    role: UserRole = UserRole.CLIENT


class UserCreate(UserBase):
    password: str = Field(min_length=PASSWORD_MIN_LENGTH, max_length=PASSWORD_MAX_LENGTH)

    @field_validator("password")
    @classmethod
    def check_complexity(cls, v: str) -> str:
        problems = password_problems(v)
        if problems:
            raise ValueError("Password must contain " + ", ".join(problems))
        return v

    @field_validator("full_name")
    @classmethod
    def strip_name(cls, v: Optional[str]) -> Optional[str]:
        return v.strip() or None if v else None


class UserUpdate(BaseModel):
    full_name: Optional[str] = Field(default=None, max_length=255)
    phone: Optional[str] = Field(default=None, max_length=20)
    bio: Optional[str] = None
    avatar_url: Optional[str] = Field(default=None, max_length=500)
    birth_date: Optional[date] = None
    gender: Optional[str] = Field(default=None, max_length=32)
    city_id: Optional[int] = None
    address: Optional[str] = Field(default=None, max_length=255)
    postal_code: Optional[str] = Field(default=None, max_length=10)


class UserResponse(UserBase):
    id: int
    display_name: str
    phone: Optional[str] = None
    avatar_url: Optional[str] = None
    city_id: Optional[int] = None
    is_active: bool
    email_verified: bool
    is_profile_complete: bool
    last_login_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


# TokenData for extracting "sub" (email) from JWT
class TokenData(BaseModel):
    email: Optional[str] = None


class RefreshRequest(BaseModel):
    token: Optional[str] = None
