from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional
from datetime import datetime

from .profile import ProfileFields, ProfileResponse, SettingsResponse


# Token Schemas
class TokenData(BaseModel):
    user_id: Optional[int] = None


# Request Schemas
class RegisterRequest(ProfileFields):
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(..., min_length=6)

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, value):
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        return value.strip()


class LoginRequest(BaseModel):
    email: EmailStr
    password: str

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, value):
        if isinstance(value, str):
            return value.strip().lower()
        return value


# Response Schemas
class UserSummary(BaseModel):
    id: int
    name: str
    email: EmailStr
    profile: Optional[ProfileResponse] = None
    settings: SettingsResponse = SettingsResponse()
    created_at: Optional[datetime] = None
    last_active: Optional[datetime] = None


class AuthResponse(BaseModel):
    success: bool = True
    token: str
    token_type: str = "bearer"
    user: UserSummary


class MeResponse(BaseModel):
    success: bool = True
    user: UserSummary
