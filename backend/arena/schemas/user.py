"""User schemas"""

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator
from typing import Optional
from enum import Enum


class Avatar(str, Enum):
    """Playable avatars"""
    WITCH = "witch"
    ARCHER = "archer"
    BOXER = "boxer"
    NINJA = "ninja"


def _trimmed_name(value: str) -> str:
    value = value.strip()
    if not 6 <= len(value) <= 100:
        raise ValueError("name must be between 6 and 100 characters")
    return value


class SignupRequest(BaseModel):
    """User signup schema"""
    model_config = ConfigDict(extra="forbid")

    name: str
    email: EmailStr = Field(..., max_length=255)
    password: str = Field(..., min_length=6, max_length=100)
    avatar: Avatar

    @field_validator("name")
    @classmethod
    def name_length(cls, v):
        return _trimmed_name(v)


class LoginRequest(BaseModel):
    """User login schema"""
    model_config = ConfigDict(extra="forbid")

    email: EmailStr = Field(..., max_length=255)
    password: str = Field(..., min_length=6, max_length=100)


class UpdateUserRequest(BaseModel):
    """Profile update schema - at least one field"""
    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = None
    email: Optional[EmailStr] = Field(None, max_length=255)

    @field_validator("name")
    @classmethod
    def name_length(cls, v):
        return _trimmed_name(v) if v is not None else v

    @model_validator(mode="after")
    def at_least_one_field(self):
        if self.name is None and self.email is None:
            raise ValueError("at least one of name, email is required")
        return self


class UserProfile(BaseModel):
    """Public user profile"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    name: str
    avatar: str


class SessionPayload(BaseModel):
    """Session info returned after login or refresh"""
    expiry: int
    name: str
    avatar: str
