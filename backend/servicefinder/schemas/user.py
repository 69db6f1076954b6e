"""Account schemas. Signup is a tagged union on ``role``: each variant
carries only the fields its role needs."""

import uuid
from datetime import datetime
from typing import Literal, Union

from pydantic import BaseModel, EmailStr, Field, field_validator


def _clean_entries(values: list[str]) -> list[str]:
    """Trim entries, drop blanks and repeats. First occurrence keeps its slot."""
    cleaned: list[str] = []
    for value in values:
        value = value.strip()
        if value and value not in cleaned:
            cleaned.append(value)
    return cleaned


class _SignupBase(BaseModel):
    email: EmailStr = Field(..., max_length=255)
    password: str = Field(..., min_length=6, max_length=128)
    contact_number: str | None = Field(default=None, max_length=32)

    @field_validator("contact_number")
    @classmethod
    def _blank_contact_is_none(cls, v: str | None) -> str | None:
        if v is None:
            return None
        return v.strip() or None


class SeekerSignup(_SignupBase):
    role: Literal["service_seeker"]
    place: str = Field(..., max_length=255)

    @field_validator("place")
    @classmethod
    def _place_required(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Please enter your location")
        return v


class ProviderSignup(_SignupBase):
    role: Literal["service_provider"]
    skills: list[str]
    locations: list[str]
    availability: str | None = Field(default=None, max_length=255)

    @field_validator("skills")
    @classmethod
    def _skills_required(cls, v: list[str]) -> list[str]:
        cleaned = _clean_entries(v)
        if not cleaned:
            raise ValueError("Please add at least one skill")
        return cleaned

    @field_validator("locations")
    @classmethod
    def _locations_required(cls, v: list[str]) -> list[str]:
        cleaned = _clean_entries(v)
        if not cleaned:
            raise ValueError("Please add at least one location")
        return cleaned

    @field_validator("availability")
    @classmethod
    def _blank_availability_is_none(cls, v: str | None) -> str | None:
        if v is None:
            return None
        return v.strip() or None


SignupPayload = Union[SeekerSignup, ProviderSignup]


class LoginRequest(BaseModel):
    email: str = Field(..., max_length=255)
    password: str = Field(..., max_length=128)


class LoginResponse(BaseModel):
    token: str
    user_id: uuid.UUID
    role: str


class UserRead(BaseModel):
    id: uuid.UUID
    email: str
    status: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class SessionRead(BaseModel):
    user_id: uuid.UUID
    email: str
    role: str
    expires_at: datetime
