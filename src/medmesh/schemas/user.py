"""User-facing profile schemas."""

from __future__ import annotations

import re
from datetime import datetime
from typing import Literal

from pydantic import Field, field_validator

from .common import APIModel, Pagination
from .model import ModelCard

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class ProfileStats(APIModel):
    published_models: int
    total_likes: int
    total_downloads: int


class ProfileResponse(APIModel):
    """Public profile with aggregate engagement on published models."""

    id: str
    name: str
    username: str
    avatar_url: str | None
    bio: str | None
    region: str | None
    member_since: datetime
    stats: ProfileStats


class AuthorModelsResponse(APIModel):
    models: list[ModelCard]
    pagination: Pagination
    status: str
    sort_by: str
    is_owner: bool


class RoleCheckResponse(APIModel):
    is_admin: bool
    role: str
    email: str


class UserSettings(APIModel):
    """The signed-in user's editable account fields."""

    display_name: str | None
    username: str | None
    email: str
    bio: str | None
    avatar_url: str | None
    region: str | None
    member_since: datetime


class SettingsUpdateRequest(APIModel):
    """Partial update of account settings; omitted fields stay unchanged."""

    display_name: str | None = Field(None, min_length=2, max_length=50)
    username: str | None = Field(
        None, min_length=3, max_length=20, pattern=r"^[a-zA-Z0-9_]+$"
    )
    email: str | None = Field(None, max_length=320)
    bio: str | None = Field(None, max_length=500)
    region: str | None = Field(None, max_length=100)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str | None) -> str | None:
        """Require a plausible ``local@domain.tld`` address."""
        if v is None:
            return v
        v = v.strip()
        if not EMAIL_PATTERN.match(v):
            raise ValueError("Email must be a valid address")
        return v


class SettingsUpdateResponse(APIModel):
    message: str
    user_settings: UserSettings


class AvailabilityRequest(APIModel):
    field: Literal["username", "email"]
    value: str = Field(..., min_length=1)


class AvailabilityResponse(APIModel):
    available: bool
    message: str
