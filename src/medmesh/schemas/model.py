"""Schemas for submitting, browsing and viewing models."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field, field_validator

from .common import APIModel, AuthorSummary, Pagination


class ModelCreate(APIModel):
    """Payload for submitting a new model for review.

    Length and asset constraints are enforced by the moderation service so
    that they surface as 400 responses with a readable message.
    """

    title: str = Field(..., description="Display title")
    description: str = Field(..., description="Long-form description")
    category: str = Field(..., description="Medical category, e.g. Cardiology")
    tags: list[str] = Field(default_factory=list, description="Free-form tags")
    visibility: str = Field("public", description="public or private")
    nsfw_content: bool = False
    allow_adaptations: bool = True
    allow_commercial_use: bool = False
    allow_sharing: bool = True
    community_post: bool = True
    cover_image_url: str | None = None
    gallery_image_urls: list[str] = Field(default_factory=list)
    model_file_url: str | None = None

    @field_validator("tags", mode="before")
    @classmethod
    def _split_tags(cls, value: object) -> object:
        if value is None:
            return []
        if isinstance(value, str):
            value = value.split(",")
        if isinstance(value, list):
            return [str(tag).strip() for tag in value if str(tag).strip()]
        return value


class ModelCreated(APIModel):
    """Identifiers returned after a successful submission."""

    id: str
    status: str


class LicenseInfo(APIModel):
    """License terms chosen by the author."""

    type: str = "custom"
    allow_commercial_use: bool
    allow_sharing: bool
    allow_adaptations: bool


class ModelPermissionsOut(APIModel):
    """What the current viewer may do with a model."""

    can_edit: bool
    can_download: bool
    can_like: bool
    can_share: bool
    is_owner: bool


class RelatedModel(APIModel):
    """Compact card for a model in the same category."""

    id: str
    title: str
    thumbnail_url: str | None
    likes: int
    downloads: int
    views: int
    author: AuthorSummary


class ModelTimestamps(APIModel):
    created_at: datetime
    updated_at: datetime
    published_at: datetime | None = None


class ModelDetail(APIModel):
    """Full model page payload."""

    id: str
    title: str
    description: str
    category: str
    tags: list[str]
    cover_image_url: str | None
    gallery_image_urls: list[str]
    model_file_url: str | None
    likes: int
    downloads: int
    views: int
    status: str
    visibility: str
    nsfw_content: bool
    license: LicenseInfo
    author: AuthorSummary
    timestamps: ModelTimestamps
    related_models: list[RelatedModel]
    permissions: ModelPermissionsOut


class ModelCard(APIModel):
    """Feed and profile listing entry."""

    id: str
    title: str
    description: str
    category: str
    tags: list[str]
    thumbnail_url: str | None
    likes: int
    downloads: int
    views: int
    status: str
    author: AuthorSummary
    created_at: datetime
    published_at: datetime | None = None
    rejection_reason: str | None = None
    admin_notes: str | None = None


class FeedResponse(APIModel):
    """Published model listing with search metadata."""

    models: list[ModelCard]
    category: str
    search: str | None
    pagination: Pagination
    is_empty: bool
