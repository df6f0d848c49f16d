"""Moderation-related Pydantic schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import Field

from .common import APIModel, AuthorSummary, Pagination


class ReviewAction(APIModel):
    """Admin disposition of a submitted model."""

    action: Literal["approve", "reject"]
    rejection_reason: str | None = Field(None, description="Required when rejecting")
    admin_notes: str | None = None


class ReviewStats(APIModel):
    """Queue totals over every model regardless of the active filter."""

    pending: int
    approved: int
    rejected: int
    total: int


class ReviewAuthor(AuthorSummary):
    email: str


class ReviewItem(APIModel):
    """Queue entry shown on the admin dashboard."""

    id: str
    title: str
    description: str
    category: str
    tags: list[str]
    cover_image_url: str | None
    status: str
    author: ReviewAuthor
    created_at: datetime
    updated_at: datetime
    rejection_reason: str | None = None
    admin_notes: str | None = None


class ReviewListResponse(APIModel):
    models: list[ReviewItem]
    stats: ReviewStats
    pagination: Pagination


class AdminInfo(APIModel):
    rejection_reason: str | None
    admin_notes: str | None
    reviewed_by: str | None
    reviewed_at: datetime | None


class ReviewDetail(ReviewItem):
    """Single model with everything a moderator needs to decide."""

    model_file_url: str | None
    gallery_image_urls: list[str]
    visibility: str
    nsfw_content: bool
    likes: int
    downloads: int
    views: int
    like_count: int
    download_count: int
    published_at: datetime | None
    admin_info: AdminInfo


class ReviewResult(APIModel):
    """Outcome of an approve or reject action."""

    id: str
    title: str
    status: str
    author: str
    action: str
    reviewed_at: datetime | None
    message: str
