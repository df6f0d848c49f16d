"""Schemas for like, unlike and download actions."""

from __future__ import annotations

from typing import Literal

from pydantic import Field

from .common import APIModel


class ActionMetadata(APIModel):
    """Client provenance; logged but not interpreted."""

    user_agent: str | None = None
    timestamp: str | None = None
    source: str | None = None


class ModelActionRequest(APIModel):
    action: Literal["like", "unlike", "download"]
    metadata: ActionMetadata | None = None


class ModelActionResponse(APIModel):
    """Counter state after an action.

    ``likes`` is set for like/unlike; ``downloads``, ``counted`` and
    ``download_url`` for downloads.
    """

    action: str
    model_id: str
    likes: int | None = None
    liked: bool | None = None
    downloads: int | None = None
    counted: bool | None = None
    download_url: str | None = None
    message: str = Field(..., description="Human-readable outcome")
