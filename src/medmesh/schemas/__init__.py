# src/medmesh/schemas/__init__.py
"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .common import APIModel, AuthorSummary, Pagination
from .engagement import ActionMetadata, ModelActionRequest, ModelActionResponse
from .model import FeedResponse, ModelCard, ModelCreate, ModelCreated, ModelDetail
from .moderation import ReviewAction, ReviewDetail, ReviewListResponse, ReviewResult, ReviewStats
from .user import (
    AuthorModelsResponse,
    AvailabilityRequest,
    AvailabilityResponse,
    ProfileResponse,
    RoleCheckResponse,
    SettingsUpdateRequest,
    SettingsUpdateResponse,
    UserSettings,
)

__all__ = [
    "APIModel", "AuthorSummary", "Pagination",
    "ActionMetadata", "ModelActionRequest", "ModelActionResponse",
    "FeedResponse", "ModelCard", "ModelCreate", "ModelCreated", "ModelDetail",
    "ReviewAction", "ReviewDetail", "ReviewListResponse", "ReviewResult", "ReviewStats",
    "AuthorModelsResponse", "AvailabilityRequest", "AvailabilityResponse",
    "ProfileResponse", "RoleCheckResponse",
    "SettingsUpdateRequest", "SettingsUpdateResponse", "UserSettings",
]
