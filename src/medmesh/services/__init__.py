# src/medmesh/services/__init__.py
"""Business logic services for the MedMesh application."""

from .engagement import DownloadOutcome, EngagementService
from .moderation import ModelPermissions, ModelView, ModerationService, ReviewStats

__all__ = [
    "DownloadOutcome",
    "EngagementService",
    "ModelPermissions",
    "ModelView",
    "ModerationService",
    "ReviewStats",
]
