# src/medmesh/models/__init__.py
"""SQLAlchemy models for the MedMesh application."""

from .engagement import ModelDownload, ModelLike
from .enums import ModelStatus, UserRole, Visibility
from .medical_model import MedicalModel
from .user import User

__all__ = [
    "MedicalModel",
    "ModelDownload", "ModelLike",
    "ModelStatus", "UserRole", "Visibility",
    "User",
]
