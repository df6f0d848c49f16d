"""Profile reads and account settings for users."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from medmesh.core.errors import ConflictError, ValidationError
from medmesh.db.session import transaction
from medmesh.models import MedicalModel, ModelStatus, User, Visibility
from medmesh.services.common import get_user_or_404

__all__ = [
    "ProfileSummary",
    "SETTINGS_FIELDS",
    "get_profile",
    "is_available",
    "update_settings",
]

logger = logging.getLogger(__name__)

SETTINGS_FIELDS = ("display_name", "username", "email", "bio", "region")

UNIQUE_FIELDS = {
    "username": (User.username, "Username is already taken"),
    "email": (User.email, "Email is already taken"),
}


@dataclass(frozen=True)
class ProfileSummary:
    user: User
    published_models: int
    total_likes: int
    total_downloads: int


def get_profile(db: Session, user_id: str) -> ProfileSummary:
    """Return a user with engagement totals over their public published models."""
    user = get_user_or_404(db, user_id)
    count, likes, downloads = db.query(
        func.count(MedicalModel.id),
        func.coalesce(func.sum(MedicalModel.likes), 0),
        func.coalesce(func.sum(MedicalModel.downloads), 0),
    ).filter(
        MedicalModel.author_id == user_id,
        MedicalModel.status == ModelStatus.PUBLISHED,
        MedicalModel.visibility == Visibility.PUBLIC,
    ).one()
    return ProfileSummary(
        user=user,
        published_models=int(count),
        total_likes=int(likes),
        total_downloads=int(downloads),
    )


def is_available(db: Session, field: str, value: str, user_id: str) -> bool:
    """Return True when no other account holds ``value`` for ``field``.

    The caller's own current value counts as available.
    """
    if field not in UNIQUE_FIELDS:
        raise ValidationError(f"Unknown field '{field}'")
    column, _ = UNIQUE_FIELDS[field]
    clash = db.query(User.id).filter(column == value, User.id != user_id).first()
    return clash is None


def update_settings(db: Session, user: User, changes: dict[str, Any]) -> User:
    """Apply a partial settings update to ``user``.

    Raises:
        ValidationError: If a field is not editable or email is cleared.
        ConflictError: If the username or email belongs to another account.
    """
    unknown = set(changes) - set(SETTINGS_FIELDS)
    if unknown:
        raise ValidationError(f"Unknown settings field(s): {', '.join(sorted(unknown))}")
    if "email" in changes and changes["email"] is None:
        raise ValidationError("Email cannot be removed")

    for field, (_, message) in UNIQUE_FIELDS.items():
        value = changes.get(field)
        if value is not None and not is_available(db, field, value, user.id):
            raise ConflictError(message)

    try:
        with transaction(db):
            for field, value in changes.items():
                setattr(user, field, value)
    except IntegrityError as err:
        # Another account claimed the value between the check and the commit.
        raise ConflictError("Username or email is already taken") from err

    logger.info("User %s updated settings: %s", user.id, ", ".join(sorted(changes)))
    return user
