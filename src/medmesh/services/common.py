"""Lookups and paging helpers shared by the service modules."""
from __future__ import annotations

import math
from dataclasses import dataclass

from sqlalchemy.orm import Session, joinedload

from medmesh.core.errors import NotFoundError, ValidationError
from medmesh.models import MedicalModel, User


@dataclass(frozen=True)
class PageInfo:
    """Offset pagination state for a listing."""

    page: int
    limit: int
    total: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_prev(self) -> bool:
        return self.page > 1


def check_page(page: int, limit: int, max_limit: int) -> None:
    """Reject page/limit values outside the supported range."""
    if page < 1:
        raise ValidationError("Page must be 1 or greater")
    if not 1 <= limit <= max_limit:
        raise ValidationError(f"Limit must be between 1 and {max_limit}")


def get_model_or_404(db: Session, model_id: str, *, with_author: bool = False) -> MedicalModel:
    """Return a model by id or raise :class:`NotFoundError`."""
    query = db.query(MedicalModel)
    if with_author:
        query = query.options(joinedload(MedicalModel.author))
    model = query.filter(MedicalModel.id == model_id).first()
    if model is None:
        raise NotFoundError("Model not found")
    return model


def get_user_or_404(db: Session, user_id: str) -> User:
    """Return a user by id or raise :class:`NotFoundError`."""
    user = db.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user
