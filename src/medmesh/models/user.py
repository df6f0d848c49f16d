# src/medmesh/models/user.py
"""SQLAlchemy models for marketplace accounts."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import DateTime, Enum, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from medmesh.db.session import Base
from medmesh.db.time import utcnow
from medmesh.models.enums import UserRole, enum_values


def new_id() -> str:
    """Return an opaque identifier for new rows."""
    return uuid.uuid4().hex


class User(Base):
    """An account that can author, like and download models."""

    __tablename__ = "user_account"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    email: Mapped[str] = mapped_column(String(320), unique=True, nullable=False)
    username: Mapped[str | None] = mapped_column(String(50), unique=True, nullable=True)
    display_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    avatar_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    bio: Mapped[str | None] = mapped_column(Text, nullable=True)
    region: Mapped[str | None] = mapped_column(String(100), nullable=True)
    role: Mapped[UserRole] = mapped_column(
        Enum(UserRole, name="user_role", native_enum=False, values_callable=enum_values),
        nullable=False,
        default=UserRole.USER,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    models: Mapped[list["MedicalModel"]] = relationship(  # noqa: F821
        "MedicalModel",
        back_populates="author",
        cascade="all, delete-orphan",
    )

    @property
    def is_admin(self) -> bool:
        """Return True when the account may moderate submissions."""
        return self.role == UserRole.ADMIN

    @property
    def public_name(self) -> str:
        """Display name with the anonymous fallback."""
        return self.display_name or "Anonymous User"

    @property
    def public_username(self) -> str:
        """Username with a fallback derived from the account id."""
        return self.username or f"user_{self.id[:8]}"
