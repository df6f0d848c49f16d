# src/medmesh/models/engagement.py
"""Models capturing likes and downloads on published models."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from medmesh.db.session import Base
from medmesh.db.time import utcnow


class ModelLike(Base):
    """A user currently liking a model."""

    __tablename__ = "model_like"

    # Composite primary key prevents duplicate likes from the same user.
    user_id: Mapped[str] = mapped_column(
        String(32),
        ForeignKey("user_account.id", ondelete="CASCADE"),
        primary_key=True,
    )
    model_id: Mapped[str] = mapped_column(
        String(32),
        ForeignKey("model.id", ondelete="CASCADE"),
        primary_key=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )


class ModelDownload(Base):
    """Append-only record of a counted download."""

    __tablename__ = "model_download"
    __table_args__ = (
        Index("ix_model_download_user_model_created", "user_id", "model_id", "created_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(
        String(32),
        ForeignKey("user_account.id", ondelete="CASCADE"),
        nullable=False,
    )
    model_id: Mapped[str] = mapped_column(
        String(32),
        ForeignKey("model.id", ondelete="CASCADE"),
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
