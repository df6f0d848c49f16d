# src/medmesh/models/medical_model.py
"""SQLAlchemy model for submitted 3D models and their moderation state."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import JSON, Boolean, DateTime, Enum, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from medmesh.db.session import Base
from medmesh.db.time import utcnow
from medmesh.models.enums import ModelStatus, Visibility, enum_values
from medmesh.models.user import User, new_id


class MedicalModel(Base):
    """A 3D model submitted by an author.

    Records start in ``verification`` and are moved to ``published`` or
    ``rejected`` by a moderator. The ``likes`` and ``downloads`` counters are
    caches of the ``model_like`` and ``model_download`` tables and are only
    changed in the same transaction that writes those rows.
    """

    __tablename__ = "model"
    __table_args__ = (
        Index("ix_model_status_created_at", "status", "created_at"),
        Index("ix_model_author_id", "author_id"),
    )

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    author_id: Mapped[str] = mapped_column(
        String(32),
        ForeignKey("user_account.id", ondelete="CASCADE"),
        nullable=False,
    )

    title: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(String(100), nullable=False)
    tags: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    visibility: Mapped[Visibility] = mapped_column(
        Enum(Visibility, name="model_visibility", native_enum=False, values_callable=enum_values),
        nullable=False,
        default=Visibility.PUBLIC,
    )
    nsfw_content: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    community_post: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    # License terms.
    allow_adaptations: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    allow_commercial_use: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    allow_sharing: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    # Asset locations; the files themselves live in external storage.
    cover_image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    gallery_image_urls: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    model_file_url: Mapped[str | None] = mapped_column(Text, nullable=True)

    status: Mapped[ModelStatus] = mapped_column(
        Enum(ModelStatus, name="model_status", native_enum=False, values_callable=enum_values),
        nullable=False,
        default=ModelStatus.VERIFICATION,
    )
    # Set iff status == rejected.
    rejection_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    admin_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    reviewed_by: Mapped[str | None] = mapped_column(String(32), nullable=True)
    reviewed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    # Set iff status == published.
    published_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    likes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    downloads: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    views: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    author: Mapped[User] = relationship("User", back_populates="models")

    @property
    def is_publicly_visible(self) -> bool:
        """Return True when anyone may view and interact with the model."""
        return self.status == ModelStatus.PUBLISHED and self.visibility == Visibility.PUBLIC

    def is_owned_by(self, user: User | None) -> bool:
        """Return True when ``user`` authored this model."""
        return user is not None and user.id == self.author_id
