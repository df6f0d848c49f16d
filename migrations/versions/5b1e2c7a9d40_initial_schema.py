"""initial schema

Revision ID: 5b1e2c7a9d40
Revises:
Create Date: 2026-10-18 09:12:44.310512

"""
from __future__ import annotations

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "5b1e2c7a9d40"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

MODEL_STATUS = sa.Enum(
    "verification", "published", "rejected", name="model_status", native_enum=False
)
MODEL_VISIBILITY = sa.Enum("public", "private", name="model_visibility", native_enum=False)
USER_ROLE = sa.Enum("USER", "ADMIN", name="user_role", native_enum=False)


def upgrade() -> None:
    """Create accounts, models and engagement tables."""
    op.create_table(
        "user_account",
        sa.Column("id", sa.String(length=32), nullable=False),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("username", sa.String(length=50), nullable=True),
        sa.Column("display_name", sa.String(length=100), nullable=True),
        sa.Column("avatar_url", sa.Text(), nullable=True),
        sa.Column("bio", sa.Text(), nullable=True),
        sa.Column("region", sa.String(length=100), nullable=True),
        sa.Column("role", USER_ROLE, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
        sa.UniqueConstraint("username"),
    )

    op.create_table(
        "model",
        sa.Column("id", sa.String(length=32), nullable=False),
        sa.Column("author_id", sa.String(length=32), nullable=False),
        sa.Column("title", sa.String(length=100), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("category", sa.String(length=100), nullable=False),
        sa.Column("tags", sa.JSON(), nullable=False),
        sa.Column("visibility", MODEL_VISIBILITY, nullable=False),
        sa.Column("nsfw_content", sa.Boolean(), nullable=False),
        sa.Column("community_post", sa.Boolean(), nullable=False),
        sa.Column("allow_adaptations", sa.Boolean(), nullable=False),
        sa.Column("allow_commercial_use", sa.Boolean(), nullable=False),
        sa.Column("allow_sharing", sa.Boolean(), nullable=False),
        sa.Column("cover_image_url", sa.Text(), nullable=True),
        sa.Column("gallery_image_urls", sa.JSON(), nullable=False),
        sa.Column("model_file_url", sa.Text(), nullable=True),
        sa.Column("status", MODEL_STATUS, nullable=False),
        sa.Column("rejection_reason", sa.Text(), nullable=True),
        sa.Column("admin_notes", sa.Text(), nullable=True),
        sa.Column("reviewed_by", sa.String(length=32), nullable=True),
        sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("published_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("likes", sa.Integer(), nullable=False),
        sa.Column("downloads", sa.Integer(), nullable=False),
        sa.Column("views", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["author_id"], ["user_account.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_model_status_created_at", "model", ["status", "created_at"])
    op.create_index("ix_model_author_id", "model", ["author_id"])

    op.create_table(
        "model_like",
        sa.Column("user_id", sa.String(length=32), nullable=False),
        sa.Column("model_id", sa.String(length=32), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["user_account.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["model_id"], ["model.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("user_id", "model_id"),
    )

    op.create_table(
        "model_download",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.String(length=32), nullable=False),
        sa.Column("model_id", sa.String(length=32), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["user_account.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["model_id"], ["model.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_model_download_user_model_created",
        "model_download",
        ["user_id", "model_id", "created_at"],
    )


def downgrade() -> None:
    """Drop every MedMesh table."""
    op.drop_index("ix_model_download_user_model_created", table_name="model_download")
    op.drop_table("model_download")
    op.drop_table("model_like")
    op.drop_index("ix_model_author_id", table_name="model")
    op.drop_index("ix_model_status_created_at", table_name="model")
    op.drop_table("model")
    op.drop_table("user_account")
