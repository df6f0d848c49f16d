# src/medmesh/services/moderation.py
"""Moderation workflow for submitted models.

A model is created in ``verification`` and sits in the admin queue until a
moderator approves it (``published``) or rejects it with a reason
(``rejected``). Only published public models, or a model viewed by its own
author, are visible through :meth:`ModerationService.view`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from sqlalchemy import func, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from medmesh.core.errors import (
    ConflictError,
    PermissionDeniedError,
    ValidationError,
)
from medmesh.core.settings import settings
from medmesh.db.session import transaction
from medmesh.db.time import utcnow
from medmesh.models import (
    MedicalModel,
    ModelDownload,
    ModelLike,
    ModelStatus,
    User,
    Visibility,
)
from medmesh.schemas.model import ModelCreate
from medmesh.services.common import PageInfo, check_page, get_model_or_404, get_user_or_404

logger = logging.getLogger(__name__)

REVIEW_MAX_LIMIT = 100

# Queue filters; ``None`` means every status.
REVIEW_FILTERS: dict[str, ModelStatus | None] = {
    "all": None,
    "verification": ModelStatus.VERIFICATION,
    "published": ModelStatus.PUBLISHED,
    "rejected": ModelStatus.REJECTED,
}

REVIEW_SORTS = {
    "newest": (MedicalModel.created_at.desc(),),
    "oldest": (MedicalModel.created_at.asc(),),
    "category": (MedicalModel.category.asc(), MedicalModel.created_at.desc()),
}


@dataclass(frozen=True)
class ReviewStats:
    """Queue totals, always computed over the whole table."""

    pending: int
    approved: int
    rejected: int
    total: int


@dataclass(frozen=True)
class ReviewQueue:
    models: list[MedicalModel]
    stats: ReviewStats
    page: PageInfo


@dataclass(frozen=True)
class ReviewRecord:
    """A model plus edge counts for the admin detail page."""

    model: MedicalModel
    like_count: int
    download_count: int


@dataclass(frozen=True)
class ModelPermissions:
    """Actions available to a viewer on a model page."""

    can_edit: bool
    can_download: bool
    can_like: bool
    can_share: bool
    is_owner: bool

    @classmethod
    def for_viewer(cls, model: MedicalModel, viewer: User | None) -> ModelPermissions:
        is_owner = model.is_owned_by(viewer)
        public = model.is_publicly_visible
        return cls(
            can_edit=is_owner,
            can_download=public,
            can_like=viewer is not None and not is_owner,
            can_share=public,
            is_owner=is_owner,
        )


@dataclass(frozen=True)
class ModelView:
    """Result of viewing a model page.

    ``views`` already includes the current view when it was counted.
    """

    model: MedicalModel
    views: int
    permissions: ModelPermissions
    related: list[MedicalModel]


def _clean(text: str | None) -> str | None:
    if text is None:
        return None
    return text.strip() or None


def _validate_submission(payload: ModelCreate) -> dict[str, Any]:
    """Normalise a submission and enforce its constraints.

    Returns:
        Column values for the new :class:`MedicalModel`.

    Raises:
        ValidationError: If a length, enum or asset constraint is not met.
    """
    title = payload.title.strip()
    if not settings.title_min_length <= len(title) <= settings.title_max_length:
        raise ValidationError(
            f"Title must be between {settings.title_min_length} and "
            f"{settings.title_max_length} characters"
        )

    description = payload.description.strip()
    if not settings.description_min_length <= len(description) <= settings.description_max_length:
        raise ValidationError(
            f"Description must be between {settings.description_min_length} and "
            f"{settings.description_max_length} characters"
        )

    category = payload.category.strip()
    if not category:
        raise ValidationError("Category is required")

    try:
        visibility = Visibility(payload.visibility.strip().lower())
    except ValueError as err:
        raise ValidationError("Visibility must be 'public' or 'private'") from err

    cover_image_url = _clean(payload.cover_image_url)
    model_file_url = _clean(payload.model_file_url)
    gallery_image_urls = [url.strip() for url in payload.gallery_image_urls if url and url.strip()]
    if not (cover_image_url or gallery_image_urls or model_file_url):
        raise ValidationError(
            "At least one file (cover image, gallery image, or model file) is required"
        )

    return {
        "title": title,
        "description": description,
        "category": category,
        "tags": list(dict.fromkeys(payload.tags)),
        "visibility": visibility,
        "nsfw_content": payload.nsfw_content,
        "community_post": payload.community_post,
        "allow_adaptations": payload.allow_adaptations,
        "allow_commercial_use": payload.allow_commercial_use,
        "allow_sharing": payload.allow_sharing,
        "cover_image_url": cover_image_url,
        "gallery_image_urls": gallery_image_urls,
        "model_file_url": model_file_url,
    }


def increment_views(db: Session, model_id: str) -> None:
    """Atomically add one view to a model and commit."""
    db.execute(
        update(MedicalModel)
        .where(MedicalModel.id == model_id)
        .values(views=MedicalModel.views + 1)
        .execution_options(synchronize_session=False)
    )
    db.commit()


class ModerationService:
    """Service handling submission and review state transitions."""

    @staticmethod
    def submit(db: Session, author_id: str, payload: ModelCreate) -> MedicalModel:
        """Create a model awaiting review.

        Args:
            db: Database session
            author_id: ID of the submitting user
            payload: Submitted content

        Raises:
            NotFoundError: If the author does not exist.
            ValidationError: If the payload violates a constraint.
            ConflictError: If per-author title uniqueness is enabled and violated.
        """
        get_user_or_404(db, author_id)
        fields = _validate_submission(payload)

        if settings.unique_title_per_author:
            clash = db.query(MedicalModel.id).filter(
                MedicalModel.author_id == author_id,
                func.lower(MedicalModel.title) == fields["title"].lower(),
            ).first()
            if clash is not None:
                raise ConflictError(f'You already have a model titled "{fields["title"]}"')

        model = MedicalModel(
            author_id=author_id,
            status=ModelStatus.VERIFICATION,
            likes=0,
            downloads=0,
            views=0,
            published_at=None,
            rejection_reason=None,
            admin_notes=None,
            **fields,
        )
        with transaction(db):
            db.add(model)

        logger.info("Model %s submitted for review by user %s", model.id, author_id)
        return model

    @staticmethod
    def review_stats(db: Session) -> ReviewStats:
        """Count models per status across the entire table."""
        rows = (
            db.query(MedicalModel.status, func.count(MedicalModel.id))
            .group_by(MedicalModel.status)
            .all()
        )
        counts = {status: count for status, count in rows}
        return ReviewStats(
            pending=counts.get(ModelStatus.VERIFICATION, 0),
            approved=counts.get(ModelStatus.PUBLISHED, 0),
            rejected=counts.get(ModelStatus.REJECTED, 0),
            total=sum(counts.values()),
        )

    @staticmethod
    def list_for_review(
        db: Session,
        filter_by: str = "verification",
        sort_by: str = "newest",
        page: int = 1,
        limit: int | None = None,
    ) -> ReviewQueue:
        """Return a page of the review queue together with global stats."""
        if filter_by not in REVIEW_FILTERS:
            raise ValidationError(f"Unknown filter '{filter_by}'")
        if sort_by not in REVIEW_SORTS:
            raise ValidationError(f"Unknown sort '{sort_by}'")
        if limit is None:
            limit = settings.review_default_limit
        check_page(page, limit, REVIEW_MAX_LIMIT)

        status = REVIEW_FILTERS[filter_by]
        count_query = db.query(func.count(MedicalModel.id))
        query = db.query(MedicalModel).options(joinedload(MedicalModel.author))
        if status is not None:
            count_query = count_query.filter(MedicalModel.status == status)
            query = query.filter(MedicalModel.status == status)

        page_info = PageInfo(page=page, limit=limit, total=count_query.scalar() or 0)
        models = (
            query.order_by(*REVIEW_SORTS[sort_by])
            .offset(page_info.offset)
            .limit(limit)
            .all()
        )
        logger.debug(
            "Review queue filter=%s sort=%s page=%d returned %d models",
            filter_by, sort_by, page, len(models),
        )
        return ReviewQueue(models=models, stats=ModerationService.review_stats(db), page=page_info)

    @staticmethod
    def get_for_review(db: Session, model_id: str) -> ReviewRecord:
        """Return a model with its like and download edge counts."""
        model = get_model_or_404(db, model_id, with_author=True)
        like_count = db.query(func.count()).select_from(ModelLike).filter(
            ModelLike.model_id == model_id
        ).scalar() or 0
        download_count = db.query(func.count()).select_from(ModelDownload).filter(
            ModelDownload.model_id == model_id
        ).scalar() or 0
        return ReviewRecord(model=model, like_count=like_count, download_count=download_count)

    @staticmethod
    def approve(
        db: Session,
        model_id: str,
        moderator_id: str,
        admin_notes: str | None = None,
    ) -> MedicalModel:
        """Publish a model.

        Any current status is accepted; approving an already published model
        re-stamps the reviewer fields and publication time.
        """
        model = get_model_or_404(db, model_id)
        previous = model.status
        now = utcnow()
        with transaction(db):
            model.status = ModelStatus.PUBLISHED
            model.published_at = now
            model.rejection_reason = None
            model.admin_notes = _clean(admin_notes)
            model.reviewed_by = moderator_id
            model.reviewed_at = now

        ModerationService._log_disposition(model, previous, moderator_id)
        ModerationService._notify_author(
            model, f'Your model "{model.title}" has been approved and is now published!'
        )
        return model

    @staticmethod
    def reject(
        db: Session,
        model_id: str,
        moderator_id: str,
        rejection_reason: str | None,
        admin_notes: str | None = None,
    ) -> MedicalModel:
        """Reject a model with a mandatory reason."""
        reason = _clean(rejection_reason)
        if reason is None:
            raise ValidationError("Rejection reason is required when rejecting a model")

        model = get_model_or_404(db, model_id)
        previous = model.status
        now = utcnow()
        with transaction(db):
            model.status = ModelStatus.REJECTED
            model.published_at = None
            model.rejection_reason = reason
            model.admin_notes = _clean(admin_notes)
            model.reviewed_by = moderator_id
            model.reviewed_at = now

        ModerationService._log_disposition(model, previous, moderator_id)
        ModerationService._notify_author(
            model, f'Your model "{model.title}" was not approved. Reason: {reason}'
        )
        return model

    @staticmethod
    def view(db: Session, model_id: str, viewer: User | None) -> ModelView:
        """Load a model page for ``viewer``, counting the view when applicable.

        Raises:
            NotFoundError: If the model does not exist.
            PermissionDeniedError: If the model is not public and the viewer is
                not its author.
        """
        model = get_model_or_404(db, model_id, with_author=True)
        is_owner = model.is_owned_by(viewer)
        if not (model.is_publicly_visible or is_owner):
            raise PermissionDeniedError("You do not have permission to view this model")

        views = model.views
        if model.status == ModelStatus.PUBLISHED and not is_owner:
            # Best effort: a failed counter update never fails the read.
            try:
                increment_views(db, model.id)
            except SQLAlchemyError as err:
                db.rollback()
                logger.warning("Failed to increment view count for model %s: %s", model_id, err)
            views += 1

        return ModelView(
            model=model,
            views=views,
            permissions=ModelPermissions.for_viewer(model, viewer),
            related=ModerationService.related_models(db, model),
        )

    @staticmethod
    def related_models(db: Session, model: MedicalModel) -> list[MedicalModel]:
        """Return other public models in the same category, most liked first."""
        return (
            db.query(MedicalModel)
            .options(joinedload(MedicalModel.author))
            .filter(
                MedicalModel.id != model.id,
                MedicalModel.category == model.category,
                MedicalModel.status == ModelStatus.PUBLISHED,
                MedicalModel.visibility == Visibility.PUBLIC,
            )
            .order_by(MedicalModel.likes.desc(), MedicalModel.views.desc())
            .limit(settings.related_models_limit)
            .all()
        )

    @staticmethod
    def _log_disposition(model: MedicalModel, previous: ModelStatus, moderator_id: str) -> None:
        if previous != ModelStatus.VERIFICATION:
            logger.info(
                "Model %s re-disposed from %s to %s by %s",
                model.id, previous.value, model.status.value, moderator_id,
            )
        else:
            logger.info("Model %s %s by %s", model.id, model.status.value, moderator_id)

    @staticmethod
    def _notify_author(model: MedicalModel, message: str) -> None:
        # Delivery is handled outside this service; record what would be sent.
        logger.info("Notification for %s: %s", model.author.email, message)
