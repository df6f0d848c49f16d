# src/medmesh/services/engagement.py
"""Likes and downloads on published models.

``MedicalModel.likes`` and ``MedicalModel.downloads`` are caches of the
``model_like`` and ``model_download`` tables. Every change to those tables
adjusts the matching counter with an atomic UPDATE inside the same
transaction.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta

from sqlalchemy import Row, case, delete, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from medmesh.core.errors import ConflictError, NotFoundError, PermissionDeniedError
from medmesh.core.settings import settings
from medmesh.db.session import transaction
from medmesh.db.time import utcnow
from medmesh.models import MedicalModel, ModelDownload, ModelLike
from medmesh.services.common import get_model_or_404

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DownloadOutcome:
    """Result of a download request; always successful for the caller."""

    downloads: int
    counted: bool
    download_url: str | None


def _ensure_interactive(model: MedicalModel) -> None:
    if not model.is_publicly_visible:
        raise PermissionDeniedError("Model is not available for interaction")


def _find_like(db: Session, model_id: str, user_id: str) -> Row | None:
    return db.query(ModelLike.user_id).filter(
        ModelLike.model_id == model_id,
        ModelLike.user_id == user_id,
    ).first()


def _adjust_counter(db: Session, model_id: str, **values: object) -> None:
    db.execute(
        update(MedicalModel)
        .where(MedicalModel.id == model_id)
        .values(**values)
        .execution_options(synchronize_session=False)
    )


class EngagementService:
    """Service keeping like and download counters in step with their rows."""

    @staticmethod
    def like(db: Session, model_id: str, user_id: str) -> int:
        """Record that ``user_id`` likes a model.

        Returns:
            The model's like count after the change.

        Raises:
            NotFoundError: If the model does not exist.
            PermissionDeniedError: If the model is not public or the user is its author.
            ConflictError: If the user already likes the model.
        """
        model = get_model_or_404(db, model_id)
        _ensure_interactive(model)
        if model.author_id == user_id:
            raise PermissionDeniedError("You cannot like your own model")
        if _find_like(db, model_id, user_id) is not None:
            raise ConflictError("Model already liked by this user")

        try:
            db.add(ModelLike(user_id=user_id, model_id=model_id, created_at=utcnow()))
            # Flush first so a concurrent duplicate fails on the primary key
            # before the counter moves.
            db.flush()
            _adjust_counter(db, model_id, likes=MedicalModel.likes + 1)
            db.commit()
        except IntegrityError as err:
            db.rollback()
            raise ConflictError("Model already liked by this user") from err
        except SQLAlchemyError:
            db.rollback()
            raise

        db.refresh(model)
        logger.info("User %s liked model %s (likes=%d)", user_id, model_id, model.likes)
        return model.likes

    @staticmethod
    def unlike(db: Session, model_id: str, user_id: str) -> int:
        """Withdraw a like.

        The counter only moves when this call removed the edge, and it is
        floored at zero so a drifted cache never goes negative.

        Raises:
            NotFoundError: If the model or the like does not exist.
        """
        model = get_model_or_404(db, model_id)
        if _find_like(db, model_id, user_id) is None:
            raise NotFoundError("Like not found")

        with transaction(db):
            result = db.execute(
                delete(ModelLike)
                .where(ModelLike.model_id == model_id, ModelLike.user_id == user_id)
                .execution_options(synchronize_session=False)
            )
            # A racing unlike already removed the edge and moved the counter.
            if result.rowcount == 0:
                raise NotFoundError("Like not found")
            _adjust_counter(
                db,
                model_id,
                likes=case((MedicalModel.likes > 0, MedicalModel.likes - 1), else_=0),
            )

        db.refresh(model)
        logger.info("User %s unliked model %s (likes=%d)", user_id, model_id, model.likes)
        return model.likes

    @staticmethod
    def download(
        db: Session,
        model_id: str,
        user_id: str,
        *,
        now: datetime | None = None,
    ) -> DownloadOutcome:
        """Register a download, ignoring repeats inside the debounce window.

        The lookup and insert are not linearizable; two simultaneous requests
        from one user may both be counted.
        """
        now = now or utcnow()
        model = get_model_or_404(db, model_id)
        _ensure_interactive(model)

        cutoff = now - timedelta(seconds=settings.download_debounce_seconds)
        recent = (
            db.query(ModelDownload.id)
            .filter(
                ModelDownload.user_id == user_id,
                ModelDownload.model_id == model_id,
                ModelDownload.created_at >= cutoff,
            )
            .order_by(ModelDownload.created_at.desc())
            .first()
        )
        if recent is not None:
            logger.debug("Download of model %s by %s inside debounce window", model_id, user_id)
            return DownloadOutcome(
                downloads=model.downloads,
                counted=False,
                download_url=model.model_file_url,
            )

        with transaction(db):
            db.add(ModelDownload(user_id=user_id, model_id=model_id, created_at=now))
            _adjust_counter(db, model_id, downloads=MedicalModel.downloads + 1)

        db.refresh(model)
        logger.info(
            "User %s downloaded model %s (downloads=%d)", user_id, model_id, model.downloads
        )
        return DownloadOutcome(
            downloads=model.downloads,
            counted=True,
            download_url=model.model_file_url,
        )
