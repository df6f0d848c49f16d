# src/medmesh/api/v1/endpoints/models.py
"""Model submission, browsing and engagement endpoints."""

import logging

from fastapi import APIRouter, Query, status
from sqlalchemy.orm import Session

from medmesh.api.v1.dependencies import CurrentUserDep, OptionalUserDep, SessionDep
from medmesh.api.v1.presenters import to_model_card, to_model_detail, to_pagination
from medmesh.models import User
from medmesh.schemas.engagement import ModelActionRequest, ModelActionResponse
from medmesh.schemas.model import FeedResponse, ModelCreate, ModelCreated, ModelDetail
from medmesh.services.engagement import EngagementService
from medmesh.services.feed import list_feed
from medmesh.services.moderation import ModerationService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/models", tags=["models"])


@router.post("/", response_model=ModelCreated, status_code=status.HTTP_201_CREATED)
def submit_model(
    payload: ModelCreate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> ModelCreated:
    """Submit a new model for moderation.

    Args:
        payload: Model content and asset URLs
        current_user: Authenticated author
        db: Database session

    Returns:
        Identifier and status (always ``verification``) of the new model
    """
    model = ModerationService.submit(db, current_user.id, payload)
    return ModelCreated(id=model.id, status=model.status.value)


@router.get("/feed", response_model=FeedResponse)
def get_feed(
    db: SessionDep,
    category: str = Query("recent", description="recent, popular or trending"),
    search: str | None = Query(None, description="Match title, description, category or tag"),
    page: int = Query(1, description="1-based page number"),
    limit: int | None = Query(None, description="Page size"),
) -> FeedResponse:
    """List published public models."""
    result = list_feed(db, sort=category, search=search, page=page, limit=limit)
    return FeedResponse(
        models=[to_model_card(model) for model in result.models],
        category=result.sort,
        search=result.search,
        pagination=to_pagination(result.page),
        is_empty=not result.models,
    )


@router.get("/{model_id}", response_model=ModelDetail)
def get_model(
    model_id: str,
    viewer: OptionalUserDep,
    db: SessionDep,
) -> ModelDetail:
    """Return a model page and count the view.

    Args:
        model_id: ID of the model to show
        viewer: Caller when authenticated, otherwise None
        db: Database session

    Returns:
        Model details with related models and the viewer's permissions
    """
    return to_model_detail(ModerationService.view(db, model_id, viewer))


def _like(db: Session, model_id: str, user: User) -> ModelActionResponse:
    likes = EngagementService.like(db, model_id, user.id)
    return ModelActionResponse(
        action="like",
        model_id=model_id,
        likes=likes,
        liked=True,
        message="Model liked successfully",
    )


def _unlike(db: Session, model_id: str, user: User) -> ModelActionResponse:
    likes = EngagementService.unlike(db, model_id, user.id)
    return ModelActionResponse(
        action="unlike",
        model_id=model_id,
        likes=likes,
        liked=False,
        message="Model unliked successfully",
    )


def _download(db: Session, model_id: str, user: User) -> ModelActionResponse:
    outcome = EngagementService.download(db, model_id, user.id)
    return ModelActionResponse(
        action="download",
        model_id=model_id,
        downloads=outcome.downloads,
        counted=outcome.counted,
        download_url=outcome.download_url,
        message="Download recorded" if outcome.counted else "Download already recorded recently",
    )


_ACTIONS = {
    "like": _like,
    "unlike": _unlike,
    "download": _download,
}


@router.post("/{model_id}/actions", response_model=ModelActionResponse)
def model_action(
    model_id: str,
    body: ModelActionRequest,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> ModelActionResponse:
    """Like, unlike or download a model.

    Args:
        model_id: Target model
        body: Requested action and optional client metadata
        current_user: Authenticated user performing the action
        db: Database session

    Returns:
        Counter values after the action
    """
    source = body.metadata.source if body.metadata else None
    logger.debug(
        "Action %s on model %s by user %s (source=%s)",
        body.action, model_id, current_user.id, source,
    )
    return _ACTIONS[body.action](db, model_id, current_user)
