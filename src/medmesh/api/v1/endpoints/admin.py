# src/medmesh/api/v1/endpoints/admin.py
"""Admin review queue endpoints."""

from fastapi import APIRouter, Query

from medmesh.api.v1.dependencies import AdminUserDep, CurrentUserDep, SessionDep
from medmesh.api.v1.presenters import to_pagination, to_review_detail, to_review_item
from medmesh.schemas.moderation import (
    ReviewAction,
    ReviewDetail,
    ReviewListResponse,
    ReviewResult,
    ReviewStats,
)
from medmesh.schemas.user import RoleCheckResponse
from medmesh.services.moderation import ModerationService

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/check-role", response_model=RoleCheckResponse)
def check_role(current_user: CurrentUserDep) -> RoleCheckResponse:
    """Report whether the caller is a moderator."""
    return RoleCheckResponse(
        is_admin=current_user.is_admin,
        role=current_user.role.value,
        email=current_user.email,
    )


@router.get("/models", response_model=ReviewListResponse)
def list_review_queue(
    _admin: AdminUserDep,
    db: SessionDep,
    filter_by: str = Query("verification", alias="filter", description="Status filter"),
    sort_by: str = Query("newest", alias="sortBy", description="newest, oldest or category"),
    page: int = Query(1),
    limit: int | None = Query(None),
) -> ReviewListResponse:
    """List models for moderation with whole-table status counts.

    Args:
        _admin: Authenticated moderator
        db: Database session
        filter_by: all, verification, published or rejected
        sort_by: Ordering of the queue
        page: 1-based page number
        limit: Page size (max 100)

    Returns:
        Page of queue entries plus stats and pagination
    """
    queue = ModerationService.list_for_review(
        db, filter_by=filter_by, sort_by=sort_by, page=page, limit=limit
    )
    stats = queue.stats
    return ReviewListResponse(
        models=[to_review_item(model) for model in queue.models],
        stats=ReviewStats(
            pending=stats.pending,
            approved=stats.approved,
            rejected=stats.rejected,
            total=stats.total,
        ),
        pagination=to_pagination(queue.page),
    )


@router.get("/models/{model_id}", response_model=ReviewDetail)
def get_review_model(model_id: str, _admin: AdminUserDep, db: SessionDep) -> ReviewDetail:
    """Return one model with its like and download edge counts."""
    return to_review_detail(ModerationService.get_for_review(db, model_id))


@router.patch("/models/{model_id}", response_model=ReviewResult)
def review_model(
    model_id: str,
    body: ReviewAction,
    admin: AdminUserDep,
    db: SessionDep,
) -> ReviewResult:
    """Approve or reject a model.

    Raises:
        ValidationError: If rejecting without a reason.
        NotFoundError: If the model does not exist.
    """
    if body.action == "approve":
        model = ModerationService.approve(db, model_id, admin.id, admin_notes=body.admin_notes)
        message = "Model approved successfully"
    else:
        model = ModerationService.reject(
            db,
            model_id,
            admin.id,
            rejection_reason=body.rejection_reason,
            admin_notes=body.admin_notes,
        )
        message = "Model rejected successfully"

    return ReviewResult(
        id=model.id,
        title=model.title,
        status=model.status.value,
        author=model.author.public_name,
        action=body.action,
        reviewed_at=model.reviewed_at,
        message=message,
    )
