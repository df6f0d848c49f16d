# src/medmesh/api/v1/endpoints/users.py
"""Public profiles and the signed-in user's account settings."""

from fastapi import APIRouter, Query

from medmesh.api.v1.dependencies import CurrentUserDep, OptionalUserDep, SessionDep
from medmesh.api.v1.presenters import to_model_card, to_pagination
from medmesh.models import User
from medmesh.schemas.user import (
    AuthorModelsResponse,
    AvailabilityRequest,
    AvailabilityResponse,
    ProfileResponse,
    ProfileStats,
    SettingsUpdateRequest,
    SettingsUpdateResponse,
    UserSettings,
)
from medmesh.services.feed import list_author_models
from medmesh.services.user_service import get_profile, is_available, update_settings

router = APIRouter(prefix="/users", tags=["users"])


def _to_settings(user: User) -> UserSettings:
    return UserSettings(
        display_name=user.display_name,
        username=user.username,
        email=user.email,
        bio=user.bio,
        avatar_url=user.avatar_url,
        region=user.region,
        member_since=user.created_at,
    )


@router.get("/me/settings", response_model=UserSettings)
def get_my_settings(current_user: CurrentUserDep) -> UserSettings:
    """Return the signed-in user's account settings."""
    return _to_settings(current_user)


@router.patch("/me/settings", response_model=SettingsUpdateResponse)
def update_my_settings(
    payload: SettingsUpdateRequest,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> SettingsUpdateResponse:
    """Update any subset of display name, username, email, bio and region."""
    user = update_settings(db, current_user, payload.model_dump(exclude_unset=True))
    return SettingsUpdateResponse(
        message="Settings updated successfully",
        user_settings=_to_settings(user),
    )


@router.post("/me/check-availability", response_model=AvailabilityResponse)
def check_availability(
    payload: AvailabilityRequest,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> AvailabilityResponse:
    """Tell the signed-in user whether a username or email is free."""
    available = is_available(db, payload.field, payload.value, current_user.id)
    message = f"{payload.field} is available" if available else f"{payload.field} is already taken"
    return AvailabilityResponse(available=available, message=message)


@router.get("/{user_id}", response_model=ProfileResponse)
def get_user_profile(user_id: str, db: SessionDep) -> ProfileResponse:
    """Return a public profile with totals over published public models."""
    profile = get_profile(db, user_id)
    user = profile.user
    return ProfileResponse(
        id=user.id,
        name=user.public_name,
        username=user.public_username,
        avatar_url=user.avatar_url,
        bio=user.bio,
        region=user.region,
        member_since=user.created_at,
        stats=ProfileStats(
            published_models=profile.published_models,
            total_likes=profile.total_likes,
            total_downloads=profile.total_downloads,
        ),
    )


@router.get("/{user_id}/models", response_model=AuthorModelsResponse)
def get_user_models(
    user_id: str,
    viewer: OptionalUserDep,
    db: SessionDep,
    status_filter: str = Query("all", alias="status"),
    sort_by: str = Query("recent", alias="sortBy"),
    page: int = Query(1),
    limit: int = Query(20),
) -> AuthorModelsResponse:
    """List an author's models.

    The author sees every status along with review notes; everyone else only
    gets published public models.
    """
    result = list_author_models(
        db,
        user_id,
        viewer,
        status=status_filter,
        sort=sort_by,
        page=page,
        limit=limit,
    )
    return AuthorModelsResponse(
        models=[
            to_model_card(model, include_review=result.is_owner)
            for model in result.models
        ],
        pagination=to_pagination(result.page),
        status=result.status,
        sort_by=result.sort,
        is_owner=result.is_owner,
    )
