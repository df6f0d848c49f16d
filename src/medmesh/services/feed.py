"""Read-only listings: the public feed and per-author model lists."""
from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import String, cast, func, or_
from sqlalchemy.orm import Query, Session, joinedload

from medmesh.core.errors import ValidationError
from medmesh.core.settings import settings
from medmesh.models import MedicalModel, ModelStatus, User, Visibility
from medmesh.services.common import PageInfo, check_page, get_user_or_404

__all__ = [
    "FEED_SORTS",
    "AUTHOR_SORTS",
    "FeedPage",
    "AuthorModelsPage",
    "list_feed",
    "list_author_models",
]

FEED_SORTS = {
    "recent": (MedicalModel.published_at.desc(), MedicalModel.created_at.desc()),
    "popular": (
        MedicalModel.likes.desc(),
        MedicalModel.downloads.desc(),
        MedicalModel.views.desc(),
    ),
    "trending": (
        MedicalModel.updated_at.desc(),
        MedicalModel.likes.desc(),
        MedicalModel.views.desc(),
    ),
}

AUTHOR_SORTS = {
    "recent": (MedicalModel.created_at.desc(),),
    "popular": (MedicalModel.likes.desc(),),
    "downloads": (MedicalModel.downloads.desc(),),
    "alphabetical": (MedicalModel.title.asc(),),
}

AUTHOR_STATUS_FILTERS: dict[str, ModelStatus | None] = {
    "all": None,
    "verification": ModelStatus.VERIFICATION,
    "published": ModelStatus.PUBLISHED,
    "rejected": ModelStatus.REJECTED,
}

AUTHOR_MAX_LIMIT = 100


@dataclass(frozen=True)
class FeedPage:
    models: list[MedicalModel]
    sort: str
    search: str | None
    page: PageInfo


@dataclass(frozen=True)
class AuthorModelsPage:
    models: list[MedicalModel]
    status: str
    sort: str
    is_owner: bool
    page: PageInfo


def _normalise_search(search: str | None) -> str | None:
    if search is None:
        return None
    term = search.strip()
    if not term or term == "null":
        return None
    return term


def _apply_search(query: Query, term: str) -> Query:
    needle = term.lower()
    # Tags are a JSON array; match a whole element case-insensitively.
    tag_needle = f'"{needle}"'
    return query.filter(
        or_(
            func.lower(MedicalModel.title).contains(needle, autoescape=True),
            func.lower(MedicalModel.description).contains(needle, autoescape=True),
            func.lower(MedicalModel.category).contains(needle, autoescape=True),
            func.lower(cast(MedicalModel.tags, String)).contains(tag_needle, autoescape=True),
        )
    )


def _paginate(query: Query, order_by: tuple, page_info: PageInfo) -> list[MedicalModel]:
    return (
        query.options(joinedload(MedicalModel.author))
        .order_by(*order_by)
        .offset(page_info.offset)
        .limit(page_info.limit)
        .all()
    )


def list_feed(
    db: Session,
    sort: str = "recent",
    search: str | None = None,
    page: int = 1,
    limit: int | None = None,
) -> FeedPage:
    """Return published public models, optionally filtered by a search term."""
    if sort not in FEED_SORTS:
        raise ValidationError(f"Unknown feed category '{sort}'")
    if limit is None:
        limit = settings.feed_default_limit
    check_page(page, limit, settings.feed_max_limit)

    query = db.query(MedicalModel).filter(
        MedicalModel.status == ModelStatus.PUBLISHED,
        MedicalModel.visibility == Visibility.PUBLIC,
    )
    term = _normalise_search(search)
    if term is not None:
        query = _apply_search(query, term)

    page_info = PageInfo(page=page, limit=limit, total=query.count())
    return FeedPage(
        models=_paginate(query, FEED_SORTS[sort], page_info),
        sort=sort,
        search=term,
        page=page_info,
    )


def list_author_models(
    db: Session,
    author_id: str,
    viewer: User | None,
    status: str = "all",
    sort: str = "recent",
    page: int = 1,
    limit: int = 20,
) -> AuthorModelsPage:
    """Return an author's models; visitors only ever see published ones."""
    if status not in AUTHOR_STATUS_FILTERS:
        raise ValidationError(f"Unknown status '{status}'")
    if sort not in AUTHOR_SORTS:
        raise ValidationError(f"Unknown sort '{sort}'")
    check_page(page, limit, AUTHOR_MAX_LIMIT)
    get_user_or_404(db, author_id)

    is_owner = viewer is not None and viewer.id == author_id
    if not is_owner:
        status = "published"

    query = db.query(MedicalModel).filter(MedicalModel.author_id == author_id)
    status_value = AUTHOR_STATUS_FILTERS[status]
    if status_value is not None:
        query = query.filter(MedicalModel.status == status_value)
    if not is_owner:
        query = query.filter(MedicalModel.visibility == Visibility.PUBLIC)

    page_info = PageInfo(page=page, limit=limit, total=query.count())
    return AuthorModelsPage(
        models=_paginate(query, AUTHOR_SORTS[sort], page_info),
        status=status,
        sort=sort,
        is_owner=is_owner,
        page=page_info,
    )
