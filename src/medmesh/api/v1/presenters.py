"""Conversion of ORM rows and service results into API schemas."""
from __future__ import annotations

from medmesh.models import MedicalModel, User
from medmesh.schemas.common import AuthorSummary, Pagination
from medmesh.schemas.model import (
    LicenseInfo,
    ModelCard,
    ModelDetail,
    ModelPermissionsOut,
    ModelTimestamps,
    RelatedModel,
)
from medmesh.schemas.moderation import AdminInfo, ReviewAuthor, ReviewDetail, ReviewItem
from medmesh.services.common import PageInfo
from medmesh.services.moderation import ModelView, ReviewRecord


def to_author_summary(user: User) -> AuthorSummary:
    return AuthorSummary(
        id=user.id,
        name=user.public_name,
        username=user.public_username,
        avatar_url=user.avatar_url,
    )


def to_pagination(page: PageInfo) -> Pagination:
    return Pagination(
        page=page.page,
        limit=page.limit,
        total=page.total,
        total_pages=page.total_pages,
        has_next=page.has_next,
        has_prev=page.has_prev,
    )


def to_model_card(model: MedicalModel, *, include_review: bool = False) -> ModelCard:
    """Build a listing card; review fields are only shown to the author."""
    return ModelCard(
        id=model.id,
        title=model.title,
        description=model.description,
        category=model.category,
        tags=list(model.tags or []),
        thumbnail_url=model.cover_image_url,
        likes=model.likes,
        downloads=model.downloads,
        views=model.views,
        status=model.status.value,
        author=to_author_summary(model.author),
        created_at=model.created_at,
        published_at=model.published_at,
        rejection_reason=model.rejection_reason if include_review else None,
        admin_notes=model.admin_notes if include_review else None,
    )


def to_model_detail(result: ModelView) -> ModelDetail:
    """Shape a viewed model for the product page."""
    model = result.model
    permissions = result.permissions
    return ModelDetail(
        id=model.id,
        title=model.title,
        description=model.description,
        category=model.category,
        tags=list(model.tags or []),
        cover_image_url=model.cover_image_url,
        gallery_image_urls=list(model.gallery_image_urls or []),
        model_file_url=model.model_file_url,
        likes=model.likes,
        downloads=model.downloads,
        views=result.views,
        status=model.status.value,
        visibility=model.visibility.value,
        nsfw_content=model.nsfw_content,
        license=LicenseInfo(
            allow_commercial_use=model.allow_commercial_use,
            allow_sharing=model.allow_sharing,
            allow_adaptations=model.allow_adaptations,
        ),
        author=to_author_summary(model.author),
        timestamps=ModelTimestamps(
            created_at=model.created_at,
            updated_at=model.updated_at,
            published_at=model.published_at,
        ),
        related_models=[
            RelatedModel(
                id=related.id,
                title=related.title,
                thumbnail_url=related.cover_image_url,
                likes=related.likes,
                downloads=related.downloads,
                views=related.views,
                author=to_author_summary(related.author),
            )
            for related in result.related
        ],
        permissions=ModelPermissionsOut(
            can_edit=permissions.can_edit,
            can_download=permissions.can_download,
            can_like=permissions.can_like,
            can_share=permissions.can_share,
            is_owner=permissions.is_owner,
        ),
    )


def _review_author(user: User) -> ReviewAuthor:
    return ReviewAuthor(
        id=user.id,
        name=user.public_name,
        username=user.public_username,
        avatar_url=user.avatar_url,
        email=user.email,
    )


def to_review_item(model: MedicalModel) -> ReviewItem:
    return ReviewItem(
        id=model.id,
        title=model.title,
        description=model.description,
        category=model.category,
        tags=list(model.tags or []),
        cover_image_url=model.cover_image_url,
        status=model.status.value,
        author=_review_author(model.author),
        created_at=model.created_at,
        updated_at=model.updated_at,
        rejection_reason=model.rejection_reason,
        admin_notes=model.admin_notes,
    )


def to_review_detail(record: ReviewRecord) -> ReviewDetail:
    model = record.model
    item = to_review_item(model)
    return ReviewDetail(
        **item.model_dump(),
        model_file_url=model.model_file_url,
        gallery_image_urls=list(model.gallery_image_urls or []),
        visibility=model.visibility.value,
        nsfw_content=model.nsfw_content,
        likes=model.likes,
        downloads=model.downloads,
        views=model.views,
        like_count=record.like_count,
        download_count=record.download_count,
        published_at=model.published_at,
        admin_info=AdminInfo(
            rejection_reason=model.rejection_reason,
            admin_notes=model.admin_notes,
            reviewed_by=model.reviewed_by,
            reviewed_at=model.reviewed_at,
        ),
    )
