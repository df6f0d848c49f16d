# tests/services/test_moderation_service.py
"""Tests for the submission and review state machine."""

from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy.exc import OperationalError

from medmesh.core.errors import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from medmesh.core.settings import settings
from medmesh.models import MedicalModel, ModelStatus, User, UserRole, Visibility
from medmesh.schemas.model import ModelCreate
from medmesh.services.engagement import EngagementService
from medmesh.services.moderation import ModerationService


def _payload(**overrides) -> ModelCreate:
    data = {
        "title": "Heart Model",
        "description": "Full heart with chambers and valves.",
        "category": "Cardiology",
        "tags": ["heart", "anatomy"],
        "cover_image_url": "https://cdn.example.org/heart.png",
    }
    data.update(overrides)
    return ModelCreate(**data)


class TestSubmit:
    def test_submit_creates_model_awaiting_review(self, db_session, author):
        model = ModerationService.submit(db_session, author.id, _payload())

        assert model.status == ModelStatus.VERIFICATION
        assert (model.likes, model.downloads, model.views) == (0, 0, 0)
        assert model.published_at is None
        assert model.rejection_reason is None
        assert model.author_id == author.id
        assert db_session.get(MedicalModel, model.id) is not None

    def test_submit_trims_text_and_deduplicates_tags(self, db_session, author):
        model = ModerationService.submit(
            db_session,
            author.id,
            _payload(title="  Heart Model  ", tags="heart, heart , anatomy,"),
        )

        assert model.title == "Heart Model"
        assert model.tags == ["heart", "anatomy"]

    def test_submit_accepts_private_visibility(self, db_session, author):
        model = ModerationService.submit(db_session, author.id, _payload(visibility="Private"))
        assert model.visibility == Visibility.PRIVATE

    @pytest.mark.parametrize(
        "overrides",
        [
            {"title": "ab"},
            {"title": "x" * 101},
            {"description": "too short"},
            {"category": "   "},
            {"visibility": "friends"},
            {"cover_image_url": None, "gallery_image_urls": [], "model_file_url": "  "},
        ],
    )
    def test_submit_rejects_invalid_payload(self, db_session, author, overrides):
        with pytest.raises(ValidationError):
            ModerationService.submit(db_session, author.id, _payload(**overrides))
        assert db_session.query(MedicalModel).count() == 0

    def test_submit_with_only_model_file_is_valid(self, db_session, author):
        model = ModerationService.submit(
            db_session,
            author.id,
            _payload(cover_image_url=None, model_file_url="https://cdn.example.org/heart.stl"),
        )
        assert model.model_file_url == "https://cdn.example.org/heart.stl"

    def test_submit_for_unknown_author(self, db_session):
        with pytest.raises(NotFoundError):
            ModerationService.submit(db_session, "missing", _payload())

    def test_duplicate_titles_allowed_by_default(self, db_session, author):
        ModerationService.submit(db_session, author.id, _payload())
        ModerationService.submit(db_session, author.id, _payload())
        assert db_session.query(MedicalModel).count() == 2

    def test_duplicate_title_conflicts_when_uniqueness_enabled(
        self, db_session, author, monkeypatch
    ):
        monkeypatch.setattr(settings, "unique_title_per_author", True)
        ModerationService.submit(db_session, author.id, _payload())

        with pytest.raises(ConflictError):
            ModerationService.submit(db_session, author.id, _payload(title="heart model"))


class TestDisposition:
    def test_reject_then_approve_heart_model(self, db_session, author, admin_user):
        model = ModerationService.submit(db_session, author.id, _payload())

        rejected = ModerationService.reject(
            db_session, model.id, admin_user.id, rejection_reason="Blurry images"
        )
        assert rejected.status == ModelStatus.REJECTED
        assert rejected.rejection_reason == "Blurry images"
        assert rejected.published_at is None
        assert rejected.reviewed_by == admin_user.id

        approved = ModerationService.approve(db_session, model.id, admin_user.id)
        assert approved.status == ModelStatus.PUBLISHED
        assert approved.rejection_reason is None
        assert approved.published_at is not None

    @pytest.mark.parametrize("reason", [None, "", "   "])
    def test_reject_requires_reason(self, db_session, pending_model, admin_user, reason):
        with pytest.raises(ValidationError):
            ModerationService.reject(
                db_session, pending_model.id, admin_user.id, rejection_reason=reason
            )

        db_session.refresh(pending_model)
        assert pending_model.status == ModelStatus.VERIFICATION

    def test_approve_stores_trimmed_admin_notes(self, db_session, pending_model, admin_user):
        model = ModerationService.approve(
            db_session, pending_model.id, admin_user.id, admin_notes="  Great detail  "
        )
        assert model.admin_notes == "Great detail"
        assert model.reviewed_at is not None

    def test_double_approve_keeps_model_published(self, db_session, pending_model, admin_user):
        ModerationService.approve(db_session, pending_model.id, admin_user.id)
        model = ModerationService.approve(db_session, pending_model.id, admin_user.id)

        assert model.status == ModelStatus.PUBLISHED
        assert model.published_at is not None

    def test_double_approve_restamps_reviewer(
        self, db_session, pending_model, admin_user, mocker
    ):
        second_moderator = User(
            email="second-mod@example.org", display_name="Second", role=UserRole.ADMIN
        )
        db_session.add(second_moderator)
        db_session.commit()
        first_at = datetime(2026, 3, 1, 9, 0, tzinfo=UTC)
        second_at = first_at + timedelta(hours=2)
        mocker.patch(
            "medmesh.services.moderation.utcnow", side_effect=[first_at, second_at]
        )

        first = ModerationService.approve(db_session, pending_model.id, admin_user.id)
        assert first.reviewed_by == admin_user.id
        assert first.reviewed_at == first_at

        model = ModerationService.approve(db_session, pending_model.id, second_moderator.id)

        assert model.status == ModelStatus.PUBLISHED
        assert model.reviewed_by == second_moderator.id
        assert model.reviewed_at == second_at
        assert model.published_at == second_at

    def test_reject_published_model_clears_publication(
        self, db_session, published_model, admin_user
    ):
        model = ModerationService.reject(
            db_session, published_model.id, admin_user.id, rejection_reason="License issue"
        )
        assert model.status == ModelStatus.REJECTED
        assert model.published_at is None

    def test_disposition_of_missing_model(self, db_session, admin_user):
        with pytest.raises(NotFoundError):
            ModerationService.approve(db_session, "missing", admin_user.id)

    def test_reject_without_reason_checked_before_lookup(self, db_session, admin_user):
        with pytest.raises(ValidationError):
            ModerationService.reject(db_session, "missing", admin_user.id, rejection_reason=None)


class TestReviewQueue:
    def test_queue_defaults_to_pending_models(self, db_session, make_model):
        pending = make_model(status=ModelStatus.VERIFICATION)
        make_model(status=ModelStatus.PUBLISHED)
        make_model(status=ModelStatus.REJECTED)

        queue = ModerationService.list_for_review(db_session)

        assert [model.id for model in queue.models] == [pending.id]
        assert queue.page.total == 1

    def test_stats_cover_whole_table_regardless_of_filter(self, db_session, make_model):
        make_model(status=ModelStatus.VERIFICATION)
        make_model(status=ModelStatus.VERIFICATION)
        make_model(status=ModelStatus.PUBLISHED)
        make_model(status=ModelStatus.REJECTED)

        queue = ModerationService.list_for_review(db_session, filter_by="rejected")

        assert len(queue.models) == 1
        assert queue.stats.pending == 2
        assert queue.stats.approved == 1
        assert queue.stats.rejected == 1
        assert queue.stats.total == 4

    def test_category_sort(self, db_session, make_model):
        make_model(category="Neurology", status=ModelStatus.VERIFICATION)
        make_model(category="Cardiology", status=ModelStatus.VERIFICATION)

        queue = ModerationService.list_for_review(db_session, sort_by="category")

        assert [model.category for model in queue.models] == ["Cardiology", "Neurology"]

    def test_pagination(self, db_session, make_model):
        for _ in range(3):
            make_model(status=ModelStatus.VERIFICATION)

        queue = ModerationService.list_for_review(db_session, page=2, limit=2)

        assert len(queue.models) == 1
        assert queue.page.total_pages == 2
        assert queue.page.has_prev
        assert not queue.page.has_next

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"filter_by": "archived"},
            {"sort_by": "likes"},
            {"limit": 101},
            {"limit": 0},
            {"page": 0},
        ],
    )
    def test_invalid_queue_parameters(self, db_session, kwargs):
        with pytest.raises(ValidationError):
            ModerationService.list_for_review(db_session, **kwargs)

    def test_get_for_review_counts_edges(self, db_session, published_model, other_user):
        EngagementService.like(db_session, published_model.id, other_user.id)
        EngagementService.download(db_session, published_model.id, other_user.id)

        record = ModerationService.get_for_review(db_session, published_model.id)

        assert record.like_count == 1
        assert record.download_count == 1
        assert record.model.author.email == "author@example.org"


class TestView:
    def test_public_view_counts(self, db_session, published_model, other_user):
        result = ModerationService.view(db_session, published_model.id, other_user)

        assert result.views == 1
        db_session.refresh(published_model)
        assert published_model.views == 1
        assert result.permissions.can_like
        assert result.permissions.can_download
        assert not result.permissions.is_owner

    def test_anonymous_view_counts(self, db_session, published_model):
        result = ModerationService.view(db_session, published_model.id, None)

        assert result.views == 1
        assert not result.permissions.can_like

    def test_owner_view_is_not_counted(self, db_session, published_model, author):
        result = ModerationService.view(db_session, published_model.id, author)

        assert result.views == 0
        assert result.permissions.is_owner
        assert result.permissions.can_edit
        assert not result.permissions.can_like

    def test_owner_sees_own_pending_model(self, db_session, pending_model, author):
        result = ModerationService.view(db_session, pending_model.id, author)

        assert result.model.id == pending_model.id
        assert result.views == 0
        assert not result.permissions.can_download

    @pytest.mark.parametrize("fixture_name", ["pending_model", "private_model"])
    def test_hidden_models_are_denied_to_others(
        self, request, db_session, other_user, fixture_name
    ):
        model = request.getfixturevalue(fixture_name)
        with pytest.raises(PermissionDeniedError):
            ModerationService.view(db_session, model.id, other_user)

    def test_missing_model(self, db_session):
        with pytest.raises(NotFoundError):
            ModerationService.view(db_session, "missing", None)

    def test_view_survives_counter_failure(self, db_session, published_model, mocker):
        mocker.patch(
            "medmesh.services.moderation.increment_views",
            side_effect=OperationalError("UPDATE model", {}, Exception("database is locked")),
        )

        result = ModerationService.view(db_session, published_model.id, None)

        assert result.views == 1
        db_session.refresh(published_model)
        assert published_model.views == 0

    def test_related_models(self, db_session, make_model, published_model):
        popular = make_model(likes=10)
        quiet = make_model(likes=1)
        make_model(category="Neurology")
        make_model(status=ModelStatus.VERIFICATION)
        make_model(visibility=Visibility.PRIVATE)

        result = ModerationService.view(db_session, published_model.id, None)

        assert [model.id for model in result.related] == [popular.id, quiet.id]

    def test_related_models_are_capped(self, db_session, make_model, published_model):
        for _ in range(settings.related_models_limit + 2):
            make_model()

        result = ModerationService.view(db_session, published_model.id, None)

        assert len(result.related) == settings.related_models_limit
