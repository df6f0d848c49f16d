# tests/services/test_engagement_service.py
"""Tests for like and download counters."""

from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy import func

from medmesh.core.errors import ConflictError, NotFoundError, PermissionDeniedError
from medmesh.models import ModelDownload, ModelLike, ModelStatus, User, Visibility
from medmesh.services.engagement import EngagementService


def _like_rows(db, model_id: str) -> int:
    return db.query(func.count()).select_from(ModelLike).filter(
        ModelLike.model_id == model_id
    ).scalar()


def _download_rows(db, model_id: str) -> int:
    return db.query(func.count()).select_from(ModelDownload).filter(
        ModelDownload.model_id == model_id
    ).scalar()


class TestLike:
    def test_like_increments_counter_and_records_edge(
        self, db_session, published_model, other_user
    ):
        likes = EngagementService.like(db_session, published_model.id, other_user.id)

        assert likes == 1
        assert _like_rows(db_session, published_model.id) == 1

    def test_second_like_conflicts(self, db_session, published_model, other_user):
        EngagementService.like(db_session, published_model.id, other_user.id)

        with pytest.raises(ConflictError):
            EngagementService.like(db_session, published_model.id, other_user.id)

        db_session.refresh(published_model)
        assert published_model.likes == 1

    def test_author_cannot_like_own_model(self, db_session, published_model, author):
        with pytest.raises(PermissionDeniedError):
            EngagementService.like(db_session, published_model.id, author.id)
        assert _like_rows(db_session, published_model.id) == 0

    @pytest.mark.parametrize(
        "overrides",
        [
            {"status": ModelStatus.VERIFICATION},
            {"status": ModelStatus.REJECTED},
            {"visibility": Visibility.PRIVATE},
        ],
    )
    def test_like_requires_public_model(self, db_session, make_model, other_user, overrides):
        model = make_model(**overrides)
        with pytest.raises(PermissionDeniedError):
            EngagementService.like(db_session, model.id, other_user.id)

    def test_like_missing_model(self, db_session, other_user):
        with pytest.raises(NotFoundError):
            EngagementService.like(db_session, "missing", other_user.id)

    def test_concurrent_duplicate_like_surfaces_as_conflict(
        self, db_session, published_model, other_user, mocker
    ):
        EngagementService.like(db_session, published_model.id, other_user.id)
        db_session.expunge_all()
        # Simulate a racing request that passed the existence check.
        mocker.patch("medmesh.services.engagement._find_like", return_value=None)

        with pytest.raises(ConflictError):
            EngagementService.like(db_session, published_model.id, other_user.id)

        assert _like_rows(db_session, published_model.id) == 1
        assert db_session.get(type(published_model), published_model.id).likes == 1


class TestUnlike:
    def test_unlike_decrements_and_removes_edge(self, db_session, published_model, other_user):
        EngagementService.like(db_session, published_model.id, other_user.id)

        likes = EngagementService.unlike(db_session, published_model.id, other_user.id)

        assert likes == 0
        assert _like_rows(db_session, published_model.id) == 0

    def test_unlike_without_like(self, db_session, published_model, other_user):
        with pytest.raises(NotFoundError):
            EngagementService.unlike(db_session, published_model.id, other_user.id)

    def test_unlike_counter_never_goes_negative(self, db_session, published_model, other_user):
        EngagementService.like(db_session, published_model.id, other_user.id)
        published_model.likes = 0
        db_session.commit()

        likes = EngagementService.unlike(db_session, published_model.id, other_user.id)

        assert likes == 0

    def test_concurrent_duplicate_unlike_leaves_counter_in_step(
        self, db_session, published_model, other_user, admin_user, mocker
    ):
        for user in (other_user, admin_user):
            EngagementService.like(db_session, published_model.id, user.id)
        EngagementService.unlike(db_session, published_model.id, other_user.id)
        # Simulate a racing request that saw the edge before it was removed.
        mocker.patch(
            "medmesh.services.engagement._find_like",
            return_value=(other_user.id,),
        )

        with pytest.raises(NotFoundError):
            EngagementService.unlike(db_session, published_model.id, other_user.id)

        db_session.refresh(published_model)
        assert published_model.likes == _like_rows(db_session, published_model.id) == 1

    def test_like_again_after_unlike(self, db_session, published_model, other_user):
        EngagementService.like(db_session, published_model.id, other_user.id)
        EngagementService.unlike(db_session, published_model.id, other_user.id)

        likes = EngagementService.like(db_session, published_model.id, other_user.id)

        assert likes == 1
        assert _like_rows(db_session, published_model.id) == 1

    def test_like_count_matches_edges_across_users(
        self, db_session, published_model, other_user, admin_user
    ):
        third = User(email="third@example.org")
        db_session.add(third)
        db_session.commit()

        for user in (other_user, admin_user, third):
            EngagementService.like(db_session, published_model.id, user.id)
        EngagementService.unlike(db_session, published_model.id, admin_user.id)

        db_session.refresh(published_model)
        assert published_model.likes == _like_rows(db_session, published_model.id) == 2


class TestDownload:
    T0 = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)

    def test_first_download_is_counted(self, db_session, published_model, other_user):
        outcome = EngagementService.download(db_session, published_model.id, other_user.id)

        assert outcome.counted
        assert outcome.downloads == 1
        assert outcome.download_url == published_model.model_file_url
        assert _download_rows(db_session, published_model.id) == 1

    def test_repeat_inside_window_is_not_counted(self, db_session, published_model, other_user):
        EngagementService.download(db_session, published_model.id, other_user.id, now=self.T0)

        outcome = EngagementService.download(
            db_session,
            published_model.id,
            other_user.id,
            now=self.T0 + timedelta(minutes=4, seconds=59),
        )

        assert not outcome.counted
        assert outcome.downloads == 1
        assert outcome.download_url == published_model.model_file_url
        assert _download_rows(db_session, published_model.id) == 1

    def test_repeat_after_window_is_counted(self, db_session, published_model, other_user):
        EngagementService.download(db_session, published_model.id, other_user.id, now=self.T0)
        EngagementService.download(
            db_session,
            published_model.id,
            other_user.id,
            now=self.T0 + timedelta(minutes=4, seconds=59),
        )

        outcome = EngagementService.download(
            db_session,
            published_model.id,
            other_user.id,
            now=self.T0 + timedelta(minutes=5, seconds=1),
        )

        assert outcome.counted
        assert outcome.downloads == 2
        assert _download_rows(db_session, published_model.id) == 2

    def test_window_is_per_user(self, db_session, published_model, other_user, admin_user):
        EngagementService.download(db_session, published_model.id, other_user.id, now=self.T0)

        outcome = EngagementService.download(
            db_session, published_model.id, admin_user.id, now=self.T0
        )

        assert outcome.counted
        assert outcome.downloads == 2

    def test_download_requires_public_model(self, db_session, pending_model, author):
        with pytest.raises(PermissionDeniedError):
            EngagementService.download(db_session, pending_model.id, author.id)
        assert _download_rows(db_session, pending_model.id) == 0
