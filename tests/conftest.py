# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator
from itertools import count
from typing import Any

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("SECRET_KEY", "medmesh-test-secret")
os.environ.setdefault("DATABASE_URL", "sqlite://")

from medmesh.core.security import create_access_token
from medmesh.db.session import Base, dump_json
from medmesh.db.session import get_db as app_get_session
from medmesh.db.time import utcnow
from medmesh.main import app as fastapi_app
from medmesh.models import MedicalModel, ModelStatus, User, UserRole, Visibility

TEST_DB_URL = "sqlite://"

_TITLE_COUNTER = count(1)


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        json_serializer=dump_json,
    )

    # pysqlite needs to leave transaction control to SQLAlchemy for SAVEPOINT to work.
    @event.listens_for(engine, "connect")
    def _disable_pysqlite_begin(dbapi_connection, connection_record) -> None:
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _emit_begin(conn) -> None:
        conn.exec_driver_sql("BEGIN")

    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    """Session whose commits and rollbacks stay inside one outer transaction."""
    connection = engine.connect()
    transaction = connection.begin()
    SessionLocal = sessionmaker(
        bind=connection,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
        join_transaction_mode="create_savepoint",
    )
    session = SessionLocal()

    try:
        yield session
    finally:
        session.close()

        if transaction.is_active:
            transaction.rollback()
        connection.close()

        # Ensure each test sees a clean database even if commits occurred.
        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                cleanup_conn.execute(table.delete())


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_session_dependency(app: FastAPI, db_session: Session) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


def _create_user(db: Session, **fields: Any) -> User:
    user = User(**fields)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture()
def author(db_session: Session) -> User:
    """A regular account that submits models."""
    return _create_user(
        db_session,
        email="author@example.org",
        username="dr_heart",
        display_name="Dr. Heart",
        bio="Cardiothoracic surgeon",
        region="EU",
    )


@pytest.fixture()
def other_user(db_session: Session) -> User:
    """A second regular account that browses and engages."""
    return _create_user(db_session, email="viewer@example.org", display_name="Viewer")


@pytest.fixture()
def admin_user(db_session: Session) -> User:
    """An account holding the moderator role."""
    return _create_user(
        db_session,
        email="admin@example.org",
        display_name="Moderator",
        role=UserRole.ADMIN,
    )


def bearer(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


@pytest.fixture()
def auth_token(author: User) -> dict[str, str]:
    """Return authorization headers for the author."""
    return bearer(author)


@pytest.fixture()
def other_auth_token(other_user: User) -> dict[str, str]:
    """Return authorization headers for the secondary user."""
    return bearer(other_user)


@pytest.fixture()
def admin_auth_token(admin_user: User) -> dict[str, str]:
    """Return authorization headers for the moderator."""
    return bearer(admin_user)


@pytest.fixture()
def make_model(db_session: Session, author: User) -> Callable[..., MedicalModel]:
    """Factory persisting a model directly, bypassing the moderation flow."""

    def _make(**overrides: Any) -> MedicalModel:
        status_value = overrides.pop("status", ModelStatus.PUBLISHED)
        fields: dict[str, Any] = {
            "author_id": author.id,
            "title": f"Anatomy Model {next(_TITLE_COUNTER)}",
            "description": "Detailed anatomical reconstruction for teaching.",
            "category": "Cardiology",
            "tags": ["anatomy"],
            "visibility": Visibility.PUBLIC,
            "cover_image_url": "https://cdn.example.org/cover.png",
            "model_file_url": "https://cdn.example.org/model.stl",
            "status": status_value,
            "published_at": utcnow() if status_value == ModelStatus.PUBLISHED else None,
            "rejection_reason": "Needs work" if status_value == ModelStatus.REJECTED else None,
        }
        fields.update(overrides)
        model = MedicalModel(**fields)
        db_session.add(model)
        db_session.commit()
        db_session.refresh(model)
        return model

    return _make


@pytest.fixture()
def published_model(make_model: Callable[..., MedicalModel]) -> MedicalModel:
    return make_model(title="Heart Model")


@pytest.fixture()
def pending_model(make_model: Callable[..., MedicalModel]) -> MedicalModel:
    return make_model(title="Pending Kidney", status=ModelStatus.VERIFICATION)


@pytest.fixture()
def private_model(make_model: Callable[..., MedicalModel]) -> MedicalModel:
    return make_model(title="Private Skull", visibility=Visibility.PRIVATE)


@pytest.fixture()
def model_payload() -> dict[str, Any]:
    """A valid submission body in the client's camelCase shape."""
    return {
        "title": "Heart Model",
        "description": "Full heart with chambers and valves, printable at 1:1 scale.",
        "category": "Cardiology",
        "tags": "heart, cardiology, anatomy",
        "visibility": "public",
        "nsfwContent": False,
        "allowAdaptations": True,
        "allowCommercialUse": False,
        "allowSharing": True,
        "coverImageUrl": "https://cdn.example.org/heart.png",
        "modelFileUrl": "https://cdn.example.org/heart.stl",
    }
