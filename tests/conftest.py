# tests/conftest.py
from __future__ import annotations

import os
import uuid
from collections.abc import Callable, Generator, Iterator
from datetime import UTC, datetime, timedelta
from itertools import count

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("PYTEST_RUNNING", "true")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite://")

from interaction_stage.db.session import Base, enable_sqlite_foreign_keys  # noqa: E402
from interaction_stage.db.session import get_db as app_get_session  # noqa: E402
from interaction_stage.main import app as fastapi_app  # noqa: E402
from interaction_stage.models import Post, PostInteraction, User  # noqa: E402
from interaction_stage.repositories import InteractionRepository, PostRepository  # noqa: E402
from interaction_stage.services import create_access_token  # noqa: E402

TEST_DB_URL = "sqlite://"


@pytest.fixture()
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


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


@pytest.fixture()
def interactions(db_session: Session) -> InteractionRepository:
    return InteractionRepository(db_session)


@pytest.fixture()
def posts(db_session: Session) -> PostRepository:
    return PostRepository(db_session)


@pytest.fixture()
def make_user(db_session: Session) -> Callable[[str], User]:
    """Return a factory persisting users by display name."""

    def _make(display_name: str = "Test User") -> User:
        user = User(id=uuid.uuid4(), display_name=display_name)
        db_session.add(user)
        db_session.commit()
        return user

    return _make


@pytest.fixture()
def test_user(make_user: Callable[[str], User]) -> User:
    """Create and return a persisted test user."""
    return make_user("Test User")


@pytest.fixture()
def other_user(make_user: Callable[[str], User]) -> User:
    """Create and return a second persisted user."""
    return make_user("Other User")


@pytest.fixture()
def auth_token(test_user: User) -> dict[str, str]:
    """Return authorization headers for the primary test user."""
    token = create_access_token(test_user.id)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def other_auth_token(other_user: User) -> dict[str, str]:
    """Return authorization headers for the secondary test user."""
    token = create_access_token(other_user.id)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def test_post(db_session: Session, test_user: User) -> Post:
    """Create a baseline post for tests."""
    post = Post(author_id=test_user.id, body="Test post content")
    db_session.add(post)
    db_session.commit()
    return post


@pytest.fixture()
def ticking_clock() -> Callable[[], datetime]:
    """Return a clock that advances one second per call."""
    start = datetime(2026, 1, 1, tzinfo=UTC)
    ticks = count()

    def _now() -> datetime:
        return start + timedelta(seconds=next(ticks))

    return _now


@pytest.fixture()
def stored_interactions(db_session: Session) -> Callable[[int], list[PostInteraction]]:
    """Return a reader for every stored interaction on a post, freshly loaded."""

    def _read(post_id: int) -> list[PostInteraction]:
        return list(
            db_session.query(PostInteraction)
            .filter(PostInteraction.post_id == post_id)
            .order_by(PostInteraction.id)
            .populate_existing()
            .all()
        )

    return _read
