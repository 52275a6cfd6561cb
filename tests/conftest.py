"""
Pytest fixtures for Codiro tests.

Every test gets a fresh in-memory SQLite database with foreign keys on,
so cascade deletes behave like production.
"""

import os

# Settings are read at import time by backend.app.main; pin them first.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-signing-secret-0123456789-abcdefghijklmnop")
os.environ.setdefault("GITHUB_APP_CLIENT_ID", "test-client-id")
os.environ.setdefault("GITHUB_APP_CLIENT_SECRET", "test-client-secret")
os.environ.setdefault("APP_URL", "http://localhost:8787")

import pytest  # noqa: E402
import structlog  # noqa: E402
from structlog.testing import LogCapture  # noqa: E402

import codiro.models  # noqa: E402,F401
from codiro.config import get_settings  # noqa: E402
from codiro.db import Base, create_db_engine, create_session_factory  # noqa: E402
from codiro.models import User  # noqa: E402
from codiro.types import GitHubProfile  # noqa: E402


@pytest.fixture(autouse=True)
def _fresh_settings():
    """Tests may tweak env vars; never leak a cached Settings between tests."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(scope="function")
def test_db():
    """Create a fresh test database for each test using ORM."""
    db_url = "sqlite://"
    engine = create_db_engine(db_url)

    Base.metadata.create_all(bind=engine)

    TestingSessionLocal = create_session_factory(engine)

    yield db_url, TestingSessionLocal, engine

    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def test_session(test_db):
    """Get a test session from the test database."""
    _, TestingSessionLocal, _ = test_db
    session = TestingSessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


@pytest.fixture
def github_profile():
    """GitHub profile as returned by GET /user, email already resolved."""
    return GitHubProfile(
        id=42,
        login="alice",
        email="alice@example.com",
        avatar_url="https://avatars.githubusercontent.com/u/42",
        name="Alice",
    )


@pytest.fixture
def make_user():
    """Factory inserting a bare user row (no GitHub identity)."""

    def _make_user(session, username="tester", **kwargs) -> User:
        user = User(
            username=username,
            email=kwargs.pop("email", f"{username}@example.com"),
            avatar_url=kwargs.pop("avatar_url", "http://example.com/avatar.png"),
            **kwargs,
        )
        session.add(user)
        session.flush()
        return user

    return _make_user


@pytest.fixture
def captured_logs():
    """Entries logged during the test, with request context merged in."""
    capture = LogCapture()
    previous = structlog.get_config()["processors"]
    structlog.configure(processors=[structlog.contextvars.merge_contextvars, capture])
    yield capture.entries
    structlog.configure(processors=previous)
