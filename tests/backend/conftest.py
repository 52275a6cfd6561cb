from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session, sessionmaker

from backend.app.auth.errors import ProviderExchangeFailure
from backend.app.auth.github_oauth import get_github_client
from backend.app.database import get_db
from backend.app.main import create_app
from codiro.types import GitHubProfile


class FakeGitHubClient:
    """Stands in for GitHubOAuthClient; returns a canned profile or raises."""

    def __init__(self, profile: GitHubProfile | None = None, error: Exception | None = None):
        self.profile = profile
        self.error = error
        self.codes: list[str] = []

    def exchange_code_for_user(self, code: str) -> GitHubProfile:
        self.codes.append(code)
        if self.error is not None:
            raise self.error
        if self.profile is None:
            raise ProviderExchangeFailure()
        return self.profile


@pytest.fixture
def fake_github() -> FakeGitHubClient:
    return FakeGitHubClient()


@pytest.fixture
def test_app_client(test_db, fake_github) -> Iterator[tuple[TestClient, sessionmaker]]:
    _, TestingSessionLocal, _ = test_db

    app = create_app()

    def override_get_db() -> Iterator[Session]:
        db = TestingSessionLocal()
        try:
            yield db
            db.commit()  # Auto-commit on success like production
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_github_client] = lambda: fake_github

    with TestClient(app) as client:
        yield client, TestingSessionLocal
