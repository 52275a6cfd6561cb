import asyncio
from datetime import timedelta

import pytest
import structlog

from backend.app.auth.dependencies import get_current_user, get_optional_user
from backend.app.auth.errors import InvalidToken, Unauthorized, UserNotFound
from backend.app.auth.jwt import create_access_token, create_state_token
from codiro.logging import clear_context
from codiro.utils import utc_now


def current_user(token, db):
    return asyncio.run(get_current_user(access_token=token, db=db))


def optional_user(token, db):
    return asyncio.run(get_optional_user(access_token=token, db=db))


class TestGetCurrentUser:
    def test_valid_token_returns_user(self, test_session, make_user):
        user = make_user(test_session, username="alice")
        token = create_access_token(user.id, "alice")

        assert current_user(token, test_session) is user

    def test_missing_cookie(self, test_session):
        with pytest.raises(Unauthorized):
            current_user(None, test_session)

    @pytest.mark.parametrize(
        "token_factory",
        [
            lambda: "garbage",
            lambda: create_state_token(),
            lambda: create_access_token("u", "alice", now=utc_now() - timedelta(hours=1)),
        ],
    )
    def test_invalid_token(self, test_session, token_factory):
        with pytest.raises(InvalidToken):
            current_user(token_factory(), test_session)

    def test_unknown_subject(self, test_session):
        with pytest.raises(UserNotFound):
            current_user(create_access_token("ghost", "ghost"), test_session)


class TestGetOptionalUser:
    def test_valid_token_returns_user(self, test_session, make_user):
        user = make_user(test_session)
        token = create_access_token(user.id, user.username)

        assert optional_user(token, test_session) is user

    @pytest.mark.parametrize("token", [None, "", "garbage"])
    def test_absent_or_invalid_token_returns_none(self, test_session, token):
        assert optional_user(token, test_session) is None

    def test_unknown_subject_returns_none(self, test_session):
        token = create_access_token("ghost", "ghost")
        assert optional_user(token, test_session) is None


def test_user_id_bound_in_callers_context(test_session, make_user):
    user = make_user(test_session)
    token = create_access_token(user.id, user.username)
    clear_context()

    async def resolve():
        await get_current_user(access_token=token, db=test_session)
        return structlog.contextvars.get_contextvars()

    assert asyncio.run(resolve())["user_id"] == user.id
