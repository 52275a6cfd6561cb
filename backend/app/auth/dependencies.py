"""
Authentication dependencies for FastAPI routes.

The access token travels in the HttpOnly `access_token` cookie. The
resolved user is handed to the route as a regular parameter and its id is
bound to the log context. Both dependencies must stay coroutines: only
then do they run in the request's own context, where the `user_id`
binding reaches the request log.
"""

from fastapi import Cookie, Depends
from sqlalchemy.orm import Session

from codiro.logging import bind_context, get_logger
from codiro.repositories import UserRepository

from ..database import get_db
from ..models import User
from .errors import InvalidToken, Unauthorized, UserNotFound
from .jwt import verify_access_token

logger = get_logger("auth.gate")


def _load_user(db: Session, access_token: str | None) -> User:
    if not access_token:
        raise Unauthorized()

    payload = verify_access_token(access_token)
    if payload is None:
        raise InvalidToken()

    user = UserRepository(db).get_by_id(payload["sub"])
    if user is None:
        logger.warning("auth_user_missing", user_id=payload["sub"])
        raise UserNotFound()
    return user


async def get_current_user(
    access_token: str | None = Cookie(None),
    db: Session = Depends(get_db),
) -> User:
    """
    Resolve the authenticated user from the access token cookie.

    Steps:
    1) Require the cookie (401 "Unauthorized").
    2) Verify signature, expiry and token kind (401 "Invalid or expired token").
    3) Load the user by the `sub` claim (401 "User not found").
    """
    user = _load_user(db, access_token)
    bind_context(user_id=user.id)
    return user


async def get_optional_user(
    access_token: str | None = Cookie(None),
    db: Session = Depends(get_db),
) -> User | None:
    """
    Get the current user if authenticated, otherwise return None.

    Useful for pages that are public but personalize for signed-in users.
    """
    if not access_token:
        return None

    payload = verify_access_token(access_token)
    if payload is None:
        return None

    user = UserRepository(db).get_by_id(payload["sub"])
    if user is not None:
        bind_context(user_id=user.id)
    return user
