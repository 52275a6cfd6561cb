"""
Authentication router for GitHub OAuth flow.

Login walks through: initiate (state token + redirect) -> callback
(state check, code exchange, user upsert, session row, cookies) -> home.
Afterwards the access cookie is renewed through /refresh until the
session expires or the user logs out.

Security:
- CSRF protection via a signed, stateless OAuth state token (10 min)
- Tokens only ever travel in HttpOnly cookies, never in URLs
- Refresh tokens are revocable through their session row
"""

from fastapi import APIRouter, Cookie, Depends, Query, status
from fastapi.responses import JSONResponse, RedirectResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from codiro.logging import LogContext, get_logger
from codiro.repositories import SessionRepository, UserRepository
from codiro.utils import new_id, utc_now

from ..auth.cookies import clear_auth_cookies, set_access_cookie, set_auth_cookies, set_refresh_cookie
from ..auth.dependencies import get_current_user
from ..auth.errors import (
    InvalidOrExpiredState,
    InvalidRefreshToken,
    MissingParameter,
    MissingRefreshToken,
    OAuthFlowError,
    SessionExpired,
    SessionNotFound,
    UserNotFound,
)
from ..auth.github_oauth import GitHubOAuthClient, get_github_client, get_oauth_authorize_url
from ..auth.jwt import (
    TokenKind,
    create_access_token,
    create_refresh_token,
    create_state_token,
    token_ttl,
    verify_refresh_token,
    verify_state_token,
)
from ..database import get_db
from ..models import User
from ..schemas import ErrorResponse, MeResponse, SuccessResponse, UserResponse

logger = get_logger("auth")

router = APIRouter(prefix="/auth", tags=["auth"])

HOME_URL = "/"


@router.get("/github")
def github_login():
    """
    Redirect to GitHub OAuth authorization page.

    The state token is signed rather than stored, so nothing is persisted
    until the callback succeeds.
    """
    state = create_state_token()
    logger.info("oauth_initiated")
    return RedirectResponse(url=get_oauth_authorize_url(state), status_code=status.HTTP_302_FOUND)


@router.get("/github/callback")
def github_callback(
    code: str | None = Query(None),
    state: str | None = Query(None),
    db: Session = Depends(get_db),
    github: GitHubOAuthClient = Depends(get_github_client),
):
    """
    Handle GitHub OAuth callback.

    Flow:
    1. Require code and state (missing_params)
    2. Verify the state token (invalid_state)
    3. Exchange code for a GitHub profile (auth_failed)
    4. Create/update the user and its GitHub identity
    5. Open a session and issue access + refresh cookies
    6. Redirect home
    """
    if not code or not state:
        logger.warning("oauth_callback_missing_params", has_code=bool(code), has_state=bool(state))
        raise MissingParameter()

    if verify_state_token(state) is None:
        logger.warning("oauth_state_invalid")
        raise InvalidOrExpiredState()

    # Any failure below propagates through get_db, which rolls the unit of work back
    try:
        profile = github.exchange_code_for_user(code)
        with LogContext(github_id=profile.id):
            result = UserRepository(db).upsert_from_provider(profile)
    except OAuthFlowError as e:
        logger.warning("oauth_callback_failed", reason=e.code, error=str(e))
        raise
    except Exception as e:
        logger.error("oauth_callback_error", error=str(e), error_type=type(e).__name__)
        raise OAuthFlowError() from e

    now = utc_now()
    session_id = new_id()
    SessionRepository(db).create(
        session_id=session_id,
        user_id=result.user_id,
        expires_at=now + token_ttl(TokenKind.REFRESH),
    )
    access_token = create_access_token(result.user_id, profile.login, now)
    refresh_token = create_refresh_token(result.user_id, session_id, now)
    db.commit()

    logger.info(
        "oauth_login_success",
        user_id=result.user_id,
        username=profile.login,
        is_new_user=result.is_new_user,
    )
    response = RedirectResponse(url=HOME_URL, status_code=status.HTTP_302_FOUND)
    set_auth_cookies(response, access_token, refresh_token)
    return response


@router.post(
    "/refresh",
    response_model=SuccessResponse,
    responses={401: {"model": ErrorResponse}},
)
def refresh_access_token(
    refresh_token: str | None = Cookie(None),
    db: Session = Depends(get_db),
):
    """
    Mint a new access token from the refresh token cookie.

    The refresh token is not rotated: the same cookie is written back
    unchanged, so its lifetime stays tied to the session row.
    """
    if not refresh_token:
        raise MissingRefreshToken()

    payload = verify_refresh_token(refresh_token)
    if payload is None:
        raise InvalidRefreshToken()

    sessions = SessionRepository(db)
    auth_session = sessions.find_by_id(payload["sid"])
    if auth_session is None:
        raise SessionNotFound()

    now = utc_now()
    if sessions.is_expired(auth_session, now):
        sessions.delete_by_id(auth_session.id)
        db.commit()
        logger.info("session_expired", session_id=auth_session.id)
        raise SessionExpired()

    user = UserRepository(db).get_by_id(auth_session.user_id)
    if user is None:
        raise UserNotFound()

    new_access_token = create_access_token(user.id, user.username, now)
    logger.debug("access_token_refreshed", user_id=user.id)

    response = JSONResponse(content={"success": True})
    set_access_cookie(response, new_access_token)
    set_refresh_cookie(response, refresh_token)
    return response


@router.post("/logout", response_model=SuccessResponse)
def logout(
    refresh_token: str | None = Cookie(None),
    db: Session = Depends(get_db),
):
    """
    Log out and clear both auth cookies.

    Deletes the session behind a valid refresh token and sweeps every
    session that is already past its expiry. Always answers 200: without
    valid cookies the caller ends up logged out either way.
    """
    sessions = SessionRepository(db)
    payload = verify_refresh_token(refresh_token)

    try:
        if payload:
            sessions.delete_by_id(payload["sid"])
        swept = sessions.delete_expired(utc_now())
        db.commit()
        logger.info("logout", had_session=bool(payload), expired_sessions_swept=swept)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("logout_cleanup_failed", error=str(e), error_type=type(e).__name__)

    response = JSONResponse(content={"success": True})
    clear_auth_cookies(response)
    return response


@router.get(
    "/me",
    response_model=MeResponse,
    responses={401: {"model": ErrorResponse}},
)
def current_user(user: User = Depends(get_current_user)) -> MeResponse:
    """Get current authenticated user."""
    return MeResponse(user=UserResponse.model_validate(user))
