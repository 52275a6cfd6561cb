"""
JWT helper utilities.

Three token kinds share one signing secret: access (short-lived, proves a
recent login), refresh (long-lived, bound to a session row) and state
(binds an OAuth redirect to its callback). Every token carries a `typ`
claim and is only accepted as the kind it was minted for.
"""

import uuid
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Dict

from jose import JWTError, jwt

from codiro.utils import utc_now

from ..config import get_settings


class TokenKind(str, Enum):
    ACCESS = "access"
    REFRESH = "refresh"
    STATE = "state"


def token_ttl(kind: TokenKind) -> timedelta:
    """Validity window for a token kind."""
    settings = get_settings()
    if kind is TokenKind.ACCESS:
        return timedelta(minutes=settings.access_token_expire_minutes)
    if kind is TokenKind.REFRESH:
        return timedelta(days=settings.refresh_token_expire_days)
    return timedelta(seconds=settings.oauth_state_ttl)


def _encode(claims: Dict[str, Any], kind: TokenKind, now: datetime | None = None) -> str:
    settings = get_settings()
    issued_at = now or utc_now()
    to_encode = dict(claims)
    to_encode.update({
        "typ": kind.value,
        "iat": int(issued_at.timestamp()),
        "exp": int((issued_at + token_ttl(kind)).timestamp()),
    })
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def create_access_token(user_id: str, username: str, now: datetime | None = None) -> str:
    """
    Create a signed access token.

    Args:
        user_id: Local user id, stored as the `sub` claim.
        username: Current username, so the frontend can render without a lookup.
        now: Issue time override (defaults to the current UTC time).

    Returns:
        Encoded JWT string.
    """
    return _encode({"sub": user_id, "username": username}, TokenKind.ACCESS, now)


def create_refresh_token(user_id: str, session_id: str, now: datetime | None = None) -> str:
    """Create a signed refresh token bound to a session row."""
    return _encode({"sub": user_id, "sid": session_id}, TokenKind.REFRESH, now)


def create_state_token(now: datetime | None = None) -> str:
    """Create a stateless OAuth state token (CSRF protection for the callback)."""
    issued_at = now or utc_now()
    claims = {
        "timestamp": int(issued_at.timestamp() * 1000),
        "random": str(uuid.uuid4()),
    }
    return _encode(claims, TokenKind.STATE, issued_at)


def decode_token(token: str | None, kind: TokenKind) -> Dict[str, Any] | None:
    """
    Decode and validate a token of the given kind.

    Checks the signature, the `exp` claim and the `typ` claim.

    Returns:
        Decoded payload dict, or None when the token is missing, malformed,
        tampered with, expired or of another kind.
    """
    if not token:
        return None

    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None

    if payload.get("typ") != kind.value:
        return None
    return payload


def verify_access_token(token: str | None) -> Dict[str, Any] | None:
    payload = decode_token(token, TokenKind.ACCESS)
    if not payload or not payload.get("sub"):
        return None
    return payload


def verify_refresh_token(token: str | None) -> Dict[str, Any] | None:
    payload = decode_token(token, TokenKind.REFRESH)
    if not payload or not payload.get("sub") or not payload.get("sid"):
        return None
    return payload


def verify_state_token(token: str | None, now: datetime | None = None) -> Dict[str, Any] | None:
    """
    Verify an OAuth state token.

    On top of the `exp` check, the embedded millisecond timestamp must be
    younger than the state window.
    """
    payload = decode_token(token, TokenKind.STATE)
    if not payload:
        return None

    timestamp = payload.get("timestamp")
    if not isinstance(timestamp, (int, float)):
        return None

    now_ms = int((now or utc_now()).timestamp() * 1000)
    max_age_ms = token_ttl(TokenKind.STATE).total_seconds() * 1000
    if now_ms - timestamp > max_age_ms:
        return None
    return payload
