"""
Auth cookie helpers.

Both cookies are HttpOnly, SameSite=Lax and scoped to "/". The Secure flag
follows the scheme of APP_URL.
"""

from fastapi import Response

from ..config import get_settings
from .jwt import TokenKind, token_ttl

ACCESS_COOKIE = "access_token"
REFRESH_COOKIE = "refresh_token"


def _set_cookie(response: Response, key: str, value: str, max_age: int) -> None:
    settings = get_settings()
    response.set_cookie(
        key=key,
        value=value,
        httponly=True,  # Cannot be accessed by JavaScript
        secure=settings.secure_cookies,
        samesite="lax",
        max_age=max_age,
        path="/",
    )


def set_access_cookie(response: Response, access_token: str) -> None:
    max_age = int(token_ttl(TokenKind.ACCESS).total_seconds())
    _set_cookie(response, ACCESS_COOKIE, access_token, max_age)


def set_refresh_cookie(response: Response, refresh_token: str) -> None:
    max_age = int(token_ttl(TokenKind.REFRESH).total_seconds())
    _set_cookie(response, REFRESH_COOKIE, refresh_token, max_age)


def set_auth_cookies(response: Response, access_token: str, refresh_token: str) -> None:
    set_access_cookie(response, access_token)
    set_refresh_cookie(response, refresh_token)


def clear_auth_cookies(response: Response) -> None:
    """Expire both auth cookies (Max-Age=0)."""
    for key in (ACCESS_COOKIE, REFRESH_COOKIE):
        _set_cookie(response, key, "", max_age=0)
