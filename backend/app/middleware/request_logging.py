"""
Per-request logging middleware.

Every HTTP request gets an id (taken from `X-Request-ID` or generated),
echoed back in the response header and bound to the log context. When the
response completes, one `request_complete` entry is written. For auth
responses it also records which auth cookies were issued or cleared, and
the error code of a login redirect, so a login, refresh or logout can be
followed from the access log alone. Cookie values are never logged.
"""

import time
import uuid
from urllib.parse import parse_qs, urlsplit

from codiro.logging import bind_context, clear_context, get_logger

from ..auth.cookies import ACCESS_COOKIE, REFRESH_COOKIE

REQUEST_ID_HEADER = b"x-request-id"
AUTH_COOKIES = (ACCESS_COOKIE, REFRESH_COOKIE)


def _request_id(scope) -> str:
    for name, value in scope.get("headers", []):
        if name == REQUEST_ID_HEADER and value:
            return value.decode("latin-1")
    return str(uuid.uuid4())


def auth_outcome(headers: list[tuple[bytes, bytes]]) -> dict:
    """Summarize auth cookies and login error redirects found in response headers."""
    issued, cleared = [], []
    outcome: dict = {}

    for name, value in headers:
        if name == b"set-cookie":
            cookie = value.decode("latin-1")
            cookie_name = cookie.split("=", 1)[0]
            if cookie_name not in AUTH_COOKIES:
                continue
            if "max-age=0" in cookie.lower():
                cleared.append(cookie_name)
            else:
                issued.append(cookie_name)
        elif name == b"location":
            error = parse_qs(urlsplit(value.decode("latin-1")).query).get("error")
            if error:
                outcome["login_error"] = error[0]

    if issued:
        outcome["cookies_issued"] = sorted(issued)
    if cleared:
        outcome["cookies_cleared"] = sorted(cleared)
    return outcome


class RequestLoggingMiddleware:
    """ASGI middleware; must sit outside anything that logs per request."""

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        # Looked up per request so test log capture sees the current config
        logger = get_logger("http")
        started = time.perf_counter()
        request_id = _request_id(scope)
        scope.setdefault("state", {})["request_id"] = request_id
        clear_context()
        bind_context(request_id=request_id)

        status_code = 500
        outcome: dict = {}

        async def send_wrapper(message):
            nonlocal status_code, outcome
            if message["type"] == "http.response.start":
                status_code = message["status"]
                headers = list(message.get("headers", []))
                outcome = auth_outcome(headers)
                headers.append((REQUEST_ID_HEADER, request_id.encode("latin-1")))
                message = {**message, "headers": headers}
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            if status_code >= 500:
                log = logger.error
            elif status_code >= 400:
                log = logger.warning
            else:
                log = logger.info
            log(
                "request_complete",
                method=scope.get("method", ""),
                path=scope.get("path", ""),
                status_code=status_code,
                duration_ms=round((time.perf_counter() - started) * 1000, 1),
                **outcome,
            )
            clear_context()
