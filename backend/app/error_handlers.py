"""
Exception handlers for the auth API.

- AuthenticationError -> 401 `{"error": <message>}`
- OAuthFlowError      -> 302 to `/?error=<code>` (browser-facing callback)
- HTTPException       -> its status with `{"error", "status_code"}`
- anything else       -> 500 with a generic message; details stay in the log
"""

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse, RedirectResponse

from codiro.logging import get_logger

from .auth.errors import AuthenticationError, OAuthFlowError

logger = get_logger("backend.errors")

LOGIN_ERROR_URL = "/?error={code}"


def _error_payload(message: str, status_code: int) -> dict:
    return {"error": message, "status_code": status_code}


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AuthenticationError)
    async def authentication_error_handler(request: Request, exc: AuthenticationError):
        logger.info("auth_rejected", error_code=exc.code, path=request.url.path)
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(OAuthFlowError)
    async def oauth_flow_error_handler(request: Request, exc: OAuthFlowError):
        # Callback failures land back in the app, never on a JSON error page
        return RedirectResponse(
            url=LOGIN_ERROR_URL.format(code=exc.code), status_code=status.HTTP_302_FOUND
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_payload(str(exc.detail), exc.status_code),
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("unhandled_exception", error_type=type(exc).__name__)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_error_payload("Internal server error", 500),
        )
