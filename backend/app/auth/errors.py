"""
Authentication error taxonomy.

OAuthFlowError subclasses end the login attempt with a redirect back to the
app carrying a short error code. AuthenticationError subclasses become a
401 JSON response with a short message.
"""


class AuthError(Exception):
    """Base class for all auth failures."""

    code: str = "auth_error"
    message: str = "Authentication error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)
        if message:
            self.message = message


# =============================================================================
# OAuth flow (redirect to /?error=<code>)
# =============================================================================


class OAuthFlowError(AuthError):
    code = "auth_failed"
    message = "GitHub login failed"


class MissingParameter(OAuthFlowError):
    code = "missing_params"
    message = "Missing code or state parameter"


class InvalidOrExpiredState(OAuthFlowError):
    code = "invalid_state"
    message = "Invalid or expired OAuth state"


class ProviderExchangeFailure(OAuthFlowError):
    code = "auth_failed"
    message = "Failed to exchange code for token"


class ProviderProfileFailure(OAuthFlowError):
    code = "auth_failed"
    message = "Failed to fetch user from GitHub"


# =============================================================================
# Request authentication (401 {"error": message})
# =============================================================================


class AuthenticationError(AuthError):
    status_code: int = 401


class Unauthorized(AuthenticationError):
    code = "unauthorized"
    message = "Unauthorized"


class InvalidToken(AuthenticationError):
    code = "invalid_token"
    message = "Invalid or expired token"


class MissingRefreshToken(AuthenticationError):
    code = "no_refresh_token"
    message = "No refresh token"


class InvalidRefreshToken(AuthenticationError):
    code = "invalid_refresh_token"
    message = "Invalid refresh token"


class SessionNotFound(AuthenticationError):
    code = "session_not_found"
    message = "Session not found"


class SessionExpired(AuthenticationError):
    code = "session_expired"
    message = "Session expired"


class UserNotFound(AuthenticationError):
    code = "user_not_found"
    message = "User not found"


__all__ = [
    "AuthError",
    "OAuthFlowError",
    "MissingParameter",
    "InvalidOrExpiredState",
    "ProviderExchangeFailure",
    "ProviderProfileFailure",
    "AuthenticationError",
    "Unauthorized",
    "InvalidToken",
    "MissingRefreshToken",
    "InvalidRefreshToken",
    "SessionNotFound",
    "SessionExpired",
    "UserNotFound",
]
