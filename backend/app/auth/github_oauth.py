"""
GitHub OAuth client.

Three outbound calls, all blocking and bounded by the client timeout:
code -> access token, token -> profile, and (when the profile hides the
email) token -> email list. Nothing is retried: OAuth codes are single-use.
"""

from typing import Optional
from urllib.parse import urlencode

import httpx
from pydantic import ValidationError

from codiro.logging import get_logger, log_timing
from codiro.types import GitHubProfile

from ..config import get_settings
from .errors import ProviderExchangeFailure, ProviderProfileFailure

GITHUB_AUTHORIZE_URL = "https://github.com/login/oauth/authorize"
GITHUB_ACCESS_TOKEN_URL = "https://github.com/login/oauth/access_token"
GITHUB_API_URL = "https://api.github.com"
GITHUB_API_VERSION = "2022-11-28"
USER_AGENT = "codiro-app"

logger = get_logger("auth.github")


def get_oauth_authorize_url(state: str) -> str:
    """Build GitHub OAuth authorize URL with client settings and state."""
    settings = get_settings()
    params = {
        "client_id": settings.github_client_id,
        "redirect_uri": settings.github_redirect_uri,
        "scope": settings.github_scope,
        "state": state,
    }
    return f"{GITHUB_AUTHORIZE_URL}?{urlencode(params)}"


class GitHubOAuthClient:
    """
    Thin wrapper over the GitHub OAuth and REST endpoints used at login.

    Args:
        client_id: OAuth app client id.
        client_secret: OAuth app client secret.
        timeout: Per-request timeout in seconds.
        transport: Optional httpx transport (tests pass an httpx.MockTransport).
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.timeout = timeout
        self.transport = transport

    def _client(self) -> httpx.Client:
        return httpx.Client(timeout=self.timeout, transport=self.transport)

    @staticmethod
    def _api_headers(access_token: str) -> dict:
        return {
            "Authorization": f"Bearer {access_token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": GITHUB_API_VERSION,
            "User-Agent": USER_AGENT,
        }

    def exchange_code(self, code: str) -> str:
        """
        Exchange GitHub OAuth code for an access token.

        Raises:
            ProviderExchangeFailure: on a non-2xx status or when the response
                carries no access_token (GitHub reports bad codes with 200).
        """
        payload = {
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "code": code,
        }
        headers = {"Accept": "application/json", "User-Agent": USER_AGENT}
        with self._client() as client:
            response = client.post(GITHUB_ACCESS_TOKEN_URL, json=payload, headers=headers)

        if not response.is_success:
            logger.warning("github_token_exchange_failed", status_code=response.status_code)
            raise ProviderExchangeFailure()

        body = response.json()
        access_token = body.get("access_token")
        if not access_token:
            logger.warning("github_token_exchange_failed", github_error=body.get("error"))
            raise ProviderExchangeFailure()
        return access_token

    def fetch_profile(self, access_token: str) -> GitHubProfile:
        """
        Fetch the GitHub user profile.

        Falls back to the primary verified address from /user/emails when
        the profile email is private.

        Raises:
            ProviderProfileFailure: on a non-2xx status or an unusable payload.
        """
        headers = self._api_headers(access_token)
        with self._client() as client:
            user_resp = client.get(f"{GITHUB_API_URL}/user", headers=headers)
            if not user_resp.is_success:
                logger.warning(
                    "github_profile_fetch_failed",
                    status_code=user_resp.status_code,
                    body=user_resp.text[:200],
                )
                raise ProviderProfileFailure(
                    f"Failed to fetch user from GitHub: {user_resp.status_code}"
                )

            try:
                profile = GitHubProfile.model_validate(user_resp.json())
            except ValidationError as exc:
                raise ProviderProfileFailure("Unexpected GitHub user payload") from exc

            if not profile.email:
                profile.email = self._primary_email(client, headers)

        return profile

    def _primary_email(self, client: httpx.Client, headers: dict) -> Optional[str]:
        emails_resp = client.get(f"{GITHUB_API_URL}/user/emails", headers=headers)
        if not emails_resp.is_success:
            logger.info("github_email_lookup_skipped", status_code=emails_resp.status_code)
            return None

        for entry in emails_resp.json():
            if entry.get("primary") and entry.get("verified"):
                return entry.get("email")
        return None

    @log_timing("github_code_exchange", logger=logger)
    def exchange_code_for_user(self, code: str) -> GitHubProfile:
        """Run the full code -> token -> profile exchange."""
        access_token = self.exchange_code(code)
        return self.fetch_profile(access_token)


def get_github_client() -> GitHubOAuthClient:
    """FastAPI dependency returning a client configured from settings."""
    settings = get_settings()
    return GitHubOAuthClient(
        client_id=settings.github_client_id,
        client_secret=settings.github_client_secret,
        timeout=settings.github_http_timeout,
    )
