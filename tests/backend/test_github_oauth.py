import json
from urllib.parse import parse_qs, urlparse

import httpx
import pytest

from backend.app.auth.errors import ProviderExchangeFailure, ProviderProfileFailure
from backend.app.auth.github_oauth import (
    GITHUB_ACCESS_TOKEN_URL,
    GitHubOAuthClient,
    get_github_client,
    get_oauth_authorize_url,
)

USER_PAYLOAD = {
    "id": 42,
    "login": "alice",
    "email": None,
    "avatar_url": "https://avatars.githubusercontent.com/u/42",
    "name": "Alice",
    "public_repos": 3,
}


def _client(handler) -> GitHubOAuthClient:
    return GitHubOAuthClient("cid", "csecret", timeout=5, transport=httpx.MockTransport(handler))


def _github_api(routes: dict):
    """Build a MockTransport handler from {(method, path): (status, json_body)}."""
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        status, body = routes[(request.method, request.url.path)]
        return httpx.Response(status, json=body)

    handler.calls = calls
    return handler


def test_authorize_url():
    url = get_oauth_authorize_url("state-123")
    parsed = urlparse(url)
    query = parse_qs(parsed.query)

    assert f"{parsed.scheme}://{parsed.netloc}{parsed.path}" == "https://github.com/login/oauth/authorize"
    assert query == {
        "client_id": ["test-client-id"],
        "redirect_uri": ["http://localhost:8787/api/auth/github/callback"],
        "scope": ["user:email"],
        "state": ["state-123"],
    }


def test_get_github_client_uses_settings():
    client = get_github_client()
    assert client.client_id == "test-client-id"
    assert client.client_secret == "test-client-secret"
    assert client.timeout == 10.0


class TestExchangeCode:
    def test_posts_json_and_returns_token(self):
        handler = _github_api({("POST", "/login/oauth/access_token"): (200, {"access_token": "gho_x"})})

        assert _client(handler).exchange_code("the-code") == "gho_x"

        request = handler.calls[0]
        assert str(request.url) == GITHUB_ACCESS_TOKEN_URL
        assert request.headers["accept"] == "application/json"
        assert json.loads(request.content) == {
            "client_id": "cid",
            "client_secret": "csecret",
            "code": "the-code",
        }

    def test_non_success_status_fails(self):
        handler = _github_api({("POST", "/login/oauth/access_token"): (502, {})})
        with pytest.raises(ProviderExchangeFailure):
            _client(handler).exchange_code("the-code")

    def test_error_body_without_token_fails(self):
        handler = _github_api(
            {("POST", "/login/oauth/access_token"): (200, {"error": "bad_verification_code"})}
        )
        with pytest.raises(ProviderExchangeFailure):
            _client(handler).exchange_code("used-code")


class TestFetchProfile:
    def test_public_email_skips_email_lookup(self):
        handler = _github_api({("GET", "/user"): (200, {**USER_PAYLOAD, "email": "a@example.com"})})

        profile = _client(handler).fetch_profile("gho_x")

        assert profile.id == 42
        assert profile.login == "alice"
        assert profile.email == "a@example.com"
        assert len(handler.calls) == 1
        headers = handler.calls[0].headers
        assert headers["authorization"] == "Bearer gho_x"
        assert headers["accept"] == "application/vnd.github+json"
        assert headers["user-agent"] == "codiro-app"

    def test_private_email_uses_primary_verified_address(self):
        handler = _github_api(
            {
                ("GET", "/user"): (200, USER_PAYLOAD),
                ("GET", "/user/emails"): (
                    200,
                    [
                        {"email": "old@example.com", "primary": False, "verified": True},
                        {"email": "unverified@example.com", "primary": True, "verified": False},
                        {"email": "main@example.com", "primary": True, "verified": True},
                    ],
                ),
            }
        )

        profile = _client(handler).fetch_profile("gho_x")

        assert profile.email == "main@example.com"
        assert [r.url.path for r in handler.calls] == ["/user", "/user/emails"]

    def test_no_primary_verified_email_leaves_email_empty(self):
        handler = _github_api(
            {
                ("GET", "/user"): (200, USER_PAYLOAD),
                ("GET", "/user/emails"): (
                    200,
                    [{"email": "x@example.com", "primary": True, "verified": False}],
                ),
            }
        )
        assert _client(handler).fetch_profile("gho_x").email is None

    def test_email_lookup_failure_is_not_fatal(self):
        handler = _github_api(
            {("GET", "/user"): (200, USER_PAYLOAD), ("GET", "/user/emails"): (403, {})}
        )
        profile = _client(handler).fetch_profile("gho_x")
        assert profile.login == "alice"
        assert profile.email is None

    def test_profile_error_status_fails(self):
        handler = _github_api({("GET", "/user"): (401, {"message": "Bad credentials"})})
        with pytest.raises(ProviderProfileFailure):
            _client(handler).fetch_profile("gho_x")

    def test_malformed_profile_fails(self):
        handler = _github_api({("GET", "/user"): (200, {"login": "no-id"})})
        with pytest.raises(ProviderProfileFailure):
            _client(handler).fetch_profile("gho_x")


def test_exchange_code_for_user_runs_full_flow():
    handler = _github_api(
        {
            ("POST", "/login/oauth/access_token"): (200, {"access_token": "gho_x"}),
            ("GET", "/user"): (200, {**USER_PAYLOAD, "email": "a@example.com"}),
        }
    )

    profile = _client(handler).exchange_code_for_user("code")

    assert profile.id == 42
    assert handler.calls[1].headers["authorization"] == "Bearer gho_x"


def test_transport_errors_propagate():
    def handler(request):
        raise httpx.ConnectError("unreachable", request=request)

    with pytest.raises(httpx.ConnectError):
        _client(handler).exchange_code_for_user("code")
