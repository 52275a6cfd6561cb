import pytest
from pydantic import ValidationError

from codiro.config import Settings, get_settings


def test_defaults_from_environment():
    settings = get_settings()

    assert settings.github_client_id == "test-client-id"
    assert settings.access_token_expire_minutes == 15
    assert settings.refresh_token_expire_days == 30
    assert settings.oauth_state_ttl == 600
    assert settings.github_redirect_uri == "http://localhost:8787/api/auth/github/callback"


def test_get_settings_is_cached():
    assert get_settings() is get_settings()


@pytest.mark.parametrize(
    ("app_url", "secure"),
    [
        ("http://localhost:8787", False),
        ("https://codiro.example.com", True),
        ("HTTPS://codiro.example.com", True),
    ],
)
def test_secure_cookies_follow_app_url_scheme(monkeypatch, app_url, secure):
    monkeypatch.setenv("APP_URL", app_url)
    assert Settings().secure_cookies is secure


def test_redirect_uri_ignores_trailing_slash(monkeypatch):
    monkeypatch.setenv("APP_URL", "https://codiro.example.com/")
    assert Settings().github_redirect_uri == "https://codiro.example.com/api/auth/github/callback"


def test_weak_secret_warns_in_development(monkeypatch):
    monkeypatch.setenv("JWT_SECRET", "short")
    with pytest.warns(UserWarning, match="at least 32 characters"):
        Settings()


def test_weak_secret_rejected_in_production(monkeypatch):
    monkeypatch.setenv("ENV", "production")
    monkeypatch.setenv("JWT_SECRET", "CHANGE_ME")
    with pytest.raises(ValidationError):
        Settings()


def test_validate_production_config(monkeypatch):
    monkeypatch.setenv("GITHUB_APP_CLIENT_ID", "")
    errors, warnings = Settings().validate_production_config()

    assert "GITHUB_APP_CLIENT_ID is required for OAuth" in errors
    assert any("Secure flag" in w for w in warnings)


def test_cors_origins_list(monkeypatch):
    monkeypatch.setenv("CORS_ALLOWED_ORIGINS", "http://a.test, http://b.test,")
    assert Settings().cors_origins_list == ["http://a.test", "http://b.test"]
