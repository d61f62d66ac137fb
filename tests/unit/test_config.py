"""Unit tests for application settings."""

from datetime import timedelta

import pytest
from pydantic import ValidationError

from sessionvault.config import Settings


def make_settings(**overrides) -> Settings:
    values = {
        "access_token_secret": "access-secret",
        "refresh_token_secret": "refresh-secret",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


class TestSettings:
    """Tests for Settings."""

    def test_defaults(self):
        settings = make_settings()

        assert settings.algorithm == "HS256"
        assert settings.access_token_ttl == timedelta(minutes=15)
        assert settings.refresh_token_ttl == timedelta(days=30)
        assert settings.api_v1_prefix == "/api/v1"

    def test_refresh_cookie_path(self):
        assert make_settings().refresh_cookie_path == "/api/v1/auth/token"
        assert make_settings(api_v1_prefix="/v2").refresh_cookie_path == "/v2/auth/token"

    def test_secure_cookies_only_in_production(self):
        assert make_settings(environment="development").secure_cookies is False
        assert make_settings(environment="production").secure_cookies is True

    def test_secrets_must_differ(self):
        with pytest.raises(ValidationError):
            make_settings(access_token_secret="same", refresh_token_secret="same")

    def test_secrets_must_be_set(self):
        with pytest.raises(ValidationError):
            make_settings(access_token_secret="")

    def test_access_lifetime_shorter_than_refresh(self):
        with pytest.raises(ValidationError):
            make_settings(access_token_expire_minutes=60 * 24 * 2, refresh_token_expire_days=1)

    def test_lifetimes_positive(self):
        with pytest.raises(ValidationError):
            make_settings(access_token_expire_minutes=0)

    def test_environment_variables(self, monkeypatch):
        monkeypatch.setenv("ACCESS_TOKEN_EXPIRE_MINUTES", "5")
        monkeypatch.setenv("WEBSITE_URL", "https://play.example.com")

        settings = make_settings()

        assert settings.access_token_ttl == timedelta(minutes=5)
        assert settings.website_url == "https://play.example.com"
