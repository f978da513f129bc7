"""Tests for environment-driven settings."""

from __future__ import annotations

import pytest

from mindsnack.config import Settings


class TestSettings:
    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        for name in ("ARTICLES_API_URL", "REVALIDATE_SECRET", "CACHE_TTL_SECONDS"):
            monkeypatch.delenv(name, raising=False)

        settings = Settings(_env_file=None)

        assert settings.articles_api_url == "https://snackmachine.onrender.com/api"
        assert settings.revalidate_secret == "your-secret-token-here"
        assert settings.cache_ttl_seconds == 86400
        assert settings.cache_sweep_threshold == 100
        assert settings.page_revalidate_url is None

    def test_unprefixed_environment_names(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ARTICLES_API_URL", "https://api.example/api")
        monkeypatch.setenv("REVALIDATE_SECRET", "s3cret")
        monkeypatch.setenv("CACHE_TTL_SECONDS", "60")
        monkeypatch.setenv("CLOUDINARY_API_SECRET", "cloud")

        settings = Settings(_env_file=None)

        assert settings.articles_api_url == "https://api.example/api"
        assert settings.revalidate_secret == "s3cret"
        assert settings.cache_ttl_seconds == 60
        assert settings.cloudinary_api_secret == "cloud"

    def test_prefixed_service_settings(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MINDSNACK_PORT", "9000")
        monkeypatch.setenv("MINDSNACK_ENV", "prod")

        settings = Settings(_env_file=None)

        assert settings.port == 9000
        assert settings.env == "prod"

    def test_field_names_accepted(self) -> None:
        settings = Settings(_env_file=None, articles_api_url="https://x.test/api")
        assert settings.articles_api_url == "https://x.test/api"

    def test_security_headers_use_service_prefix(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("MINDSNACK_ENABLE_SECURITY_HEADERS", raising=False)
        monkeypatch.setenv("ENABLE_SECURITY_HEADERS", "false")
        monkeypatch.setenv("MINDSNACK_CSP_POLICY", "default-src 'self'")

        settings = Settings(_env_file=None)

        assert settings.enable_security_headers is True
        assert settings.csp_policy == "default-src 'self'"

        monkeypatch.setenv("MINDSNACK_ENABLE_SECURITY_HEADERS", "false")
        assert Settings(_env_file=None).enable_security_headers is False
