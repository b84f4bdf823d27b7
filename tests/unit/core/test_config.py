"""
Tests for application settings.

Covers defaults, environment loading with the AI_GATEWAY_ prefix, and the
production guards on the signing key and CORS origins.
"""

import pytest
from pydantic import ValidationError

from ai_gateway.core.config import Settings, get_settings


class TestSettingsDefaults:
    """Default values."""

    def test_rate_limit_defaults(self) -> None:
        """Each route class ships with its documented window and quota."""
        settings = Settings()

        assert (settings.rate_limit_auth_window_ms, settings.rate_limit_auth_max) == (900_000, 10)
        assert (settings.rate_limit_chat_window_ms, settings.rate_limit_chat_max) == (60_000, 20)
        assert (settings.rate_limit_default_window_ms, settings.rate_limit_default_max) == (
            900_000,
            100,
        )
        assert (
            settings.rate_limit_vector_search_window_ms,
            settings.rate_limit_vector_search_max,
        ) == (60_000, 30)
        assert settings.rate_limit_key_prefix == "rl:"

    def test_shared_backend_is_desired_by_default(self) -> None:
        assert Settings().rate_limit_backend == "shared"

    def test_token_lifetime_defaults_to_one_day(self) -> None:
        assert Settings().jwt_expiry_seconds == 86400


class TestSettingsFromEnvironment:
    """Environment variables use the AI_GATEWAY_ prefix."""

    def test_reads_prefixed_variables(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """AI_GATEWAY_PORT and friends override defaults."""
        monkeypatch.setenv("AI_GATEWAY_PORT", "9090")
        monkeypatch.setenv("AI_GATEWAY_RATE_LIMIT_CHAT_MAX", "5")
        monkeypatch.setenv("AI_GATEWAY_DEEPSEEK_API_KEY", "sk-env")

        settings = Settings()

        assert settings.port == 9090
        assert settings.rate_limit_chat_max == 5
        assert settings.deepseek_api_key.get_secret_value() == "sk-env"

    def test_get_settings_is_cached(self) -> None:
        get_settings.cache_clear()
        try:
            assert get_settings() is get_settings()
        finally:
            get_settings.cache_clear()

    def test_api_keys_are_not_rendered(self) -> None:
        """Secrets stay masked in reprs that could reach logs."""
        settings = Settings(openai_api_key="sk-very-secret")

        assert "sk-very-secret" not in repr(settings)


class TestSettingsValidation:
    """Field and model validators."""

    def test_rejects_non_redis_url(self) -> None:
        with pytest.raises(ValidationError):
            Settings(redis_url="http://localhost:6379")

    def test_accepts_tls_redis_url(self) -> None:
        assert Settings(redis_url="rediss://cache:6380").redis_url == "rediss://cache:6380"

    def test_base_urls_lose_trailing_slash(self) -> None:
        settings = Settings(deepseek_base_url="https://api.deepseek.com/v1/")

        assert settings.deepseek_base_url == "https://api.deepseek.com/v1"

    def test_empty_secret_outside_production_is_generated(self) -> None:
        """Development starts without a configured key, using a random one."""
        settings = Settings(environment="development", jwt_secret="")

        assert len(settings.jwt_secret.get_secret_value()) >= 32

    def test_production_requires_strong_secret(self) -> None:
        with pytest.raises(ValidationError, match="jwt_secret"):
            Settings(environment="production", jwt_secret="too-short")

    def test_production_rejects_wildcard_cors(self) -> None:
        with pytest.raises(ValidationError, match="cors_origins"):
            Settings(
                environment="production",
                jwt_secret="x" * 40,
                cors_origins=["*"],
            )

    def test_production_with_strong_secret(self) -> None:
        settings = Settings(environment="production", jwt_secret="x" * 40)

        assert settings.is_production
        assert settings.jwt_secret.get_secret_value() == "x" * 40
