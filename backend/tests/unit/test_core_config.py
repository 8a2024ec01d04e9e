"""Tests for application configuration.

Covers defaults, env var loading, and the security validation in
check_production_security().
"""

import pytest
from pydantic import SecretStr, ValidationError

from smartapply.core.config import _INSECURE_DEFAULT_SECRET, Settings
from smartapply.providers.config import ProviderConfig

# Reusable test constants
_TEST_AUTH_SECRET = "a" * 64
_PRODUCTION = "production"


class TestDefaults:
    def test_session_and_cache_defaults(self):
        s = Settings()

        assert s.session_duration_days == 10
        assert s.roadmap_cache_ttl_hours == 24
        assert s.llm_max_attempts == 3
        assert s.llm_retry_base_delay_ms == 1000

    def test_gemini_key_from_either_env_var(self, monkeypatch):
        monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
        monkeypatch.setenv("GEMINI_API_KEY", "from-gemini-var")

        assert Settings().google_api_key == "from-gemini-var"

    def test_provider_config_from_settings(self):
        s = Settings(google_api_key="k", llm_max_attempts=5, llm_timeout_seconds=12)

        config = ProviderConfig.from_settings(s)

        assert config.is_configured is True
        assert config.max_attempts == 5
        assert config.timeout_seconds == 12

    def test_blank_key_is_not_configured(self):
        assert ProviderConfig.from_settings(Settings(google_api_key="")).is_configured is False


class TestProductionSecurityValidation:
    """Tests for production security requirements."""

    def test_allows_default_secret_in_development(self):
        s = Settings(environment="development")

        assert s.auth_secret.get_secret_value() == _INSECURE_DEFAULT_SECRET

    def test_rejects_default_secret_in_production(self):
        with pytest.raises(ValidationError, match="default AUTH_SECRET"):
            Settings(environment=_PRODUCTION)

    def test_rejects_short_secret_in_production(self):
        with pytest.raises(ValidationError, match="at least 32"):
            Settings(environment=_PRODUCTION, auth_secret=SecretStr("short"))

    def test_allows_strong_secret_in_production(self):
        s = Settings(environment=_PRODUCTION, auth_secret=SecretStr(_TEST_AUTH_SECRET))

        assert s.environment == _PRODUCTION

    def test_rejects_zero_attempts(self):
        with pytest.raises(ValidationError, match="at least 1"):
            Settings(llm_max_attempts=0)

    def test_rejects_base_delay_above_cap(self):
        with pytest.raises(ValidationError, match="must not exceed"):
            Settings(llm_retry_base_delay_ms=5000, llm_retry_max_delay_ms=1000)

    def test_samesite_none_requires_secure(self):
        with pytest.raises(ValidationError, match="AUTH_COOKIE_SECURE"):
            Settings(auth_cookie_samesite="none", auth_cookie_secure=False)

    def test_rejects_wildcard_origin(self):
        with pytest.raises(ValidationError, match="wildcard"):
            Settings(allowed_origins=["*"])
