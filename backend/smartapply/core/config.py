"""Application configuration loaded from environment variables.

Settings for the API, session handling, the Gemini text-generation
provider and the roadmap cache. Uses pydantic-settings for validation and
.env file support.
"""

from typing import Literal

from pydantic import AliasChoices, Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Development-only signing secret.
# Security: Runtime check in check_production_security() prevents use in production
_INSECURE_DEFAULT_SECRET = "smartapply-dev-secret-change-me"  # nosec B105

# Minimum length for AUTH_SECRET in production (256 bits = 32 bytes)
_MIN_AUTH_SECRET_LENGTH = 32


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # API
    # 0.0.0.0 binds to all network interfaces (required for Docker containers)
    api_host: str = "0.0.0.0"  # nosec B104
    api_port: int = 8000

    # CORS
    # Default allows the Vite dev server
    allowed_origins: list[str] = ["http://localhost:5173"]

    # Application
    app_title: str = "SmartApply AI"
    environment: str = "development"
    log_level: str = "INFO"
    log_json: bool = False

    # Gemini (either GOOGLE_API_KEY or GEMINI_API_KEY)
    google_api_key: str = Field(
        default="",
        validation_alias=AliasChoices("google_api_key", "gemini_api_key"),
    )
    gemini_model: str = "gemini-2.0-flash"
    llm_max_attempts: int = 3
    llm_retry_base_delay_ms: int = 1000
    llm_retry_max_delay_ms: int = 30000
    llm_timeout_seconds: float = 30.0
    llm_max_output_tokens: int = 8192

    # Roadmap cache
    roadmap_cache_ttl_hours: int = 24

    # Sessions
    auth_secret: SecretStr = SecretStr(_INSECURE_DEFAULT_SECRET)
    auth_issuer: str = "smartapply-ai"
    auth_audience: str = "smartapply-ai"
    auth_cookie_name: str = "smartapply.session-token"
    auth_cookie_secure: bool = True
    auth_cookie_samesite: Literal["lax", "strict", "none"] = "lax"
    session_duration_days: int = 10

    # Demo credential directory (seeded accounts for the mocked login flow)
    demo_users_enabled: bool = True

    # Rate Limiting
    rate_limit_llm: str = "10/minute"  # roadmap generation endpoints
    rate_limit_enabled: bool = True  # Disable for testing

    @model_validator(mode="after")
    def check_production_security(self) -> "Settings":
        """Validate production security requirements.

        Checks:
        - Retry settings need at least one attempt with base <= cap (all environments)
        - SameSite=None requires Secure flag (browser requirement)
        - CORS must not use wildcard origin (incompatible with credentials)
        - AUTH_SECRET must not be the default and must be >= 32 chars in production
        """
        if self.llm_max_attempts < 1:
            msg = f"LLM_MAX_ATTEMPTS must be at least 1. Got: {self.llm_max_attempts}"
            raise ValueError(msg)
        if self.llm_retry_base_delay_ms > self.llm_retry_max_delay_ms:
            msg = (
                "LLM_RETRY_BASE_DELAY_MS must not exceed LLM_RETRY_MAX_DELAY_MS. "
                f"Got: {self.llm_retry_base_delay_ms} > {self.llm_retry_max_delay_ms}"
            )
            raise ValueError(msg)

        if self.auth_cookie_samesite == "none" and not self.auth_cookie_secure:
            msg = (
                "AUTH_COOKIE_SECURE must be true when AUTH_COOKIE_SAMESITE=none. "
                "Browsers reject SameSite=None cookies without the Secure flag."
            )
            raise ValueError(msg)

        if "*" in self.allowed_origins:
            msg = (
                "ALLOWED_ORIGINS must not contain '*' (wildcard). "
                "This application uses credentials (cookies) which are "
                "incompatible with wildcard CORS origins."
            )
            raise ValueError(msg)

        if self.environment == "production":
            secret_value = self.auth_secret.get_secret_value()
            if secret_value == _INSECURE_DEFAULT_SECRET:
                msg = (
                    "Cannot use the default AUTH_SECRET in production. "
                    'Generate with: python -c "import secrets; '
                    'print(secrets.token_hex(32))"'
                )
                raise ValueError(msg)
            if len(secret_value) < _MIN_AUTH_SECRET_LENGTH:
                msg = (
                    f"AUTH_SECRET must be at least {_MIN_AUTH_SECRET_LENGTH} "
                    "characters for adequate security."
                )
                raise ValueError(msg)

        return self


settings = Settings()
