"""Provider configuration management.

Centralized configuration for the text-generation provider and its retry
policy.
"""

import os
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from smartapply.core.config import Settings

DEFAULT_GEMINI_MODEL = "gemini-2.0-flash"


@dataclass
class ProviderConfig:
    """Centralized provider configuration.

    Attributes:
        google_api_key: Google AI API key (loaded from environment).
        gemini_model: Model used when a task has no routing override.
        gemini_model_routing: Override model routing per task value.
        default_max_tokens: Default max output tokens.
        default_temperature: Default sampling temperature.
        timeout_seconds: Per-request timeout for a single provider call.
        max_attempts: Total provider calls, the first one included.
        retry_base_delay_ms: Base delay for exponential backoff.
        retry_max_delay_ms: Max delay cap for exponential backoff.
        retry_jitter_ratio: Random jitter as a fraction of the base delay.
            Zero keeps the backoff schedule deterministic.
    """

    google_api_key: str | None = None
    gemini_model: str = DEFAULT_GEMINI_MODEL
    gemini_model_routing: dict[str, str] | None = None

    default_max_tokens: int = 8192
    default_temperature: float = 0.7
    timeout_seconds: float = 30.0

    # Retry policy
    max_attempts: int = 3
    retry_base_delay_ms: int = 1000
    retry_max_delay_ms: int = 30000
    retry_jitter_ratio: float = 0.0

    @property
    def is_configured(self) -> bool:
        """True when an API credential is present."""
        return bool(self.google_api_key and self.google_api_key.strip())

    @classmethod
    def from_env(cls) -> "ProviderConfig":
        """Load configuration from environment variables.

        Accepts GOOGLE_API_KEY or GEMINI_API_KEY for the credential.

        Returns:
            ProviderConfig instance with values from environment.
        """
        return cls(
            google_api_key=os.getenv("GOOGLE_API_KEY") or os.getenv("GEMINI_API_KEY"),
            gemini_model=os.getenv("GEMINI_MODEL", DEFAULT_GEMINI_MODEL),
            default_max_tokens=int(os.getenv("LLM_MAX_OUTPUT_TOKENS", "8192")),
            default_temperature=float(os.getenv("DEFAULT_TEMPERATURE", "0.7")),
            timeout_seconds=float(os.getenv("LLM_TIMEOUT_SECONDS", "30")),
            max_attempts=int(os.getenv("LLM_MAX_ATTEMPTS", "3")),
            retry_base_delay_ms=int(os.getenv("LLM_RETRY_BASE_DELAY_MS", "1000")),
            retry_max_delay_ms=int(os.getenv("LLM_RETRY_MAX_DELAY_MS", "30000")),
        )

    @classmethod
    def from_settings(cls, settings: "Settings") -> "ProviderConfig":
        """Build from the validated application settings."""
        return cls(
            google_api_key=settings.google_api_key or None,
            gemini_model=settings.gemini_model,
            default_max_tokens=settings.llm_max_output_tokens,
            timeout_seconds=settings.llm_timeout_seconds,
            max_attempts=settings.llm_max_attempts,
            retry_base_delay_ms=settings.llm_retry_base_delay_ms,
            retry_max_delay_ms=settings.llm_retry_max_delay_ms,
        )
