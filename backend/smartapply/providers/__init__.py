"""Provider abstraction layer.

Exports:
    Error classes for provider error handling
    ProviderConfig for configuration
    Factory functions for provider instances
"""

from smartapply.providers.config import ProviderConfig
from smartapply.providers.errors import (
    AuthenticationError,
    ContentFilterError,
    ContextLengthError,
    MalformedResponseError,
    ProviderError,
    RateLimitError,
    RetryCancelledError,
    TransientError,
)
from smartapply.providers.factory import get_llm_provider, reset_providers

__all__ = [
    # Config
    "ProviderConfig",
    # Errors
    "ProviderError",
    "RateLimitError",
    "AuthenticationError",
    "ContentFilterError",
    "ContextLengthError",
    "TransientError",
    "MalformedResponseError",
    "RetryCancelledError",
    # Factory
    "get_llm_provider",
    "reset_providers",
]
