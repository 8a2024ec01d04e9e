"""Provider factory functions.

Singleton pattern for the LLM provider instance.
"""

from smartapply.providers.config import ProviderConfig
from smartapply.providers.llm.base import LLMProvider
from smartapply.providers.llm.gemini_adapter import GeminiAdapter

_llm_provider: LLMProvider | None = None


def get_llm_provider(config: ProviderConfig | None = None) -> LLMProvider:
    """Get or create the LLM provider singleton.

    The first call sets the config (app startup); later calls reuse the
    instance and its HTTP connections.

    Args:
        config: Optional provider configuration. If None and no provider
            exists, loads from environment.

    Returns:
        LLMProvider instance.
    """
    global _llm_provider

    if _llm_provider is None:
        if config is None:
            config = ProviderConfig.from_env()
        _llm_provider = GeminiAdapter(config)

    return _llm_provider


def reset_providers() -> None:
    """Reset provider singletons.

    Used in tests to ensure isolation between test cases.
    """
    global _llm_provider
    _llm_provider = None
