"""LLM provider module.

LLM provider interface and adapters.
"""

from smartapply.providers.llm.base import (
    LLMMessage,
    LLMProvider,
    LLMResponse,
    TaskType,
)
from smartapply.providers.llm.gemini_adapter import GeminiAdapter
from smartapply.providers.llm.mock_adapter import MockLLMProvider

__all__ = [
    # Base types
    "LLMMessage",
    "LLMProvider",
    "LLMResponse",
    "TaskType",
    # Adapters
    "GeminiAdapter",
    "MockLLMProvider",
]
