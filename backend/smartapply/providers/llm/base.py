"""Abstract base class and types for LLM providers.

LLMProvider interface with TaskType routing, message types and JSON mode.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from smartapply.providers.config import ProviderConfig


class TaskType(Enum):
    """Task types for model routing."""

    ROADMAP_GENERATION = "roadmap_generation"
    ALTERNATIVE_CAREERS = "alternative_careers"
    HEALTH_CHECK = "health_check"


@dataclass
class LLMMessage:
    """Provider-agnostic message format.

    Attributes:
        role: Message role ("system", "user", "assistant").
        content: Text content.
    """

    role: str
    content: str


@dataclass
class LLMResponse:
    """Provider-agnostic response format.

    Attributes:
        content: Text response (None if the provider returned no text).
        model: Actual model used (for logging).
        input_tokens: Number of input tokens used.
        output_tokens: Number of output tokens generated.
        finish_reason: Why generation stopped ("STOP", "MAX_TOKENS", ...).
        latency_ms: Response time in milliseconds.
    """

    content: str | None
    model: str
    input_tokens: int
    output_tokens: int
    finish_reason: str
    latency_ms: float


class LLMProvider(ABC):
    """Abstract base class for LLM providers."""

    def __init__(self, config: "ProviderConfig") -> None:
        """Initialize with provider configuration.

        Args:
            config: Provider configuration including API keys and defaults.
        """
        self.config = config

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the provider identifier (e.g., 'gemini')."""
        ...

    def is_configured(self) -> bool:
        """Whether the provider has the credentials it needs to make calls."""
        return self.config.is_configured

    @abstractmethod
    async def complete(
        self,
        messages: list[LLMMessage],
        task: TaskType,
        max_tokens: int | None = None,
        temperature: float | None = None,
        json_mode: bool = False,
    ) -> LLMResponse:
        """Generate a completion.

        Args:
            messages: Conversation history as list of LLMMessage.
            task: Task type for model routing.
            max_tokens: Override default max tokens.
            temperature: Override default temperature.
            json_mode: If True, ask the provider for a JSON body.

        Returns:
            LLMResponse with the generated text.

        Raises:
            ProviderError: Mapped from the SDK's exception (no retry here;
                callers wrap with with_retries).
        """
        ...

    @abstractmethod
    def get_model_for_task(self, task: TaskType) -> str:
        """Return the model identifier for a given task."""
        ...
