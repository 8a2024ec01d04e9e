"""Mock LLM provider for testing.

Lets unit tests exercise the roadmap pipeline without hitting the Gemini API.
"""

from collections import deque
from typing import Any

from smartapply.providers.config import ProviderConfig
from smartapply.providers.llm.base import (
    LLMMessage,
    LLMProvider,
    LLMResponse,
    TaskType,
)


class MockLLMProvider(LLMProvider):
    """Mock provider for testing.

    Responses are keyed by TaskType. Failures can be injected either as a
    queue consumed one per call (``fail_next``) or as a permanent error
    (``fail_always``); queued failures are raised before the permanent one.

    Attributes:
        responses: Pre-configured responses keyed by TaskType.
        calls: Record of all method invocations for test assertions.
        last_task: The most recent TaskType used in a call.
    """

    @property
    def provider_name(self) -> str:
        return "mock"

    def __init__(
        self,
        responses: dict[TaskType, str] | None = None,
        configured: bool = True,
    ) -> None:
        """Initialize mock provider.

        Args:
            responses: Dict mapping TaskType to response content. Tasks without
                an entry return "Mock response for {task}".
            configured: Value reported by is_configured().
        """
        super().__init__(ProviderConfig(google_api_key="mock-key" if configured else None))
        self.responses: dict[TaskType, str] = dict(responses) if responses else {}
        self.calls: list[dict[str, Any]] = []
        self.last_task: TaskType | None = None
        self._queued_failures: deque[Exception] = deque()
        self._permanent_failure: Exception | None = None

    def set_response(self, task: TaskType, content: str) -> None:
        self.responses[task] = content

    def fail_next(self, *errors: Exception) -> None:
        """Raise these errors, in order, on the next calls."""
        self._queued_failures.extend(errors)

    def fail_always(self, error: Exception | None) -> None:
        """Raise this error on every call (None to stop)."""
        self._permanent_failure = error

    async def complete(
        self,
        messages: list[LLMMessage],
        task: TaskType,
        max_tokens: int | None = None,
        temperature: float | None = None,
        json_mode: bool = False,
    ) -> LLMResponse:
        """Record the call, then raise an injected failure or respond."""
        self.calls.append(
            {
                "method": "complete",
                "messages": messages,
                "task": task,
                "kwargs": {
                    "max_tokens": max_tokens,
                    "temperature": temperature,
                    "json_mode": json_mode,
                },
            }
        )
        self.last_task = task

        if self._queued_failures:
            raise self._queued_failures.popleft()
        if self._permanent_failure is not None:
            raise self._permanent_failure

        content = self.responses.get(task, f"Mock response for {task.value}")

        return LLMResponse(
            content=content,
            model="mock-model",
            input_tokens=100,
            output_tokens=50,
            finish_reason="STOP",
            latency_ms=10,
        )

    def get_model_for_task(self, _task: TaskType) -> str:
        return "mock-model"

    def assert_called_with_task(self, task: TaskType) -> None:
        """Test helper to verify a task was called.

        Raises:
            AssertionError: If the task was not called.
        """
        tasks_called = [c["task"] for c in self.calls]
        assert task in tasks_called, f"Expected {task}, got {tasks_called}"
