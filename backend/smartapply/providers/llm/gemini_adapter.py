"""Google Gemini LLM adapter.

Uses the unified google-genai SDK. Each call is bounded by
``config.timeout_seconds``; SDK and transport exceptions are mapped onto the
provider error taxonomy so the retry helper can classify them.
"""

import asyncio
import time
from typing import TYPE_CHECKING

import httpx
import structlog
from google import genai
from google.genai import types

from smartapply.providers.errors import (
    AuthenticationError,
    ContentFilterError,
    ContextLengthError,
    ProviderError,
    RateLimitError,
    TransientError,
)
from smartapply.providers.llm.base import (
    LLMMessage,
    LLMProvider,
    LLMResponse,
    TaskType,
)

if TYPE_CHECKING:
    from smartapply.providers.config import ProviderConfig

logger = structlog.get_logger()

_TRANSIENT_STATUS_CODES = frozenset({500, 502, 503, 504})


def _classify_gemini_error(error: Exception) -> ProviderError:
    """Map Gemini exceptions to internal error taxonomy.

    HTTP status codes (google.genai.errors.APIError.code) take precedence;
    message matching covers errors raised without one.
    """
    if isinstance(error, (asyncio.TimeoutError, httpx.TransportError)):
        return TransientError(str(error) or type(error).__name__)

    code = getattr(error, "code", None)
    if isinstance(code, int):
        if code == 429:
            return RateLimitError(str(error))
        if code in (401, 403):
            return AuthenticationError(str(error))
        if code in _TRANSIENT_STATUS_CODES:
            return TransientError(str(error))

    error_msg = str(error).lower()
    if "resource" in error_msg and "exhausted" in error_msg:
        return RateLimitError(str(error))
    if "permission" in error_msg or "unauthenticated" in error_msg:
        return AuthenticationError(str(error))
    if "api key" in error_msg:
        return AuthenticationError(str(error))
    if "context" in error_msg or "token" in error_msg:
        return ContextLengthError(str(error))
    if "safety" in error_msg or "blocked" in error_msg:
        return ContentFilterError(str(error))
    if "unavailable" in error_msg or "503" in error_msg:
        return TransientError(str(error))
    return ProviderError(str(error))


def _convert_gemini_messages(
    messages: list[LLMMessage],
) -> tuple[str | None, list[types.Content]]:
    """Convert LLMMessages to Gemini format, extracting system instruction."""
    system_instruction = None
    contents: list[types.Content] = []

    for msg in messages:
        if msg.role == "system":
            system_instruction = msg.content
            continue
        role = "model" if msg.role == "assistant" else msg.role
        contents.append(types.Content(role=role, parts=[types.Part(text=msg.content)]))

    return system_instruction, contents


def _parse_gemini_response(response: object) -> tuple[str | None, str]:
    """Extract text and finish_reason from a GenerateContentResponse."""
    candidates = getattr(response, "candidates", None)
    if not candidates:
        return None, "UNKNOWN"

    candidate = candidates[0]
    finish_reason = candidate.finish_reason.name if candidate.finish_reason else "UNKNOWN"
    if not (candidate.content and candidate.content.parts):
        return None, finish_reason

    text = "".join(part.text for part in candidate.content.parts if part.text)
    return text or None, finish_reason


class GeminiAdapter(LLMProvider):
    """Google Gemini adapter using unified google-genai SDK.

    The SDK client is only constructed when a key is present; without one
    every call raises AuthenticationError, which callers treat as a signal
    to use the offline fallback.
    """

    @property
    def provider_name(self) -> str:
        return "gemini"

    def __init__(self, config: "ProviderConfig") -> None:
        super().__init__(config)
        self.client: genai.Client | None = None
        if config.is_configured:
            self.client = genai.Client(api_key=config.google_api_key)
        self.model_routing: dict[str, str] = {}
        if config.gemini_model_routing:
            self.model_routing.update(config.gemini_model_routing)

    async def complete(
        self,
        messages: list[LLMMessage],
        task: TaskType,
        max_tokens: int | None = None,
        temperature: float | None = None,
        json_mode: bool = False,
    ) -> LLMResponse:
        """Generate completion using Gemini."""
        if self.client is None:
            raise AuthenticationError("Gemini API key not configured")

        model_name = self.get_model_for_task(task)
        system_instruction, contents = _convert_gemini_messages(messages)

        gen_config = types.GenerateContentConfig(
            max_output_tokens=max_tokens or self.config.default_max_tokens,
            temperature=(
                temperature if temperature is not None else self.config.default_temperature
            ),
            system_instruction=system_instruction,
            response_mime_type="application/json" if json_mode else None,
        )

        logger.info(
            "llm_request_start",
            provider="gemini",
            model=model_name,
            task=task.value,
            message_count=len(messages),
        )

        start_time = time.monotonic()

        try:
            response = await asyncio.wait_for(
                self.client.aio.models.generate_content(
                    model=model_name,
                    contents=contents,  # type: ignore[arg-type]
                    config=gen_config,
                ),
                timeout=self.config.timeout_seconds,
            )
        except Exception as e:
            latency_ms = (time.monotonic() - start_time) * 1000
            logger.error(
                "llm_request_failed",
                provider="gemini",
                model=model_name,
                task=task.value,
                error=str(e),
                error_type=type(e).__name__,
                latency_ms=latency_ms,
            )
            raise _classify_gemini_error(e) from e

        latency_ms = (time.monotonic() - start_time) * 1000
        content, finish_reason = _parse_gemini_response(response)

        usage = response.usage_metadata
        input_tokens = (usage.prompt_token_count if usage else 0) or 0
        output_tokens = (usage.candidates_token_count if usage else 0) or 0

        logger.info(
            "llm_request_complete",
            provider="gemini",
            model=model_name,
            task=task.value,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            finish_reason=finish_reason,
            latency_ms=latency_ms,
        )

        return LLMResponse(
            content=content,
            model=model_name,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            finish_reason=finish_reason,
            latency_ms=latency_ms,
        )

    def get_model_for_task(self, task: TaskType) -> str:
        """Routing override for the task, else the configured model."""
        return self.model_routing.get(task.value, self.config.gemini_model)
