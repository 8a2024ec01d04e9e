"""Tests for the Gemini LLM adapter.

The google-genai client is replaced with a MagicMock; request building,
response parsing and error classification run for real.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from smartapply.providers.config import ProviderConfig
from smartapply.providers.errors import (
    AuthenticationError,
    ContentFilterError,
    ContextLengthError,
    ProviderError,
    RateLimitError,
    TransientError,
)
from smartapply.providers.llm.base import LLMMessage, TaskType
from smartapply.providers.llm.gemini_adapter import GeminiAdapter, _classify_gemini_error


@pytest.fixture
def config():
    return ProviderConfig(google_api_key="test-api-key", default_max_tokens=4096)


@pytest.fixture
def mock_genai_response():
    """Create a mock Gemini API response."""
    text_part = MagicMock()
    text_part.text = '{"primaryCareer": "Data Scientist"}'

    candidate = MagicMock()
    candidate.content = MagicMock()
    candidate.content.parts = [text_part]
    candidate.finish_reason = MagicMock()
    candidate.finish_reason.name = "STOP"

    response = MagicMock()
    response.candidates = [candidate]
    response.usage_metadata = MagicMock(prompt_token_count=10, candidates_token_count=20)
    return response


@pytest.fixture
def mock_client():
    """Create a mock genai.Client with async methods."""
    client = MagicMock()
    client.aio.models.generate_content = AsyncMock()
    return client


class APIError(Exception):
    """Stand-in for google.genai.errors.APIError, which carries an HTTP code."""

    def __init__(self, code: int, message: str) -> None:
        super().__init__(message)
        self.code = code


class TestGeminiAdapterInit:
    def test_init_creates_client_with_api_key(self, config):
        with patch("smartapply.providers.llm.gemini_adapter.genai") as mock_genai:
            GeminiAdapter(config)

            mock_genai.Client.assert_called_once_with(api_key="test-api-key")

    def test_no_client_without_key(self):
        with patch("smartapply.providers.llm.gemini_adapter.genai") as mock_genai:
            adapter = GeminiAdapter(ProviderConfig(google_api_key="  "))

            mock_genai.Client.assert_not_called()
            assert adapter.is_configured() is False

    def test_routing_override(self):
        config = ProviderConfig(
            google_api_key="k",
            gemini_model_routing={"health_check": "gemini-lite"},
        )
        with patch("smartapply.providers.llm.gemini_adapter.genai"):
            adapter = GeminiAdapter(config)

        assert adapter.get_model_for_task(TaskType.HEALTH_CHECK) == "gemini-lite"
        assert adapter.get_model_for_task(TaskType.ROADMAP_GENERATION) == config.gemini_model


class TestGeminiAdapterComplete:
    @pytest.mark.asyncio
    async def test_complete_returns_text_and_usage(self, config, mock_client, mock_genai_response):
        with patch("smartapply.providers.llm.gemini_adapter.genai") as mock_genai:
            mock_genai.Client.return_value = mock_client
            mock_client.aio.models.generate_content.return_value = mock_genai_response
            adapter = GeminiAdapter(config)

            response = await adapter.complete(
                [LLMMessage(role="user", content="Build a roadmap")],
                task=TaskType.ROADMAP_GENERATION,
            )

        assert response.content == '{"primaryCareer": "Data Scientist"}'
        assert response.input_tokens == 10
        assert response.output_tokens == 20
        assert response.finish_reason == "STOP"

    @pytest.mark.asyncio
    async def test_system_message_becomes_instruction(
        self, config, mock_client, mock_genai_response
    ):
        with patch("smartapply.providers.llm.gemini_adapter.genai") as mock_genai:
            mock_genai.Client.return_value = mock_client
            mock_client.aio.models.generate_content.return_value = mock_genai_response
            adapter = GeminiAdapter(config)

            await adapter.complete(
                [
                    LLMMessage(role="system", content="Reply with JSON"),
                    LLMMessage(role="user", content="Hi"),
                    LLMMessage(role="assistant", content="{}"),
                ],
                task=TaskType.ROADMAP_GENERATION,
                json_mode=True,
            )

        kwargs = mock_client.aio.models.generate_content.call_args.kwargs
        assert kwargs["config"].system_instruction == "Reply with JSON"
        assert kwargs["config"].response_mime_type == "application/json"
        assert kwargs["config"].max_output_tokens == 4096
        assert [content.role for content in kwargs["contents"]] == ["user", "model"]

    @pytest.mark.asyncio
    async def test_empty_candidates_give_no_content(self, config, mock_client):
        empty = MagicMock(candidates=[], usage_metadata=None)
        with patch("smartapply.providers.llm.gemini_adapter.genai") as mock_genai:
            mock_genai.Client.return_value = mock_client
            mock_client.aio.models.generate_content.return_value = empty
            adapter = GeminiAdapter(config)

            response = await adapter.complete(
                [LLMMessage(role="user", content="Hi")], task=TaskType.HEALTH_CHECK
            )

        assert response.content is None
        assert response.finish_reason == "UNKNOWN"

    @pytest.mark.asyncio
    async def test_unconfigured_raises_authentication_error(self):
        adapter = GeminiAdapter(ProviderConfig())

        with pytest.raises(AuthenticationError):
            await adapter.complete([LLMMessage(role="user", content="Hi")], task=TaskType.HEALTH_CHECK)

    @pytest.mark.asyncio
    async def test_sdk_errors_are_classified(self, config, mock_client):
        with patch("smartapply.providers.llm.gemini_adapter.genai") as mock_genai:
            mock_genai.Client.return_value = mock_client
            mock_client.aio.models.generate_content.side_effect = APIError(429, "quota")
            adapter = GeminiAdapter(config)

            with pytest.raises(RateLimitError):
                await adapter.complete(
                    [LLMMessage(role="user", content="Hi")], task=TaskType.ROADMAP_GENERATION
                )


class TestClassifyGeminiError:
    @pytest.mark.parametrize(
        "error, expected",
        [
            (APIError(429, "Too many requests"), RateLimitError),
            (APIError(401, "Unauthorized"), AuthenticationError),
            (APIError(403, "Forbidden"), AuthenticationError),
            (APIError(500, "Internal"), TransientError),
            (APIError(503, "Overloaded"), TransientError),
            (TimeoutError(), TransientError),
            (httpx.ConnectError("connection refused"), TransientError),
            (Exception("Resource has been exhausted"), RateLimitError),
            (Exception("PERMISSION_DENIED"), AuthenticationError),
            (Exception("API key not valid"), AuthenticationError),
            (Exception("Input exceeds context window"), ContextLengthError),
            (Exception("Response blocked by safety settings"), ContentFilterError),
            (Exception("Service unavailable"), TransientError),
        ],
    )
    def test_mapping(self, error, expected):
        assert type(_classify_gemini_error(error)) is expected

    def test_unknown_error_is_generic_provider_error(self):
        result = _classify_gemini_error(ValueError("something odd"))

        assert type(result) is ProviderError
        assert str(result) == "something odd"
