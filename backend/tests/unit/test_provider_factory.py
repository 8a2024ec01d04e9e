"""Tests for the provider factory singleton and the mock provider."""

import pytest

from smartapply.providers import factory
from smartapply.providers.config import ProviderConfig
from smartapply.providers.errors import TransientError
from smartapply.providers.llm.base import LLMMessage, TaskType
from smartapply.providers.llm.gemini_adapter import GeminiAdapter
from smartapply.providers.llm.mock_adapter import MockLLMProvider


@pytest.fixture(autouse=True)
def _reset():
    factory.reset_providers()
    yield
    factory.reset_providers()


class TestGetLLMProvider:
    def test_creates_gemini_adapter(self):
        provider = factory.get_llm_provider(ProviderConfig())

        assert isinstance(provider, GeminiAdapter)
        assert provider.provider_name == "gemini"

    def test_returns_singleton(self):
        first = factory.get_llm_provider(ProviderConfig())

        assert factory.get_llm_provider(ProviderConfig(google_api_key="other")) is first

    def test_loads_env_without_config(self, monkeypatch):
        monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        monkeypatch.setenv("GEMINI_MODEL", "gemini-custom")

        provider = factory.get_llm_provider()

        assert provider.config.gemini_model == "gemini-custom"
        assert provider.is_configured() is False


class TestMockLLMProvider:
    @pytest.mark.asyncio
    async def test_records_calls_and_returns_configured_response(self):
        mock = MockLLMProvider({TaskType.HEALTH_CHECK: "OK"})

        response = await mock.complete(
            [LLMMessage(role="user", content="ping")], task=TaskType.HEALTH_CHECK
        )

        assert response.content == "OK"
        assert mock.calls[0]["task"] is TaskType.HEALTH_CHECK
        mock.assert_called_with_task(TaskType.HEALTH_CHECK)

    @pytest.mark.asyncio
    async def test_queued_failures_precede_permanent_one(self):
        mock = MockLLMProvider()
        mock.fail_next(TransientError("first"))
        mock.fail_always(TransientError("always"))
        messages = [LLMMessage(role="user", content="x")]

        with pytest.raises(TransientError, match="first"):
            await mock.complete(messages, task=TaskType.ROADMAP_GENERATION)
        with pytest.raises(TransientError, match="always"):
            await mock.complete(messages, task=TaskType.ROADMAP_GENERATION)

        mock.fail_always(None)
        response = await mock.complete(messages, task=TaskType.ROADMAP_GENERATION)
        assert response.content == "Mock response for roadmap_generation"

    def test_configured_flag(self):
        assert MockLLMProvider().is_configured() is True
        assert MockLLMProvider(configured=False).is_configured() is False
