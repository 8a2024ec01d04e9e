"""Tests for the structlog configuration."""

import pytest
import structlog

from smartapply.core.logging import configure_logging, mask_credentials


class TestMaskCredentials:
    @pytest.mark.parametrize(
        "key",
        ["password", "api_key", "auth_token", "jwt-token", "secret_value", "Credential"],
    )
    def test_masks_sensitive_keys(self, key):
        event = mask_credentials(None, "info", {"event": "login", key: "hunter2"})

        assert event[key] == "***MASKED***"
        assert event["event"] == "login"

    @pytest.mark.parametrize("key", ["tokens_used", "username", "cache_key", "passwords_checked"])
    def test_leaves_lookalike_keys(self, key):
        event = mask_credentials(None, "info", {key: "visible"})

        assert event[key] == "visible"


class TestConfigureLogging:
    def test_json_renderer_chain(self):
        configure_logging(log_level="INFO", json=True)

        processors = structlog.get_config()["processors"]
        assert mask_credentials in processors
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)

    def test_console_renderer_for_development(self):
        configure_logging(log_level="DEBUG", json=False)

        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)
        assert processors.index(mask_credentials) < len(processors) - 1
