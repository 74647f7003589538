"""
Tests for Config, the OpenAI client factory and logfire fallback.
"""

import pytest
from openai import AsyncOpenAI
from unittest.mock import patch

from creatorpulse.core.config import Config
from creatorpulse.core.errors import ConfigurationError
from creatorpulse.core.llm import create_openai_client, is_openai_available
from creatorpulse.core.observability import get_logfire, setup_logfire


class TestConfigValidate:
    """Test required configuration checks."""

    def test_missing_openai_key(self):
        with patch.object(Config, "OPENAI_API_KEY", ""):
            with pytest.raises(ConfigurationError) as exc_info:
                Config.validate()
        assert exc_info.value.missing == ["OPENAI_API_KEY"]

    def test_valid(self):
        with patch.object(Config, "OPENAI_API_KEY", "sk-test"):
            assert Config.validate() is True

    def test_get_default(self):
        assert Config.get("NOT_A_SETTING", "fallback") == "fallback"


class TestGetModel:
    """Test model resolution order."""

    def test_component_override(self, monkeypatch):
        monkeypatch.setenv("SCRIPT_MODEL", "gpt-4o-mini")
        monkeypatch.setenv("OPENAI_MODEL", "gpt-4.1")
        assert Config.get_model("script") == "gpt-4o-mini"

    def test_global_override(self, monkeypatch):
        monkeypatch.delenv("SCRIPT_MODEL", raising=False)
        monkeypatch.setenv("OPENAI_MODEL", "gpt-4.1")
        assert Config.get_model("script") == "gpt-4.1"

    def test_default(self, monkeypatch):
        monkeypatch.delenv("SCRIPT_MODEL", raising=False)
        monkeypatch.delenv("OPENAI_MODEL", raising=False)
        assert Config.get_model("script") == "gpt-4o"


class TestOpenAIClient:
    """Test the client factory."""

    def test_missing_key_raises(self):
        with patch.object(Config, "OPENAI_API_KEY", ""):
            with pytest.raises(ConfigurationError, match="OPENAI_API_KEY"):
                create_openai_client()
            assert is_openai_available() is False

    def test_explicit_key(self):
        with patch.object(Config, "OPENAI_API_KEY", ""):
            client = create_openai_client(api_key="sk-test")
        assert isinstance(client, AsyncOpenAI)
        assert client.api_key == "sk-test"

    def test_configured_key(self):
        with patch.object(Config, "OPENAI_API_KEY", "sk-env"):
            assert create_openai_client().api_key == "sk-env"
            assert is_openai_available() is True

    def test_no_shared_instance(self):
        assert create_openai_client(api_key="sk-a") is not create_openai_client(api_key="sk-a")


class TestObservability:
    """Test the Logfire no-op fallback."""

    def test_setup_skipped_without_token(self, monkeypatch):
        monkeypatch.delenv("LOGFIRE_TOKEN", raising=False)
        assert setup_logfire() is False

    def test_stub_span_and_logs(self, monkeypatch):
        monkeypatch.delenv("LOGFIRE_TOKEN", raising=False)
        lf = get_logfire()
        with lf.span("operation", key="value"):
            lf.info("message")
