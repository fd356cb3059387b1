"""Unit tests for configuration management."""

import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from lumosgen.ai.types import ProviderKind
from lumosgen.config import Settings, build_service_config


class TestSettings:
    """Tests for Settings model."""

    def test_settings_defaults(self) -> None:
        """Test default settings values."""
        with patch.dict(os.environ, {}, clear=True):
            settings = Settings(_env_file=None)

            assert settings.deepseek_api_key is None
            assert settings.deepseek_model == "deepseek-chat"
            assert settings.openai_model == "gpt-4o-mini"
            assert settings.strategy == [ProviderKind.DEEPSEEK, ProviderKind.OPENAI, ProviderKind.MOCK]
            assert settings.daily_cost_threshold == 10.0
            assert settings.total_cost_threshold == 100.0
            assert settings.usage_retention_days == 30
            assert settings.workflow_task_timeout == 60.0
            assert settings.max_content_retries == 2
            assert settings.log_level == "INFO"
            assert settings.log_format == "console"

    def test_settings_from_env(self) -> None:
        """Test loading settings from environment variables."""
        with patch.dict(
            os.environ,
            {
                "DEEPSEEK_API_KEY": "sk-deepseek",
                "OPENAI_API_KEY": "sk-openai",
                "OPENAI_ORGANIZATION": "org-123",
                "DEGRADATION_STRATEGY": "OpenAI, deepseek",
                "MOCK_ENABLED": "false",
                "LOG_FORMAT": "json",
            },
            clear=True,
        ):
            settings = Settings(_env_file=None)

            assert settings.deepseek_api_key == "sk-deepseek"
            assert settings.openai_organization == "org-123"
            assert settings.degradation_strategy == "openai,deepseek"
            assert settings.strategy == [ProviderKind.OPENAI, ProviderKind.DEEPSEEK]
            assert settings.mock_enabled is False
            assert settings.log_format == "json"

    def test_unknown_provider_in_strategy(self) -> None:
        """Test that unknown providers are rejected."""
        with patch.dict(os.environ, {"DEGRADATION_STRATEGY": "deepseek,anthropic"}, clear=True):
            with pytest.raises(ValidationError, match="anthropic"):
                Settings(_env_file=None)

    def test_empty_strategy(self) -> None:
        with patch.dict(os.environ, {"DEGRADATION_STRATEGY": " , "}, clear=True):
            with pytest.raises(ValidationError):
                Settings(_env_file=None)


class TestBuildServiceConfig:
    """Tests for the orchestrator configuration built from settings."""

    def test_primary_follows_strategy(self) -> None:
        with patch.dict(
            os.environ,
            {"DEGRADATION_STRATEGY": "openai,deepseek,mock", "OPENAI_API_KEY": "sk-openai"},
            clear=True,
        ):
            config = build_service_config(Settings(_env_file=None))

        assert config.primary.kind == ProviderKind.OPENAI
        assert config.primary.api_key == "sk-openai"
        assert config.fallback.kind == ProviderKind.DEEPSEEK
        assert config.mock.kind == ProviderKind.MOCK
        assert config.degradation_strategy[0] == ProviderKind.OPENAI

    def test_mock_settings_carried(self) -> None:
        with patch.dict(
            os.environ,
            {"MOCK_SIMULATE_ERRORS": "true", "MOCK_ERROR_RATE": "0.5", "MONITORING_ENABLED": "0"},
            clear=True,
        ):
            config = build_service_config(Settings(_env_file=None))

        assert config.mock.simulate_errors is True
        assert config.mock.error_rate == 0.5
        assert config.monitoring.enabled is False
        # Strategy order defaults to DeepSeek first
        assert config.primary.kind == ProviderKind.DEEPSEEK
        assert config.fallback.kind == ProviderKind.OPENAI
