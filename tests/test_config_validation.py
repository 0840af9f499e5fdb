"""Tests for configuration loading and validation"""

import pytest
from pydantic import ValidationError

from backlog_utils.domain.config import AppConfig, RetryConfig
from backlog_utils.infrastructure.config.config_manager import ConfigManager, ConfigurationError
from backlog_utils.infrastructure.http_client import client_settings_from_config


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for name in (
        "BACKLOG_URL",
        "BACKLOG_API_KEY",
        "BACKLOG_MAX_RETRY_ATTEMPTS",
        "BACKLOG_MAX_JITTER_MS",
        "BACKLOG_TIMEOUT",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


class TestRetryConfig:
    def test_defaults(self):
        config = RetryConfig()
        assert config.max_attempts == 5
        assert config.max_jitter_ms == 3000
        assert config.timeout == 30.0

    def test_zero_attempts_allowed(self):
        assert RetryConfig(max_attempts=0).max_attempts == 0

    @pytest.mark.parametrize("kwargs", [{"max_attempts": -1}, {"max_jitter_ms": 0}, {"timeout": 0}])
    def test_invalid_values(self, kwargs):
        with pytest.raises(ValidationError):
            RetryConfig(**kwargs)


class TestAppConfig:
    def test_rejects_unknown_sections(self):
        with pytest.raises(ValidationError):
            AppConfig(unknown={})


class TestConfigManager:
    def test_defaults_without_file(self):
        manager = ConfigManager()

        assert manager.config_path is None
        assert manager.get_backlog_config().url is None
        assert manager.get_retry_config().max_attempts == 5

    def test_finds_config_in_parent_directory(self, tmp_path, monkeypatch):
        (tmp_path / ".backlog.yml").write_text(
            "backlog:\n  url: https://example.backlog.com\n", encoding="utf-8"
        )
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        monkeypatch.chdir(nested)

        manager = ConfigManager()

        assert manager.config_path == tmp_path / ".backlog.yml"
        assert manager.get_backlog_config().url == "https://example.backlog.com"

    def test_load_explicit_file(self, tmp_path):
        config_file = tmp_path / "custom.yml"
        config_file.write_text(
            "retry:\n  max_attempts: 2\n  max_jitter_ms: 10\n", encoding="utf-8"
        )

        manager = ConfigManager(config_path=str(config_file))

        retry = manager.get_retry_config()
        assert retry.max_attempts == 2
        assert retry.max_jitter_ms == 10
        assert retry.timeout == 30.0

    def test_env_overrides_file(self, tmp_path, monkeypatch):
        config_file = tmp_path / "custom.yml"
        config_file.write_text(
            "backlog:\n  url: https://file.backlog.com\n  api_key: file-key\n", encoding="utf-8"
        )
        monkeypatch.setenv("BACKLOG_API_KEY", "env-key")
        monkeypatch.setenv("BACKLOG_MAX_RETRY_ATTEMPTS", "7")

        manager = ConfigManager(config_path=config_file)

        assert manager.get_backlog_config().url == "https://file.backlog.com"
        assert manager.get_backlog_config().api_key == "env-key"
        assert manager.get_retry_config().max_attempts == 7

    def test_invalid_value(self, tmp_path):
        config_file = tmp_path / "custom.yml"
        config_file.write_text("retry:\n  max_jitter_ms: 0\n", encoding="utf-8")

        with pytest.raises(ConfigurationError, match="retry.max_jitter_ms"):
            ConfigManager(config_path=config_file)

    def test_invalid_env_value(self, monkeypatch):
        monkeypatch.setenv("BACKLOG_MAX_JITTER_MS", "lots")

        with pytest.raises(ConfigurationError, match="max_jitter_ms"):
            ConfigManager()

    def test_unknown_key(self, tmp_path):
        config_file = tmp_path / "custom.yml"
        config_file.write_text("llm:\n  provider: mock\n", encoding="utf-8")

        with pytest.raises(ConfigurationError, match="llm"):
            ConfigManager(config_path=config_file)

    def test_malformed_yaml(self, tmp_path):
        config_file = tmp_path / "custom.yml"
        config_file.write_text("retry: [unclosed\n", encoding="utf-8")

        with pytest.raises(ConfigurationError, match="Failed to load config"):
            ConfigManager(config_path=config_file)

    def test_non_mapping_yaml(self, tmp_path):
        config_file = tmp_path / "custom.yml"
        config_file.write_text("- a\n- b\n", encoding="utf-8")

        with pytest.raises(ConfigurationError, match="must contain a mapping"):
            ConfigManager(config_path=config_file)


class TestClientSettingsFromConfig:
    def test_cli_values_take_precedence(self, monkeypatch):
        monkeypatch.setenv("BACKLOG_URL", "https://env.backlog.com")
        monkeypatch.setenv("BACKLOG_API_KEY", "env-key")
        manager = ConfigManager()

        settings = client_settings_from_config(
            manager.get_backlog_config(),
            manager.get_retry_config(),
            api_key="cli-key",
        )

        assert settings.base_url == "https://env.backlog.com"
        assert settings.api_key == "cli-key"
        assert settings.max_retry_attempts == 5
        assert settings.max_jitter_ms == 3000

    def test_missing_api_key(self):
        manager = ConfigManager()

        with pytest.raises(ValueError, match="empty api key"):
            client_settings_from_config(
                manager.get_backlog_config(),
                manager.get_retry_config(),
                base_url="https://example.backlog.com",
            )
