"""Tests for configuration management."""

import pytest
import os
from pathlib import Path
from unittest.mock import patch

from pangolin.core.config import (
    ConfigManager,
    load_env_overrides,
    load_yaml_file,
    _convert_env_value,
    _merge,
)
from pangolin.core.types import PangolinConfig, TimeoutConfig, InfrastructureConfig
from pangolin.core.errors import ConfigurationError


class TestEnvironmentLoading:
    """Test environment variable loading functions."""

    @patch.dict(
        os.environ,
        {
            "PANGOLIN_LOG_LEVEL": "DEBUG",
            "PANGOLIN_AUDIT_RETAIN_DAYS": "30",
            "PANGOLIN_TIMEOUTS__WAIT_TIMEOUT": "12.5",
            "PANGOLIN_SSH__USER": "ops",
            "OTHER_VARIABLE": "ignored",
        },
        clear=True,
    )
    def test_load_env_overrides(self) -> None:
        """Test loading environment variable overrides."""
        overrides = load_env_overrides()

        assert overrides["log_level"] == "DEBUG"
        assert overrides["audit_retain_days"] == 30
        assert overrides["timeouts"]["wait_timeout"] == 12.5
        assert overrides["ssh"]["user"] == "ops"
        assert "other_variable" not in overrides

    def test_convert_env_value_boolean(self) -> None:
        """Test boolean conversion from environment values."""
        assert _convert_env_value("true") is True
        assert _convert_env_value("false") is False
        assert _convert_env_value("yes") is True
        assert _convert_env_value("no") is False

    def test_convert_env_value_numeric(self) -> None:
        """Test numeric conversion from environment values."""
        assert _convert_env_value("42") == 42
        assert _convert_env_value("3.14") == 3.14

    def test_convert_env_value_list(self) -> None:
        """Test list conversion from environment values."""
        assert _convert_env_value("a,b,c") == ["a", "b", "c"]

    def test_convert_env_value_empty(self) -> None:
        assert _convert_env_value("") is None

    def test_merge_is_one_level_deep(self) -> None:
        merged = _merge({"ssh": {"user": "a", "port": 22}}, {"ssh": {"user": "b"}})
        assert merged == {"ssh": {"user": "b", "port": 22}}


class TestYamlLoading:
    """Test YAML file loading."""

    def test_load_mapping(self, temp_dir: Path) -> None:
        path = temp_dir / "config.yaml"
        path.write_text("log_level: ERROR\nssh:\n  user: deploy\n")
        assert load_yaml_file(path) == {"log_level": "ERROR", "ssh": {"user": "deploy"}}

    def test_empty_file_is_empty_mapping(self, temp_dir: Path) -> None:
        path = temp_dir / "empty.yml"
        path.write_text("")
        assert load_yaml_file(path) == {}

    def test_unsupported_suffix(self, temp_dir: Path) -> None:
        path = temp_dir / "config.json"
        path.write_text("{}")
        with pytest.raises(ConfigurationError, match="Unsupported"):
            load_yaml_file(path)

    def test_non_mapping_rejected(self, temp_dir: Path) -> None:
        path = temp_dir / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigurationError, match="mapping"):
            load_yaml_file(path)

    def test_invalid_yaml(self, temp_dir: Path) -> None:
        path = temp_dir / "bad.yaml"
        path.write_text("key: [unclosed\n")
        with pytest.raises(ConfigurationError):
            load_yaml_file(path)


class TestConfigManager:
    """Test ConfigManager class."""

    def test_config_manager_creation(self) -> None:
        manager = ConfigManager()
        assert manager._config is None

    @patch.dict(os.environ, {}, clear=True)
    def test_defaults(self) -> None:
        config = ConfigManager().load_config()
        assert config.timeouts.wait_timeout == 60.0
        assert config.timeouts.poll_interval == 1.0
        assert config.infrastructure.default_concurrency == 5
        assert config.audit_retain_days == 60

    @patch.dict(os.environ, {"PANGOLIN_LOG_LEVEL": "WARNING"}, clear=True)
    def test_precedence(self, temp_dir: Path) -> None:
        """Overrides beat environment, environment beats the file."""
        path = temp_dir / "config.yaml"
        path.write_text("log_level: ERROR\naudit_retain_days: 7\n")

        config = ConfigManager().load_config(config_file=path)
        assert config.log_level == "WARNING"
        assert config.audit_retain_days == 7

        config = ConfigManager().load_config(config_file=path, log_level="DEBUG")
        assert config.log_level == "DEBUG"

    @patch.dict(os.environ, {}, clear=True)
    def test_none_overrides_ignored(self) -> None:
        config = ConfigManager().load_config(log_level=None)
        assert config.log_level == "INFO"

    @patch.dict(os.environ, {}, clear=True)
    def test_get_config_loads_once(self) -> None:
        manager = ConfigManager()
        assert manager.get_config() is manager.get_config()


class TestConfigValidation:
    """Test PangolinConfig validation."""

    def test_rejects_zero_concurrency(self) -> None:
        with pytest.raises(ConfigurationError, match="Concurrency"):
            PangolinConfig(infrastructure=InfrastructureConfig(default_concurrency=0))

    def test_rejects_non_positive_wait_timeout(self) -> None:
        with pytest.raises(ConfigurationError, match="Wait timeout"):
            PangolinConfig(timeouts=TimeoutConfig(wait_timeout=0))

    def test_rejects_negative_retention(self) -> None:
        with pytest.raises(ConfigurationError, match="retention"):
            PangolinConfig(audit_retain_days=-1)

    def test_directories(self, temp_dir: Path) -> None:
        config = PangolinConfig(home_dir=temp_dir)
        assert config.clusters_dir() == temp_dir / "clusters"
        assert config.audit_dir() == temp_dir / "audit"
        assert config.history_dir() == temp_dir / "history"
