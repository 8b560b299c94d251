"""Configuration management with environment variable integration and validation."""

import os
from pathlib import Path
from typing import Dict, Any, Optional

import yaml

from .types import PangolinConfig
from .errors import ConfigurationError


def load_env_overrides(prefix: str = "PANGOLIN_") -> Dict[str, Any]:
    """Load environment variables with the given prefix and convert to appropriate types."""
    overrides: Dict[str, Any] = {}

    for key, value in os.environ.items():
        if key.startswith(prefix):
            field_name = key[len(prefix) :].lower()

            # Nested sections, e.g. PANGOLIN_SSH__USER
            if "__" in field_name:
                parts = field_name.split("__")
                if len(parts) == 2:
                    section, sub_field = parts
                    if section not in overrides:
                        overrides[section] = {}
                    overrides[section][sub_field] = _convert_env_value(value)
                continue

            overrides[field_name] = _convert_env_value(value)

    return overrides


def _convert_env_value(value: str) -> Any:
    """Convert string environment value to appropriate Python type."""
    if not value:
        return None

    try:
        return int(value)
    except ValueError:
        pass

    try:
        return float(value)
    except ValueError:
        pass

    if value.lower() in ("true", "yes", "on"):
        return True
    elif value.lower() in ("false", "no", "off"):
        return False

    if "," in value:
        return [item.strip() for item in value.split(",")]

    return value


def _merge(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """Merge overrides into base, one level deep for section dicts."""
    merged = dict(base)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = {**merged[key], **value}
        else:
            merged[key] = value
    return merged


def load_yaml_file(path: Path) -> Dict[str, Any]:
    """Load a YAML mapping from disk."""
    if path.suffix.lower() not in (".yml", ".yaml"):
        raise ConfigurationError(f"Unsupported config file format: {path.suffix}")
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Failed to load config file {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {path} must contain a mapping")
    return data


class ConfigManager:
    """Central configuration management."""

    def __init__(self) -> None:
        self._config: Optional[PangolinConfig] = None

    def load_config(
        self, config_file: Optional[Path] = None, **overrides: Any
    ) -> PangolinConfig:
        """Load configuration from file and environment with CLI overrides."""

        # Precedence, highest first:
        # 1. CLI overrides
        # 2. Environment variables
        # 3. Config file data
        # 4. Model defaults

        config_data: Dict[str, Any] = {}

        if config_file and config_file.exists():
            config_data = _merge(config_data, load_yaml_file(config_file))

        config_data = _merge(config_data, load_env_overrides())
        config_data = _merge(
            config_data, {k: v for k, v in overrides.items() if v is not None}
        )

        self._config = PangolinConfig(**config_data)

        return self._config

    def get_config(self) -> PangolinConfig:
        """Get current configuration."""
        if self._config is None:
            self._config = self.load_config()
        return self._config


# Global config manager instance
_config_manager = ConfigManager()


def load_config(**kwargs: Any) -> PangolinConfig:
    """Load global configuration."""
    return _config_manager.load_config(**kwargs)


def get_config() -> PangolinConfig:
    """Get current global configuration."""
    return _config_manager.get_config()
