"""Configuration management for bt2magnet.

Provides centralized configuration with TOML support, validation, and
hierarchical loading from defaults → config file → environment.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

import toml
from pydantic import ValidationError as PydanticValidationError

from bt2magnet.models import Config
from bt2magnet.utils.exceptions import ConfigurationError
from bt2magnet.utils.logging_config import setup_logging

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "bt2magnet.toml"

# Mapping of environment variables to config paths
ENV_MAPPINGS: dict[str, str] = {
    # Observability
    "BT2MAGNET_LOG_LEVEL": "observability.log_level",
    "BT2MAGNET_LOG_FILE": "observability.log_file",
    "BT2MAGNET_STRUCTURED_LOGGING": "observability.structured_logging",
    # Codec
    "BT2MAGNET_MAX_DEPTH": "codec.max_depth",
    # Magnet
    "BT2MAGNET_INCLUDE_TRACKERS": "magnet.include_trackers",
    "BT2MAGNET_DEFAULT_TRACKERS": "magnet.default_trackers",
}

_LIST_PATHS = frozenset({"magnet.default_trackers"})

# Global configuration instance
_config_manager: ConfigManager | None = None


def _parse_env_value(raw: str, path: str) -> bool | int | str | list[str]:
    if path in _LIST_PATHS:
        return [item.strip() for item in raw.split(",") if item.strip()]

    low = raw.lower()
    if low in {"true", "yes", "on"}:
        return True
    if low in {"false", "no", "off"}:
        return False
    try:
        return int(raw)
    except ValueError:
        return raw


def _set_nested(d: dict[str, Any], path: str, value: Any) -> None:
    parts = path.split(".")
    cur = d
    for p in parts[:-1]:
        cur = cur.setdefault(p, {})
    cur[parts[-1]] = value


class ConfigManager:
    """Manages configuration loading and validation."""

    def __init__(self, config_file: str | Path | None = None, configure_logging: bool = True):
        """Initialize configuration manager.

        Args:
            config_file: Path to TOML config file. If None, searches for bt2magnet.toml
            configure_logging: Whether to apply the observability settings

        """
        self.config_file = self._find_config_file(config_file)
        self.config = self._load_config()
        if configure_logging:
            self._setup_logging()

    def _find_config_file(self, config_file: str | Path | None) -> Path | None:
        """Find configuration file in standard locations."""
        if config_file:
            path = Path(config_file)
            if not path.exists():
                msg = f"Config file not found: {path}"
                raise ConfigurationError(msg, {"path": str(path)})
            return path

        search_paths = [
            Path.cwd() / CONFIG_FILE_NAME,
            Path.home() / ".config" / "bt2magnet" / CONFIG_FILE_NAME,
            Path.home() / f".{CONFIG_FILE_NAME}",
        ]

        for path in search_paths:
            if path.exists():
                return path

        return None

    def _load_config(self) -> Config:
        """Load configuration from file and environment."""
        config_data: dict[str, Any] = {}

        if self.config_file:
            try:
                with open(self.config_file, encoding="utf-8") as f:
                    config_data.update(toml.load(f))
            except (OSError, toml.TomlDecodeError) as e:
                msg = f"Failed to load config file {self.config_file}: {e}"
                raise ConfigurationError(msg, {"path": str(self.config_file)}) from e

            # Allow a comma-separated string for the tracker list
            magnet = config_data.get("magnet")
            if isinstance(magnet, dict) and isinstance(magnet.get("default_trackers"), str):
                magnet["default_trackers"] = _parse_env_value(
                    magnet["default_trackers"], "magnet.default_trackers"
                )

        config_data = self._merge_config(config_data, self._get_env_config())

        try:
            return Config(**config_data)
        except PydanticValidationError as e:
            msg = f"Invalid configuration: {e}"
            raise ConfigurationError(msg) from e

    def _get_env_config(self) -> dict[str, Any]:
        """Get configuration from environment variables."""
        env_config: dict[str, Any] = {}
        for env_name, cfg_path in ENV_MAPPINGS.items():
            raw = os.getenv(env_name)
            if raw is None:
                continue
            _set_nested(env_config, cfg_path, _parse_env_value(raw, cfg_path))
        return env_config

    def _merge_config(
        self,
        base: dict[str, Any],
        override: dict[str, Any],
    ) -> dict[str, Any]:
        """Merge configuration dictionaries recursively."""
        result = base.copy()

        for key, value in override.items():
            if (
                key in result
                and isinstance(result[key], dict)
                and isinstance(value, dict)
            ):
                result[key] = self._merge_config(result[key], value)
            else:
                result[key] = value

        return result

    def _setup_logging(self) -> None:
        setup_logging(self.config.observability)
        if self.config_file:
            logger.debug("Loaded configuration from %s", self.config_file)

    def export(self, fmt: str = "toml") -> str:
        """Export current configuration as a string in the given format.

        Args:
            fmt: one of "toml" or "json"

        """
        data = self.config.model_dump(mode="json", exclude_none=True)

        fmt = (fmt or "toml").lower()
        if fmt == "toml":
            return toml.dumps(data)
        if fmt == "json":
            return json.dumps(data, indent=2)

        msg = f"Unsupported export format: {fmt}"
        raise ConfigurationError(msg)


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager()
    return _config_manager.config


def init_config(
    config_file: str | Path | None = None,
    configure_logging: bool = True,
) -> ConfigManager:
    """Initialize the global configuration manager."""
    global _config_manager
    _config_manager = ConfigManager(config_file, configure_logging=configure_logging)
    return _config_manager


def set_config(new_config: Config) -> None:
    """Replace the global configuration at runtime."""
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager(None, configure_logging=False)
    _config_manager.config = new_config
    _config_manager._setup_logging()  # noqa: SLF001


def reset_config() -> None:
    """Drop the global configuration so the next access reloads it."""
    global _config_manager
    _config_manager = None
