"""Configuration management for torrentmeta.

Configuration is loaded hierarchically: defaults → TOML config file →
environment. The decoder never reads this global state on its own; callers
hand ``get_config().codec`` to :class:`torrentmeta.core.torrent.TorrentParser`
when they want it applied.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

import toml

from torrentmeta.models import Config
from torrentmeta.utils.exceptions import ConfigurationError
from torrentmeta.utils.logging_config import get_logger, setup_logging

CONFIG_FILE_NAME = "torrentmeta.toml"

# Environment variable -> dotted config path
ENV_MAPPINGS: dict[str, str] = {
    # Codec
    "TORRENTMETA_MAX_DEPTH": "codec.max_depth",
    "TORRENTMETA_MAX_INPUT_SIZE": "codec.max_input_size",
    "TORRENTMETA_STRICT": "codec.strict",
    # Observability
    "TORRENTMETA_LOG_LEVEL": "observability.log_level",
    "TORRENTMETA_LOG_FILE": "observability.log_file",
    "TORRENTMETA_STRUCTURED_LOGGING": "observability.structured_logging",
    "TORRENTMETA_LOG_CORRELATION_ID": "observability.log_correlation_id",
}

_BOOL_PATHS = frozenset(
    {
        "codec.strict",
        "observability.structured_logging",
        "observability.log_correlation_id",
    }
)
_INT_PATHS = frozenset({"codec.max_depth", "codec.max_input_size"})

# Global configuration instance
_config_manager: ConfigManager | None = None


def _parse_env_value(raw: str, path: str) -> bool | int | str:
    if path in _BOOL_PATHS:
        low = raw.strip().lower()
        if low in {"true", "1", "yes", "on"}:
            return True
        if low in {"false", "0", "no", "off"}:
            return False
        msg = f"Invalid boolean for {path}: {raw!r}"
        raise ConfigurationError(msg, {"path": path})
    if path in _INT_PATHS:
        try:
            return int(raw)
        except ValueError as e:
            msg = f"Invalid integer for {path}: {raw!r}"
            raise ConfigurationError(msg, {"path": path}) from e
    if path == "observability.log_level":
        return raw.strip().upper()
    return raw


def _set_nested(d: dict[str, Any], path: str, value: Any) -> None:
    parts = path.split(".")
    cur = d
    for p in parts[:-1]:
        cur = cur.setdefault(p, {})
    cur[parts[-1]] = value


class ConfigManager:
    """Manages configuration loading and validation."""

    def __init__(
        self,
        config_file: str | Path | None = None,
        setup_logs: bool = False,
    ):
        """Initialize configuration manager.

        Args:
            config_file: Path to TOML config file. If None, searches for torrentmeta.toml
            setup_logs: Configure logging from the loaded observability section

        """
        self.config_file = self._find_config_file(config_file)
        self.config = self._load_config()
        if setup_logs:
            self._setup_logging()

    def _find_config_file(
        self,
        config_file: str | Path | None,
    ) -> Path | None:
        """Find configuration file in standard locations."""
        if config_file:
            return Path(config_file)

        search_paths = [
            Path.cwd() / CONFIG_FILE_NAME,
            Path.home() / ".config" / "torrentmeta" / CONFIG_FILE_NAME,
            Path.home() / f".{CONFIG_FILE_NAME}",
        ]

        for path in search_paths:
            if path.exists():
                return path

        return None

    def _load_config(self) -> Config:
        """Load configuration from file and environment."""
        config_data: dict[str, Any] = {}

        if self.config_file is not None:
            if not self.config_file.exists():
                msg = f"Config file not found: {self.config_file}"
                raise ConfigurationError(msg, {"path": str(self.config_file)})
            try:
                with open(self.config_file, encoding="utf-8") as f:
                    config_data.update(toml.load(f))
            except (OSError, toml.TomlDecodeError) as e:
                msg = f"Failed to load config file {self.config_file}: {e}"
                raise ConfigurationError(msg, {"path": str(self.config_file)}) from e
            get_logger(__name__).debug(
                "Loaded configuration from %s", self.config_file
            )

        config_data = self._merge_config(config_data, self._get_env_config())

        try:
            return Config(**config_data)
        except Exception as e:
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
        """Set up logging configuration."""
        setup_logging(self.config.observability)

    def export(self, fmt: str = "toml") -> str:
        """Export current configuration as a string.

        Args:
            fmt: one of "toml" or "json"

        """
        # toml cannot represent None; drop unset optional values
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
    setup_logs: bool = True,
) -> ConfigManager:
    """Initialize the global configuration manager."""
    global _config_manager
    _config_manager = ConfigManager(config_file, setup_logs=setup_logs)
    return _config_manager


def set_config(new_config: Config) -> None:
    """Replace the global configuration at runtime."""
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager(None)
    _config_manager.config = new_config


def reset_config() -> None:
    """Drop the global configuration so the next access reloads it."""
    global _config_manager
    _config_manager = None
