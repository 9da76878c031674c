"""Configuration loading for kk.

Settings come from, in order of precedence: command-line flags, environment
variables, the YAML config file, built-in defaults.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from kk.logging import DEFAULT_LOG_LEVEL, default_log_dir

CONFIG_KEYS = ("database_path", "editor", "log_dir", "log_level")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
DEFAULT_EDITOR = "vi"


class ConfigError(Exception):
    """Raised when configuration is invalid or missing."""


@dataclass
class Settings:
    """Resolved runtime settings."""

    database_path: Path
    editor: str
    log_dir: Path
    log_level: str = DEFAULT_LOG_LEVEL
    config_path: Path | None = None


def _xdg_dir(variable: str, fallback: str) -> Path:
    value = os.environ.get(variable)
    return Path(value) if value else Path.home() / fallback


def default_database_path() -> Path:
    return _xdg_dir("XDG_DATA_HOME", ".local/share") / "kk" / "kk.db"


def default_config_path() -> Path:
    return _xdg_dir("XDG_CONFIG_HOME", ".config") / "kk" / "config.yaml"


def load_config(config_path: Path | str) -> dict[str, Any]:
    """Load settings from a YAML file.

    Args:
        config_path: Path to config.yaml.

    Returns:
        Mapping of setting name to string value. An empty file is an empty
        mapping.

    Raises:
        ConfigError: If the file doesn't exist, isn't a YAML mapping, or has
                     unknown keys or non-scalar values.
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise ConfigError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Cannot read {config_path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration must be a YAML mapping, got {type(data).__name__}")

    unknown = sorted(str(key) for key in data if key not in CONFIG_KEYS)
    if unknown:
        raise ConfigError(f"Unknown configuration keys in {config_path}: {', '.join(unknown)}")

    values: dict[str, Any] = {}
    for key, value in data.items():
        if value is None:
            continue
        if isinstance(value, dict | list):
            raise ConfigError(f"Configuration key '{key}' must be a single value")
        values[key] = str(value)
    return values


def _first(*candidates: str | Path | None) -> str | Path | None:
    for candidate in candidates:
        if candidate:
            return candidate
    return None


def load_settings(
    database_path: str | Path | None = None,
    editor: str | None = None,
    log_dir: str | Path | None = None,
    log_level: str | None = None,
    config_path: str | Path | None = None,
) -> Settings:
    """Resolve settings from flags, environment, config file and defaults.

    Args:
        database_path: --database-path flag value.
        editor: --editor flag value.
        log_dir: --log-dir flag value.
        log_level: --log-level flag value.
        config_path: --config flag value.

    Returns:
        Fully resolved Settings.

    Raises:
        ConfigError: If an explicitly named config file is missing, the file
                     is invalid, or the log level is unknown.
    """
    explicit = _first(config_path, os.environ.get("KK_CONFIG"))
    if explicit is not None:
        resolved_config: Path | None = Path(explicit).expanduser()
        file_values = load_config(resolved_config)
    else:
        resolved_config = default_config_path()
        if resolved_config.exists():
            file_values = load_config(resolved_config)
        else:
            resolved_config = None
            file_values = {}

    level = str(
        _first(
            log_level,
            os.environ.get("KK_LOG_LEVEL"),
            file_values.get("log_level"),
            DEFAULT_LOG_LEVEL,
        )
    ).upper()
    if level not in LOG_LEVELS:
        raise ConfigError(f"Unknown log level '{level}' (expected one of {', '.join(LOG_LEVELS)})")

    return Settings(
        database_path=Path(
            _first(
                database_path,
                os.environ.get("KK_DATABASE_PATH"),
                file_values.get("database_path"),
                default_database_path(),
            )
        ).expanduser(),
        editor=str(
            _first(
                editor,
                os.environ.get("KK_EDITOR"),
                os.environ.get("VISUAL"),
                os.environ.get("EDITOR"),
                file_values.get("editor"),
                DEFAULT_EDITOR,
            )
        ),
        log_dir=Path(
            _first(
                log_dir,
                os.environ.get("KK_LOG_DIR"),
                file_values.get("log_dir"),
                default_log_dir(),
            )
        ).expanduser(),
        log_level=level,
        config_path=resolved_config,
    )
