"""Config Loader - loads ClientSettings and holds the process-wide debug level.

Settings come from a YAML file with ${ENV_VAR} substitution, or straight from
the environment:

    region: ${AWS_DEFAULT_REGION}
    max_attempts: 3
    debug_level: 1
    user_agent: my-tool/1.0
    timeout: 10
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from threading import Lock
from typing import Any

import yaml

from aws_core.models import ClientSettings


class ConfigError(Exception):
    """Raised when configuration loading fails."""


_ENV_PATTERN = re.compile(r"\$\{([^}]+)\}")

_debug_level = 0
_debug_level_lock = Lock()


def set_debug_level(level: int) -> None:
    """Set the process-wide debug level used by executors without their own."""
    global _debug_level
    if level < 0:
        raise ValueError(f"debug level must be >= 0, got {level}")
    with _debug_level_lock:
        _debug_level = level


def get_debug_level() -> int:
    with _debug_level_lock:
        return _debug_level


def load_settings(config_path: Path) -> ClientSettings:
    """Load ClientSettings from YAML with ${ENV_VAR} substitution."""
    if not config_path.exists():
        raise ConfigError(f"Config file not found: {config_path}")

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            raw_config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in config file: {e}") from e

    # An empty file means all defaults
    if raw_config is None:
        raw_config = {}
    if not isinstance(raw_config, dict):
        raise ConfigError("Config file must be a YAML mapping")

    raw_config = _substitute_env_vars(raw_config)

    try:
        return ClientSettings.model_validate(raw_config)
    except Exception as e:
        raise ConfigError(f"Invalid config structure: {e}") from e


def settings_from_env() -> ClientSettings:
    """ClientSettings from AWS_DEFAULT_REGION, AWS_CORE_MAX_ATTEMPTS and AWS_CORE_DEBUG_LEVEL."""
    raw_config: dict[str, Any] = {}
    env_fields = {
        "AWS_DEFAULT_REGION": "region",
        "AWS_CORE_MAX_ATTEMPTS": "max_attempts",
        "AWS_CORE_DEBUG_LEVEL": "debug_level",
    }
    for env_name, field_name in env_fields.items():
        value = os.environ.get(env_name)
        if value:
            raw_config[field_name] = value

    try:
        return ClientSettings.model_validate(raw_config)
    except Exception as e:
        raise ConfigError(f"Invalid settings in environment: {e}") from e


def _substitute_env_vars(data: Any) -> Any:
    """Recursively substitute ${ENV_VAR} patterns in strings within data."""
    if isinstance(data, str):
        return _substitute_string(data)
    elif isinstance(data, dict):
        return {k: _substitute_env_vars(v) for k, v in data.items()}
    elif isinstance(data, list):
        return [_substitute_env_vars(item) for item in data]
    return data


def _substitute_string(s: str) -> str:
    """Substitute ${ENV_VAR} patterns. Raises ConfigError if env var is not set."""

    def replacer(match: re.Match) -> str:
        var_name = match.group(1)
        value = os.environ.get(var_name)
        if value is None:
            raise ConfigError(f"Environment variable '{var_name}' is not set")
        return value

    return _ENV_PATTERN.sub(replacer, s)
