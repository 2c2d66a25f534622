"""
Configuration management for note-index.
YAML configuration file merged over built-in defaults, then environment overrides.
"""

import copy
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from colored_logger import get_colored_logger

logger = get_colored_logger(__name__)

ENV_PREFIX = "NOTE_INDEX_"

CONFIG_FILE_NAMES = ["note-index.yml", ".note-index.yml"]

DEFAULT_CONFIG = {
    "logging": {
        "level": "INFO",
        "colors": True,
    },
    "index": {
        "date_format": "%Y%m%d",
        "timestamp_format": "%Y-%m-%dT%H:%M:%SZ",
    },
    "protocol": {
        "result_separator": ",",
    },
    "stats": {
        "report_on_exit": False,
        "include_process": True,
    },
}


class ConfigError(Exception):
    """Raised when an explicitly requested configuration file cannot be used."""

    pass


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load configuration from a YAML file with fallback to defaults.

    An explicit ``config_path`` must exist and parse; the implicit lookup in the
    working directory falls back to defaults with a warning on a bad file.

    Args:
        config_path: Optional path to config file

    Returns:
        Configuration dictionary
    """
    config = copy.deepcopy(DEFAULT_CONFIG)

    if config_path:
        config_file = Path(config_path)
        if not config_file.is_file():
            raise ConfigError(f"Config file not found: {config_path}")
        try:
            config = _deep_merge(config, _read_yaml(config_file))
        except (yaml.YAMLError, OSError) as e:
            raise ConfigError(f"Failed to load config from {config_path}: {e}") from e
    else:
        for name in CONFIG_FILE_NAMES:
            config_file = Path(name)
            if not config_file.is_file():
                continue
            try:
                config = _deep_merge(config, _read_yaml(config_file))
                logger.debug("Loaded config from %s", config_file)
            except (yaml.YAMLError, OSError) as e:
                logger.warning(
                    "Failed to load config from %s: %s. Using defaults", config_file, e
                )
            break

    return _apply_env_overrides(config)


def _read_yaml(path: Path) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise yaml.YAMLError(f"top-level value must be a mapping, got {type(data).__name__}")
    return data


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """
    Deep merge two dictionaries.

    Args:
        base: Base dictionary
        override: Dictionary to merge into base

    Returns:
        Merged dictionary
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def _apply_env_overrides(config: Dict[str, Any]) -> Dict[str, Any]:
    """
    Apply environment variable overrides to config.

    Environment variables follow pattern: NOTE_INDEX_<SECTION>_<KEY>=value
    Example: NOTE_INDEX_LOGGING_LEVEL=DEBUG

    Only the first underscore after the section splits, so keys such as
    ``result_separator`` keep their underscores.
    """
    for env_key, env_value in os.environ.items():
        if not env_key.startswith(ENV_PREFIX):
            continue

        parts = env_key[len(ENV_PREFIX) :].lower().split("_", 1)
        if len(parts) < 2 or not parts[1]:
            continue

        section, key = parts
        current = config.setdefault(section, {})
        if not isinstance(current, dict):
            continue
        current[key] = _convert_env_value(env_value)

    return config


def _convert_env_value(value: str) -> Any:
    """
    Convert environment variable string to appropriate Python type.

    Args:
        value: Environment variable value

    Returns:
        Converted value
    """
    if value.lower() in ("true", "yes", "on"):
        return True
    elif value.lower() in ("false", "no", "off"):
        return False

    try:
        return int(value)
    except ValueError:
        pass

    try:
        return float(value)
    except ValueError:
        pass

    # List conversion (comma-separated); a lone separator stays a string
    if "," in value and value.strip() != ",":
        return [item.strip() for item in value.split(",")]

    return value


class Settings:
    """
    Attribute-style view over the merged configuration.
    """

    def __init__(self, config_path: Optional[str] = None, raw: Dict[str, Any] = None):
        """
        :param config_path: Optional explicit YAML file.
        :param raw: Pre-built configuration; skips file and environment lookup.
        """
        self.raw = raw if raw is not None else load_config(config_path)

        logging_settings = self.raw.get("logging", {})
        self.log_level: str = str(logging_settings.get("level", "INFO")).upper()
        self.log_colors: bool = bool(logging_settings.get("colors", True))

        index_settings = self.raw.get("index", {})
        self.date_format: str = index_settings.get("date_format", "%Y%m%d")
        self.timestamp_format: str = index_settings.get(
            "timestamp_format", "%Y-%m-%dT%H:%M:%SZ"
        )

        protocol_settings = self.raw.get("protocol", {})
        self.result_separator: str = str(
            protocol_settings.get("result_separator", ",")
        )

        stats_settings = self.raw.get("stats", {})
        self.report_stats_on_exit: bool = bool(
            stats_settings.get("report_on_exit", False)
        )
        self.include_process_stats: bool = bool(
            stats_settings.get("include_process", True)
        )

    @classmethod
    def defaults(cls) -> "Settings":
        """Settings built from DEFAULT_CONFIG alone."""
        return cls(raw=copy.deepcopy(DEFAULT_CONFIG))
