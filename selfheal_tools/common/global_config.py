"""
================================================================================
Global Configuration for Self-Healing Automation
================================================================================

This module provides centralized configuration management for the healing
framework, including logging setup and configuration file loading.

Features:
    - YAML-based configuration loading (config/config.yaml + config/{ENV}.yaml)
    - Environment variable support (SECTION__KEY and direct aliases)
    - Centralized Loguru logging configuration

Author: Automation Team
License: MIT
================================================================================
"""

import os
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from loguru import logger

# Global configuration storage
_config: Dict[str, Any] = {}
_logger_initialized: bool = False

DEFAULT_LOG_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} | {message}"
)

# Plain environment variables that map onto nested configuration keys.
ENV_ALIASES: Dict[str, str] = {
    "ANTHROPIC_API_KEY": "ai.api_key",
    "AI_MODEL": "ai.model",
    "AI_HEALING_ENABLED": "ai.enabled",
    "UI_BASE_URL": "ui.base_url",
    "HEALING_TIMEOUT_MS": "healing.timeout_ms",
    "LOG_LEVEL": "logging.level",
}


class ConfigurationError(Exception):
    """Raised when a configuration file cannot be parsed."""
    pass


def init_logger(level: Optional[str] = None, format_str: Optional[str] = None) -> None:
    """
    Initializes the global Loguru logger with consistent configuration.

    This function should be called at the start of any test run to ensure
    consistent logging across the framework.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR). Defaults to config value.
        format_str: Custom log format string. Defaults to config value.
    """
    global _logger_initialized

    if _logger_initialized:
        return

    _ensure_config_loaded()

    log_level = str(level or get_config("logging.level", "INFO"))
    log_format = format_str or get_config("logging.format", DEFAULT_LOG_FORMAT)

    # Remove default logger and add configured one
    logger.remove()
    logger.add(
        sys.stderr,
        level=log_level.upper(),
        format=log_format,
        colorize=True,
        backtrace=True,
        diagnose=True,
    )

    log_file = get_config("logging.file", None)
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_file,
            level=log_level.upper(),
            format=log_format.replace("{level: <8}", "{level}"),  # Remove padding for file
            rotation=get_config("logging.rotation", "10 MB"),
            retention=get_config("logging.retention", "7 days"),
            compression="zip",
        )

    _logger_initialized = True
    logger.debug(f"Logger initialized with level: {log_level}")


def get_logger():
    """
    Returns the configured Loguru logger instance.

    Ensures the logger is initialized before returning.
    """
    if not _logger_initialized:
        init_logger()
    return logger


def _ensure_config_loaded() -> None:
    """Ensures the configuration is loaded."""
    global _config
    if not _config:
        _load_config()


def _find_config_dir() -> Optional[Path]:
    override = os.getenv("HEALING_CONFIG_DIR")
    candidates = [Path(override)] if override else []
    candidates += [
        Path("config"),
        Path(__file__).parent.parent.parent / "config",
    ]
    for dir_path in candidates:
        if dir_path.is_dir():
            return dir_path
    return None


def _read_yaml(path: Path) -> Dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in configuration file {path}: {e}") from e


def _load_config() -> None:
    """
    Loads configuration from YAML files and environment variables.

    Configuration loading order:
        1. Built-in defaults
        2. Default configuration file (config/config.yaml)
        3. Environment-specific configuration (config/{ENV}.yaml)
        4. Environment variables (override YAML settings)
    """
    global _config

    _config = _get_defaults()

    config_dir = _find_config_dir()
    if not config_dir:
        logger.warning("No configuration directory found. Using defaults.")
    else:
        default_config_path = config_dir / "config.yaml"
        if default_config_path.exists():
            _config = _deep_merge(_config, _read_yaml(default_config_path))
            logger.debug(f"Loaded configuration from {default_config_path}")

        env = os.getenv("ENVIRONMENT", os.getenv("ENV", "dev"))
        env_config_path = config_dir / f"{env}.yaml"
        if env_config_path.exists():
            _config = _deep_merge(_config, _read_yaml(env_config_path))
            logger.debug(f"Merged environment config: {env_config_path}")

    _apply_env_overrides()


def _get_defaults() -> Dict[str, Any]:
    """Returns default configuration values."""
    return {
        "logging": {
            "level": "INFO",
            "format": DEFAULT_LOG_FORMAT,
        },
        "healing": {
            "timeout_ms": 10000,
            "report_dir": "reports/healing",
            "save_reports": True,
        },
        "ai": {
            "enabled": True,
            "model": "claude-sonnet-4-20250514",
            "max_tokens": 300,
            "dom_char_limit": 15000,
            "timeout_s": 30,
        },
        "ui": {
            "base_url": "http://localhost:3000",
            "browser": "chromium",
            "headless": True,
        },
    }


def _deep_merge(base: Dict, override: Dict) -> Dict:
    """Deep merges two dictionaries, with override taking precedence."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _apply_env_overrides() -> None:
    """
    Applies environment variable overrides to the configuration.

    Environment variable naming convention:
        - Use double underscore to separate nested keys
        - Example: HEALING__TIMEOUT_MS=5000 overrides healing.timeout_ms
        - Aliases in ENV_ALIASES (e.g. ANTHROPIC_API_KEY) map directly
    """
    for env_key, config_key in ENV_ALIASES.items():
        if env_key in os.environ:
            _set_nested(_config, config_key.split("."), _coerce(os.environ[env_key]))

    for key, value in os.environ.items():
        if "__" in key and not key.startswith("_"):
            # Convert HEALING__TIMEOUT_MS to ["healing", "timeout_ms"]
            parts = [p.lower() for p in key.split("__")]
            _set_nested(_config, parts, _coerce(value))


def _coerce(value: str) -> Any:
    """Convert env strings into bool/int where they clearly are one."""
    lowered = value.strip().lower()
    if lowered in ("true", "yes", "on"):
        return True
    if lowered in ("false", "no", "off"):
        return False
    if lowered.isdigit():
        return int(lowered)
    return value


def _set_nested(d: Dict, keys: list, value: Any) -> None:
    """Sets a nested dictionary value using a list of keys."""
    for key in keys[:-1]:
        current = d.get(key)
        if not isinstance(current, dict):
            current = {}
            d[key] = current
        d = current
    d[keys[-1]] = value


def get_config(key: str, default: Any = None) -> Any:
    """
    Retrieves a configuration value using a dot-separated key path.

    Args:
        key: Dot-separated key path (e.g., "healing.timeout_ms", "ai.model").
        default: Default value to return if key is not found.

    Returns:
        The configuration value, or the default if not found.

    Examples:
        >>> get_config("healing.timeout_ms", 10000)
        10000
        >>> get_config("ai.dom_char_limit")
        15000
    """
    _ensure_config_loaded()

    value: Any = _config
    for k in key.split("."):
        if isinstance(value, dict) and k in value:
            value = value[k]
        else:
            return default

    return value


def set_config(key: str, value: Any) -> None:
    """
    Sets a configuration value at runtime.

    Args:
        key: Dot-separated key path.
        value: Value to set.
    """
    _ensure_config_loaded()
    _set_nested(_config, key.split("."), value)


def reload_config() -> None:
    """Reloads the configuration from files and the environment."""
    global _config, _logger_initialized
    _config = {}
    _logger_initialized = False
    _load_config()
    init_logger()
    logger.info("Configuration reloaded.")


__all__ = [
    "ConfigurationError",
    "get_config",
    "get_logger",
    "init_logger",
    "reload_config",
    "set_config",
]
