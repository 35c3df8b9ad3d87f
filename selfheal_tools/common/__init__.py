"""
================================================================================
Self-Heal Tools Common Utilities
================================================================================

Shared configuration management and logging setup.

Exports:
    - get_config / set_config / reload_config: dot-notation configuration access
    - init_logger / get_logger: loguru logger with standard settings
    - ConfigurationError: raised on unreadable configuration files

Usage:
    from selfheal_tools.common import get_config, init_logger

    init_logger()
    budget_ms = get_config("healing.timeout_ms", 10000)

================================================================================
"""

from .global_config import (
    ConfigurationError,
    get_config,
    get_logger,
    init_logger,
    reload_config,
    set_config,
)

__all__ = [
    "ConfigurationError",
    "get_config",
    "get_logger",
    "init_logger",
    "reload_config",
    "set_config",
]
