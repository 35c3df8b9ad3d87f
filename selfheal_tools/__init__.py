"""
================================================================================
Self-Heal Tools
================================================================================

Infrastructure shared by the self-healing UI test framework.

Modules:
    - common: Configuration (YAML + environment) and loguru logging setup
    - report_tools: Allure attachment helpers, healing report attachments

Example:
    from selfheal_tools.common import get_config, init_logger
    from selfheal_tools.report_tools import attach_healing_report

    init_logger()
    report_dir = get_config("healing.report_dir")

================================================================================
"""

__version__ = "1.0.0"

__all__ = [
    "common",
    "report_tools",
]
