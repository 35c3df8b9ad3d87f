"""Allure reporting helpers."""

from .allure_utils import (
    attach_healing_report,
    attach_json,
    attach_text,
    generate_allure_report,
)

__all__ = [
    "attach_healing_report",
    "attach_json",
    "attach_text",
    "generate_allure_report",
]
