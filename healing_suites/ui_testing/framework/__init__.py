"""
================================================================================
UI Testing Framework
================================================================================

Playwright-based UI automation framework with self-healing element location.

Components:
    - element_registry: Declarative element definitions (primary + fallbacks)
    - self_healing_locator: Tiered resolution engine (primary, cache, fallback, AI)
    - ai_observer: LLM-assisted selector inference from screenshots / markup
    - healing_reporter: Resolution telemetry, statistics and reports
    - selector_cache: Healed selector storage
    - page_base: Base page object for common operations
    - browser_manager: Browser lifecycle management

Author: Automation Team
License: MIT
================================================================================
"""

from .ai_observer import AIObserver, is_valid_selector
from .browser_manager import BrowserManager
from .element_registry import (
    ELEMENT_REGISTRY,
    ElementDefinition,
    ElementKind,
    element,
    get_element,
)
from .healing_reporter import HealingReporter, HealingStatistics, HealingTier, ResolutionRecord
from .page_base import BasePage
from .selector_cache import InMemorySelectorCache, SelectorCache
from .self_healing_locator import LocatorNotFoundError, SelfHealingLocator

__all__ = [
    "AIObserver",
    "BasePage",
    "BrowserManager",
    "ELEMENT_REGISTRY",
    "ElementDefinition",
    "ElementKind",
    "HealingReporter",
    "HealingStatistics",
    "HealingTier",
    "InMemorySelectorCache",
    "LocatorNotFoundError",
    "ResolutionRecord",
    "SelectorCache",
    "SelfHealingLocator",
    "element",
    "get_element",
    "is_valid_selector",
]
