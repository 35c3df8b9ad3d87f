"""
================================================================================
Base Page Object
================================================================================

Foundation class for Page Object Model implementation.

Provides:
    - Navigation and load-state waits
    - Self-healing element interaction through ElementDefinitions
    - Toast and spinner helpers shared by every screen
    - Screenshot and healing report utilities

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Any, Optional

import allure
from loguru import logger
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page

from selfheal_tools.common import get_config
from selfheal_tools.report_tools.allure_utils import attach_healing_report

from .element_registry import ElementDefinition, get_element
from .self_healing_locator import LocatorNotFoundError, SelfHealingLocator


# Default output directory for screenshots
SCREENSHOT_DIR = Path(__file__).parent.parent / "screenshots"


class BasePage:
    """
    Base class for all page objects.

    Page objects declare ElementDefinitions (usually from ELEMENT_REGISTRY)
    and build domain actions from the healer's calls.

    Usage:
        class LoginPage(BasePage):
            URL_PATH = "/auth/login"

            async def login(self, username: str, password: str):
                await self.fill(self.element("username_input"), username)
                await self.fill(self.element("password_input"), password)
                await self.click(self.element("login_button"))
    """

    # Override in subclasses
    URL_PATH: str = "/"
    PAGE_TITLE: str = ""
    REGISTRY_PAGE: str = "common"

    def __init__(
        self,
        page: Page,
        base_url: str = "",
        healer: Optional[SelfHealingLocator] = None,
    ):
        """
        Initialize page object.

        Args:
            page: Playwright Page object
            base_url: Base URL for the application
            healer: Shared healer; pages of one session should pass the same
                instance so they share cache and healing history
        """
        self.page = page
        if not base_url:
            base_url = get_config("ui.base_url", "http://localhost:3000")
        self.base_url = base_url.rstrip("/")
        self.healer = healer or SelfHealingLocator(page)

    def element(self, name: str, registry_page: Optional[str] = None) -> ElementDefinition:
        """Look up a definition registered for this page (or another registry page)."""
        page_name = registry_page or self.REGISTRY_PAGE
        definition = get_element(page_name, name)
        if definition is None:
            raise KeyError(f"No element '{name}' registered for page '{page_name}'")
        return definition

    @property
    def url(self) -> str:
        """Get full page URL."""
        return f"{self.base_url}{self.URL_PATH}"

    @property
    def current_url(self) -> str:
        return self.page.url

    async def navigate(self, wait_for: str = "networkidle") -> None:
        """
        Navigate to this page.

        Args:
            wait_for: Wait condition - 'load', 'domcontentloaded', 'networkidle'
        """
        with allure.step(f"Navigate to {self.URL_PATH}"):
            await self.page.goto(self.url, wait_until=wait_for)
            logger.debug(f"Navigated to: {self.url}")

    async def wait_for_page_load(
        self,
        state: str = "networkidle",
        timeout: int = 15000,
    ) -> None:
        """
        Wait for the page to reach a stable load state.

        Args:
            state: Playwright load state ('load', 'domcontentloaded', 'networkidle')
            timeout: Timeout in milliseconds
        """
        await self.page.wait_for_load_state(state, timeout=timeout)

    # =========================================================================
    # Self-Healing Element Interactions
    # =========================================================================

    async def click(
        self,
        definition: ElementDefinition,
        timeout_ms: Optional[float] = None,
        **kwargs: Any,
    ) -> None:
        with allure.step(f"Click: {definition.name}"):
            await self.healer.click(definition, timeout_ms, **kwargs)

    async def fill(
        self,
        definition: ElementDefinition,
        value: str,
        timeout_ms: Optional[float] = None,
        **kwargs: Any,
    ) -> None:
        masked = "*" * len(value) if "password" in definition.name.lower() else value
        with allure.step(f"Fill {definition.name}: {masked}"):
            await self.healer.fill(definition, value, timeout_ms, **kwargs)

    async def read_text(
        self,
        definition: ElementDefinition,
        timeout_ms: Optional[float] = None,
    ) -> str:
        return await self.healer.read_text(definition, timeout_ms)

    async def is_visible(
        self,
        definition: ElementDefinition,
        timeout_ms: float = 3000,
    ) -> bool:
        return await self.healer.is_visible(definition, timeout_ms)

    # =========================================================================
    # Shared Widgets
    # =========================================================================

    async def wait_for_spinner_to_disappear(self, timeout: int = 30000) -> None:
        """Wait for the loading spinner to go away; absent spinner is fine."""
        spinner = self.page.locator(self.element("loading_spinner", "common").primary)
        try:
            await spinner.first.wait_for(state="hidden", timeout=timeout)
        except PlaywrightError:
            logger.debug("Spinner still visible after timeout")

    async def get_toast_message(self, timeout_ms: float = 5000) -> str:
        try:
            return await self.healer.read_text(self.element("toast_message", "common"), timeout_ms)
        except LocatorNotFoundError:
            return ""

    async def is_success_toast_displayed(self, timeout_ms: float = 5000) -> bool:
        return await self.healer.is_visible(self.element("toast_success", "common"), timeout_ms)

    async def is_error_toast_displayed(self, timeout_ms: float = 5000) -> bool:
        return await self.healer.is_visible(self.element("toast_error", "common"), timeout_ms)

    # =========================================================================
    # Screenshot and Healing Report Utilities
    # =========================================================================

    async def screenshot(
        self,
        name: str,
        full_page: bool = False,
        attach_to_allure: bool = True,
    ) -> Path:
        """
        Take screenshot and optionally attach to Allure.

        Args:
            name: Screenshot name (without extension)
            full_page: Capture full scrollable page
            attach_to_allure: Whether to attach to Allure report

        Returns:
            Path to saved screenshot
        """
        SCREENSHOT_DIR.mkdir(parents=True, exist_ok=True)

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        filepath = SCREENSHOT_DIR / f"{name}_{timestamp}.png"

        png = await self.page.screenshot(path=str(filepath), full_page=full_page)

        if attach_to_allure:
            allure.attach(png, name=name, attachment_type=allure.attachment_type.PNG)

        logger.debug(f"Screenshot saved: {filepath}")
        return filepath

    def get_healing_report(self) -> str:
        return self.healer.report()

    def save_healing_report(self, path: str) -> Path:
        return self.healer.persist_report(path)

    def attach_healing_report(self, name: str = "Self-Healing Report") -> None:
        attach_healing_report(self.healer.reporter, name=name)


__all__ = [
    "BasePage",
    "PageBase",
]

# Backward-compatible alias (many Page Objects prefer PageBase naming)
PageBase = BasePage
