"""
================================================================================
Login Page Object (Async / Playwright)
================================================================================

Login screen built on the self-healing locator.

Design goals:
  - Elements come from ELEMENT_REGISTRY["login"] (primary + fallbacks)
  - Credentials default to UI_USERNAME / UI_PASSWORD (demo-safe)

================================================================================
"""

from __future__ import annotations

import os
from typing import Optional

import allure
from loguru import logger
from playwright.async_api import Error as PlaywrightError

from healing_suites.ui_testing.framework.page_base import PageBase


class LoginPage(PageBase):
    """Login page object (async)."""

    URL_PATH = "/web/index.php/auth/login"
    PAGE_TITLE = "OrangeHRM"
    REGISTRY_PAGE = "login"

    @allure.step("Open login page")
    async def open(self) -> "LoginPage":
        await self.navigate()
        return self

    def is_on_login_page(self) -> bool:
        return "/auth/login" in self.current_url

    async def enter_username(self, username: str) -> None:
        await self.fill(self.element("username_input"), username)

    async def enter_password(self, password: str) -> None:
        await self.fill(self.element("password_input"), password)

    async def click_login(self) -> None:
        await self.click(self.element("login_button"))
        await self.wait_for_spinner_to_disappear()

    @allure.step("Login (username={username})")
    async def login(
        self,
        username: Optional[str] = None,
        password: Optional[str] = None,
    ) -> None:
        """
        Perform login.

        Args:
            username: Defaults to `UI_USERNAME` env var (demo-safe)
            password: Defaults to `UI_PASSWORD` env var (demo-safe)
        """
        if username is None:
            username = os.getenv("UI_USERNAME", "demo_user")
        if password is None:
            password = os.getenv("UI_PASSWORD", "demo_password")

        await self.enter_username(username)
        await self.enter_password(password)
        await self.click_login()

    @allure.step("Verify login form is displayed")
    async def verify_form_displayed(self) -> bool:
        username_ok = await self.is_visible(self.element("username_input"))
        password_ok = await self.is_visible(self.element("password_input"))
        button_ok = await self.is_visible(self.element("login_button"))
        return username_ok and password_ok and button_ok

    async def is_error_displayed(self) -> bool:
        return await self.is_visible(self.element("error_message"))

    async def get_error_message(self) -> str:
        return (await self.read_text(self.element("error_message"))).strip()

    async def is_password_masked(self) -> bool:
        input_type = await self.healer.get_attribute(self.element("password_input"), "type")
        return input_type == "password"

    @allure.step("Click forgot password")
    async def click_forgot_password(self) -> None:
        await self.click(self.element("forgot_password_link"))
        try:
            await self.wait_for_page_load(timeout=5000)
        except PlaywrightError as e:
            logger.debug(f"Page still loading after forgot-password click: {e}")
