"""
================================================================================
Apply Leave Page Object (Async / Playwright)
================================================================================

Leave request form. Every field is resolved through the self-healing
locator, so class-name churn in the form markup degrades to fallbacks
(and AI healing when configured) instead of failing the test.

================================================================================
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional

import allure
from loguru import logger

from healing_suites.ui_testing.framework.page_base import PageBase
from healing_suites.ui_testing.framework.self_healing_locator import LocatorNotFoundError


@dataclass
class LeaveRequest:
    leave_type: str
    from_date: str
    to_date: str
    comments: Optional[str] = None


class ApplyLeavePage(PageBase):
    """Apply Leave page object (async)."""

    URL_PATH = "/web/index.php/leave/applyLeave"
    PAGE_TITLE = "Apply Leave"
    REGISTRY_PAGE = "apply_leave"

    @allure.step("Open Apply Leave page")
    async def open(self) -> "ApplyLeavePage":
        await self.navigate()
        return self

    def is_on_apply_leave_page(self) -> bool:
        return "/leave/applyLeave" in self.current_url

    @allure.step("Select leave type: {leave_type}")
    async def select_leave_type(self, leave_type: str) -> None:
        """
        Pick a leave type.

        Native <select> elements take select_option(); the custom OrangeHRM
        dropdown is opened and its option clicked.
        """
        dropdown = await self.healer.locate(self.element("leave_type_dropdown"))
        tag = await dropdown.evaluate("el => el.tagName.toLowerCase()")
        if tag == "select":
            await dropdown.select_option(label=leave_type)
        else:
            await dropdown.click()
            await self.page.locator(".oxd-select-option", has_text=leave_type).first.click()
        await self.wait_for_spinner_to_disappear()

    async def get_leave_balance(self) -> str:
        try:
            return (await self.read_text(self.element("leave_balance"))).strip()
        except LocatorNotFoundError:
            return "0.00 Day(s)"

    async def get_leave_balance_days(self) -> float:
        match = re.search(r"(\d+\.?\d*)", await self.get_leave_balance())
        return float(match.group(1)) if match else 0.0

    async def enter_from_date(self, date: str) -> None:
        field = await self.healer.locate(self.element("from_date_input"))
        await field.fill(date)
        await self.page.keyboard.press("Escape")  # close date picker

    async def enter_to_date(self, date: str) -> None:
        field = await self.healer.locate(self.element("to_date_input"))
        await field.fill(date)
        await self.page.keyboard.press("Escape")

    async def enter_comments(self, comments: str) -> None:
        await self.fill(self.element("comments_textarea"), comments)

    async def click_apply(self) -> None:
        await self.click(self.element("apply_button"))
        await self.wait_for_spinner_to_disappear()

    @allure.step("Apply leave")
    async def apply_leave(self, request: LeaveRequest) -> None:
        """Fill and submit the whole leave request."""
        logger.info(
            f"Applying leave: {request.leave_type} {request.from_date} -> {request.to_date}"
        )
        await self.select_leave_type(request.leave_type)
        await self.enter_from_date(request.from_date)
        await self.enter_to_date(request.to_date)
        if request.comments:
            await self.enter_comments(request.comments)
        await self.click_apply()

    async def is_validation_error_displayed(self) -> bool:
        return await self.is_visible(self.element("validation_error"))

    async def get_validation_errors(self) -> List[str]:
        """Texts of every visible validation message, read via the healed selector."""
        definition = self.element("validation_error")
        try:
            await self.healer.locate(definition, timeout_ms=3000)
        except LocatorNotFoundError:
            return []
        selector = self.healer.cache.get(definition.name) or definition.primary
        texts = await self.page.locator(selector).all_text_contents()
        return [t.strip() for t in texts if t.strip()]
