"""
================================================================================
UI Testing Pytest Configuration
================================================================================

This module configures pytest for UI tests, providing fixtures for browser
management, the self-healing locator, page objects, and test teardown.

Key Features:
- Browser and page lifecycle management (skips when no browser is installed)
- One SelfHealingLocator per test, shared by all page objects of that test
- Healing report attached to Allure and saved as JSON after each test
- Screenshot capture on failure

================================================================================
"""

import re
from pathlib import Path
from typing import AsyncGenerator, Generator

import allure
import pytest
from loguru import logger
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page

from healing_suites.ui_testing.framework.browser_manager import BrowserManager
from healing_suites.ui_testing.framework.self_healing_locator import SelfHealingLocator
from healing_suites.ui_testing.pages.apply_leave_page import ApplyLeavePage
from healing_suites.ui_testing.pages.login_page import LoginPage
from selfheal_tools.common import get_config
from selfheal_tools.report_tools.allure_utils import attach_healing_report


# ================================================================================
# Test Lifecycle Hooks
# ================================================================================

@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(item, call):
    """Expose each phase's report on the item (item.rep_setup / rep_call / ...)."""
    outcome = yield
    report = outcome.get_result()
    setattr(item, f"rep_{report.when}", report)


# ================================================================================
# Browser Fixtures
# ================================================================================

@pytest.fixture
async def browser_manager() -> AsyncGenerator[BrowserManager, None]:
    """
    Function-scoped browser manager fixture.

    Skips the test when Playwright browsers are not installed
    (`playwright install chromium`).
    """
    manager = BrowserManager()
    try:
        await manager.start()
    except PlaywrightError as e:
        pytest.skip(f"Browser not available: {str(e).splitlines()[0]}")
    yield manager
    await manager.close()


@pytest.fixture
async def page(request, browser_manager: BrowserManager) -> AsyncGenerator[Page, None]:
    """
    Function-scoped page fixture.

    Attaches a full-page screenshot to Allure when the test body failed.
    """
    page = await browser_manager.new_page()
    yield page

    rep_call = getattr(request.node, "rep_call", None)
    if rep_call is not None and rep_call.failed:
        try:
            png = await page.screenshot(full_page=True)
            allure.attach(png, name="failure_screenshot", attachment_type=allure.attachment_type.PNG)
        except PlaywrightError as e:
            logger.warning(f"Failed to capture screenshot on failure: {e}")


@pytest.fixture
def healer(request, page: Page) -> Generator[SelfHealingLocator, None, None]:
    """
    Self-healing locator for this test's page.

    AI tiers follow configuration (`AI_HEALING_ENABLED` plus an API key,
    which `run_tests.py --ai-healing` sets). On teardown the healing report is attached to Allure
    and saved as JSON.
    """
    healer = BrowserManager.new_healer(page, default_timeout_ms=3000)
    yield healer

    attach_healing_report(healer.reporter)

    if get_config("healing.save_reports", True) and len(healer.reporter):
        report_dir = Path(get_config("healing.report_dir", "reports/healing"))
        safe_name = re.sub(r"[^\w.-]+", "_", request.node.name)
        healer.persist_report(report_dir / f"{safe_name}.json")


# ================================================================================
# Page Object Fixtures
# ================================================================================

@pytest.fixture
def login_page(page: Page, healer: SelfHealingLocator) -> LoginPage:
    """Provides LoginPage instance sharing the test's healer."""
    return LoginPage(page, healer=healer)


@pytest.fixture
def apply_leave_page(page: Page, healer: SelfHealingLocator) -> ApplyLeavePage:
    """Provides ApplyLeavePage instance sharing the test's healer."""
    return ApplyLeavePage(page, healer=healer)


# ================================================================================
# Utility Fixtures
# ================================================================================

@pytest.fixture
def test_data():
    """
    Provides common test data for UI tests.
    """
    return {
        "valid_user": {
            "username": "Admin",
            "password": "admin123",
        },
        "invalid_user": {
            "username": "invalid_user",
            "password": "wrong_password",
        },
        "leave_request": {
            "leave_type": "CAN - Personal",
            "from_date": "2026-11-02",
            "to_date": "2026-11-03",
            "comments": "Family event",
        },
    }
