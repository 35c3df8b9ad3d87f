"""
================================================================================
Login Page UI Tests (Async / Playwright)
================================================================================

The login markup below has drifted from the registered primaries (name
attributes removed, submit button retyped), so every interaction has to heal
through fallbacks.

================================================================================
"""

import allure
import pytest

from healing_suites.ui_testing.framework.healing_reporter import HealingTier
from healing_suites.ui_testing.pages.login_page import LoginPage


DRIFTED_LOGIN_MARKUP = """
<form class="orangehrm-login-form" onsubmit="event.preventDefault()">
  <input placeholder="Username">
  <input type="password" placeholder="Password">
  <button type="button" class="orangehrm-login-button"
          onclick="document.getElementById('alert').style.display='block'">Login</button>
  <div id="alert" class="oxd-alert-content-text" style="display:none">Invalid credentials</div>
</form>
"""


@allure.epic("UI Testing")
@allure.feature("Authentication")
class TestLoginPage:
    """Login page object over drifted markup (async)."""

    @allure.story("Self-Healing")
    @allure.title("Login form is found through fallbacks")
    @allure.severity(allure.severity_level.CRITICAL)
    @pytest.mark.P0
    @pytest.mark.smoke
    @pytest.mark.asyncio
    async def test_form_displayed_via_fallbacks(self, login_page: LoginPage):
        await login_page.page.set_content(DRIFTED_LOGIN_MARKUP)

        assert await login_page.verify_form_displayed()

        stats = login_page.healer.statistics()
        assert stats.fallback_hits == 3
        assert stats.failures == 0

    @allure.story("Negative Path")
    @allure.title("Invalid credentials show an error message")
    @pytest.mark.P1
    @pytest.mark.regression
    @pytest.mark.asyncio
    async def test_invalid_login_shows_error(self, login_page: LoginPage, test_data):
        await login_page.page.set_content(DRIFTED_LOGIN_MARKUP)
        user = test_data["invalid_user"]

        await login_page.login(username=user["username"], password=user["password"])

        assert await login_page.page.input_value("[placeholder='Username']") == user["username"]
        assert await login_page.is_error_displayed()
        assert await login_page.get_error_message() == "Invalid credentials"

    @allure.story("Security")
    @allure.title("Password input is masked")
    @pytest.mark.P2
    @pytest.mark.asyncio
    async def test_password_is_masked(self, login_page: LoginPage):
        await login_page.page.set_content(DRIFTED_LOGIN_MARKUP)

        assert await login_page.is_password_masked()
        healed = login_page.healer.reporter.records_by_tier(HealingTier.FALLBACK)
        assert healed[0].legacy_locator == "id=password"
