"""
================================================================================
Page Objects
================================================================================

Page Object Model implementations for application pages.

Each page class encapsulates:
    - Element definitions (from ELEMENT_REGISTRY)
    - Page-specific actions built on the self-healing locator
    - Verification methods

Author: Automation Team
License: MIT
================================================================================
"""

from .apply_leave_page import ApplyLeavePage, LeaveRequest
from .login_page import LoginPage

__all__ = [
    "ApplyLeavePage",
    "LeaveRequest",
    "LoginPage",
]
