"""
================================================================================
Element Registry
================================================================================

Declarative catalogue of UI elements for the self-healing locator.

Each element carries:
    - A primary selector (tried first, never cached)
    - Ordered fallback selectors (first one that resolves wins)
    - A human description (consumed only by AI-assisted healing)
    - An element kind hint for AI-assisted healing
    - An optional legacy locator kept for migration traceability

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union


class ElementKind(str, Enum):
    """Element kind hint passed to AI inference."""

    INPUT = "input"
    BUTTON = "button"
    LINK = "link"
    TEXT = "text"
    CONTAINER = "container"
    DROPDOWN = "dropdown"
    CHECKBOX = "checkbox"
    RADIO = "radio"
    TEXTAREA = "textarea"


class DuplicateElementError(ValueError):
    """Raised when two definitions share a name inside one registry scope."""
    pass


@dataclass(frozen=True)
class ElementDefinition:
    """
    Immutable description of a single UI target.

    Attributes:
        name: Unique identifier within a registry scope (cache key)
        description: Free-text description used by AI healing only
        primary: Selector tried first on every lookup
        fallbacks: Ordered selectors tried after primary and cache
        kind: Element kind hint for AI healing
        legacy_locator: Provenance of the selector (e.g. a Selenium XPath)
    """

    name: str
    description: str
    primary: str
    fallbacks: Tuple[str, ...] = field(default_factory=tuple)
    kind: Union[ElementKind, str] = ElementKind.BUTTON
    legacy_locator: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("ElementDefinition.name must not be empty")
        if not self.primary:
            raise ValueError(f"ElementDefinition '{self.name}' has an empty primary selector")
        # Frozen dataclass: normalise through object.__setattr__
        object.__setattr__(self, "fallbacks", tuple(self.fallbacks))
        object.__setattr__(self, "kind", ElementKind(self.kind))


def element(
    name: str,
    description: str,
    primary: str,
    fallbacks: Sequence[str] = (),
    kind: Union[ElementKind, str] = ElementKind.BUTTON,
    legacy_locator: Optional[str] = None,
) -> ElementDefinition:
    """Shorthand used by the catalogue below and by page objects."""
    return ElementDefinition(
        name=name,
        description=description,
        primary=primary,
        fallbacks=tuple(fallbacks),
        kind=kind,
        legacy_locator=legacy_locator,
    )


def build_page_registry(definitions: Iterable[ElementDefinition]) -> Dict[str, ElementDefinition]:
    """
    Build one registry scope keyed by element name.

    Raises:
        DuplicateElementError: If two definitions share a name
    """
    registry: Dict[str, ElementDefinition] = {}
    for definition in definitions:
        if definition.name in registry:
            raise DuplicateElementError(
                f"Element '{definition.name}' is defined more than once"
            )
        registry[definition.name] = definition
    return registry


# =============================================================================
# Catalogue
# =============================================================================

ELEMENT_REGISTRY: Dict[str, Dict[str, ElementDefinition]] = {
    # Shared widgets (toasts, spinners)
    "common": build_page_registry([
        element(
            "loading_spinner",
            "Loading spinner/overlay",
            ".oxd-loading-spinner",
            [".oxd-loading-spinner-container", ".loading", "[class*='spinner']"],
            ElementKind.CONTAINER,
        ),
        element(
            "toast_message",
            "Toast notification message",
            ".oxd-toast",
            [".oxd-toast-content", ".toast", "[role='alert']"],
            ElementKind.TEXT,
        ),
        element(
            "toast_success",
            "Success toast notification",
            ".oxd-toast--success",
            [".oxd-toast-content--success", ".toast-success", ".alert-success"],
            ElementKind.TEXT,
        ),
        element(
            "toast_error",
            "Error toast notification",
            ".oxd-toast--error",
            [".oxd-toast-content--error", ".toast-error", ".alert-danger"],
            ElementKind.TEXT,
        ),
    ]),

    "login": build_page_registry([
        element(
            "username_input",
            "Username input field on login page",
            "input[name='username']",
            [
                "[placeholder='Username']",
                ".oxd-input[name='username']",
                ".orangehrm-login-form input:first-of-type",
                "#username",
            ],
            ElementKind.INPUT,
            legacy_locator="id=username",
        ),
        element(
            "password_input",
            "Password input field on login page",
            "input[name='password']",
            [
                "[placeholder='Password']",
                "input[type='password']",
                ".orangehrm-login-form input[type='password']",
            ],
            ElementKind.INPUT,
            legacy_locator="id=password",
        ),
        element(
            "login_button",
            "Login submit button",
            "button[type='submit']",
            [
                ".orangehrm-login-button",
                "button.oxd-button--main",
                "button:has-text('Login')",
            ],
            ElementKind.BUTTON,
            legacy_locator="xpath=//button[@type='submit']",
        ),
        element(
            "error_message",
            "Login error message alert",
            ".oxd-alert-content-text",
            [".oxd-alert--error", "[role='alert']", ".orangehrm-login-error"],
            ElementKind.TEXT,
        ),
        element(
            "forgot_password_link",
            "Forgot your password link",
            ".orangehrm-login-forgot-header",
            ["p:has-text('Forgot your password')", "a:has-text('Forgot')"],
            ElementKind.LINK,
        ),
    ]),

    "apply_leave": build_page_registry([
        element(
            "leave_type_dropdown",
            "Leave Type dropdown selector",
            ".oxd-form-row:has-text('Leave Type') .oxd-select-wrapper",
            [".oxd-select-text-input", "select[name='leaveType']"],
            ElementKind.DROPDOWN,
        ),
        element(
            "leave_balance",
            "Leave Balance display",
            ".oxd-form-row:has-text('Leave Balance') .oxd-text",
            [".orangehrm-leave-balance-text", "p:has-text('Day(s)')"],
            ElementKind.TEXT,
        ),
        element(
            "from_date_input",
            "From Date input field",
            ".oxd-form-row:has-text('From Date') input",
            ["input[name='fromDate']", "input[placeholder='yyyy-mm-dd']:first-of-type"],
            ElementKind.INPUT,
        ),
        element(
            "to_date_input",
            "To Date input field",
            ".oxd-form-row:has-text('To Date') input",
            ["input[name='toDate']", "input[placeholder='yyyy-mm-dd']:last-of-type"],
            ElementKind.INPUT,
        ),
        element(
            "comments_textarea",
            "Comments textarea",
            "textarea",
            [".oxd-textarea", "textarea[placeholder]"],
            ElementKind.TEXTAREA,
        ),
        element(
            "apply_button",
            "Apply button submitting the leave request",
            ".oxd-button--secondary[type='submit']",
            ["button:has-text('Apply')", "button[type='submit']"],
            ElementKind.BUTTON,
        ),
        element(
            "validation_error",
            "Validation error message under a form field",
            ".oxd-input-field-error-message",
            [".oxd-input-group__message", "span:has-text('Required')"],
            ElementKind.TEXT,
        ),
    ]),

    "search": build_page_registry([
        element(
            "search_input",
            "Main search text input field",
            "#searchBox",
            [
                "input#searchBox",
                "input[name='search']",
                "input[placeholder*='search' i]",
                "[data-test='search-input']",
                "input[type='search']",
            ],
            ElementKind.INPUT,
            legacy_locator="id=searchBox",
        ),
        element(
            "search_submit_button",
            "Search submit button",
            "form button[type='submit']",
            [
                "button[type='submit']",
                "button:has-text('Search')",
                "[data-test='search-submit']",
            ],
            ElementKind.BUTTON,
            legacy_locator="xpath=//button[@type='submit']",
        ),
        element(
            "results_heading",
            "Search results header showing result count",
            ".search-results__header span",
            [".search-results span", "[data-test='results-heading']", ".results-count"],
            ElementKind.TEXT,
            legacy_locator="xpath=//div[@class='search-results__header']/span",
        ),
    ]),
}


def get_element(page: str, element_name: str) -> Optional[ElementDefinition]:
    """Get element definition by page and element name."""
    return ELEMENT_REGISTRY.get(page, {}).get(element_name)


def get_page_elements(page: str) -> Optional[Dict[str, ElementDefinition]]:
    """Get all element definitions registered for a page."""
    return ELEMENT_REGISTRY.get(page)


def list_all_elements() -> List[Dict[str, str]]:
    """List every registered element as {page, element, description}."""
    return [
        {"page": page_name, "element": name, "description": definition.description}
        for page_name, elements in ELEMENT_REGISTRY.items()
        for name, definition in elements.items()
    ]


__all__ = [
    "DuplicateElementError",
    "ELEMENT_REGISTRY",
    "ElementDefinition",
    "ElementKind",
    "build_page_registry",
    "element",
    "get_element",
    "get_page_elements",
    "list_all_elements",
]
