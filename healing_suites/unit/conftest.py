"""
================================================================================
Unit Test Fixtures
================================================================================

Browser-free fakes for the healing framework:
  - FakePage / FakeLocator: a page with a fixed set of visible selectors
  - FakeClock: manual monotonic clock (failed waits advance it)
  - FakeInferenceClient: scripted model answers, call log, delay/error knobs

================================================================================
"""

import asyncio
from typing import Dict, Iterable, List, Optional

import pytest
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from healing_suites.ui_testing.framework.ai_observer import (
    AIObserver,
    InferenceClient,
    InferenceRequest,
    InferenceResponse,
)
from healing_suites.ui_testing.framework.self_healing_locator import SelfHealingLocator


class FakeClock:
    """Seconds, like time.monotonic."""

    def __init__(self, start: float = 0.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance_ms(self, ms: float) -> None:
        self.now += ms / 1000


class FakeLocator:
    def __init__(self, page: "FakePage", selector: str, has_text: Optional[str] = None):
        self.page = page
        self.selector = selector
        self.has_text = has_text

    @property
    def first(self) -> "FakeLocator":
        return self

    async def wait_for(self, state: str = "visible", timeout: Optional[float] = None) -> None:
        visible = self.selector in self.page.visible
        if state == "hidden":
            if visible:
                raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded")
            return
        self.page.queried.append(self.selector)
        self.page.waits.append(timeout)
        if not visible:
            if self.page.clock is not None and timeout:
                self.page.clock.advance_ms(timeout)
            raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded")

    async def is_visible(self) -> bool:
        return self.selector in self.page.visible

    async def click(self, **kwargs) -> None:
        self.page.actions.append(("click", self.selector, self.has_text))

    async def fill(self, value: str, **kwargs) -> None:
        self.page.actions.append(("fill", self.selector, value))

    async def text_content(self) -> Optional[str]:
        return self.page.texts.get(self.selector)

    async def get_attribute(self, name: str) -> Optional[str]:
        return self.page.attributes.get((self.selector, name))

    async def select_option(self, value=None, label: Optional[str] = None) -> List[str]:
        chosen = value if label is None else label
        self.page.actions.append(("select", self.selector, chosen))
        return [chosen] if isinstance(chosen, str) else list(chosen)

    async def evaluate(self, expression: str):
        return self.page.tags.get(self.selector, "div")

    async def all_text_contents(self) -> List[str]:
        if self.selector not in self.page.visible:
            return []
        return self.page.texts.get(self.selector, "").split("\n")


class FakePage:
    """Just enough of playwright.async_api.Page for the healing engine."""

    def __init__(
        self,
        visible: Iterable[str] = (),
        html: str = "<html><body></body></html>",
        clock: Optional[FakeClock] = None,
    ):
        self.visible = set(visible)
        self.html = html
        self.clock = clock
        self.url = "https://app.example.test/web/index.php/auth/login"
        self.texts: Dict[str, str] = {}
        self.attributes: Dict[tuple, str] = {}
        self.tags: Dict[str, str] = {}
        self.queried: List[str] = []
        self.waits: List[Optional[float]] = []
        self.actions: List[tuple] = []
        self.screenshot_calls: List[dict] = []
        self.content_calls = 0

    def locator(self, selector: str, has_text: Optional[str] = None) -> FakeLocator:
        return FakeLocator(self, selector, has_text)

    async def screenshot(self, **kwargs) -> bytes:
        self.screenshot_calls.append(kwargs)
        return b"\x89PNG fake"

    async def content(self) -> str:
        self.content_calls += 1
        return self.html


class FakeInferenceClient(InferenceClient):
    """Replays scripted answers in order; the last one repeats."""

    def __init__(
        self,
        answers: Iterable[str] = ("NOT_FOUND",),
        delay_s: float = 0.0,
        error: Optional[Exception] = None,
    ):
        self.answers = list(answers)
        self.delay_s = delay_s
        self.error = error
        self.requests: List[InferenceRequest] = []

    async def complete(self, request: InferenceRequest) -> InferenceResponse:
        self.requests.append(request)
        if self.delay_s:
            await asyncio.sleep(self.delay_s)
        if self.error is not None:
            raise self.error
        index = min(len(self.requests), len(self.answers)) - 1
        return InferenceResponse(text=self.answers[index])


@pytest.fixture
def make_page():
    """FakePage constructor: make_page(visible=[...], html=..., clock=...)."""
    return FakePage


@pytest.fixture
def make_client():
    """FakeInferenceClient constructor: make_client(answers=[...], delay_s=..., error=...)."""
    return FakeInferenceClient


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_healer():
    """Factory: SelfHealingLocator over a FakePage with AI off unless a client is given."""

    def _make(
        page: FakePage,
        client: Optional[InferenceClient] = None,
        timeout_ms: float = 1000,
        clock: Optional[FakeClock] = None,
    ) -> SelfHealingLocator:
        observer = AIObserver(client, enabled=client is not None, timeout_s=5)
        kwargs = {"clock": clock} if clock is not None else {}
        return SelfHealingLocator(
            page,
            ai_observer=observer,
            default_timeout_ms=timeout_ms,
            **kwargs,
        )

    return _make
