"""
================================================================================
Self-Healing Locator
================================================================================

Tiered element resolution for UI tests running against drifting markup.

Tier order (cheapest and most deterministic first):
    1. primary    - the definition's primary selector, never cached
    2. cache      - last healed selector for this element name
    3. fallback   - declared fallbacks, first one that resolves wins
    4. ai_visual  - model picks a selector from a screenshot
    5. ai_dom     - model picks a selector from serialized markup

The tiers are an ordered list of strategies; locate() folds over the list and
stops at the first one that yields a visible locator. One timeout budget
bounds the whole call. When AI is enabled each AI tier has a quarter of it
reserved, and the deterministic tiers share what is left over.

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Awaitable, Callable, List, Optional, Sequence, Union

from loguru import logger
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Locator, Page

from selfheal_tools.common import get_config

from .ai_observer import AIObserver
from .element_registry import ElementDefinition
from .healing_reporter import HealingReporter, HealingStatistics, HealingTier
from .selector_cache import InMemorySelectorCache, SelectorCache


# Playwright treats timeout=0 as "wait forever", so never hand it a wait below this
MIN_WAIT_MS = 1.0

# Share of a budget for primary and cache, and each AI tier's reserved share of the whole budget
TIER_SHARE = 4
# Fallback slice is budget / (len(fallbacks) + FALLBACK_SLICE_PADDING)
FALLBACK_SLICE_PADDING = 2

CACHEABLE_TIERS = frozenset({HealingTier.FALLBACK, HealingTier.AI_VISUAL, HealingTier.AI_DOM})
AI_TIERS = frozenset({HealingTier.AI_VISUAL, HealingTier.AI_DOM})


class LocatorNotFoundError(Exception):
    """
    Raised when every healing tier failed to produce a visible element.

    Attributes:
        element_name: Logical element name
        description: Human description of the element
        primary: Primary selector of the definition
        tried_tiers: Tiers attempted, in order
        legacy_locator: Migration provenance, if any
    """

    def __init__(
        self,
        element_name: str,
        description: str,
        primary: str,
        tried_tiers: Sequence[HealingTier],
        legacy_locator: Optional[str] = None,
        page_url: str = "",
    ):
        self.element_name = element_name
        self.description = description
        self.primary = primary
        self.tried_tiers = tuple(tried_tiers)
        self.legacy_locator = legacy_locator
        self.page_url = page_url
        tiers = ", ".join(t.value for t in self.tried_tiers) or "none"
        message = (
            f"Could not locate element '{element_name}' ({description})\n"
            f"  Primary: {primary}\n"
            f"  Legacy locator: {legacy_locator or 'N/A'}\n"
            f"  Tiers tried: {tiers}"
        )
        if page_url:
            message += f"\n  Page: {page_url}"
        super().__init__(message)


class HealingDeadline:
    """Wall-clock budget for one locate() call."""

    def __init__(
        self,
        budget_ms: float,
        clock: Callable[[], float] = time.monotonic,
        started: Optional[float] = None,
    ):
        self.budget_ms = float(budget_ms)
        self._clock = clock
        self._started = clock() if started is None else started

    def elapsed_ms(self) -> float:
        return (self._clock() - self._started) * 1000

    def remaining_ms(self) -> float:
        return max(0.0, self.budget_ms - self.elapsed_ms())

    @property
    def expired(self) -> bool:
        return self.remaining_ms() < MIN_WAIT_MS

    def slice(self, share_ms: float) -> float:
        """Wait time for one attempt, never past the deadline."""
        return min(share_ms, self.remaining_ms())

    def capped(self, budget_ms: float) -> "HealingDeadline":
        """Deadline with the same start and a smaller budget."""
        return HealingDeadline(min(budget_ms, self.budget_ms), self._clock, started=self._started)


@dataclass(frozen=True)
class Resolution:
    """A visible locator and the selector that produced it."""

    locator: Locator
    selector: str


StrategyFn = Callable[[ElementDefinition, HealingDeadline], Awaitable[Optional[Resolution]]]


@dataclass(frozen=True)
class HealingStrategy:
    tier: HealingTier
    resolve: StrategyFn


class SelfHealingLocator:
    """
    Self-healing element locator bound to one Playwright page.

    Each instance owns its selector cache and healing reporter; parallel
    workers each build their own instance and share nothing.

    Usage:
        >>> healer = SelfHealingLocator(page)
        >>> submit = element("submit", "Submit button", "#nope", ["button.submit"])
        >>> await healer.click(submit)
        >>> print(healer.report())

    Args:
        page: Playwright Page
        ai_observer: AI adapter; built from configuration when omitted
        reporter: Telemetry sink; a fresh HealingReporter when omitted
        cache: Healed selector store; in-memory when omitted
        default_timeout_ms: Budget for locate() when the caller passes none
        strategies: Replace the default tier list (mainly for tests)
        clock: Monotonic clock in seconds
    """

    def __init__(
        self,
        page: Page,
        ai_observer: Optional[AIObserver] = None,
        reporter: Optional[HealingReporter] = None,
        cache: Optional[SelectorCache] = None,
        default_timeout_ms: Optional[float] = None,
        strategies: Optional[Sequence[HealingStrategy]] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.page = page
        self.ai_observer = ai_observer if ai_observer is not None else AIObserver()
        self.reporter = reporter if reporter is not None else HealingReporter()
        self.cache = cache if cache is not None else InMemorySelectorCache()
        if default_timeout_ms is None:
            default_timeout_ms = get_config("healing.timeout_ms", 10000)
        self.default_timeout_ms = float(default_timeout_ms)
        if self.default_timeout_ms <= 0:
            raise ValueError(f"default_timeout_ms must be positive, got {default_timeout_ms}")
        self._clock = clock
        self.strategies: List[HealingStrategy] = (
            list(strategies) if strategies is not None else self.default_strategies()
        )

    def default_strategies(self) -> List[HealingStrategy]:
        """Primary, cache, fallback, then both AI tiers when AI is enabled."""
        strategies = [
            HealingStrategy(HealingTier.PRIMARY, self._try_primary),
            HealingStrategy(HealingTier.CACHE, self._try_cache),
            HealingStrategy(HealingTier.FALLBACK, self._try_fallbacks),
        ]
        if self.ai_observer.is_enabled():
            strategies += [
                HealingStrategy(HealingTier.AI_VISUAL, self._try_ai_visual),
                HealingStrategy(HealingTier.AI_DOM, self._try_ai_dom),
            ]
        return strategies

    # =========================================================================
    # Resolution
    # =========================================================================

    async def locate(
        self,
        definition: ElementDefinition,
        timeout_ms: Optional[float] = None,
    ) -> Locator:
        """
        Resolve a definition to a visible locator.

        Args:
            definition: Element to resolve
            timeout_ms: Budget for the whole multi-tier attempt

        Returns:
            Locator that was visible at the moment of return

        Raises:
            ValueError: Definition has no name or no primary selector, or
                timeout_ms is not positive
            LocatorNotFoundError: Every tier failed
        """
        if not definition.name or not definition.primary:
            raise ValueError("Element definition needs a name and a primary selector")
        budget_ms = self.default_timeout_ms if timeout_ms is None else float(timeout_ms)
        if budget_ms <= 0:
            raise ValueError(f"timeout_ms must be positive, got {timeout_ms}")

        deadline = HealingDeadline(budget_ms, self._clock)
        # AI tiers get their slices up front; deterministic tiers share the rest
        ai_share = budget_ms / TIER_SHARE
        ai_count = sum(1 for s in self.strategies if s.tier in AI_TIERS)
        deterministic = deadline.capped(budget_ms - ai_share * ai_count)
        tried: List[HealingTier] = []

        for strategy in self.strategies:
            if deadline.expired:
                logger.warning(
                    f"Healing budget of {deadline.budget_ms:.0f}ms exhausted for "
                    f"'{definition.name}' before tier {strategy.tier.value}"
                )
                break
            if strategy.tier in AI_TIERS:
                tier_deadline = HealingDeadline(min(ai_share, deadline.remaining_ms()), self._clock)
            else:
                tier_deadline = deterministic
            if tier_deadline.expired:
                logger.debug(f"No time left for tier {strategy.tier.value} on '{definition.name}'")
                continue
            tried.append(strategy.tier)
            resolution = await strategy.resolve(definition, tier_deadline)
            if resolution is None:
                continue
            return self._succeed(definition, strategy.tier, resolution, deadline)

        self.reporter.record(
            definition.name,
            definition.primary,
            None,
            HealingTier.FAILED,
            deadline.elapsed_ms(),
            legacy_locator=definition.legacy_locator,
        )
        error = LocatorNotFoundError(
            definition.name,
            definition.description,
            definition.primary,
            tried,
            legacy_locator=definition.legacy_locator,
            page_url=self._page_url(),
        )
        logger.error(f"❌ {error}")
        raise error

    def _succeed(
        self,
        definition: ElementDefinition,
        tier: HealingTier,
        resolution: Resolution,
        deadline: HealingDeadline,
    ) -> Locator:
        if tier in CACHEABLE_TIERS:
            self.cache.set(definition.name, resolution.selector)

        self.reporter.record(
            definition.name,
            definition.primary,
            resolution.selector,
            tier,
            deadline.elapsed_ms(),
            legacy_locator=definition.legacy_locator,
        )

        if tier is HealingTier.PRIMARY:
            logger.debug(f"✅ Element '{definition.name}' found: {resolution.selector}")
        else:
            logger.warning(
                f"⚠️ Element '{definition.name}' healed via {tier.value}: "
                f"{definition.primary} -> {resolution.selector}"
            )
        return resolution.locator

    async def _wait_visible(self, selector: str, wait_ms: float) -> Optional[Locator]:
        """Visible locator for selector within wait_ms, else None."""
        if wait_ms < MIN_WAIT_MS:
            return None
        locator = self.page.locator(selector).first
        try:
            await locator.wait_for(state="visible", timeout=wait_ms)
        except PlaywrightError as e:
            logger.debug(f"Selector not visible: {selector} -> {str(e)[:80]}")
            return None
        return locator

    async def _try_primary(
        self, definition: ElementDefinition, deadline: HealingDeadline
    ) -> Optional[Resolution]:
        wait_ms = deadline.slice(deadline.budget_ms / TIER_SHARE)
        locator = await self._wait_visible(definition.primary, wait_ms)
        if locator is None:
            logger.debug(f"Primary selector failed for '{definition.name}': {definition.primary}")
            return None
        return Resolution(locator, definition.primary)

    async def _try_cache(
        self, definition: ElementDefinition, deadline: HealingDeadline
    ) -> Optional[Resolution]:
        cached = self.cache.get(definition.name)
        if not cached:
            return None
        locator = await self._wait_visible(cached, deadline.slice(deadline.budget_ms / TIER_SHARE))
        if locator is None:
            logger.info(f"Evicting stale cached selector for '{definition.name}': {cached}")
            self.cache.evict(definition.name)
            return None
        return Resolution(locator, cached)

    async def _try_fallbacks(
        self, definition: ElementDefinition, deadline: HealingDeadline
    ) -> Optional[Resolution]:
        share = deadline.budget_ms / (len(definition.fallbacks) + FALLBACK_SLICE_PADDING)
        for selector in definition.fallbacks:
            if deadline.expired:
                break
            locator = await self._wait_visible(selector, deadline.slice(share))
            if locator is not None:
                return Resolution(locator, selector)
        return None

    async def _try_ai_visual(
        self, definition: ElementDefinition, tier_deadline: HealingDeadline
    ) -> Optional[Resolution]:
        """Screenshot plus vision inference, all within this tier's own slice."""
        if tier_deadline.expired:
            return None
        try:
            screenshot = await self.page.screenshot(
                type="png", full_page=True, timeout=tier_deadline.remaining_ms()
            )
        except PlaywrightError as e:
            logger.warning(f"Screenshot for AI healing failed: {e}")
            return None

        selector = await self.ai_observer.infer_from_image(
            screenshot,
            definition.description,
            definition.kind,
            timeout_ms=tier_deadline.remaining_ms(),
        )
        return await self._try_candidate(selector, tier_deadline)

    async def _try_ai_dom(
        self, definition: ElementDefinition, tier_deadline: HealingDeadline
    ) -> Optional[Resolution]:
        if tier_deadline.expired:
            return None
        try:
            html = await self.page.content()
        except PlaywrightError as e:
            logger.warning(f"Page content for AI healing failed: {e}")
            return None

        selector = await self.ai_observer.infer_from_markup(
            html[: self.ai_observer.dom_char_limit],
            definition.description,
            definition.kind,
            timeout_ms=tier_deadline.remaining_ms(),
        )
        return await self._try_candidate(selector, tier_deadline)

    async def _try_candidate(
        self, selector: Optional[str], tier_deadline: HealingDeadline
    ) -> Optional[Resolution]:
        if not selector:
            return None
        locator = await self._wait_visible(selector, tier_deadline.remaining_ms())
        if locator is None:
            return None
        return Resolution(locator, selector)

    def _page_url(self) -> str:
        url = getattr(self.page, "url", "")
        return url if isinstance(url, str) else ""

    # =========================================================================
    # Convenience Actions
    # =========================================================================

    async def click(
        self,
        definition: ElementDefinition,
        timeout_ms: Optional[float] = None,
        **kwargs: Any,
    ) -> None:
        """Locate then click. Extra kwargs go to Locator.click()."""
        locator = await self.locate(definition, timeout_ms)
        await locator.click(**kwargs)

    async def fill(
        self,
        definition: ElementDefinition,
        value: str,
        timeout_ms: Optional[float] = None,
        **kwargs: Any,
    ) -> None:
        """Locate then fill. Extra kwargs go to Locator.fill()."""
        locator = await self.locate(definition, timeout_ms)
        await locator.fill(value, **kwargs)

    async def read_text(
        self,
        definition: ElementDefinition,
        timeout_ms: Optional[float] = None,
    ) -> str:
        locator = await self.locate(definition, timeout_ms)
        return await locator.text_content() or ""

    async def select_option(
        self,
        definition: ElementDefinition,
        value: Union[str, Sequence[str]],
        timeout_ms: Optional[float] = None,
    ) -> List[str]:
        locator = await self.locate(definition, timeout_ms)
        return await locator.select_option(value)

    async def get_attribute(
        self,
        definition: ElementDefinition,
        name: str,
        timeout_ms: Optional[float] = None,
    ) -> Optional[str]:
        locator = await self.locate(definition, timeout_ms)
        return await locator.get_attribute(name)

    async def is_visible(
        self,
        definition: ElementDefinition,
        timeout_ms: float = 3000,
    ) -> bool:
        """
        Check visibility through the healing pipeline.

        Not locatable and not visible are the same answer here, so
        LocatorNotFoundError becomes False.
        """
        try:
            locator = await self.locate(definition, timeout_ms)
            return await locator.is_visible()
        except LocatorNotFoundError:
            return False

    # =========================================================================
    # Reporting
    # =========================================================================

    def report(self) -> str:
        return self.reporter.report()

    def statistics(self) -> HealingStatistics:
        return self.reporter.statistics()

    def persist_report(self, path: Union[str, Path]) -> Path:
        return self.reporter.persist(path)

    def clear_cache(self) -> None:
        self.cache.clear()


__all__ = [
    "HealingDeadline",
    "HealingStrategy",
    "LocatorNotFoundError",
    "Resolution",
    "SelfHealingLocator",
]
