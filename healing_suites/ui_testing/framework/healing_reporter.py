"""
================================================================================
Healing Reporter
================================================================================

Append-only log of element resolution attempts with derived statistics.

Features:
    - One immutable record per locate() call
    - Statistics recomputed from the full record list on every call
    - Human-readable report listing only healed and failed lookups
    - JSON persistence for CI dashboards

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from loguru import logger


class HealingTier(str, Enum):
    """Strategy that produced (or failed to produce) the winning selector."""

    PRIMARY = "primary"
    CACHE = "cache"
    FALLBACK = "fallback"
    AI_VISUAL = "ai_visual"
    AI_DOM = "ai_dom"
    FAILED = "failed"


@dataclass(frozen=True)
class ResolutionRecord:
    """
    One resolution attempt.

    Attributes:
        element_name: Logical element name
        selector_tried: The definition's primary selector
        resolved_selector: Selector that resolved, None on failure
        tier: Tier that produced the result
        duration_ms: Wall-clock time of the whole locate() call
        timestamp: ISO-8601 UTC creation time
        legacy_locator: Migration provenance of the element, if any
    """

    element_name: str
    selector_tried: str
    resolved_selector: Optional[str]
    tier: HealingTier
    duration_ms: int
    timestamp: str
    legacy_locator: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "elementName": self.element_name,
            "selectorTried": self.selector_tried,
            "resolvedSelector": self.resolved_selector,
            "tier": self.tier.value,
            "durationMs": self.duration_ms,
            "timestamp": self.timestamp,
        }
        if self.legacy_locator:
            data["legacyLocator"] = self.legacy_locator
        return data


@dataclass(frozen=True)
class HealingStatistics:
    """Aggregate view over a record sequence. Never stored, always derived."""

    total_attempts: int = 0
    primary_hits: int = 0
    cache_hits: int = 0
    fallback_hits: int = 0
    ai_visual_hits: int = 0
    ai_dom_hits: int = 0
    failures: int = 0
    average_duration_ms: int = 0
    healing_rate: int = 100

    def by_tier(self) -> Dict[str, int]:
        return {
            HealingTier.PRIMARY.value: self.primary_hits,
            HealingTier.CACHE.value: self.cache_hits,
            HealingTier.FALLBACK.value: self.fallback_hits,
            HealingTier.AI_VISUAL.value: self.ai_visual_hits,
            HealingTier.AI_DOM.value: self.ai_dom_hits,
            HealingTier.FAILED.value: self.failures,
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalAttempts": self.total_attempts,
            "primaryHits": self.primary_hits,
            "cacheHits": self.cache_hits,
            "fallbackHits": self.fallback_hits,
            "aiVisualHits": self.ai_visual_hits,
            "aiDomHits": self.ai_dom_hits,
            "failures": self.failures,
            "averageDurationMs": self.average_duration_ms,
            "healingRate": self.healing_rate,
        }


# Report labels in breakdown order
_TIER_LABELS = [
    (HealingTier.PRIMARY, "Primary Selector"),
    (HealingTier.CACHE, "Cache Hit"),
    (HealingTier.FALLBACK, "Fallback Selector"),
    (HealingTier.AI_VISUAL, "AI Visual Analysis"),
    (HealingTier.AI_DOM, "AI DOM Analysis"),
    (HealingTier.FAILED, "Failed"),
]


def _percentage(value: int, total: int) -> int:
    if total == 0:
        return 0
    return round(value / total * 100)


class HealingReporter:
    """
    Tracks and reports on self-healing activity for one browser session.

    Usage:
        >>> reporter = HealingReporter()
        >>> reporter.record("submit", "#nope", "button.submit", HealingTier.FALLBACK, 120)
        >>> reporter.statistics().fallback_hits
        1
        >>> reporter.persist("reports/healing/run.json")
    """

    def __init__(self) -> None:
        self._records: List[ResolutionRecord] = []

    def record(
        self,
        element_name: str,
        selector_tried: str,
        resolved_selector: Optional[str],
        tier: Union[HealingTier, str],
        duration_ms: float,
        legacy_locator: Optional[str] = None,
    ) -> ResolutionRecord:
        """Append one resolution record. This is an audit log, not a gate."""
        entry = ResolutionRecord(
            element_name=element_name,
            selector_tried=selector_tried,
            resolved_selector=resolved_selector,
            tier=HealingTier(tier),
            duration_ms=int(round(duration_ms)),
            timestamp=datetime.now(timezone.utc).isoformat(),
            legacy_locator=legacy_locator,
        )
        self._records.append(entry)
        return entry

    @property
    def records(self) -> List[ResolutionRecord]:
        """Copy of all records in insertion order."""
        return list(self._records)

    def records_by_tier(self, tier: Union[HealingTier, str]) -> List[ResolutionRecord]:
        wanted = HealingTier(tier)
        return [r for r in self._records if r.tier == wanted]

    def failed_records(self) -> List[ResolutionRecord]:
        return self.records_by_tier(HealingTier.FAILED)

    def statistics(self) -> HealingStatistics:
        """
        Recompute statistics from the full record list.

        With zero records the healing rate is reported as 100: no failure has
        been observed yet. This is a reporting convention, not a measurement.
        """
        total = len(self._records)
        if total == 0:
            return HealingStatistics()

        counts = {tier: 0 for tier in HealingTier}
        for r in self._records:
            counts[r.tier] += 1

        total_duration = sum(r.duration_ms for r in self._records)
        failures = counts[HealingTier.FAILED]

        return HealingStatistics(
            total_attempts=total,
            primary_hits=counts[HealingTier.PRIMARY],
            cache_hits=counts[HealingTier.CACHE],
            fallback_hits=counts[HealingTier.FALLBACK],
            ai_visual_hits=counts[HealingTier.AI_VISUAL],
            ai_dom_hits=counts[HealingTier.AI_DOM],
            failures=failures,
            average_duration_ms=round(total_duration / total),
            healing_rate=round((total - failures) / total * 100),
        )

    def report(self) -> str:
        """
        Generate a human-readable report.

        Primary-tier hits are only counted; healed and failed lookups are
        itemised since those are the selectors needing maintenance.
        """
        stats = self.statistics()
        total = stats.total_attempts
        by_tier = stats.by_tier()

        lines = [
            "=" * 40,
            "   SELF-HEALING LOCATOR REPORT",
            "=" * 40,
            "",
            "STATISTICS",
            "-" * 10,
            f"Total Lookup Attempts: {total}",
            f"Healing Success Rate:  {stats.healing_rate}%",
            f"Average Lookup Time:   {stats.average_duration_ms}ms",
            "",
            "BREAKDOWN BY METHOD",
            "-" * 19,
        ]
        for tier, label in _TIER_LABELS:
            count = by_tier[tier.value]
            lines.append(f"{label + ':':<22} {count} ({_percentage(count, total)}%)")

        healed = [
            r for r in self._records
            if r.tier not in (HealingTier.PRIMARY, HealingTier.FAILED)
        ]
        if healed:
            lines += [
                "",
                "HEALED ELEMENTS (Consider updating selectors)",
                "-" * 46,
            ]
            for r in healed:
                lines += [
                    "",
                    f"Element: {r.element_name}",
                    f"  Original: {r.selector_tried}",
                    f"  Healed:   {r.resolved_selector}",
                    f"  Method:   {r.tier.value}",
                    f"  Time:     {r.duration_ms}ms",
                ]
                if r.legacy_locator:
                    lines.append(f"  Legacy:   {r.legacy_locator}")

        failed = self.failed_records()
        if failed:
            lines += [
                "",
                "FAILED ELEMENTS (Require manual fix)",
                "-" * 37,
            ]
            for r in failed:
                lines += [
                    "",
                    f"Element: {r.element_name}",
                    f"  Selector: {r.selector_tried}",
                    f"  Time:     {r.timestamp}",
                ]

        lines += ["", "=" * 40]
        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "generatedAt": datetime.now(timezone.utc).isoformat(),
            "statistics": self.statistics().to_dict(),
            "records": [r.to_dict() for r in self._records],
        }

    def persist(self, path: Union[str, Path]) -> Path:
        """
        Save the report as JSON, creating parent directories. Overwrites.

        Returns:
            Path written
        """
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(
            json.dumps(self.to_dict(), indent=2, ensure_ascii=False),
            encoding="utf-8",
        )
        logger.info(f"Healing report saved to: {target}")
        return target

    def clear(self) -> None:
        """Drop all records (between runs that must not share history)."""
        self._records.clear()

    def __len__(self) -> int:
        return len(self._records)


__all__ = [
    "HealingReporter",
    "HealingStatistics",
    "HealingTier",
    "ResolutionRecord",
]
