"""
Selector cache for healed elements.

Maps an element name to the most recent non-primary selector that resolved
it. The in-memory implementation lives as long as one locator engine; other
backends (file, redis, ...) only need to implement `SelectorCache`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Dict, Optional


class SelectorCache(ABC):
    """Key-value store of healed selectors keyed by element name."""

    @abstractmethod
    def get(self, name: str) -> Optional[str]:
        ...

    @abstractmethod
    def set(self, name: str, selector: str) -> None:
        ...

    @abstractmethod
    def evict(self, name: str) -> None:
        """Remove an entry; no-op when missing."""
        ...

    @abstractmethod
    def clear(self) -> None:
        ...

    @abstractmethod
    def __len__(self) -> int:
        ...

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.get(name) is not None


class InMemorySelectorCache(SelectorCache):
    """Process-lifetime cache owned by a single SelfHealingLocator."""

    def __init__(self) -> None:
        self._entries: Dict[str, str] = {}

    def get(self, name: str) -> Optional[str]:
        return self._entries.get(name)

    def set(self, name: str, selector: str) -> None:
        self._entries[name] = selector

    def evict(self, name: str) -> None:
        self._entries.pop(name, None)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def snapshot(self) -> Dict[str, str]:
        return dict(self._entries)


__all__ = [
    "InMemorySelectorCache",
    "SelectorCache",
]
