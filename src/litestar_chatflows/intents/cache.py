"""Bounded least-recently-used cache with optional expiry."""

from __future__ import annotations

import time
from collections import OrderedDict
from collections.abc import Callable, Hashable
from typing import Generic, TypeVar

__all__ = ["LRUCache"]

V = TypeVar("V")


class LRUCache(Generic[V]):
    """Bounded mapping that evicts the least recently used entry.

    Args:
        max_size: Maximum number of entries, at least 1.
        ttl: Seconds an entry stays valid, ``None`` for no expiry.
        clock: Monotonic time source, replaceable in tests.

    Example:
        >>> cache = LRUCache[str](max_size=2)
        >>> cache.set("a", "1")
        >>> cache.set("b", "2")
        >>> cache.get("a")
        '1'
        >>> cache.set("c", "3")  # evicts "b"
        >>> cache.get("b") is None
        True
    """

    def __init__(self, max_size: int, ttl: float | None = None, clock: Callable[[], float] = time.monotonic) -> None:
        if max_size < 1:
            msg = "max_size must be at least 1"
            raise ValueError(msg)
        self.max_size = max_size
        self.ttl = ttl
        self._clock = clock
        self._entries: OrderedDict[Hashable, tuple[float, V]] = OrderedDict()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: Hashable) -> bool:
        return self.get(key) is not None

    def get(self, key: Hashable) -> V | None:
        """Return the cached value and mark it as recently used."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        stored_at, value = entry
        if self.ttl is not None and self._clock() - stored_at > self.ttl:
            del self._entries[key]
            return None
        self._entries.move_to_end(key)
        return value

    def set(self, key: Hashable, value: V) -> None:
        """Store a value, evicting the least recently used entry when full."""
        self._entries[key] = (self._clock(), value)
        self._entries.move_to_end(key)
        while len(self._entries) > self.max_size:
            self._entries.popitem(last=False)

    def clear(self) -> None:
        self._entries.clear()
