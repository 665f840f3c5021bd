"""In-memory TTL cache for candle series.

Keyed by (symbol, interval, limit). Entries are valid while
``now - fetched_at < ttl``. Expired entries are dropped when read, and a
sweep removing every expired entry runs once the map grows past
``max_size``. Concurrent writers to the same key: last write wins.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable

from core.models.kline import Candle

logger = logging.getLogger(__name__)

# (symbol, interval, limit)
CacheKey = tuple[str, str, int]

DEFAULT_TTL = 60.0
DEFAULT_MAX_SIZE = 500


@dataclass(frozen=True)
class CacheEntry:
    data: list[Candle]
    fetched_at: float


class KlineCache:
    """TTL cache for candle series shared by the analyzer and scanners."""

    def __init__(
        self,
        ttl: float = DEFAULT_TTL,
        max_size: int = DEFAULT_MAX_SIZE,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl = ttl
        self.max_size = max_size
        self._clock = clock
        self._entries: dict[CacheKey, CacheEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def _is_fresh(self, entry: CacheEntry, now: float) -> bool:
        return now - entry.fetched_at < self.ttl

    def get(self, key: CacheKey) -> list[Candle] | None:
        """Return a copy of the cached candles, or None when missing or expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if not self._is_fresh(entry, self._clock()):
            del self._entries[key]
            return None
        return list(entry.data)

    def set(self, key: CacheKey, data: list[Candle]) -> None:
        """Store candles stamped with the current clock time."""
        self._entries[key] = CacheEntry(data=list(data), fetched_at=self._clock())
        if len(self._entries) > self.max_size:
            self.sweep()

    def sweep(self) -> int:
        """Remove expired entries.

        Returns:
            Number of entries removed
        """
        now = self._clock()
        expired = [k for k, e in self._entries.items() if not self._is_fresh(e, now)]
        for key in expired:
            del self._entries[key]

        if expired:
            logger.debug(f"Swept {len(expired)} expired kline entries, {len(self._entries)} left")
        return len(expired)

    def clear(self) -> None:
        self._entries.clear()
