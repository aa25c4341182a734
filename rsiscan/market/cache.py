"""Time-boxed memoization of fetched bar series.

One ``BarCache`` is created by the caller and handed to the scanner's
fetch wrapper; it lives as long as the caller's process.  Entries are keyed
by ``(symbol, resolution, source)`` and evicted lazily on read once older
than the TTL.  Writes are last-write-wins: two concurrent misses for the
same key both fetch and both store.
"""

import logging
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from rsiscan.market.models import Bar, Horizon

logger = logging.getLogger("rsiscan.market")

CacheKey = tuple[str, str, str]


@dataclass(frozen=True)
class CacheEntry:
    """A cached series and the clock reading at which it was fetched."""

    bars: list[Bar]
    fetched_at: float


class BarCache:
    """TTL map of bar series.

    Args:
        ttl_seconds: Validity window for an entry (default 5 minutes).
        clock: Zero-argument callable returning seconds; injectable so tests
            can advance time deterministically.
    """

    def __init__(
        self,
        ttl_seconds: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if ttl_seconds < 0:
            raise ValueError(f"ttl_seconds must be >= 0, got {ttl_seconds}")
        self._ttl = ttl_seconds
        self._clock = clock
        self._entries: dict[CacheKey, CacheEntry] = {}

    @staticmethod
    def key(symbol: str, resolution: str, source: str) -> CacheKey:
        return (symbol.upper(), resolution, source)

    def get(self, key: CacheKey) -> Optional[list[Bar]]:
        """Return the cached series, or ``None`` if absent or expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() - entry.fetched_at > self._ttl:
            del self._entries[key]
            return None
        return entry.bars

    def put(self, key: CacheKey, bars: list[Bar]) -> None:
        """Store *bars* under *key*.  Empty series are not cached."""
        if not bars:
            return
        self._entries[key] = CacheEntry(bars=list(bars), fetched_at=self._clock())

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


class CachedFetcher:
    """Scanner fetch function that consults a ``BarCache`` first.

    Args:
        fetch: ``async fetch(symbol, horizon) -> list[Bar]`` provider call.
        cache: Shared ``BarCache``.
        source: Provider name used in the cache key.
    """

    def __init__(
        self,
        fetch: Callable[[str, Horizon], Awaitable[list[Bar]]],
        cache: BarCache,
        source: str,
    ) -> None:
        self._fetch = fetch
        self._cache = cache
        self._source = source

    async def __call__(self, symbol: str, horizon: Horizon) -> list[Bar]:
        key = BarCache.key(symbol, horizon.resolution, self._source)
        cached = self._cache.get(key)
        if cached is not None:
            logger.debug("Cache hit for %s", key)
            return cached

        bars = await self._fetch(symbol, horizon)
        self._cache.put(key, bars)
        return bars
