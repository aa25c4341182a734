"""Tests for rsiscan.market.cache — TTL bar cache and cached fetcher."""

from unittest.mock import AsyncMock

import pytest

from rsiscan.market.cache import BarCache, CachedFetcher
from rsiscan.market.models import SHORT_TERM, LONG_TERM

from conftest import make_series


class _Clock:
    def __init__(self, now=0.0):
        self.now = now

    def __call__(self):
        return self.now


class TestBarCache:

    def test_hit_within_ttl(self):
        clock = _Clock()
        cache = BarCache(ttl_seconds=300, clock=clock)
        key = BarCache.key("tqqq", "1m", "yahoo")
        bars = make_series([1.0, 2.0])
        cache.put(key, bars)
        clock.now = 300.0
        assert cache.get(key) == bars

    def test_expired_entry_evicted_on_read(self):
        clock = _Clock()
        cache = BarCache(ttl_seconds=300, clock=clock)
        key = BarCache.key("TQQQ", "1m", "yahoo")
        cache.put(key, make_series([1.0]))
        clock.now = 300.1
        assert cache.get(key) is None
        assert len(cache) == 0

    def test_key_separates_resolution_and_source(self):
        cache = BarCache(clock=_Clock())
        cache.put(BarCache.key("A", "1m", "yahoo"), make_series([1.0]))
        assert cache.get(BarCache.key("A", "5m", "yahoo")) is None
        assert cache.get(BarCache.key("A", "1m", "finnhub")) is None
        assert cache.get(BarCache.key("a", "1m", "yahoo")) is not None

    def test_empty_series_not_cached(self):
        cache = BarCache(clock=_Clock())
        cache.put(BarCache.key("A", "1m", "yahoo"), [])
        assert len(cache) == 0

    def test_last_write_wins(self):
        cache = BarCache(clock=_Clock())
        key = BarCache.key("A", "1m", "yahoo")
        cache.put(key, make_series([1.0]))
        cache.put(key, make_series([2.0]))
        assert cache.get(key)[0].close == 2.0

    def test_negative_ttl_rejected(self):
        with pytest.raises(ValueError):
            BarCache(ttl_seconds=-1)


class TestCachedFetcher:

    @pytest.mark.asyncio
    async def test_second_call_served_from_cache(self):
        clock = _Clock()
        bars = make_series([1.0, 2.0, 3.0])
        fetch = AsyncMock(return_value=bars)
        cached = CachedFetcher(fetch, BarCache(clock=clock), "yahoo")

        assert await cached("TQQQ", SHORT_TERM) == bars
        assert await cached("TQQQ", SHORT_TERM) == bars
        assert fetch.await_count == 1

        await cached("TQQQ", LONG_TERM)
        assert fetch.await_count == 2

    @pytest.mark.asyncio
    async def test_refetch_after_ttl(self):
        clock = _Clock()
        fetch = AsyncMock(return_value=make_series([1.0]))
        cached = CachedFetcher(fetch, BarCache(ttl_seconds=60, clock=clock), "yahoo")
        await cached("A", SHORT_TERM)
        clock.now = 61.0
        await cached("A", SHORT_TERM)
        assert fetch.await_count == 2

    @pytest.mark.asyncio
    async def test_empty_results_always_refetch(self):
        fetch = AsyncMock(return_value=[])
        cached = CachedFetcher(fetch, BarCache(clock=_Clock()), "yahoo")
        await cached("A", SHORT_TERM)
        await cached("A", SHORT_TERM)
        assert fetch.await_count == 2
