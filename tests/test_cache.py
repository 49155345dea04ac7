"""
Unit tests for the MetadataCache.
"""

from __future__ import annotations

from datetime import datetime, timezone
from types import MappingProxyType

import pytest

from sheet_structure.cache import MetadataCache
from sheet_structure.schema import SheetMetadata


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def _metadata(spreadsheet_id: str = "sheet-1") -> SheetMetadata:
    return SheetMetadata(
        spreadsheet_id=spreadsheet_id,
        detected_tabs=MappingProxyType({}),
        all_tabs=(),
        warnings=(),
        detected_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock: FakeClock) -> MetadataCache:
    return MetadataCache(ttl_seconds=300, clock=clock)


# ======================================================================
# Expiry
# ======================================================================

class TestExpiry:
    def test_miss_on_empty(self, cache: MetadataCache) -> None:
        assert cache.get("sheet-1") is None
        assert "sheet-1" not in cache

    def test_hit_within_ttl(self, cache: MetadataCache, clock: FakeClock) -> None:
        meta = _metadata()
        cache.put("sheet-1", meta)
        clock.advance(299)
        assert cache.get("sheet-1") is meta
        assert "sheet-1" in cache

    def test_stale_at_ttl(self, cache: MetadataCache, clock: FakeClock) -> None:
        cache.put("sheet-1", _metadata())
        clock.advance(300)
        assert cache.get("sheet-1") is None
        assert "sheet-1" not in cache
        # stale entries stay stored until replaced
        assert len(cache) == 1

    def test_put_replaces_and_refreshes(self, cache: MetadataCache, clock: FakeClock) -> None:
        cache.put("sheet-1", _metadata())
        clock.advance(400)
        fresh = _metadata()
        cache.put("sheet-1", fresh)
        assert cache.get("sheet-1") is fresh
        assert len(cache) == 1

    def test_keys_are_independent(self, cache: MetadataCache) -> None:
        cache.put("a", _metadata("a"))
        assert cache.get("b") is None

    def test_zero_ttl_never_hits(self, clock: FakeClock) -> None:
        c = MetadataCache(ttl_seconds=0, clock=clock)
        c.put("a", _metadata("a"))
        assert c.get("a") is None

    def test_negative_ttl_rejected(self) -> None:
        with pytest.raises(ValueError):
            MetadataCache(ttl_seconds=-1)


# ======================================================================
# Invalidation
# ======================================================================

class TestInvalidate:
    def test_single(self, cache: MetadataCache) -> None:
        cache.put("a", _metadata("a"))
        cache.put("b", _metadata("b"))
        cache.invalidate("a")
        assert "a" not in cache
        assert "b" in cache

    def test_all(self, cache: MetadataCache) -> None:
        cache.put("a", _metadata("a"))
        cache.put("b", _metadata("b"))
        cache.invalidate()
        assert len(cache) == 0

    def test_unknown_id_is_noop(self, cache: MetadataCache) -> None:
        cache.invalidate("missing")
        assert len(cache) == 0
