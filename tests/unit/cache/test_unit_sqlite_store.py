# tests/unit/cache/test_unit_sqlite_store.py — v2
"""Tests for cache/sqlite_store.py — full functional tests (stdlib sqlite3)."""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from paperchat.cache.models import CacheEntry
from paperchat.cache.sqlite_store import SqliteCacheStore


@pytest.fixture
def store(tmp_path):
    s = SqliteCacheStore(db_path=tmp_path / "test_cache.db")
    yield s
    s.close()


class TestSqliteCacheStore:
    @pytest.mark.asyncio
    async def test_put_and_get(self, store):
        await store.put("k1", CacheEntry(key="k1", value="guide", source_label="api.yaml"))
        result = await store.get("k1")
        assert result is not None
        assert result.value == "guide"
        assert result.source_label == "api.yaml"
        assert result.recorded_at.tzinfo is not None

    @pytest.mark.asyncio
    async def test_get_missing(self, store):
        assert await store.get("nonexistent") is None

    @pytest.mark.asyncio
    async def test_upsert(self, store):
        await store.put("k1", CacheEntry(key="k1", value="old"))
        await store.put("k1", CacheEntry(key="k1", value="new"))
        assert (await store.get("k1")).value == "new"
        assert (await store.stats()).entry_count == 1

    @pytest.mark.asyncio
    async def test_concurrent_distinct_keys(self, store):
        await asyncio.gather(
            *(store.put(f"k{i}", CacheEntry(key=f"k{i}", value=str(i))) for i in range(25))
        )
        assert (await store.stats()).entry_count == 25
        assert (await store.get("k7")).value == "7"

    @pytest.mark.asyncio
    async def test_persists_across_connections(self, tmp_path):
        db = tmp_path / "c.db"
        first = SqliteCacheStore(db)
        await first.put("k1", CacheEntry(key="k1", value="v"))
        first.close()
        second = SqliteCacheStore(db)
        assert (await second.get("k1")).value == "v"
        second.close()

    @pytest.mark.asyncio
    async def test_stats(self, store, tmp_path):
        await store.put("k1", CacheEntry(key="k1", value="abc"))
        stats = await store.stats()
        assert stats.backend == "sqlite"
        assert stats.entry_count == 1
        assert stats.approx_size_bytes == len("k1") + len("abc")
        assert stats.location == str(tmp_path / "test_cache.db")

    @pytest.mark.asyncio
    async def test_clear(self, store):
        await store.put("k1", CacheEntry(key="k1", value="v"))
        await store.clear()
        assert await store.get("k1") is None
        assert (await store.stats()).entry_count == 0

    @pytest.mark.asyncio
    async def test_evict_older_than(self, store):
        old = datetime.now(timezone.utc) - timedelta(days=90)
        await store.put("old", CacheEntry(key="old", value="v", recorded_at=old))
        await store.put("new", CacheEntry(key="new", value="v"))
        assert await store.evict_older_than(timedelta(days=30)) == 1
        assert await store.get("old") is None
        assert await store.get("new") is not None

    @pytest.mark.asyncio
    async def test_corrupt_database_recreated(self, tmp_path):
        db = tmp_path / "broken.db"
        db.write_bytes(b"this is not a sqlite database" * 100)
        store = SqliteCacheStore(db)
        assert await store.get("k1") is None
        await store.put("k1", CacheEntry(key="k1", value="v"))
        assert (await store.get("k1")).value == "v"
        assert (tmp_path / "broken.db.corrupt").exists()
        store.close()

    def test_naive_timestamp_stored_as_utc(self, store):
        naive = datetime(2026, 1, 1, 12, 0, 0)
        asyncio.run(store.put("k1", CacheEntry(key="k1", value="v", recorded_at=naive)))
        entry = asyncio.run(store.get("k1"))
        assert entry.recorded_at == datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
