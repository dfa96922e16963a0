# src/cache/sqlite_store.py — v2
"""SQLite-based cache store (CACHE_BACKEND=sqlite).

Uses stdlib sqlite3 — no external dependency. One row per key, written in
its own transaction, so processes sharing the database never clobber each
other's entries. Preferred when several workers share one cache.
"""

from __future__ import annotations

import logging
import sqlite3
from datetime import datetime, timedelta, timezone
from pathlib import Path

from paperchat.cache.base_cache_store import BaseCacheStore
from paperchat.cache.models import CacheEntry, CacheStats

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS cache_entries (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    recorded_at TEXT NOT NULL,
    source_label TEXT NOT NULL DEFAULT ''
);
CREATE INDEX IF NOT EXISTS idx_recorded_at ON cache_entries(recorded_at);
"""


class SqliteCacheStore(BaseCacheStore):
    """SQLite-backed cache store."""

    def __init__(self, db_path: Path | str) -> None:
        self._db_path = Path(db_path).expanduser()
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = self._open()

    def _open(self) -> sqlite3.Connection:
        try:
            return self._connect()
        except sqlite3.DatabaseError as e:
            # Corrupt file: move it aside and start empty.
            corrupt = self._db_path.with_suffix(self._db_path.suffix + ".corrupt")
            logger.warning(
                "Cache database %s unreadable (%s), moving to %s", self._db_path, e, corrupt
            )
            self._db_path.replace(corrupt)
            return self._connect()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), check_same_thread=False)
        conn.execute("PRAGMA journal_mode=WAL")
        conn.executescript(_SCHEMA)
        return conn

    async def get(self, key: str) -> CacheEntry | None:
        """Retrieve cache entry by key."""
        try:
            row = self._conn.execute(
                "SELECT key, value, recorded_at, source_label FROM cache_entries WHERE key = ?",
                (key,),
            ).fetchone()
        except sqlite3.DatabaseError as e:
            logger.warning("Cache read failed for %s: %s", key, e)
            return None
        if row is None:
            return None
        return CacheEntry(
            key=row[0],
            value=row[1],
            recorded_at=datetime.fromisoformat(row[2]),
            source_label=row[3],
        )

    async def put(self, key: str, entry: CacheEntry) -> None:
        """Store a cache entry (upsert, committed before returning)."""
        with self._conn:
            self._conn.execute(
                """INSERT OR REPLACE INTO cache_entries
                   (key, value, recorded_at, source_label)
                   VALUES (?, ?, ?, ?)""",
                (
                    key,
                    entry.value,
                    _as_utc(entry.recorded_at).isoformat(),
                    entry.source_label,
                ),
            )

    async def stats(self) -> CacheStats:
        count, size = self._conn.execute(
            "SELECT COUNT(*), COALESCE(SUM(LENGTH(key) + LENGTH(value) + LENGTH(source_label)), 0) "
            "FROM cache_entries"
        ).fetchone()
        return CacheStats(
            backend="sqlite",
            entry_count=count,
            approx_size_bytes=size,
            location=str(self._db_path),
        )

    async def clear(self) -> None:
        """Drop the database file (and WAL side files), then recreate it empty."""
        self._conn.close()
        for suffix in ("", "-wal", "-shm"):
            Path(f"{self._db_path}{suffix}").unlink(missing_ok=True)
        self._conn = self._connect()
        logger.info("Cleared cache database %s", self._db_path)

    async def evict_older_than(self, max_age: timedelta) -> int:
        cutoff = (datetime.now(timezone.utc) - max_age).isoformat()
        with self._conn:
            cursor = self._conn.execute(
                "DELETE FROM cache_entries WHERE recorded_at < ?", (cutoff,)
            )
        logger.info("Evicted %d cache entries older than %s", cursor.rowcount, max_age)
        return cursor.rowcount

    def close(self) -> None:
        """Close the database connection."""
        self._conn.close()


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
