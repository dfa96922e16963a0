# src/cache/json_store.py — v3
"""JSON file-based cache store (default CACHE_BACKEND=json).

All entries live in a single keyed JSON file under CACHE_ROOT. The file is
loaded once at construction. Every write takes a ``filelock`` lock on
``<cache file>.lock``, re-reads the file, merges the change and atomically
replaces the file (write temp, fsync, rename), so writers in other processes
sharing the file never drop each other's keys. Readers never see a
half-written file.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path

from filelock import FileLock
from pydantic import ValidationError

from paperchat.cache.base_cache_store import BaseCacheStore
from paperchat.cache.models import CacheEntry, CacheStats

logger = logging.getLogger(__name__)

DEFAULT_CACHE_FILENAME = "extraction_cache.json"
LOCK_TIMEOUT_SECONDS = 10


class JsonCacheStore(BaseCacheStore):
    """Single-file JSON cache store."""

    def __init__(
        self, cache_root: Path | str, filename: str = DEFAULT_CACHE_FILENAME
    ) -> None:
        self._root = Path(cache_root).expanduser()
        self._root.mkdir(parents=True, exist_ok=True)
        self._path = self._root / filename
        self._lock = asyncio.Lock()
        self._file_lock = FileLock(str(self._path) + ".lock", timeout=LOCK_TIMEOUT_SECONDS)
        self._entries: dict[str, CacheEntry] = self._load()
        logger.debug("Loaded %d cache entries from %s", len(self._entries), self._path)

    @property
    def path(self) -> Path:
        return self._path

    async def get(self, key: str) -> CacheEntry | None:
        """Retrieve cache entry by key."""
        entry = self._entries.get(key)
        if entry is not None:
            return entry
        # Another process sharing the file may have written it since load.
        self._entries = self._load()
        return self._entries.get(key)

    async def put(self, key: str, entry: CacheEntry) -> None:
        """Store an entry; the file is replaced before this returns."""
        async with self._lock:
            with self._file_lock:
                current = self._load()
                current[key] = entry
                self._write_atomic(current)
            self._entries = current

    async def stats(self) -> CacheStats:
        size = self._path.stat().st_size if self._path.exists() else 0
        return CacheStats(
            backend="json",
            entry_count=len(self._entries),
            approx_size_bytes=size,
            location=str(self._path),
        )

    async def clear(self) -> None:
        """Remove all entries and delete the cache file."""
        async with self._lock:
            with self._file_lock:
                self._path.unlink(missing_ok=True)
            self._entries = {}
        logger.info("Cleared cache file %s", self._path)

    async def evict_older_than(self, max_age: timedelta) -> int:
        cutoff = datetime.now(timezone.utc) - max_age
        async with self._lock:
            with self._file_lock:
                current = self._load()
                kept = {
                    key: entry
                    for key, entry in current.items()
                    if _as_utc(entry.recorded_at) >= cutoff
                }
                evicted = len(current) - len(kept)
                if evicted:
                    self._write_atomic(kept)
            self._entries = kept
        logger.info("Evicted %d cache entries older than %s", evicted, max_age)
        return evicted

    def _load(self) -> dict[str, CacheEntry]:
        """Read the backing file. Unreadable or corrupt content reads as empty."""
        if not self._path.exists():
            return {}
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning("Cache file %s unreadable, treating as empty: %s", self._path, e)
            return {}
        if not isinstance(raw, dict):
            logger.warning("Cache file %s is not a JSON object, treating as empty", self._path)
            return {}

        entries: dict[str, CacheEntry] = {}
        for key, data in raw.items():
            try:
                entries[key] = CacheEntry.model_validate(data)
            except ValidationError as e:
                logger.warning("Dropping malformed cache entry %s: %s", key, e)
        return entries

    def _write_atomic(self, entries: dict[str, CacheEntry]) -> None:
        payload = {key: entry.model_dump(mode="json") for key, entry in entries.items()}
        fd, tmp_name = tempfile.mkstemp(
            dir=str(self._root), prefix=f".{self._path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(payload, fh, indent=2, sort_keys=True)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_name, self._path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
