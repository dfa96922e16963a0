# src/cache/models.py — v2
"""Cache domain models: CacheEntry, CacheStats."""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CacheEntry(BaseModel):
    """Extracted result keyed by the content hash of its input.

    Entries are never mutated in place; a second put for the same key
    replaces the entry wholesale.
    """

    model_config = ConfigDict(frozen=True)

    key: str
    value: str
    recorded_at: datetime = Field(default_factory=_utcnow)
    source_label: str = ""


class CacheStats(BaseModel):
    """Operational view of a cache store."""

    backend: str
    entry_count: int
    approx_size_bytes: int
    location: str
