# src/cache/cache_factory.py — v3
"""Factory for cache store instantiation."""

from __future__ import annotations

from pathlib import Path

from paperchat.cache.base_cache_store import BaseCacheStore
from paperchat.config.settings import Settings

_DEFAULT_CACHE_ROOT = "~/.paperchat/cache"


def create_cache_store(settings: Settings | None = None) -> BaseCacheStore:
    """Instantiate the configured cache backend.

    Args:
        settings: Application settings. Defaults to the JSON backend.

    Returns:
        Configured BaseCacheStore implementation, already loaded.
    """
    backend = "json" if settings is None else settings.cache_backend
    cache_root = Path(_DEFAULT_CACHE_ROOT if settings is None else settings.cache_root)

    if backend == "json":
        from paperchat.cache.json_store import JsonCacheStore
        return JsonCacheStore(cache_root=cache_root)

    if backend == "sqlite":
        from paperchat.cache.sqlite_store import SqliteCacheStore
        return SqliteCacheStore(db_path=cache_root.expanduser() / "extraction_cache.db")

    raise ValueError(f"Unsupported cache backend: {backend!r}")
