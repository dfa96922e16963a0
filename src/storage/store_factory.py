# src/storage/store_factory.py — v1
"""Factory: instantiate the blob store from configuration."""

from __future__ import annotations

from paperchat.config.settings import ConfigurationError, Settings
from paperchat.storage.base_blob_store import BaseBlobStore


def create_blob_store(settings: Settings) -> BaseBlobStore:
    """Create the blob store selected by BLOB_STORE_BACKEND.

    Raises:
        ConfigurationError: If the gemini backend is selected without an API key.
        ValueError: If the backend is not supported.
    """
    if settings.blob_store_backend == "gemini":
        from paperchat.storage.gemini_store import GeminiFileStore
        if not settings.google_api_key:
            raise ConfigurationError(
                "GEMINI_API_KEY must be set when BLOB_STORE_BACKEND=gemini"
            )
        return GeminiFileStore(
            api_key=settings.google_api_key, timeout_s=settings.llm_timeout_s,
        )

    if settings.blob_store_backend == "local":
        from paperchat.storage.local_store import LocalBlobStore
        return LocalBlobStore(root=settings.blob_store_root)

    raise ValueError(f"Unsupported blob store backend: {settings.blob_store_backend!r}")
