# src/storage/base_blob_store.py — v1
"""Abstract remote blob store interface.

Blobs are addressed by a deterministic name. The store must provide an
atomic create-if-absent: a create under a taken name raises
BlobAlreadyExistsError rather than overwriting.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from paperchat.storage.blob_models import BlobHandle


class BaseBlobStore(ABC):
    """Unified interface for document blob stores."""

    @abstractmethod
    async def fetch(self, name: str) -> BlobHandle:
        """Return the handle for ``name``.

        Raises:
            BlobNotFoundError: No blob under that name.
            BlobStoreError: Any other store failure.
        """

    @abstractmethod
    async def create(
        self,
        name: str,
        data: bytes,
        display_name: str,
        mime_type: str = "application/pdf",
    ) -> BlobHandle:
        """Create a blob under ``name`` if and only if it does not exist.

        Raises:
            BlobAlreadyExistsError: The name is already taken.
            BlobStoreError: Any other store failure.
        """
