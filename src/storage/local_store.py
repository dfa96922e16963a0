# src/storage/local_store.py — v1
"""Local filesystem blob store (BLOB_STORE_BACKEND=local).

Each blob is ``<root>/<name>.blob``. Creation writes a temp file and
hard-links it into place; ``os.link`` fails if the target exists, which
gives the atomic create-if-absent the ingestion protocol relies on.
Handles carry ``file://`` URIs that adapters inline as bytes.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

from paperchat.core.errors import BlobAlreadyExistsError, BlobNotFoundError, BlobStoreError
from paperchat.storage.base_blob_store import BaseBlobStore
from paperchat.storage.blob_models import BlobHandle

logger = logging.getLogger(__name__)


class LocalBlobStore(BaseBlobStore):
    """Blob store on the local filesystem, for development and tests."""

    def __init__(self, root: Path | str) -> None:
        self._root = Path(root).expanduser()
        self._root.mkdir(parents=True, exist_ok=True)

    def _path(self, name: str) -> Path:
        if not name or "/" in name or "\\" in name or name.startswith("."):
            raise BlobStoreError(f"Invalid blob name: {name!r}")
        return self._root / f"{name}.blob"

    async def fetch(self, name: str) -> BlobHandle:
        path = self._path(name)
        if not path.is_file():
            raise BlobNotFoundError(f"No stored file named {name}")
        return _to_handle(name, path)

    async def create(
        self,
        name: str,
        data: bytes,
        display_name: str,
        mime_type: str = "application/pdf",
    ) -> BlobHandle:
        path = self._path(name)
        fd, tmp_name = tempfile.mkstemp(dir=str(self._root), prefix=f".{name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "wb") as fh:
                fh.write(data)
                fh.flush()
                os.fsync(fh.fileno())
            try:
                os.link(tmp_name, path)
            except FileExistsError as e:
                raise BlobAlreadyExistsError(f"File {name} already exists") from e
            except OSError as e:
                raise BlobStoreError(f"Storing file {name} failed", details=str(e)) from e
        finally:
            Path(tmp_name).unlink(missing_ok=True)
        logger.info("Stored %s (%d bytes) at %s", display_name, len(data), path)
        return _to_handle(name, path, display_name=display_name, mime_type=mime_type)


def _to_handle(
    name: str,
    path: Path,
    display_name: str = "",
    mime_type: str = "application/pdf",
) -> BlobHandle:
    return BlobHandle(
        name=name,
        uri=path.resolve().as_uri(),
        mime_type=mime_type,
        display_name=display_name or name,
        size_bytes=path.stat().st_size,
        state="ACTIVE",
    )
