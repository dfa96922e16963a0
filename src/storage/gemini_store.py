# src/storage/gemini_store.py — v1
"""Gemini Files API blob store (BLOB_STORE_BACKEND=gemini).

Files are created under ``files/<name>`` with a caller-chosen name, which
makes the name the dedup key across concurrent requests. The API rejects a
second upload under a taken name with HTTP 409; a lookup for a missing
file answers 403 or 404 depending on the project, and both mean absent.
"""

from __future__ import annotations

import io
import logging
import re

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from paperchat.core.errors import (
    BlobAlreadyExistsError,
    BlobNotFoundError,
    BlobStoreError,
    TransientNetworkError,
)
from paperchat.storage.base_blob_store import BaseBlobStore
from paperchat.storage.blob_models import BlobHandle

logger = logging.getLogger(__name__)

# Lowercase alphanumerics and dashes, no leading/trailing dash, at most 40 chars.
_VALID_NAME = re.compile(r"^[a-z0-9](?:[a-z0-9-]{0,38}[a-z0-9])?$")
_NOT_FOUND_CODES = (403, 404)


class GeminiFileStore(BaseBlobStore):
    """Blob store backed by the Gemini Files API."""

    def __init__(
        self,
        api_key: str = "",
        timeout_s: float = 120.0,
        client: genai.Client | None = None,
    ) -> None:
        self._api_key = api_key
        self._timeout_s = timeout_s
        self._client = client

    @property
    def client(self) -> genai.Client:
        if self._client is None:
            self._client = genai.Client(
                api_key=self._api_key,
                http_options=types.HttpOptions(timeout=int(self._timeout_s * 1000)),
            )
        return self._client

    async def fetch(self, name: str) -> BlobHandle:
        _check_name(name)
        try:
            remote = await self.client.aio.files.get(name=f"files/{name}")
        except genai_errors.ClientError as e:
            if e.code in _NOT_FOUND_CODES:
                raise BlobNotFoundError(f"No stored file named {name}") from e
            raise BlobStoreError(f"Fetching file {name} failed", details=str(e)) from e
        except genai_errors.APIError as e:
            raise BlobStoreError(f"Fetching file {name} failed", details=str(e)) from e
        except httpx.TransportError as e:
            raise TransientNetworkError(
                f"Fetching file {name} did not complete", details=str(e)
            ) from e
        return _to_handle(remote, name)

    async def create(
        self,
        name: str,
        data: bytes,
        display_name: str,
        mime_type: str = "application/pdf",
    ) -> BlobHandle:
        _check_name(name)
        config = types.UploadFileConfig(
            name=name, display_name=display_name, mime_type=mime_type,
        )
        try:
            remote = await self.client.aio.files.upload(file=io.BytesIO(data), config=config)
        except genai_errors.ClientError as e:
            if e.code == 409 or "already exists" in str(e).lower():
                raise BlobAlreadyExistsError(f"File {name} already exists") from e
            raise BlobStoreError(f"Uploading file {name} failed", details=str(e)) from e
        except genai_errors.APIError as e:
            raise BlobStoreError(f"Uploading file {name} failed", details=str(e)) from e
        except httpx.TransportError as e:
            raise TransientNetworkError(
                f"Uploading file {name} did not complete", details=str(e)
            ) from e
        logger.info("Uploaded %s (%d bytes) as files/%s", display_name, len(data), name)
        return _to_handle(remote, name)


def _check_name(name: str) -> None:
    if not _VALID_NAME.match(name):
        raise BlobStoreError(f"Invalid Gemini file name: {name!r}")


def _to_handle(remote: types.File, name: str) -> BlobHandle:
    state = getattr(remote.state, "value", remote.state) if remote.state else None
    return BlobHandle(
        name=name,
        uri=remote.uri or "",
        mime_type=remote.mime_type or "application/pdf",
        display_name=remote.display_name or "",
        size_bytes=remote.size_bytes,
        state=str(state) if state is not None else None,
    )
