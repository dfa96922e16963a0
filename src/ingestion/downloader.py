# src/ingestion/downloader.py — v2
"""Source document download and validation.

Downloads a paper's PDF from its preprint server, rejects anything that is
not a PDF or exceeds the size limit, and keeps validated bytes in a local
directory keyed by the paper's blob name so later requests (proxy or
ingestion) skip the network.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

import httpx

from paperchat.core.errors import TransientNetworkError, UpstreamDataError, UpstreamHTTPError
from paperchat.papers.identifiers import get_paper_urls
from paperchat.papers.models import DocumentReference

logger = logging.getLogger(__name__)

PDF_SIGNATURE = b"%PDF"
_CHUNK_SIZE = 64 * 1024


def validate_pdf_bytes(data: bytes, max_size_bytes: int) -> None:
    """Raise UpstreamDataError unless ``data`` is a PDF within the size limit."""
    if not data.startswith(PDF_SIGNATURE):
        raise UpstreamDataError("Downloaded content is not a valid PDF file")
    if len(data) > max_size_bytes:
        size_mb = len(data) / (1024 * 1024)
        raise UpstreamDataError(
            f"PDF file too large ({size_mb:.2f} MB). "
            f"Maximum size is {max_size_bytes / (1024 * 1024):.0f} MB"
        )


class SourceDocumentFetcher:
    """Fetch validated PDF bytes for a paper, downloading only when needed."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        max_size_bytes: int,
        user_agent: str = "Mozilla/5.0 (compatible; PaperChat/1.0)",
        cache_dir: Path | None = None,
    ) -> None:
        self._http = http_client
        self._max_size_bytes = max_size_bytes
        self._user_agent = user_agent
        self._cache_dir = Path(cache_dir).expanduser() if cache_dir else None
        if self._cache_dir is not None:
            self._cache_dir.mkdir(parents=True, exist_ok=True)

    async def fetch(self, reference: DocumentReference) -> bytes:
        """Return the paper's PDF bytes from the local cache or upstream.

        Raises:
            UpstreamHTTPError: Source answered with a non-success status.
            UpstreamDataError: Content is not a PDF or is too large.
            TransientNetworkError: Timeout or connection failure.
        """
        cached = self._read_cached(reference.derived_blob_name)
        if cached is not None:
            logger.debug("PDF cache hit for %s", reference.canonical_key)
            return cached

        url = get_paper_urls(reference).pdf_url
        data = await self.download(url)
        validate_pdf_bytes(data, self._max_size_bytes)
        self._write_cached(reference.derived_blob_name, data)
        logger.info(
            "Downloaded %s (%.2f MB)", reference.canonical_key, len(data) / (1024 * 1024)
        )
        return data

    async def download(self, url: str) -> bytes:
        """GET ``url``, stopping early once the size limit is exceeded."""
        headers = {"User-Agent": self._user_agent}
        try:
            async with self._http.stream(
                "GET", url, headers=headers, follow_redirects=True
            ) as resp:
                if not resp.is_success:
                    raise UpstreamHTTPError(
                        f"Failed to download PDF: {resp.status_code} {resp.reason_phrase}",
                        upstream_status=resp.status_code,
                    )
                buf = bytearray()
                async for chunk in resp.aiter_bytes(_CHUNK_SIZE):
                    buf.extend(chunk)
                    if len(buf) > self._max_size_bytes:
                        raise UpstreamDataError(
                            f"PDF file too large (over "
                            f"{self._max_size_bytes / (1024 * 1024):.0f} MB)"
                        )
        except httpx.TimeoutException as e:
            raise TransientNetworkError(f"Timed out downloading {url}", details=str(e)) from e
        except httpx.TransportError as e:
            raise TransientNetworkError(f"Could not reach {url}", details=str(e)) from e
        return bytes(buf)

    def _cache_path(self, blob_name: str) -> Path | None:
        if self._cache_dir is None or not blob_name:
            return None
        return self._cache_dir / f"{blob_name}.pdf"

    def _read_cached(self, blob_name: str) -> bytes | None:
        path = self._cache_path(blob_name)
        if path is None or not path.is_file():
            return None
        try:
            data = path.read_bytes()
        except OSError as e:
            logger.warning("Unreadable cached PDF %s: %s", path, e)
            return None
        if not data.startswith(PDF_SIGNATURE):
            logger.warning("Discarding corrupt cached PDF %s", path)
            path.unlink(missing_ok=True)
            return None
        return data

    def _write_cached(self, blob_name: str, data: bytes) -> None:
        path = self._cache_path(blob_name)
        if path is None:
            return
        tmp_name: str | None = None
        try:
            fd, tmp_name = tempfile.mkstemp(dir=str(path.parent), suffix=".tmp")
            with os.fdopen(fd, "wb") as fh:
                fh.write(data)
            os.replace(tmp_name, path)
            tmp_name = None
        except OSError as e:
            logger.warning("Could not cache PDF at %s: %s", path, e)
        finally:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)
