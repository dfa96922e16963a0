# src/ingestion/controller.py — v1
"""Get-or-create ingestion of a paper into the remote blob store.

Protocol for one paper:
  1. derive the blob name from source + identifier
  2. fetch by name; found → done (no download, no upload)
  3. not found → download and validate the PDF
  4. create under the name
  5. create reports the name taken (a concurrent caller won) → fetch again

At most one remote copy exists per identifier without any distributed
lock: the store's atomic create-if-absent plus the fetch after conflict is
enough. Every step is idempotent, so an abandoned request leaves nothing
to roll back.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Literal

from paperchat.core.errors import (
    BlobAlreadyExistsError,
    BlobNotFoundError,
    PaperChatError,
    RequestValidationError,
)
from paperchat.ingestion.downloader import SourceDocumentFetcher
from paperchat.papers.identifiers import SOURCE_CONFIGS, derive_blob_name
from paperchat.papers.models import DocumentReference
from paperchat.storage.base_blob_store import BaseBlobStore
from paperchat.storage.blob_models import BlobHandle

logger = logging.getLogger(__name__)

IngestionOutcome = Literal["found", "created", "race_recovered", "failed"]


@dataclass(frozen=True)
class IngestionResult:
    """Tagged result of ensure_document."""

    outcome: IngestionOutcome
    blob_name: str
    handle: BlobHandle | None = None
    error: PaperChatError | None = None

    @property
    def ok(self) -> bool:
        return self.outcome != "failed"


class DocumentIngestionController:
    """Guarantee a single canonical remote copy per paper."""

    def __init__(self, blob_store: BaseBlobStore, fetcher: SourceDocumentFetcher) -> None:
        self._store = blob_store
        self._fetcher = fetcher

    async def ensure_document(self, reference: DocumentReference) -> IngestionResult:
        """Run the get-or-create protocol for a validated reference."""
        if not reference.is_valid:
            return IngestionResult(
                outcome="failed",
                blob_name="",
                error=RequestValidationError(
                    f"Invalid {reference.source} paper ID format: {reference.external_id}"
                ),
            )

        name = derive_blob_name(reference.source, reference.external_id)
        try:
            handle = await self._fetch_or_none(name)
            if handle is not None:
                logger.debug("Blob %s already present", name)
                return IngestionResult(outcome="found", blob_name=name, handle=handle)

            data = await self._fetcher.fetch(reference)

            handle = await self._create_or_none(name, data, _display_label(reference))
            if handle is not None:
                logger.info("Created blob %s for %s", name, reference.canonical_key)
                return IngestionResult(outcome="created", blob_name=name, handle=handle)

            logger.info("Blob %s created concurrently by another request, re-fetching", name)
            handle = await self._store.fetch(name)
            return IngestionResult(outcome="race_recovered", blob_name=name, handle=handle)
        except PaperChatError as e:
            logger.warning(
                "Ingestion of %s failed: %s", reference.canonical_key, e,
                extra={"data": {"blob_name": name, "error_type": e.error_type}},
            )
            return IngestionResult(outcome="failed", blob_name=name, error=e)

    async def _fetch_or_none(self, name: str) -> BlobHandle | None:
        try:
            return await self._store.fetch(name)
        except BlobNotFoundError:
            return None

    async def _create_or_none(self, name: str, data: bytes, label: str) -> BlobHandle | None:
        """Create the blob; None when the name was already taken."""
        try:
            return await self._store.create(name, data, display_name=label)
        except BlobAlreadyExistsError:
            return None


def _display_label(reference: DocumentReference) -> str:
    return f"{SOURCE_CONFIGS[reference.source].display_name}-{reference.external_id}.pdf"
