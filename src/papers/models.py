# src/papers/models.py — v1
"""Paper identity models: DocumentReference, PaperUrls, SourceConfig."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Literal

from pydantic import BaseModel, ConfigDict

PaperSource = Literal["arxiv", "medrxiv", "biorxiv"]


@dataclass(frozen=True)
class SourceConfig:
    """Static description of a preprint server."""

    name: PaperSource
    display_name: str
    base_url: str
    id_pattern: re.Pattern[str]
    pattern_description: str
    strip_suffix: str
    via_proxy: bool  # viewer must go through the PDF proxy (no CORS upstream)


class DocumentReference(BaseModel):
    """A validated (or rejected) paper identifier. Immutable once built."""

    model_config = ConfigDict(frozen=True)

    external_id: str
    source: PaperSource
    is_valid: bool
    derived_blob_name: str = ""
    category: str | None = None  # arXiv old-style category
    date: str | None = None  # medRxiv / bioRxiv posting date
    version: str | None = None

    @property
    def canonical_key(self) -> str:
        """``source:id`` form, the identity the blob name is derived from."""
        return f"{self.source}:{self.external_id}"


class PaperUrls(BaseModel):
    """Where a paper lives upstream and how a viewer reaches it."""

    pdf_url: str
    abstract_url: str
    viewer_url: str
    file_name: str
