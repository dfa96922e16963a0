# src/extraction/spec_extractor.py — v2
"""Condense structured reference documents (API descriptions) into guides.

Identical input bytes are processed at most once per cold cache: results
are stored under the SHA-256 of the raw bytes, and every later call for
the same bytes is a local lookup.
"""

from __future__ import annotations

import asyncio
import json
import logging
import sqlite3
from pathlib import PurePath
from typing import Any, Literal

import yaml

from paperchat.cache.base_cache_store import BaseCacheStore
from paperchat.cache.fingerprint import compute_content_hash
from paperchat.cache.models import CacheEntry
from paperchat.config.components import SPEC_EXTRACTOR
from paperchat.core.errors import ExtractionError, GenerationError
from paperchat.llm.base_client import BaseLLMClient
from paperchat.llm.models import Message
from paperchat.logging.context import set_component_context

logger = logging.getLogger(__name__)

SourceFormat = Literal["yaml", "json", "text"]

_FORMAT_BY_SUFFIX: dict[str, SourceFormat] = {
    ".yaml": "yaml",
    ".yml": "yaml",
    ".json": "json",
}

_SYSTEM_PROMPT = "You condense technical reference documents for another model to use."

_EXTRACTION_PROMPT = """Produce a condensed reference guide for the document below, \
under {max_tokens} tokens.

Preserve exactly:
- parameter and field names
- whether each parameter is required or optional
- enum values
- default values

Drop prose, examples and anything not needed to build a valid request.

Document ({label}):
{document}"""


def infer_format(label: str) -> SourceFormat:
    """Declared format from the label's file extension; unknown → text."""
    return _FORMAT_BY_SUFFIX.get(PurePath(label).suffix.lower(), "text")


def normalize_document(raw_bytes: bytes, source_format: SourceFormat, label: str = "") -> str:
    """Parse ``raw_bytes`` per its format and return canonical text.

    YAML and JSON become indented JSON with sorted keys; anything else is
    passed through as text.

    Raises:
        ExtractionError: YAML/JSON input that does not parse.
    """
    if source_format == "text":
        return raw_bytes.decode("utf-8", errors="replace")

    try:
        text = raw_bytes.decode("utf-8")
    except UnicodeDecodeError as e:
        raise ExtractionError(f"{label or 'document'} is not valid UTF-8") from e

    if source_format == "yaml":
        try:
            parsed = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise ExtractionError(f"Invalid YAML in {label or 'document'}", details=str(e)) from e
    else:
        try:
            parsed = json.loads(text)
        except json.JSONDecodeError as e:
            raise ExtractionError(f"Invalid JSON in {label or 'document'}", details=str(e)) from e

    return json.dumps(
        _stringify_keys(parsed), indent=2, sort_keys=True, ensure_ascii=False, default=str
    )


def _stringify_keys(value: Any) -> Any:
    """Coerce mapping keys to strings the way ``json`` would write them.

    YAML allows mixed key types in one mapping (``200:`` next to
    ``default:`` in OpenAPI responses), which ``sort_keys`` cannot order.
    """
    if isinstance(value, dict):
        return {_json_key(k): _stringify_keys(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_stringify_keys(item) for item in value]
    return value


def _json_key(key: Any) -> str:
    if isinstance(key, str):
        return key
    if key is None or isinstance(key, (bool, int, float)):
        return json.dumps(key)
    return str(key)


class SpecExtractor:
    """Cache-backed reference guide extraction."""

    def __init__(
        self,
        cache_store: BaseCacheStore,
        llm_client: BaseLLMClient,
        max_input_chars: int = 60_000,
        max_output_tokens: int = 2000,
        temperature: float = 0.2,
    ) -> None:
        self._cache = cache_store
        self._llm = llm_client
        self._max_input_chars = max_input_chars
        self._max_output_tokens = max_output_tokens
        self._temperature = temperature
        self._inflight: dict[str, asyncio.Lock] = {}

    async def extract(
        self,
        raw_bytes: bytes,
        label: str,
        source_format: SourceFormat | None = None,
    ) -> str:
        """Return the condensed guide for ``raw_bytes``.

        Args:
            raw_bytes: Exact document bytes (the cache key is their hash).
            label: Human-readable name, e.g. the uploaded file name.
            source_format: Declared format; inferred from ``label`` if None.

        Raises:
            ExtractionError: The document does not parse in its format.
            GenerationError: The generation call failed or returned nothing.
        """
        key = compute_content_hash(raw_bytes)

        entry = await self._cache.get(key)
        if entry is not None:
            logger.debug("Extraction cache hit for %s (%s)", label, key[:12])
            return entry.value

        # One generation per key within this process, even under concurrency.
        lock = self._inflight.setdefault(key, asyncio.Lock())
        try:
            async with lock:
                entry = await self._cache.get(key)
                if entry is not None:
                    return entry.value
                guide = await self._generate(raw_bytes, label, source_format)
                await self._store(key, guide, label)
                return guide
        finally:
            if not lock.locked() and self._inflight.get(key) is lock:
                self._inflight.pop(key, None)

    async def _generate(
        self, raw_bytes: bytes, label: str, source_format: SourceFormat | None
    ) -> str:
        fmt = source_format or infer_format(label)
        normalized = normalize_document(raw_bytes, fmt, label)
        if len(normalized) > self._max_input_chars:
            logger.info(
                "Truncating %s from %d to %d chars for extraction",
                label, len(normalized), self._max_input_chars,
            )
        prompt = _EXTRACTION_PROMPT.format(
            max_tokens=self._max_output_tokens,
            label=label,
            document=normalized[: self._max_input_chars],
        )

        set_component_context(SPEC_EXTRACTOR)
        try:
            response = await self._llm.complete(
                [Message(role="user", content=prompt)],
                system=_SYSTEM_PROMPT,
                max_tokens=self._max_output_tokens,
                temperature=self._temperature,
            )
        finally:
            set_component_context(None)

        guide = response.content.strip()
        if not guide:
            raise GenerationError(f"Extraction of {label} returned no content")
        logger.info(
            "Extracted guide for %s: %d → %d chars (%d ms)",
            label, len(normalized), len(guide), response.latency_ms,
        )
        return guide

    async def _store(self, key: str, guide: str, label: str) -> None:
        try:
            await self._cache.put(key, CacheEntry(key=key, value=guide, source_label=label))
        except (OSError, sqlite3.Error):
            # The guide is still correct; only the next call pays again.
            logger.exception("Could not persist extraction for %s", label)
