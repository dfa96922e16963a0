# src/papers/citations.py — v1
"""Rewrite inline page citations into viewer anchors.

``(page 3)`` becomes ``([page 3](#page-3))`` and ``(page 2, page 6)``
becomes ``([page 2](#page-2), [page 6](#page-6))``. Already rewritten text
no longer matches the pattern, so the rewrite is idempotent.
"""

from __future__ import annotations

import re

_PAGE_GROUP = re.compile(r"\(\s*page\s+(\d+(?:\s*,\s*page\s+\d+)*)\s*\)")
_PAGE_SEP = re.compile(r"\s*,\s*page\s+")


def _link_pages(match: re.Match[str]) -> str:
    pages = _PAGE_SEP.split(match.group(1))
    links = [f"[page {p.strip()}](#page-{p.strip()})" for p in pages]
    return f"({', '.join(links)})"


def rewrite_page_references(text: str) -> str:
    """Turn every ``(page N[, page M...])`` group into markdown anchors."""
    if not text:
        return text
    return _PAGE_GROUP.sub(_link_pages, text)
