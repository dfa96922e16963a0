# src/cache/fingerprint.py — v3
"""Content hashing for the extraction cache.

The cache is content-addressable: a key is the SHA-256 of the exact input
bytes, so byte-identical inputs always resolve to the same entry.
"""

from __future__ import annotations

import hashlib


def compute_content_hash(raw_bytes: bytes) -> str:
    """SHA-256 hex digest of raw bytes (64 lowercase hex chars)."""
    return hashlib.sha256(raw_bytes).hexdigest()
