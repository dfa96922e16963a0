# src/config/components.py — v1
"""Components that issue text-generation calls.

Each name maps to an ``llm_<component>`` settings field used by the
per-component routing in llm/config.py.
"""

from __future__ import annotations

PAPER_CHAT = "paper_chat"
SPEC_EXTRACTOR = "spec_extractor"

LLM_COMPONENTS: tuple[str, ...] = (PAPER_CHAT, SPEC_EXTRACTOR)
