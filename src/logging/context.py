# src/logging/context.py — v2
"""Contextual logging support — attach request_id, document_id, component to log records."""

from __future__ import annotations

import contextvars
import uuid
from dataclasses import dataclass
from typing import Any

# Context variables for structured logging — set per request.
_request_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "request_id", default=None
)
_document_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "document_id", default=None
)
_component: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "component", default=None
)


@dataclass
class LogContext:
    """Immutable snapshot of current logging context."""

    request_id: str | None = None
    document_id: str | None = None
    component: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(
        request_id=_request_id.get(),
        document_id=_document_id.get(),
        component=_component.get(),
    )


def new_request_id() -> str:
    """Short random identifier for correlating one request's log lines."""
    return uuid.uuid4().hex[:12]


def set_request_context(request_id: str, document_id: str | None = None) -> None:
    """Set request-level context (called once per incoming request)."""
    _request_id.set(request_id)
    _document_id.set(document_id)


def set_document_context(document_id: str) -> None:
    """Attach the blob name or paper id once the request identifies it."""
    _document_id.set(document_id)


def set_component_context(component: str | None) -> None:
    """Set component-level context (paper_chat, spec_extractor, ...)."""
    _component.set(component)


def clear_context() -> None:
    """Reset all context variables."""
    _request_id.set(None)
    _document_id.set(None)
    _component.set(None)
