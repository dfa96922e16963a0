# src/core/errors.py — v1
"""Error taxonomy shared by ingestion, generation and the HTTP layer.

Every error a caller can observe derives from PaperChatError and carries the
HTTP status it maps to plus a ``retryable`` flag, so a deployment-level retry
layer can tell transient failures apart from validation or data errors.
"""

from __future__ import annotations


class PaperChatError(Exception):
    """Base class for all errors surfaced to callers."""

    status_code: int = 500
    retryable: bool = False
    public_message: str = "Failed to generate response"

    def __init__(self, message: str, *, details: str | None = None) -> None:
        super().__init__(message)
        self.details = details

    @property
    def error_type(self) -> str:
        return type(self).__name__


class RequestValidationError(PaperChatError):
    """Bad identifier, missing request field or malformed transcript."""

    status_code = 400

    @property
    def public_message(self) -> str:  # type: ignore[override]
        return str(self)


class UpstreamDataError(PaperChatError):
    """Downloaded source document failed format or size validation."""

    status_code = 502


class UpstreamHTTPError(PaperChatError):
    """Source host answered with a non-success status."""

    def __init__(self, message: str, *, upstream_status: int, details: str | None = None) -> None:
        super().__init__(message, details=details)
        self.upstream_status = upstream_status
        self.status_code = upstream_status if 400 <= upstream_status < 600 else 502
        self.retryable = upstream_status >= 500 or upstream_status == 429


class TransientNetworkError(PaperChatError):
    """Timeout or connection failure talking to a remote service."""

    status_code = 503
    retryable = True


class BlobStoreError(PaperChatError):
    """Remote blob store failed for a reason other than a name conflict."""

    status_code = 502


class BlobNotFoundError(BlobStoreError):
    """No blob exists under the requested name."""

    status_code = 404


class BlobAlreadyExistsError(BlobStoreError):
    """Create lost the race: another caller owns the name."""

    status_code = 409


class GenerationError(PaperChatError):
    """Text-generation backend call failed."""

    status_code = 502
    retryable = True


class ContractViolationError(PaperChatError):
    """Backend output did not satisfy the declared response schema."""

    status_code = 502

    def __init__(self, message: str, *, raw_output: str = "", details: str | None = None) -> None:
        super().__init__(message, details=details)
        self.raw_output = raw_output


class ExtractionError(PaperChatError):
    """Reference document could not be parsed in its declared format."""

    status_code = 422

    @property
    def public_message(self) -> str:  # type: ignore[override]
        return str(self)
