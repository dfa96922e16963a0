# src/api/errors.py — v1
"""Exception handlers: every failure leaves as an ErrorResponse body."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError as BodyValidationError
from fastapi.responses import JSONResponse

from paperchat.api.models import ErrorResponse
from paperchat.core.errors import PaperChatError

logger = logging.getLogger(__name__)

GENERIC_FAILURE = "Failed to generate response"


def error_response(
    exc: PaperChatError,
    public_message: str | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Render a PaperChatError; ``public_message`` overrides the default text."""
    message = public_message or exc.public_message
    detail = str(exc) if str(exc) != message else exc.details
    body = ErrorResponse(error=message, details=detail, error_type=exc.error_type)
    return JSONResponse(
        status_code=exc.status_code,
        content=body.model_dump(by_alias=True, exclude_none=True),
        headers=headers,
    )


async def handle_paperchat_error(request: Request, exc: PaperChatError) -> JSONResponse:
    level = logging.WARNING if exc.status_code < 500 else logging.ERROR
    logger.log(
        level, "%s %s failed: %s", request.method, request.url.path, exc,
        extra={"data": {
            "error_type": exc.error_type,
            "status": exc.status_code,
            "retryable": exc.retryable,
        }},
    )
    return error_response(exc)


async def handle_body_validation_error(
    request: Request, exc: BodyValidationError
) -> JSONResponse:
    logger.info("Rejected request body on %s: %s", request.url.path, exc.errors())
    body = ErrorResponse(
        error="Invalid request body",
        details="; ".join(
            f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg', '')}"
            for err in exc.errors()
        ),
        error_type="RequestValidationError",
    )
    return JSONResponse(status_code=400, content=body.model_dump(by_alias=True))


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    body = ErrorResponse(
        error=GENERIC_FAILURE, details=str(exc) or None, error_type=type(exc).__name__
    )
    return JSONResponse(
        status_code=500, content=body.model_dump(by_alias=True, exclude_none=True)
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(PaperChatError, handle_paperchat_error)
    app.add_exception_handler(BodyValidationError, handle_body_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)
