# src/chat/contract.py — v1
"""Structured response shape enforced on the generation backend.

The same pydantic class is handed to the backend as its response schema
and used to parse what comes back. Output that does not parse is a
contract violation: it is logged with the raw text and surfaced as an
error, never patched into a placeholder response.
"""

from __future__ import annotations

import logging
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from paperchat.core.errors import ContractViolationError
from paperchat.papers.citations import rewrite_page_references

logger = logging.getLogger(__name__)

ResponseKind = Literal["welcome", "answer", "clarification", "error"]


class FollowUp(BaseModel):
    """A suggested next question."""

    text: str = Field(description="The suggested question text")
    description: str | None = Field(
        default=None, description="What this question explores"
    )


class StructuredResponse(BaseModel):
    """Assistant reply: markdown body, kind, suggested follow-ups."""

    model_config = ConfigDict(populate_by_name=True)

    main_text: str = Field(
        alias="mainText", description="Main response content in markdown format"
    )
    kind: ResponseKind = Field(description="Type of response for UI handling")
    follow_ups: list[FollowUp] = Field(
        default_factory=list,
        alias="followUps",
        description="Context-aware suggested questions for the current conversation",
    )


def parse_structured_response(raw: str | None) -> StructuredResponse:
    """Parse backend output into a StructuredResponse.

    Raises:
        ContractViolationError: Output is empty or does not match the shape.
    """
    text = (raw or "").strip()
    if not text:
        logger.error("Generation backend returned empty output")
        raise ContractViolationError("Empty response from generation backend")

    try:
        response = StructuredResponse.model_validate_json(text)
    except ValidationError as e:
        logger.error(
            "Generation output violates the response schema",
            extra={"data": {"raw_output": text, "errors": e.errors(include_url=False)}},
        )
        raise ContractViolationError(
            "Invalid structured response from generation backend",
            raw_output=text,
            details=str(e),
        ) from e

    if not response.main_text.strip():
        logger.error(
            "Generation output has empty mainText",
            extra={"data": {"raw_output": text}},
        )
        raise ContractViolationError(
            "Structured response has empty mainText", raw_output=text
        )
    return response


def apply_citation_rewrite(response: StructuredResponse) -> StructuredResponse:
    """Rewrite page citations in every text field."""
    return response.model_copy(
        update={
            "main_text": rewrite_page_references(response.main_text),
            "follow_ups": [
                FollowUp(
                    text=rewrite_page_references(f.text),
                    description=(
                        rewrite_page_references(f.description)
                        if f.description is not None
                        else None
                    ),
                )
                for f in response.follow_ups
            ],
        }
    )
