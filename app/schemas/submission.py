"""Pydantic schemas for form submissions.

Wire and storage payloads use camelCase keys (``formId``, ``userAgent``,
``spamScore``); Python code uses snake_case attributes.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serializing to camelCase while accepting both spellings."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class SubmissionMetadata(CamelModel):
    """Request context captured when a submission is accepted."""

    ip: str = Field(..., description="Caller network address.")
    user_agent: str = Field(..., description="Caller User-Agent header.")
    timestamp: str = Field(..., description="Creation instant (ISO-8601, UTC).")
    spam_score: float | None = Field(
        default=None,
        description="Verifier confidence score, when the verifier reports one.",
    )


class Submission(CamelModel):
    """A stored, immutable form submission."""

    id: str = Field(..., description="Opaque unique identifier assigned on creation.")
    form_id: str = Field(..., description="Caller-supplied logical form identifier.")
    data: dict[str, Any] = Field(
        default_factory=dict,
        description="Submitted fields; stored as-is and never interpreted.",
    )
    metadata: SubmissionMetadata

    def to_record(self) -> dict[str, Any]:
        """Serialize to the JSON-ready camelCase record used by the backends."""
        return self.model_dump(by_alias=True, exclude_none=True)


class SubmitRequest(CamelModel):
    """Incoming submission payload.

    Fields are optional at the schema level so the service can report which
    one is missing with a domain error instead of a generic 422.
    """

    turnstile_token: str | None = Field(
        default=None, description="Anti-abuse token issued to the browser."
    )
    form_id: str | None = Field(default=None, description="Logical form identifier.")
    # Shape is checked by the service so a non-object body maps to a 400
    data: Any = Field(default=None, description="Form fields (a JSON object).")


class SubmitResponse(CamelModel):
    success: bool = True
    submission_id: str
    message: str = "Form submitted successfully"


class Pagination(CamelModel):
    limit: int
    offset: int


class SubmissionListResponse(CamelModel):
    success: bool = True
    form_id: str
    submissions: list[Submission]
    pagination: Pagination


class SubmissionResponse(CamelModel):
    success: bool = True
    submission: Submission
