"""
API schemas -- response envelopes, RFC 7807 errors and request bodies.

Response Envelope Conventions:
    - 2xx responses are ``{"data", "elapsed_ms", "warnings"}`` (+ ``page`` for lists)
    - 4xx/5xx responses use ``ProblemDetail`` (RFC 7807)
    - ``warnings`` carries non-fatal issues (e.g. a run record that could
      not be written) next to a successful payload
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class ProblemDetail(BaseModel):
    """RFC 7807 problem details.

    Error Codes:
        - ``VALIDATION_FAILED`` (400): bad rule, snapshot or query input
        - ``NOT_FOUND`` (404): unknown approval item or grant
        - ``CONFLICT`` (409): already decided, missing ids, unknown decision
        - ``PIPELINE_FAILED`` (500): a pipeline invocation aborted
        - ``INTERNAL`` (500): unexpected server error
    """

    type: str = Field(default="about:blank")
    title: str = Field(description="Short human-readable error summary")
    status: int = Field(description="HTTP status code")
    code: str = Field(default="INTERNAL", description="lifeops error code")
    detail: str = Field(default="")
    instance: str = Field(default="")
    warnings: list[str] = Field(default_factory=list)


class PageMeta(BaseModel):
    total: int
    limit: int
    offset: int
    has_more: bool


class DecisionBody(BaseModel):
    """Request body for ``POST /approvals/{id}/decision``."""

    decision: str = Field(description="approve or reject")

