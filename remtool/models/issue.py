"""Pydantic model for a single detected accessibility issue.

An issue is created by a detection pass (rules or the model-backed augmentor),
receives its stable ``id`` when the session store takes ownership of the list,
is optionally enriched with a suggestion, and then moves through the
remediation lifecycle. Issues are never deleted.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .enums import IssueStatus, IssueType, Severity
from .geometry import Rect
from .remediation import RemediationValue


class Issue(BaseModel):
    """One detected defect instance.

    Core fields (set at detection time):
    - type / severity / page / message: what was found and where; page 0 means
      a document-level issue with no bounds
    - bounds: optional rectangle in page coordinates
    - wcag_criterion: advisory cross-reference, never validated
    - ai_detected: True only for augmentor-produced issues

    Detection context (optional, type dependent) feeds the suggestion prompts:
    current_text and url for links, heading_text for headings, field_type for
    form widgets, recommendation from the rule or the model.

    Suggestion fields (suggestion, confidence, ai_service, reasoning) stay None
    until the enhancer or augmentor fills them; ai_error marks a failed
    suggestion request.

    Lifecycle fields: status and final_value are owned by the remediation
    session.
    """

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    id: str | None = None
    type: IssueType
    severity: Severity
    page: int = Field(default=0, ge=0)
    message: str
    bounds: Rect | None = None
    wcag_criterion: str | None = None

    current_text: str | None = None
    url: str | None = None
    heading_text: str | None = None
    field_type: str | None = None
    recommendation: str | None = None

    suggestion: str | None = None
    confidence: int | None = Field(default=None, ge=0, le=100)
    ai_service: str | None = None
    reasoning: str | None = None
    ai_detected: bool = False
    ai_error: bool = False

    status: IssueStatus = IssueStatus.PENDING
    final_value: RemediationValue | None = None

    @field_validator("type", mode="before")
    def _parse_type(cls, value: object) -> IssueType:
        return IssueType.parse(value)

    @field_validator("message", mode="before")
    def _strip_message(cls, value: object) -> str:
        return str(value or "").strip()

    @field_validator("confidence", mode="before")
    def _coerce_confidence(cls, value: Any) -> int | None:
        if value is None:
            return None
        try:
            return int(value)
        except (TypeError, ValueError):
            raise ValueError("confidence must be an integer between 0 and 100")

    @model_validator(mode="after")
    def final_checks(self) -> "Issue":
        if not self.message:
            raise ValueError("message must not be empty")
        return self

    @property
    def sort_key(self) -> tuple[int, int]:
        """Display ordering: page ascending, then severity weight descending."""
        return (self.page, -self.severity.weight)


def sort_for_display(issues: list[Issue]) -> list[Issue]:
    """Return a new list ordered by page, then most severe first. The sort is stable."""
    return sorted(issues, key=lambda issue: issue.sort_key)
