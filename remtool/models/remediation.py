"""Remediation ledger entries and structured remediation values."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .enums import HeaderScope, IssueType, RemediationAction


class TableHeaderValue(BaseModel):
    """Operator-supplied header structure for a table-structure issue.

    ``headers`` is the comma-separated header text as entered by the operator.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    headers: str
    scope: HeaderScope = HeaderScope.COL

    @field_validator("headers", mode="before")
    def _strip_headers(cls, value: object) -> str:
        return str(value or "").strip()

    def header_list(self) -> list[str]:
        return [part.strip() for part in self.headers.split(",") if part.strip()]


RemediationValue = Union[str, TableHeaderValue]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class RemediationRecord(BaseModel):
    """One append-only ledger entry.

    Records are frozen once created. Several records may share an ``issue_id``
    when the operator changes their mind; the issue itself holds current truth.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    issue_id: str
    issue_type: IssueType
    action: RemediationAction
    value: RemediationValue | None = None
    note: str | None = None
    timestamp: datetime = Field(default_factory=_utc_now)

    @field_validator("note", mode="before")
    def _strip_note(cls, value: object) -> str | None:
        if value is None:
            return None
        return str(value).strip() or None
