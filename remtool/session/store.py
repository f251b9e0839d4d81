"""Canonical issue list, selection cursor, filter and remediation ledger.

The store is owned by one remediation session and is not thread-safe. Issue
status is the source of truth for progress; the ledger is an audit trail.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable

from remtool.models import (
    Issue,
    IssueStatus,
    IssueType,
    RemediationRecord,
    Severity,
)

ALL = "all"
FORMS_GROUP = "forms"
FORM_JAVASCRIPT_GROUP = "form-javascript"


class SessionStateError(RuntimeError):
    """Raised when the store is used out of order."""


class IssueNotFoundError(KeyError):
    """Raised for an issue id that is not in the store."""


@dataclass(frozen=True)
class IssueFilter:
    """Type / status / severity filter. Each field defaults to ``all``.

    ``type`` also accepts the groups ``forms`` (all form-related types) and
    ``form-javascript`` (scripted-behaviour hazards only).
    """

    type: str = ALL
    status: str = ALL
    severity: str = ALL

    def __post_init__(self) -> None:
        valid_types = {ALL, FORMS_GROUP, FORM_JAVASCRIPT_GROUP, *IssueType.all_values()}
        if self.type not in valid_types:
            raise ValueError(f"Unknown type filter '{self.type}'")
        if self.status != ALL and self.status not in {s.value for s in IssueStatus}:
            raise ValueError(f"Unknown status filter '{self.status}'")
        if self.severity != ALL and self.severity not in Severity.all_values():
            raise ValueError(f"Unknown severity filter '{self.severity}'")

    def _type_matches(self, issue_type: IssueType) -> bool:
        if self.type == ALL:
            return True
        if self.type == FORMS_GROUP:
            return issue_type.is_form_related
        if self.type == FORM_JAVASCRIPT_GROUP:
            return issue_type.is_form_javascript
        return issue_type.value == self.type

    def matches(self, issue: Issue) -> bool:
        if not self._type_matches(issue.type):
            return False
        if self.status != ALL and issue.status.value != self.status:
            return False
        if self.severity != ALL and issue.severity.value != self.severity:
            return False
        return True


@dataclass
class IssueStatistics:
    total: int = 0
    resolved: int = 0
    pending: int = 0
    flagged: int = 0
    by_type: dict[str, int] = field(default_factory=dict)
    by_severity: dict[str, int] = field(default_factory=dict)
    completion_percentage: float = 0.0

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "resolved": self.resolved,
            "pending": self.pending,
            "flagged": self.flagged,
            "by_type": dict(self.by_type),
            "by_severity": dict(self.by_severity),
            "completion_percentage": self.completion_percentage,
        }


class IssueStore:
    def __init__(self) -> None:
        self._issues: list[Issue] = []
        self._index: dict[str, Issue] = {}
        self._remediations: list[RemediationRecord] = []
        self._issues_set = False
        self.current_issue_id: str | None = None
        self.filter = IssueFilter()

    @property
    def issues(self) -> list[Issue]:
        return list(self._issues)

    @property
    def remediations(self) -> list[RemediationRecord]:
        return list(self._remediations)

    def set_issues(self, issues: Iterable[Issue]) -> list[Issue]:
        """Take ownership of the analysis result.

        Ids ``issue-0``, ``issue-1``... follow the given order and every status
        is reset to pending. Allowed once per store.
        """
        if self._issues_set:
            raise SessionStateError("Issues have already been set for this session")
        owned: list[Issue] = []
        for index, issue in enumerate(issues):
            issue.id = f"issue-{index}"
            issue.status = IssueStatus.PENDING
            issue.final_value = None
            owned.append(issue)
        self._issues = owned
        self._index = {issue.id: issue for issue in owned if issue.id is not None}
        self._issues_set = True
        return self.issues

    def load_state(
        self,
        issues: Iterable[Issue],
        remediations: Iterable[RemediationRecord],
    ) -> None:
        """Restore a saved session with ids, statuses and ledger kept as they were."""
        if self._issues_set:
            raise SessionStateError("Issues have already been set for this session")
        self._issues = list(issues)
        missing = [issue for issue in self._issues if not issue.id]
        if missing:
            raise SessionStateError("Saved issues must all carry an id")
        self._index = {issue.id: issue for issue in self._issues if issue.id is not None}
        self._remediations = list(remediations)
        self._issues_set = True

    def get_issue(self, issue_id: str) -> Issue:
        try:
            return self._index[issue_id]
        except KeyError:
            raise IssueNotFoundError(issue_id) from None

    def set_filter(
        self,
        *,
        type: str | None = None,
        status: str | None = None,
        severity: str | None = None,
    ) -> IssueFilter:
        """Change some filter fields, keeping the others."""
        self.filter = IssueFilter(
            type=type if type is not None else self.filter.type,
            status=status if status is not None else self.filter.status,
            severity=severity if severity is not None else self.filter.severity,
        )
        return self.filter

    def filtered_issues(self, issue_filter: IssueFilter | None = None) -> list[Issue]:
        active = issue_filter or self.filter
        return [issue for issue in self._issues if active.matches(issue)]

    def set_current_issue(self, issue_id: str | None) -> None:
        if issue_id is not None:
            self.get_issue(issue_id)
        self.current_issue_id = issue_id

    @property
    def current_issue(self) -> Issue | None:
        if self.current_issue_id is None:
            return None
        return self._index.get(self.current_issue_id)

    def add_remediation(self, record: RemediationRecord) -> RemediationRecord:
        """Stamp the record with the current time and append it to the ledger."""
        stamped = record.model_copy(update={"timestamp": datetime.now(timezone.utc)})
        self._remediations.append(stamped)
        return stamped

    def remediations_for(self, issue_id: str) -> list[RemediationRecord]:
        return [record for record in self._remediations if record.issue_id == issue_id]

    def pending_issues(self) -> list[Issue]:
        return [issue for issue in self._issues if issue.status is IssueStatus.PENDING]

    def statistics(self) -> IssueStatistics:
        total = len(self._issues)
        resolved = sum(1 for issue in self._issues if issue.status.is_resolved)
        return IssueStatistics(
            total=total,
            resolved=resolved,
            pending=sum(1 for i in self._issues if i.status is IssueStatus.PENDING),
            flagged=sum(1 for i in self._issues if i.status is IssueStatus.FLAGGED),
            by_type=dict(Counter(issue.type.value for issue in self._issues)),
            by_severity=dict(Counter(issue.severity.value for issue in self._issues)),
            completion_percentage=(resolved / total * 100) if total else 0.0,
        )
