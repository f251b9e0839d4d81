"""Operator actions on issues and the pending-issue cursor.

Every issue starts pending and moves to accepted, modified, skipped or
flagged. Those states can be overwritten by a later action; each action
appends one ledger record. Accept, modify and skip move the cursor on to the
next pending issue, flag leaves it where it is.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from pydantic import ValidationError

from remtool.models import (
    Issue,
    IssueStatus,
    IssueType,
    RemediationAction,
    RemediationRecord,
    RemediationValue,
    TableHeaderValue,
)

from .store import IssueStatistics, IssueStore, SessionStateError

logger = logging.getLogger(__name__)

CompletionCallback = Callable[[IssueStatistics], None]


class RemediationValidationError(ValueError):
    """Raised when an action is missing the value it needs. Nothing is changed."""


def validate_value(issue: Issue, value: Any) -> RemediationValue:
    """Normalise an operator-supplied value for ``issue`` or raise."""
    if issue.type is IssueType.TABLE_STRUCTURE:
        if isinstance(value, str):
            value = {"headers": value}
        try:
            headers = (
                value
                if isinstance(value, TableHeaderValue)
                else TableHeaderValue.model_validate(value)
            )
        except ValidationError as exc:
            raise RemediationValidationError(f"Invalid table header value: {exc}") from exc
        if not headers.header_list():
            raise RemediationValidationError("Table headers must not be empty")
        return headers

    if not isinstance(value, str):
        raise RemediationValidationError(
            f"{issue.type.value} issues need a text value, got {type(value).__name__}"
        )
    text = value.strip()
    if not text:
        raise RemediationValidationError("Please provide a value before applying")
    return text


class RemediationSession:
    def __init__(
        self,
        store: IssueStore | None = None,
        *,
        on_complete: CompletionCallback | None = None,
        auto_advance: bool = True,
    ) -> None:
        self.store = store or IssueStore()
        self.on_complete = on_complete
        self.auto_advance = auto_advance

    def _record(
        self,
        issue: Issue,
        action: RemediationAction,
        *,
        value: RemediationValue | None = None,
        note: str | None = None,
    ) -> RemediationRecord:
        if issue.id is None:
            raise SessionStateError("Issue has not been added to the store")
        issue.status = action.resulting_status
        if action in (RemediationAction.ACCEPTED, RemediationAction.MODIFIED):
            issue.final_value = value
        record = self.store.add_remediation(
            RemediationRecord(
                issue_id=issue.id,
                issue_type=issue.type,
                action=action,
                value=value,
                note=note,
            )
        )
        logger.debug("Issue %s -> %s", issue.id, issue.status.value)
        return record

    def _advance_from(self, issue: Issue) -> None:
        if not self.auto_advance:
            return
        self.store.set_current_issue(issue.id)
        self.next_pending()

    def accept(self, issue_id: str) -> RemediationRecord:
        """Apply the issue's existing suggestion as its final value."""
        issue = self.store.get_issue(issue_id)
        suggestion = (issue.suggestion or "").strip()
        if not suggestion:
            raise RemediationValidationError(f"Issue {issue_id} has no suggestion to accept")
        record = self._record(issue, RemediationAction.ACCEPTED, value=suggestion)
        self._advance_from(issue)
        return record

    def modify(self, issue_id: str, value: Any) -> RemediationRecord:
        """Apply an operator-supplied value.

        Table-structure issues take a ``TableHeaderValue`` (or an equivalent
        mapping, or the comma-separated header text); every other type takes
        non-empty text.
        """
        issue = self.store.get_issue(issue_id)
        normalised = validate_value(issue, value)
        record = self._record(issue, RemediationAction.MODIFIED, value=normalised)
        self._advance_from(issue)
        return record

    def skip(self, issue_id: str) -> RemediationRecord:
        issue = self.store.get_issue(issue_id)
        record = self._record(issue, RemediationAction.SKIPPED)
        self._advance_from(issue)
        return record

    def flag(self, issue_id: str, note: str | None = None) -> RemediationRecord:
        issue = self.store.get_issue(issue_id)
        return self._record(issue, RemediationAction.FLAGGED, note=note)

    def select(self, issue_id: str) -> Issue:
        self.store.set_current_issue(issue_id)
        return self.store.get_issue(issue_id)

    def _cursor_index(self, view: list[Issue]) -> int:
        for index, issue in enumerate(view):
            if issue.id == self.store.current_issue_id:
                return index
        return -1

    def next_pending(self) -> Issue | None:
        """Select the next pending issue after the cursor in the filtered view.

        Returns None when there is none. If no pending issue is left anywhere,
        the completion callback is invoked.
        """
        view = self.store.filtered_issues()
        for issue in view[self._cursor_index(view) + 1 :]:
            if issue.status is IssueStatus.PENDING:
                self.store.set_current_issue(issue.id)
                return issue

        if self.is_complete:
            stats = self.store.statistics()
            logger.info("All %d issues resolved or flagged", stats.total)
            if self.on_complete is not None:
                self.on_complete(stats)
        return None

    def select_previous(self) -> Issue | None:
        """Move the cursor one issue back in the filtered view."""
        view = self.store.filtered_issues()
        index = self._cursor_index(view)
        if index <= 0:
            return None
        previous = view[index - 1]
        self.store.set_current_issue(previous.id)
        return previous

    @property
    def is_complete(self) -> bool:
        return not self.store.pending_issues()

    def accept_all_suggestions(self) -> list[RemediationRecord]:
        """Accept every pending issue in the filtered view that has a suggestion."""
        targets = [
            issue
            for issue in self.store.filtered_issues()
            if issue.status is IssueStatus.PENDING and (issue.suggestion or "").strip()
        ]
        return [self.accept(issue.id) for issue in targets if issue.id is not None]

    def skip_all_visible(self) -> list[RemediationRecord]:
        """Skip every pending issue in the filtered view."""
        targets = [
            issue
            for issue in self.store.filtered_issues()
            if issue.status is IssueStatus.PENDING
        ]
        return [self.skip(issue.id) for issue in targets if issue.id is not None]
