"""Remediation session state: issue store, operator actions and snapshots."""

from __future__ import annotations

from .persistence import SNAPSHOT_VERSION, SessionSnapshot, load_snapshot, save_snapshot
from .remediation import (
    CompletionCallback,
    RemediationSession,
    RemediationValidationError,
    validate_value,
)
from .store import (
    IssueFilter,
    IssueNotFoundError,
    IssueStatistics,
    IssueStore,
    SessionStateError,
)

__all__ = [
    "CompletionCallback",
    "IssueFilter",
    "IssueNotFoundError",
    "IssueStatistics",
    "IssueStore",
    "RemediationSession",
    "RemediationValidationError",
    "SNAPSHOT_VERSION",
    "SessionSnapshot",
    "SessionStateError",
    "load_snapshot",
    "save_snapshot",
    "validate_value",
]
