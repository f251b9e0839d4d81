"""Public model exports for the project.

Other modules and tests should import
``from remtool.models import Issue, IssueType, Severity``.
"""

from __future__ import annotations

from .enums import (
    HeaderScope,
    IssueCategory,
    IssueStatus,
    IssueType,
    RemediationAction,
    Severity,
)
from .geometry import Rect, bounding_rect, rects_overlap
from .issue import Issue, sort_for_display
from .remediation import RemediationRecord, RemediationValue, TableHeaderValue
from .score import CategoryScores, Grade, Score

__all__ = [
    "CategoryScores",
    "Grade",
    "HeaderScope",
    "Issue",
    "IssueCategory",
    "IssueStatus",
    "IssueType",
    "Rect",
    "RemediationAction",
    "RemediationRecord",
    "RemediationValue",
    "Score",
    "Severity",
    "TableHeaderValue",
    "bounding_rect",
    "rects_overlap",
    "sort_for_display",
]
