"""Weighted compliance scoring.

Deductions are grouped by (type, severity). Each group contributes its weight
times its count, with the count capped so that one pervasive defect cannot
dominate. The total is divided by a page-count leniency factor.
"""

from __future__ import annotations

import math
from collections import Counter
from typing import Iterable

from remtool.models import (
    CategoryScores,
    Grade,
    Issue,
    IssueCategory,
    IssueType,
    Score,
    Severity,
)

MAX_SCORE = 100
GROUP_COUNT_CAP = 5
CRITICAL_MULTIPLIER = 1.5
PAGES_PER_LENIENCY_STEP = 10
MAX_LENIENCY = 2.0

SEVERITY_DEDUCTIONS: dict[Severity, float] = {
    Severity.ERROR: 5.0,
    Severity.WARNING: 2.0,
    Severity.INFO: 0.5,
}

CRITICAL_TYPES = frozenset(
    {
        IssueType.MISSING_ALT_TEXT,
        IssueType.MISSING_FORM_LABEL,
        IssueType.FORM_JAVASCRIPT_MOUSE_ONLY,
    }
)

CATEGORY_BY_TYPE: dict[IssueType, IssueCategory] = {
    IssueType.MISSING_DOCUMENT_TITLE: IssueCategory.STRUCTURAL,
    IssueType.MISSING_LANGUAGE: IssueCategory.STRUCTURAL,
    IssueType.UNTAGGED_CONTENT: IssueCategory.STRUCTURAL,
    IssueType.HEADING_HIERARCHY: IssueCategory.STRUCTURAL,
    IssueType.READING_ORDER: IssueCategory.STRUCTURAL,
    IssueType.MISSING_ALT_TEXT: IssueCategory.CONTENT,
    IssueType.GENERIC_LINK_TEXT: IssueCategory.CONTENT,
    IssueType.COLOR_CONTRAST: IssueCategory.CONTENT,
    IssueType.MISSING_FORM_LABEL: IssueCategory.FORMS,
    IssueType.FORM_JAVASCRIPT_MOUSE_ONLY: IssueCategory.FORMS,
    IssueType.FORM_JAVASCRIPT_VALIDATION: IssueCategory.FORMS,
    IssueType.FORM_JAVASCRIPT_TIMING: IssueCategory.FORMS,
    IssueType.FORM_TAB_ORDER: IssueCategory.FORMS,
    IssueType.TABLE_STRUCTURE: IssueCategory.OTHER,
    IssueType.COMPLEX_TABLE: IssueCategory.OTHER,
    IssueType.MISSING_FORM_INSTRUCTIONS: IssueCategory.OTHER,
    IssueType.AI_DETECTED: IssueCategory.OTHER,
}

GRADE_THRESHOLDS: tuple[tuple[int, Grade], ...] = (
    (90, "A"),
    (80, "B"),
    (70, "C"),
    (60, "D"),
)


def category_for(issue_type: IssueType) -> IssueCategory:
    return CATEGORY_BY_TYPE[issue_type]


def issue_weight(issue_type: IssueType, severity: Severity) -> float:
    weight = SEVERITY_DEDUCTIONS[severity]
    if issue_type in CRITICAL_TYPES:
        return weight * CRITICAL_MULTIPLIER
    return weight


def leniency_factor(page_count: int) -> float:
    """``min(pages / 10, 2)``; an empty document is treated as a single page."""
    return min(max(page_count, 1) / PAGES_PER_LENIENCY_STEP, MAX_LENIENCY)


def grade_for(overall: int) -> Grade:
    for threshold, grade in GRADE_THRESHOLDS:
        if overall >= threshold:
            return grade
    return "F"


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def total_deductions(issues: Iterable[Issue]) -> float:
    groups = Counter((issue.type, issue.severity) for issue in issues)
    return sum(
        issue_weight(issue_type, severity) * min(count, GROUP_COUNT_CAP)
        for (issue_type, severity), count in groups.items()
    )


def _score_from(issues: list[Issue], page_count: int) -> int:
    if not issues:
        return MAX_SCORE
    deductions = total_deductions(issues) / leniency_factor(page_count)
    return max(0, min(MAX_SCORE, _round_half_up(MAX_SCORE - deductions)))


def score(issues: Iterable[Issue], page_count: int) -> Score:
    """Aggregate an issue list into an overall score, grade and category breakdown.

    Pure and order independent: the result depends only on the multiset of
    (type, severity) pairs and the page count.
    """
    items = list(issues)
    overall = _score_from(items, page_count)

    by_category: dict[IssueCategory, list[Issue]] = {category: [] for category in IssueCategory}
    for issue in items:
        by_category[category_for(issue.type)].append(issue)

    return Score(
        overall=overall,
        grade=grade_for(overall),
        category_scores=CategoryScores(
            structural=_score_from(by_category[IssueCategory.STRUCTURAL], page_count),
            content=_score_from(by_category[IssueCategory.CONTENT], page_count),
            forms=_score_from(by_category[IssueCategory.FORMS], page_count),
        ),
    )
