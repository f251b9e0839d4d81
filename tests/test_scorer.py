"""Tests for document scoring."""

from __future__ import annotations

import random
import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from remtool.models import IssueCategory, IssueType, Severity
from remtool.scoring import CATEGORY_BY_TYPE, grade_for, issue_weight, leniency_factor, score
from tests.fakes import make_issue


def test_empty_issue_list_scores_perfectly() -> None:
    result = score([], page_count=10)
    assert result.overall == 100
    assert result.grade == "A"
    assert result.category_scores.model_dump() == {"structural": 100, "content": 100, "forms": 100}


def test_ten_page_scenario() -> None:
    issues = [
        make_issue(IssueType.MISSING_ALT_TEXT, Severity.ERROR, page=2),
        make_issue(IssueType.GENERIC_LINK_TEXT, Severity.WARNING, page=3),
    ]

    result = score(issues, page_count=10)

    # 5 * 1.5 + 2 = 9.5 deducted at leniency 1; 90.5 rounds up.
    assert result.overall == 91
    assert result.grade == "A"
    assert result.category_scores.content == 91
    assert result.category_scores.structural == 100
    assert result.category_scores.forms == 100


def test_group_count_is_capped_at_five() -> None:
    five = [make_issue(IssueType.UNTAGGED_CONTENT, Severity.ERROR, page=p) for p in range(1, 6)]
    twenty = [make_issue(IssueType.UNTAGGED_CONTENT, Severity.ERROR, page=p) for p in range(1, 21)]
    assert score(five, 20).overall == score(twenty, 20).overall == 88


def test_same_type_different_severity_are_separate_groups() -> None:
    issues = [make_issue(IssueType.AI_DETECTED, Severity.ERROR, page=p) for p in range(1, 7)]
    issues += [make_issue(IssueType.AI_DETECTED, Severity.INFO, page=1)]
    # 5 * 5 (capped) + 0.5, leniency 1
    assert score(issues, 10).overall == 75


def test_leniency_factor() -> None:
    assert leniency_factor(10) == 1
    assert leniency_factor(15) == 1.5
    assert leniency_factor(200) == 2
    assert leniency_factor(5) == 0.5
    assert leniency_factor(0) == leniency_factor(1) == 0.1


def test_small_documents_are_penalised_more() -> None:
    issues = [make_issue(IssueType.GENERIC_LINK_TEXT, Severity.WARNING)]
    assert score(issues, 40).overall == 99
    assert score(issues, 1).overall == 80


def test_overall_is_clamped_at_zero() -> None:
    issues = [make_issue(t, Severity.ERROR) for t in IssueType]
    result = score(issues, page_count=1)
    assert result.overall == 0
    assert result.grade == "F"
    assert 0 <= result.category_scores.forms <= 100


def test_critical_types_weigh_more() -> None:
    assert issue_weight(IssueType.MISSING_FORM_LABEL, Severity.ERROR) == 7.5
    assert issue_weight(IssueType.FORM_JAVASCRIPT_MOUSE_ONLY, Severity.WARNING) == 3
    assert issue_weight(IssueType.UNTAGGED_CONTENT, Severity.ERROR) == 5
    assert issue_weight(IssueType.AI_DETECTED, Severity.INFO) == 0.5


def test_other_category_counts_only_toward_overall() -> None:
    issues = [make_issue(IssueType.TABLE_STRUCTURE, Severity.ERROR)]
    result = score(issues, 10)
    assert result.overall == 95
    assert result.category_scores.model_dump() == {"structural": 100, "content": 100, "forms": 100}


def test_every_issue_type_has_a_category() -> None:
    assert set(CATEGORY_BY_TYPE) == set(IssueType)
    assert CATEGORY_BY_TYPE[IssueType.FORM_TAB_ORDER] is IssueCategory.FORMS


@pytest.mark.parametrize(
    ("overall", "grade"),
    [(100, "A"), (90, "A"), (89, "B"), (80, "B"), (79, "C"), (70, "C"), (60, "D"), (59, "F"), (0, "F")],
)
def test_grade_boundaries(overall: int, grade: str) -> None:
    assert grade_for(overall) == grade


def test_score_is_independent_of_order() -> None:
    issues = [
        make_issue(IssueType.MISSING_ALT_TEXT, Severity.ERROR, page=1),
        make_issue(IssueType.MISSING_ALT_TEXT, Severity.ERROR, page=2),
        make_issue(IssueType.HEADING_HIERARCHY, Severity.WARNING, page=2),
        make_issue(IssueType.FORM_TAB_ORDER, Severity.WARNING, page=3),
        make_issue(IssueType.AI_DETECTED, Severity.INFO, page=4),
    ]
    expected = score(issues, 12)
    shuffled = list(issues)
    random.Random(7).shuffle(shuffled)
    assert score(shuffled, 12) == expected
    assert score(list(reversed(issues)), 12) == expected
