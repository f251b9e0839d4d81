from __future__ import annotations

import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from remtool.config import AnalysisConfiguration
from remtool.document.base import Annotation, ImageDraw
from remtool.models import IssueStatus, IssueType
from remtool.pipeline import (
    AugmentedAnalyzer,
    BaselineAnalyzer,
    create_analyzer,
    run_analysis,
    start_session,
)
from tests.fakes import FakeCapability, FakeDocument, FakePage, rect, text_run


def _document() -> FakeDocument:
    link_page = FakePage(
        [text_run("click here", 72, 100)],
        [Annotation(subtype="Link", rect=rect(70, 98, 70, 16), url="https://example.org/report")],
    )
    image_page = FakePage(images=[ImageDraw(bounds=rect(50, 50, 200, 120))])
    return FakeDocument([link_page, image_page], title=None)


def test_create_analyzer_depends_on_capability() -> None:
    config = AnalysisConfiguration(ai_page_sample=3)

    assert isinstance(create_analyzer(config, None), BaselineAnalyzer)
    augmented = create_analyzer(config, FakeCapability())
    assert isinstance(augmented, AugmentedAnalyzer)
    assert augmented.augmentor.sample_size == 3


def test_baseline_analysis_scores_detected_issues() -> None:
    result = run_analysis(_document())

    types = sorted(issue.type.value for issue in result.issues)
    assert types == ["generic-link-text", "missing-alt-text", "missing-document-title"]
    assert result.page_count == 2
    assert 0 <= result.score.overall < 100


def test_augmented_analysis_adds_model_findings() -> None:
    capability = FakeCapability(
        findings={2: [{"type": "color-contrast", "description": "Caption contrast is too low", "severity": "warning"}]}
    )
    analyzer = create_analyzer(AnalysisConfiguration(), capability)

    result = run_analysis(_document(), analyzer)

    assert capability.analysed_pages == [1, 2]
    ai_issues = [issue for issue in result.issues if issue.ai_detected]
    assert len(ai_issues) == 1
    assert ai_issues[0].type is IssueType.COLOR_CONTRAST
    assert ai_issues[0].page == 2
    assert len(result.issues) == 4


def test_start_session_orders_issues_and_applies_rule_based_suggestions() -> None:
    result = run_analysis(_document())

    session = start_session(result, None)

    issues = session.store.issues
    assert [issue.id for issue in issues] == ["issue-0", "issue-1", "issue-2"]
    assert [issue.page for issue in issues] == [0, 1, 2]
    assert all(issue.status is IssueStatus.PENDING for issue in issues)
    link = issues[1]
    assert link.suggestion == "Visit example.org"
    assert link.ai_service == "rule-based"
    assert link.ai_error is False
    assert issues[0].suggestion is None
    assert session.store.current_issue_id == "issue-0"


def test_start_session_uses_capability_for_suggestions() -> None:
    capability = FakeCapability(lambda issue: "Suggestion: Read the annual report\nConfidence: 88")
    result = run_analysis(_document())

    session = start_session(result, capability, config=AnalysisConfiguration(batch_size=1))

    link = session.store.get_issue("issue-1")
    assert link.suggestion == "Read the annual report"
    assert link.confidence == 88
    assert link.ai_service == "fake"
    assert len(capability.prompts) == 2


def test_start_session_reports_completion() -> None:
    completed = []
    result = run_analysis(_document())
    session = start_session(result, None, on_complete=completed.append)

    session.skip_all_visible()

    assert session.is_complete
    assert len(completed) == 1
    assert completed[0].total == 3
