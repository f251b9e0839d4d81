"""End-to-end analysis: detect, augment, score, then hand over to a session.

Two analyzers share one interface. ``BaselineAnalyzer`` runs rule-based
detection only; ``AugmentedAnalyzer`` adds the model-backed page review. The
choice is made once, when the analyzer is built.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

from remtool.augmentation import Augmentor
from remtool.config import AnalysisConfiguration
from remtool.detection import Detector
from remtool.document.base import Document
from remtool.enhancement import SuggestionEnhancer
from remtool.llm.capability import GenerativeCapability
from remtool.models import Issue, Score, sort_for_display
from remtool.scoring import score
from remtool.session import CompletionCallback, IssueStore, RemediationSession

logger = logging.getLogger(__name__)


@dataclass
class AnalysisResult:
    issues: list[Issue]
    score: Score
    page_count: int


class Analyzer(Protocol):
    def analyse(self, document: Document) -> list[Issue]: ...


class BaselineAnalyzer:
    def __init__(self, detector: Detector | None = None) -> None:
        self.detector = detector or Detector()

    def analyse(self, document: Document) -> list[Issue]:
        return self.detector.detect(document)


class AugmentedAnalyzer:
    def __init__(self, augmentor: Augmentor, detector: Detector | None = None) -> None:
        self.detector = detector or Detector()
        self.augmentor = augmentor

    def analyse(self, document: Document) -> list[Issue]:
        issues = self.detector.detect(document)
        return self.augmentor.augment(document, issues)


def create_analyzer(
    config: AnalysisConfiguration,
    capability: GenerativeCapability | None,
) -> Analyzer:
    if capability is None:
        return BaselineAnalyzer()
    return AugmentedAnalyzer(
        Augmentor(
            capability,
            sample_size=config.ai_page_sample,
            render_scale=config.render_scale,
            default_confidence=config.detection_confidence,
        )
    )


def run_analysis(document: Document, analyzer: Analyzer | None = None) -> AnalysisResult:
    """Detect (and possibly augment) issues, then score them.

    Raises:
        DocumentLoadError: If the document cannot be read at all.
    """
    analyzer = analyzer or BaselineAnalyzer()
    issues = analyzer.analyse(document)
    page_count = document.page_count
    result = AnalysisResult(issues=issues, score=score(issues, page_count), page_count=page_count)
    logger.info(
        "Found %d issues across %d pages; score %d (%s)",
        len(issues),
        page_count,
        result.score.overall,
        result.score.grade,
    )
    return result


def start_session(
    result: AnalysisResult,
    capability: GenerativeCapability | None,
    *,
    config: AnalysisConfiguration | None = None,
    on_complete: CompletionCallback | None = None,
) -> RemediationSession:
    """Load the issues into a new session and attach suggestions."""
    config = config or AnalysisConfiguration()
    store = IssueStore()
    store.set_issues(sort_for_display(result.issues))

    SuggestionEnhancer(
        capability,
        batch_size=config.batch_size,
        default_confidence=config.default_confidence,
    ).enhance(store.issues)

    session = RemediationSession(store, on_complete=on_complete)
    # Start the cursor on the first issue.
    issues = store.issues
    if issues and issues[0].id is not None:
        session.select(issues[0].id)
    return session
