"""Model-backed page review merged into the rule-based issue list.

A handful of pages is rendered and sent to the generative capability together
with their extracted text. Findings are converted into issues flagged
``ai_detected`` and appended unless a rule-based issue of the same type on the
same page already covers an overlapping region.

Augmentation is best effort: if any capability call or conversion fails the
whole pass contributes nothing and the failure is only logged.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping

from remtool.config import DEFAULT_AI_PAGE_SAMPLE, DEFAULT_DETECTION_CONFIDENCE, DEFAULT_RENDER_SCALE
from remtool.document.base import Document
from remtool.llm.capability import GenerativeCapability
from remtool.models import Issue, IssueType, Rect, Severity, rects_overlap

logger = logging.getLogger(__name__)

DEFAULT_WCAG_CRITERION = "1.3.1"
DEFAULT_AI_MESSAGE = "Accessibility issue reported by AI page review"


def select_pages(page_count: int, sample_size: int = DEFAULT_AI_PAGE_SAMPLE) -> list[int]:
    """Pick the pages to review: all of them for short documents, otherwise the
    first and last page plus evenly strided pages, sorted ascending."""
    if page_count <= 0:
        return []
    if page_count <= sample_size:
        return list(range(1, page_count + 1))

    pages = [1, page_count]
    step = page_count // 4
    for number in range(step, page_count, step):
        if number not in pages:
            pages.append(number)
    return sorted(pages[:sample_size])


def _coerce_rect(location: Any) -> Rect | None:
    if isinstance(location, Mapping):
        if "x" not in location or "y" not in location:
            return None
        return Rect.model_validate(location)
    if isinstance(location, (list, tuple)) and len(location) == 4:
        return Rect.from_sequence(location)
    return None


def _coerce_severity(value: Any) -> Severity:
    try:
        return Severity(str(value).strip().lower())
    except ValueError:
        return Severity.WARNING


def _coerce_confidence(value: Any, default: int) -> int:
    try:
        confidence = int(float(value))
    except (TypeError, ValueError):
        return default
    return max(0, min(100, confidence))


def finding_to_issue(
    finding: Mapping[str, Any],
    page_number: int,
    *,
    default_confidence: int = DEFAULT_DETECTION_CONFIDENCE,
) -> Issue:
    """Convert one raw model finding into an ``ai_detected`` issue."""
    message = str(finding.get("description") or finding.get("message") or "").strip()
    wcag = finding.get("wcag") or finding.get("wcag_criterion") or finding.get("wcagCriterion")
    recommendation = finding.get("recommendation")
    return Issue(
        type=IssueType.parse(finding.get("type")),
        severity=_coerce_severity(finding.get("severity", Severity.WARNING.value)),
        page=page_number,
        message=message or DEFAULT_AI_MESSAGE,
        bounds=_coerce_rect(finding.get("location") or finding.get("bounds")),
        wcag_criterion=str(wcag) if wcag else DEFAULT_WCAG_CRITERION,
        confidence=_coerce_confidence(finding.get("confidence"), default_confidence),
        recommendation=str(recommendation) if recommendation else None,
        ai_detected=True,
    )


def is_duplicate(candidate: Issue, existing: Iterable[Issue]) -> bool:
    return any(
        issue.page == candidate.page
        and issue.type == candidate.type
        and rects_overlap(issue.bounds, candidate.bounds)
        for issue in existing
    )


def merge_issues(existing: list[Issue], candidates: Iterable[Issue]) -> list[Issue]:
    """Return ``existing`` followed by every candidate that is not a duplicate.

    Candidates are only compared with the existing issues, not with each other.
    """
    merged = list(existing)
    for candidate in candidates:
        if is_duplicate(candidate, existing):
            logger.debug(
                "Dropping AI issue %s on page %d: overlaps an existing issue",
                candidate.type.value,
                candidate.page,
            )
            continue
        merged.append(candidate)
    return merged


class Augmentor:
    def __init__(
        self,
        capability: GenerativeCapability,
        *,
        sample_size: int = DEFAULT_AI_PAGE_SAMPLE,
        render_scale: float = DEFAULT_RENDER_SCALE,
        default_confidence: int = DEFAULT_DETECTION_CONFIDENCE,
    ) -> None:
        self.capability = capability
        self.sample_size = sample_size
        self.render_scale = render_scale
        self.default_confidence = default_confidence

    def review_pages(self, document: Document) -> list[Issue]:
        """Ask the capability about each sampled page. Failures propagate."""
        found: list[Issue] = []
        for page_number in select_pages(document.page_count, self.sample_size):
            page = document.get_page(page_number)
            image = page.render_to_image(self.render_scale)
            text = " ".join(run.text for run in page.text_runs())
            findings = self.capability.analyze_page(image, text, page_number)
            found.extend(
                finding_to_issue(f, page_number, default_confidence=self.default_confidence)
                for f in findings
            )
        return found

    def augment(self, document: Document, issues: list[Issue]) -> list[Issue]:
        try:
            candidates = self.review_pages(document)
        except Exception:
            logger.exception("AI page review failed; continuing with rule-based issues only")
            return list(issues)

        merged = merge_issues(issues, candidates)
        logger.info(
            "AI page review added %d of %d reported issues",
            len(merged) - len(issues),
            len(candidates),
        )
        return merged


def augment(
    document: Document,
    issues: list[Issue],
    capability: GenerativeCapability | None,
    **options: Any,
) -> list[Issue]:
    """Convenience wrapper; without a capability the issues come back unchanged."""
    if capability is None:
        return list(issues)
    return Augmentor(capability, **options).augment(document, issues)
