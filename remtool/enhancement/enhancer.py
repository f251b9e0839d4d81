"""Suggestion enhancement for issues that benefit from generated content.

Eligible issues are split into fixed-size batches. Batches run one after the
other; the requests inside a batch run concurrently on a thread pool. Each
request produces a ``SuggestionResult`` and the results are written back onto
the issues only after the whole batch has finished, in batch order.

A failed request never affects its neighbours: the issue gets ``ai_error`` set
and a rule-based suggestion instead.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, Iterable, Iterator, Sequence

from remtool.config import DEFAULT_AI_CONFIDENCE, DEFAULT_BATCH_SIZE
from remtool.llm.capability import GenerativeCapability
from remtool.models import Issue, IssueType
from remtool.prompt.render_prompt import render_suggestion_prompt

from .fallback import RULE_BASED_SERVICE, rule_based_suggestion
from .response_parser import ParsedSuggestion, parse_suggestion_response

logger = logging.getLogger(__name__)

ENHANCEABLE_TYPES: frozenset[IssueType] = frozenset(
    {
        IssueType.MISSING_ALT_TEXT,
        IssueType.COMPLEX_TABLE,
        IssueType.GENERIC_LINK_TEXT,
    }
)

ProgressCallback = Callable[[int, int], None]


@dataclass
class SuggestionResult:
    """Outcome of one suggestion request.

    Attributes:
        issue: The issue the request was made for
        parsed: Suggestion, confidence and reasoning to write back
        service: Provider name, or ``rule-based``
        error: True when the request failed and ``parsed`` is the fallback
    """

    issue: Issue
    parsed: ParsedSuggestion
    service: str
    error: bool = False


def iter_batches(issues: Sequence[Issue], batch_size: int) -> Iterator[list[Issue]]:
    """Yield consecutive chunks of at most ``batch_size`` issues."""
    if batch_size < 1:
        raise ValueError("batch_size must be at least 1")
    for start in range(0, len(issues), batch_size):
        yield list(issues[start : start + batch_size])


def apply_result(result: SuggestionResult) -> None:
    issue = result.issue
    issue.suggestion = result.parsed.suggestion
    issue.confidence = result.parsed.confidence
    issue.reasoning = result.parsed.reasoning
    issue.ai_service = result.service
    issue.ai_error = result.error


def _fallback_result(issue: Issue, *, error: bool) -> SuggestionResult:
    return SuggestionResult(
        issue=issue,
        parsed=rule_based_suggestion(issue),
        service=RULE_BASED_SERVICE,
        error=error,
    )


class SuggestionEnhancer:
    def __init__(
        self,
        capability: GenerativeCapability | None,
        *,
        batch_size: int = DEFAULT_BATCH_SIZE,
        default_confidence: int = DEFAULT_AI_CONFIDENCE,
        eligible_types: Iterable[IssueType] = ENHANCEABLE_TYPES,
        on_progress: ProgressCallback | None = None,
    ) -> None:
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        self.capability = capability
        self.batch_size = batch_size
        self.default_confidence = default_confidence
        self.eligible_types = frozenset(eligible_types)
        self.on_progress = on_progress

    def request_one(self, issue: Issue) -> SuggestionResult:
        """Request a suggestion for one issue. Never raises."""
        if self.capability is None:
            return _fallback_result(issue, error=False)
        try:
            prompt = render_suggestion_prompt(issue)
            service, response = self.capability.request(prompt, issue)
            parsed = parse_suggestion_response(
                response, default_confidence=self.default_confidence
            )
            if not parsed.suggestion:
                raise ValueError("Provider returned an empty suggestion")
        except Exception as exc:
            logger.warning(
                "Suggestion request failed for %s (%s): %s",
                issue.id,
                issue.type.value,
                exc,
            )
            return _fallback_result(issue, error=True)
        return SuggestionResult(issue=issue, parsed=parsed, service=service)

    def run_batch(self, batch: Sequence[Issue]) -> list[SuggestionResult]:
        """Fan out one batch and return its results in batch order."""
        if self.capability is None:
            return [self.request_one(issue) for issue in batch]
        with ThreadPoolExecutor(max_workers=len(batch)) as executor:
            return list(executor.map(self.request_one, batch))

    def enhance(self, issues: Sequence[Issue]) -> list[SuggestionResult]:
        """Enhance every eligible issue in place and return the applied results."""
        targets = [issue for issue in issues if issue.type in self.eligible_types]
        if not targets:
            return []

        if self.capability is None:
            logger.info(
                "No generative capability; applying rule-based suggestions to %d issues",
                len(targets),
            )
        else:
            logger.info(
                "Generating suggestions for %d issues with %s",
                len(targets),
                self.capability.name,
            )

        applied: list[SuggestionResult] = []
        for batch in iter_batches(targets, self.batch_size):
            results = self.run_batch(batch)
            for result in results:
                apply_result(result)
            applied.extend(results)
            if self.on_progress is not None:
                self.on_progress(len(applied), len(targets))

        failures = sum(1 for result in applied if result.error)
        if failures:
            logger.warning("%d of %d suggestion requests failed", failures, len(applied))
        return applied


def enhance(
    issues: Sequence[Issue],
    capability: GenerativeCapability | None,
    *,
    batch_size: int = DEFAULT_BATCH_SIZE,
) -> list[SuggestionResult]:
    return SuggestionEnhancer(capability, batch_size=batch_size).enhance(issues)
