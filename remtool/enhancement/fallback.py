"""Deterministic suggestions used when no generative provider can answer."""

from __future__ import annotations

from urllib.parse import urlparse

from remtool.models import Issue, IssueType

from .response_parser import ParsedSuggestion

RULE_BASED_SERVICE = "rule-based"

_RULES: dict[IssueType, ParsedSuggestion] = {
    IssueType.MISSING_ALT_TEXT: ParsedSuggestion(
        "Descriptive image of [describe main subject and purpose]",
        50,
        "Generic template - AI enhancement unavailable",
    ),
    IssueType.MISSING_FORM_LABEL: ParsedSuggestion(
        "Enter your [field purpose]", 50, "Generic template based on field type"
    ),
    IssueType.TABLE_STRUCTURE: ParsedSuggestion(
        "Add descriptive column headers", 40, "Requires manual review"
    ),
    IssueType.HEADING_HIERARCHY: ParsedSuggestion(
        "Adjust heading level to maintain proper hierarchy", 70, "Standard WCAG requirement"
    ),
}

_MANUAL_REVIEW = ParsedSuggestion(
    "Manual review required", 30, "No automated suggestion available"
)


def _link_suggestion(issue: Issue) -> ParsedSuggestion:
    hostname = urlparse(issue.url).hostname if issue.url else None
    text = f"Visit {hostname}" if hostname else "Learn more about [topic]"
    return ParsedSuggestion(text, 60, "Based on URL structure")


def rule_based_suggestion(issue: Issue) -> ParsedSuggestion:
    if issue.type is IssueType.GENERIC_LINK_TEXT:
        return _link_suggestion(issue)
    return _RULES.get(issue.type, _MANUAL_REVIEW)
