"""Parse free-text suggestion responses.

Providers are asked to answer with ``Suggestion:``, ``Confidence:`` and
``Reasoning:`` lines, but any of them may be missing. When there is no
``Suggestion:`` line the whole response is taken as the suggestion.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from remtool.config import DEFAULT_AI_CONFIDENCE

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")
_WHITESPACE = re.compile(r"\s+")
_QUOTES = "\"'"


@dataclass(frozen=True)
class ParsedSuggestion:
    suggestion: str
    confidence: int
    reasoning: str


_PREFIXES = ("suggestion:", "confidence:", "reasoning:")


def _split_field(line: str) -> tuple[str | None, str]:
    lowered = line.lower()
    for prefix in _PREFIXES:
        if lowered.startswith(prefix):
            return prefix[:-1], line[len(prefix):].strip()
    return None, line


def clean_suggestion(text: str) -> str:
    """Drop one wrapping quote at each end and collapse internal whitespace."""
    cleaned = text.strip()
    if cleaned[:1] in _QUOTES:
        cleaned = cleaned[1:]
    if cleaned[-1:] in _QUOTES:
        cleaned = cleaned[:-1]
    return _WHITESPACE.sub(" ", cleaned).strip()


def parse_suggestion_response(
    response: str,
    *,
    default_confidence: int = DEFAULT_AI_CONFIDENCE,
) -> ParsedSuggestion:
    suggestion = response
    confidence = default_confidence
    reasoning = ""

    for raw_line in response.splitlines():
        line = raw_line.strip()
        if not line:
            continue
        field, value = _split_field(line)
        if field == "suggestion":
            suggestion = value
        elif field == "confidence":
            match = _LEADING_INT.match(value)
            if match:
                confidence = int(match.group(1))
        elif field == "reasoning":
            reasoning = value

    return ParsedSuggestion(
        suggestion=clean_suggestion(suggestion),
        confidence=max(0, min(100, confidence)),
        reasoning=reasoning,
    )
