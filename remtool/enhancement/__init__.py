"""Suggestion generation for detected issues."""

from __future__ import annotations

from .enhancer import (
    ENHANCEABLE_TYPES,
    SuggestionEnhancer,
    SuggestionResult,
    enhance,
    iter_batches,
)
from .fallback import RULE_BASED_SERVICE, rule_based_suggestion
from .response_parser import ParsedSuggestion, clean_suggestion, parse_suggestion_response

__all__ = [
    "ENHANCEABLE_TYPES",
    "ParsedSuggestion",
    "RULE_BASED_SERVICE",
    "SuggestionEnhancer",
    "SuggestionResult",
    "clean_suggestion",
    "enhance",
    "iter_batches",
    "parse_suggestion_response",
    "rule_based_suggestion",
]
