"""Document compliance scoring."""

from __future__ import annotations

from .scorer import (
    CATEGORY_BY_TYPE,
    CRITICAL_TYPES,
    category_for,
    grade_for,
    issue_weight,
    leniency_factor,
    score,
)

__all__ = [
    "CATEGORY_BY_TYPE",
    "CRITICAL_TYPES",
    "category_for",
    "grade_for",
    "issue_weight",
    "leniency_factor",
    "score",
]
