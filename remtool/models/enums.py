"""Enumerations shared by the detection, scoring and remediation modules.

Values are the kebab-case identifiers used in serialised sessions and in the
prompts sent to generative providers, so they must stay stable.
"""

from __future__ import annotations

from enum import Enum


class Severity(str, Enum):
    """How serious a detected defect is."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"

    @property
    def weight(self) -> int:
        """Ordinal weight used for display ordering (error sorts first)."""
        return _SEVERITY_ORDINAL[self]

    @classmethod
    def all_values(cls) -> list[str]:
        return [m.value for m in cls]


_SEVERITY_ORDINAL = {
    Severity.ERROR: 3,
    Severity.WARNING: 2,
    Severity.INFO: 1,
}


class IssueType(str, Enum):
    """The fixed catalogue of accessibility defects.

    ``AI_DETECTED`` is the catch-all for model-reported defects whose type does
    not match any catalogue entry.
    """

    MISSING_ALT_TEXT = "missing-alt-text"
    GENERIC_LINK_TEXT = "generic-link-text"
    MISSING_FORM_LABEL = "missing-form-label"
    HEADING_HIERARCHY = "heading-hierarchy"
    TABLE_STRUCTURE = "table-structure"
    COMPLEX_TABLE = "complex-table"
    UNTAGGED_CONTENT = "untagged-content"
    READING_ORDER = "reading-order"
    COLOR_CONTRAST = "color-contrast"
    MISSING_DOCUMENT_TITLE = "missing-document-title"
    MISSING_LANGUAGE = "missing-language"
    FORM_JAVASCRIPT_MOUSE_ONLY = "form-javascript-mouse-only"
    FORM_JAVASCRIPT_VALIDATION = "form-javascript-validation"
    FORM_JAVASCRIPT_TIMING = "form-javascript-timing"
    FORM_TAB_ORDER = "form-tab-order"
    MISSING_FORM_INSTRUCTIONS = "missing-form-instructions"
    AI_DETECTED = "ai-detected-issue"

    @classmethod
    def parse(cls, value: object) -> "IssueType":
        """Coerce a free-form type string, mapping unknown values to ``AI_DETECTED``."""
        if isinstance(value, IssueType):
            return value
        text = str(value or "").strip().lower()
        try:
            return cls(text)
        except ValueError:
            return cls.AI_DETECTED

    @property
    def is_form_related(self) -> bool:
        return self in _FORM_TYPES

    @property
    def is_form_javascript(self) -> bool:
        return self in _FORM_JAVASCRIPT_TYPES

    @classmethod
    def all_values(cls) -> list[str]:
        return [m.value for m in cls]


_FORM_JAVASCRIPT_TYPES = frozenset(
    {
        IssueType.FORM_JAVASCRIPT_MOUSE_ONLY,
        IssueType.FORM_JAVASCRIPT_VALIDATION,
        IssueType.FORM_JAVASCRIPT_TIMING,
    }
)

_FORM_TYPES = _FORM_JAVASCRIPT_TYPES | {
    IssueType.MISSING_FORM_LABEL,
    IssueType.FORM_TAB_ORDER,
    IssueType.MISSING_FORM_INSTRUCTIONS,
}


class IssueCategory(str, Enum):
    """Score breakdown buckets. ``OTHER`` counts toward the overall score only."""

    STRUCTURAL = "structural"
    CONTENT = "content"
    FORMS = "forms"
    OTHER = "other"


class IssueStatus(str, Enum):
    """Remediation lifecycle states.

    PENDING is the only non-terminal state; the rest can still be overwritten by
    a later operator action.
    """

    PENDING = "pending"
    ACCEPTED = "accepted"
    MODIFIED = "modified"
    SKIPPED = "skipped"
    FLAGGED = "flagged"

    @property
    def is_resolved(self) -> bool:
        return self in (IssueStatus.ACCEPTED, IssueStatus.MODIFIED, IssueStatus.SKIPPED)


class RemediationAction(str, Enum):
    """Operator actions recorded in the remediation ledger."""

    ACCEPTED = "accepted"
    MODIFIED = "modified"
    SKIPPED = "skipped"
    FLAGGED = "flagged"

    @property
    def resulting_status(self) -> IssueStatus:
        return IssueStatus(self.value)


class HeaderScope(str, Enum):
    """Scope of table headers supplied when modifying a table-structure issue."""

    COL = "col"
    ROW = "row"
    BOTH = "both"
