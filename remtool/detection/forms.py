"""Form checks: field labels, instructions, tab order and scripted behaviour."""

from __future__ import annotations

from typing import Mapping, Sequence

from remtool.document.base import Annotation
from remtool.models import Issue, IssueType, Severity

WIDGET_SUBTYPE = "Widget"

# Field types that are hard to use without supplementary instructions.
INSTRUCTION_FIELD_TYPES = frozenset({"combobox", "listbox", "radiobutton"})

MOUSE_EVENTS = frozenset({"mouse_down", "mouse_up"})
KEY_EVENTS = frozenset({"key_down", "key_up", "keystroke"})

VALIDATION_MARKERS = ("alert", "error", "invalid")
SUBMIT_MARKERS = ("submit",)
TIMER_MARKERS = ("settimeout", "setinterval")


def _contains_any(script: str | None, markers: Sequence[str]) -> bool:
    if not script:
        return False
    lowered = script.lower()
    return any(marker in lowered for marker in markers)


def has_validation_code(script: str | None) -> bool:
    return _contains_any(script, VALIDATION_MARKERS)


def has_auto_submit(actions: Mapping[str, str]) -> bool:
    return any(_contains_any(script, SUBMIT_MARKERS) for script in actions.values())


def has_time_limit(actions: Mapping[str, str]) -> bool:
    return any(_contains_any(script, TIMER_MARKERS) for script in actions.values())


def is_mouse_only(actions: Mapping[str, str]) -> bool:
    bound = {event for event, script in actions.items() if script}
    return bool(bound & MOUSE_EVENTS) and not bound & KEY_EVENTS


def check_field(field: Annotation, page_number: int) -> list[Issue]:
    """Label, instruction and tab-order checks for a single widget."""
    issues: list[Issue] = []
    if not (field.field_name or "").strip():
        issues.append(
            Issue(
                type=IssueType.MISSING_FORM_LABEL,
                severity=Severity.ERROR,
                page=page_number,
                message="Form field missing accessible label",
                bounds=field.rect,
                field_type=field.field_type,
                wcag_criterion="3.3.2",
                recommendation="Add a descriptive label to this form field",
            )
        )

    if (
        not (field.alternative_text or "").strip()
        and (field.field_type or "").lower() in INSTRUCTION_FIELD_TYPES
    ):
        issues.append(
            Issue(
                type=IssueType.MISSING_FORM_INSTRUCTIONS,
                severity=Severity.WARNING,
                page=page_number,
                message="Complex form field missing instructions",
                bounds=field.rect,
                field_type=field.field_type,
                wcag_criterion="3.3.2",
            )
        )

    if field.tab_order is None or field.tab_order < 0:
        issues.append(
            Issue(
                type=IssueType.FORM_TAB_ORDER,
                severity=Severity.WARNING,
                page=page_number,
                message="Form field not in tab order",
                bounds=field.rect,
                field_type=field.field_type,
                wcag_criterion="2.1.1",
            )
        )
    return issues


def check_field_scripts(field: Annotation, page_number: int) -> list[Issue]:
    """Scripted-behaviour hazards bound to a widget's actions."""
    actions = field.actions
    if not actions:
        return []

    issues: list[Issue] = []
    if is_mouse_only(actions):
        issues.append(
            Issue(
                type=IssueType.FORM_JAVASCRIPT_MOUSE_ONLY,
                severity=Severity.ERROR,
                page=page_number,
                message="Form uses mouse-only JavaScript events",
                bounds=field.rect,
                field_type=field.field_type,
                wcag_criterion="2.1.1",
                recommendation=(
                    "Add keyboard event handlers (onKeyDown/onKeyUp) to match mouse events"
                ),
            )
        )

    if has_validation_code(actions.get("blur")):
        issues.append(
            Issue(
                type=IssueType.FORM_JAVASCRIPT_VALIDATION,
                severity=Severity.WARNING,
                page=page_number,
                message="Form validation may interfere with assistive technology",
                bounds=field.rect,
                field_type=field.field_type,
                wcag_criterion="3.3.1",
                recommendation="Ensure validation messages are announced to screen readers",
            )
        )

    if has_auto_submit(actions) or has_time_limit(actions):
        issues.append(
            Issue(
                type=IssueType.FORM_JAVASCRIPT_TIMING,
                severity=Severity.ERROR,
                page=page_number,
                message="Form has automatic submission or time limits",
                bounds=field.rect,
                field_type=field.field_type,
                wcag_criterion="2.2.1",
                recommendation="Remove auto-submit or provide user control over timing",
            )
        )
    return issues


def analyse_page_forms(annotations: Sequence[Annotation], page_number: int) -> list[Issue]:
    issues: list[Issue] = []
    for annotation in annotations:
        if annotation.subtype != WIDGET_SUBTYPE:
            continue
        issues.extend(check_field(annotation, page_number))
        issues.extend(check_field_scripts(annotation, page_number))
    return issues
