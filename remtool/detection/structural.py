"""Structural checks: document metadata, tagging, headings and tables."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import Sequence

from remtool.document.base import ContentTrace, DocumentMetadata, TextRun
from remtool.models import Issue, IssueType, Rect, Severity, bounding_rect

# Runs larger than this are treated as heading text.
HEADING_MIN_FONT_SIZE = 14.0
# Heading runs closer than this vertically are joined into one heading.
HEADING_LINE_TOLERANCE = 5.0
# Column positions within this distance are considered aligned.
COLUMN_TOLERANCE = 10


@dataclass
class Heading:
    text: str
    level: int
    y: float


@dataclass(frozen=True)
class DetectedTable:
    """A run of text rows sharing one column layout.

    ``has_headers`` is always False: header presence is never verified, only
    the structural pattern is detected.
    """

    bounds: Rect | None
    row_count: int
    has_headers: bool = False


def check_document_metadata(metadata: DocumentMetadata) -> list[Issue]:
    """Document-level title and language checks (page 0)."""
    issues: list[Issue] = []
    if not (metadata.title or "").strip():
        issues.append(
            Issue(
                type=IssueType.MISSING_DOCUMENT_TITLE,
                severity=Severity.ERROR,
                page=0,
                message="Document lacks a descriptive title",
                wcag_criterion="2.4.2",
            )
        )
    if not (metadata.language or "").strip():
        issues.append(
            Issue(
                type=IssueType.MISSING_LANGUAGE,
                severity=Severity.ERROR,
                page=0,
                message="Document language is not specified",
                wcag_criterion="3.1.1",
            )
        )
    return issues


def check_tagging(trace: ContentTrace, page_number: int) -> list[Issue]:
    if trace.marked_content:
        return []
    return [
        Issue(
            type=IssueType.UNTAGGED_CONTENT,
            severity=Severity.ERROR,
            page=page_number,
            message="Page contains untagged content",
            wcag_criterion="1.3.1",
        )
    ]


def guess_heading_level(font_size: float) -> int:
    if font_size > 24:
        return 1
    if font_size > 20:
        return 2
    if font_size > 16:
        return 3
    return 4


def extract_headings(runs: Sequence[TextRun]) -> list[Heading]:
    """Group consecutive large-font runs into headings, in reading order."""
    headings: list[Heading] = []
    current: Heading | None = None

    for run in runs:
        if run.font_size > HEADING_MIN_FONT_SIZE:
            if current is not None and abs(current.y - run.y) < HEADING_LINE_TOLERANCE:
                current.text = f"{current.text} {run.text}"
                continue
            if current is not None:
                headings.append(current)
            current = Heading(
                text=run.text, level=guess_heading_level(run.font_size), y=run.y
            )
        elif current is not None:
            headings.append(current)
            current = None

    if current is not None:
        headings.append(current)
    return headings


def check_heading_hierarchy(headings: Sequence[Heading], page_number: int) -> list[Issue]:
    """Flag every heading that jumps more than one level deeper than its predecessor.

    The walk starts from level 0, so a page opening with H2 or deeper is flagged.
    """
    issues: list[Issue] = []
    last_level = 0
    for heading in headings:
        if heading.level - last_level > 1:
            issues.append(
                Issue(
                    type=IssueType.HEADING_HIERARCHY,
                    severity=Severity.WARNING,
                    page=page_number,
                    message=f"Heading level skipped from H{last_level} to H{heading.level}",
                    heading_text=heading.text.strip() or None,
                    wcag_criterion="1.3.1",
                )
            )
        last_level = heading.level
    return issues


def _matches_pattern(pattern: Sequence[int], reference: Sequence[int]) -> bool:
    if len(pattern) != len(reference):
        return False
    return all(abs(a - b) < COLUMN_TOLERANCE for a, b in zip(pattern, reference))


def detect_tables(runs: Sequence[TextRun]) -> list[DetectedTable]:
    """Find groups of two or more consecutive rows with a shared column layout.

    Rows are keyed on the rounded vertical position. Rows holding a single run
    neither extend nor break a table. A row whose columns do not line up closes
    the current group and starts a new candidate.
    """
    rows: dict[int, list[TextRun]] = defaultdict(list)
    for run in runs:
        rows[round(run.y)].append(run)

    tables: list[DetectedTable] = []
    group: list[list[TextRun]] = []
    pattern: list[int] | None = None

    def close_group() -> None:
        if len(group) >= 2:
            cells = [run for row in group for run in row]
            tables.append(
                DetectedTable(
                    bounds=bounding_rect(run.rect for run in cells),
                    row_count=len(group),
                )
            )

    for y in sorted(rows):
        items = rows[y]
        if len(items) < 2:
            continue
        row_pattern = sorted(round(run.x) for run in items)
        if pattern is None or _matches_pattern(row_pattern, pattern):
            if pattern is None:
                pattern = row_pattern
            group.append(items)
            continue
        close_group()
        group = [items]
        pattern = row_pattern

    close_group()
    return tables


def check_tables(runs: Sequence[TextRun], page_number: int) -> list[Issue]:
    return [
        Issue(
            type=IssueType.TABLE_STRUCTURE,
            severity=Severity.ERROR,
            page=page_number,
            message="Table lacks proper header structure",
            bounds=table.bounds,
            wcag_criterion="1.3.1",
        )
        for table in detect_tables(runs)
        if not table.has_headers
    ]


def analyse_page_structure(
    runs: Sequence[TextRun], trace: ContentTrace, page_number: int
) -> list[Issue]:
    issues = check_tagging(trace, page_number)
    issues.extend(check_heading_hierarchy(extract_headings(runs), page_number))
    issues.extend(check_tables(runs, page_number))
    return issues
