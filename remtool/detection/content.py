"""Content checks: image alternative text and link text quality."""

from __future__ import annotations

from typing import Sequence

from remtool.document.base import Annotation, ContentTrace, TextRun
from remtool.models import Issue, IssueType, Severity

GENERIC_LINK_PHRASES = frozenset(
    {
        "click here",
        "here",
        "read more",
        "more",
        "link",
        "download",
        "click",
        "go",
        "visit",
        "see",
    }
)


def check_images(trace: ContentTrace, page_number: int) -> list[Issue]:
    return [
        Issue(
            type=IssueType.MISSING_ALT_TEXT,
            severity=Severity.ERROR,
            page=page_number,
            message="Image missing alternative text",
            bounds=image.bounds,
            wcag_criterion="1.1.1",
        )
        for image in trace.images
        if not (image.alt_text or "").strip()
    ]


def link_text(annotation: Annotation, runs: Sequence[TextRun]) -> str:
    """Join every text run whose box overlaps the link rectangle."""
    parts = [run.text for run in runs if annotation.rect.overlaps(run.rect)]
    return " ".join(parts).strip()


def is_generic_link_text(text: str) -> bool:
    return text.strip().lower() in GENERIC_LINK_PHRASES


def check_links(
    annotations: Sequence[Annotation], runs: Sequence[TextRun], page_number: int
) -> list[Issue]:
    issues: list[Issue] = []
    for annotation in annotations:
        if annotation.subtype != "Link":
            continue
        text = link_text(annotation, runs)
        if not is_generic_link_text(text):
            continue
        issues.append(
            Issue(
                type=IssueType.GENERIC_LINK_TEXT,
                severity=Severity.WARNING,
                page=page_number,
                message=f'Link text "{text}" is not descriptive',
                bounds=annotation.rect,
                current_text=text,
                url=annotation.url,
                wcag_criterion="2.4.4",
            )
        )
    return issues


def analyse_page_content(
    runs: Sequence[TextRun],
    annotations: Sequence[Annotation],
    trace: ContentTrace,
    page_number: int,
) -> list[Issue]:
    issues = check_images(trace, page_number)
    issues.extend(check_links(annotations, runs, page_number))
    return issues
