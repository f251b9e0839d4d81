"""Rule-based detection over a whole document.

Detection degrades per page: a page that fails to read contributes no issues
and the pass carries on with the next page.
"""

from __future__ import annotations

import logging

from remtool.document.base import Document, DocumentLoadError
from remtool.models import Issue

from .content import analyse_page_content
from .forms import analyse_page_forms
from .structural import analyse_page_structure, check_document_metadata

logger = logging.getLogger(__name__)


class Detector:
    """Runs the structural, content and forms sub-passes.

    Each sub-pass can be switched off; document-level metadata checks belong
    to the structural pass.
    """

    def __init__(
        self,
        *,
        structural: bool = True,
        content: bool = True,
        forms: bool = True,
    ) -> None:
        self.structural = structural
        self.content = content
        self.forms = forms

    def detect(self, document: Document) -> list[Issue]:
        issues: list[Issue] = []

        if self.structural:
            try:
                metadata = document.metadata()
            except Exception as exc:
                raise DocumentLoadError(f"Could not read document metadata: {exc}") from exc
            issues.extend(check_document_metadata(metadata))

        for page_number in range(1, document.page_count + 1):
            try:
                issues.extend(self.detect_page(document, page_number))
            except Exception:
                logger.exception("Detection failed for page %d; skipping page", page_number)
        return issues

    def detect_page(self, document: Document, page_number: int) -> list[Issue]:
        """All enabled checks for one page. Any read failure propagates to the caller."""
        page = document.get_page(page_number)
        runs = page.text_runs()
        annotations = page.annotations() if (self.content or self.forms) else []
        trace = page.content_trace() if (self.structural or self.content) else None

        issues: list[Issue] = []
        if self.structural and trace is not None:
            issues.extend(analyse_page_structure(runs, trace, page_number))
        if self.content and trace is not None:
            issues.extend(analyse_page_content(runs, annotations, trace, page_number))
        if self.forms:
            issues.extend(analyse_page_forms(annotations, page_number))
        return issues
