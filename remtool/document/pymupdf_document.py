"""PDF document collaborator backed by PyMuPDF."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Sequence

import fitz

from remtool.models import Rect

from .base import (
    Annotation,
    ContentTrace,
    DocumentLoadError,
    DocumentMetadata,
    ImageDraw,
    TextRun,
)

logger = logging.getLogger(__name__)

# BDC/BMC open a marked-content sequence; any occurrence means the page is tagged.
_MARKED_CONTENT_RE = re.compile(rb"(?<![A-Za-z])(BDC|BMC)(?![A-Za-z])")

# Widget attribute -> event name used by the form checks.
# The /A action fires on activation, which the keyboard can trigger as well.
_WIDGET_SCRIPTS = {
    "script": "activate",
    "script_stroke": "keystroke",
    "script_format": "format",
    "script_change": "change",
    "script_calc": "calculate",
    "script_blur": "blur",
    "script_focus": "focus",
}

# Additional-actions entries that only a pointer can fire.
_MOUSE_ACTION_KEYS = {"D": "mouse_down", "U": "mouse_up"}


def _pdf_string(doc: fitz.Document, xref: int, key: str) -> str | None:
    kind, value = doc.xref_get_key(xref, key)
    if kind in ("null", "undefined") or not value:
        return None
    if kind == "string":
        return value
    return value.lstrip("/")


def _mouse_actions(doc: fitz.Document, xref: int) -> dict[str, str]:
    actions = {}
    for key, event in _MOUSE_ACTION_KEYS.items():
        kind, value = doc.xref_get_key(xref, f"AA/{key}")
        if kind in ("null", "undefined") or not value:
            continue
        actions[event] = _pdf_string(doc, xref, f"AA/{key}/JS") or value
    return actions


class PyMuPDFPage:
    """A single PDF page exposed through the :class:`~remtool.document.base.Page` protocol."""

    def __init__(self, doc: fitz.Document, page: fitz.Page) -> None:
        self._doc = doc
        self._page = page

    def text_runs(self) -> Sequence[TextRun]:
        runs: list[TextRun] = []
        blocks = self._page.get_text("dict").get("blocks", [])
        for block in blocks:
            if block.get("type") != 0:
                continue
            for line in block.get("lines", []):
                for span in line.get("spans", []):
                    text = span.get("text", "")
                    if not text.strip():
                        continue
                    x0, y0, x1, y1 = span["bbox"]
                    runs.append(
                        TextRun(
                            text=text,
                            x=x0,
                            y=y0,
                            width=x1 - x0,
                            height=y1 - y0,
                            font_size=float(span.get("size", 0.0)),
                        )
                    )
        return runs

    def annotations(self) -> Sequence[Annotation]:
        annotations: list[Annotation] = []
        for link in self._page.get_links():
            rect = link.get("from")
            if rect is None:
                continue
            annotations.append(
                Annotation(
                    subtype="Link",
                    rect=Rect.from_corners(rect.x0, rect.y0, rect.x1, rect.y1),
                    url=link.get("uri") or link.get("file"),
                )
            )

        has_tab_order = _pdf_string(self._doc, self._page.xref, "Tabs") is not None
        for index, widget in enumerate(self._page.widgets() or []):
            actions = {}
            for attribute, event in _WIDGET_SCRIPTS.items():
                script = getattr(widget, attribute, None)
                if script:
                    actions[event] = script
            actions.update(_mouse_actions(self._doc, widget.xref))
            rect = widget.rect
            annotations.append(
                Annotation(
                    subtype="Widget",
                    rect=Rect.from_corners(rect.x0, rect.y0, rect.x1, rect.y1),
                    field_name=(widget.field_name or "").strip() or None,
                    field_type=(widget.field_type_string or "").lower() or None,
                    alternative_text=(widget.field_label or "").strip() or None,
                    tab_order=index if has_tab_order else None,
                    actions=actions,
                )
            )
        return annotations

    def content_trace(self) -> ContentTrace:
        contents = self._page.read_contents() or b""
        images = [
            ImageDraw(
                bounds=Rect.from_sequence(info["bbox"]),
                width=info.get("width"),
                height=info.get("height"),
            )
            for info in self._page.get_image_info(xrefs=True)
        ]
        return ContentTrace(
            marked_content=bool(_MARKED_CONTENT_RE.search(contents)),
            images=images,
        )

    def render_to_image(self, scale: float) -> bytes:
        pixmap = self._page.get_pixmap(matrix=fitz.Matrix(scale, scale))
        return pixmap.tobytes("png")


class PyMuPDFDocument:
    """Read-only PDF document opened with PyMuPDF.

    Use as a context manager, or call :meth:`close` when done.
    """

    def __init__(self, doc: fitz.Document, *, name: str = "") -> None:
        self._doc = doc
        self.name = name

    @classmethod
    def open(cls, path: str | Path) -> "PyMuPDFDocument":
        pdf_path = Path(path)
        try:
            doc = fitz.open(str(pdf_path))
        except (OSError, RuntimeError, ValueError) as exc:
            raise DocumentLoadError(f"Could not open {pdf_path}: {exc}") from exc
        if not doc.is_pdf:
            doc.close()
            raise DocumentLoadError(f"{pdf_path} is not a PDF document")
        if doc.needs_pass:
            doc.close()
            raise DocumentLoadError(f"{pdf_path} is encrypted")
        logger.info("Opened %s (%d page(s))", pdf_path, doc.page_count)
        return cls(doc, name=pdf_path.name)

    @property
    def page_count(self) -> int:
        return self._doc.page_count

    def metadata(self) -> DocumentMetadata:
        info = self._doc.metadata or {}
        title = (info.get("title") or "").strip() or None
        language = _pdf_string(self._doc, self._doc.pdf_catalog(), "Lang")
        return DocumentMetadata(title=title, language=language)

    def get_page(self, number: int) -> PyMuPDFPage:
        if number < 1 or number > self.page_count:
            raise IndexError(f"Page {number} out of range 1..{self.page_count}")
        return PyMuPDFPage(self._doc, self._doc.load_page(number - 1))

    def close(self) -> None:
        self._doc.close()

    def __enter__(self) -> "PyMuPDFDocument":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
