"""Document collaborator contracts and the PyMuPDF-backed implementation."""

from __future__ import annotations

from .base import (
    Annotation,
    ContentTrace,
    Document,
    DocumentLoadError,
    DocumentMetadata,
    ImageDraw,
    Page,
    TextRun,
)
from .pymupdf_document import PyMuPDFDocument, PyMuPDFPage

__all__ = [
    "Annotation",
    "ContentTrace",
    "Document",
    "DocumentLoadError",
    "DocumentMetadata",
    "ImageDraw",
    "Page",
    "PyMuPDFDocument",
    "PyMuPDFPage",
    "TextRun",
]
