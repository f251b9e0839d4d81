"""Rule-based accessibility detection."""

from __future__ import annotations

from .content import GENERIC_LINK_PHRASES, is_generic_link_text, link_text
from .detector import Detector
from .structural import DetectedTable, Heading, detect_tables, extract_headings, guess_heading_level

__all__ = [
    "DetectedTable",
    "Detector",
    "GENERIC_LINK_PHRASES",
    "Heading",
    "detect_tables",
    "extract_headings",
    "guess_heading_level",
    "is_generic_link_text",
    "link_text",
]
