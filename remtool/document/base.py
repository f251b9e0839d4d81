"""Contracts for the source document collaborator.

Detection never touches a PDF library directly; it reads pages through these
protocols. All geometry uses the top-left origin page space of
:class:`remtool.models.Rect`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol, Sequence

from remtool.models import Rect


class DocumentLoadError(Exception):
    """Raised when a document cannot be opened at all."""


@dataclass(frozen=True)
class DocumentMetadata:
    """Document-level metadata relevant to accessibility."""

    title: str | None = None
    language: str | None = None


@dataclass(frozen=True)
class TextRun:
    """A run of text drawn with one font at one position."""

    text: str
    x: float
    y: float
    width: float
    height: float
    font_size: float

    @property
    def rect(self) -> Rect:
        return Rect(x=self.x, y=self.y, width=self.width, height=self.height)


@dataclass(frozen=True)
class Annotation:
    """A page annotation.

    Attributes:
        subtype: Annotation subtype, e.g. "Link" or "Widget"
        rect: Annotation rectangle
        field_name: Form field name (widgets only)
        field_type: Lower-cased field type, e.g. "text", "combobox"
        alternative_text: Field tooltip / alternate name used as instructions
        tab_order: Position in the page tab order, None when undefined
        actions: Event name -> script text (e.g. "activate", "mouse_up", "key_down", "blur")
        url: Link destination
    """

    subtype: str
    rect: Rect
    field_name: str | None = None
    field_type: str | None = None
    alternative_text: str | None = None
    tab_order: int | None = None
    actions: dict[str, str] = field(default_factory=dict)
    url: str | None = None


@dataclass(frozen=True)
class ImageDraw:
    """An image painted on the page."""

    bounds: Rect
    alt_text: str | None = None
    width: int | None = None
    height: int | None = None


@dataclass(frozen=True)
class ContentTrace:
    """Summary of the page drawing operations.

    Attributes:
        marked_content: True when any tagged/marked-content operator is present
        images: Every image draw on the page
    """

    marked_content: bool
    images: Sequence[ImageDraw] = ()


class Page(Protocol):
    """A single page of the source document."""

    def text_runs(self) -> Sequence[TextRun]: ...

    def annotations(self) -> Sequence[Annotation]: ...

    def content_trace(self) -> ContentTrace: ...

    def render_to_image(self, scale: float) -> bytes:
        """Return a PNG snapshot of the page."""
        ...


class Document(Protocol):
    """A paged document. Page numbers are 1-based."""

    @property
    def page_count(self) -> int: ...

    def metadata(self) -> DocumentMetadata: ...

    def get_page(self, number: int) -> Page: ...
