"""Axis-aligned rectangles in page coordinate space.

Every collaborator reports geometry as a top-left origin rectangle with
positive width and height. The same overlap predicate is used for AI issue
deduplication and for associating text runs with link annotations.
"""

from __future__ import annotations

from typing import Iterable, Sequence

from pydantic import BaseModel, ConfigDict, field_validator


class Rect(BaseModel):
    """Rectangle ``{x, y, width, height}``."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    x: float
    y: float
    width: float = 0.0
    height: float = 0.0

    @field_validator("width", "height", mode="before")
    def _non_negative(cls, value: object) -> float:
        # Model output sometimes reports a negative extent for a flipped box.
        return abs(float(value or 0.0))

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def overlaps(self, other: "Rect") -> bool:
        """True unless the rectangles are disjoint on either axis. Touching edges overlap."""
        return not (
            self.right < other.x
            or other.right < self.x
            or self.bottom < other.y
            or other.bottom < self.y
        )

    @classmethod
    def from_corners(cls, x0: float, y0: float, x1: float, y1: float) -> "Rect":
        """Build a rectangle from two opposite corners in any order."""
        left, right = sorted((float(x0), float(x1)))
        top, bottom = sorted((float(y0), float(y1)))
        return cls(x=left, y=top, width=right - left, height=bottom - top)

    @classmethod
    def from_sequence(cls, values: Sequence[float]) -> "Rect":
        """Accept a ``[x0, y0, x1, y1]`` corner list."""
        if len(values) != 4:
            raise ValueError(f"Expected four corner coordinates, got {len(values)}")
        return cls.from_corners(*values)


def rects_overlap(first: Rect | None, second: Rect | None) -> bool:
    """Overlap test that treats a missing rectangle as never overlapping."""
    if first is None or second is None:
        return False
    return first.overlaps(second)


def bounding_rect(rects: Iterable[Rect]) -> Rect | None:
    """Smallest rectangle enclosing all given rectangles, or None when empty."""
    items = list(rects)
    if not items:
        return None
    left = min(r.x for r in items)
    top = min(r.y for r in items)
    right = max(r.right for r in items)
    bottom = max(r.bottom for r in items)
    return Rect(x=left, y=top, width=right - left, height=bottom - top)
