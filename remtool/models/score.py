"""Score models produced by the scorer."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

Grade = Literal["A", "B", "C", "D", "F"]


class CategoryScores(BaseModel):
    """Per-category breakdown; a category with no issues scores 100."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    structural: int = Field(default=100, ge=0, le=100)
    content: int = Field(default=100, ge=0, le=100)
    forms: int = Field(default=100, ge=0, le=100)


class Score(BaseModel):
    """Document compliance score derived from an issue list."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    overall: int = Field(ge=0, le=100)
    grade: Grade
    category_scores: CategoryScores = Field(default_factory=CategoryScores)
