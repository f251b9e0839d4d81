from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

DEFAULT_BATCH_SIZE = 5
DEFAULT_AI_PAGE_SAMPLE = 5
DEFAULT_RENDER_SCALE = 1.5
DEFAULT_AI_CONFIDENCE = 85
DEFAULT_DETECTION_CONFIDENCE = 75

_TRUTHY = {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    try:
        value = int(os.environ.get(name, str(default)))
    except ValueError:
        return default
    return value if value > 0 else default


def _env_float(name: str, default: float) -> float:
    try:
        value = float(os.environ.get(name, str(default)))
    except ValueError:
        return default
    return value if value > 0 else default


def _env_names(name: str) -> list[str]:
    raw = os.environ.get(name, "")
    return [chunk.strip().lower() for chunk in raw.split(",") if chunk.strip()]


@dataclass
class AnalysisConfiguration:
    """Settings for one analysis run."""

    # Suggestion enhancement
    batch_size: int = DEFAULT_BATCH_SIZE
    default_confidence: int = DEFAULT_AI_CONFIDENCE

    # Page augmentation
    ai_page_sample: int = DEFAULT_AI_PAGE_SAMPLE
    render_scale: float = DEFAULT_RENDER_SCALE
    detection_confidence: int = DEFAULT_DETECTION_CONFIDENCE

    # Providers
    ai_enabled: bool = True
    llm_primary: str | None = None
    llm_fallbacks: list[str] = field(default_factory=list)
    dotenv_path: Path | None = None

    def __post_init__(self) -> None:
        if self.batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        if self.ai_page_sample < 1:
            raise ValueError("ai_page_sample must be at least 1")
        if self.render_scale <= 0:
            raise ValueError("render_scale must be positive")

    @classmethod
    def from_env(cls, dotenv_path: str | Path | None = None) -> "AnalysisConfiguration":
        """Build a configuration from the environment, loading ``.env`` first.

        Environment Variables:
          REMTOOL_BATCH_SIZE       Suggestion batch size (default: 5)
          REMTOOL_AI_PAGE_SAMPLE   Pages sent for model review (default: 5)
          REMTOOL_RENDER_SCALE     Page snapshot scale (default: 1.5)
          REMTOOL_DISABLE_AI       Any of 1/true/yes/on disables providers
          LLM_PRIMARY              Primary LLM provider
          LLM_FALLBACK             Fallback providers (comma-separated)
        """
        if dotenv_path is not None:
            load_dotenv(dotenv_path=Path(dotenv_path))
        else:
            load_dotenv()

        primary = _env_names("LLM_PRIMARY")
        return cls(
            batch_size=_env_int("REMTOOL_BATCH_SIZE", DEFAULT_BATCH_SIZE),
            ai_page_sample=_env_int("REMTOOL_AI_PAGE_SAMPLE", DEFAULT_AI_PAGE_SAMPLE),
            render_scale=_env_float("REMTOOL_RENDER_SCALE", DEFAULT_RENDER_SCALE),
            ai_enabled=os.environ.get("REMTOOL_DISABLE_AI", "").strip().lower() not in _TRUTHY,
            llm_primary=",".join(primary) or None,
            llm_fallbacks=_env_names("LLM_FALLBACK"),
            dotenv_path=Path(dotenv_path) if dotenv_path is not None else None,
        )
