from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Iterator
from unittest.mock import patch

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from remtool.config import (
    DEFAULT_AI_PAGE_SAMPLE,
    DEFAULT_BATCH_SIZE,
    DEFAULT_RENDER_SCALE,
    AnalysisConfiguration,
)

_ENV_NAMES = [
    "REMTOOL_BATCH_SIZE",
    "REMTOOL_AI_PAGE_SAMPLE",
    "REMTOOL_RENDER_SCALE",
    "REMTOOL_DISABLE_AI",
    "LLM_PRIMARY",
    "LLM_FALLBACK",
]


@pytest.fixture
def empty_dotenv(tmp_path: Path) -> Iterator[Path]:
    path = tmp_path / ".env"
    path.write_text("", encoding="utf-8")
    with patch.dict(os.environ):
        for name in _ENV_NAMES:
            os.environ.pop(name, None)
        yield path


def test_defaults(empty_dotenv: Path) -> None:
    config = AnalysisConfiguration.from_env(empty_dotenv)

    assert config.batch_size == DEFAULT_BATCH_SIZE
    assert config.ai_page_sample == DEFAULT_AI_PAGE_SAMPLE
    assert config.render_scale == DEFAULT_RENDER_SCALE
    assert config.ai_enabled is True
    assert config.llm_primary is None
    assert config.llm_fallbacks == []
    assert config.dotenv_path == empty_dotenv


def test_values_read_from_environment(empty_dotenv: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("REMTOOL_BATCH_SIZE", "3")
    monkeypatch.setenv("REMTOOL_AI_PAGE_SAMPLE", "8")
    monkeypatch.setenv("REMTOOL_RENDER_SCALE", "2.0")
    monkeypatch.setenv("LLM_PRIMARY", "Mistral")
    monkeypatch.setenv("LLM_FALLBACK", "gemini, ")

    config = AnalysisConfiguration.from_env(empty_dotenv)

    assert config.batch_size == 3
    assert config.ai_page_sample == 8
    assert config.render_scale == 2.0
    assert config.llm_primary == "mistral"
    assert config.llm_fallbacks == ["gemini"]


def test_values_read_from_dotenv_file(empty_dotenv: Path) -> None:
    empty_dotenv.write_text("REMTOOL_BATCH_SIZE=7\n", encoding="utf-8")

    assert AnalysisConfiguration.from_env(empty_dotenv).batch_size == 7


@pytest.mark.parametrize("raw", ["abc", "0", "-2", ""])
def test_malformed_numbers_fall_back_to_defaults(raw: str, empty_dotenv: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("REMTOOL_BATCH_SIZE", raw)
    monkeypatch.setenv("REMTOOL_RENDER_SCALE", raw)

    config = AnalysisConfiguration.from_env(empty_dotenv)

    assert config.batch_size == DEFAULT_BATCH_SIZE
    assert config.render_scale == DEFAULT_RENDER_SCALE


@pytest.mark.parametrize("raw,enabled", [("1", False), ("TRUE", False), ("on", False), ("0", True), ("no", True)])
def test_disable_ai_flag(raw: str, enabled: bool, empty_dotenv: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("REMTOOL_DISABLE_AI", raw)

    assert AnalysisConfiguration.from_env(empty_dotenv).ai_enabled is enabled


@pytest.mark.parametrize(
    "kwargs",
    [{"batch_size": 0}, {"ai_page_sample": 0}, {"render_scale": 0.0}],
)
def test_invalid_values_rejected(kwargs: dict) -> None:
    with pytest.raises(ValueError):
        AnalysisConfiguration(**kwargs)
