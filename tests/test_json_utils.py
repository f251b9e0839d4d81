from __future__ import annotations

import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from remtool.llm.json_utils import parse_json_response


def test_parse_json_object_in_text():
    text = 'Here is the result: {"issues": [{"type": "color-contrast"}]}. Thanks'
    result = parse_json_response(text)
    assert result == {"issues": [{"type": "color-contrast"}]}


def test_parse_json_array_in_text():
    text = 'Some preamble [ {"type": "missing-alt-text", "confidence": 90} ] end'
    result = parse_json_response(text)
    assert isinstance(result, list)
    assert result[0]["confidence"] == 90


def test_parse_json_inside_code_fence():
    text = '```json\n{"issues": []}\n```'
    assert parse_json_response(text) == {"issues": []}


def test_repairs_trailing_comma():
    assert parse_json_response('{"a": 1,}') == {"a": 1}


def test_raises_without_delimiters():
    with pytest.raises(ValueError):
        parse_json_response("No issues found on this page.")


def test_raises_for_non_string():
    with pytest.raises(ValueError):
        parse_json_response(None)  # type: ignore[arg-type]
