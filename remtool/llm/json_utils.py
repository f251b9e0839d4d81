"""JSON extraction and repair for model responses.

Vision models asked for a JSON issue list often wrap it in prose or code
fences, or return slightly malformed JSON. These helpers locate the outermost
object or array, repair it and parse it.
"""

from __future__ import annotations

import json
from typing import Any

from json_repair import repair_json

_CLOSERS = {"{": "}", "[": "]"}


def parse_json_response(text: str) -> Any:
    """Extract and repair the first top-level JSON object or array in ``text``.

    Raises:
        ValueError: If no JSON delimiters are present.
        json.JSONDecodeError: If the repaired fragment still cannot be parsed.

    Example:
        >>> parse_json_response('Result: {"issues": []} done')
        {'issues': []}
    """
    if not isinstance(text, str):
        raise ValueError(f"Expected string input, got {type(text)}")

    starts = [(text.find(opener), opener) for opener in _CLOSERS if text.find(opener) != -1]
    if not starts:
        raise ValueError("Response text does not contain JSON object or array delimiters.")

    # Earliest opener wins; on a tie min() prefers "[" which sorts before "{".
    start, opener = min(starts)
    end = text.rfind(_CLOSERS[opener])
    if end <= start:
        raise ValueError("Response text does not contain matching JSON delimiters.")

    return json.loads(repair_json(text[start : end + 1]))
