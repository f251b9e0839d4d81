from __future__ import annotations

import base64
import sys
from pathlib import Path
from types import SimpleNamespace
from typing import Any, cast

import pytest
from mistralai import Mistral

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from remtool.llm.mistral_llm import MistralLLM
from remtool.llm.provider import (
    LLMParseError,
    LLMProviderConfigurationError,
    LLMProviderError,
    LLMQuotaError,
)


class _StatusError(Exception):
    def __init__(self, status_code: int) -> None:
        super().__init__(f"HTTP {status_code}")
        self.status_code = status_code


class _DummyConversations:
    def __init__(self, response: Any = None, error: Exception | None = None) -> None:
        self.calls: list[dict[str, Any]] = []
        self._response = response
        self._error = error

    def start(self, **kwargs: Any) -> Any:
        self.calls.append(kwargs)
        if self._error is not None:
            raise self._error
        return self._response


class _DummyClient:
    def __init__(self, response: Any = None, error: Exception | None = None) -> None:
        self.beta = SimpleNamespace(conversations=_DummyConversations(response, error))

    @property
    def calls(self) -> list[dict[str, Any]]:
        return self.beta.conversations.calls


def _outputs(text: Any) -> SimpleNamespace:
    return SimpleNamespace(outputs=[SimpleNamespace(content=text)])


def _llm(client: _DummyClient, **kwargs: Any) -> MistralLLM:
    return MistralLLM(system_prompt="Be precise.", client=cast(Mistral, client), **kwargs)


def test_generate_sends_instructions_and_joined_prompt() -> None:
    client = _DummyClient(_outputs("Suggestion: Sales chart"))
    llm = _llm(client)

    result = llm.generate(["Line one", "Line two"])

    assert result == "Suggestion: Sales chart"
    call = client.calls[0]
    assert call["instructions"] == "Be precise."
    assert call["model"] == llm.model
    assert call["tools"] == []
    assert call["completion_args"] == {"temperature": 0.3}
    entry = call["inputs"][0]
    assert entry.role == "user"
    assert entry.content == "Line one\nLine two"


def test_image_is_sent_as_data_url_chunk() -> None:
    client = _DummyClient(_outputs("ok"))
    llm = _llm(client)

    llm.generate(["Review"], image=b"png-bytes")

    content = client.calls[0]["inputs"][0].content
    text_chunk = content[0]
    image_chunk = content[1]
    text_value = text_chunk["text"] if isinstance(text_chunk, dict) else text_chunk.text
    image_value = image_chunk["image_url"] if isinstance(image_chunk, dict) else image_chunk.image_url
    assert text_value == "Review"
    expected = "data:image/png;base64," + base64.b64encode(b"png-bytes").decode("ascii")
    assert image_value == expected


def test_chunked_output_content_is_joined() -> None:
    chunks = [SimpleNamespace(text="Suggestion: "), {"text": "Revenue chart"}, {"type": "other"}]
    llm = _llm(_DummyClient(_outputs(chunks)))

    assert llm.generate(["Review"]) == "Suggestion: Revenue chart"


def test_choices_shape_is_supported() -> None:
    response = SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content="legacy"))])
    llm = _llm(_DummyClient(response))

    assert llm.generate(["Review"]) == "legacy"


def test_response_without_text_raises_parse_error() -> None:
    llm = _llm(_DummyClient(SimpleNamespace(outputs=[])))

    with pytest.raises(LLMParseError):
        llm.generate(["Review"])


def test_filter_json_parses_payload() -> None:
    llm = _llm(_DummyClient(_outputs('```json\n{"issues": []}\n```')), filter_json=True)

    assert llm.generate(["Review"]) == {"issues": []}


def test_filter_json_without_json_raises_parse_error() -> None:
    llm = _llm(_DummyClient(_outputs("nothing here")), filter_json=True)

    with pytest.raises(LLMParseError):
        llm.generate(["Review"])


def test_rate_limit_maps_to_quota_error() -> None:
    llm = _llm(_DummyClient(error=_StatusError(429)))

    with pytest.raises(LLMQuotaError):
        llm.generate(["Review"])


def test_other_errors_map_to_provider_error() -> None:
    llm = _llm(_DummyClient(error=_StatusError(500)))

    with pytest.raises(LLMProviderError) as excinfo:
        llm.generate(["Review"])

    assert not isinstance(excinfo.value, LLMQuotaError)


def test_missing_api_key_raises_configuration_error(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("MISTRAL_API_KEY", raising=False)
    dotenv_path = tmp_path / ".env"
    dotenv_path.write_text("", encoding="utf-8")

    with pytest.raises(LLMProviderConfigurationError):
        MistralLLM(system_prompt="Prompt", dotenv_path=dotenv_path)
