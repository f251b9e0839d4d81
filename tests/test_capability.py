from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Any, Iterator, Sequence
from unittest.mock import patch

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from remtool.config import AnalysisConfiguration
from remtool.enhancement import enhance
from remtool.llm import provider_registry
from remtool.llm.capability import LLMCapability, create_capability
from remtool.llm.provider import LLMParseError, LLMProviderConfigurationError, LLMQuotaError
from remtool.llm.service import LLMService
from tests.fakes import make_issue


class _RecordingProvider:
    def __init__(self, name: str, result: Any = "", *, system_prompt: str | Path = "", filter_json: bool = False) -> None:
        self.name = name
        self.result = result
        self.system_prompt = system_prompt
        self.filter_json = filter_json
        self.calls: list[dict[str, Any]] = []

    def generate(self, user_prompts: Sequence[str], *, filter_json: bool | None = None, image: bytes | None = None) -> Any:
        self.calls.append({"prompts": list(user_prompts), "filter_json": filter_json, "image": image})
        return self.result

    def health_check(self) -> bool:
        return True


def _capability(suggestion: Any = "Suggestion: Chart", page: Any = None) -> tuple[LLMCapability, _RecordingProvider, _RecordingProvider]:
    suggestion_provider = _RecordingProvider("gemini", suggestion)
    page_provider = _RecordingProvider("gemini", page if page is not None else {"issues": []})
    capability = LLMCapability(LLMService([suggestion_provider]), LLMService([page_provider]))
    return capability, suggestion_provider, page_provider


def test_request_returns_text_from_suggestion_chain() -> None:
    capability, suggestion_provider, page_provider = _capability("Suggestion: Bar chart")

    assert capability.request("Describe", make_issue()) == ("gemini", "Suggestion: Bar chart")
    assert suggestion_provider.calls == [{"prompts": ["Describe"], "filter_json": False, "image": None}]
    assert page_provider.calls == []
    assert capability.name == "gemini"


class _QuotaProvider(_RecordingProvider):
    def generate(self, user_prompts: Sequence[str], *, filter_json: bool | None = None, image: bytes | None = None) -> Any:
        self.calls.append({"prompts": list(user_prompts), "filter_json": filter_json, "image": image})
        raise LLMQuotaError(f"{self.name} out of quota")


def test_suggestion_is_attributed_to_the_provider_that_answered() -> None:
    primary = _QuotaProvider("gemini")
    fallback = _RecordingProvider("mistral", "Suggestion: A chart\nConfidence: 90")
    capability = LLMCapability(LLMService([primary, fallback]), LLMService([fallback]))
    issue = make_issue()
    issue.id = "issue-0"

    enhance([issue], capability)

    assert len(primary.calls) == 1
    assert issue.ai_service == "mistral"
    assert issue.suggestion == "A chart"
    assert issue.confidence == 90
    assert issue.ai_error is False


def test_analyze_page_unwraps_issue_list() -> None:
    findings = [{"type": "color-contrast", "description": "Low contrast"}, "stray text"]
    capability, _, page_provider = _capability(page={"issues": findings})

    result = capability.analyze_page(b"png", "Page text", 3)

    assert result == [{"type": "color-contrast", "description": "Low contrast"}]
    call = page_provider.calls[0]
    assert call["filter_json"] is True
    assert call["image"] == b"png"
    assert "Analyze this PDF page (3)" in call["prompts"][0]
    assert "Page text" in call["prompts"][0]


def test_analyze_page_accepts_bare_list() -> None:
    capability, _, _ = _capability(page=[{"type": "reading-order"}])

    assert capability.analyze_page(b"png", "", 1) == [{"type": "reading-order"}]


def test_analyze_page_rejects_other_payloads() -> None:
    capability, _, _ = _capability(page="not json")

    with pytest.raises(LLMParseError):
        capability.analyze_page(b"png", "", 1)


@pytest.fixture
def registry(monkeypatch: pytest.MonkeyPatch) -> Iterator[dict[str, list[_RecordingProvider]]]:
    built: dict[str, list[_RecordingProvider]] = {"gemini": [], "mistral": []}

    def factory(name: str):
        def build(*, system_prompt: str | Path, filter_json: bool, dotenv_path: str | Path | None) -> _RecordingProvider:
            provider = _RecordingProvider(name, system_prompt=system_prompt, filter_json=filter_json)
            built[name].append(provider)
            return provider

        return build

    monkeypatch.setattr(
        provider_registry,
        "_PROVIDER_FACTORIES",
        {"gemini": factory("gemini"), "mistral": factory("mistral")},
    )
    with patch.dict(os.environ):
        os.environ.pop("LLM_PRIMARY", None)
        os.environ.pop("LLM_FALLBACK", None)
        yield built


def test_create_capability_builds_both_chains(registry: dict[str, list[_RecordingProvider]]) -> None:
    capability = create_capability(AnalysisConfiguration(llm_primary="mistral"))

    assert capability is not None
    assert capability.name == "mistral"
    suggestion_chain, page_chain = registry["mistral"]
    assert suggestion_chain.filter_json is False
    assert "Suggestion:" in str(suggestion_chain.system_prompt)
    assert page_chain.filter_json is True
    assert '"issues"' in str(page_chain.system_prompt)


def test_create_capability_disabled_by_configuration(registry: dict[str, list[_RecordingProvider]]) -> None:
    assert create_capability(AnalysisConfiguration(ai_enabled=False)) is None
    assert registry == {"gemini": [], "mistral": []}


def test_create_capability_without_credentials(monkeypatch: pytest.MonkeyPatch, registry: dict[str, list[_RecordingProvider]]) -> None:
    def unconfigured(**_kwargs: Any) -> _RecordingProvider:
        raise LLMProviderConfigurationError("missing key")

    monkeypatch.setitem(provider_registry._PROVIDER_FACTORIES, "gemini", unconfigured)
    monkeypatch.setitem(provider_registry._PROVIDER_FACTORIES, "mistral", unconfigured)

    assert create_capability(AnalysisConfiguration()) is None
