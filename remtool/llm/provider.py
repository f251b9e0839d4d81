"""Provider contract and the errors providers raise.

A provider turns prompts (and optionally a rendered page image) into either
free text or a parsed JSON payload. ``LLMService`` relies on the error classes
below to decide whether to try the next provider: only ``LLMQuotaError`` falls
through, everything else stops the chain.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any, Callable, Protocol, Sequence

# Maximum characters of response or prompt text kept in an error message.
MAX_ERROR_CONTEXT = 2000

ProviderReporter = Callable[[str, "ProviderStatus", Exception | None], None]


class ProviderStatus(str, Enum):
    SUCCESS = "success"
    QUOTA = "quota"  # rate limited or out of quota; the next provider is tried
    FAILURE = "failure"


class LLMProviderError(Exception):
    """Generic failure raised by an LLM provider."""


class LLMQuotaError(LLMProviderError):
    """Quota or rate-limit exhaustion."""


class LLMProviderConfigurationError(LLMProviderError):
    """Missing credentials or an unusable client. The capability treats this as "no AI"."""


def _excerpt(text: str) -> str:
    if len(text) > MAX_ERROR_CONTEXT:
        return text[:MAX_ERROR_CONTEXT] + "... [truncated]"
    return text


class LLMParseError(LLMProviderError):
    """A response that could not be turned into the expected text or JSON.

    Keeps the raw response and the prompts so a bad page review or suggestion
    can be diagnosed from the log.
    """

    def __init__(
        self,
        message: str,
        *,
        response_text: str | None = None,
        prompts: list[str] | None = None,
    ) -> None:
        super().__init__(message)
        self.response_text = response_text
        self.prompts = prompts

    def __str__(self) -> str:
        parts = [super().__str__()]
        if self.response_text is not None:
            parts.append(f"\n--- LLM Response ---\n{_excerpt(self.response_text)}")
        if self.prompts:
            prompt_text = _excerpt("\n".join(self.prompts))
            parts.append(f"\n--- Input Prompts ---\n{prompt_text}")
        return "".join(parts)


class LLMProvider(Protocol):
    """What the service needs from a provider.

    ``generate`` returns the response text, or the parsed JSON payload when
    JSON filtering is on. ``image`` is a PNG page snapshot for vision models.
    """

    name: str

    def generate(
        self,
        user_prompts: Sequence[str],
        *,
        filter_json: bool | None = None,
        image: bytes | None = None,
    ) -> Any: ...

    def health_check(self) -> bool: ...


class ProviderFactory(Protocol):
    def __call__(
        self,
        *,
        system_prompt: str | Path,
        filter_json: bool,
        dotenv_path: str | Path | None,
    ) -> LLMProvider: ...
