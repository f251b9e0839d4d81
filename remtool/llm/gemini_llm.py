from __future__ import annotations

import json
import os
import threading
import time
from pathlib import Path
from typing import Any, Sequence

from dotenv import load_dotenv
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from .json_utils import parse_json_response
from .provider import (
    LLMParseError,
    LLMProviderConfigurationError,
    LLMProviderError,
    LLMQuotaError,
)

_RATE_LIMIT_CODE = 429


def load_system_prompt(system_prompt: str | Path) -> str:
    """Accept either a prompt string or a path to a file containing the prompt."""
    if not isinstance(system_prompt, (str, Path)):
        raise TypeError(f"system_prompt must be str or Path, got {type(system_prompt)}")
    # Short single-line strings might be paths; long or multi-line ones are prompts.
    if isinstance(system_prompt, Path) or (
        "\n" not in system_prompt and len(system_prompt) < 500
    ):
        try:
            prompt_path = Path(system_prompt)
            if prompt_path.exists() and prompt_path.is_file():
                return prompt_path.read_text(encoding="utf-8")
        except (OSError, ValueError):
            pass
    return str(system_prompt)


class GeminiLLM:
    """Wrapper around the Gemini SDK with system instructions and optional image input."""

    name = "gemini"
    MODEL = "gemini-2.5-flash"
    MAX_THINKING_BUDGET = 1024

    def __init__(
        self,
        system_prompt: str | Path,
        *,
        client: genai.Client | None = None,
        dotenv_path: str | Path | None = None,
        filter_json: bool = False,
        model: str | None = None,
        temperature: float = 0.3,
        min_request_interval: float | None = None,
        max_retries: int | None = None,
    ) -> None:
        self._system_prompt = load_system_prompt(system_prompt)

        if dotenv_path is not None:
            load_dotenv(dotenv_path=Path(dotenv_path))
        else:
            load_dotenv()

        if client is None:
            if not (os.environ.get("GEMINI_API_KEY") or os.environ.get("GOOGLE_API_KEY")):
                raise LLMProviderConfigurationError(
                    "GEMINI_API_KEY environment variable is required but not set."
                )
            client = genai.Client()
        self._client = client
        self._filter_json = filter_json
        self._model = model or os.environ.get("GEMINI_MODEL", self.MODEL)
        self._temperature = temperature

        if min_request_interval is None:
            try:
                min_request_interval = float(
                    os.environ.get("GEMINI_MIN_REQUEST_INTERVAL", "0")
                )
            except ValueError:
                min_request_interval = 0.0
        self._min_request_interval = max(0.0, min_request_interval)

        if max_retries is None:
            try:
                max_retries = int(os.environ.get("GEMINI_MAX_RETRIES", "2"))
            except ValueError:
                max_retries = 2
        self._max_retries = max(0, max_retries)

        # Start time reserved for the next request; shared by every thread using this client.
        self._next_request_time = 0.0
        self._rate_lock = threading.Lock()

    @property
    def system_prompt(self) -> str:
        return self._system_prompt

    @property
    def model(self) -> str:
        return self._model

    def generate(
        self,
        user_prompts: Sequence[str],
        *,
        filter_json: bool | None = None,
        image: bytes | None = None,
    ) -> Any:
        if not user_prompts:
            raise ValueError("user_prompts must not be empty.")

        apply_filter = self._filter_json if filter_json is None else filter_json

        text_prompt = "\n".join(user_prompts)
        contents: Any = text_prompt
        if image is not None:
            contents = [
                types.Part.from_bytes(data=image, mime_type="image/png"),
                text_prompt,
            ]

        config = types.GenerateContentConfig(
            system_instruction=self._system_prompt,
            thinking_config=types.ThinkingConfig(thinking_budget=self.MAX_THINKING_BUDGET),
            temperature=self._temperature,
        )

        for attempt in range(self._max_retries + 1):
            self._enforce_rate_limit()
            try:
                response = self._client.models.generate_content(
                    model=self._model,
                    contents=contents,
                    config=config,
                )
            except genai_errors.APIError as exc:
                if getattr(exc, "code", None) != _RATE_LIMIT_CODE:
                    raise LLMProviderError(f"Gemini provider: {exc}") from exc
                if attempt < self._max_retries:
                    # Backoff as a multiple of the minimum interval, with a small floor.
                    base = self._min_request_interval or 0.1
                    time.sleep(base * 2**attempt)
                    continue
                raise LLMQuotaError(
                    "Gemini provider: rate limited (exhausted retries)"
                ) from exc

            text = self._response_text(response, prompts=list(user_prompts))
            if not apply_filter:
                return text
            return self._parse_json(text, prompts=list(user_prompts))

        raise LLMQuotaError("Gemini provider: rate limited (exhausted retries)")

    def health_check(self) -> bool:
        return True

    @staticmethod
    def _response_text(response: Any, prompts: list[str] | None = None) -> str:
        text = getattr(response, "text", None)
        if not isinstance(text, str):
            raise LLMParseError(
                "Response object does not expose a text attribute.",
                response_text=str(response),
                prompts=prompts,
            )
        return text

    @staticmethod
    def _parse_json(text: str, prompts: list[str] | None = None) -> Any:
        try:
            return parse_json_response(text)
        except (ValueError, json.JSONDecodeError) as exc:
            raise LLMParseError(str(exc), response_text=text, prompts=prompts) from exc

    def _enforce_rate_limit(self) -> None:
        """Wait for this caller's slot so request starts are at least the minimum interval apart.

        The slot is reserved under the lock and the wait happens outside it, so
        concurrent callers queue up one interval after another.
        """
        if self._min_request_interval <= 0:
            return

        with self._rate_lock:
            now = time.monotonic()
            start = max(now, self._next_request_time)
            self._next_request_time = start + self._min_request_interval
        if start > now:
            time.sleep(start - now)
