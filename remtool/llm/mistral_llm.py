from __future__ import annotations

import base64
import json
import os
from pathlib import Path
from typing import Any, Sequence, cast

from dotenv import load_dotenv
from mistralai import Mistral, models

from .gemini_llm import load_system_prompt
from .json_utils import parse_json_response
from .provider import (
    LLMParseError,
    LLMProvider,
    LLMProviderConfigurationError,
    LLMProviderError,
    LLMQuotaError,
)


class MistralLLM(LLMProvider):
    """Wrapper around the Mistral conversations API with system instructions.

    Images are sent as base64 data URLs, which requires a vision-capable model.
    """

    name = "mistral"
    MODEL = "mistral-medium-latest"

    def __init__(
        self,
        system_prompt: str | Path,
        *,
        client: Mistral | None = None,
        dotenv_path: str | Path | None = None,
        filter_json: bool = False,
        model: str | None = None,
        temperature: float = 0.3,
    ) -> None:
        self._system_prompt = load_system_prompt(system_prompt)

        if dotenv_path is not None:
            # Existing environment values take precedence over the dotenv file.
            load_dotenv(dotenv_path=Path(dotenv_path))
        else:
            load_dotenv()

        # The SDK does not read MISTRAL_API_KEY on its own.
        if client is None:
            api_key = os.environ.get("MISTRAL_API_KEY")
            if not api_key:
                raise LLMProviderConfigurationError(
                    "MISTRAL_API_KEY environment variable is required but not set."
                )
            client = Mistral(api_key=api_key)
        self._client = client

        self._filter_json = filter_json
        self._model = model or os.environ.get("MISTRAL_MODEL", self.MODEL)
        self._temperature = temperature

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
        content: Any = text_prompt
        if image is not None:
            encoded = base64.b64encode(image).decode("ascii")
            content = [
                {"type": "text", "text": text_prompt},
                {"type": "image_url", "image_url": f"data:image/png;base64,{encoded}"},
            ]

        inputs = cast(
            models.ConversationInputs,
            [models.MessageInputEntry(role="user", content=content)],
        )

        try:
            response = self._client.beta.conversations.start(
                inputs=inputs,
                instructions=self._system_prompt,
                model=self._model,
                completion_args={"temperature": self._temperature},
                tools=[],
            )
        except Exception as exc:
            if self._is_quota_error(exc):
                raise LLMQuotaError(
                    "Mistral provider: quota exhausted or rate limited"
                ) from exc
            raise LLMProviderError(f"Mistral provider: {exc}") from exc

        text = self._response_text(response, prompts=list(user_prompts))
        if not apply_filter:
            return text
        try:
            return parse_json_response(text)
        except (ValueError, json.JSONDecodeError) as exc:
            raise LLMParseError(
                str(exc), response_text=text, prompts=list(user_prompts)
            ) from exc

    def health_check(self) -> bool:
        return True

    @staticmethod
    def _content_text(content: Any) -> str | None:
        if isinstance(content, str):
            return content
        if isinstance(content, list):
            # Chunked content: keep the text chunks only.
            parts = []
            for chunk in content:
                text = chunk.get("text") if isinstance(chunk, dict) else getattr(chunk, "text", None)
                if isinstance(text, str):
                    parts.append(text)
            return "".join(parts) if parts else None
        return None

    def _response_text(self, response: Any, prompts: list[str] | None = None) -> str:
        """Pull the reply text from a conversations or chat-completions response.

        Shapes supported:
        1. ``response.outputs``: entries with a ``content`` attribute (or key)
        2. ``response.choices[0].message.content``: older chat shape
        """
        outputs = getattr(response, "outputs", None)
        if isinstance(outputs, list):
            for entry in outputs:
                content = (
                    entry.get("content") if isinstance(entry, dict) else getattr(entry, "content", None)
                )
                text = self._content_text(content)
                if text and text.strip():
                    return text

        choices = getattr(response, "choices", None)
        if choices:
            message = getattr(choices[0], "message", None)
            text = self._content_text(getattr(message, "content", None))
            if text is not None:
                return text

        raise LLMParseError(
            "Response does not contain text content; expected `outputs` or `choices` shapes.",
            response_text=str(response),
            prompts=prompts,
        )

    @staticmethod
    def _is_quota_error(exc: Exception) -> bool:
        return getattr(exc, "status_code", None) == 429
