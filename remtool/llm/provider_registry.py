"""Provider factories and chain construction for the suggestion and page-review services."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Sequence

from dotenv import load_dotenv

from .gemini_llm import GeminiLLM
from .mistral_llm import MistralLLM
from .provider import LLMProvider, LLMProviderConfigurationError, ProviderFactory

logger = logging.getLogger(__name__)


def _gemini_factory(
    *,
    system_prompt: str | Path,
    filter_json: bool,
    dotenv_path: str | Path | None,
) -> LLMProvider:
    return GeminiLLM(
        system_prompt=system_prompt,
        filter_json=filter_json,
        dotenv_path=dotenv_path,
    )


def _mistral_factory(
    *,
    system_prompt: str | Path,
    filter_json: bool,
    dotenv_path: str | Path | None,
) -> LLMProvider:
    return MistralLLM(
        system_prompt=system_prompt,
        filter_json=filter_json,
        dotenv_path=dotenv_path,
    )


_PROVIDER_FACTORIES: dict[str, ProviderFactory] = {
    "gemini": _gemini_factory,
    "mistral": _mistral_factory,
}


def available_providers() -> list[str]:
    return list(_PROVIDER_FACTORIES)


def _split_names(value: str | None) -> list[str]:
    if not value:
        return []
    return [chunk.strip().lower() for chunk in value.split(",") if chunk.strip()]


def resolve_provider_order(
    *,
    primary: str | None = None,
    fallbacks: Sequence[str] | None = None,
) -> list[str]:
    """Return de-duplicated provider names from arguments or LLM_PRIMARY/LLM_FALLBACK."""

    candidates: list[str] = []
    if primary:
        candidates.extend(_split_names(primary))
    else:
        candidates.extend(_split_names(os.environ.get("LLM_PRIMARY")))

    if fallbacks:
        candidates.extend(name.strip().lower() for name in fallbacks if name.strip())
    else:
        candidates.extend(_split_names(os.environ.get("LLM_FALLBACK")))

    if not candidates:
        candidates = available_providers()

    order: list[str] = []
    for name in candidates:
        if name in order:
            continue
        if name not in _PROVIDER_FACTORIES:
            raise ValueError(f"Unknown LLM provider '{name}'")
        order.append(name)
    return order


def create_provider_chain(
    *,
    system_prompt: str | Path,
    filter_json: bool = False,
    dotenv_path: str | Path | None = None,
    primary: str | None = None,
    fallbacks: Sequence[str] | None = None,
    skip_unconfigured: bool = False,
) -> list[LLMProvider]:
    """Return configured providers honoring environment/priority hints.

    With ``skip_unconfigured`` a provider whose credentials are missing is
    logged and left out of the chain instead of raising, so the result may be
    empty.
    """

    # LLM_PRIMARY/LLM_FALLBACK may live in the dotenv file, so load it first.
    if dotenv_path is not None:
        load_dotenv(dotenv_path=str(dotenv_path), override=True)

    providers: list[LLMProvider] = []
    for name in resolve_provider_order(primary=primary, fallbacks=fallbacks):
        try:
            providers.append(
                _PROVIDER_FACTORIES[name](
                    system_prompt=system_prompt,
                    filter_json=filter_json,
                    dotenv_path=dotenv_path,
                )
            )
        except LLMProviderConfigurationError as exc:
            if not skip_unconfigured:
                raise
            logger.info("Skipping LLM provider %s: %s", name, exc)
    return providers
