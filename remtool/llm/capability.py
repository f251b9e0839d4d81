"""Generative capability used by the augmentor and the suggestion enhancer.

The pipeline only sees the ``GenerativeCapability`` protocol. ``LLMCapability``
implements it on top of two provider chains: one free-text chain for
remediation suggestions and one JSON-filtered chain for whole-page review.
``create_capability`` returns ``None`` when no provider is configured; callers
treat that as the degraded no-AI mode rather than an error.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Protocol

from ..prompt.render_prompt import (
    render_page_analysis_system_prompt,
    render_page_analysis_user_prompt,
    render_suggestion_system_prompt,
)
from .provider import LLMParseError, ProviderReporter, ProviderStatus
from .provider_registry import create_provider_chain
from .service import LLMService

if TYPE_CHECKING:
    from ..config import AnalysisConfiguration
    from ..models import Issue

logger = logging.getLogger(__name__)


class GenerativeCapability(Protocol):
    """External text/vision generation service."""

    name: str

    def request(self, prompt: str, context: "Issue | None" = None) -> tuple[str, str]:
        """Return ``(service, text)``: the provider that answered and its free-text reply."""
        ...

    def analyze_page(self, image: bytes, text: str, page_number: int) -> list[dict[str, Any]]:
        """Return raw issue findings for one rendered page."""
        ...


def _log_provider_status(name: str, status: ProviderStatus, error: Exception | None) -> None:
    if status is ProviderStatus.SUCCESS:
        logger.debug("LLM provider %s answered", name)
    else:
        logger.warning("LLM provider %s reported %s: %s", name, status.value, error)


class LLMCapability:
    def __init__(self, suggestion_service: LLMService, page_service: LLMService) -> None:
        self._suggestion_service = suggestion_service
        self._page_service = page_service

    @property
    def name(self) -> str:
        return self._suggestion_service.primary_name

    def request(self, prompt: str, context: "Issue | None" = None) -> tuple[str, str]:
        if context is not None:
            logger.debug("Requesting suggestion for %s (%s)", context.id, context.type.value)
        service, text = self._suggestion_service.generate([prompt], filter_json=False)
        return service, str(text)

    def analyze_page(self, image: bytes, text: str, page_number: int) -> list[dict[str, Any]]:
        user_prompt = render_page_analysis_user_prompt(page_number, text)
        _, payload = self._page_service.generate([user_prompt], filter_json=True, image=image)

        if isinstance(payload, dict):
            payload = payload.get("issues", [])
        if not isinstance(payload, list):
            raise LLMParseError(
                f"Page analysis returned {type(payload).__name__}, expected a list of issues",
                response_text=str(payload),
                prompts=[user_prompt],
            )
        return [finding for finding in payload if isinstance(finding, dict)]


def create_capability(
    config: "AnalysisConfiguration",
    *,
    reporter: ProviderReporter | None = _log_provider_status,
) -> LLMCapability | None:
    """Build the provider-backed capability, or ``None`` when AI is unavailable."""

    if not config.ai_enabled:
        logger.info("Generative capability disabled by configuration")
        return None

    chain_args: dict[str, Any] = {
        "dotenv_path": config.dotenv_path,
        "primary": config.llm_primary,
        "fallbacks": config.llm_fallbacks or None,
        "skip_unconfigured": True,
    }
    suggestion_chain = create_provider_chain(
        system_prompt=render_suggestion_system_prompt(),
        filter_json=False,
        **chain_args,
    )
    if not suggestion_chain:
        logger.info("No LLM provider has credentials; using rule-based suggestions")
        return None

    page_chain = create_provider_chain(
        system_prompt=render_page_analysis_system_prompt(),
        filter_json=True,
        **chain_args,
    )

    return LLMCapability(
        LLMService(suggestion_chain, reporter=reporter),
        LLMService(page_chain, reporter=reporter),
    )
