"""Priority-ordered routing across LLM providers.

The capability holds two services: one for remediation suggestions, one for
page review. Each answer comes back tagged with the provider that produced it.
"""

from __future__ import annotations

import logging
from typing import Any, Sequence

from .provider import (
    LLMProvider,
    LLMProviderError,
    LLMQuotaError,
    ProviderReporter,
    ProviderStatus,
)

logger = logging.getLogger(__name__)


class LLMService:
    """Send a request to the first provider that is not out of quota.

    ``LLMQuotaError`` moves on to the next provider; any other provider error
    is reported and re-raised without trying the rest.
    """

    def __init__(
        self,
        providers: Sequence[LLMProvider],
        *,
        reporter: ProviderReporter | None = None,
    ) -> None:
        if not providers:
            raise ValueError("LLMService requires at least one provider")
        self._providers = list(providers)
        self._reporter = reporter

    def provider_order(self) -> list[str]:
        return [provider.name for provider in self._providers]

    @property
    def primary_name(self) -> str:
        return self._providers[0].name

    def health_check(self) -> list[tuple[str, bool]]:
        return [(provider.name, provider.health_check()) for provider in self._providers]

    def generate(
        self,
        user_prompts: Sequence[str],
        *,
        filter_json: bool | None = None,
        image: bytes | None = None,
    ) -> tuple[str, Any]:
        """Return ``(provider_name, value)`` from the first provider that answers.

        Raises:
            LLMQuotaError: Every provider is out of quota.
            LLMProviderError: A provider failed for any other reason.
        """
        quota_error: LLMQuotaError | None = None
        for provider in self._providers:
            try:
                value = provider.generate(user_prompts, filter_json=filter_json, image=image)
            except LLMQuotaError as exc:
                quota_error = exc
                self._report(provider.name, ProviderStatus.QUOTA, exc)
                logger.debug("Provider %s out of quota; trying next provider", provider.name)
                continue
            except LLMProviderError as exc:
                self._report(provider.name, ProviderStatus.FAILURE, exc)
                raise
            self._report(provider.name, ProviderStatus.SUCCESS)
            return provider.name, value
        raise LLMQuotaError("All providers exceeded quota") from quota_error

    def _report(
        self,
        provider_name: str,
        status: ProviderStatus,
        error: Exception | None = None,
    ) -> None:
        if self._reporter is not None:
            self._reporter(provider_name, status, error)
