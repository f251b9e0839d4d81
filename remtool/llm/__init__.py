"""Generative provider layer: Gemini and Mistral wrappers, fallback routing and
the capability object consumed by the analysis pipeline."""

from .capability import GenerativeCapability, LLMCapability, create_capability
from .provider import (
    LLMParseError,
    LLMProvider,
    LLMProviderConfigurationError,
    LLMProviderError,
    LLMQuotaError,
    ProviderStatus,
)
from .service import LLMService

__all__ = [
    "GenerativeCapability",
    "LLMCapability",
    "LLMParseError",
    "LLMProvider",
    "LLMProviderConfigurationError",
    "LLMProviderError",
    "LLMQuotaError",
    "LLMService",
    "ProviderStatus",
    "create_capability",
]
