"""Text-generation provider integration.

Provides the Gemini client, the comparison prompt and the provider
exception taxonomy.
"""

from product_comparison.llm.client.gemini import GeminiClient
from product_comparison.llm.exceptions import (
    GenericProviderError,
    ParseError,
    ProviderConfigurationError,
    ProviderError,
    ProviderUnavailableError,
    QuotaExceededError,
)


__all__ = [
    "GeminiClient",
    "GenericProviderError",
    "ParseError",
    "ProviderConfigurationError",
    "ProviderError",
    "ProviderUnavailableError",
    "QuotaExceededError",
]
