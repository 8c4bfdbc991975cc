"""Provider client implementations."""

from product_comparison.llm.client.gemini import GeminiClient
from product_comparison.llm.client.protocol import ProviderClientProtocol


__all__ = [
    "GeminiClient",
    "ProviderClientProtocol",
]
