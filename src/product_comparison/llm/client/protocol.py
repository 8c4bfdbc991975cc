"""Provider client protocol definition.

Defines the interface the comparison service depends on, so the
Gemini client can be swapped for a fake in tests.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class ProviderClientProtocol(Protocol):
    """Protocol for text-generation provider clients.

    Key methods:
    - send: Send one prompt, receive the raw generated text
    - initialize/shutdown: Lifecycle management for connection pools
    """

    async def initialize(self) -> None:
        """Initialize client resources (HTTP connections, etc.)."""
        ...

    async def shutdown(self) -> None:
        """Release client resources."""
        ...

    async def send(self, prompt: str) -> str:
        """Send a prompt and return the raw generated text.

        Args:
            prompt: Input prompt text.

        Returns:
            Raw text of the first candidate.

        Raises:
            QuotaExceededError: Provider quota exhausted (may carry a delay hint).
            ProviderUnavailableError: Unreachable, timed out, or misconfigured.
            ParseError: Response body is not in the expected shape.
            GenericProviderError: Any other provider failure.
        """
        ...
