"""Provider client exceptions.

These exceptions are raised by the text-generation provider client and
consumed by the comparison service, which decides between retrying,
serving a stale cached answer, or propagating the failure.
"""

from __future__ import annotations


class ProviderError(Exception):
    """Base exception for provider client errors."""


class QuotaExceededError(ProviderError):
    """Raised when the provider signals rate or quota exhaustion (HTTP 429).

    This is the only error kind the retry controller retries.
    """

    def __init__(self, message: str, retry_delay: float | None = None) -> None:
        """Initialize the exception.

        Args:
            message: Error message.
            retry_delay: Delay in seconds suggested by the provider, if any.
        """
        self.retry_delay = retry_delay
        super().__init__(message)


class ProviderUnavailableError(ProviderError):
    """Raised when the provider cannot be reached or is misconfigured.

    Covers connection errors, timeouts, and HTTP 404 for an unknown
    model or API version.
    """


class ParseError(ProviderError):
    """Raised when a provider response is not in the expected shape.

    The provider answered successfully, but the body lacks the
    ``candidates[0].content.parts[0].text`` path.
    """


class GenericProviderError(ProviderError):
    """Raised for uncategorized provider failures."""


class ProviderConfigurationError(ProviderError):
    """Raised when the provider client is misconfigured at startup."""
