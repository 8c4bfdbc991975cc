"""Retry controller for quota-exhausted provider calls.

Retries an operation only while it keeps failing with QuotaExceededError,
sleeping for a shared backoff delay between attempts. The delay lives in a
``BackoffDelay`` object shared by every request: a hint from the provider
received by one request changes the pacing of all retrying requests.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

from product_comparison.llm.exceptions import QuotaExceededError
from product_comparison.observability.logging import get_logger
from product_comparison.services.comparison.constants import (
    DEFAULT_MAX_ATTEMPTS,
    DEFAULT_RETRY_DELAY_SECONDS,
)


logger = get_logger(__name__)

T = TypeVar("T")


class BackoffDelay:
    """Process-wide backoff delay in seconds.

    Updates are a single attribute assignment and become visible to every
    request immediately. There is no per-request or per-key isolation.
    """

    def __init__(self, seconds: float) -> None:
        self.seconds = seconds

    def update(self, seconds: float) -> None:
        self.seconds = seconds


def is_retryable(exc: BaseException) -> bool:
    """Only quota exhaustion is worth retrying."""
    return isinstance(exc, QuotaExceededError)


class RetryController:
    """Bounded-attempt retry with an adjustable shared backoff.

    Attributes:
        max_attempts: Total attempts, including the first one.
        backoff: Shared delay slept before each retry.
    """

    def __init__(
        self,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        backoff: BackoffDelay | None = None,
        default_delay: float = DEFAULT_RETRY_DELAY_SECONDS,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """Initialize the controller.

        Args:
            max_attempts: Total attempts (default: 3).
            backoff: Shared delay object; a new one is created if omitted.
            default_delay: Initial delay in seconds when ``backoff`` is omitted.
            sleep: Coroutine used to wait between attempts.

        Raises:
            ValueError: If max_attempts is less than 1.
        """
        if max_attempts < 1:
            msg = f"max_attempts must be at least 1, got {max_attempts}"
            raise ValueError(msg)
        self.max_attempts = max_attempts
        self.backoff = backoff if backoff is not None else BackoffDelay(default_delay)
        self._sleep = sleep

    def record_hint(self, seconds: float | None) -> None:
        """Overwrite the shared delay with a provider-suggested value."""
        if seconds is None:
            return
        logger.warning(
            "Updating retry delay from provider hint",
            previous=self.backoff.seconds,
            delay=seconds,
        )
        self.backoff.update(seconds)

    async def run(self, operation: Callable[[], Awaitable[T]]) -> T:
        """Run ``operation``, retrying on quota exhaustion.

        Args:
            operation: Zero-argument coroutine factory, called once per attempt.

        Returns:
            The operation's result.

        Raises:
            QuotaExceededError: If every attempt hit the quota.
            Exception: Any non-retryable error, raised on first occurrence.
        """
        attempt = 1
        while True:
            try:
                return await operation()
            except Exception as e:
                if not is_retryable(e) or attempt >= self.max_attempts:
                    raise
                delay = self.backoff.seconds
                logger.warning(
                    "Quota exceeded, retrying",
                    attempt=attempt,
                    max_attempts=self.max_attempts,
                    delay=delay,
                )
            await self._sleep(delay)
            attempt += 1
