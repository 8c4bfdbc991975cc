"""Fixed-window quota limiter for provider calls.

Provides a shared pool of permits that is topped back up to full capacity
once per period. This mirrors tier-based provider quotas ("N requests per
minute"), including the burst of admissions at each window boundary.
"""

from __future__ import annotations

import asyncio
import contextlib
import time

from product_comparison.observability.logging import get_logger
from product_comparison.observability.metrics import set_quota_available


logger = get_logger(__name__)


class QuotaLimiter:
    """Global pool of ``capacity`` permits replenished every ``period`` seconds.

    ``acquire`` suspends the caller until a permit is available and then
    consumes it. Permits are never handed back; the replenishment task resets
    ``available`` to ``capacity`` at the end of every period, however many
    permits were used or however many callers are waiting. The
    ``product_comparison_quota_available`` gauge tracks ``available``.

    The replenishment task is started on construction, so the limiter must be
    created inside a running event loop. Call ``shutdown`` to cancel it.

    Attributes:
        capacity: Maximum number of permits per period.
        period: Replenishment period in seconds.
    """

    def __init__(self, capacity: int = 6, period: float = 60.0) -> None:
        """Initialize the limiter with a full pool and start replenishment.

        Args:
            capacity: Permits available per period (default: 6).
            period: Replenishment period in seconds (default: 60).

        Raises:
            ValueError: If capacity or period is not positive.
            RuntimeError: If no event loop is running.
        """
        if capacity < 1:
            msg = f"capacity must be positive, got {capacity}"
            raise ValueError(msg)
        if period <= 0:
            msg = f"period must be positive, got {period}"
            raise ValueError(msg)

        self.capacity = capacity
        self.period = period
        self._available = capacity
        self._last_replenished = time.monotonic()
        self._condition = asyncio.Condition()
        self._task: asyncio.Task[None] | None = asyncio.get_running_loop().create_task(
            self._replenish_loop(),
            name="quota-limiter-replenish",
        )
        set_quota_available(capacity)
        logger.info("QuotaLimiter started", capacity=capacity, period=period)

    @property
    def available(self) -> int:
        """Permits left in the current period."""
        return self._available

    @property
    def last_replenished(self) -> float:
        """Monotonic timestamp of the last top-up."""
        return self._last_replenished

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def acquire(self) -> None:
        """Wait for a permit and consume it.

        A caller cancelled while waiting leaves ``available`` untouched.
        """
        async with self._condition:
            await self._condition.wait_for(lambda: self._available > 0)
            self._available -= 1
            set_quota_available(self._available)

    async def replenish(self) -> None:
        """Top the pool back up to ``capacity`` and wake waiters."""
        async with self._condition:
            used = self.capacity - self._available
            self._available = self.capacity
            self._last_replenished = time.monotonic()
            set_quota_available(self._available)
            self._condition.notify_all()
        if used:
            logger.debug("Quota replenished", used=used, capacity=self.capacity)

    async def _replenish_loop(self) -> None:
        while True:
            await asyncio.sleep(self.period)
            await self.replenish()

    async def shutdown(self) -> None:
        """Cancel the replenishment task."""
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
        logger.debug("QuotaLimiter shutdown")
