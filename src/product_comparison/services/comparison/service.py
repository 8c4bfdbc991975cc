"""Product comparison service.

Answers a comparison request from cache, from the provider, or from a
stale cache entry when the provider fails.

Per-request flow:
1. Fresh cache hit: return immediately, no permit, no provider call
2. Miss or stale hit: wait for a quota permit, then call the provider
3. Success: cache the structured result for 24 hours and return it
4. Failure: return the cached value if any entry exists, otherwise raise

Quota failures are retried by the RetryController around the whole flow.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import orjson

from product_comparison.cache.store import make_cache_key
from product_comparison.llm.exceptions import (
    GenericProviderError,
    ProviderError,
    QuotaExceededError,
)
from product_comparison.llm.prompts.comparison import ProductComparisonPrompt
from product_comparison.observability.logging import get_logger
from product_comparison.observability.metrics import record_comparison_outcome
from product_comparison.parsing.comparison import ComparisonParser, ComparisonResult
from product_comparison.services.comparison.constants import COMPARISON_CACHE_TTL


if TYPE_CHECKING:
    from datetime import timedelta

    from product_comparison.cache.quota import QuotaLimiter
    from product_comparison.cache.store import CacheEntry, TTLCacheStore
    from product_comparison.llm.client.protocol import ProviderClientProtocol
    from product_comparison.services.comparison.retry import RetryController

logger = get_logger(__name__)


def serialize_result(result: ComparisonResult) -> str:
    """Serialize a parsed comparison as the cached/returned JSON string."""
    return orjson.dumps(
        {"comparisonPoints": result.points, "finalOpinion": result.opinion}
    ).decode()


class ProductComparisonService:
    """Orchestrates cache, quota, provider and retry for comparisons.

    Identical requests arriving together are not coalesced: each one that
    misses the cache takes its own permit and makes its own provider call.
    """

    def __init__(
        self,
        provider: ProviderClientProtocol,
        cache: TTLCacheStore,
        quota: QuotaLimiter,
        retry: RetryController,
        *,
        parser: ComparisonParser | None = None,
        prompt: ProductComparisonPrompt | None = None,
        cache_ttl: timedelta = COMPARISON_CACHE_TTL,
    ) -> None:
        """Initialize the service.

        Args:
            provider: Text-generation provider client.
            cache: Process-wide cache store.
            quota: Process-wide quota limiter.
            retry: Retry controller wrapping each request.
            parser: Response parser (default: ComparisonParser).
            prompt: Prompt builder (default: ProductComparisonPrompt).
            cache_ttl: Freshness window for cached results (default: 24h).
        """
        self._provider = provider
        self._cache = cache
        self._quota = quota
        self._retry = retry
        self._parser = parser or ComparisonParser()
        self._prompt = prompt or ProductComparisonPrompt()
        self._cache_ttl = cache_ttl
        self._initialized = False

    async def initialize(self) -> None:
        """Initialize the provider client.

        Called during application startup.
        """
        await self._provider.initialize()
        self._initialized = True
        logger.info("ProductComparisonService initialized")

    async def shutdown(self) -> None:
        """Stop quota replenishment and close the provider client.

        Called during application shutdown.
        """
        await self._quota.shutdown()
        await self._provider.shutdown()
        self._initialized = False
        logger.info("ProductComparisonService shutdown")

    @property
    def quota(self) -> QuotaLimiter:
        return self._quota

    async def compare_products(self, first: str, second: str) -> str:
        """Compare two product descriptions.

        Args:
            first: First product description.
            second: Second product description.

        Returns:
            JSON string ``{"comparisonPoints": [...], "finalOpinion": "..."}``.

        Raises:
            QuotaExceededError: Quota still exhausted after all attempts and
                nothing cached for this pair.
            ProviderError: Any other provider failure with nothing cached.
        """
        return await self._retry.run(lambda: self._compare_once(first, second))

    async def _compare_once(self, first: str, second: str) -> str:
        """Run a single attempt of the cache/quota/provider flow."""
        cache_key = make_cache_key(first, second)

        cached = self._cache.get(cache_key)
        if cached is not None and self._cache.is_fresh(cached):
            logger.info("Returning cached comparison", first=first, second=second)
            record_comparison_outcome("fresh_hit")
            return cached.value

        await self._quota.acquire()

        try:
            value = await self._call_provider(first, second)
        except QuotaExceededError as e:
            self._retry.record_hint(e.retry_delay)
            return self._fallback_or_raise(cached, e, first, second)
        except ProviderError as e:
            return self._fallback_or_raise(cached, e, first, second)
        except Exception as e:
            logger.exception("Unexpected comparison failure")
            error = GenericProviderError("Comparison failed")
            error.__cause__ = e
            return self._fallback_or_raise(cached, error, first, second)

        self._cache.put(cache_key, value, self._cache_ttl)
        record_comparison_outcome("provider")
        return value

    async def _call_provider(self, first: str, second: str) -> str:
        prompt = self._prompt.format(first=first, second=second)
        raw_text = await self._provider.send(prompt)
        result = self._parser.parse(raw_text)
        logger.info(
            "Generated comparison",
            points=len(result.points),
            has_opinion=bool(result.opinion),
        )
        return serialize_result(result)

    def _fallback_or_raise(
        self,
        cached: CacheEntry | None,
        error: ProviderError,
        first: str,
        second: str,
    ) -> str:
        """Return the cached value unchanged, or raise ``error``."""
        if cached is not None:
            logger.warning(
                "Provider call failed, returning expired cached result",
                first=first,
                second=second,
                error_type=type(error).__name__,
            )
            record_comparison_outcome("stale_fallback")
            return cached.value

        logger.error(
            "Provider call failed with no cached result",
            first=first,
            second=second,
            error_type=type(error).__name__,
            error=str(error),
        )
        record_comparison_outcome("error")
        raise error
