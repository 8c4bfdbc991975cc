"""Unit tests for ProductComparisonService.

Tests cover:
- Service lifecycle
- Fresh cache hits
- Provider calls and cache writes
- Stale fallback for every provider error kind
- Quota retry with provider delay hints
"""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock

import orjson
import pytest

from product_comparison.cache.store import TTLCacheStore, make_cache_key
from product_comparison.llm.exceptions import (
    GenericProviderError,
    ParseError,
    ProviderUnavailableError,
    QuotaExceededError,
)
from product_comparison.parsing.comparison import ComparisonResult
from product_comparison.services.comparison.retry import BackoffDelay, RetryController
from product_comparison.services.comparison.service import (
    ProductComparisonService,
    serialize_result,
)


pytestmark = pytest.mark.unit

FIRST = "iPhone 15"
SECOND = "Galaxy S24"
DAY = timedelta(hours=24)


class FakeClock:
    """Settable UTC clock for the cache store."""

    def __init__(self) -> None:
        self.now = datetime(2024, 1, 15, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now += delta


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock: FakeClock) -> TTLCacheStore:
    """Real cache store driven by the fake clock."""
    return TTLCacheStore(clock=clock)


@pytest.fixture
def mock_quota() -> MagicMock:
    """Quota limiter that always grants a permit immediately."""
    quota = MagicMock()
    quota.acquire = AsyncMock()
    quota.shutdown = AsyncMock()
    quota.available = 5
    return quota


@pytest.fixture
def sleep() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def retry(sleep: AsyncMock) -> RetryController:
    """Three-attempt controller with a 30 second default delay and no real sleep."""
    return RetryController(max_attempts=3, backoff=BackoffDelay(30.0), sleep=sleep)


@pytest.fixture
def service(
    mock_provider: MagicMock,
    cache: TTLCacheStore,
    mock_quota: MagicMock,
    retry: RetryController,
) -> ProductComparisonService:
    """Service wired to a mock provider and a real cache."""
    return ProductComparisonService(
        provider=mock_provider,
        cache=cache,
        quota=mock_quota,
        retry=retry,
    )


def _seed(
    cache: TTLCacheStore,
    value: str = '{"cached":true}',
    ttl: timedelta = DAY,
) -> str:
    cache.put(make_cache_key(FIRST, SECOND), value, ttl)
    return value


class TestSerializeResult:
    """Tests for serialize_result."""

    def test_uses_camel_case_keys(self) -> None:
        """Should emit comparisonPoints and finalOpinion."""
        result = ComparisonResult(points=["a", "b"], opinion="pick a")

        assert orjson.loads(serialize_result(result)) == {
            "comparisonPoints": ["a", "b"],
            "finalOpinion": "pick a",
        }


class TestServiceLifecycle:
    """Tests for initialize and shutdown."""

    async def test_initialize_initializes_provider(
        self, service: ProductComparisonService, mock_provider: MagicMock
    ) -> None:
        await service.initialize()

        mock_provider.initialize.assert_awaited_once()

    async def test_shutdown_stops_quota_and_provider(
        self,
        service: ProductComparisonService,
        mock_provider: MagicMock,
        mock_quota: MagicMock,
    ) -> None:
        await service.shutdown()

        mock_quota.shutdown.assert_awaited_once()
        mock_provider.shutdown.assert_awaited_once()

    def test_exposes_quota(
        self, service: ProductComparisonService, mock_quota: MagicMock
    ) -> None:
        assert service.quota is mock_quota


class TestCompareProducts:
    """Tests for the cache and provider path."""

    async def test_first_call_invokes_provider_and_caches(
        self,
        service: ProductComparisonService,
        mock_provider: MagicMock,
        cache: TTLCacheStore,
    ) -> None:
        """A miss should call the provider once and store the structured result."""
        raw = await service.compare_products(FIRST, SECOND)

        body = orjson.loads(raw)
        assert body["comparisonPoints"] == [
            "The iPhone 15 uses the A16 Bionic chip.",
            "The Galaxy S24 has 8GB of RAM versus 6GB.",
            "The iPhone 15 has a 6.1 inch display.",
        ]
        assert body["finalOpinion"] == (
            "The Galaxy S24 is the better value for multitasking."
        )
        mock_provider.send.assert_awaited_once()
        entry = cache.get(make_cache_key(FIRST, SECOND))
        assert entry is not None
        assert entry.value == raw

    async def test_prompt_names_both_products(
        self, service: ProductComparisonService, mock_provider: MagicMock
    ) -> None:
        await service.compare_products(FIRST, SECOND)

        prompt = mock_provider.send.await_args.args[0]
        assert "(1) iPhone 15 vs (2) Galaxy S24" in prompt

    async def test_second_call_within_ttl_is_served_from_cache(
        self,
        service: ProductComparisonService,
        mock_provider: MagicMock,
        mock_quota: MagicMock,
        clock: FakeClock,
    ) -> None:
        """A fresh hit should be byte-identical and skip quota and provider."""
        first = await service.compare_products(FIRST, SECOND)
        clock.advance(timedelta(hours=23))

        second = await service.compare_products(FIRST, SECOND)

        assert second == first
        mock_provider.send.assert_awaited_once()
        mock_quota.acquire.assert_awaited_once()

    async def test_cache_key_ignores_case_and_whitespace(
        self, service: ProductComparisonService, mock_provider: MagicMock
    ) -> None:
        await service.compare_products(FIRST, SECOND)

        await service.compare_products("  IPHONE 15", "galaxy s24 ")

        mock_provider.send.assert_awaited_once()

    async def test_swapped_order_is_a_different_entry(
        self, service: ProductComparisonService, mock_provider: MagicMock
    ) -> None:
        await service.compare_products(FIRST, SECOND)

        await service.compare_products(SECOND, FIRST)

        assert mock_provider.send.await_count == 2

    async def test_expired_entry_is_refreshed(
        self,
        service: ProductComparisonService,
        mock_provider: MagicMock,
        cache: TTLCacheStore,
        clock: FakeClock,
    ) -> None:
        """After the TTL a successful call should overwrite the entry."""
        await service.compare_products(FIRST, SECOND)
        created = cache.get(make_cache_key(FIRST, SECOND)).created_at
        clock.advance(DAY + timedelta(seconds=1))
        mock_provider.send.return_value = (
            "- Point 1: Updated point.\nFinal Opinion: Updated opinion."
        )

        raw = await service.compare_products(FIRST, SECOND)

        assert mock_provider.send.await_count == 2
        assert orjson.loads(raw) == {
            "comparisonPoints": ["Updated point."],
            "finalOpinion": "Updated opinion.",
        }
        entry = cache.get(make_cache_key(FIRST, SECOND))
        assert entry.value == raw
        assert entry.created_at > created

    async def test_nonconforming_text_yields_empty_fields(
        self, service: ProductComparisonService, mock_provider: MagicMock
    ) -> None:
        """Free-form text should parse to empty fields, not an error."""
        mock_provider.send.return_value = "I cannot compare these products."

        raw = await service.compare_products(FIRST, SECOND)

        assert orjson.loads(raw) == {"comparisonPoints": [], "finalOpinion": ""}

    async def test_identical_concurrent_requests_are_not_coalesced(
        self, service: ProductComparisonService, mock_provider: MagicMock
    ) -> None:
        """Two simultaneous misses for one key should both call the provider."""
        await asyncio.gather(
            service.compare_products(FIRST, SECOND),
            service.compare_products(FIRST, SECOND),
        )

        assert mock_provider.send.await_count == 2

    async def test_cancelled_request_writes_nothing(
        self,
        service: ProductComparisonService,
        mock_provider: MagicMock,
        cache: TTLCacheStore,
    ) -> None:
        """Cancelling during the provider call should leave the cache empty."""
        sending = asyncio.Event()

        async def slow_send(_prompt: str) -> str:
            sending.set()
            await asyncio.Event().wait()
            return ""

        mock_provider.send = AsyncMock(side_effect=slow_send)

        task = asyncio.create_task(service.compare_products(FIRST, SECOND))
        await sending.wait()
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task
        assert len(cache) == 0


class TestFallback:
    """Tests for stale-entry fallback and error propagation."""

    @pytest.mark.parametrize(
        "error",
        [
            QuotaExceededError("quota", retry_delay=None),
            ProviderUnavailableError("model not found"),
            ParseError("No candidates in response"),
            GenericProviderError("500 from provider"),
        ],
    )
    async def test_returns_stale_value_on_provider_error(
        self,
        service: ProductComparisonService,
        mock_provider: MagicMock,
        cache: TTLCacheStore,
        clock: FakeClock,
        sleep: AsyncMock,
        error: Exception,
    ) -> None:
        """Any provider failure with a stale entry should return it unchanged."""
        stale = _seed(cache)
        clock.advance(timedelta(days=3))
        mock_provider.send.side_effect = error

        result = await service.compare_products(FIRST, SECOND)

        assert result == stale
        mock_provider.send.assert_awaited_once()
        sleep.assert_not_awaited()

    async def test_stale_fallback_does_not_rewrite_cache(
        self,
        service: ProductComparisonService,
        mock_provider: MagicMock,
        cache: TTLCacheStore,
        clock: FakeClock,
    ) -> None:
        _seed(cache)
        original = cache.get(make_cache_key(FIRST, SECOND))
        clock.advance(timedelta(days=3))
        mock_provider.send.side_effect = ProviderUnavailableError("down")

        await service.compare_products(FIRST, SECOND)

        assert cache.get(make_cache_key(FIRST, SECOND)) is original

    async def test_parse_error_without_entry_propagates(
        self,
        service: ProductComparisonService,
        mock_provider: MagicMock,
        cache: TTLCacheStore,
    ) -> None:
        """A malformed response with nothing cached should raise ParseError."""
        mock_provider.send.side_effect = ParseError("No candidates in response")

        with pytest.raises(ParseError):
            await service.compare_products(FIRST, SECOND)

        mock_provider.send.assert_awaited_once()
        assert len(cache) == 0

    async def test_unavailable_without_entry_is_not_retried(
        self, service: ProductComparisonService, mock_provider: MagicMock
    ) -> None:
        mock_provider.send.side_effect = ProviderUnavailableError("down")

        with pytest.raises(ProviderUnavailableError):
            await service.compare_products(FIRST, SECOND)

        mock_provider.send.assert_awaited_once()

    async def test_unexpected_error_wrapped_as_generic(
        self, service: ProductComparisonService, mock_provider: MagicMock
    ) -> None:
        """Non-provider exceptions should surface as GenericProviderError."""
        cause = RuntimeError("boom")
        mock_provider.send.side_effect = cause

        with pytest.raises(GenericProviderError) as exc_info:
            await service.compare_products(FIRST, SECOND)

        assert exc_info.value.__cause__ is cause

    async def test_unexpected_error_falls_back_to_stale(
        self,
        service: ProductComparisonService,
        mock_provider: MagicMock,
        cache: TTLCacheStore,
    ) -> None:
        stale = _seed(cache, ttl=timedelta(0))
        mock_provider.send.side_effect = RuntimeError("boom")

        assert await service.compare_products(FIRST, SECOND) == stale


class TestQuotaRetry:
    """Tests for quota exhaustion and retry pacing."""

    async def test_retries_then_succeeds(
        self,
        service: ProductComparisonService,
        mock_provider: MagicMock,
        mock_quota: MagicMock,
        sample_provider_text: str,
        sleep: AsyncMock,
    ) -> None:
        """A quota error with nothing cached should be retried."""
        mock_provider.send.side_effect = [
            QuotaExceededError("quota", retry_delay=None),
            sample_provider_text,
        ]

        raw = await service.compare_products(FIRST, SECOND)

        assert orjson.loads(raw)["comparisonPoints"]
        assert mock_provider.send.await_count == 2
        assert mock_quota.acquire.await_count == 2
        sleep.assert_awaited_once_with(30.0)

    async def test_gives_up_after_three_attempts(
        self,
        service: ProductComparisonService,
        mock_provider: MagicMock,
        cache: TTLCacheStore,
        sleep: AsyncMock,
    ) -> None:
        """Persistent quota errors should surface after three attempts."""
        mock_provider.send.side_effect = QuotaExceededError("quota", retry_delay=45.0)

        with pytest.raises(QuotaExceededError):
            await service.compare_products(FIRST, SECOND)

        assert mock_provider.send.await_count == 3
        assert [c.args[0] for c in sleep.await_args_list] == [45.0, 45.0]
        assert len(cache) == 0

    async def test_hint_paces_other_requests(
        self,
        mock_provider: MagicMock,
        cache: TTLCacheStore,
        mock_quota: MagicMock,
        sample_provider_text: str,
        sleep: AsyncMock,
    ) -> None:
        """A hint from one request should set the delay for every request."""
        backoff = BackoffDelay(30.0)
        service = ProductComparisonService(
            provider=mock_provider,
            cache=cache,
            quota=mock_quota,
            retry=RetryController(max_attempts=3, backoff=backoff, sleep=sleep),
        )
        mock_provider.send.side_effect = [
            QuotaExceededError("quota", retry_delay=45.0),
            sample_provider_text,
            QuotaExceededError("quota", retry_delay=None),
            sample_provider_text,
        ]

        await service.compare_products(FIRST, SECOND)
        await service.compare_products("Pixel 8", "OnePlus 12")

        assert backoff.seconds == 45.0
        assert [c.args[0] for c in sleep.await_args_list] == [45.0, 45.0]

    async def test_hint_recorded_even_when_falling_back(
        self,
        service: ProductComparisonService,
        retry: RetryController,
        mock_provider: MagicMock,
        cache: TTLCacheStore,
    ) -> None:
        _seed(cache, "stale", ttl=timedelta(0))
        mock_provider.send.side_effect = QuotaExceededError("quota", retry_delay=12.0)

        assert await service.compare_products(FIRST, SECOND) == "stale"
        assert retry.backoff.seconds == 12.0
