"""Startup and shutdown of the comparison service.

Startup configures logging and builds the service, which opens the Gemini
HTTP client and starts quota replenishment. Shutdown undoes both.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import timedelta
from typing import TYPE_CHECKING

from product_comparison.cache.quota import QuotaLimiter
from product_comparison.cache.store import TTLCacheStore
from product_comparison.llm.client.gemini import GeminiClient
from product_comparison.observability.logging import get_logger, setup_logging
from product_comparison.services.comparison import (
    BackoffDelay,
    ProductComparisonService,
    RetryController,
)


if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from fastapi import FastAPI

    from product_comparison.core.config import Settings

logger = get_logger(__name__)


async def build_comparison_service(settings: Settings) -> ProductComparisonService:
    """Create the process-wide comparison service from settings.

    Must be awaited inside the running event loop, since the quota limiter
    starts its replenishment task on construction.

    Raises:
        ProviderConfigurationError: If the Gemini API key is missing.
    """
    provider = GeminiClient(
        api_key=settings.GEMINI_API_KEY,
        model=settings.provider.model,
        api_version=settings.provider.api_version,
        base_url=settings.provider.base_url,
        timeout=settings.provider.timeout,
    )
    quota = QuotaLimiter(
        capacity=settings.quota.capacity,
        period=settings.quota.period_seconds,
    )
    retry = RetryController(
        max_attempts=settings.retry.max_attempts,
        backoff=BackoffDelay(settings.retry.default_delay_seconds),
    )
    service = ProductComparisonService(
        provider=provider,
        cache=TTLCacheStore(),
        quota=quota,
        retry=retry,
        cache_ttl=timedelta(seconds=settings.cache.ttl_seconds),
    )
    try:
        await service.initialize()
    except Exception:
        await quota.shutdown()
        raise
    return service


async def _startup(app: FastAPI, settings: Settings) -> None:
    setup_logging(
        log_level=settings.logging.level,
        log_format=settings.logging.format,
        is_development=settings.is_development,
    )

    logger.info(
        "Starting comparison service",
        app_name=settings.app.name,
        environment=settings.APP_ENV,
        debug=settings.app.debug,
    )

    try:
        app.state.comparison_service = await build_comparison_service(settings)
    except Exception:
        logger.exception("Comparison service could not be built; aborting startup")
        raise

    logger.info(
        "Application startup complete",
        model=settings.provider.model,
        api_version=settings.provider.api_version,
        quota_capacity=settings.quota.capacity,
        quota_period=settings.quota.period_seconds,
    )


async def _shutdown(app: FastAPI) -> None:
    logger.info("Stopping comparison service")

    service: ProductComparisonService | None = getattr(
        app.state, "comparison_service", None
    )
    if service is not None:
        await service.shutdown()
        app.state.comparison_service = None

    logger.info("Comparison service stopped")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Start up from ``app.state.settings``, serve, then always shut down."""
    await _startup(app, app.state.settings)
    try:
        yield
    finally:
        await _shutdown(app)
