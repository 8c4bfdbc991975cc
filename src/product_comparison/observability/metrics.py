"""Prometheus collectors for HTTP traffic, comparison outcomes and quota."""

from __future__ import annotations

from typing import TYPE_CHECKING

from prometheus_client import Counter, Gauge
from prometheus_fastapi_instrumentator import Instrumentator, metrics

from product_comparison.observability.logging import get_logger


if TYPE_CHECKING:
    from fastapi import FastAPI

    from product_comparison.core.config import Settings

logger = get_logger(__name__)

METRIC_NAMESPACE = "product_comparison"

COMPARISON_OUTCOMES = Counter(
    "requests_total",
    "Comparison requests by how they were answered",
    labelnames=("outcome",),
    namespace=METRIC_NAMESPACE,
)

QUOTA_AVAILABLE = Gauge(
    "quota_available",
    "Provider quota permits left in the current window",
    namespace=METRIC_NAMESPACE,
)


def record_comparison_outcome(outcome: str) -> None:
    """Count a comparison outcome (fresh_hit, provider, stale_fallback, error)."""
    COMPARISON_OUTCOMES.labels(outcome=outcome).inc()


def set_quota_available(available: int) -> None:
    QUOTA_AVAILABLE.set(available)


def unmonitored_paths(prefix: str) -> list[str]:
    """Probe and scrape routes kept out of request metrics and request logs."""
    return [f"{prefix}/{name}" for name in ("health", "ready", "metrics")]


def setup_metrics(app: FastAPI, settings: Settings) -> Instrumentator:
    """Instrument ``app`` and mount the scrape route under the API prefix.

    When metrics are disabled an idle instrumentator is returned and the
    app is left untouched.
    """
    if not settings.observability.metrics.enabled:
        logger.info("Metrics collection disabled")
        return Instrumentator()

    scrape_path = f"{settings.api.prefix}/metrics"
    instrumentator = Instrumentator(
        excluded_handlers=unmonitored_paths(settings.api.prefix),
        should_group_status_codes=True,
        should_ignore_untemplated=True,
        should_instrument_requests_inprogress=True,
        inprogress_name="http_requests_inprogress",
        inprogress_labels=True,
    )
    instrumentator.add(
        metrics.default(
            metric_namespace=METRIC_NAMESPACE,
            metric_subsystem="http",
            should_only_respect_2xx_for_highr=False,
        )
    )
    instrumentator.instrument(app)
    instrumentator.expose(
        app, endpoint=scrape_path, include_in_schema=True, tags=["Monitoring"]
    )

    logger.info("Prometheus metrics configured", endpoint=scrape_path)
    return instrumentator


__all__ = [
    "record_comparison_outcome",
    "set_quota_available",
    "setup_metrics",
    "unmonitored_paths",
]
