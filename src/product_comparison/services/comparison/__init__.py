"""Comparison service package.

Compares two product descriptions through a quota-limited text-generation
provider, with a TTL cache and stale-result fallback.
"""

from product_comparison.services.comparison.retry import BackoffDelay, RetryController
from product_comparison.services.comparison.service import ProductComparisonService


__all__ = ["BackoffDelay", "ProductComparisonService", "RetryController"]
