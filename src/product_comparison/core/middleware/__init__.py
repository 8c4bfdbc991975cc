"""Custom middleware components."""

from product_comparison.core.middleware.request_context import RequestContextMiddleware


__all__ = [
    "RequestContextMiddleware",
]
