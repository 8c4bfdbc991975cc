"""FastAPI dependencies for service access.

Services are initialized during application startup and stored in app.state.
"""

from __future__ import annotations

from fastapi import Request

from product_comparison.core.exceptions import ServiceUnavailableException
from product_comparison.services.comparison import ProductComparisonService


async def get_comparison_service(request: Request) -> ProductComparisonService:
    """Get the comparison service from app state.

    Args:
        request: The incoming request.

    Returns:
        Initialized ProductComparisonService.

    Raises:
        ServiceUnavailableException: 503 if the service is not initialized.
    """
    service: ProductComparisonService | None = getattr(
        request.app.state, "comparison_service", None
    )
    if service is None:
        raise ServiceUnavailableException("Product comparison service not available")
    return service
