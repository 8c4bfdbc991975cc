"""Product comparison endpoint."""

from __future__ import annotations

from typing import Annotated, Final

from fastapi import APIRouter, Body, Depends, Response, status
from pydantic import ValidationError

from product_comparison.api.dependencies import get_comparison_service
from product_comparison.core.exceptions import ValidationException
from product_comparison.llm.exceptions import ProviderError
from product_comparison.observability.logging import get_logger
from product_comparison.schemas.comparison import CompareRequest, ComparisonResponse
from product_comparison.services.comparison import (
    ProductComparisonService,  # noqa: TC001
)


logger = get_logger(__name__)

router = APIRouter(tags=["Comparison"])

EXACTLY_TWO_MESSAGE: Final[str] = "Exactly 2 product descriptions are required."


@router.post(
    "/compare",
    response_model=ComparisonResponse,
    summary="Compare two products",
    description=(
        "Compares two product descriptions using a text-generation provider. "
        "Results are cached for 24 hours; when the provider is unavailable or "
        "rate limited, a previously cached result is returned if one exists."
    ),
    responses={
        400: {
            "description": "Not exactly two product descriptions",
            "content": {
                "application/json": {
                    "example": {
                        "error": "VALIDATION_ERROR",
                        "message": EXACTLY_TWO_MESSAGE,
                    }
                }
            },
        },
        500: {"description": "Comparison failed (empty body)"},
        503: {"description": "Service unavailable"},
    },
)
async def compare_products(
    service: Annotated[ProductComparisonService, Depends(get_comparison_service)],
    request_body: Annotated[CompareRequest | None, Body()] = None,
) -> ComparisonResponse | Response:
    """Compare two product descriptions.

    Args:
        service: The comparison service.
        request_body: Request containing the two product descriptions.
            A missing or null body counts as zero descriptions.

    Returns:
        ComparisonResponse with comparison points and final opinion, or an
        empty 500 response if the comparison fails.

    Raises:
        ValidationException: 400 if there are not exactly two descriptions.
    """
    descriptions = request_body.product_descriptions if request_body else None
    if descriptions is None or len(descriptions) != 2:
        raise ValidationException(EXACTLY_TWO_MESSAGE)

    first, second = descriptions
    try:
        raw = await service.compare_products(first, second)
        return ComparisonResponse.model_validate_json(raw)
    except (ProviderError, ValidationError) as e:
        logger.opt(exception=e).error(
            "Error comparing products",
            error_type=type(e).__name__,
            error=str(e),
        )
        return Response(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)
