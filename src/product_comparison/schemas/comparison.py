"""Comparison request/response schemas."""

from __future__ import annotations

from pydantic import Field

from product_comparison.schemas.base import APIRequest, APIResponse


class CompareRequest(APIRequest):
    """Request body for POST /compare.

    The item count is checked by the endpoint, not here, so that a wrong
    count yields the fixed 400 message instead of a 422.
    """

    product_descriptions: list[str] | None = Field(
        default=None,
        description="Exactly two product descriptions to compare",
        examples=[["iPhone 15", "Galaxy S24"]],
    )


class ComparisonResponse(APIResponse):
    """Structured comparison returned to the client."""

    comparison_points: list[str] = Field(
        default_factory=list,
        description="Key differences, in the order the provider listed them",
    )
    final_opinion: str = Field(
        default="",
        description="Closing recommendation",
    )
