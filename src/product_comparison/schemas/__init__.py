"""API schemas."""

from product_comparison.schemas.base import APIRequest, APIResponse
from product_comparison.schemas.comparison import CompareRequest, ComparisonResponse


__all__ = [
    "APIRequest",
    "APIResponse",
    "CompareRequest",
    "ComparisonResponse",
]
