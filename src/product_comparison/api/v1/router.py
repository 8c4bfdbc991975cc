"""API router aggregating all endpoint routers.

All endpoints are mounted under the configured API prefix (default /api).
"""

from __future__ import annotations

from fastapi import APIRouter

from product_comparison.api.v1.endpoints import compare, health


router = APIRouter()

router.include_router(health.router)
router.include_router(compare.router)
