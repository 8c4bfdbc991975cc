"""Constants for the comparison service.

Contains:
- Cache configuration for comparison results
- Default retry parameters
"""

from __future__ import annotations

from datetime import timedelta
from typing import Final


# =============================================================================
# Cache Configuration
# =============================================================================

COMPARISON_CACHE_TTL: Final[timedelta] = timedelta(hours=24)


# =============================================================================
# Retry
# =============================================================================

DEFAULT_MAX_ATTEMPTS: Final[int] = 3
DEFAULT_RETRY_DELAY_SECONDS: Final[float] = 30.0
