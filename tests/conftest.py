"""Shared test fixtures for the product comparison service tests.

Pins APP_ENV to "test" before any settings are loaded, so the YAML overlay
under config/environments/test applies (text logging, no Prometheus
instrumentation, zero default retry delay).
"""

from __future__ import annotations

import os


os.environ.setdefault("APP_ENV", "test")

from typing import TYPE_CHECKING  # noqa: E402
from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import pytest  # noqa: E402

from product_comparison.core.config import Settings, get_settings  # noqa: E402


if TYPE_CHECKING:
    from collections.abc import Generator


SAMPLE_PROVIDER_TEXT = (
    "- Point 1: The iPhone 15 uses the A16 Bionic chip.\n"
    "- Point 2: The Galaxy S24 has 8GB of RAM versus 6GB.\n"
    "- Point 3: The iPhone 15 has a 6.1 inch display.\n"
    "Final Opinion: The Galaxy S24 is the better value for multitasking."
)


@pytest.fixture(autouse=True)
def _clear_settings_cache() -> Generator[None]:
    """Reload settings for every test so env overrides do not leak."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def test_settings() -> Settings:
    """Settings for the test environment with a dummy API key."""
    return Settings(APP_ENV="test", GEMINI_API_KEY="test-api-key")


@pytest.fixture
def sample_provider_text() -> str:
    """Well-formed provider output with three points and an opinion."""
    return SAMPLE_PROVIDER_TEXT


@pytest.fixture
def mock_provider() -> MagicMock:
    """Provider client whose send() returns well-formed comparison text."""
    provider = MagicMock()
    provider.initialize = AsyncMock()
    provider.shutdown = AsyncMock()
    provider.send = AsyncMock(return_value=SAMPLE_PROVIDER_TEXT)
    return provider
