"""Application lifecycle events."""

from product_comparison.core.events.lifespan import build_comparison_service, lifespan


__all__ = ["build_comparison_service", "lifespan"]
