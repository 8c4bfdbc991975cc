"""Application entry point.

Usage:
    # Development with auto-reload
    uvicorn product_comparison.main:app --reload

    # Production
    product-comparison
"""

from product_comparison.factory import create_app


app = create_app()


def run() -> None:
    """Run the service with uvicorn using configured host and port."""
    import uvicorn

    from product_comparison.core.config import get_settings

    settings = get_settings()

    uvicorn.run(
        "product_comparison.main:app",
        host=settings.server.host,
        port=settings.server.port,
        reload=settings.is_development,
        log_level=settings.logging.level.lower(),
    )


if __name__ == "__main__":
    run()
