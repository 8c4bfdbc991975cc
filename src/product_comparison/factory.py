"""Builds the FastAPI application for the comparison service."""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from product_comparison.api.v1.router import router as api_router
from product_comparison.core.config import Settings, get_settings
from product_comparison.core.events import lifespan
from product_comparison.core.exceptions import setup_exception_handlers
from product_comparison.core.middleware import RequestContextMiddleware
from product_comparison.observability.metrics import setup_metrics, unmonitored_paths


def create_app(settings: Settings | None = None) -> FastAPI:
    """Return a configured application.

    The comparison service itself is attached by the lifespan on startup,
    so tests may pass their own ``settings`` and set
    ``app.state.comparison_service`` directly.
    """
    settings = settings or get_settings()
    show_docs = not settings.is_production

    app = FastAPI(
        title=settings.app.name,
        version=settings.app.version,
        description="Compares two products through a quota-limited LLM provider",
        debug=settings.app.debug,
        lifespan=lifespan,
        docs_url="/docs" if show_docs else None,
        openapi_url="/openapi.json" if show_docs else None,
        redoc_url=None,
    )
    app.state.settings = settings

    setup_exception_handlers(app)
    _add_middleware(app, settings)
    _mount_routes(app, settings)
    setup_metrics(app, settings)
    return app


def _add_middleware(app: FastAPI, settings: Settings) -> None:
    # Last added runs outermost: request context wraps CORS
    origins = [str(origin) for origin in settings.api.cors_origins]
    if origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
            expose_headers=["X-Request-ID", "X-Process-Time"],
        )

    app.add_middleware(
        RequestContextMiddleware,
        exclude_paths=set(unmonitored_paths(settings.api.prefix)),
    )


def _mount_routes(app: FastAPI, settings: Settings) -> None:
    app.include_router(api_router, prefix=settings.api.prefix)

    @app.get("/", include_in_schema=False)
    async def root() -> dict[str, str]:
        return {"service": settings.app.name, "version": settings.app.version}
