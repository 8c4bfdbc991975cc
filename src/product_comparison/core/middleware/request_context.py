"""Request context middleware.

This middleware:
- Generates or propagates the X-Request-ID header
- Binds request ID, method and path to the logging context
- Measures processing time and reports it as X-Process-Time
- Logs request start and completion
"""

from __future__ import annotations

import time
import uuid
from typing import TYPE_CHECKING

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from product_comparison.observability.logging import (
    bind_context,
    clear_context,
    get_logger,
)


if TYPE_CHECKING:
    from starlette.requests import Request
    from starlette.responses import Response
    from starlette.types import ASGIApp

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
PROCESS_TIME_HEADER = "X-Process-Time"


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Attach a request ID and timing to every request, and log it."""

    def __init__(
        self,
        app: ASGIApp,
        *,
        exclude_paths: set[str] | None = None,
    ) -> None:
        super().__init__(app)
        self.exclude_paths = exclude_paths or {"/favicon.ico"}

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        """Process request with request ID, timing and logging."""
        clear_context()

        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id
        bind_context(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )

        should_log = request.url.path not in self.exclude_paths
        if should_log:
            logger.info("Request started")

        start = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000

        response.headers[REQUEST_ID_HEADER] = request_id
        response.headers[PROCESS_TIME_HEADER] = f"{elapsed_ms:.2f}ms"

        if should_log:
            logger.info(
                "Request completed",
                status_code=response.status_code,
                duration_ms=round(elapsed_ms, 2),
            )

        return response
