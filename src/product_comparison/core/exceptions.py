"""HTTP-boundary exceptions and their handlers.

Request-shape problems are answered with a JSON error envelope. Anything
that escapes an endpoint is logged in full and answered with an empty 500,
so provider messages and stack details never reach the client.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import FastAPI, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import ORJSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from product_comparison.observability.logging import get_logger


if TYPE_CHECKING:
    from fastapi import Request

logger = get_logger(__name__)


class ErrorDetail(BaseModel):
    """One field-level problem inside an error envelope."""

    code: str
    message: str
    field: str | None = None


class ErrorResponse(BaseModel):
    """JSON error envelope returned for 4xx and 503 responses."""

    error: str
    message: str
    details: list[ErrorDetail] | None = None
    request_id: str | None = None


class AppException(Exception):
    """Exception carrying its own HTTP status and envelope fields."""

    def __init__(
        self,
        status_code: int,
        error: str,
        message: str,
        details: list[ErrorDetail] | None = None,
    ) -> None:
        self.status_code = status_code
        self.error = error
        self.message = message
        self.details = details
        super().__init__(message)


class ValidationException(AppException):
    """Malformed request shape, answered as a 400."""

    def __init__(self, message: str) -> None:
        super().__init__(status.HTTP_400_BAD_REQUEST, "VALIDATION_ERROR", message)


class ServiceUnavailableException(AppException):
    """A required component is not running, answered as a 503."""

    def __init__(self, message: str = "Service temporarily unavailable") -> None:
        super().__init__(
            status.HTTP_503_SERVICE_UNAVAILABLE, "SERVICE_UNAVAILABLE", message
        )


def _envelope(
    request: Request,
    status_code: int,
    error: str,
    message: str,
    details: list[ErrorDetail] | None = None,
) -> ORJSONResponse:
    body = ErrorResponse(
        error=error,
        message=message,
        details=details,
        request_id=getattr(request.state, "request_id", None),
    )
    return ORJSONResponse(status_code=status_code, content=body.model_dump())


def setup_exception_handlers(app: FastAPI) -> None:
    """Register the envelope handlers and the empty-500 fallback."""

    @app.exception_handler(AppException)
    async def handle_app_exception(
        request: Request,
        exc: AppException,
    ) -> ORJSONResponse:
        return _envelope(request, exc.status_code, exc.error, exc.message, exc.details)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(
        request: Request,
        exc: StarletteHTTPException,
    ) -> ORJSONResponse:
        return _envelope(request, exc.status_code, "HTTP_ERROR", str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(
        request: Request,
        exc: RequestValidationError,
    ) -> ORJSONResponse:
        """Report each schema violation with its dotted location."""
        details = [
            ErrorDetail(
                code="VALIDATION_ERROR",
                message=problem["msg"],
                field=".".join(str(part) for part in problem["loc"]),
            )
            for problem in exc.errors()
        ]
        return _envelope(
            request,
            status.HTTP_422_UNPROCESSABLE_ENTITY,
            "VALIDATION_ERROR",
            "Request validation failed",
            details,
        )

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> Response:
        logger.opt(exception=exc).error(
            "Unhandled exception",
            request_id=getattr(request.state, "request_id", None),
        )
        return Response(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)
