"""Loguru sinks for the comparison service.

Production writes one JSON object per line, development writes a colored
single-line layout. Records from the standard library (uvicorn, httpx) are
routed through Loguru so both end up in the same sink, and request-scoped
fields bound with ``bind_context`` are attached to every record.
"""

from __future__ import annotations

import logging
import sys
from contextvars import ContextVar
from typing import TYPE_CHECKING

import orjson
from loguru import logger


if TYPE_CHECKING:
    from typing import Any


_request_fields: ContextVar[dict[str, Any]] = ContextVar(
    "request_fields", default={}
)

_QUIETED = ("uvicorn", "uvicorn.access", "uvicorn.error", "httpx", "httpcore", "asyncio")

_DEV_LAYOUT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> "
    "<level>{level: <8}</level> "
    "<cyan>{name}:{function}:{line}</cyan>"
    "%s | <level>{message}</level>\n"
)


def _escape(text: str) -> str:
    # Loguru formats the returned string again
    return text.replace("{", "{{").replace("}", "}}")


class InterceptHandler(logging.Handler):
    """Standard library handler that re-emits through Loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        caller, depth = logging.currentframe(), 2
        while caller is not None and caller.f_code.co_filename == logging.__file__:
            caller = caller.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )


def _format_record(record: dict[str, Any]) -> str:
    """Render a record as a JSON line."""
    extra = record["extra"]
    extra.update(_request_fields.get())

    payload: dict[str, Any] = {
        "timestamp": record["time"].isoformat(),
        "level": record["level"].name,
        "logger": extra.get("name", record["name"]),
        "function": record["function"],
        "line": record["line"],
        "message": record["message"],
    }
    payload.update(extra)

    failure = record["exception"]
    if failure:
        payload["exception"] = {
            "type": failure.type.__name__ if failure.type else None,
            "value": str(failure.value) if failure.value else None,
        }

    return _escape(orjson.dumps(payload, default=str).decode()) + "\n"


def _format_record_dev(record: dict[str, Any]) -> str:
    """Return the colored layout, with bound fields after the location."""
    fields = _request_fields.get()
    suffix = ""
    if fields:
        suffix = _escape(" " + " ".join(f"{key}={value}" for key, value in fields.items()))

    layout = _DEV_LAYOUT % suffix
    if record["exception"]:
        layout += "{exception}\n"
    return layout


def setup_logging(
    log_level: str = "INFO",
    log_format: str = "json",
    *,
    is_development: bool = False,
) -> None:
    """Replace Loguru's default sink and capture standard library logging.

    ``log_format="json"`` applies only outside development; development
    always gets the colored layout with full diagnostics.
    """
    structured = log_format == "json" and not is_development
    sink_options: dict[str, Any] = (
        {"format": _format_record, "colorize": False, "diagnose": False}
        if structured
        else {"format": _format_record_dev, "colorize": True, "diagnose": True}
    )

    logger.remove()
    logger.add(sys.stdout, level=log_level.upper(), backtrace=True, **sink_options)

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for name in _QUIETED:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> "logger":  # type: ignore[valid-type]
    """Loguru logger tagged with ``name`` (usually the module's ``__name__``)."""
    return logger.bind(name=name)


def bind_context(**kwargs: Any) -> None:
    """Attach fields to every record logged from the current task.

    Example:
        bind_context(request_id="abc-123", path="/api/compare")
    """
    _request_fields.set({**_request_fields.get(), **kwargs})


def clear_context() -> None:
    """Drop all fields bound in the current task."""
    _request_fields.set({})


def get_context() -> dict[str, Any]:
    """Snapshot of the fields bound in the current task."""
    return dict(_request_fields.get())


__all__ = [
    "bind_context",
    "clear_context",
    "get_context",
    "get_logger",
    "logger",
    "setup_logging",
]
