"""Logging configuration and helpers for the ledger API.

Console-style logging for the whole process plus helpers for binding a
request-scoped correlation ID and building consistent ``extra`` payloads.
Everything uses the standard :mod:`logging` library; the only customization is
the formatter, which renders one line per record with timestamp, level, logger
name, correlation ID and any ``extra`` fields as ``key=value`` pairs.
"""

from __future__ import annotations

import logging
from contextvars import ContextVar
from datetime import UTC, datetime
from typing import Any

from ledger_api.settings import Settings

# Request-scoped correlation ID, set/cleared by RequestContextMiddleware.
_CORRELATION_ID: ContextVar[str | None] = ContextVar(
    "ledger_api_correlation_id",
    default=None,
)

# Attributes already rendered by logging itself.
_STANDARD_ATTRS: set[str] = {
    "name",
    "msg",
    "args",
    "levelname",
    "levelno",
    "pathname",
    "filename",
    "module",
    "exc_info",
    "exc_text",
    "stack_info",
    "lineno",
    "funcName",
    "created",
    "msecs",
    "relativeCreated",
    "thread",
    "threadName",
    "processName",
    "process",
    "message",
    "asctime",
    "correlation_id",
    "taskName",
    "color_message",
}

_CONFIGURED_FLAG = "_ledger_configured"


class ConsoleLogFormatter(logging.Formatter):
    """Render log records as single-line console output.

    Example line:

        2026-10-18T09:12:44.120Z INFO  ledger_api.features.groups.service [cid=5c1d...]
        group.create.success group_id=... scope_id=... user_id=...
    """

    _time_format = "%Y-%m-%dT%H:%M:%S"

    def __init__(self) -> None:
        fmt = "%(asctime)s %(levelname)-5s %(name)s [cid=%(correlation_id)s] %(message)s"
        super().__init__(fmt=fmt, datefmt=self._time_format)

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:
        dt = datetime.fromtimestamp(record.created, tz=UTC)
        base = dt.strftime(datefmt or self._time_format)
        return f"{base}.{int(record.msecs):03d}Z"

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401 - std signature
        record.correlation_id = (
            getattr(record, "correlation_id", None) or _CORRELATION_ID.get() or "-"
        )
        base = super().format(record)

        extras = [
            f"{key}={_format_extra_value(value)}"
            for key, value in record.__dict__.items()
            if key not in _STANDARD_ATTRS and not key.startswith("_")
        ]
        if extras:
            return f"{base} " + " ".join(extras)
        return base


def setup_logging(settings: Settings) -> None:
    """Configure root logging for the API process.

    Installs a single console StreamHandler and sets the root level from
    ``settings.logging_level`` (env: ``LEDGER_LOGGING_LEVEL``). uvicorn,
    alembic and sqlalchemy loggers propagate into the same handler.
    """
    root_logger = logging.getLogger()
    level = getattr(logging, settings.logging_level.upper(), logging.INFO)

    if getattr(root_logger, _CONFIGURED_FLAG, False):
        root_logger.setLevel(level)
        return

    handler = logging.StreamHandler()
    handler.setFormatter(ConsoleLogFormatter())
    root_logger.handlers = [handler]
    root_logger.setLevel(level)

    for name in (
        "uvicorn",
        "uvicorn.error",
        "uvicorn.access",
        "alembic",
        "alembic.runtime.migration",
        "sqlalchemy",
    ):
        logger = logging.getLogger(name)
        logger.handlers.clear()
        logger.propagate = True

    setattr(root_logger, _CONFIGURED_FLAG, True)


def bind_request_context(correlation_id: str | None) -> None:
    """Bind a correlation ID to the logging context for the current request."""
    _CORRELATION_ID.set(correlation_id)


def clear_request_context() -> None:
    """Clear the request-scoped logging context."""
    _CORRELATION_ID.set(None)


def log_context(
    *,
    user_id: Any = None,
    scope_id: Any = None,
    group_id: Any = None,
    transaction_id: Any = None,
    **extra: Any,
) -> dict[str, Any]:
    """Build a consistent ``extra`` payload for structured logs.

    Example:
        logger.info(
            "group.member.add",
            extra=log_context(group_id=group.id, scope_id=group.scope_id, user_id=actor),
        )
    """
    ctx: dict[str, Any] = {}

    if user_id is not None:
        ctx["user_id"] = str(user_id)
    if scope_id is not None:
        ctx["scope_id"] = str(scope_id)
    if group_id is not None:
        ctx["group_id"] = str(group_id)
    if transaction_id is not None:
        ctx["transaction_id"] = str(transaction_id)

    for key, value in extra.items():
        ctx[key] = value

    return ctx


def _format_extra_value(value: Any) -> str:
    if isinstance(value, (int, float, bool)):
        return str(value)
    if value is None:
        return "null"
    return str(value)


__all__ = [
    "ConsoleLogFormatter",
    "bind_request_context",
    "clear_request_context",
    "log_context",
    "setup_logging",
]
