"""Exception handlers rendering the ledger error body.

Every error response carries a short ``error`` string. ``detail`` mirrors it,
or holds the field errors for request validation failures.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from ledger_api.common.logging import log_context

_UNHANDLED_LOGGER = logging.getLogger("ledger_api.errors")
_HTTP_LOGGER = logging.getLogger("ledger_api.http")


def error_response(
    status_code: int,
    message: str,
    *,
    detail: Any = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": message, "detail": message if detail is None else detail},
        headers=headers,
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log the stack trace and answer 500; internal detail never reaches the client."""
    _UNHANDLED_LOGGER.exception(
        "unhandled_exception",
        extra=log_context(
            path=str(request.url.path),
            method=request.method,
            exception_type=type(exc).__name__,
            detail=str(exc),
        ),
    )
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    if exc.status_code >= 500:
        _HTTP_LOGGER.error(
            "http_exception",
            extra=log_context(
                path=str(request.url.path),
                method=request.method,
                status_code=exc.status_code,
                detail=exc.detail,
            ),
        )
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    return error_response(
        exc.status_code,
        message,
        detail=exc.detail,
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(
    _request: Request, exc: RequestValidationError
) -> JSONResponse:
    return error_response(
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "Invalid request",
        detail=jsonable_encoder(exc.errors()),
    )


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    """Uniqueness and reference violations that escaped a service surface as 409."""
    _HTTP_LOGGER.warning(
        "db.integrity_error",
        extra=log_context(
            path=str(request.url.path),
            method=request.method,
            detail=str(exc.orig),
        ),
    )
    return error_response(status.HTTP_409_CONFLICT, "Conflicting data")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)


__all__ = [
    "error_response",
    "http_exception_handler",
    "integrity_error_handler",
    "register_exception_handlers",
    "unhandled_exception_handler",
    "validation_exception_handler",
]
