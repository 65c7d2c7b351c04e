"""Request-id propagation, access logs and CORS."""

from __future__ import annotations

import logging
import time
from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from ledger_api.settings import Settings

from .logging import bind_request_context, clear_request_context, log_context

REQUEST_ID_HEADER = "X-Request-ID"
MAX_REQUEST_ID_LENGTH = 128

_REQUEST_LOGGER = logging.getLogger("ledger_api.request")


def _request_id(request: Request) -> str:
    supplied = (request.headers.get(REQUEST_ID_HEADER) or "").strip()
    if supplied and len(supplied) <= MAX_REQUEST_ID_LENGTH and supplied.isprintable():
        return supplied
    return str(uuid4())


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Bind a request id to the log context and echo it on the response.

    Every request ends with one ``request.complete`` record; 5xx answers are
    logged at WARNING and requests that raise past the handlers at ERROR.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = _request_id(request)
        request.state.correlation_id = request_id
        bind_request_context(request_id)
        start = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            _REQUEST_LOGGER.error(
                "request.error",
                extra=log_context(
                    path=request.url.path,
                    method=request.method,
                    duration_ms=round((time.perf_counter() - start) * 1000.0, 2),
                ),
            )
            clear_request_context()
            raise

        level = logging.WARNING if response.status_code >= 500 else logging.INFO
        _REQUEST_LOGGER.log(
            level,
            "request.complete",
            extra=log_context(
                path=request.url.path,
                method=request.method,
                status_code=response.status_code,
                duration_ms=round((time.perf_counter() - start) * 1000.0, 2),
            ),
        )
        clear_request_context()
        response.headers[REQUEST_ID_HEADER] = request_id
        return response


def register_middleware(app: FastAPI, settings: Settings) -> None:
    origins = list(settings.server_cors_origins)
    if origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
            expose_headers=[REQUEST_ID_HEADER],
        )
    app.add_middleware(RequestContextMiddleware)


__all__ = ["REQUEST_ID_HEADER", "RequestContextMiddleware", "register_middleware"]
