"""Ledger FastAPI application entry point."""

from __future__ import annotations

import logging

from fastapi import FastAPI

from .app.lifecycles import create_application_lifespan
from .common.exceptions import register_exception_handlers
from .common.logging import setup_logging
from .common.middleware import register_middleware
from .core.http.errors import register_auth_exception_handlers
from .routers import api_router
from .settings import Settings, get_settings

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Return a configured FastAPI application."""

    settings = settings or get_settings()
    setup_logging(settings)

    docs_url = settings.docs_url if settings.api_docs_enabled else None
    openapi_url = settings.openapi_url if settings.api_docs_enabled else None

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        docs_url=docs_url,
        redoc_url=None,
        openapi_url=openapi_url,
        lifespan=create_application_lifespan(settings=settings),
    )

    app.state.settings = settings
    register_exception_handlers(app)
    register_auth_exception_handlers(app)
    register_middleware(app, settings)
    app.include_router(api_router)
    return app


__all__ = ["create_app"]

app = create_app()
