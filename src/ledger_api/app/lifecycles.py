"""FastAPI lifespan helpers for the ledger application."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager, suppress

from fastapi import FastAPI
from fastapi.routing import Lifespan
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError

from ledger_api.common.logging import log_context
from ledger_api.db import DatabaseConfig, db, ping_database, session_scope
from ledger_api.db.migrations import run_migrations_async
from ledger_api.infra.kv import DatabaseKeyValueStore
from ledger_api.settings import Settings

logger = logging.getLogger(__name__)


async def run_kv_purger(*, settings: Settings, stop_event: asyncio.Event) -> None:
    """Periodically delete expired rows from the database key-value store."""

    interval = settings.kv_purge_interval.total_seconds()
    while not stop_event.is_set():
        try:
            async with session_scope(settings) as session:
                await DatabaseKeyValueStore(session).purge_expired()
                await session.commit()
        except SQLAlchemyError:
            logger.warning("kv.purge.failed", exc_info=True)
        with suppress(TimeoutError):
            await asyncio.wait_for(stop_event.wait(), timeout=interval)


def create_application_lifespan(
    *,
    settings: Settings,
) -> Lifespan[FastAPI]:
    """Return the FastAPI lifespan handler used by the app factory."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        app.state.settings = settings
        if settings.jwt_secret_fallback:
            logger.warning(
                "auth.jwt_secret.fallback",
                extra=log_context(environment=settings.environment),
            )

        config = DatabaseConfig.from_settings(settings)
        safe_url = make_url(config.url).render_as_string(hide_password=True)
        logger.info("db.init.start", extra=log_context(database_url=safe_url))
        db.init(config)

        try:
            try:
                await ping_database()
            except Exception as exc:
                logger.error(
                    "db.ping.failed",
                    extra=log_context(database_url=safe_url),
                    exc_info=True,
                )
                raise RuntimeError(f"Database is unreachable: {safe_url}") from exc

            if settings.database_migrate_on_startup:
                logger.info("db.migrate.start", extra=log_context(database_url=safe_url))
                await run_migrations_async(settings)
                logger.info("db.migrate.complete", extra=log_context(database_url=safe_url))
            logger.info("db.init.complete", extra=log_context(database_url=safe_url))

            purger_stop: asyncio.Event | None = None
            purger_task: asyncio.Task[None] | None = None
            if settings.kv_backend == "database":
                purger_stop = asyncio.Event()
                purger_task = asyncio.create_task(
                    run_kv_purger(settings=settings, stop_event=purger_stop)
                )

            try:
                yield
            finally:
                if purger_stop is not None and purger_task is not None:
                    purger_stop.set()
                    purger_task.cancel()
                    with suppress(asyncio.CancelledError):
                        await purger_task
        finally:
            await db.dispose()
            logger.info("db.shutdown")

    return lifespan


__all__ = ["create_application_lifespan", "run_kv_purger"]
