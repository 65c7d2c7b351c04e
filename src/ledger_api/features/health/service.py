"""Service layer for the health module."""

from __future__ import annotations

import asyncio
import logging

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ledger_api.common.logging import log_context
from ledger_api.db import utc_now
from ledger_api.settings import Settings

from .schemas import HealthCheckResponse, HealthComponentStatus

logger = logging.getLogger(__name__)


class HealthService:
    """Compute health responses for liveness checks."""

    def __init__(self, *, settings: Settings, session: AsyncSession) -> None:
        self._settings = settings
        self._session = session

    async def status(self) -> HealthCheckResponse:
        components = [
            HealthComponentStatus(
                name="api",
                status="available",
                detail=f"v{self._settings.app_version}",
            ),
            await self._database_status(),
        ]
        overall = "ok" if all(c.status == "available" for c in components) else "degraded"
        response = HealthCheckResponse(status=overall, timestamp=utc_now(), components=components)
        logger.debug(
            "health.status",
            extra=log_context(status=response.status, component_count=len(components)),
        )
        return response

    async def _database_status(self) -> HealthComponentStatus:
        timeout = self._settings.database_connect_timeout.total_seconds()
        try:
            await asyncio.wait_for(self._session.execute(text("SELECT 1")), timeout=timeout)
        except (SQLAlchemyError, TimeoutError) as exc:
            logger.warning(
                "health.database.unavailable",
                extra=log_context(error=type(exc).__name__),
            )
            return HealthComponentStatus(name="database", status="unavailable")
        return HealthComponentStatus(name="database", status="available")


__all__ = ["HealthService"]
