"""Scoped CRUD for money sources."""

from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from ledger_api.common.logging import log_context
from ledger_api.core.auth.gate import AuthorizationGate
from ledger_api.core.rbac import Role
from ledger_api.features.scopes.access import ScopedAccess
from ledger_api.models import Source, SourceType, Transaction

from .schemas import SourceCreate, SourceOut, SourceUpdate

logger = logging.getLogger(__name__)


class SourcesService:
    def __init__(self, *, session: AsyncSession, gate: AuthorizationGate) -> None:
        self._session = session
        self._access = ScopedAccess(session=session, gate=gate)

    async def list_sources(self, *, scope_id: UUID | None = None) -> list[SourceOut]:
        rows = await self._access.list_rows(
            Source, scope_id=scope_id, order_by=(Source.name, Source.id)
        )
        return [SourceOut.model_validate(row) for row in rows]

    async def get_source(self, source_id: UUID) -> SourceOut:
        row = await self._access.get_row(Source, source_id, label="Source")
        return SourceOut.model_validate(row)

    async def create_source(self, payload: SourceCreate) -> SourceOut:
        scope_id = await self._access.write_scope(payload.scope_id)
        source = Source(
            scope_id=scope_id,
            user_id=self._access.gate.user_id,
            name=payload.name.strip(),
            type=SourceType(payload.type),
            balance=payload.balance,
        )
        self._session.add(source)
        await self._session.flush()
        logger.info(
            "source.create.success",
            extra=log_context(scope_id=scope_id, user_id=source.user_id, source_id=source.id),
        )
        return SourceOut.model_validate(source)

    async def update_source(self, source_id: UUID, payload: SourceUpdate) -> SourceOut:
        source = await self._access.get_row(
            Source, source_id, required_role=Role.WRITE, label="Source"
        )
        changes = payload.model_dump(exclude_unset=True, exclude_none=True)
        if "name" in changes:
            source.name = changes["name"].strip()
        if "type" in changes:
            source.type = SourceType(changes["type"])
        if "balance" in changes:
            source.balance = changes["balance"]
        await self._session.flush()
        logger.info(
            "source.update.success",
            extra=log_context(scope_id=source.scope_id, source_id=source.id),
        )
        return SourceOut.model_validate(source)

    async def delete_source(self, source_id: UUID) -> None:
        source = await self._access.get_row(
            Source, source_id, required_role=Role.WRITE, label="Source"
        )
        await self._session.execute(
            update(Transaction)
            .where(Transaction.source_id == source.id)
            .values(source_id=None)
        )
        await self._session.delete(source)
        await self._session.flush()
        logger.info(
            "source.delete.success",
            extra=log_context(scope_id=source.scope_id, source_id=source_id),
        )


__all__ = ["SourcesService"]
