"""Scope registry: mint, read and delete scope identifiers."""

from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy import delete, exists, select
from sqlalchemy.ext.asyncio import AsyncSession

from ledger_api.common.logging import log_context
from ledger_api.models import Scope, ScopeType

logger = logging.getLogger(__name__)


class ScopeRegistry:
    """Persistence for ``scopes``. Knows nothing about users or roles."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create_scope(self, scope_type: ScopeType) -> Scope:
        scope = Scope(type=scope_type)
        self._session.add(scope)
        await self._session.flush()
        logger.debug(
            "scope.create",
            extra=log_context(scope_id=scope.id, scope_type=scope_type.value),
        )
        return scope

    async def get_scope(self, scope_id: UUID) -> Scope | None:
        return await self._session.get(Scope, scope_id)

    async def scope_exists(self, scope_id: UUID) -> bool:
        stmt = select(exists().where(Scope.id == scope_id))
        return bool(await self._session.scalar(stmt))

    async def delete_scope(self, scope_id: UUID) -> None:
        """Delete ``scope_id``; deleting a missing scope is a no-op.

        Memberships and data rows carrying the scope must be gone first.
        """
        result = await self._session.execute(delete(Scope).where(Scope.id == scope_id))
        logger.debug(
            "scope.delete",
            extra=log_context(scope_id=scope_id, deleted=bool(result.rowcount)),
        )


__all__ = ["ScopeRegistry"]
