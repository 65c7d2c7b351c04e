"""Scope-restricted row access shared by the data features."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, TypeVar
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from ledger_api.core.auth.gate import AuthorizationGate
from ledger_api.core.rbac import Role

RowT = TypeVar("RowT")


class ScopedAccess:
    """Read rows only through the scopes the principal can reach.

    A row outside the principal's view set is reported as missing (404);
    a visible row the principal may not change at the required role is
    refused (403).
    """

    def __init__(self, *, session: AsyncSession, gate: AuthorizationGate) -> None:
        self._session = session
        self._gate = gate

    @property
    def gate(self) -> AuthorizationGate:
        return self._gate

    async def readable_scopes(self, scope_id: UUID | None = None) -> frozenset[UUID]:
        """Scopes a listing may read; naming a scope narrows to it (403 if not viewable)."""
        if scope_id is not None:
            await self._gate.ensure(scope_id, Role.VIEW)
            return frozenset({scope_id})
        return await self._gate.scope_ids(Role.VIEW)

    def restrict(self, stmt: Select[Any], model: Any, scope_ids: frozenset[UUID]) -> Select[Any]:
        return stmt.where(model.scope_id.in_(sorted(scope_ids, key=str)))

    async def list_rows(
        self,
        model: type[RowT],
        *,
        scope_id: UUID | None = None,
        order_by: Sequence[Any] = (),
    ) -> list[RowT]:
        scopes = await self.readable_scopes(scope_id)
        if not scopes:
            return []
        stmt = self.restrict(select(model), model, scopes)
        if order_by:
            stmt = stmt.order_by(*order_by)
        result = await self._session.scalars(stmt)
        return list(result.all())

    async def get_row(
        self,
        model: type[RowT],
        row_id: UUID,
        *,
        required_role: Role = Role.VIEW,
        label: str = "Resource",
    ) -> RowT:
        visible = await self._gate.scope_ids(Role.VIEW)
        row = None
        if visible:
            stmt = self.restrict(select(model).where(model.id == row_id), model, visible)
            row = await self._session.scalar(stmt)
        if row is None:
            raise HTTPException(status.HTTP_404_NOT_FOUND, detail=f"{label} not found")
        if required_role is not Role.VIEW:
            await self._gate.ensure(row.scope_id, required_role)
        return row

    async def write_scope(self, scope_id: UUID | None) -> UUID:
        """Target scope for a new row: ``scope_id`` or the personal scope (403 if not writable)."""
        return await self._gate.target_scope(scope_id, Role.WRITE)


__all__ = ["ScopedAccess"]
