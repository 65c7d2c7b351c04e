"""Persistence helpers for ``(user, scope, role)`` memberships.

Every method runs on the caller's session and joins whatever transaction is
active on it; nothing here commits or rolls back. Mutations clear the
per-session scope resolution cache so later resolutions in the same unit of
work observe them.
"""

from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from ledger_api.common.logging import log_context
from ledger_api.core.rbac import Role, roles_at_least
from ledger_api.models import UserScope

logger = logging.getLogger(__name__)

_RESOLUTION_CACHE_KEY = "ledger.scope_resolution"


def resolution_cache(session: AsyncSession) -> dict[tuple[UUID, Role], Any]:
    """Return the resolution cache bound to ``session``."""
    return session.info.setdefault(_RESOLUTION_CACHE_KEY, {})


def clear_resolution_cache(session: AsyncSession) -> None:
    session.info.pop(_RESOLUTION_CACHE_KEY, None)


class MembershipsRepository:
    """Query and mutate ``user_scopes`` rows."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def upsert(self, *, user_id: UUID, scope_id: UUID, role: Role) -> UserScope:
        """Insert ``(user, scope, role)`` or update the role of an existing pair."""
        membership = await self.get(user_id=user_id, scope_id=scope_id)
        if membership is None:
            membership = UserScope(user_id=user_id, scope_id=scope_id, role=role)
            self._session.add(membership)
        else:
            membership.role = role
        await self._session.flush()
        clear_resolution_cache(self._session)
        logger.debug(
            "membership.upsert",
            extra=log_context(user_id=user_id, scope_id=scope_id, role=role.value),
        )
        return membership

    async def get(self, *, user_id: UUID, scope_id: UUID) -> UserScope | None:
        stmt = select(UserScope).where(
            UserScope.user_id == user_id,
            UserScope.scope_id == scope_id,
        )
        return await self._session.scalar(stmt)

    async def validate(self, *, user_id: UUID, scope_id: UUID, required_role: Role) -> bool:
        membership = await self.get(user_id=user_id, scope_id=scope_id)
        return membership is not None and membership.role.satisfies(required_role)

    async def get_by_role(self, *, user_id: UUID, required_role: Role) -> list[UserScope]:
        """Every membership of ``user_id`` whose role satisfies ``required_role``."""
        stmt = select(UserScope).where(
            UserScope.user_id == user_id,
            UserScope.role.in_(sorted(roles_at_least(required_role), key=lambda r: r.rank)),
        )
        result = await self._session.scalars(stmt)
        return list(result.all())

    async def list_for_scope(self, scope_id: UUID) -> list[UserScope]:
        stmt = (
            select(UserScope)
            .where(UserScope.scope_id == scope_id)
            .order_by(UserScope.created_at, UserScope.user_id)
        )
        result = await self._session.scalars(stmt)
        return list(result.all())

    async def delete(self, *, user_id: UUID, scope_id: UUID) -> bool:
        result = await self._session.execute(
            delete(UserScope).where(
                UserScope.user_id == user_id,
                UserScope.scope_id == scope_id,
            )
        )
        clear_resolution_cache(self._session)
        logger.debug(
            "membership.delete",
            extra=log_context(user_id=user_id, scope_id=scope_id),
        )
        return bool(result.rowcount)

    async def delete_for_scope(self, scope_id: UUID) -> int:
        result = await self._session.execute(
            delete(UserScope).where(UserScope.scope_id == scope_id)
        )
        clear_resolution_cache(self._session)
        return result.rowcount or 0

    async def delete_for_user(self, user_id: UUID) -> int:
        result = await self._session.execute(
            delete(UserScope).where(UserScope.user_id == user_id)
        )
        clear_resolution_cache(self._session)
        return result.rowcount or 0


__all__ = ["MembershipsRepository", "clear_resolution_cache", "resolution_cache"]
