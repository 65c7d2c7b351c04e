"""Resolve the scopes in which a user holds at least a given role."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from ledger_api.core.rbac import Role
from ledger_api.features.memberships import MembershipsRepository, resolution_cache


class ScopeResolver:
    """Turn ``(user, required role)`` into the set of reachable scope ids.

    Results are memoized on the session (one per request). Membership
    mutations made through :class:`MembershipsRepository` clear the memo.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._memberships = MembershipsRepository(session)

    async def resolve(self, user_id: UUID, required_role: Role) -> frozenset[UUID]:
        cache = resolution_cache(self._session)
        key = (user_id, required_role)
        cached = cache.get(key)
        if cached is not None:
            return cached

        memberships = await self._memberships.get_by_role(
            user_id=user_id,
            required_role=required_role,
        )
        resolved = frozenset(membership.scope_id for membership in memberships)
        cache[key] = resolved
        return resolved


__all__ = ["ScopeResolver"]
