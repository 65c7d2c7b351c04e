"""Per-request authorization gate over the scope resolver."""

from __future__ import annotations

import logging
from uuid import UUID

from ledger_api.common.logging import log_context
from ledger_api.core.rbac import Role
from ledger_api.features.scopes.resolver import ScopeResolver

from .errors import PermissionDeniedError
from .principal import AuthenticatedPrincipal

logger = logging.getLogger(__name__)


class AuthorizationGate:
    """Answer "which scopes may this principal touch at role R?".

    Repositories restrict every query to :meth:`scope_ids`; operations that
    name a target scope call :meth:`ensure` before touching the store.
    """

    def __init__(self, *, principal: AuthenticatedPrincipal, resolver: ScopeResolver) -> None:
        self._principal = principal
        self._resolver = resolver

    @property
    def principal(self) -> AuthenticatedPrincipal:
        return self._principal

    @property
    def user_id(self) -> UUID:
        return self._principal.user_id

    async def scope_ids(self, required_role: Role) -> frozenset[UUID]:
        return await self._resolver.resolve(self._principal.user_id, required_role)

    async def allows(self, scope_id: UUID, required_role: Role) -> bool:
        return scope_id in await self.scope_ids(required_role)

    async def ensure(self, scope_id: UUID, required_role: Role) -> UUID:
        if not await self.allows(scope_id, required_role):
            logger.info(
                "authz.denied",
                extra=log_context(
                    user_id=self._principal.user_id,
                    scope_id=scope_id,
                    required_role=required_role.value,
                ),
            )
            raise PermissionDeniedError(required_role, scope_id=scope_id)
        return scope_id

    async def target_scope(self, scope_id: UUID | None, required_role: Role) -> UUID:
        """Return ``scope_id`` (or the personal scope) after checking access."""
        target = scope_id or self._principal.scope_id
        if target is None:
            raise PermissionDeniedError(required_role)
        return await self.ensure(target, required_role)


__all__ = ["AuthorizationGate"]
