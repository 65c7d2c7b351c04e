"""Business logic for the user lifecycle."""

from __future__ import annotations

import logging

from fastapi import HTTPException, status
from fastapi.concurrency import run_in_threadpool
from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ledger_api.common.logging import log_context
from ledger_api.core.rbac import Role
from ledger_api.core.security import hash_password
from ledger_api.db import transaction_scope
from ledger_api.features.groups.service import destroy_groups_owned_by
from ledger_api.features.memberships import MembershipsRepository
from ledger_api.features.scopes.registry import ScopeRegistry
from ledger_api.features.scopes.teardown import purge_scope_data
from ledger_api.models import Category, ScopeType, Source, Tag, Transaction, User

from .repository import UsersRepository
from .schemas import UserOut, UserUpdate

logger = logging.getLogger(__name__)

_CREATOR_TABLES = (Source, Category, Tag, Transaction)


class UsersService:
    """Register, read, update and delete user accounts."""

    def __init__(self, *, session: AsyncSession) -> None:
        self._session = session
        self._repo = UsersRepository(session)
        self._scopes = ScopeRegistry(session)
        self._memberships = MembershipsRepository(session)

    async def register_user(
        self,
        *,
        username: str,
        email: str,
        password: str,
        name: str | None = None,
        currency: str = "USD",
    ) -> User:
        """Create a user together with its personal scope and owner membership."""

        logger.debug("user.register.start", extra=log_context(username=username))

        await self._ensure_unique(username=username, email=email)
        password_hash = await run_in_threadpool(hash_password, password)

        async with transaction_scope(self._session):
            try:
                user = await self._repo.create(
                    username=username,
                    email=email,
                    password_hash=password_hash,
                    name=name,
                    currency=currency,
                )
            except IntegrityError as exc:
                raise HTTPException(
                    status.HTTP_409_CONFLICT,
                    detail="Username or email already registered",
                ) from exc

            scope = await self._scopes.create_scope(ScopeType.USER)
            await self._memberships.upsert(user_id=user.id, scope_id=scope.id, role=Role.OWNER)
            user.scope_id = scope.id
            await self._session.flush()

        logger.info(
            "user.register.success",
            extra=log_context(user_id=user.id, scope_id=user.scope_id),
        )
        return user

    async def get_profile(self, *, user: User) -> UserOut:
        return UserOut.model_validate(user)

    async def update_profile(self, *, user: User, payload: UserUpdate) -> UserOut:
        """Apply the fields present in ``payload`` to ``user``."""

        changes = payload.model_dump(exclude_unset=True, exclude_none=True)
        if not changes:
            return UserOut.model_validate(user)

        if "username" in changes and await self._repo.username_taken(
            changes["username"], exclude=user.id
        ):
            raise HTTPException(status.HTTP_409_CONFLICT, detail="Username already registered")
        if "email" in changes and await self._repo.email_taken(changes["email"], exclude=user.id):
            raise HTTPException(status.HTTP_409_CONFLICT, detail="Email already registered")

        password = changes.pop("password", None)
        if password is not None:
            user.password_hash = await run_in_threadpool(hash_password, password)
        for field, value in changes.items():
            setattr(user, field, value)

        try:
            await self._session.flush()
        except IntegrityError as exc:
            raise HTTPException(
                status.HTTP_409_CONFLICT,
                detail="Username or email already registered",
            ) from exc

        logger.info(
            "user.update.success",
            extra=log_context(user_id=user.id, fields=",".join(sorted(payload.model_fields_set))),
        )
        return UserOut.model_validate(user)

    async def delete_user(self, *, user: User) -> None:
        """Remove ``user``, the groups they own and their personal scope."""

        user_id = user.id
        scope_id = user.scope_id
        async with transaction_scope(self._session):
            groups_removed = await destroy_groups_owned_by(self._session, user_id)
            await self._memberships.delete_for_user(user_id)
            if scope_id is not None:
                await purge_scope_data(self._session, scope_id)
                await self._memberships.delete_for_scope(scope_id)
            for model in _CREATOR_TABLES:
                await self._session.execute(
                    update(model).where(model.user_id == user_id).values(user_id=None)
                )
            await self._session.delete(user)
            await self._session.flush()
            if scope_id is not None:
                await self._scopes.delete_scope(scope_id)

        logger.info(
            "user.delete.success",
            extra=log_context(user_id=user_id, scope_id=scope_id, groups_removed=groups_removed),
        )

    async def _ensure_unique(self, *, username: str, email: str) -> None:
        if await self._repo.username_taken(username) or await self._repo.email_taken(email):
            logger.info("user.register.conflict", extra=log_context(username=username))
            raise HTTPException(
                status.HTTP_409_CONFLICT,
                detail="Username or email already registered",
            )


__all__ = ["UsersService"]
