"""Scoped CRUD for tags."""

from __future__ import annotations

import logging
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ledger_api.common.logging import log_context
from ledger_api.core.auth.gate import AuthorizationGate
from ledger_api.core.rbac import Role
from ledger_api.features.scopes.access import ScopedAccess
from ledger_api.models import Tag, TransactionTag

from .repository import TagsRepository
from .schemas import TagCreate, TagOut, TagUpdate

logger = logging.getLogger(__name__)


def _duplicate(name: str) -> HTTPException:
    return HTTPException(
        status.HTTP_409_CONFLICT,
        detail=f"Tag '{name}' already exists in this scope",
    )


class TagsService:
    def __init__(self, *, session: AsyncSession, gate: AuthorizationGate) -> None:
        self._session = session
        self._access = ScopedAccess(session=session, gate=gate)
        self._repo = TagsRepository(session)

    async def list_tags(self, *, scope_id: UUID | None = None) -> list[TagOut]:
        rows = await self._access.list_rows(Tag, scope_id=scope_id, order_by=(Tag.name, Tag.id))
        return [TagOut.model_validate(row) for row in rows]

    async def get_tag(self, tag_id: UUID) -> TagOut:
        return TagOut.model_validate(await self._access.get_row(Tag, tag_id, label="Tag"))

    async def create_tag(self, payload: TagCreate) -> TagOut:
        scope_id = await self._access.write_scope(payload.scope_id)
        if await self._repo.get_by_name(scope_id=scope_id, name=payload.name) is not None:
            raise _duplicate(payload.name)

        tag = Tag(scope_id=scope_id, user_id=self._access.gate.user_id, name=payload.name)
        self._session.add(tag)
        try:
            await self._session.flush()
        except IntegrityError as exc:
            raise _duplicate(payload.name) from exc
        logger.info("tag.create.success", extra=log_context(scope_id=scope_id, tag_id=tag.id))
        return TagOut.model_validate(tag)

    async def update_tag(self, tag_id: UUID, payload: TagUpdate) -> TagOut:
        tag = await self._access.get_row(Tag, tag_id, required_role=Role.WRITE, label="Tag")
        if payload.name != tag.name:
            clash = await self._repo.get_by_name(scope_id=tag.scope_id, name=payload.name)
            if clash is not None:
                raise _duplicate(payload.name)
            tag.name = payload.name
            try:
                await self._session.flush()
            except IntegrityError as exc:
                raise _duplicate(payload.name) from exc
        logger.info("tag.update.success", extra=log_context(scope_id=tag.scope_id, tag_id=tag.id))
        return TagOut.model_validate(tag)

    async def delete_tag(self, tag_id: UUID) -> None:
        tag = await self._access.get_row(Tag, tag_id, required_role=Role.WRITE, label="Tag")
        await self._session.execute(delete(TransactionTag).where(TransactionTag.tag_id == tag.id))
        await self._session.delete(tag)
        await self._session.flush()
        logger.info("tag.delete.success", extra=log_context(scope_id=tag.scope_id, tag_id=tag_id))


__all__ = ["TagsService"]
