"""Tag lookups shared by the tag endpoints and the transaction coordinator."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ledger_api.common.logging import log_context
from ledger_api.models import Tag

logger = logging.getLogger(__name__)


class TagsRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_name(self, *, scope_id: UUID, name: str) -> Tag | None:
        stmt = select(Tag).where(Tag.scope_id == scope_id, Tag.name == name)
        return await self._session.scalar(stmt)

    async def get_or_create(self, *, scope_id: UUID, name: str, user_id: UUID | None) -> Tag:
        """Return the tag called ``name`` in ``scope_id``, inserting it when missing.

        A concurrent insert of the same name loses the unique constraint race
        inside a savepoint; the winner's row is returned instead.
        """
        tag = await self.get_by_name(scope_id=scope_id, name=name)
        if tag is not None:
            return tag
        tag = Tag(scope_id=scope_id, user_id=user_id, name=name)
        try:
            async with self._session.begin_nested():
                self._session.add(tag)
                await self._session.flush()
        except IntegrityError:
            existing = await self.get_by_name(scope_id=scope_id, name=name)
            if existing is None:
                raise
            logger.debug(
                "tag.create.raced",
                extra=log_context(scope_id=scope_id, tag_id=existing.id),
            )
            return existing
        logger.debug("tag.create", extra=log_context(scope_id=scope_id, tag_id=tag.id))
        return tag

    async def ids_for_names(self, *, scope_ids: Iterable[UUID], names: Iterable[str]) -> list[UUID]:
        scope_list = list(scope_ids)
        name_list = list(names)
        if not scope_list or not name_list:
            return []
        stmt = select(Tag.id).where(Tag.scope_id.in_(scope_list), Tag.name.in_(name_list))
        result = await self._session.scalars(stmt)
        return list(result.all())


__all__ = ["TagsRepository"]
