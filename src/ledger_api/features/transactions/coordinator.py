"""Write a transaction and its tag set as one unit of work.

The coordinator is the only writer of ``transactions`` and
``transaction_tags``. For every create or update it

1. checks the target scope against the principal's write set, and the
   referenced source/category against the same set;
2. normalizes the tag names (trimmed, blanks dropped, duplicates collapsed
   keeping first-seen order, overlong names rejected before any write);
3. resolves each name to a tag in the transaction's scope, creating it when
   missing;
4. writes the transaction row;
5. replaces the join rows with one row per resolved tag.

Everything runs inside :func:`ledger_api.db.transaction_scope`, so a
failure at any step leaves nothing behind.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from ledger_api.common.logging import log_context
from ledger_api.core.auth.gate import AuthorizationGate
from ledger_api.core.rbac import Role
from ledger_api.db import transaction_scope
from ledger_api.features.tags.repository import TagsRepository
from ledger_api.models import (
    TAG_NAME_MAX_LENGTH,
    Category,
    Source,
    Tag,
    Transaction,
    TransactionTag,
    TransactionType,
)

logger = logging.getLogger(__name__)

_UPDATABLE_FIELDS = ("source_id", "category_id", "timestamp", "amount", "type", "description")


def normalize_tag_names(names: Iterable[str]) -> list[str]:
    """Trim, drop blanks and de-duplicate ``names`` (first occurrence wins)."""

    seen: set[str] = set()
    cleaned: list[str] = []
    for raw in names:
        name = str(raw).strip()
        if not name:
            continue
        if len(name) > TAG_NAME_MAX_LENGTH:
            raise HTTPException(
                status.HTTP_400_BAD_REQUEST,
                detail=f"Tag names are limited to {TAG_NAME_MAX_LENGTH} characters",
            )
        if name not in seen:
            seen.add(name)
            cleaned.append(name)
    return cleaned


class TransactionTagCoordinator:
    def __init__(self, *, session: AsyncSession, gate: AuthorizationGate) -> None:
        self._session = session
        self._gate = gate
        self._tags = TagsRepository(session)

    async def create(self, fields: Mapping[str, Any], tag_names: Iterable[str]) -> Transaction:
        """Insert a transaction carrying ``tag_names``.

        ``fields`` holds the column values plus an optional ``scope_id``; the
        personal scope is used when it is absent.
        """

        names = normalize_tag_names(tag_names)
        scope_id = await self._gate.target_scope(fields.get("scope_id"), Role.WRITE)
        await self._check_references(
            source_id=fields["source_id"],
            category_id=fields["category_id"],
        )

        async with transaction_scope(self._session):
            tag_ids = await self._resolve_tags(scope_id, names)
            transaction = Transaction(
                scope_id=scope_id,
                user_id=self._gate.user_id,
                source_id=fields["source_id"],
                category_id=fields["category_id"],
                timestamp=fields["timestamp"],
                amount=fields["amount"],
                type=TransactionType(fields["type"]),
                description=fields.get("description"),
            )
            self._session.add(transaction)
            await self._session.flush()
            await self._replace_links(transaction.id, tag_ids)

        logger.info(
            "transaction.create.success",
            extra=log_context(
                transaction_id=transaction.id,
                scope_id=scope_id,
                user_id=self._gate.user_id,
                tag_count=len(tag_ids),
            ),
        )
        return transaction

    async def update(
        self,
        transaction: Transaction,
        changes: Mapping[str, Any],
        tag_names: Iterable[str] | None,
    ) -> Transaction:
        """Merge ``changes`` into ``transaction``; ``tag_names=None`` keeps the tag set."""

        names = normalize_tag_names(tag_names) if tag_names is not None else None
        await self._gate.ensure(transaction.scope_id, Role.WRITE)
        await self._check_references(
            source_id=changes.get("source_id"),
            category_id=changes.get("category_id"),
        )

        async with transaction_scope(self._session):
            tag_ids = (
                await self._resolve_tags(transaction.scope_id, names) if names is not None else None
            )
            for field in _UPDATABLE_FIELDS:
                if field not in changes:
                    continue
                value = changes[field]
                if field == "type":
                    value = TransactionType(value)
                setattr(transaction, field, value)
            await self._session.flush()
            if tag_ids is not None:
                await self._replace_links(transaction.id, tag_ids)

        logger.info(
            "transaction.update.success",
            extra=log_context(
                transaction_id=transaction.id,
                scope_id=transaction.scope_id,
                user_id=self._gate.user_id,
                tags_replaced=tag_ids is not None,
            ),
        )
        return transaction

    async def _check_references(
        self,
        *,
        source_id: UUID | None,
        category_id: UUID | None,
    ) -> None:
        writable = await self._gate.scope_ids(Role.WRITE)
        for model, ref, label in (
            (Source, source_id, "Source"),
            (Category, category_id, "Category"),
        ):
            if ref is None:
                continue
            stmt = select(model.id).where(model.id == ref, model.scope_id.in_(writable))
            if not writable or await self._session.scalar(stmt) is None:
                raise HTTPException(status.HTTP_404_NOT_FOUND, detail=f"{label} not found")

    async def _resolve_tags(self, scope_id: UUID, names: list[str]) -> list[UUID]:
        tag_ids: list[UUID] = []
        for name in names:
            tag: Tag = await self._tags.get_or_create(
                scope_id=scope_id, name=name, user_id=self._gate.user_id
            )
            tag_ids.append(tag.id)
        return tag_ids

    async def _replace_links(self, transaction_id: UUID, tag_ids: list[UUID]) -> None:
        await self._session.execute(
            delete(TransactionTag).where(TransactionTag.transaction_id == transaction_id)
        )
        for tag_id in tag_ids:
            self._session.add(TransactionTag(transaction_id=transaction_id, tag_id=tag_id))
        await self._session.flush()
        logger.debug(
            "transaction.tags.replace",
            extra=log_context(transaction_id=transaction_id, tag_count=len(tag_ids)),
        )


__all__ = ["TransactionTagCoordinator", "normalize_tag_names"]
