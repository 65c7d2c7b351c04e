"""Scoped reads and writes for transactions and their tags."""

from __future__ import annotations

import logging
from collections import defaultdict
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from ledger_api.common.logging import log_context
from ledger_api.core.auth.gate import AuthorizationGate
from ledger_api.core.rbac import Role
from ledger_api.features.scopes.access import ScopedAccess
from ledger_api.features.tags.repository import TagsRepository
from ledger_api.models import Tag, Transaction, TransactionTag

from .coordinator import TransactionTagCoordinator, normalize_tag_names
from .filters import (
    TransactionFilters,
    apply_ordering,
    apply_paging,
    apply_transaction_filters,
)
from .schemas import (
    TransactionCreate,
    TransactionOut,
    TransactionTagAttach,
    TransactionTagOut,
    TransactionUpdate,
)

logger = logging.getLogger(__name__)


def _to_out(transaction: Transaction, tags: list[str]) -> TransactionOut:
    return TransactionOut(
        id=transaction.id,
        scope_id=transaction.scope_id,
        user_id=transaction.user_id,
        source_id=transaction.source_id,
        category_id=transaction.category_id,
        timestamp=transaction.timestamp,
        amount=transaction.amount,
        type=transaction.type,
        description=transaction.description,
        tags=tags,
        created_at=transaction.created_at,
        updated_at=transaction.updated_at,
    )


class TransactionsService:
    def __init__(self, *, session: AsyncSession, gate: AuthorizationGate) -> None:
        self._session = session
        self._gate = gate
        self._access = ScopedAccess(session=session, gate=gate)
        self._coordinator = TransactionTagCoordinator(session=session, gate=gate)
        self._tags = TagsRepository(session)

    # ---- Transactions ------------------------------------------------------

    async def list_transactions(self, filters: TransactionFilters) -> list[TransactionOut]:
        scopes = await self._access.readable_scopes(filters.scope_id)
        if not scopes:
            return []

        tag_ids: list[UUID] | None = None
        if filters.tags:
            visible = await self._gate.scope_ids(Role.VIEW)
            tag_ids = await self._tags.ids_for_names(scope_ids=visible, names=filters.tags)

        stmt = self._access.restrict(select(Transaction), Transaction, scopes)
        stmt = apply_transaction_filters(stmt, filters, tag_ids=tag_ids)
        stmt = apply_paging(apply_ordering(stmt, filters), filters)
        transactions = list((await self._session.scalars(stmt)).all())

        names = await self._tag_names([txn.id for txn in transactions])
        logger.debug(
            "transaction.list",
            extra=log_context(
                user_id=self._gate.user_id,
                page=filters.page,
                count=len(transactions),
            ),
        )
        return [_to_out(txn, names.get(txn.id, [])) for txn in transactions]

    async def get_transaction(self, transaction_id: UUID) -> TransactionOut:
        transaction = await self._load(transaction_id)
        names = await self._tag_names([transaction.id])
        return _to_out(transaction, names.get(transaction.id, []))

    async def create_transaction(self, payload: TransactionCreate) -> TransactionOut:
        fields = payload.model_dump(exclude={"tags"})
        transaction = await self._coordinator.create(fields, payload.tags)
        names = await self._tag_names([transaction.id])
        return _to_out(transaction, names.get(transaction.id, []))

    async def update_transaction(
        self,
        transaction_id: UUID,
        payload: TransactionUpdate,
    ) -> TransactionOut:
        transaction = await self._load(transaction_id, required_role=Role.WRITE)
        changes = payload.model_dump(exclude_unset=True, exclude={"tags"})
        tags = payload.tags if "tags" in payload.model_fields_set else None
        await self._coordinator.update(transaction, changes, tags)
        names = await self._tag_names([transaction.id])
        return _to_out(transaction, names.get(transaction.id, []))

    async def delete_transaction(self, transaction_id: UUID) -> None:
        transaction = await self._load(transaction_id, required_role=Role.WRITE)
        await self._session.execute(
            delete(TransactionTag).where(TransactionTag.transaction_id == transaction.id)
        )
        await self._session.delete(transaction)
        await self._session.flush()
        logger.info(
            "transaction.delete.success",
            extra=log_context(transaction_id=transaction_id, scope_id=transaction.scope_id),
        )

    # ---- Transaction tags --------------------------------------------------

    async def list_tags(self, transaction_id: UUID) -> list[TransactionTagOut]:
        transaction = await self._load(transaction_id)
        stmt = (
            select(Tag)
            .join(TransactionTag, TransactionTag.tag_id == Tag.id)
            .where(TransactionTag.transaction_id == transaction.id)
            .order_by(Tag.name)
        )
        tags = await self._session.scalars(stmt)
        return [
            TransactionTagOut(
                transaction_id=transaction.id,
                tag_id=tag.id,
                name=tag.name,
                scope_id=tag.scope_id,
            )
            for tag in tags
        ]

    async def attach_tag(
        self,
        transaction_id: UUID,
        payload: TransactionTagAttach,
    ) -> TransactionTagOut:
        """Link a tag to the transaction; linking an already linked tag is a no-op."""

        transaction = await self._load(transaction_id, required_role=Role.WRITE)
        if payload.tag_id is not None:
            tag = await self._session.get(Tag, payload.tag_id)
            if tag is None or tag.scope_id != transaction.scope_id:
                raise HTTPException(status.HTTP_404_NOT_FOUND, detail="Tag not found")
        else:
            names = normalize_tag_names([payload.name or ""])
            if not names:
                raise HTTPException(
                    status.HTTP_400_BAD_REQUEST, detail="Tag name must not be blank"
                )
            tag = await self._tags.get_or_create(
                scope_id=transaction.scope_id, name=names[0], user_id=self._gate.user_id
            )

        existing = await self._session.get(
            TransactionTag, {"transaction_id": transaction.id, "tag_id": tag.id}
        )
        if existing is None:
            self._session.add(TransactionTag(transaction_id=transaction.id, tag_id=tag.id))
            await self._session.flush()
            logger.info(
                "transaction.tag.attach",
                extra=log_context(transaction_id=transaction.id, tag_id=tag.id),
            )
        return TransactionTagOut(
            transaction_id=transaction.id,
            tag_id=tag.id,
            name=tag.name,
            scope_id=tag.scope_id,
        )

    async def detach_tag(self, transaction_id: UUID, tag_id: UUID) -> None:
        transaction = await self._load(transaction_id, required_role=Role.WRITE)
        result = await self._session.execute(
            delete(TransactionTag).where(
                TransactionTag.transaction_id == transaction.id,
                TransactionTag.tag_id == tag_id,
            )
        )
        if not result.rowcount:
            raise HTTPException(status.HTTP_404_NOT_FOUND, detail="Tag is not attached")
        logger.info(
            "transaction.tag.detach",
            extra=log_context(transaction_id=transaction.id, tag_id=tag_id),
        )

    # ---- Helpers -----------------------------------------------------------

    async def _load(self, transaction_id: UUID, *, required_role: Role = Role.VIEW) -> Transaction:
        return await self._access.get_row(
            Transaction, transaction_id, required_role=required_role, label="Transaction"
        )

    async def _tag_names(self, transaction_ids: list[UUID]) -> dict[UUID, list[str]]:
        if not transaction_ids:
            return {}
        stmt = (
            select(TransactionTag.transaction_id, Tag.name)
            .join(Tag, Tag.id == TransactionTag.tag_id)
            .where(TransactionTag.transaction_id.in_(transaction_ids))
            .order_by(Tag.name)
        )
        names: dict[UUID, list[str]] = defaultdict(list)
        for txn_id, name in (await self._session.execute(stmt)).all():
            names[txn_id].append(name)
        return dict(names)


__all__ = ["TransactionsService"]
