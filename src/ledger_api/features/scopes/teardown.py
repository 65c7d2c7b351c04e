"""Remove every data row carrying a scope, in foreign-key order."""

from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy import delete, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ledger_api.common.logging import log_context
from ledger_api.models import Category, Source, Tag, Transaction, TransactionTag

logger = logging.getLogger(__name__)


async def purge_scope_data(session: AsyncSession, scope_id: UUID) -> dict[str, int]:
    """Delete transactions, tags, sources and categories scoped to ``scope_id``.

    Rows in other scopes that point at a purged source or category keep
    existing with the reference nulled. Memberships and the scope row itself
    are left to the caller.
    """

    transaction_ids = select(Transaction.id).where(Transaction.scope_id == scope_id)
    tag_ids = select(Tag.id).where(Tag.scope_id == scope_id)
    source_ids = select(Source.id).where(Source.scope_id == scope_id)
    category_ids = select(Category.id).where(Category.scope_id == scope_id)

    counts: dict[str, int] = {}
    result = await session.execute(
        delete(TransactionTag).where(
            or_(
                TransactionTag.transaction_id.in_(transaction_ids),
                TransactionTag.tag_id.in_(tag_ids),
            )
        ),
    )
    counts["transaction_tags"] = result.rowcount or 0

    result = await session.execute(
        delete(Transaction).where(Transaction.scope_id == scope_id),
    )
    counts["transactions"] = result.rowcount or 0

    result = await session.execute(
        delete(Tag).where(Tag.scope_id == scope_id),
    )
    counts["tags"] = result.rowcount or 0

    await session.execute(
        update(Transaction)
        .where(Transaction.source_id.in_(source_ids))
        .values(source_id=None),
    )
    await session.execute(
        update(Transaction)
        .where(Transaction.category_id.in_(category_ids))
        .values(category_id=None),
    )

    result = await session.execute(
        delete(Source).where(Source.scope_id == scope_id),
    )
    counts["sources"] = result.rowcount or 0

    result = await session.execute(
        delete(Category).where(Category.scope_id == scope_id),
    )
    counts["categories"] = result.rowcount or 0

    logger.info("scope.purge", extra=log_context(scope_id=scope_id, **counts))
    return counts


__all__ = ["purge_scope_data"]
