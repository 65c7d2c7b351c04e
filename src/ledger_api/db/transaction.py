"""Join-or-own transaction helper for services and repositories."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import AsyncSession

__all__ = ["transaction_scope"]


@asynccontextmanager
async def transaction_scope(session: AsyncSession) -> AsyncIterator[AsyncSession]:
    """Run a unit of work on ``session`` atomically.

    When the session already has an active transaction (the per-request
    session always does) the block joins it and leaves commit/rollback to the
    owner. Otherwise the block owns a new transaction: it commits once on
    success and rolls back on any exception.
    """

    if session.in_transaction():
        yield session
        return

    async with session.begin():
        yield session
