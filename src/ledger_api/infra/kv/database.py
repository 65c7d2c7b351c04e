"""Key-value store persisted in the ``kv_entries`` table."""

from __future__ import annotations

import logging
from datetime import timedelta

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from ledger_api.common.logging import log_context
from ledger_api.db import transaction_scope, utc_now
from ledger_api.models import KeyValueEntry

logger = logging.getLogger(__name__)


class DatabaseKeyValueStore:
    """Store entries as rows on the caller's session.

    Writes join the request transaction when one is active, so a session
    record is only visible once the request that created it commits.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, key: str) -> str | None:
        async with transaction_scope(self._session) as session:
            entry = await session.get(KeyValueEntry, key)
            if entry is None:
                return None
            if entry.expires_at is not None and entry.expires_at <= utc_now():
                await session.delete(entry)
                await session.flush()
                logger.debug("kv.expired", extra=log_context(key=key))
                return None
            return entry.value

    async def set(self, key: str, value: str, *, ttl: timedelta | None = None) -> None:
        expires_at = utc_now() + ttl if ttl is not None else None
        async with transaction_scope(self._session) as session:
            entry = await session.get(KeyValueEntry, key)
            if entry is None:
                session.add(KeyValueEntry(key=key, value=value, expires_at=expires_at))
            else:
                entry.value = value
                entry.expires_at = expires_at
            await session.flush()

    async def delete(self, key: str) -> bool:
        async with transaction_scope(self._session) as session:
            result = await session.execute(
                delete(KeyValueEntry).where(KeyValueEntry.key == key)
            )
            return bool(result.rowcount)

    async def purge_expired(self) -> int:
        """Drop every expired entry; returns the number of rows removed."""
        async with transaction_scope(self._session) as session:
            result = await session.execute(
                delete(KeyValueEntry).where(
                    KeyValueEntry.expires_at.is_not(None),
                    KeyValueEntry.expires_at <= utc_now(),
                )
            )
            removed = result.rowcount or 0
        if removed:
            logger.info("kv.purge", extra=log_context(removed=removed))
        return removed


__all__ = ["DatabaseKeyValueStore"]
