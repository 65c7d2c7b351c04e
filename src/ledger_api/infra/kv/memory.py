"""Process-local key-value store."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta

from ledger_api.common.logging import log_context
from ledger_api.db import utc_now

logger = logging.getLogger(__name__)


class MemoryKeyValueStore:
    """Dict-backed store guarded by an :class:`asyncio.Lock`.

    Entries live for the lifetime of the process; use it for tests and
    single-process deployments. Every write sweeps expired entries, so keys
    that are never read again do not accumulate.
    """

    def __init__(self) -> None:
        self._entries: dict[str, tuple[str, datetime | None]] = {}
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    async def get(self, key: str) -> str | None:
        async with self._lock:
            item = self._entries.get(key)
            if item is None:
                return None
            value, expires_at = item
            if expires_at is not None and expires_at <= utc_now():
                del self._entries[key]
                return None
            return value

    async def set(self, key: str, value: str, *, ttl: timedelta | None = None) -> None:
        now = utc_now()
        expires_at = now + ttl if ttl is not None else None
        async with self._lock:
            self._sweep(now)
            self._entries[key] = (value, expires_at)

    async def delete(self, key: str) -> bool:
        async with self._lock:
            return self._entries.pop(key, None) is not None

    async def purge_expired(self) -> int:
        async with self._lock:
            removed = self._sweep(utc_now())
        if removed:
            logger.info("kv.purge", extra=log_context(removed=removed))
        return removed

    async def clear(self) -> None:
        async with self._lock:
            self._entries.clear()

    def _sweep(self, now: datetime) -> int:
        expired = [
            key
            for key, (_, expires_at) in self._entries.items()
            if expires_at is not None and expires_at <= now
        ]
        for key in expired:
            del self._entries[key]
        return len(expired)


__all__ = ["MemoryKeyValueStore"]
