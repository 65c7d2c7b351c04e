"""Key-value storage used by the session layer."""

from __future__ import annotations

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession

from ledger_api.settings import Settings

from .base import KeyValueStore
from .database import DatabaseKeyValueStore
from .memory import MemoryKeyValueStore

_MEMORY_STATE_ATTR = "memory_kv"


def build_kv_store(
    settings: Settings,
    *,
    session: AsyncSession,
    request: Request | None = None,
) -> KeyValueStore:
    """Return the configured backend.

    The memory backend is shared per application through ``app.state`` so
    entries survive between requests.
    """

    if settings.kv_backend == "memory":
        if request is None:
            return MemoryKeyValueStore()
        store = getattr(request.app.state, _MEMORY_STATE_ATTR, None)
        if store is None:
            store = MemoryKeyValueStore()
            setattr(request.app.state, _MEMORY_STATE_ATTR, store)
        return store
    return DatabaseKeyValueStore(session)


__all__ = [
    "DatabaseKeyValueStore",
    "KeyValueStore",
    "MemoryKeyValueStore",
    "build_kv_store",
]
