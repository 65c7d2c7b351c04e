"""Key-value store contract shared by the session backends."""

from __future__ import annotations

from datetime import timedelta
from typing import Protocol, runtime_checkable


@runtime_checkable
class KeyValueStore(Protocol):
    """String keys to string values with an optional time-to-live.

    Expired entries behave exactly like missing ones.
    """

    async def get(self, key: str) -> str | None: ...

    async def set(self, key: str, value: str, *, ttl: timedelta | None = None) -> None: ...

    async def delete(self, key: str) -> bool: ...


__all__ = ["KeyValueStore"]
