from __future__ import annotations

from datetime import timedelta
from uuid import uuid4

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from ledger_api.db import utc_now
from ledger_api.infra.kv import (
    DatabaseKeyValueStore,
    KeyValueStore,
    MemoryKeyValueStore,
    build_kv_store,
)
from ledger_api.settings import get_settings

pytestmark = pytest.mark.asyncio


def _key() -> str:
    return f"test:{uuid4().hex}"


@pytest.fixture(params=["memory", "database"])
def kv(request: pytest.FixtureRequest, session: AsyncSession) -> KeyValueStore:
    if request.param == "memory":
        return MemoryKeyValueStore()
    return DatabaseKeyValueStore(session)


async def test_set_get_delete(kv: KeyValueStore) -> None:
    key = _key()
    assert await kv.get(key) is None

    await kv.set(key, "one")
    assert await kv.get(key) == "one"

    await kv.set(key, "two", ttl=timedelta(minutes=5))
    assert await kv.get(key) == "two"

    assert await kv.delete(key) is True
    assert await kv.get(key) is None
    assert await kv.delete(key) is False


async def test_expired_entries_read_as_missing(kv: KeyValueStore) -> None:
    key = _key()
    await kv.set(key, "stale", ttl=timedelta(seconds=-1))
    assert await kv.get(key) is None
    assert await kv.delete(key) is False


async def test_database_purge_removes_only_expired(session: AsyncSession) -> None:
    store = DatabaseKeyValueStore(session)
    fresh, stale, forever = _key(), _key(), _key()
    await store.set(fresh, "a", ttl=timedelta(hours=1))
    await store.set(stale, "b", ttl=timedelta(seconds=-5))
    await store.set(forever, "c")

    removed = await store.purge_expired()

    assert removed >= 1
    assert await store.get(fresh) == "a"
    assert await store.get(forever) == "c"
    assert await store.get(stale) is None


async def test_memory_backend_is_selected_by_settings(session: AsyncSession) -> None:
    settings = get_settings().model_copy(update={"kv_backend": "memory"})
    assert isinstance(build_kv_store(settings, session=session), MemoryKeyValueStore)
    assert isinstance(build_kv_store(get_settings(), session=session), DatabaseKeyValueStore)


async def test_memory_writes_sweep_unread_expired_entries() -> None:
    store = MemoryKeyValueStore()
    await store.set("stale-1", "a", ttl=timedelta(seconds=-1))
    await store.set("stale-2", "b", ttl=timedelta(seconds=-1))
    assert len(store) == 1

    await store.set("fresh", "c", ttl=timedelta(hours=1))
    await store.set("forever", "d")
    assert len(store) == 2
    assert await store.get("fresh") == "c"


async def test_memory_purge_removes_only_expired() -> None:
    store = MemoryKeyValueStore()
    await store.set("forever", "a")
    store._entries["stale"] = ("b", utc_now() - timedelta(seconds=5))

    assert await store.purge_expired() == 1
    assert await store.purge_expired() == 0
    assert await store.get("forever") == "a"
