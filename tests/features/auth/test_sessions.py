from __future__ import annotations

from uuid import uuid4

import pytest

from ledger_api.features.auth.sessions import SessionStore, new_session_id
from ledger_api.infra.kv import MemoryKeyValueStore
from ledger_api.settings import get_settings

pytestmark = pytest.mark.asyncio


@pytest.fixture()
def store() -> SessionStore:
    return SessionStore(MemoryKeyValueStore(), get_settings())


async def test_record_pins_the_refresh_token(store: SessionStore) -> None:
    sid = new_session_id()
    user_id = uuid4()
    await store.save(session_id=sid, user_id=user_id, refresh_token="token-a")

    assert await store.matches(session_id=sid, user_id=user_id, refresh_token="token-a")
    assert not await store.matches(session_id=sid, user_id=user_id, refresh_token="token-b")
    assert not await store.matches(session_id=sid, user_id=uuid4(), refresh_token="token-a")


async def test_rotation_replaces_the_pinned_token(store: SessionStore) -> None:
    sid = new_session_id()
    user_id = uuid4()
    await store.save(session_id=sid, user_id=user_id, refresh_token="old")
    await store.save(session_id=sid, user_id=user_id, refresh_token="new")

    assert not await store.matches(session_id=sid, user_id=user_id, refresh_token="old")
    assert await store.matches(session_id=sid, user_id=user_id, refresh_token="new")


async def test_deleted_session_never_matches(store: SessionStore) -> None:
    sid = new_session_id()
    user_id = uuid4()
    await store.save(session_id=sid, user_id=user_id, refresh_token="t")

    assert await store.delete(sid) is True
    assert await store.load(sid) is None
    assert not await store.matches(session_id=sid, user_id=user_id, refresh_token="t")


async def test_record_is_stored_under_prefixed_key(store: SessionStore) -> None:
    assert store.key("abc") == f"{get_settings().kv_key_prefix}session:abc"
