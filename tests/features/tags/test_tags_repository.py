from __future__ import annotations

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ledger_api.features.scopes.registry import ScopeRegistry
from ledger_api.features.tags.repository import TagsRepository
from ledger_api.models import ScopeType, Tag

pytestmark = pytest.mark.asyncio


async def test_get_or_create_is_idempotent(session: AsyncSession) -> None:
    scope = await ScopeRegistry(session).create_scope(ScopeType.GROUP)
    repo = TagsRepository(session)

    first = await repo.get_or_create(scope_id=scope.id, name="food", user_id=None)
    again = await repo.get_or_create(scope_id=scope.id, name="food", user_id=None)

    assert again.id == first.id
    await session.rollback()


async def test_get_or_create_returns_the_winner_of_a_lost_race(
    session: AsyncSession, monkeypatch: pytest.MonkeyPatch
) -> None:
    scope = await ScopeRegistry(session).create_scope(ScopeType.GROUP)
    repo = TagsRepository(session)
    existing = await repo.get_or_create(scope_id=scope.id, name="food", user_id=None)

    # The first lookup misses, as if another request inserted the row meanwhile.
    lookup = repo.get_by_name
    calls = 0

    async def _stale_then_fresh(*, scope_id, name):
        nonlocal calls
        calls += 1
        if calls == 1:
            return None
        return await lookup(scope_id=scope_id, name=name)

    monkeypatch.setattr(repo, "get_by_name", _stale_then_fresh)

    tag = await repo.get_or_create(scope_id=scope.id, name="food", user_id=None)

    assert tag.id == existing.id
    assert calls == 2
    count = await session.scalar(
        select(func.count()).select_from(Tag).where(Tag.scope_id == scope.id)
    )
    assert count == 1
    await session.rollback()
