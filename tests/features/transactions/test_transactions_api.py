from __future__ import annotations

import pytest
from httpx import AsyncClient

from tests.utils import (
    RegisterUser,
    create_category,
    create_source,
    create_transaction,
    expect,
)

pytestmark = pytest.mark.asyncio


async def _seed(client: AsyncClient, headers: dict[str, str]) -> list[dict]:
    rows = [
        {
            "timestamp": "2024-01-05T10:00:00Z",
            "amount": 12.5,
            "type": "EXPENSE",
            "description": "Groceries at market",
            "tags": ["food"],
        },
        {
            "timestamp": "2024-01-10T09:00:00Z",
            "amount": 900,
            "type": "EXPENSE",
            "description": "January rent",
            "tags": ["rent", "home"],
        },
        {
            "timestamp": "2024-01-15T18:30:00Z",
            "amount": 2500,
            "type": "INCOME",
            "description": "Salary",
        },
        {
            "timestamp": "2024-02-01T12:00:00Z",
            "amount": 40,
            "type": "EXPENSE",
            "description": "Dinner out",
            "tags": ["food", "fun"],
        },
    ]
    return [await create_transaction(client, headers, **row) for row in rows]


async def _list(client: AsyncClient, headers: dict[str, str], **params) -> list[dict]:
    return expect(await client.get("/transactions", params=params, headers=headers), 200)


async def test_create_defaults_to_personal_scope(
    async_client: AsyncClient, register_user: RegisterUser
) -> None:
    account = await register_user()
    created = await create_transaction(
        async_client, account["headers"], tags=["Food", " food ", "Food", ""]
    )

    assert created["scope_id"] == account["scope_id"]
    assert created["user_id"] == account["user_id"]
    assert created["amount"] == 12.5
    assert sorted(created["tags"]) == ["Food", "food"]
    assert created["timestamp"]


async def test_filters_ordering_and_paging(
    async_client: AsyncClient, register_user: RegisterUser
) -> None:
    account = await register_user()
    headers = account["headers"]
    seeded = await _seed(async_client, headers)
    ids = [row["id"] for row in seeded]

    newest_first = await _list(async_client, headers)
    assert [row["id"] for row in newest_first] == list(reversed(ids))

    by_amount = await _list(async_client, headers, sort_by="amount", sort_order="asc")
    assert [row["amount"] for row in by_amount] == [12.5, 40, 900, 2500]

    january = await _list(
        async_client, headers, start_date="2024-01-01T00:00:00Z", end_date="2024-01-31T23:59:59Z"
    )
    assert {row["id"] for row in january} == set(ids[:3])

    expenses = await _list(async_client, headers, type="EXPENSE", min_amount=20)
    assert {row["id"] for row in expenses} == {ids[1], ids[3]}

    food = await _list(async_client, headers, tags=["food"])
    assert {row["id"] for row in food} == {ids[0], ids[3]}

    either = await _list(async_client, headers, tags=["rent", "fun"])
    assert {row["id"] for row in either} == {ids[1], ids[3]}

    text = await _list(async_client, headers, description="RENT")
    assert [row["id"] for row in text] == [ids[1]]

    page_two = await _list(async_client, headers, page=2, items_per_page=3)
    assert [row["id"] for row in page_two] == [ids[0]]

    assert await _list(async_client, headers, tags=["unknown-tag"]) == []


async def test_invalid_filters_are_rejected(
    async_client: AsyncClient, register_user: RegisterUser
) -> None:
    headers = (await register_user())["headers"]
    for params in (
        {"items_per_page": 0},
        {"items_per_page": 101},
        {"page": 0},
        {"sort_by": "password"},
        {"min_amount": 50, "max_amount": 10},
        {"start_date": "2024-02-01T00:00:00Z", "end_date": "2024-01-01T00:00:00Z"},
    ):
        response = await async_client.get("/transactions", params=params, headers=headers)
        assert response.status_code == 422, params


async def test_update_replaces_or_keeps_tags(
    async_client: AsyncClient, register_user: RegisterUser
) -> None:
    headers = (await register_user())["headers"]
    created = await create_transaction(async_client, headers, tags=["a", "b"])
    path = f"/transactions/{created['id']}"

    kept = expect(await async_client.put(path, json={"amount": 99}, headers=headers), 200)
    assert kept["amount"] == 99
    assert kept["tags"] == ["a", "b"]

    replaced = expect(await async_client.put(path, json={"tags": ["c"]}, headers=headers), 200)
    assert replaced["tags"] == ["c"]

    cleared = expect(await async_client.put(path, json={"tags": []}, headers=headers), 200)
    assert cleared["tags"] == []


async def test_references_must_be_writable(
    async_client: AsyncClient, register_user: RegisterUser
) -> None:
    alice = await register_user()
    mallory = await register_user()
    source = await create_source(async_client, alice["headers"])
    own_source = await create_source(async_client, mallory["headers"])
    own_category = await create_category(async_client, mallory["headers"])

    response = await async_client.post(
        "/transactions",
        json={
            "amount": 1,
            "type": "EXPENSE",
            "source_id": source["id"],
            "category_id": own_category["id"],
        },
        headers=mallory["headers"],
    )
    assert response.status_code == 404
    assert response.json()["error"] == "Source not found"

    linked = await create_transaction(async_client, alice["headers"], source_id=source["id"])
    assert linked["source_id"] == source["id"]

    response = await async_client.post(
        "/transactions",
        json={
            "amount": 1,
            "type": "EXPENSE",
            "scope_id": alice["scope_id"],
            "source_id": own_source["id"],
            "category_id": own_category["id"],
        },
        headers=mallory["headers"],
    )
    assert response.status_code == 403
    assert isinstance(response.json()["error"], str)


async def test_source_and_category_are_required(
    async_client: AsyncClient, register_user: RegisterUser
) -> None:
    headers = (await register_user())["headers"]
    source = await create_source(async_client, headers)
    category = await create_category(async_client, headers)

    for missing in ("source_id", "category_id"):
        body = {
            "amount": 1,
            "type": "EXPENSE",
            "source_id": source["id"],
            "category_id": category["id"],
        }
        del body[missing]
        response = await async_client.post("/transactions", json=body, headers=headers)
        assert response.status_code == 422, missing
        assert response.json()["error"] == "Invalid request"

    created = await create_transaction(
        async_client, headers, source_id=source["id"], category_id=category["id"]
    )
    path = f"/transactions/{created['id']}"
    for field in ("source_id", "category_id", "amount"):
        response = await async_client.put(path, json={field: None}, headers=headers)
        assert response.status_code == 422, field

    unchanged = expect(await async_client.get(path, headers=headers), 200)
    assert unchanged["source_id"] == source["id"]
    assert unchanged["category_id"] == category["id"]


async def test_amounts_keep_two_decimal_places(
    async_client: AsyncClient, register_user: RegisterUser
) -> None:
    headers = (await register_user())["headers"]
    created = await create_transaction(async_client, headers, amount=12.34)
    path = f"/transactions/{created['id']}"
    assert expect(await async_client.get(path, headers=headers), 200)["amount"] == 12.34

    too_fine = await async_client.post(
        "/transactions",
        json={
            "amount": 12.345,
            "type": "EXPENSE",
            "source_id": created["source_id"],
            "category_id": created["category_id"],
        },
        headers=headers,
    )
    assert too_fine.status_code == 422

    response = await async_client.put(path, json={"amount": 0.001}, headers=headers)
    assert response.status_code == 422

    updated = expect(await async_client.put(path, json={"amount": 7.05}, headers=headers), 200)
    assert updated["amount"] == 7.05
    assert expect(await async_client.get(path, headers=headers), 200)["amount"] == 7.05


async def test_listing_a_foreign_scope_is_forbidden(
    async_client: AsyncClient, register_user: RegisterUser
) -> None:
    alice = await register_user()
    bob = await register_user()
    response = await async_client.get(
        "/transactions", params={"scope_id": alice["scope_id"]}, headers=bob["headers"]
    )
    assert response.status_code == 403


async def test_transaction_tag_links(
    async_client: AsyncClient, register_user: RegisterUser
) -> None:
    headers = (await register_user())["headers"]
    created = await create_transaction(async_client, headers)
    tags_path = f"/transactions/{created['id']}/tags"

    first = expect(
        await async_client.post(tags_path, json={"name": " travel "}, headers=headers), 200
    )
    assert first["name"] == "travel"
    repeat = expect(
        await async_client.post(tags_path, json={"tag_id": first["tag_id"]}, headers=headers), 200
    )
    assert repeat["tag_id"] == first["tag_id"]

    listed = expect(await async_client.get(tags_path, headers=headers), 200)
    assert [item["name"] for item in listed] == ["travel"]

    both = await async_client.post(
        tags_path, json={"name": "x", "tag_id": first["tag_id"]}, headers=headers
    )
    assert both.status_code == 422

    response = await async_client.delete(f"{tags_path}/{first['tag_id']}", headers=headers)
    assert response.status_code == 204
    response = await async_client.delete(f"{tags_path}/{first['tag_id']}", headers=headers)
    assert response.status_code == 404

    tag = expect(await async_client.get(f"/tags/{first['tag_id']}", headers=headers), 200)
    assert tag["name"] == "travel"


async def test_delete_transaction(async_client: AsyncClient, register_user: RegisterUser) -> None:
    headers = (await register_user())["headers"]
    created = await create_transaction(async_client, headers, tags=["gone"])
    path = f"/transactions/{created['id']}"

    response = await async_client.delete(path, headers=headers)
    assert response.status_code == 204
    assert (await async_client.get(path, headers=headers)).status_code == 404
    assert (await async_client.delete(path, headers=headers)).status_code == 404
