from __future__ import annotations

import pytest
from httpx import AsyncClient

from tests.utils import RegisterUser, create_source, create_transaction, expect, unique_name

pytestmark = pytest.mark.asyncio


async def test_profile_roundtrip(async_client: AsyncClient, register_user: RegisterUser) -> None:
    account = await register_user()

    profile = expect(await async_client.get("/users/me", headers=account["headers"]), 200)
    assert profile["id"] == account["user_id"]
    assert profile["username"] == account["username"]
    assert profile["scope_id"] == account["scope_id"]
    assert profile["currency"] == "USD"
    assert "password_hash" not in profile

    updated = expect(
        await async_client.put(
            "/users/me",
            json={"name": "Alice Liddell", "currency": "eur"},
            headers=account["headers"],
        ),
        200,
    )
    assert updated["name"] == "Alice Liddell"
    assert updated["currency"] == "EUR"


async def test_profile_update_conflicts(
    async_client: AsyncClient, register_user: RegisterUser
) -> None:
    first = await register_user()
    second = await register_user()

    response = await async_client.put(
        "/users/me", json={"username": first["username"]}, headers=second["headers"]
    )
    assert response.status_code == 409

    response = await async_client.put(
        "/users/me",
        json={"email": f"{first['username']}@example.test"},
        headers=second["headers"],
    )
    assert response.status_code == 409


async def test_password_change_takes_effect(
    async_client: AsyncClient, register_user: RegisterUser
) -> None:
    account = await register_user(password="before")
    expect(
        await async_client.put(
            "/users/me", json={"password": "after"}, headers=account["headers"]
        ),
        200,
    )

    old = await async_client.post(
        "/auth/login", json={"username": account["username"], "password": "before"}
    )
    assert old.status_code == 401
    new = await async_client.post(
        "/auth/login", json={"username": account["username"], "password": "after"}
    )
    assert new.status_code == 200


async def test_delete_user_removes_owned_data_and_groups(
    async_client: AsyncClient, register_user: RegisterUser
) -> None:
    owner = await register_user()
    member = await register_user()

    group = expect(
        await async_client.post(
            "/groups",
            json={"group_name": "Flat", "user_roles": {member["username"]: "write"}},
            headers=owner["headers"],
        ),
        201,
    )
    await create_source(async_client, owner["headers"], name="Personal")
    shared = await create_transaction(
        async_client, member["headers"], scope_id=group["scope_id"], tags=["rent"]
    )
    mine = await create_transaction(async_client, member["headers"])

    response = await async_client.delete("/users/me", headers=owner["headers"])
    assert response.status_code == 204

    after = await async_client.get("/users/me", headers=owner["headers"])
    assert after.status_code == 401

    gone = await async_client.get(f"/transactions/{shared['id']}", headers=member["headers"])
    assert gone.status_code == 404
    groups = expect(await async_client.get("/groups", headers=member["headers"]), 200)
    assert all(item["id"] != group["id"] for item in groups)

    kept = expect(
        await async_client.get(f"/transactions/{mine['id']}", headers=member["headers"]), 200
    )
    assert kept["id"] == mine["id"]

    login = await async_client.post(
        "/auth/login", json={"username": owner["username"], "password": owner["password"]}
    )
    assert login.status_code == 401


async def test_deleted_username_can_be_registered_again(
    async_client: AsyncClient, register_user: RegisterUser
) -> None:
    name = unique_name("reuse")
    account = await register_user(name)
    response = await async_client.delete("/users/me", headers=account["headers"])
    assert response.status_code == 204

    again = await register_user(name)
    assert again["user_id"] != account["user_id"]
