from __future__ import annotations

import pytest
from httpx import AsyncClient

from tests.utils import RegisterUser, expect

pytestmark = pytest.mark.asyncio


async def _create_group(
    client: AsyncClient, owner: dict, roles: dict[str, str] | None = None, **fields
) -> dict:
    body = {"group_name": "Household", "user_roles": roles or {}}
    body.update(fields)
    return expect(await client.post("/groups", json=body, headers=owner["headers"]), 201)


def _roles(members: list[dict]) -> dict[str, str]:
    return {member["username"]: member["role"] for member in members}


async def test_create_group_assigns_roles(
    async_client: AsyncClient, register_user: RegisterUser
) -> None:
    owner = await register_user()
    bob = await register_user()
    carol = await register_user()

    group = await _create_group(
        async_client,
        owner,
        {bob["username"]: "write", carol["user_id"]: "VIEW"},
        description="Shared costs",
    )
    assert group["group_name"] == "Household"
    assert group["owner_id"] == owner["user_id"]
    assert group["scope_id"] != owner["scope_id"]

    members = expect(
        await async_client.get(f"/groups/{group['id']}/members", headers=carol["headers"]), 200
    )
    assert _roles(members) == {
        owner["username"]: "owner",
        bob["username"]: "write",
        carol["username"]: "view",
    }


async def test_create_group_validates_before_writing(
    async_client: AsyncClient, register_user: RegisterUser
) -> None:
    owner = await register_user()
    bob = await register_user()

    bad_role = await async_client.post(
        "/groups",
        json={"group_name": "Nope", "user_roles": {bob["username"]: "owner"}},
        headers=owner["headers"],
    )
    assert bad_role.status_code == 400

    unknown = await async_client.post(
        "/groups",
        json={"group_name": "Nope", "user_roles": {"no-such-user-xyz": "view"}},
        headers=owner["headers"],
    )
    assert unknown.status_code == 404

    blank = await async_client.post(
        "/groups", json={"group_name": "   "}, headers=owner["headers"]
    )
    assert blank.status_code == 422

    assert expect(await async_client.get("/groups", headers=owner["headers"]), 200) == []


async def test_creator_in_user_roles_stays_owner(
    async_client: AsyncClient, register_user: RegisterUser
) -> None:
    owner = await register_user()
    group = await _create_group(async_client, owner, {owner["username"]: "view"})

    members = expect(
        await async_client.get(f"/groups/{group['id']}/members", headers=owner["headers"]), 200
    )
    assert _roles(members) == {owner["username"]: "owner"}


async def test_group_can_be_addressed_by_scope_id(
    async_client: AsyncClient, register_user: RegisterUser
) -> None:
    owner = await register_user()
    group = await _create_group(async_client, owner)

    by_scope = expect(
        await async_client.get(f"/groups/{group['scope_id']}", headers=owner["headers"]), 200
    )
    assert by_scope["id"] == group["id"]


async def test_non_members_cannot_see_group(
    async_client: AsyncClient, register_user: RegisterUser
) -> None:
    owner = await register_user()
    stranger = await register_user()
    group = await _create_group(async_client, owner)

    for path in (f"/groups/{group['id']}", f"/groups/{group['id']}/members"):
        response = await async_client.get(path, headers=stranger["headers"])
        assert response.status_code == 404
    assert expect(await async_client.get("/groups", headers=stranger["headers"]), 200) == []


async def test_only_owner_manages_group(
    async_client: AsyncClient, register_user: RegisterUser
) -> None:
    owner = await register_user()
    writer = await register_user()
    group = await _create_group(async_client, owner, {writer["username"]: "write"})
    path = f"/groups/{group['id']}"

    response = await async_client.put(path, json={"group_name": "Mine"}, headers=writer["headers"])
    assert response.status_code == 403
    response = await async_client.delete(path, headers=writer["headers"])
    assert response.status_code == 403
    response = await async_client.post(
        f"{path}/members",
        json={"user_id": writer["user_id"], "role": "view"},
        headers=writer["headers"],
    )
    assert response.status_code == 403

    renamed = expect(
        await async_client.put(
            path, json={"group_name": "Renamed", "icon": "house"}, headers=owner["headers"]
        ),
        200,
    )
    assert renamed["group_name"] == "Renamed"
    assert renamed["icon"] == "house"


async def test_member_management(async_client: AsyncClient, register_user: RegisterUser) -> None:
    owner = await register_user()
    dave = await register_user()
    group = await _create_group(async_client, owner)
    members_path = f"/groups/{group['id']}/members"

    added = expect(
        await async_client.post(
            members_path,
            json={"userID": dave["username"], "role": "view"},
            headers=owner["headers"],
        ),
        200,
    )
    assert added["role"] == "view"
    assert added["user_id"] == dave["user_id"]

    updated = expect(
        await async_client.put(
            f"{members_path}/{dave['user_id']}", json={"role": "write"}, headers=owner["headers"]
        ),
        200,
    )
    assert updated["role"] == "write"

    owner_change = await async_client.put(
        f"{members_path}/{owner['user_id']}", json={"role": "view"}, headers=owner["headers"]
    )
    assert owner_change.status_code == 400

    invalid = await async_client.post(
        members_path, json={"user_id": dave["user_id"], "role": "admin"}, headers=owner["headers"]
    )
    assert invalid.status_code == 400

    removed = await async_client.delete(
        f"{members_path}/{dave['username']}", headers=owner["headers"]
    )
    assert removed.status_code == 204
    again = await async_client.delete(
        f"{members_path}/{dave['username']}", headers=owner["headers"]
    )
    assert again.status_code == 404

    hidden = await async_client.get(f"/groups/{group['id']}", headers=dave["headers"])
    assert hidden.status_code == 404

    owner_leave = await async_client.delete(
        f"{members_path}/{owner['user_id']}", headers=owner["headers"]
    )
    assert owner_leave.status_code == 400
