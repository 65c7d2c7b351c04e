from __future__ import annotations

import pytest
from httpx import AsyncClient

from ledger_api.settings import get_settings
from tests.utils import RegisterUser, unique_name

pytestmark = pytest.mark.asyncio


async def test_register_returns_token_pair(
    async_client: AsyncClient, register_user: RegisterUser
) -> None:
    account = await register_user()

    assert account["token"] == account["access_token"]
    assert account["token_type"] == "bearer"
    assert account["refresh_token"]
    assert account["expires_in"] == int(get_settings().jwt_access_ttl.total_seconds())
    assert account["scope_id"]
    assert get_settings().session_cookie_name in async_client.cookies


async def test_register_rejects_duplicates(
    async_client: AsyncClient, register_user: RegisterUser
) -> None:
    account = await register_user()

    response = await async_client.post(
        "/auth/register",
        json={
            "username": account["username"],
            "email": f"{unique_name('other')}@example.test",
            "password": "pw",
        },
    )
    assert response.status_code == 409

    response = await async_client.post(
        "/auth/register",
        json={
            "username": unique_name("other"),
            "email": f"{account['username']}@example.test",
            "password": "pw",
        },
    )
    assert response.status_code == 409


async def test_register_validates_payload(async_client: AsyncClient) -> None:
    response = await async_client.post(
        "/auth/register",
        json={"username": unique_name("bad"), "email": "not-an-email", "password": "pw"},
    )
    assert response.status_code == 422

    response = await async_client.post(
        "/auth/register",
        json={"username": unique_name("bad"), "email": "x@example.test", "password": ""},
    )
    assert response.status_code == 422


async def test_login_success_and_failure(
    async_client: AsyncClient, register_user: RegisterUser
) -> None:
    account = await register_user(password="s3cret")

    ok = await async_client.post(
        "/auth/login", json={"username": account["username"], "password": "s3cret"}
    )
    assert ok.status_code == 200, ok.text
    assert ok.json()["user_id"] == account["user_id"]

    wrong = await async_client.post(
        "/auth/login", json={"username": account["username"], "password": "nope"}
    )
    assert wrong.status_code == 401
    assert wrong.headers["www-authenticate"] == "Bearer"

    unknown = await async_client.post(
        "/auth/login", json={"username": unique_name("ghost"), "password": "s3cret"}
    )
    assert unknown.status_code == 401
    assert unknown.json()["detail"] == wrong.json()["detail"]


async def test_protected_routes_require_a_valid_bearer(async_client: AsyncClient) -> None:
    missing = await async_client.get("/sources")
    assert missing.status_code == 401

    garbage = await async_client.get(
        "/sources", headers={"Authorization": "Bearer not-a-jwt"}
    )
    assert garbage.status_code == 401
    assert garbage.json()["detail"] == "Invalid token"
    assert garbage.json()["error"] == "Invalid token"


async def test_refresh_token_cannot_be_used_as_access_token(
    async_client: AsyncClient, register_user: RegisterUser
) -> None:
    account = await register_user()
    response = await async_client.get(
        "/sources", headers={"Authorization": f"Bearer {account['refresh_token']}"}
    )
    assert response.status_code == 401


async def test_refresh_rotates_and_revokes_previous_token(
    async_client: AsyncClient, register_user: RegisterUser
) -> None:
    account = await register_user()

    rotated = await async_client.post(
        "/auth/refresh", json={"refresh_token": account["refresh_token"]}
    )
    assert rotated.status_code == 200, rotated.text
    new_refresh = rotated.json()["refresh_token"]
    assert new_refresh != account["refresh_token"]

    replay = await async_client.post(
        "/auth/refresh", json={"refresh_token": account["refresh_token"]}
    )
    assert replay.status_code == 401

    again = await async_client.post("/auth/refresh", json={"refresh_token": new_refresh})
    assert again.status_code == 200


async def test_refresh_falls_back_to_session_cookie(
    async_client: AsyncClient, register_user: RegisterUser
) -> None:
    await register_user()

    response = await async_client.post("/auth/refresh")
    assert response.status_code == 200, response.text

    async_client.cookies.clear()
    response = await async_client.post("/auth/refresh")
    assert response.status_code == 401


async def test_logout_revokes_the_refresh_session(
    async_client: AsyncClient, register_user: RegisterUser
) -> None:
    account = await register_user()

    response = await async_client.post("/auth/logout", headers=account["headers"])
    assert response.status_code == 204

    response = await async_client.post(
        "/auth/refresh", json={"refresh_token": account["refresh_token"]}
    )
    assert response.status_code == 401
