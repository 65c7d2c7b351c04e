"""Helper functions shared across tests."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any
from uuid import uuid4

from httpx import AsyncClient, Response

RegisterUser = Callable[..., Awaitable[dict[str, Any]]]


def unique_name(prefix: str) -> str:
    return f"{prefix}-{uuid4().hex[:8]}"


def expect(response: Response, status_code: int) -> Any:
    """Assert ``status_code`` and return the decoded body (``None`` when empty)."""

    assert response.status_code == status_code, response.text
    return response.json() if response.content else None


async def create_source(
    client: AsyncClient,
    headers: dict[str, str],
    *,
    name: str = "Wallet",
    scope_id: str | None = None,
) -> dict[str, Any]:
    body: dict[str, Any] = {"name": name, "type": "SAVINGS", "balance": 10}
    if scope_id is not None:
        body["scope_id"] = scope_id
    return expect(await client.post("/sources", json=body, headers=headers), 201)


async def create_category(
    client: AsyncClient,
    headers: dict[str, str],
    *,
    name: str = "General",
    scope_id: str | None = None,
) -> dict[str, Any]:
    body: dict[str, Any] = {"name": name}
    if scope_id is not None:
        body["scope_id"] = scope_id
    return expect(await client.post("/categories", json=body, headers=headers), 201)


async def create_transaction(
    client: AsyncClient,
    headers: dict[str, str],
    **fields: Any,
) -> dict[str, Any]:
    """POST a transaction; a source and category are created in its scope when not given."""

    body: dict[str, Any] = {"amount": 12.5, "type": "EXPENSE"}
    body.update(fields)
    scope_id = body.get("scope_id")
    if "source_id" not in body:
        body["source_id"] = (await create_source(client, headers, scope_id=scope_id))["id"]
    if "category_id" not in body:
        body["category_id"] = (await create_category(client, headers, scope_id=scope_id))["id"]
    return expect(await client.post("/transactions", json=body, headers=headers), 201)


__all__ = [
    "RegisterUser",
    "create_category",
    "create_source",
    "create_transaction",
    "expect",
    "unique_name",
]
