from __future__ import annotations

import json

import pytest
from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError
from starlette.requests import Request

from ledger_api.common.exceptions import (
    http_exception_handler,
    integrity_error_handler,
    unhandled_exception_handler,
)

pytestmark = pytest.mark.asyncio


def _request() -> Request:
    return Request(
        {
            "type": "http",
            "method": "POST",
            "path": "/tags",
            "headers": [],
            "query_string": b"",
            "scheme": "http",
            "server": ("test", 80),
        }
    )


async def test_integrity_errors_render_conflict() -> None:
    exc = IntegrityError("INSERT INTO tags", {}, Exception("UNIQUE constraint failed"))
    response = await integrity_error_handler(_request(), exc)

    assert response.status_code == 409
    body = json.loads(response.body)
    assert body["error"] == "Conflicting data"
    assert "UNIQUE" not in response.body.decode()


async def test_http_exceptions_carry_a_short_error() -> None:
    response = await http_exception_handler(
        _request(), HTTPException(404, detail="Tag not found")
    )

    assert response.status_code == 404
    assert json.loads(response.body) == {"error": "Tag not found", "detail": "Tag not found"}


async def test_unhandled_errors_hide_internals() -> None:
    response = await unhandled_exception_handler(_request(), RuntimeError("secret"))

    assert response.status_code == 500
    assert json.loads(response.body)["error"] == "Internal server error"
    assert "secret" not in response.body.decode()
