"""Shared pytest fixtures for ledger API tests."""

from __future__ import annotations

import os
from collections.abc import AsyncIterator, Iterator
from typing import Any

import pytest
import pytest_asyncio
from alembic import command
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from ledger_api.db import db, session_scope
from ledger_api.db.migrations import alembic_config
from ledger_api.main import create_app
from ledger_api.settings import get_settings, reload_settings
from tests.utils import RegisterUser, unique_name

_TEST_ENV = {
    "LEDGER_ENVIRONMENT": "test",
    "LEDGER_DATABASE_MIGRATE_ON_STARTUP": "false",
    "LEDGER_TEST_FAST_HASH": "1",
    "LEDGER_JWT_SECRET": "test-jwt-secret-for-tests-please-change",
    "LEDGER_KV_BACKEND": "database",
}


@pytest.fixture(scope="session")
def _database_url(tmp_path_factory: pytest.TempPathFactory) -> str:
    """Provide a file-backed SQLite database URL for the test session."""

    db_path = tmp_path_factory.mktemp("ledger-db") / "ledger.sqlite"
    return f"sqlite+aiosqlite:///{db_path}"


@pytest.fixture(scope="session", autouse=True)
def _configure_database(_database_url: str) -> Iterator[None]:
    """Apply Alembic migrations against the ephemeral test database."""

    previous = {key: os.environ.get(key) for key in (*_TEST_ENV, "DB_DSN")}
    os.environ.update(_TEST_ENV)
    os.environ["DB_DSN"] = _database_url
    settings = reload_settings()
    assert settings.database_dsn == _database_url

    config = alembic_config(settings)
    command.upgrade(config, "head")

    yield

    command.downgrade(config, "base")
    for key, value in previous.items():
        if value is None:
            os.environ.pop(key, None)
        else:
            os.environ[key] = value
    reload_settings()


@pytest.fixture(scope="session")
def app(_configure_database: None) -> FastAPI:
    """Return an application instance for API tests."""

    return create_app(get_settings())


@pytest_asyncio.fixture(autouse=True)
async def _dispose_engine() -> AsyncIterator[None]:
    """Drop pooled connections so each test's event loop opens its own."""

    yield
    await db.dispose()


@pytest_asyncio.fixture()
async def async_client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    """Provide an HTTPX async client bound to the FastAPI app."""

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client


@pytest_asyncio.fixture()
async def session(app: FastAPI) -> AsyncIterator[AsyncSession]:
    """Return a database session bound to the test application's database."""

    async with session_scope(app.state.settings) as db_session:
        yield db_session


@pytest.fixture()
def register_user(async_client: AsyncClient) -> RegisterUser:
    """Register a fresh account and return its tokens plus auth headers."""

    async def _register(username: str | None = None, *, password: str = "secret") -> dict[str, Any]:
        name = username or unique_name("user")
        response = await async_client.post(
            "/auth/register",
            json={"username": name, "email": f"{name}@example.test", "password": password},
        )
        assert response.status_code == 200, response.text
        payload = response.json()
        payload["username"] = name
        payload["password"] = password
        payload["headers"] = {"Authorization": f"Bearer {payload['access_token']}"}
        return payload

    return _register
