"""Database engine + session factory.

Standard behavior:
- One engine per process (created lazily from settings or at app startup)
- One session per request (FastAPI dependency)
- The request dependency owns the transaction: commit once on success,
  rollback on any exception
- SQLite: foreign keys on, busy timeout, explicit BEGIN (so SAVEPOINT works),
  StaticPool for in-memory databases
- Other backends: bounded pool (open/idle connections) recycled after the
  configured maximum lifetime, pre-ping, bounded connect timeout
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from fastapi import Request
from sqlalchemy import event, text
from sqlalchemy.engine import URL, make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from ledger_api.settings import Settings, get_settings

__all__ = [
    "DatabaseConfig",
    "Database",
    "db",
    "build_async_url",
    "get_sessionmaker",
    "session_scope",
    "get_db_session",
    "ping_database",
]

_ASYNC_DRIVERS = {
    "sqlite": "sqlite+aiosqlite",
    "postgresql": "postgresql+asyncpg",
    "mysql": "mysql+aiomysql",
}


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    """Connection settings for the process-wide engine.

    ``url`` is any SQLAlchemy URL. Bare sync driver names are upgraded to the
    matching async driver (``sqlite`` -> ``sqlite+aiosqlite``).
    """

    url: str
    echo: bool = False

    max_open_conns: int = 25
    max_idle_conns: int = 25
    conn_max_lifetime_s: float = 300.0
    connect_timeout_s: float = 5.0

    @classmethod
    def from_settings(cls, settings: Settings) -> DatabaseConfig:
        if not settings.database_dsn:
            raise RuntimeError("Database settings are required (set DB_DSN).")
        return cls(
            url=settings.database_dsn,
            echo=bool(settings.database_echo),
            max_open_conns=int(settings.database_max_open_conns),
            max_idle_conns=int(settings.database_max_idle_conns),
            conn_max_lifetime_s=settings.database_conn_max_lifetime.total_seconds(),
            connect_timeout_s=settings.database_connect_timeout.total_seconds(),
        )


# ---- URL helpers ------------------------------------------------------------

def _is_sqlite_memory(url: URL) -> bool:
    database = (url.database or "").strip()
    if not database or database == ":memory:":
        return True
    return database.startswith("file:") and (url.query or {}).get("mode") == "memory"


def _ensure_sqlite_parent_dir(url: URL) -> None:
    database = (url.database or "").strip()
    if not database or database == ":memory:" or database.startswith("file:"):
        return
    path = Path(database)
    if not path.is_absolute():
        path = (Path.cwd() / path).resolve()
    path.parent.mkdir(parents=True, exist_ok=True)


def build_async_url(raw: str) -> URL:
    """Return the async SQLAlchemy URL for ``raw``."""
    url = make_url(raw)
    if "+" not in url.drivername:
        async_driver = _ASYNC_DRIVERS.get(url.drivername)
        if async_driver is not None:
            url = url.set(drivername=async_driver)
    elif url.drivername == "sqlite+pysqlite":
        url = url.set(drivername="sqlite+aiosqlite")
    return url


def _build_engine_kwargs(url: URL, cfg: DatabaseConfig) -> dict[str, Any]:
    kwargs: dict[str, Any] = {"echo": cfg.echo, "pool_pre_ping": True}

    if url.get_backend_name() == "sqlite":
        kwargs["connect_args"] = {
            "check_same_thread": False,
            "timeout": cfg.connect_timeout_s,
        }
        if _is_sqlite_memory(url):
            kwargs["poolclass"] = StaticPool
        return kwargs

    idle = min(cfg.max_idle_conns, cfg.max_open_conns)
    kwargs.update(
        pool_size=max(1, idle),
        max_overflow=max(0, cfg.max_open_conns - max(1, idle)),
        pool_timeout=cfg.connect_timeout_s,
        pool_recycle=int(cfg.conn_max_lifetime_s),
    )
    if url.get_backend_name() == "postgresql":
        kwargs["connect_args"] = {"timeout": cfg.connect_timeout_s}
    elif url.get_backend_name() == "mysql":
        kwargs["connect_args"] = {"connect_timeout": int(cfg.connect_timeout_s)}
    return kwargs


# ---- Database object --------------------------------------------------------

class Database:
    """Holds the process-wide engine + sessionmaker.

    Call ``init(cfg)`` on startup (repeat calls with the same config are
    no-ops) and ``await dispose()`` on shutdown.
    """

    def __init__(self) -> None:
        self._cfg: DatabaseConfig | None = None
        self._engine: AsyncEngine | None = None
        self._sessionmaker: async_sessionmaker[AsyncSession] | None = None

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            raise RuntimeError("Database not initialized. Call db.init(...) at startup.")
        return self._engine

    @property
    def sessionmaker(self) -> async_sessionmaker[AsyncSession]:
        if self._sessionmaker is None:
            raise RuntimeError("Database not initialized. Call db.init(...) at startup.")
        return self._sessionmaker

    @property
    def config(self) -> DatabaseConfig:
        if self._cfg is None:
            raise RuntimeError("Database not initialized.")
        return self._cfg

    def init(self, cfg: DatabaseConfig) -> None:
        """Create engine + sessionmaker (idempotent for identical config)."""
        if self._cfg == cfg and self._engine is not None:
            return

        url = build_async_url(cfg.url)
        if url.get_backend_name() == "sqlite":
            _ensure_sqlite_parent_dir(url)

        engine = create_async_engine(url, **_build_engine_kwargs(url, cfg))

        if url.get_backend_name() == "sqlite":
            busy_ms = int(cfg.connect_timeout_s * 1000)

            @event.listens_for(engine.sync_engine, "connect")
            def _sqlite_on_connect(dbapi_conn, _):
                # The driver's implicit BEGIN breaks SAVEPOINT; emit our own below.
                dbapi_conn.isolation_level = None
                cur = dbapi_conn.cursor()
                try:
                    cur.execute("PRAGMA foreign_keys=ON")
                    cur.execute(f"PRAGMA busy_timeout={busy_ms}")
                finally:
                    cur.close()

            @event.listens_for(engine.sync_engine, "begin")
            def _sqlite_begin(conn):
                conn.exec_driver_sql("BEGIN")

        self._cfg = cfg
        self._engine = engine
        self._sessionmaker = async_sessionmaker(
            bind=engine,
            expire_on_commit=False,
            autoflush=False,
        )

    async def dispose(self) -> None:
        """Dispose engine (call on shutdown)."""
        if self._engine is not None:
            await self._engine.dispose()
        self._engine = None
        self._sessionmaker = None
        self._cfg = None


db = Database()


def get_sessionmaker(settings: Settings | None = None) -> async_sessionmaker[AsyncSession]:
    """Return the process sessionmaker, initializing the engine from settings."""
    db.init(DatabaseConfig.from_settings(settings or get_settings()))
    return db.sessionmaker


async def ping_database(timeout_s: float | None = None) -> None:
    """Run ``SELECT 1`` within the connect timeout."""
    timeout = timeout_s if timeout_s is not None else db.config.connect_timeout_s

    async def _ping() -> None:
        async with db.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    await asyncio.wait_for(_ping(), timeout=timeout)


async def close_session(session: AsyncSession) -> None:
    await asyncio.shield(session.close())


@asynccontextmanager
async def session_scope(settings: Settings | None = None) -> AsyncIterator[AsyncSession]:
    session = get_sessionmaker(settings)()
    try:
        yield session
    finally:
        await close_session(session)


async def get_db_session(request: Request) -> AsyncIterator[AsyncSession]:
    """FastAPI dependency: one AsyncSession and one transaction per request."""
    settings = getattr(request.app.state, "settings", None)
    session = get_sessionmaker(settings)()
    try:
        await session.begin()
        yield session
        if session.in_transaction():
            await session.commit()
    except Exception:
        await session.rollback()
        raise
    finally:
        await close_session(session)
