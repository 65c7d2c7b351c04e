"""Programmatic Alembic runner used by startup and the test suite."""

from __future__ import annotations

import asyncio

from alembic import command
from alembic.config import Config

from ledger_api.settings import Settings, get_settings

__all__ = ["alembic_config", "run_migrations", "run_migrations_async"]


def alembic_config(settings: Settings | None = None) -> Config:
    """Build an Alembic config pointing at the packaged migrations."""

    resolved = settings or get_settings()
    if not resolved.database_dsn:
        raise RuntimeError("Database settings are required (set DB_DSN).")

    ini_path = resolved.alembic_ini_path
    config = Config(str(ini_path)) if ini_path.exists() else Config()
    config.set_main_option("script_location", str(resolved.alembic_migrations_dir))
    config.set_main_option("sqlalchemy.url", resolved.database_dsn)
    # The application owns logging configuration.
    config.attributes["configure_logger"] = False
    return config


def run_migrations(settings: Settings | None = None, *, revision: str = "head") -> None:
    command.upgrade(alembic_config(settings), revision)


async def run_migrations_async(
    settings: Settings | None = None,
    *,
    revision: str = "head",
) -> None:
    # env.py drives an async engine with asyncio.run, so it needs its own thread.
    await asyncio.to_thread(run_migrations, settings, revision=revision)
