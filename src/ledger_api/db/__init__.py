"""DB package exports."""

from .base import NAMING_CONVENTION, Base, TimestampMixin, UUIDPrimaryKeyMixin, metadata, utc_now
from .database import (
    Database,
    DatabaseConfig,
    build_async_url,
    db,
    get_db_session,
    get_sessionmaker,
    ping_database,
    session_scope,
)
from .transaction import transaction_scope
from .types import GUID, UTCDateTime

__all__ = [
    "Base",
    "metadata",
    "NAMING_CONVENTION",
    "utc_now",
    "UUIDPrimaryKeyMixin",
    "TimestampMixin",
    "GUID",
    "UTCDateTime",
    "Database",
    "DatabaseConfig",
    "db",
    "build_async_url",
    "get_sessionmaker",
    "ping_database",
    "session_scope",
    "get_db_session",
    "transaction_scope",
]
