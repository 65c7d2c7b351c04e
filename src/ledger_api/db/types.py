"""Database column types shared across ledger models."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from typing import Any

from sqlalchemy.types import CHAR, DateTime, TypeDecorator

__all__ = ["GUID", "UTCDateTime"]


class GUID(TypeDecorator):
    """Platform-agnostic UUID storage.

    Native UUID on PostgreSQL, a 36-character string elsewhere. Values always
    come back to Python as ``uuid.UUID``.
    """

    impl = CHAR
    cache_ok = True

    def load_dialect_impl(self, dialect: Any):
        if dialect.name in {"postgresql", "postgres"}:
            from sqlalchemy.dialects.postgresql import UUID

            return dialect.type_descriptor(UUID(as_uuid=True))
        return dialect.type_descriptor(CHAR(36))

    def process_bind_param(self, value: Any, dialect: Any):
        if value is None:
            return None
        if dialect.name in {"postgresql", "postgres"}:
            return value if isinstance(value, uuid.UUID) else uuid.UUID(str(value))
        if isinstance(value, uuid.UUID):
            return str(value)
        return str(uuid.UUID(str(value)))

    def process_result_value(self, value: Any, dialect: Any):
        if value is None:
            return None
        if isinstance(value, uuid.UUID):
            return value
        return uuid.UUID(str(value))

    @property
    def python_type(self) -> type[uuid.UUID]:
        return uuid.UUID


def _as_utc(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.replace(tzinfo=UTC) if value.tzinfo is None else value.astimezone(UTC)
    return value


class UTCDateTime(TypeDecorator):
    """Timezone-aware datetime; naive values are taken to be UTC already.

    SQLite drops the offset on storage, so reads are re-tagged as UTC.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: Any, dialect: Any):
        return _as_utc(value)

    def process_result_value(self, value: Any, dialect: Any):
        return _as_utc(value)
