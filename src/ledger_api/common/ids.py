"""Identifier helpers for the ledger API."""

from __future__ import annotations

import secrets
import time
import uuid
from collections.abc import Callable
from typing import Annotated

from pydantic import Field

__all__ = ["UUID_DESCRIPTION", "UUIDStr", "generate_uuid7"]

UUID_DESCRIPTION = "UUIDv7 (RFC 9562) generated in the application layer."

UUIDStr = Annotated[
    uuid.UUID,
    Field(
        description=UUID_DESCRIPTION,
    ),
]


def _resolve_uuid7() -> Callable[[], uuid.UUID]:
    """Return the stdlib uuid7 factory when available."""

    maybe_uuid7 = getattr(uuid, "uuid7", None)
    if callable(maybe_uuid7):
        return maybe_uuid7
    return _uuid7


def _uuid7() -> uuid.UUID:
    # 48-bit unix millis, version 7, RFC 4122 variant, 74 random bits.
    millis = time.time_ns() // 1_000_000
    rand = secrets.randbits(74)
    value = (millis & ((1 << 48) - 1)) << 80
    value |= 0x7 << 76
    value |= (rand >> 62) << 64
    value |= 0b10 << 62
    value |= rand & ((1 << 62) - 1)
    return uuid.UUID(int=value)


_uuid7_factory = _resolve_uuid7()


def generate_uuid7() -> uuid.UUID:
    """Return a sortable UUID for ledger identifiers (prefers RFC 9562 uuid7)."""

    return _uuid7_factory()
