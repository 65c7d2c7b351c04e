"""Enum column type used by every ledger model."""

from __future__ import annotations

from enum import Enum

from sqlalchemy import Enum as SAEnum

ENUM_LENGTH = 16


def value_enum(enum_cls: type[Enum], name: str) -> SAEnum:
    """Non-native enum column storing member values (``"EXPENSE"``, ``"owner"``)."""

    return SAEnum(
        enum_cls,
        name=name,
        native_enum=False,
        length=ENUM_LENGTH,
        values_callable=lambda cls: [member.value for member in cls],
    )


__all__ = ["ENUM_LENGTH", "value_enum"]
