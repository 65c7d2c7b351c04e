"""Pydantic schemas for money sources."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import Field

from ledger_api.common.ids import UUIDStr
from ledger_api.common.schema import BaseSchema, Money
from ledger_api.models import SourceType


class SourceCreate(BaseSchema):
    """New source; lands in the caller's personal scope unless ``scope_id`` is given."""

    name: str = Field(min_length=1, max_length=255)
    type: SourceType
    balance: Money = Decimal("0")
    scope_id: UUIDStr | None = None


class SourceUpdate(BaseSchema):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    type: SourceType | None = None
    balance: Money | None = None


class SourceOut(BaseSchema):
    id: UUIDStr
    scope_id: UUIDStr
    user_id: UUIDStr | None = None
    name: str
    type: SourceType
    balance: Money
    created_at: datetime
    updated_at: datetime


__all__ = ["SourceCreate", "SourceOut", "SourceUpdate"]
