"""Pydantic schemas for transactions and their tags."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import Field, model_validator

from ledger_api.common.ids import UUIDStr
from ledger_api.common.schema import BaseSchema, Money
from ledger_api.db import utc_now
from ledger_api.models import TransactionType


class TransactionCreate(BaseSchema):
    """New transaction plus the names of the tags it carries.

    The source and category must live in a scope the caller can write. Tag
    names are trimmed and de-duplicated; unknown names are created in the
    transaction's scope.
    """

    source_id: UUIDStr
    category_id: UUIDStr
    timestamp: datetime = Field(default_factory=utc_now)
    amount: Money = Field(ge=Decimal("0"))
    type: TransactionType
    description: str | None = Field(default=None, max_length=512)
    tags: list[str] = Field(default_factory=list)
    scope_id: UUIDStr | None = None


_REQUIRED_ON_UPDATE = ("source_id", "category_id", "timestamp", "amount", "type")


class TransactionUpdate(BaseSchema):
    """Partial update; omitting ``tags`` keeps the current tag set."""

    source_id: UUIDStr | None = None
    category_id: UUIDStr | None = None
    timestamp: datetime | None = None
    amount: Money | None = Field(default=None, ge=Decimal("0"))
    type: TransactionType | None = None
    description: str | None = Field(default=None, max_length=512)
    tags: list[str] | None = None

    @model_validator(mode="after")
    def _no_explicit_nulls(self) -> TransactionUpdate:
        cleared = [
            name
            for name in _REQUIRED_ON_UPDATE
            if name in self.model_fields_set and getattr(self, name) is None
        ]
        if cleared:
            raise ValueError(f"Fields cannot be null: {', '.join(cleared)}")
        return self


class TransactionOut(BaseSchema):
    id: UUIDStr
    scope_id: UUIDStr
    user_id: UUIDStr | None = None
    source_id: UUIDStr | None = None
    category_id: UUIDStr | None = None
    timestamp: datetime
    amount: Money
    type: TransactionType
    description: str | None = None
    tags: list[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class TransactionTagAttach(BaseSchema):
    """Attach an existing tag by id, or a tag by name (created when missing)."""

    tag_id: UUIDStr | None = None
    name: str | None = None

    @model_validator(mode="after")
    def _exactly_one(self) -> TransactionTagAttach:
        if (self.tag_id is None) == (self.name is None):
            raise ValueError("Provide exactly one of 'tag_id' or 'name'")
        return self


class TransactionTagOut(BaseSchema):
    transaction_id: UUIDStr
    tag_id: UUIDStr
    name: str
    scope_id: UUIDStr


__all__ = [
    "TransactionCreate",
    "TransactionOut",
    "TransactionTagAttach",
    "TransactionTagOut",
    "TransactionUpdate",
]
