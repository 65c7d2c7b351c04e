"""Pydantic schemas for spending categories."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field

from ledger_api.common.ids import UUIDStr
from ledger_api.common.schema import BaseSchema


class CategoryCreate(BaseSchema):
    name: str = Field(min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=512)
    icon: str | None = Field(default=None, max_length=255)
    scope_id: UUIDStr | None = None


class CategoryUpdate(BaseSchema):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=512)
    icon: str | None = Field(default=None, max_length=255)


class CategoryOut(BaseSchema):
    id: UUIDStr
    scope_id: UUIDStr
    user_id: UUIDStr | None = None
    name: str
    description: str | None = None
    icon: str | None = None
    created_at: datetime
    updated_at: datetime


__all__ = ["CategoryCreate", "CategoryOut", "CategoryUpdate"]
