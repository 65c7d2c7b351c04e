"""Pydantic schemas for tags."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field, field_validator

from ledger_api.common.ids import UUIDStr
from ledger_api.common.schema import BaseSchema
from ledger_api.models import TAG_NAME_MAX_LENGTH


def _clean_name(value: str) -> str:
    cleaned = value.strip()
    if not cleaned:
        raise ValueError("Tag name must not be blank")
    return cleaned


class TagCreate(BaseSchema):
    name: str = Field(min_length=1, max_length=TAG_NAME_MAX_LENGTH)
    scope_id: UUIDStr | None = None

    @field_validator("name")
    @classmethod
    def _v_name(cls, value: str) -> str:
        return _clean_name(value)


class TagUpdate(BaseSchema):
    name: str = Field(min_length=1, max_length=TAG_NAME_MAX_LENGTH)

    @field_validator("name")
    @classmethod
    def _v_name(cls, value: str) -> str:
        return _clean_name(value)


class TagOut(BaseSchema):
    id: UUIDStr
    scope_id: UUIDStr
    user_id: UUIDStr | None = None
    name: str
    created_at: datetime
    updated_at: datetime


__all__ = ["TagCreate", "TagOut", "TagUpdate"]
