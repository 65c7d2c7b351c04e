"""Pydantic schemas for groups and their members."""

from __future__ import annotations

from datetime import datetime

from pydantic import AliasChoices, Field, field_validator

from ledger_api.common.ids import UUIDStr
from ledger_api.common.schema import BaseSchema


def _strip_required(value: str) -> str:
    cleaned = value.strip()
    if not cleaned:
        raise ValueError("must not be blank")
    return cleaned


class GroupCreate(BaseSchema):
    """Payload for creating a group.

    ``user_roles`` maps user ids or usernames to the role each member
    receives (``view`` or ``write``).
    """

    group_name: str = Field(min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=512)
    icon: str | None = Field(default=None, max_length=255)
    user_roles: dict[str, str] = Field(default_factory=dict)

    @field_validator("group_name")
    @classmethod
    def _v_name(cls, value: str) -> str:
        return _strip_required(value)


class GroupUpdate(BaseSchema):
    group_name: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=512)
    icon: str | None = Field(default=None, max_length=255)
    status: str | None = Field(default=None, min_length=1, max_length=32)

    @field_validator("group_name")
    @classmethod
    def _v_name(cls, value: str | None) -> str | None:
        return None if value is None else _strip_required(value)


class GroupOut(BaseSchema):
    id: UUIDStr
    owner_id: UUIDStr
    scope_id: UUIDStr
    group_name: str
    description: str | None = None
    icon: str | None = None
    status: str
    created_at: datetime
    updated_at: datetime


class MemberAdd(BaseSchema):
    """Add (or re-role) a member. ``userID`` is accepted for ``user_id``."""

    user_id: str = Field(
        min_length=1,
        validation_alias=AliasChoices("user_id", "userID", "userId"),
    )
    role: str


class MemberUpdate(BaseSchema):
    role: str


class MemberOut(BaseSchema):
    group_id: UUIDStr
    scope_id: UUIDStr
    user_id: UUIDStr
    username: str | None = None
    role: str
    created_at: datetime
    updated_at: datetime


__all__ = [
    "GroupCreate",
    "GroupOut",
    "GroupUpdate",
    "MemberAdd",
    "MemberOut",
    "MemberUpdate",
]
