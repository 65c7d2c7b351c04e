"""Pydantic schemas for user payloads."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field, field_validator

from ledger_api.common.ids import UUIDStr
from ledger_api.common.schema import BaseSchema

USERNAME_MAX_LENGTH = 64
EMAIL_MAX_LENGTH = 320
NAME_MAX_LENGTH = 255
CURRENCY_MAX_LENGTH = 8


def normalize_username(value: str) -> str:
    cleaned = value.strip()
    if not cleaned:
        raise ValueError("Username must not be blank")
    return cleaned


def normalize_email(value: str) -> str:
    cleaned = value.strip().lower()
    local, sep, domain = cleaned.partition("@")
    if not sep or not local or not domain:
        raise ValueError("Email must contain '@'")
    return cleaned


def normalize_currency(value: str) -> str:
    cleaned = value.strip().upper()
    if not cleaned:
        raise ValueError("Currency must not be blank")
    return cleaned


class UserOut(BaseSchema):
    """Profile of a user account."""

    id: UUIDStr
    username: str
    email: str
    name: str | None = None
    currency: str
    scope_id: UUIDStr | None = None
    created_at: datetime
    updated_at: datetime


class UserUpdate(BaseSchema):
    """Fields a user may change on their own account."""

    username: str | None = Field(default=None, min_length=1, max_length=USERNAME_MAX_LENGTH)
    email: str | None = Field(default=None, max_length=EMAIL_MAX_LENGTH)
    name: str | None = Field(default=None, max_length=NAME_MAX_LENGTH)
    currency: str | None = Field(default=None, min_length=1, max_length=CURRENCY_MAX_LENGTH)
    password: str | None = Field(default=None, min_length=1)

    @field_validator("username")
    @classmethod
    def _v_username(cls, value: str | None) -> str | None:
        return None if value is None else normalize_username(value)

    @field_validator("email")
    @classmethod
    def _v_email(cls, value: str | None) -> str | None:
        return None if value is None else normalize_email(value)

    @field_validator("currency")
    @classmethod
    def _v_currency(cls, value: str | None) -> str | None:
        return None if value is None else normalize_currency(value)


__all__ = [
    "CURRENCY_MAX_LENGTH",
    "EMAIL_MAX_LENGTH",
    "NAME_MAX_LENGTH",
    "USERNAME_MAX_LENGTH",
    "UserOut",
    "UserUpdate",
    "normalize_currency",
    "normalize_email",
    "normalize_username",
]
