"""Pydantic schemas for authentication payloads."""

from __future__ import annotations

from typing import Literal

from pydantic import Field, field_validator

from ledger_api.common.ids import UUIDStr
from ledger_api.common.schema import BaseSchema
from ledger_api.features.users.schemas import (
    CURRENCY_MAX_LENGTH,
    EMAIL_MAX_LENGTH,
    NAME_MAX_LENGTH,
    USERNAME_MAX_LENGTH,
    normalize_currency,
    normalize_email,
    normalize_username,
)


class RegisterRequest(BaseSchema):
    username: str = Field(min_length=1, max_length=USERNAME_MAX_LENGTH)
    email: str = Field(min_length=3, max_length=EMAIL_MAX_LENGTH)
    password: str = Field(min_length=1)
    name: str | None = Field(default=None, max_length=NAME_MAX_LENGTH)
    currency: str = Field(default="USD", min_length=1, max_length=CURRENCY_MAX_LENGTH)

    @field_validator("username")
    @classmethod
    def _v_username(cls, value: str) -> str:
        return normalize_username(value)

    @field_validator("email")
    @classmethod
    def _v_email(cls, value: str) -> str:
        return normalize_email(value)

    @field_validator("currency")
    @classmethod
    def _v_currency(cls, value: str) -> str:
        return normalize_currency(value)


class LoginRequest(BaseSchema):
    username: str = Field(min_length=1, max_length=USERNAME_MAX_LENGTH)
    password: str = Field(min_length=1)


class RefreshRequest(BaseSchema):
    """Refresh payload; the session cookie is used when the token is omitted."""

    refresh_token: str | None = None


class TokenResponse(BaseSchema):
    """Bearer token pair. ``token`` mirrors ``access_token``."""

    token: str
    access_token: str
    refresh_token: str
    token_type: Literal["bearer"] = "bearer"
    expires_in: int
    user_id: UUIDStr
    scope_id: UUIDStr | None = None


__all__ = ["LoginRequest", "RefreshRequest", "RegisterRequest", "TokenResponse"]
