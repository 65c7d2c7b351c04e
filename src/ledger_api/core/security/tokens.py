"""JWT helpers for issuing and decoding bearer tokens."""

from __future__ import annotations

import secrets
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any, Literal
from uuid import UUID

import jwt

from ledger_api.db.base import utc_now

TokenType = Literal["access", "refresh"]


@dataclass(frozen=True, slots=True)
class TokenPayload:
    """Decoded claims carried by ledger tokens."""

    user_id: UUID
    session_id: str
    scope_id: UUID | None
    token_type: TokenType
    issued_at: datetime
    expires_at: datetime


def create_signed_token(
    *,
    user_id: UUID,
    session_id: str,
    scope_id: UUID | None,
    token_type: TokenType,
    secret: str,
    algorithm: str,
    expires_in: timedelta,
) -> tuple[str, datetime]:
    """Return a signed JWT and its expiry."""

    issued = utc_now()
    expires = issued + expires_in
    payload: dict[str, Any] = {
        "sub": str(user_id),
        "sid": session_id,
        "typ": token_type,
        "jti": secrets.token_hex(8),
        "iat": int(issued.timestamp()),
        "exp": int(expires.timestamp()),
    }
    if scope_id is not None:
        payload["scope_id"] = str(scope_id)
    return jwt.encode(payload, secret, algorithm=algorithm), expires


def decode_token(token: str, *, secret: str, algorithms: Sequence[str]) -> dict[str, Any]:
    """Decode a JWT and return its payload."""

    return jwt.decode(
        token,
        secret,
        algorithms=list(algorithms),
        options={"require": ["sub", "exp", "iat", "sid", "typ"]},
    )


def decode_signed_token(
    token: str,
    *,
    secret: str,
    algorithm: str,
    expected_type: TokenType,
) -> TokenPayload:
    """Decode ``token`` into a :class:`TokenPayload`.

    Raises ``jwt.PyJWTError`` for signature, expiry or shape problems and
    ``ValueError`` for a token of the wrong type or a malformed subject.
    """

    claims = decode_token(token, secret=secret, algorithms=[algorithm])
    if claims.get("typ") != expected_type:
        raise ValueError(f"Expected a {expected_type} token")
    raw_scope = claims.get("scope_id")
    return TokenPayload(
        user_id=UUID(str(claims["sub"])),
        session_id=str(claims["sid"]),
        scope_id=UUID(str(raw_scope)) if raw_scope else None,
        token_type=expected_type,
        issued_at=datetime.fromtimestamp(int(claims["iat"]), tz=UTC),
        expires_at=datetime.fromtimestamp(int(claims["exp"]), tz=UTC),
    )


__all__ = [
    "TokenPayload",
    "TokenType",
    "create_signed_token",
    "decode_signed_token",
    "decode_token",
]
