"""Server-side session records and cookie-bound client state.

Both stores sit on a :class:`~ledger_api.infra.kv.KeyValueStore`:

* ``SessionStore`` keeps one record per login session under
  ``<prefix>session:<sid>``; the record pins the current refresh token so a
  rotated or revoked token is rejected.
* ``CookieStateStore`` keeps the client state addressed by the session
  cookie under ``<prefix>cookie:<sid>``. Reading never yields ``None``; a
  missing cookie or entry produces an empty :class:`SessionState`.
"""

from __future__ import annotations

import hashlib
import json
import logging
import secrets
from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID

from fastapi import Request, Response

from ledger_api.db import utc_now
from ledger_api.infra.kv import KeyValueStore
from ledger_api.settings import Settings

logger = logging.getLogger(__name__)


def new_session_id() -> str:
    return secrets.token_urlsafe(24)


def _token_digest(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


@dataclass(frozen=True, slots=True)
class SessionRecord:
    session_id: str
    user_id: UUID
    refresh_digest: str
    created_at: datetime


class SessionStore:
    """Refresh-token bookkeeping keyed by session id."""

    def __init__(self, kv: KeyValueStore, settings: Settings) -> None:
        self._kv = kv
        self._prefix = settings.kv_key_prefix
        self._ttl = settings.jwt_refresh_ttl

    def key(self, session_id: str) -> str:
        return f"{self._prefix}session:{session_id}"

    async def save(self, *, session_id: str, user_id: UUID, refresh_token: str) -> SessionRecord:
        record = SessionRecord(
            session_id=session_id,
            user_id=user_id,
            refresh_digest=_token_digest(refresh_token),
            created_at=utc_now(),
        )
        payload = {
            "user_id": str(record.user_id),
            "refresh_digest": record.refresh_digest,
            "created_at": record.created_at.isoformat(),
        }
        await self._kv.set(self.key(session_id), json.dumps(payload), ttl=self._ttl)
        return record

    async def load(self, session_id: str) -> SessionRecord | None:
        raw = await self._kv.get(self.key(session_id))
        if raw is None:
            return None
        try:
            data = json.loads(raw)
            return SessionRecord(
                session_id=session_id,
                user_id=UUID(data["user_id"]),
                refresh_digest=str(data["refresh_digest"]),
                created_at=datetime.fromisoformat(data["created_at"]),
            )
        except (ValueError, KeyError, TypeError):
            logger.warning("session.record.corrupt")
            return None

    async def matches(self, *, session_id: str, user_id: UUID, refresh_token: str) -> bool:
        record = await self.load(session_id)
        if record is None or record.user_id != user_id:
            return False
        return secrets.compare_digest(record.refresh_digest, _token_digest(refresh_token))

    async def delete(self, session_id: str) -> bool:
        return await self._kv.delete(self.key(session_id))


@dataclass(slots=True)
class SessionState:
    """Client state behind the session cookie (empty when there is none)."""

    session_id: str | None = None
    values: dict[str, str] = field(default_factory=dict)

    def get(self, key: str) -> str | None:
        return self.values.get(key)

    @property
    def is_empty(self) -> bool:
        return self.session_id is None or not self.values


class CookieStateStore:
    """Read and write :class:`SessionState` through the session cookie."""

    def __init__(self, kv: KeyValueStore, settings: Settings) -> None:
        self._kv = kv
        self._prefix = settings.kv_key_prefix
        self._ttl = settings.jwt_refresh_ttl
        self._cookie_name = settings.session_cookie_name
        self._secure = settings.session_cookie_secure

    def key(self, session_id: str) -> str:
        return f"{self._prefix}cookie:{session_id}"

    async def read(self, request: Request) -> SessionState:
        session_id = (request.cookies.get(self._cookie_name) or "").strip()
        if not session_id:
            return SessionState()
        raw = await self._kv.get(self.key(session_id))
        if raw is None:
            return SessionState(session_id=session_id)
        try:
            values = json.loads(raw)
        except ValueError:
            values = {}
        if not isinstance(values, dict):
            values = {}
        return SessionState(
            session_id=session_id,
            values={str(k): str(v) for k, v in values.items()},
        )

    async def write(self, response: Response, state: SessionState) -> None:
        if state.session_id is None:
            raise ValueError("Session state needs a session id before it can be written")
        await self._kv.set(self.key(state.session_id), json.dumps(state.values), ttl=self._ttl)
        response.set_cookie(
            key=self._cookie_name,
            value=state.session_id,
            max_age=int(self._ttl.total_seconds()),
            path="/",
            httponly=True,
            secure=self._secure,
            samesite="lax",
        )

    async def clear(self, response: Response, state: SessionState) -> None:
        if state.session_id is not None:
            await self._kv.delete(self.key(state.session_id))
        response.delete_cookie(
            key=self._cookie_name,
            path="/",
            httponly=True,
            secure=self._secure,
            samesite="lax",
        )


__all__ = [
    "CookieStateStore",
    "SessionRecord",
    "SessionState",
    "SessionStore",
    "new_session_id",
]
