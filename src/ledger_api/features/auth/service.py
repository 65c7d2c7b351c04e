"""Registration, login, token refresh and logout."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import jwt
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.ext.asyncio import AsyncSession

from ledger_api.common.logging import log_context
from ledger_api.core.auth import AuthenticatedPrincipal, AuthenticationError
from ledger_api.core.security import create_signed_token, decode_signed_token, verify_password
from ledger_api.features.users.repository import UsersRepository
from ledger_api.features.users.service import UsersService
from ledger_api.infra.kv import KeyValueStore
from ledger_api.models import User
from ledger_api.settings import Settings

from .schemas import LoginRequest, RegisterRequest, TokenResponse
from .sessions import CookieStateStore, SessionState, SessionStore, new_session_id

logger = logging.getLogger(__name__)

REFRESH_TOKEN_STATE_KEY = "refresh_token"


@dataclass(frozen=True, slots=True)
class IssuedSession:
    """Tokens handed to the client plus the cookie state that tracks them."""

    tokens: TokenResponse
    state: SessionState


class AuthService:
    """Issue and rotate bearer tokens backed by server-side sessions."""

    def __init__(self, *, session: AsyncSession, settings: Settings, kv: KeyValueStore) -> None:
        self._session = session
        self._settings = settings
        self._users = UsersRepository(session)
        self.sessions = SessionStore(kv, settings)
        self.cookies = CookieStateStore(kv, settings)

    async def register(self, payload: RegisterRequest) -> IssuedSession:
        user = await UsersService(session=self._session).register_user(
            username=payload.username,
            email=payload.email,
            password=payload.password,
            name=payload.name,
            currency=payload.currency,
        )
        return await self._issue(user)

    async def login(self, payload: LoginRequest) -> IssuedSession:
        """Verify the password and open a new session."""

        user = await self._users.get_by_username(payload.username)
        valid = user is not None and await run_in_threadpool(
            verify_password, payload.password, user.password_hash
        )
        if not valid:
            logger.info("auth.login.failed", extra=log_context(username=payload.username))
            raise AuthenticationError("Invalid username or password")
        assert user is not None
        logger.info("auth.login.success", extra=log_context(user_id=user.id))
        return await self._issue(user)

    async def refresh(self, refresh_token: str) -> IssuedSession:
        """Exchange a refresh token for a new pair, revoking the presented one."""

        try:
            payload = decode_signed_token(
                refresh_token,
                secret=self._settings.jwt_secret_value,
                algorithm=self._settings.jwt_algorithm,
                expected_type="refresh",
            )
        except (jwt.PyJWTError, ValueError) as exc:
            raise AuthenticationError("Invalid refresh token") from exc

        if not await self.sessions.matches(
            session_id=payload.session_id,
            user_id=payload.user_id,
            refresh_token=refresh_token,
        ):
            logger.info(
                "auth.refresh.rejected",
                extra=log_context(user_id=payload.user_id),
            )
            raise AuthenticationError("Session expired or revoked")

        user = await self._users.get_by_id(payload.user_id)
        if user is None:
            await self.sessions.delete(payload.session_id)
            raise AuthenticationError("Unknown principal")

        logger.info("auth.refresh.success", extra=log_context(user_id=user.id))
        return await self._issue(user, session_id=payload.session_id)

    async def logout(self, principal: AuthenticatedPrincipal) -> None:
        await self.sessions.delete(principal.session_id)
        logger.info("auth.logout", extra=log_context(user_id=principal.user_id))

    async def _issue(self, user: User, *, session_id: str | None = None) -> IssuedSession:
        sid = session_id or new_session_id()
        common = {
            "user_id": user.id,
            "session_id": sid,
            "scope_id": user.scope_id,
            "secret": self._settings.jwt_secret_value,
            "algorithm": self._settings.jwt_algorithm,
        }
        access_token, _ = create_signed_token(
            token_type="access", expires_in=self._settings.jwt_access_ttl, **common
        )
        refresh_token, _ = create_signed_token(
            token_type="refresh", expires_in=self._settings.jwt_refresh_ttl, **common
        )
        await self.sessions.save(session_id=sid, user_id=user.id, refresh_token=refresh_token)

        tokens = TokenResponse(
            token=access_token,
            access_token=access_token,
            refresh_token=refresh_token,
            expires_in=int(self._settings.jwt_access_ttl.total_seconds()),
            user_id=user.id,
            scope_id=user.scope_id,
        )
        state = SessionState(session_id=sid, values={REFRESH_TOKEN_STATE_KEY: refresh_token})
        return IssuedSession(tokens=tokens, state=state)


__all__ = ["AuthService", "IssuedSession", "REFRESH_TOKEN_STATE_KEY"]
