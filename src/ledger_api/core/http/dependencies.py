"""FastAPI dependencies that bridge HTTP requests to the auth/scope foundation."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from ledger_api.db import get_db_session
from ledger_api.features.scopes.resolver import ScopeResolver
from ledger_api.models import User
from ledger_api.settings import Settings, get_settings

from ..auth import AuthenticatedPrincipal, AuthenticationError
from ..auth.gate import AuthorizationGate
from ..auth.pipeline import authenticate_request

SessionDep = Annotated[AsyncSession, Depends(get_db_session)]


def get_app_settings(request: Request) -> Settings:
    """Return the settings the app was built with (process settings otherwise)."""

    settings = getattr(request.app.state, "settings", None)
    return settings if settings is not None else get_settings()


SettingsDep = Annotated[Settings, Depends(get_app_settings)]


async def get_current_principal(
    request: Request,
    db: SessionDep,
    settings: SettingsDep,
) -> AuthenticatedPrincipal:
    """Authenticate the incoming request and return the current principal."""

    return await authenticate_request(request, db, settings)


PrincipalDep = Annotated[AuthenticatedPrincipal, Depends(get_current_principal)]


def get_authorization_gate(principal: PrincipalDep, db: SessionDep) -> AuthorizationGate:
    """Bind the principal to a resolver sharing the request session."""

    return AuthorizationGate(principal=principal, resolver=ScopeResolver(db))


GateDep = Annotated[AuthorizationGate, Depends(get_authorization_gate)]


async def require_authenticated(principal: PrincipalDep, db: SessionDep) -> User:
    """Ensure the request is authenticated and return the persisted user."""

    user = await db.get(User, principal.user_id)
    if user is None:
        raise AuthenticationError("Unknown principal")
    return user


CurrentUserDep = Annotated[User, Depends(require_authenticated)]


__all__ = [
    "CurrentUserDep",
    "GateDep",
    "PrincipalDep",
    "SessionDep",
    "SettingsDep",
    "get_app_settings",
    "get_authorization_gate",
    "get_current_principal",
    "require_authenticated",
]
