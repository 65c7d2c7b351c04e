"""Bearer-token authentication for incoming requests."""

from __future__ import annotations

import logging

import jwt
from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession

from ledger_api.common.logging import log_context
from ledger_api.core.security.tokens import decode_signed_token
from ledger_api.models import User
from ledger_api.settings import Settings

from .errors import AuthenticationError
from .principal import AuthenticatedPrincipal

logger = logging.getLogger(__name__)


def extract_bearer_token(request: Request) -> str:
    """Return the token from ``Authorization: Bearer <token>``."""

    auth_header = request.headers.get("authorization") or ""
    if not auth_header:
        raise AuthenticationError("Missing bearer token")
    scheme, _, token = auth_header.partition(" ")
    candidate = token.strip()
    if scheme.lower() != "bearer" or not candidate:
        raise AuthenticationError("Malformed authorization header")
    return candidate


async def authenticate_request(
    request: Request,
    session: AsyncSession,
    settings: Settings,
) -> AuthenticatedPrincipal:
    """Validate the bearer token and return the principal it names."""

    token = extract_bearer_token(request)
    try:
        payload = decode_signed_token(
            token,
            secret=settings.jwt_secret_value,
            algorithm=settings.jwt_algorithm,
            expected_type="access",
        )
    except jwt.ExpiredSignatureError as exc:
        raise AuthenticationError("Token has expired") from exc
    except (jwt.PyJWTError, ValueError) as exc:
        logger.info(
            "auth.token.invalid",
            extra=log_context(path=request.url.path, reason=type(exc).__name__),
        )
        raise AuthenticationError("Invalid token") from exc

    user = await session.get(User, payload.user_id)
    if user is None:
        raise AuthenticationError("Unknown principal")

    principal = AuthenticatedPrincipal(
        user_id=user.id,
        session_id=payload.session_id,
        scope_id=user.scope_id,
    )
    request.state.principal = principal
    return principal


__all__ = ["authenticate_request", "extract_bearer_token"]
