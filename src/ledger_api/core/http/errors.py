"""Exception handlers that translate auth and role errors to HTTP responses."""

from __future__ import annotations

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from ledger_api.common.exceptions import error_response

from ..auth.errors import AuthenticationError, PermissionDeniedError
from ..rbac import InvalidRoleError


def _handle_authentication_error(_request: Request, exc: AuthenticationError) -> JSONResponse:
    return error_response(
        status.HTTP_401_UNAUTHORIZED,
        str(exc) or "Authentication required",
        headers={"WWW-Authenticate": "Bearer"},
    )


def _handle_permission_error(_request: Request, exc: PermissionDeniedError) -> JSONResponse:
    return error_response(status.HTTP_403_FORBIDDEN, str(exc) or "Forbidden")


def _handle_invalid_role(_request: Request, exc: InvalidRoleError) -> JSONResponse:
    return error_response(status.HTTP_400_BAD_REQUEST, str(exc))


def register_auth_exception_handlers(app: FastAPI) -> None:
    """Attach auth/role handlers to the FastAPI app."""

    app.add_exception_handler(AuthenticationError, _handle_authentication_error)
    app.add_exception_handler(PermissionDeniedError, _handle_permission_error)
    app.add_exception_handler(InvalidRoleError, _handle_invalid_role)


__all__ = ["register_auth_exception_handlers"]
