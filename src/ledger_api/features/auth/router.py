"""Routes for registration, login, token refresh and logout."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Body, Depends, Request, Response, status

from ledger_api.app.dependencies import get_auth_service
from ledger_api.core.auth import AuthenticationError
from ledger_api.core.http import PrincipalDep

from .schemas import LoginRequest, RefreshRequest, RegisterRequest, TokenResponse
from .service import REFRESH_TOKEN_STATE_KEY, AuthService

router = APIRouter(prefix="/auth", tags=["auth"])

AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]


@router.post(
    "/register",
    response_model=TokenResponse,
    status_code=status.HTTP_200_OK,
    summary="Create an account and open a session",
    responses={status.HTTP_409_CONFLICT: {"description": "Username or email already exists."}},
)
async def register(
    payload: RegisterRequest,
    response: Response,
    service: AuthServiceDep,
) -> TokenResponse:
    issued = await service.register(payload)
    await service.cookies.write(response, issued.state)
    return issued.tokens


@router.post(
    "/login",
    response_model=TokenResponse,
    summary="Exchange username and password for a token pair",
    responses={status.HTTP_401_UNAUTHORIZED: {"description": "Invalid credentials."}},
)
async def login(
    payload: LoginRequest,
    response: Response,
    service: AuthServiceDep,
) -> TokenResponse:
    issued = await service.login(payload)
    await service.cookies.write(response, issued.state)
    return issued.tokens


@router.post(
    "/refresh",
    response_model=TokenResponse,
    summary="Rotate the refresh token (body token or session cookie)",
)
async def refresh(
    request: Request,
    response: Response,
    service: AuthServiceDep,
    payload: Annotated[RefreshRequest | None, Body()] = None,
) -> TokenResponse:
    token = payload.refresh_token if payload is not None else None
    if not token:
        state = await service.cookies.read(request)
        token = state.get(REFRESH_TOKEN_STATE_KEY)
    if not token:
        raise AuthenticationError("Refresh token required")

    issued = await service.refresh(token)
    await service.cookies.write(response, issued.state)
    return issued.tokens


@router.post(
    "/logout",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Revoke the current session",
)
async def logout(
    request: Request,
    principal: PrincipalDep,
    service: AuthServiceDep,
) -> Response:
    await service.logout(principal)
    response = Response(status_code=status.HTTP_204_NO_CONTENT)
    await service.cookies.clear(response, await service.cookies.read(request))
    return response


__all__ = ["router"]
