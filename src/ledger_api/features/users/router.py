"""Routes for the authenticated user's own account."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Response, Security, status

from ledger_api.app.dependencies import get_users_service
from ledger_api.core.http import CurrentUserDep, require_authenticated

from .schemas import UserOut, UserUpdate
from .service import UsersService

router = APIRouter(
    prefix="/users",
    tags=["users"],
    dependencies=[Security(require_authenticated)],
)

UsersServiceDep = Annotated[UsersService, Depends(get_users_service)]


@router.get("/me", response_model=UserOut, summary="Return the caller's profile")
async def read_me(user: CurrentUserDep, service: UsersServiceDep) -> UserOut:
    return await service.get_profile(user=user)


@router.put("/me", response_model=UserOut, summary="Update the caller's profile")
async def update_me(
    payload: UserUpdate,
    user: CurrentUserDep,
    service: UsersServiceDep,
) -> UserOut:
    return await service.update_profile(user=user, payload=payload)


@router.delete(
    "/me",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete the caller's account, owned groups and personal data",
)
async def delete_me(user: CurrentUserDep, service: UsersServiceDep) -> Response:
    await service.delete_user(user=user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


__all__ = ["router"]
