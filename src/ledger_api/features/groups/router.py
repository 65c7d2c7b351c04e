"""Routes for groups and their membership."""

from __future__ import annotations

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Response, Security, status

from ledger_api.app.dependencies import get_groups_service
from ledger_api.core.http import require_authenticated

from .schemas import GroupCreate, GroupOut, GroupUpdate, MemberAdd, MemberOut, MemberUpdate
from .service import GroupsService

router = APIRouter(
    prefix="/groups",
    tags=["groups"],
    dependencies=[Security(require_authenticated)],
)

GroupsServiceDep = Annotated[GroupsService, Depends(get_groups_service)]
GROUP_ID_PARAM = Annotated[
    UUID,
    Path(description="Group identifier (the group id or its scope id)."),
]
MEMBER_ID_PARAM = Annotated[
    str,
    Path(min_length=1, description="Member user id or username."),
]


@router.post(
    "",
    response_model=GroupOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create a group owned by the caller",
)
async def create_group(payload: GroupCreate, service: GroupsServiceDep) -> GroupOut:
    return await service.create_group(payload)


@router.get("", response_model=list[GroupOut], summary="List groups the caller belongs to")
async def list_groups(service: GroupsServiceDep) -> list[GroupOut]:
    return await service.list_groups()


@router.get("/{group_id}", response_model=GroupOut, summary="Retrieve a group")
async def get_group(group_id: GROUP_ID_PARAM, service: GroupsServiceDep) -> GroupOut:
    return await service.get_group(group_id)


@router.put("/{group_id}", response_model=GroupOut, summary="Update a group (owner only)")
async def update_group(
    group_id: GROUP_ID_PARAM,
    payload: GroupUpdate,
    service: GroupsServiceDep,
) -> GroupOut:
    return await service.update_group(group_id, payload)


@router.delete(
    "/{group_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete a group and everything in its scope (owner only)",
)
async def delete_group(group_id: GROUP_ID_PARAM, service: GroupsServiceDep) -> Response:
    await service.delete_group(group_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/{group_id}/members",
    response_model=list[MemberOut],
    summary="List group members with their roles",
)
async def list_members(group_id: GROUP_ID_PARAM, service: GroupsServiceDep) -> list[MemberOut]:
    return await service.list_members(group_id)


@router.post(
    "/{group_id}/members",
    response_model=MemberOut,
    status_code=status.HTTP_200_OK,
    summary="Add a member or change an existing member's role (owner only)",
)
async def add_member(
    group_id: GROUP_ID_PARAM,
    payload: MemberAdd,
    service: GroupsServiceDep,
) -> MemberOut:
    return await service.add_member(group_id, payload)


@router.put(
    "/{group_id}/members/{user_id}",
    response_model=MemberOut,
    summary="Change a member's role (owner only)",
)
async def update_member(
    group_id: GROUP_ID_PARAM,
    user_id: MEMBER_ID_PARAM,
    payload: MemberUpdate,
    service: GroupsServiceDep,
) -> MemberOut:
    return await service.update_member(group_id, user_id, payload)


@router.delete(
    "/{group_id}/members/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Remove a member (owner only)",
)
async def remove_member(
    group_id: GROUP_ID_PARAM,
    user_id: MEMBER_ID_PARAM,
    service: GroupsServiceDep,
) -> Response:
    await service.remove_member(group_id, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


__all__ = ["router"]
