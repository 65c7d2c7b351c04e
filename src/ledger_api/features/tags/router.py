"""Routes for tags."""

from __future__ import annotations

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, Response, Security, status

from ledger_api.app.dependencies import get_tags_service
from ledger_api.core.http import require_authenticated

from .schemas import TagCreate, TagOut, TagUpdate
from .service import TagsService

router = APIRouter(
    prefix="/tags",
    tags=["tags"],
    dependencies=[Security(require_authenticated)],
)

TagsServiceDep = Annotated[TagsService, Depends(get_tags_service)]
TAG_ID_PARAM = Annotated[UUID, Path(description="Tag identifier.")]


@router.get("", response_model=list[TagOut], summary="List tags the caller can view")
async def list_tags(
    service: TagsServiceDep,
    scope_id: Annotated[UUID | None, Query(description="Restrict to one scope.")] = None,
) -> list[TagOut]:
    return await service.list_tags(scope_id=scope_id)


@router.post(
    "",
    response_model=TagOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create a tag",
)
async def create_tag(payload: TagCreate, service: TagsServiceDep) -> TagOut:
    return await service.create_tag(payload)


@router.get("/{tag_id}", response_model=TagOut, summary="Retrieve a tag")
async def get_tag(tag_id: TAG_ID_PARAM, service: TagsServiceDep) -> TagOut:
    return await service.get_tag(tag_id)


@router.put("/{tag_id}", response_model=TagOut, summary="Update a tag")
async def update_tag(
    tag_id: TAG_ID_PARAM,
    payload: TagUpdate,
    service: TagsServiceDep,
) -> TagOut:
    return await service.update_tag(tag_id, payload)


@router.delete(
    "/{tag_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete a tag",
)
async def delete_tag(tag_id: TAG_ID_PARAM, service: TagsServiceDep) -> Response:
    await service.delete_tag(tag_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


__all__ = ["router"]
