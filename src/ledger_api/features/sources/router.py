"""Routes for money sources."""

from __future__ import annotations

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, Response, Security, status

from ledger_api.app.dependencies import get_sources_service
from ledger_api.core.http import require_authenticated

from .schemas import SourceCreate, SourceOut, SourceUpdate
from .service import SourcesService

router = APIRouter(
    prefix="/sources",
    tags=["sources"],
    dependencies=[Security(require_authenticated)],
)

SourcesServiceDep = Annotated[SourcesService, Depends(get_sources_service)]
SOURCE_ID_PARAM = Annotated[UUID, Path(description="Source identifier.")]


@router.get("", response_model=list[SourceOut], summary="List sources the caller can view")
async def list_sources(
    service: SourcesServiceDep,
    scope_id: Annotated[UUID | None, Query(description="Restrict to one scope.")] = None,
) -> list[SourceOut]:
    return await service.list_sources(scope_id=scope_id)


@router.post(
    "",
    response_model=SourceOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create a source",
)
async def create_source(payload: SourceCreate, service: SourcesServiceDep) -> SourceOut:
    return await service.create_source(payload)


@router.get("/{source_id}", response_model=SourceOut, summary="Retrieve a source")
async def get_source(source_id: SOURCE_ID_PARAM, service: SourcesServiceDep) -> SourceOut:
    return await service.get_source(source_id)


@router.put("/{source_id}", response_model=SourceOut, summary="Update a source")
async def update_source(
    source_id: SOURCE_ID_PARAM,
    payload: SourceUpdate,
    service: SourcesServiceDep,
) -> SourceOut:
    return await service.update_source(source_id, payload)


@router.delete(
    "/{source_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete a source",
)
async def delete_source(source_id: SOURCE_ID_PARAM, service: SourcesServiceDep) -> Response:
    await service.delete_source(source_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


__all__ = ["router"]
