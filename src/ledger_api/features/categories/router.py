"""Routes for spending categories."""

from __future__ import annotations

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, Response, Security, status

from ledger_api.app.dependencies import get_categories_service
from ledger_api.core.http import require_authenticated

from .schemas import CategoryCreate, CategoryOut, CategoryUpdate
from .service import CategoriesService

router = APIRouter(
    prefix="/categories",
    tags=["categories"],
    dependencies=[Security(require_authenticated)],
)

CategoriesServiceDep = Annotated[CategoriesService, Depends(get_categories_service)]
CATEGORY_ID_PARAM = Annotated[UUID, Path(description="Category identifier.")]


@router.get("", response_model=list[CategoryOut], summary="List categories the caller can view")
async def list_categories(
    service: CategoriesServiceDep,
    scope_id: Annotated[UUID | None, Query(description="Restrict to one scope.")] = None,
) -> list[CategoryOut]:
    return await service.list_categories(scope_id=scope_id)


@router.post(
    "",
    response_model=CategoryOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create a category",
)
async def create_category(payload: CategoryCreate, service: CategoriesServiceDep) -> CategoryOut:
    return await service.create_category(payload)


@router.get("/{category_id}", response_model=CategoryOut, summary="Retrieve a category")
async def get_category(
    category_id: CATEGORY_ID_PARAM,
    service: CategoriesServiceDep,
) -> CategoryOut:
    return await service.get_category(category_id)


@router.put("/{category_id}", response_model=CategoryOut, summary="Update a category")
async def update_category(
    category_id: CATEGORY_ID_PARAM,
    payload: CategoryUpdate,
    service: CategoriesServiceDep,
) -> CategoryOut:
    return await service.update_category(category_id, payload)


@router.delete(
    "/{category_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete a category",
)
async def delete_category(
    category_id: CATEGORY_ID_PARAM,
    service: CategoriesServiceDep,
) -> Response:
    await service.delete_category(category_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


__all__ = ["router"]
