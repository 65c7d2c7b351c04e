"""Routes for transactions and their tag links."""

from __future__ import annotations

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, Response, Security, status

from ledger_api.app.dependencies import get_transactions_service
from ledger_api.core.http import require_authenticated

from .filters import TransactionFilters
from .schemas import (
    TransactionCreate,
    TransactionOut,
    TransactionTagAttach,
    TransactionTagOut,
    TransactionUpdate,
)
from .service import TransactionsService

router = APIRouter(
    prefix="/transactions",
    tags=["transactions"],
    dependencies=[Security(require_authenticated)],
)

TransactionsServiceDep = Annotated[TransactionsService, Depends(get_transactions_service)]
TRANSACTION_ID_PARAM = Annotated[UUID, Path(description="Transaction identifier.")]
TAG_ID_PARAM = Annotated[UUID, Path(description="Tag identifier.")]


@router.get(
    "",
    response_model=list[TransactionOut],
    summary="List transactions the caller can view",
)
async def list_transactions(
    filters: Annotated[TransactionFilters, Query()],
    service: TransactionsServiceDep,
) -> list[TransactionOut]:
    return await service.list_transactions(filters)


@router.post(
    "",
    response_model=TransactionOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create a transaction with its tags",
)
async def create_transaction(
    payload: TransactionCreate,
    service: TransactionsServiceDep,
) -> TransactionOut:
    return await service.create_transaction(payload)


@router.get("/{transaction_id}", response_model=TransactionOut, summary="Retrieve a transaction")
async def get_transaction(
    transaction_id: TRANSACTION_ID_PARAM,
    service: TransactionsServiceDep,
) -> TransactionOut:
    return await service.get_transaction(transaction_id)


@router.put("/{transaction_id}", response_model=TransactionOut, summary="Update a transaction")
async def update_transaction(
    transaction_id: TRANSACTION_ID_PARAM,
    payload: TransactionUpdate,
    service: TransactionsServiceDep,
) -> TransactionOut:
    return await service.update_transaction(transaction_id, payload)


@router.delete(
    "/{transaction_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete a transaction",
)
async def delete_transaction(
    transaction_id: TRANSACTION_ID_PARAM,
    service: TransactionsServiceDep,
) -> Response:
    await service.delete_transaction(transaction_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/{transaction_id}/tags",
    response_model=list[TransactionTagOut],
    summary="List the tags linked to a transaction",
)
async def list_transaction_tags(
    transaction_id: TRANSACTION_ID_PARAM,
    service: TransactionsServiceDep,
) -> list[TransactionTagOut]:
    return await service.list_tags(transaction_id)


@router.post(
    "/{transaction_id}/tags",
    response_model=TransactionTagOut,
    status_code=status.HTTP_200_OK,
    summary="Link a tag (by id or name) to a transaction",
)
async def attach_transaction_tag(
    transaction_id: TRANSACTION_ID_PARAM,
    payload: TransactionTagAttach,
    service: TransactionsServiceDep,
) -> TransactionTagOut:
    return await service.attach_tag(transaction_id, payload)


@router.delete(
    "/{transaction_id}/tags/{tag_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Unlink a tag from a transaction",
)
async def detach_transaction_tag(
    transaction_id: TRANSACTION_ID_PARAM,
    tag_id: TAG_ID_PARAM,
    service: TransactionsServiceDep,
) -> Response:
    await service.detach_tag(transaction_id, tag_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


__all__ = ["router"]
