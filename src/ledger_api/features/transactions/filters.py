"""Query parameters accepted by the transaction listing."""

from __future__ import annotations

from datetime import UTC, datetime
from decimal import Decimal
from typing import Any, Literal
from uuid import UUID

from pydantic import ConfigDict, Field, field_validator, model_validator
from sqlalchemy import func, select
from sqlalchemy.sql import Select

from ledger_api.common.schema import BaseSchema
from ledger_api.models import Transaction, TransactionTag, TransactionType

SORT_COLUMNS = {
    "timestamp": Transaction.timestamp,
    "amount": Transaction.amount,
    "description": Transaction.description,
    "created_at": Transaction.created_at,
}

MAX_ITEMS_PER_PAGE = 100


class TransactionFilters(BaseSchema):
    """Filters, ordering and paging for ``GET /transactions``."""

    model_config = ConfigDict(extra="ignore")

    start_date: datetime | None = Field(None, description="Earliest timestamp (inclusive).")
    end_date: datetime | None = Field(None, description="Latest timestamp (inclusive).")
    category: UUID | None = Field(None, description="Category identifier.")
    type: TransactionType | None = Field(None, description="INCOME or EXPENSE.")
    tags: list[str] = Field(
        default_factory=list,
        description="Tag names; a transaction matches when it carries any of them.",
    )
    description: str | None = Field(
        None, max_length=512, description="Case-insensitive substring of the description."
    )
    min_amount: Decimal | None = Field(None, ge=Decimal("0"))
    max_amount: Decimal | None = Field(None, ge=Decimal("0"))
    sort_by: Literal["timestamp", "amount", "description", "created_at"] = "timestamp"
    sort_order: Literal["ASC", "DESC"] = "DESC"
    page: int = Field(1, ge=1)
    items_per_page: int = Field(10, ge=1, le=MAX_ITEMS_PER_PAGE)
    scope_id: UUID | None = Field(None, description="Restrict to one scope.")

    @field_validator("start_date", "end_date")
    @classmethod
    def _v_utc(cls, value: datetime | None) -> datetime | None:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    @field_validator("sort_order", mode="before")
    @classmethod
    def _v_sort_order(cls, value: Any) -> Any:
        return value.strip().upper() if isinstance(value, str) else value

    @field_validator("tags", mode="before")
    @classmethod
    def _v_tags(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = [value]
        if isinstance(value, list):
            return [str(item).strip() for item in value if str(item).strip()]
        return value

    @field_validator("description")
    @classmethod
    def _v_description(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip() or None

    @model_validator(mode="after")
    def _v_ranges(self) -> TransactionFilters:
        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise ValueError("start_date must not be after end_date")
        if (
            self.min_amount is not None
            and self.max_amount is not None
            and self.min_amount > self.max_amount
        ):
            raise ValueError("min_amount must not exceed max_amount")
        return self

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.items_per_page


def _like_pattern(term: str) -> str:
    escaped = term.lower().replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def apply_transaction_filters(
    stmt: Select,
    filters: TransactionFilters,
    *,
    tag_ids: list[UUID] | None = None,
) -> Select:
    """Apply ``filters`` to a transaction query.

    ``tag_ids`` are the ids resolved from ``filters.tags`` within the
    caller's visible scopes; an empty list matches nothing.
    """

    if filters.start_date is not None:
        stmt = stmt.where(Transaction.timestamp >= filters.start_date)
    if filters.end_date is not None:
        stmt = stmt.where(Transaction.timestamp <= filters.end_date)
    if filters.category is not None:
        stmt = stmt.where(Transaction.category_id == filters.category)
    if filters.type is not None:
        stmt = stmt.where(Transaction.type == TransactionType(filters.type))
    if filters.description:
        stmt = stmt.where(
            func.lower(Transaction.description).like(
                _like_pattern(filters.description), escape="\\"
            )
        )
    if filters.min_amount is not None:
        stmt = stmt.where(Transaction.amount >= filters.min_amount)
    if filters.max_amount is not None:
        stmt = stmt.where(Transaction.amount <= filters.max_amount)
    if filters.tags:
        ids = list(tag_ids or [])
        tagged = (
            select(TransactionTag.transaction_id)
            .where(
                TransactionTag.transaction_id == Transaction.id,
                TransactionTag.tag_id.in_(ids),
            )
        )
        stmt = stmt.where(tagged.exists())
    return stmt


def apply_ordering(stmt: Select, filters: TransactionFilters) -> Select:
    column = SORT_COLUMNS[filters.sort_by]
    primary = column.asc() if filters.sort_order == "ASC" else column.desc()
    tiebreak = Transaction.id.asc() if filters.sort_order == "ASC" else Transaction.id.desc()
    return stmt.order_by(primary, tiebreak)


def apply_paging(stmt: Select, filters: TransactionFilters) -> Select:
    return stmt.offset(filters.offset).limit(filters.items_per_page)


__all__ = [
    "MAX_ITEMS_PER_PAGE",
    "SORT_COLUMNS",
    "TransactionFilters",
    "apply_ordering",
    "apply_paging",
    "apply_transaction_filters",
]
