"""Income/expense records and their tag join rows."""

from __future__ import annotations

import enum
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import ForeignKey, Index, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from ledger_api.db import GUID, Base, TimestampMixin, UTCDateTime, UUIDPrimaryKeyMixin
from ledger_api.db.enums import value_enum


class TransactionType(str, enum.Enum):
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"


class Transaction(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "transactions"

    scope_id: Mapped[UUID] = mapped_column(
        GUID(), ForeignKey("scopes.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[UUID | None] = mapped_column(
        GUID(), ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    source_id: Mapped[UUID | None] = mapped_column(
        GUID(), ForeignKey("sources.id", ondelete="SET NULL"), nullable=True
    )
    category_id: Mapped[UUID | None] = mapped_column(
        GUID(), ForeignKey("categories.id", ondelete="SET NULL"), nullable=True
    )
    timestamp: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(18, 2, asdecimal=True), nullable=False)
    type: Mapped[TransactionType] = mapped_column(
        value_enum(TransactionType, "transaction_type"),
        nullable=False,
    )
    description: Mapped[str | None] = mapped_column(String(512), nullable=True)

    __table_args__ = (Index("transactions_scope_id_timestamp_idx", "scope_id", "timestamp"),)


class TransactionTag(TimestampMixin, Base):
    __tablename__ = "transaction_tags"

    transaction_id: Mapped[UUID] = mapped_column(
        GUID(), ForeignKey("transactions.id", ondelete="CASCADE"), primary_key=True
    )
    tag_id: Mapped[UUID] = mapped_column(
        GUID(), ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True
    )

    __table_args__ = (Index("transaction_tags_tag_id_idx", "tag_id"),)


__all__ = ["Transaction", "TransactionTag", "TransactionType"]
