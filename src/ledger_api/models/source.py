"""Money sources (accounts)."""

from __future__ import annotations

import enum
from decimal import Decimal
from uuid import UUID

from sqlalchemy import ForeignKey, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from ledger_api.db import GUID, Base, TimestampMixin, UUIDPrimaryKeyMixin
from ledger_api.db.enums import value_enum


class SourceType(str, enum.Enum):
    CREDIT = "CREDIT"
    SAVINGS = "SAVINGS"


class Source(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "sources"

    scope_id: Mapped[UUID] = mapped_column(
        GUID(), ForeignKey("scopes.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[UUID | None] = mapped_column(
        GUID(), ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[SourceType] = mapped_column(
        value_enum(SourceType, "source_type"),
        nullable=False,
    )
    balance: Mapped[Decimal] = mapped_column(
        Numeric(18, 2, asdecimal=True), nullable=False, default=Decimal("0")
    )


__all__ = ["Source", "SourceType"]
