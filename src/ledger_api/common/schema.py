"""Shared Pydantic schema utilities."""

from __future__ import annotations

from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer

MONEY_MAX_DIGITS = 18
MONEY_DECIMAL_PLACES = 2

# Matches the NUMERIC(18, 2) columns; finer amounts are rejected, never rounded.
Money = Annotated[
    Decimal,
    Field(max_digits=MONEY_MAX_DIGITS, decimal_places=MONEY_DECIMAL_PLACES),
    PlainSerializer(float, return_type=float, when_used="json"),
]


class BaseSchema(BaseModel):
    """Base class for all API schemas with ledger defaults."""

    model_config = ConfigDict(
        populate_by_name=True,
        from_attributes=True,
        use_enum_values=True,
        extra="ignore",
    )


__all__ = ["BaseSchema", "MONEY_DECIMAL_PLACES", "MONEY_MAX_DIGITS", "Money"]
