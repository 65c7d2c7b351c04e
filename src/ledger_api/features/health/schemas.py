"""Pydantic schemas for the health module."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import Field

from ledger_api.common.schema import BaseSchema


class HealthComponentStatus(BaseSchema):
    name: str
    status: Literal["available", "degraded", "unavailable"]
    detail: str | None = None


class HealthCheckResponse(BaseSchema):
    status: Literal["ok", "degraded"]
    timestamp: datetime
    components: list[HealthComponentStatus] = Field(default_factory=list)


__all__ = ["HealthCheckResponse", "HealthComponentStatus"]
