"""User accounts."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, validates

from ledger_api.db import GUID, Base, TimestampMixin, UUIDPrimaryKeyMixin


class User(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A person holding a personal scope and any number of group memberships."""

    __tablename__ = "users"

    username: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    email: Mapped[str] = mapped_column(String(320), nullable=False, unique=True)
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    currency: Mapped[str] = mapped_column(String(8), nullable=False, default="USD")
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    scope_id: Mapped[UUID | None] = mapped_column(
        GUID(), ForeignKey("scopes.id", ondelete="SET NULL"), nullable=True, unique=True
    )

    @validates("email")
    def _normalise_email(self, _key: str, value: str) -> str:
        cleaned = value.strip().lower()
        if not cleaned:
            raise ValueError("Email must not be empty")
        return cleaned


__all__ = ["User"]
