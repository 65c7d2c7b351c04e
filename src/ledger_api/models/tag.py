"""Free-form tags, unique by name within a scope."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from ledger_api.db import GUID, Base, TimestampMixin, UUIDPrimaryKeyMixin

TAG_NAME_MAX_LENGTH = 255


class Tag(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "tags"

    scope_id: Mapped[UUID] = mapped_column(
        GUID(), ForeignKey("scopes.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[UUID | None] = mapped_column(
        GUID(), ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    name: Mapped[str] = mapped_column(String(TAG_NAME_MAX_LENGTH), nullable=False)

    __table_args__ = (UniqueConstraint("scope_id", "name", name="tags_scope_id_name_key"),)


__all__ = ["TAG_NAME_MAX_LENGTH", "Tag"]
