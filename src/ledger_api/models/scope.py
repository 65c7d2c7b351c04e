"""Scopes and user-scope memberships."""

from __future__ import annotations

import enum
from datetime import datetime
from uuid import UUID

from sqlalchemy import ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column

from ledger_api.core.rbac import Role
from ledger_api.db import GUID, Base, TimestampMixin, UTCDateTime, UUIDPrimaryKeyMixin, utc_now
from ledger_api.db.enums import value_enum


class ScopeType(str, enum.Enum):
    """Kind of principal a scope belongs to."""

    USER = "user"
    GROUP = "group"


class Scope(UUIDPrimaryKeyMixin, Base):
    """Unit of ownership for every data row. Immutable once created."""

    __tablename__ = "scopes"

    type: Mapped[ScopeType] = mapped_column(
        value_enum(ScopeType, "scope_type"),
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, default=utc_now)


class UserScope(TimestampMixin, Base):
    """Membership of a user in a scope with a role."""

    __tablename__ = "user_scopes"

    user_id: Mapped[UUID] = mapped_column(
        GUID(), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )
    scope_id: Mapped[UUID] = mapped_column(
        GUID(), ForeignKey("scopes.id", ondelete="CASCADE"), primary_key=True
    )
    role: Mapped[Role] = mapped_column(
        value_enum(Role, "scope_role"),
        nullable=False,
    )

    __table_args__ = (
        Index("user_scopes_scope_id_idx", "scope_id"),
        Index("user_scopes_user_id_role_idx", "user_id", "role"),
    )


__all__ = ["Scope", "ScopeType", "UserScope"]
