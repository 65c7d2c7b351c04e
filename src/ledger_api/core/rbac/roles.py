"""The fixed capability ladder ``view < write < owner``."""

from __future__ import annotations

import enum
from typing import Any


class InvalidRoleError(ValueError):
    """Raised when a role name is unknown or not allowed in a context."""

    def __init__(self, value: Any, *, allowed: frozenset[Role] | None = None) -> None:
        self.value = value
        self.allowed = allowed
        if allowed:
            names = ", ".join(sorted(role.value for role in allowed))
            msg = f"Invalid role '{value}' (allowed: {names})"
        else:
            msg = f"Invalid role '{value}'"
        super().__init__(msg)


class Role(str, enum.Enum):
    """Membership role held by a user in a scope."""

    VIEW = "view"
    WRITE = "write"
    OWNER = "owner"

    @property
    def rank(self) -> int:
        return ROLE_RANKS[self]

    def satisfies(self, required: Role) -> bool:
        """True iff this role is at least as strong as ``required``."""
        return self.rank >= required.rank

    @classmethod
    def parse(cls, value: Any, *, allowed: frozenset[Role] | None = None) -> Role:
        if isinstance(value, Role):
            role = value
        else:
            try:
                role = cls(str(value).strip().lower())
            except ValueError as exc:
                raise InvalidRoleError(value, allowed=allowed) from exc
        if allowed is not None and role not in allowed:
            raise InvalidRoleError(value, allowed=allowed)
        return role


ROLE_RANKS: dict[Role, int] = {
    Role.VIEW: 1,
    Role.WRITE: 2,
    Role.OWNER: 3,
}

# Roles an owner may hand out to other members.
MEMBER_ROLES: frozenset[Role] = frozenset({Role.VIEW, Role.WRITE})


def roles_at_least(required: Role) -> frozenset[Role]:
    """Return every role that satisfies ``required``."""
    return frozenset(role for role in Role if role.satisfies(required))


__all__ = ["MEMBER_ROLES", "ROLE_RANKS", "InvalidRoleError", "Role", "roles_at_least"]
