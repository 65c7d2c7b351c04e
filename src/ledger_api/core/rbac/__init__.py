"""Role ladder shared by memberships, the resolver and the gate."""

from .roles import MEMBER_ROLES, ROLE_RANKS, InvalidRoleError, Role, roles_at_least

__all__ = ["MEMBER_ROLES", "ROLE_RANKS", "InvalidRoleError", "Role", "roles_at_least"]
