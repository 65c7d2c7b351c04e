"""Shared auth/permission error types."""

from __future__ import annotations

from typing import Any


class AuthenticationError(Exception):
    """Raised when a request cannot be authenticated."""


class PermissionDeniedError(Exception):
    """Raised when a principal lacks the role a scope operation requires."""

    def __init__(self, required_role: Any, *, scope_id: Any = None) -> None:
        self.required_role = required_role
        self.scope_id = scope_id
        role = getattr(required_role, "value", required_role)
        super().__init__(f"Role '{role}' required on the target scope")
