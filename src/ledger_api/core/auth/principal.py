"""Identity value object produced by the authentication dependency."""

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True, slots=True)
class AuthenticatedPrincipal:
    """Identity information available to downstream handlers.

    ``scope_id`` is the user's personal scope, the default target for new
    rows when a request names no scope.
    """

    user_id: UUID
    session_id: str
    scope_id: UUID | None = None
