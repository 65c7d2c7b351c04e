"""Authentication and authorization primitives."""

from .errors import AuthenticationError, PermissionDeniedError
from .principal import AuthenticatedPrincipal

__all__ = [
    "AuthenticatedPrincipal",
    "AuthenticationError",
    "PermissionDeniedError",
]
