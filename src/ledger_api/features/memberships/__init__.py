"""User-scope memberships: the single source of truth for authorization."""

from .repository import MembershipsRepository, clear_resolution_cache, resolution_cache

__all__ = ["MembershipsRepository", "clear_resolution_cache", "resolution_cache"]
