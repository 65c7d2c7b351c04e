"""HTTP-facing dependencies and error handlers."""

from .dependencies import (
    CurrentUserDep,
    GateDep,
    PrincipalDep,
    SessionDep,
    SettingsDep,
    get_current_principal,
    require_authenticated,
)
from .errors import register_auth_exception_handlers

__all__ = [
    "CurrentUserDep",
    "GateDep",
    "PrincipalDep",
    "SessionDep",
    "SettingsDep",
    "get_current_principal",
    "register_auth_exception_handlers",
    "require_authenticated",
]
