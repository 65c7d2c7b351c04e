"""Service factories used by API routers.

Routers import their per-request service constructors from here; each
factory shares the request session so a request commits exactly once.
"""

from __future__ import annotations

from fastapi import Request

from ledger_api.core.http import GateDep, SessionDep, SettingsDep
from ledger_api.infra.kv import build_kv_store


def get_users_service(session: SessionDep):
    from ledger_api.features.users.service import UsersService

    return UsersService(session=session)


def get_auth_service(request: Request, session: SessionDep, settings: SettingsDep):
    from ledger_api.features.auth.service import AuthService

    return AuthService(
        session=session,
        settings=settings,
        kv=build_kv_store(settings, session=session, request=request),
    )


def get_groups_service(session: SessionDep, gate: GateDep):
    from ledger_api.features.groups.service import GroupsService

    return GroupsService(session=session, gate=gate)


def get_sources_service(session: SessionDep, gate: GateDep):
    from ledger_api.features.sources.service import SourcesService

    return SourcesService(session=session, gate=gate)


def get_categories_service(session: SessionDep, gate: GateDep):
    from ledger_api.features.categories.service import CategoriesService

    return CategoriesService(session=session, gate=gate)


def get_tags_service(session: SessionDep, gate: GateDep):
    from ledger_api.features.tags.service import TagsService

    return TagsService(session=session, gate=gate)


def get_transactions_service(session: SessionDep, gate: GateDep):
    from ledger_api.features.transactions.service import TransactionsService

    return TransactionsService(session=session, gate=gate)


def get_health_service(session: SessionDep, settings: SettingsDep):
    from ledger_api.features.health.service import HealthService

    return HealthService(settings=settings, session=session)


__all__ = [
    "get_auth_service",
    "get_categories_service",
    "get_groups_service",
    "get_health_service",
    "get_sources_service",
    "get_tags_service",
    "get_transactions_service",
    "get_users_service",
]
