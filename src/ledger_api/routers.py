"""API router composition for the ledger FastAPI application."""

from __future__ import annotations

from fastapi import APIRouter

from .features.auth.router import router as auth_router
from .features.categories.router import router as categories_router
from .features.groups.router import router as groups_router
from .features.health.router import router as health_router
from .features.sources.router import router as sources_router
from .features.tags.router import router as tags_router
from .features.transactions.router import router as transactions_router
from .features.users.router import router as users_router

api_router = APIRouter()
api_router.include_router(health_router)
api_router.include_router(auth_router)
api_router.include_router(users_router)
api_router.include_router(groups_router)
api_router.include_router(sources_router)
api_router.include_router(categories_router)
api_router.include_router(tags_router)
api_router.include_router(transactions_router)

__all__ = ["api_router"]
