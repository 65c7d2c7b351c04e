"""Scoped CRUD for spending categories."""

from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from ledger_api.common.logging import log_context
from ledger_api.core.auth.gate import AuthorizationGate
from ledger_api.core.rbac import Role
from ledger_api.features.scopes.access import ScopedAccess
from ledger_api.models import Category, Transaction

from .schemas import CategoryCreate, CategoryOut, CategoryUpdate

logger = logging.getLogger(__name__)


class CategoriesService:
    def __init__(self, *, session: AsyncSession, gate: AuthorizationGate) -> None:
        self._session = session
        self._access = ScopedAccess(session=session, gate=gate)

    async def list_categories(self, *, scope_id: UUID | None = None) -> list[CategoryOut]:
        rows = await self._access.list_rows(
            Category, scope_id=scope_id, order_by=(Category.name, Category.id)
        )
        return [CategoryOut.model_validate(row) for row in rows]

    async def get_category(self, category_id: UUID) -> CategoryOut:
        row = await self._access.get_row(Category, category_id, label="Category")
        return CategoryOut.model_validate(row)

    async def create_category(self, payload: CategoryCreate) -> CategoryOut:
        scope_id = await self._access.write_scope(payload.scope_id)
        category = Category(
            scope_id=scope_id,
            user_id=self._access.gate.user_id,
            name=payload.name.strip(),
            description=payload.description,
            icon=payload.icon,
        )
        self._session.add(category)
        await self._session.flush()
        logger.info(
            "category.create.success",
            extra=log_context(scope_id=scope_id, category_id=category.id),
        )
        return CategoryOut.model_validate(category)

    async def update_category(self, category_id: UUID, payload: CategoryUpdate) -> CategoryOut:
        category = await self._access.get_row(
            Category, category_id, required_role=Role.WRITE, label="Category"
        )
        changes = payload.model_dump(exclude_unset=True)
        if changes.get("name") is not None:
            category.name = changes["name"].strip()
        for field in ("description", "icon"):
            if field in changes:
                setattr(category, field, changes[field])
        await self._session.flush()
        logger.info(
            "category.update.success",
            extra=log_context(scope_id=category.scope_id, category_id=category.id),
        )
        return CategoryOut.model_validate(category)

    async def delete_category(self, category_id: UUID) -> None:
        category = await self._access.get_row(
            Category, category_id, required_role=Role.WRITE, label="Category"
        )
        await self._session.execute(
            update(Transaction)
            .where(Transaction.category_id == category.id)
            .values(category_id=None)
        )
        await self._session.delete(category)
        await self._session.flush()
        logger.info(
            "category.delete.success",
            extra=log_context(scope_id=category.scope_id, category_id=category_id),
        )


__all__ = ["CategoriesService"]
