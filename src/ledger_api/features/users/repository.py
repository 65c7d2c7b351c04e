"""Query helpers for working with ``User`` records."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ledger_api.models import User


def _canonical_email(value: str) -> str:
    return value.strip().lower()


class UsersRepository:
    """Persistence helpers for user rows."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, user_id: UUID) -> User | None:
        return await self._session.get(User, user_id)

    async def get_by_username(self, username: str) -> User | None:
        stmt = select(User).where(User.username == username.strip())
        return await self._session.scalar(stmt)

    async def get_by_email(self, email: str) -> User | None:
        stmt = select(User).where(User.email == _canonical_email(email))
        return await self._session.scalar(stmt)

    async def get_by_reference(self, reference: str | UUID) -> User | None:
        """Look a user up by id, falling back to username."""

        if isinstance(reference, UUID):
            return await self.get_by_id(reference)
        raw = str(reference).strip()
        try:
            user_id = UUID(raw)
        except ValueError:
            return await self.get_by_username(raw)
        return await self.get_by_id(user_id)

    async def username_taken(self, username: str, *, exclude: UUID | None = None) -> bool:
        user = await self.get_by_username(username)
        return user is not None and user.id != exclude

    async def email_taken(self, email: str, *, exclude: UUID | None = None) -> bool:
        user = await self.get_by_email(email)
        return user is not None and user.id != exclude

    async def create(
        self,
        *,
        username: str,
        email: str,
        password_hash: str,
        name: str | None = None,
        currency: str = "USD",
    ) -> User:
        user = User(
            username=username,
            email=email,
            password_hash=password_hash,
            name=name,
            currency=currency,
        )
        self._session.add(user)
        await self._session.flush()
        return user


__all__ = ["UsersRepository"]
