"""Group lifecycle: creation, membership management and teardown."""

from __future__ import annotations

import logging
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from ledger_api.common.logging import log_context
from ledger_api.core.auth.gate import AuthorizationGate
from ledger_api.core.rbac import MEMBER_ROLES, Role
from ledger_api.db import transaction_scope
from ledger_api.features.memberships import MembershipsRepository
from ledger_api.features.scopes.registry import ScopeRegistry
from ledger_api.features.scopes.teardown import purge_scope_data
from ledger_api.features.users.repository import UsersRepository
from ledger_api.models import Group, ScopeType, User, UserScope

from .schemas import GroupCreate, GroupOut, GroupUpdate, MemberAdd, MemberOut, MemberUpdate

logger = logging.getLogger(__name__)


async def destroy_group(session: AsyncSession, group: Group) -> None:
    """Delete ``group`` with every row and membership carried by its scope."""

    scope_id = group.scope_id
    async with transaction_scope(session):
        await purge_scope_data(session, scope_id)
        await MembershipsRepository(session).delete_for_scope(scope_id)
        await session.delete(group)
        await session.flush()
        await ScopeRegistry(session).delete_scope(scope_id)


async def destroy_groups_owned_by(session: AsyncSession, user_id: UUID) -> int:
    groups = list(await session.scalars(select(Group).where(Group.owner_id == user_id)))
    for group in groups:
        await destroy_group(session, group)
    return len(groups)


def _member_out(group: Group, membership: UserScope, user: User | None) -> MemberOut:
    return MemberOut(
        group_id=group.id,
        scope_id=group.scope_id,
        user_id=membership.user_id,
        username=user.username if user is not None else None,
        role=membership.role.value,
        created_at=membership.created_at,
        updated_at=membership.updated_at,
    )


class GroupsService:
    """Group operations performed on behalf of the gate's principal."""

    def __init__(self, *, session: AsyncSession, gate: AuthorizationGate) -> None:
        self._session = session
        self._gate = gate
        self._users = UsersRepository(session)
        self._scopes = ScopeRegistry(session)
        self._memberships = MembershipsRepository(session)

    # ---- Groups ------------------------------------------------------------

    async def create_group(self, payload: GroupCreate) -> GroupOut:
        actor_id = self._gate.user_id
        logger.debug(
            "group.create.start",
            extra=log_context(user_id=actor_id, group_name=payload.group_name),
        )

        # Every proposed role is checked before anything is written.
        members: dict[UUID, tuple[User, Role]] = {}
        for reference, raw_role in payload.user_roles.items():
            user = await self._users.get_by_reference(reference)
            if user is None:
                raise HTTPException(
                    status.HTTP_404_NOT_FOUND, detail=f"User '{reference}' not found"
                )
            if user.id == actor_id:
                logger.warning(
                    "group.create.owner_role_ignored",
                    extra=log_context(user_id=actor_id, proposed_role=raw_role),
                )
                continue
            members[user.id] = (user, Role.parse(raw_role, allowed=MEMBER_ROLES))

        async with transaction_scope(self._session):
            scope = await self._scopes.create_scope(ScopeType.GROUP)
            group = Group(
                owner_id=actor_id,
                scope_id=scope.id,
                group_name=payload.group_name,
                description=payload.description,
                icon=payload.icon,
            )
            self._session.add(group)
            await self._session.flush()

            await self._memberships.upsert(user_id=actor_id, scope_id=scope.id, role=Role.OWNER)
            for member_id, (_, role) in members.items():
                await self._memberships.upsert(user_id=member_id, scope_id=scope.id, role=role)

        logger.info(
            "group.create.success",
            extra=log_context(
                group_id=group.id,
                scope_id=group.scope_id,
                user_id=actor_id,
                member_count=len(members),
            ),
        )
        return GroupOut.model_validate(group)

    async def list_groups(self) -> list[GroupOut]:
        visible = await self._gate.scope_ids(Role.VIEW)
        if not visible:
            return []
        stmt = (
            select(Group)
            .where(Group.scope_id.in_(visible))
            .order_by(Group.created_at, Group.id)
        )
        groups = await self._session.scalars(stmt)
        return [GroupOut.model_validate(group) for group in groups]

    async def get_group(self, group_ref: UUID) -> GroupOut:
        return GroupOut.model_validate(await self._load_visible(group_ref))

    async def update_group(self, group_ref: UUID, payload: GroupUpdate) -> GroupOut:
        group = await self._load_owned(group_ref)
        changes = payload.model_dump(exclude_unset=True)
        for field in ("group_name", "status"):
            if field in changes and changes[field] is None:
                changes.pop(field)
        for field, value in changes.items():
            setattr(group, field, value)
        await self._session.flush()
        logger.info(
            "group.update.success",
            extra=log_context(
                group_id=group.id,
                scope_id=group.scope_id,
                fields=",".join(sorted(changes)),
            ),
        )
        return GroupOut.model_validate(group)

    async def delete_group(self, group_ref: UUID) -> None:
        group = await self._load_owned(group_ref)
        group_id, scope_id = group.id, group.scope_id
        await destroy_group(self._session, group)
        logger.info(
            "group.delete.success",
            extra=log_context(group_id=group_id, scope_id=scope_id, user_id=self._gate.user_id),
        )

    # ---- Members -----------------------------------------------------------

    async def list_members(self, group_ref: UUID) -> list[MemberOut]:
        group = await self._load_visible(group_ref)
        stmt = (
            select(UserScope, User)
            .join(User, User.id == UserScope.user_id)
            .where(UserScope.scope_id == group.scope_id)
            .order_by(UserScope.created_at, UserScope.user_id)
        )
        rows = await self._session.execute(stmt)
        return [_member_out(group, membership, user) for membership, user in rows.all()]

    async def add_member(self, group_ref: UUID, payload: MemberAdd) -> MemberOut:
        group = await self._load_owned(group_ref)
        role = Role.parse(payload.role, allowed=MEMBER_ROLES)
        user = await self._require_user(payload.user_id)
        if user.id == group.owner_id:
            raise HTTPException(
                status.HTTP_400_BAD_REQUEST, detail="The owner's role cannot be changed"
            )

        membership = await self._memberships.upsert(
            user_id=user.id, scope_id=group.scope_id, role=role
        )
        logger.info(
            "group.member.add",
            extra=log_context(
                group_id=group.id,
                scope_id=group.scope_id,
                user_id=user.id,
                role=role.value,
            ),
        )
        return _member_out(group, membership, user)

    async def update_member(
        self, group_ref: UUID, user_ref: str, payload: MemberUpdate
    ) -> MemberOut:
        group = await self._load_owned(group_ref)
        role = Role.parse(payload.role, allowed=MEMBER_ROLES)
        user = await self._require_user(user_ref)
        if user.id == group.owner_id:
            raise HTTPException(
                status.HTTP_400_BAD_REQUEST, detail="The owner's role cannot be changed"
            )
        if await self._memberships.get(user_id=user.id, scope_id=group.scope_id) is None:
            raise HTTPException(status.HTTP_404_NOT_FOUND, detail="Member not found")

        membership = await self._memberships.upsert(
            user_id=user.id, scope_id=group.scope_id, role=role
        )
        logger.info(
            "group.member.update",
            extra=log_context(
                group_id=group.id,
                scope_id=group.scope_id,
                user_id=user.id,
                role=role.value,
            ),
        )
        return _member_out(group, membership, user)

    async def remove_member(self, group_ref: UUID, user_ref: str) -> None:
        group = await self._load_owned(group_ref)
        user = await self._require_user(user_ref)
        if user.id == group.owner_id:
            raise HTTPException(
                status.HTTP_400_BAD_REQUEST, detail="The owner cannot leave the group"
            )
        removed = await self._memberships.delete(user_id=user.id, scope_id=group.scope_id)
        if not removed:
            raise HTTPException(status.HTTP_404_NOT_FOUND, detail="Member not found")
        logger.info(
            "group.member.remove",
            extra=log_context(group_id=group.id, scope_id=group.scope_id, user_id=user.id),
        )

    # ---- Helpers -----------------------------------------------------------

    async def _load_visible(self, group_ref: UUID) -> Group:
        """Find a group by id or scope id among the principal's groups (404 otherwise)."""
        visible = await self._gate.scope_ids(Role.VIEW)
        group = None
        if visible:
            stmt = select(Group).where(
                or_(Group.id == group_ref, Group.scope_id == group_ref),
                Group.scope_id.in_(visible),
            )
            group = await self._session.scalar(stmt)
        if group is None:
            raise HTTPException(status.HTTP_404_NOT_FOUND, detail="Group not found")
        return group

    async def _load_owned(self, group_ref: UUID) -> Group:
        group = await self._load_visible(group_ref)
        await self._gate.ensure(group.scope_id, Role.OWNER)
        return group

    async def _require_user(self, reference: str) -> User:
        user = await self._users.get_by_reference(reference)
        if user is None:
            raise HTTPException(status.HTTP_404_NOT_FOUND, detail="User not found")
        return user


__all__ = ["GroupsService", "destroy_group", "destroy_groups_owned_by"]
