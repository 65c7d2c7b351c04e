"""Initial ledger schema: users, scopes, memberships, groups and scoped data.

Identifiers are UUIDv7 values generated in the application layer
(:func:`ledger_api.common.ids.generate_uuid7`).
"""

from __future__ import annotations

from typing import Optional

import sqlalchemy as sa
from alembic import op

from ledger_api.db.types import GUID, UTCDateTime

revision = "0001_initial_schema"
down_revision: Optional[str] = None
branch_labels: Optional[str] = None
depends_on: Optional[str] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", UTCDateTime(), nullable=False),
        sa.Column("updated_at", UTCDateTime(), nullable=False),
    ]


def _enum(name: str, *values: str) -> sa.Enum:
    return sa.Enum(*values, name=name, native_enum=False, length=16)


def upgrade() -> None:
    op.create_table(
        "scopes",
        sa.Column("id", GUID(), primary_key=True),
        sa.Column("type", _enum("scope_type", "user", "group"), nullable=False),
        sa.Column("created_at", UTCDateTime(), nullable=False),
    )

    op.create_table(
        "users",
        sa.Column("id", GUID(), primary_key=True),
        sa.Column("username", sa.String(64), nullable=False),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("name", sa.String(255), nullable=True),
        sa.Column("currency", sa.String(8), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column(
            "scope_id",
            GUID(),
            sa.ForeignKey("scopes.id", ondelete="SET NULL", name="users_scope_id_fkey"),
            nullable=True,
        ),
        *_timestamps(),
        sa.UniqueConstraint("username", name="users_username_key"),
        sa.UniqueConstraint("email", name="users_email_key"),
        sa.UniqueConstraint("scope_id", name="users_scope_id_key"),
    )

    op.create_table(
        "user_scopes",
        sa.Column(
            "user_id",
            GUID(),
            sa.ForeignKey("users.id", ondelete="CASCADE", name="user_scopes_user_id_fkey"),
            primary_key=True,
        ),
        sa.Column(
            "scope_id",
            GUID(),
            sa.ForeignKey("scopes.id", ondelete="CASCADE", name="user_scopes_scope_id_fkey"),
            primary_key=True,
        ),
        sa.Column("role", _enum("scope_role", "view", "write", "owner"), nullable=False),
        *_timestamps(),
    )
    op.create_index("user_scopes_scope_id_idx", "user_scopes", ["scope_id"])
    op.create_index("user_scopes_user_id_role_idx", "user_scopes", ["user_id", "role"])

    op.create_table(
        "groups",
        sa.Column("id", GUID(), primary_key=True),
        sa.Column(
            "owner_id",
            GUID(),
            sa.ForeignKey("users.id", ondelete="CASCADE", name="groups_owner_id_fkey"),
            nullable=False,
        ),
        sa.Column(
            "scope_id",
            GUID(),
            sa.ForeignKey("scopes.id", ondelete="CASCADE", name="groups_scope_id_fkey"),
            nullable=False,
        ),
        sa.Column("group_name", sa.String(100), nullable=False),
        sa.Column("description", sa.String(512), nullable=True),
        sa.Column("icon", sa.String(255), nullable=True),
        sa.Column("status", sa.String(32), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("scope_id", name="groups_scope_id_key"),
    )
    op.create_index("groups_owner_id_idx", "groups", ["owner_id"])

    op.create_table(
        "sources",
        sa.Column("id", GUID(), primary_key=True),
        sa.Column(
            "scope_id",
            GUID(),
            sa.ForeignKey("scopes.id", ondelete="CASCADE", name="sources_scope_id_fkey"),
            nullable=False,
        ),
        sa.Column(
            "user_id",
            GUID(),
            sa.ForeignKey("users.id", ondelete="SET NULL", name="sources_user_id_fkey"),
            nullable=True,
        ),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("type", _enum("source_type", "CREDIT", "SAVINGS"), nullable=False),
        sa.Column("balance", sa.Numeric(18, 2), nullable=False),
        *_timestamps(),
    )
    op.create_index("sources_scope_id_idx", "sources", ["scope_id"])

    op.create_table(
        "categories",
        sa.Column("id", GUID(), primary_key=True),
        sa.Column(
            "scope_id",
            GUID(),
            sa.ForeignKey("scopes.id", ondelete="CASCADE", name="categories_scope_id_fkey"),
            nullable=False,
        ),
        sa.Column(
            "user_id",
            GUID(),
            sa.ForeignKey("users.id", ondelete="SET NULL", name="categories_user_id_fkey"),
            nullable=True,
        ),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("description", sa.String(512), nullable=True),
        sa.Column("icon", sa.String(255), nullable=True),
        *_timestamps(),
    )
    op.create_index("categories_scope_id_idx", "categories", ["scope_id"])

    op.create_table(
        "tags",
        sa.Column("id", GUID(), primary_key=True),
        sa.Column(
            "scope_id",
            GUID(),
            sa.ForeignKey("scopes.id", ondelete="CASCADE", name="tags_scope_id_fkey"),
            nullable=False,
        ),
        sa.Column(
            "user_id",
            GUID(),
            sa.ForeignKey("users.id", ondelete="SET NULL", name="tags_user_id_fkey"),
            nullable=True,
        ),
        sa.Column("name", sa.String(255), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("scope_id", "name", name="tags_scope_id_name_key"),
    )

    op.create_table(
        "transactions",
        sa.Column("id", GUID(), primary_key=True),
        sa.Column(
            "scope_id",
            GUID(),
            sa.ForeignKey("scopes.id", ondelete="CASCADE", name="transactions_scope_id_fkey"),
            nullable=False,
        ),
        sa.Column(
            "user_id",
            GUID(),
            sa.ForeignKey("users.id", ondelete="SET NULL", name="transactions_user_id_fkey"),
            nullable=True,
        ),
        sa.Column(
            "source_id",
            GUID(),
            sa.ForeignKey("sources.id", ondelete="SET NULL", name="transactions_source_id_fkey"),
            nullable=True,
        ),
        sa.Column(
            "category_id",
            GUID(),
            sa.ForeignKey(
                "categories.id", ondelete="SET NULL", name="transactions_category_id_fkey"
            ),
            nullable=True,
        ),
        sa.Column("timestamp", UTCDateTime(), nullable=False),
        sa.Column("amount", sa.Numeric(18, 2), nullable=False),
        sa.Column("type", _enum("transaction_type", "INCOME", "EXPENSE"), nullable=False),
        sa.Column("description", sa.String(512), nullable=True),
        *_timestamps(),
    )
    op.create_index(
        "transactions_scope_id_timestamp_idx", "transactions", ["scope_id", "timestamp"]
    )

    op.create_table(
        "transaction_tags",
        sa.Column(
            "transaction_id",
            GUID(),
            sa.ForeignKey(
                "transactions.id",
                ondelete="CASCADE",
                name="transaction_tags_transaction_id_fkey",
            ),
            primary_key=True,
        ),
        sa.Column(
            "tag_id",
            GUID(),
            sa.ForeignKey("tags.id", ondelete="CASCADE", name="transaction_tags_tag_id_fkey"),
            primary_key=True,
        ),
        *_timestamps(),
    )
    op.create_index("transaction_tags_tag_id_idx", "transaction_tags", ["tag_id"])

    op.create_table(
        "kv_entries",
        sa.Column("key", sa.String(255), primary_key=True),
        sa.Column("value", sa.Text(), nullable=False),
        sa.Column("expires_at", UTCDateTime(), nullable=True),
        *_timestamps(),
    )
    op.create_index("kv_entries_expires_at_idx", "kv_entries", ["expires_at"])


def downgrade() -> None:
    op.drop_index("kv_entries_expires_at_idx", table_name="kv_entries")
    op.drop_table("kv_entries")
    op.drop_index("transaction_tags_tag_id_idx", table_name="transaction_tags")
    op.drop_table("transaction_tags")
    op.drop_index("transactions_scope_id_timestamp_idx", table_name="transactions")
    op.drop_table("transactions")
    op.drop_table("tags")
    op.drop_index("categories_scope_id_idx", table_name="categories")
    op.drop_table("categories")
    op.drop_index("sources_scope_id_idx", table_name="sources")
    op.drop_table("sources")
    op.drop_index("groups_owner_id_idx", table_name="groups")
    op.drop_table("groups")
    op.drop_index("user_scopes_user_id_role_idx", table_name="user_scopes")
    op.drop_index("user_scopes_scope_id_idx", table_name="user_scopes")
    op.drop_table("user_scopes")
    op.drop_table("users")
    op.drop_table("scopes")
