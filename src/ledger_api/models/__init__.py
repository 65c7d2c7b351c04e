"""Central exports for ledger SQLAlchemy models."""

from .category import Category
from .group import GROUP_STATUS_ACTIVE, Group
from .kv import KeyValueEntry
from .scope import Scope, ScopeType, UserScope
from .source import Source, SourceType
from .tag import TAG_NAME_MAX_LENGTH, Tag
from .transaction import Transaction, TransactionTag, TransactionType
from .user import User

__all__ = [
    "Category",
    "GROUP_STATUS_ACTIVE",
    "Group",
    "KeyValueEntry",
    "Scope",
    "ScopeType",
    "Source",
    "SourceType",
    "TAG_NAME_MAX_LENGTH",
    "Tag",
    "Transaction",
    "TransactionTag",
    "TransactionType",
    "User",
]
