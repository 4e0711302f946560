"""
Soft delete for SQLAlchemy

Deletes of Deletable entities become flagged updates at flush time, and
flagged rows are hidden from ORM queries unless a query asks for them.
"""

from softdelete.capability import Deletable, SoftDeleteMixin, supports_soft_delete, utcnow
from softdelete.change_tracking import ChangeRecord, ChangeState, tracked_changes
from softdelete.context import ContextFactory, PersistenceContext
from softdelete.errors import (
    InvalidFilterRegistration,
    InvalidStateTransition,
    SoftDeleteError,
    StorageCommitFailure,
)
from softdelete.interceptor import SoftDeleteInterceptor
from softdelete.read_filter import INCLUDE_DELETED_OPTION, ReadFilterRegistry, not_deleted, only_deleted

__all__ = [
    "Deletable",
    "SoftDeleteMixin",
    "supports_soft_delete",
    "utcnow",
    "ChangeRecord",
    "ChangeState",
    "tracked_changes",
    "ContextFactory",
    "PersistenceContext",
    "InvalidFilterRegistration",
    "InvalidStateTransition",
    "SoftDeleteError",
    "StorageCommitFailure",
    "SoftDeleteInterceptor",
    "INCLUDE_DELETED_OPTION",
    "ReadFilterRegistry",
    "not_deleted",
    "only_deleted",
]
