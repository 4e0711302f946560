"""
Deletable Capability

Soft delete contract for ORM entities. An entity is deletable when it exposes
an ``is_deleted`` flag, a ``deleted_at`` timestamp and the two mutators that
keep them consistent. ``SoftDeleteMixin`` is the stock implementation.
"""

from datetime import datetime, timezone
from typing import Optional, Protocol, runtime_checkable

from sqlalchemy import Boolean, Column, DateTime
from sqlalchemy.ext.hybrid import hybrid_property

_CAPABILITY_MEMBERS = ("is_deleted", "deleted_at", "mark_deleted", "mark_restored")


def utcnow() -> datetime:
    """Current UTC time as a naive datetime, the format DateTime columns store"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


@runtime_checkable
class Deletable(Protocol):
    """Structural type for entities that can be soft deleted"""

    is_deleted: bool
    deleted_at: Optional[datetime]

    def mark_deleted(self) -> None: ...

    def mark_restored(self) -> None: ...


def supports_soft_delete(target) -> bool:
    """
    Check whether an entity instance or mapped class satisfies the Deletable contract

    Args:
        target: Entity instance or entity class

    Returns:
        True when every capability member is present
    """
    if isinstance(target, type):
        return all(hasattr(target, name) for name in _CAPABILITY_MEMBERS)
    return isinstance(target, Deletable)


class SoftDeleteMixin:
    """
    Soft delete columns for declarative models.

    ``deleted_at`` is derived from ``is_deleted``: it is stamped when the
    entity is marked deleted and cleared when it is restored. It cannot be
    assigned directly.
    """

    _is_deleted = Column("is_deleted", Boolean, default=False, nullable=False, index=True)
    _deleted_at = Column("deleted_at", DateTime, nullable=True)

    @hybrid_property
    def is_deleted(self) -> bool:
        return bool(self._is_deleted)

    @is_deleted.setter
    def is_deleted(self, value: bool) -> None:
        if value:
            self.mark_deleted()
        else:
            self.mark_restored()

    @is_deleted.expression
    def is_deleted(cls):
        return cls._is_deleted

    @hybrid_property
    def deleted_at(self) -> Optional[datetime]:
        return self._deleted_at

    def mark_deleted(self) -> None:
        """Flag the entity as deleted and stamp the deletion time, replacing any earlier stamp"""
        self._is_deleted = True
        self._deleted_at = utcnow()

    def mark_restored(self) -> None:
        """Clear the deleted flag and the deletion time"""
        self._is_deleted = False
        self._deleted_at = None
