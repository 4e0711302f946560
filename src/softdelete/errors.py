"""
Soft Delete Errors

Exception types raised by the soft delete layer. Storage failures are not
wrapped: they surface as the SQLAlchemy error raised by the session.
"""

from sqlalchemy.exc import SQLAlchemyError

# Storage errors propagate unchanged; this name lets callers catch them.
StorageCommitFailure = SQLAlchemyError


class SoftDeleteError(Exception):
    """Base class for soft delete configuration and tracking errors"""


class InvalidFilterRegistration(SoftDeleteError):
    """A read filter is already registered for the entity type, or none can be derived"""

    def __init__(self, entity_type: type, reason: str):
        self.entity_type = entity_type
        super().__init__(f"Cannot register read filter for {entity_type.__name__}: {reason}")


class InvalidStateTransition(SoftDeleteError):
    """The requested change record transition cannot be applied to the session"""

    def __init__(self, entity: object, current: str, requested: str):
        self.entity = entity
        self.current = current
        self.requested = requested
        super().__init__(f"Cannot move {type(entity).__name__} from {current} to {requested}")
