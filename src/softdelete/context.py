"""
Persistence Context

Unit-of-work wrapper around a SQLAlchemy session. It wires the save
interceptor into the flush pipeline and the read filters into query
execution, and exposes the operations the application uses: track, remove,
commit and query.

A context is not safe for concurrent use; create one per request or job
through ``ContextFactory``.
"""

import logging
from typing import Any, List, Optional

from sqlalchemy import Select, func, inspect, select
from sqlalchemy.engine import ScalarResult
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from softdelete.change_tracking import ChangeRecord, ChangeState, tracked_changes
from softdelete.interceptor import SoftDeleteInterceptor
from softdelete.read_filter import INCLUDE_DELETED_OPTION, ReadFilterRegistry, only_deleted

logger = logging.getLogger(__name__)


def build_select(entity_type: type, criteria: tuple, unfiltered: bool) -> Select:
    """Select for an entity type with caller criteria, marked unfiltered on request"""
    stmt = select(entity_type)
    if criteria:
        stmt = stmt.where(*criteria)
    if unfiltered:
        stmt = stmt.execution_options(**{INCLUDE_DELETED_OPTION: True})
    return stmt


def build_count(entity_type: type, criteria: tuple, unfiltered: bool) -> Select:
    stmt = select(func.count()).select_from(entity_type)
    if criteria:
        stmt = stmt.where(*criteria)
    if unfiltered:
        stmt = stmt.execution_options(**{INCLUDE_DELETED_OPTION: True})
    return stmt


def identity_criteria(entity_type: type, ident: Any) -> tuple:
    """Primary key equality criteria for a scalar or tuple identity"""
    primary_key = inspect(entity_type).primary_key
    values = ident if isinstance(ident, tuple) else (ident,)
    if len(values) != len(primary_key):
        raise ValueError(f"{entity_type.__name__} expects {len(primary_key)} primary key value(s), got {len(values)}")
    return tuple(column == value for column, value in zip(primary_key, values))


class PersistenceContext:
    """Soft-delete aware unit of work"""

    def __init__(
        self,
        session: Session,
        filters: ReadFilterRegistry,
        interceptor: Optional[SoftDeleteInterceptor] = None,
    ):
        self.session = session
        self.filters = filters
        self.interceptor = interceptor or SoftDeleteInterceptor()

        self.interceptor.attach(session)
        self.filters.attach(session)

    # ==========================================================================
    # Change tracking
    # ==========================================================================

    def add(self, entity: object) -> object:
        """Track a new or detached entity"""
        self.session.add(entity)
        return entity

    def add_all(self, entities: List[object]) -> None:
        self.session.add_all(entities)

    def remove(self, entity: object) -> None:
        """
        Mark an entity for removal.

        Deletable entities are soft deleted when the batch is flushed; other
        entities are physically deleted.
        """
        self.session.delete(entity)

    def change_records(self, state: Optional[ChangeState] = None) -> List[ChangeRecord]:
        return tracked_changes(self.session, state)

    def commit(self) -> None:
        """
        Flush and commit the unit of work.

        Raises:
            StorageCommitFailure: propagated unchanged from the session; the
                caller decides whether to roll back and retry
        """
        try:
            self.session.commit()
        except SQLAlchemyError as e:
            logger.error(f"Commit failed: {e}")
            raise
        logger.info("Unit of work committed")

    def rollback(self) -> None:
        self.session.rollback()

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "PersistenceContext":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ==========================================================================
    # Queries
    # ==========================================================================

    def select(self, entity_type: type, *criteria, unfiltered: bool = False) -> Select:
        """
        Build a query against an entity type

        Args:
            entity_type: Mapped class to select
            criteria: Additional predicates, ANDed with the read filter
            unfiltered: Skip the read filter for this query only

        Returns:
            Select statement, executed through this context's session
        """
        return build_select(entity_type, criteria, unfiltered)

    def execute(self, stmt: Select) -> ScalarResult:
        return self.session.scalars(stmt)

    def query(self, entity_type: type, *criteria, unfiltered: bool = False) -> ScalarResult:
        """Run a query and return its entities lazily"""
        return self.execute(self.select(entity_type, *criteria, unfiltered=unfiltered))

    def query_deleted(self, entity_type: type, *criteria) -> ScalarResult:
        """Soft-deleted entities of a Deletable type"""
        return self.query(entity_type, only_deleted(entity_type), *criteria, unfiltered=True)

    def get(self, entity_type: type, ident: Any, unfiltered: bool = False) -> Optional[object]:
        """Load one entity by primary key, honouring the read filter"""
        return self.query(entity_type, *identity_criteria(entity_type, ident), unfiltered=unfiltered).one_or_none()

    def count(self, entity_type: type, *criteria, unfiltered: bool = False) -> int:
        return self.session.scalar(build_count(entity_type, criteria, unfiltered))


class ContextFactory:
    """Creates one PersistenceContext per logical operation, sharing filter and interceptor configuration"""

    def __init__(self, session_factory, filters: ReadFilterRegistry, interceptor: Optional[SoftDeleteInterceptor] = None):
        self.session_factory = session_factory
        self.filters = filters
        self.interceptor = interceptor or SoftDeleteInterceptor()

    def __call__(self) -> PersistenceContext:
        return PersistenceContext(self.session_factory(), self.filters, self.interceptor)
