"""
Async Persistence Context

AsyncSession counterpart of PersistenceContext. The interceptor and read
filters stay synchronous: they are attached to the session's underlying
sync Session and run inside the flush/execute pipeline.
"""

import logging
from typing import Any, List, Optional

from sqlalchemy import Select
from sqlalchemy.engine import ScalarResult
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from softdelete.change_tracking import ChangeRecord, ChangeState, tracked_changes
from softdelete.context import build_count, build_select, identity_criteria
from softdelete.interceptor import SoftDeleteInterceptor
from softdelete.read_filter import ReadFilterRegistry, only_deleted

logger = logging.getLogger(__name__)


class AsyncPersistenceContext:
    """Soft-delete aware unit of work over an AsyncSession"""

    def __init__(
        self,
        session: AsyncSession,
        filters: ReadFilterRegistry,
        interceptor: Optional[SoftDeleteInterceptor] = None,
    ):
        self.session = session
        self.filters = filters
        self.interceptor = interceptor or SoftDeleteInterceptor()

        self.interceptor.attach(session.sync_session)
        self.filters.attach(session.sync_session)

    def add(self, entity: object) -> object:
        self.session.add(entity)
        return entity

    def add_all(self, entities: List[object]) -> None:
        self.session.add_all(entities)

    async def remove(self, entity: object) -> None:
        await self.session.delete(entity)

    def change_records(self, state: Optional[ChangeState] = None) -> List[ChangeRecord]:
        return tracked_changes(self.session.sync_session, state)

    async def commit(self) -> None:
        try:
            await self.session.commit()
        except SQLAlchemyError as e:
            logger.error(f"Commit failed: {e}")
            raise
        logger.info("Unit of work committed")

    async def rollback(self) -> None:
        await self.session.rollback()

    async def close(self) -> None:
        await self.session.close()

    async def __aenter__(self) -> "AsyncPersistenceContext":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def select(self, entity_type: type, *criteria, unfiltered: bool = False) -> Select:
        return build_select(entity_type, criteria, unfiltered)

    async def query(self, entity_type: type, *criteria, unfiltered: bool = False) -> ScalarResult:
        return await self.session.scalars(self.select(entity_type, *criteria, unfiltered=unfiltered))

    async def query_deleted(self, entity_type: type, *criteria) -> ScalarResult:
        return await self.query(entity_type, only_deleted(entity_type), *criteria, unfiltered=True)

    async def get(self, entity_type: type, ident: Any, unfiltered: bool = False) -> Optional[object]:
        result = await self.query(entity_type, *identity_criteria(entity_type, ident), unfiltered=unfiltered)
        return result.one_or_none()

    async def count(self, entity_type: type, *criteria, unfiltered: bool = False) -> int:
        return await self.session.scalar(build_count(entity_type, criteria, unfiltered))
