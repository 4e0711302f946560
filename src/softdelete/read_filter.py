"""
Read Filter

Per-entity-type query predicates that SQLAlchemy injects into every ORM
SELECT through ``with_loader_criteria``. A statement opts out with the
``include_deleted`` execution option.
"""

import logging
from typing import Callable, Dict, List, Optional

from sqlalchemy import event, false, true
from sqlalchemy.orm import ORMExecuteState, with_loader_criteria
from sqlalchemy.sql.elements import ColumnElement

from softdelete.capability import supports_soft_delete
from softdelete.errors import InvalidFilterRegistration

logger = logging.getLogger(__name__)

INCLUDE_DELETED_OPTION = "include_deleted"

Predicate = Callable[[type], ColumnElement]


def not_deleted(cls) -> ColumnElement:
    """Default read filter: hide soft-deleted rows"""
    return cls.is_deleted == false()


def only_deleted(cls) -> ColumnElement:
    """Select soft-deleted rows only"""
    return cls.is_deleted == true()


class ReadFilterRegistry:
    """
    Entity type to read predicate mapping.

    Built once when the application configures its persistence layer and
    shared read-only by every context. At most one predicate per entity type:
    a second registration raises InvalidFilterRegistration.
    """

    def __init__(self):
        self._filters: Dict[type, Predicate] = {}

    def register(self, entity_type: type, predicate: Optional[Predicate] = None) -> None:
        """
        Register the read filter for an entity type

        Args:
            entity_type: Mapped class the filter applies to
            predicate: Callable building the criteria from the class; defaults
                to ``not_deleted`` for Deletable entities
        """
        if entity_type in self._filters:
            raise InvalidFilterRegistration(entity_type, "a filter is already registered")

        if predicate is None:
            if not supports_soft_delete(entity_type):
                raise InvalidFilterRegistration(entity_type, "entity does not implement the Deletable capability")
            predicate = not_deleted

        self._filters[entity_type] = predicate
        logger.debug(f"Registered read filter for {entity_type.__name__}")

    def register_soft_deletable(self, base) -> List[type]:
        """Register the default filter for every Deletable class mapped on a declarative base"""
        registered = []
        for mapper in base.registry.mappers:
            entity_type = mapper.class_
            if supports_soft_delete(entity_type) and entity_type not in self._filters:
                self.register(entity_type)
                registered.append(entity_type)
        return registered

    def filter_for(self, entity_type: type) -> Optional[Predicate]:
        return self._filters.get(entity_type)

    def __contains__(self, entity_type: type) -> bool:
        return entity_type in self._filters

    def __len__(self) -> int:
        return len(self._filters)

    def loader_options(self) -> list:
        return [
            with_loader_criteria(entity_type, predicate(entity_type), include_aliases=True)
            for entity_type, predicate in self._filters.items()
        ]

    def apply(self, execute_state: ORMExecuteState) -> None:
        """
        do_orm_execute handler injecting the registered criteria.

        Relationship loads are always filtered, whatever query loaded the
        parent; the include_deleted option is never carried over to them.
        Column refreshes of already loaded instances are left alone.
        """
        if not self._filters:
            return
        if not execute_state.is_select or execute_state.is_column_load:
            return
        if execute_state.execution_options.get(INCLUDE_DELETED_OPTION, False):
            logger.debug("Read filters bypassed for unfiltered query")
            return

        execute_state.statement = execute_state.statement.options(*self.loader_options())

    def attach(self, target) -> None:
        """Register on a Session, sessionmaker or Session class; repeated calls are ignored"""
        if not event.contains(target, "do_orm_execute", self.apply):
            event.listen(target, "do_orm_execute", self.apply)

    def detach(self, target) -> None:
        if event.contains(target, "do_orm_execute", self.apply):
            event.remove(target, "do_orm_execute", self.apply)
