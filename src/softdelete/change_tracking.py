"""
Change Tracking

Read and rewrite the pending state of entities held by a SQLAlchemy session.
A change record pairs one tracked entity with its unit-of-work state; state
transitions are applied to the session immediately.
"""

from enum import Enum
from typing import List, Optional

from sqlalchemy.orm import Session
from sqlalchemy.orm.attributes import flag_dirty

from softdelete.capability import supports_soft_delete
from softdelete.errors import InvalidStateTransition


class ChangeState(str, Enum):
    UNCHANGED = "unchanged"
    ADDED = "added"
    MODIFIED = "modified"
    REMOVED = "removed"


class ChangeRecord:
    """Tracked mutation intent for one entity within a session"""

    def __init__(self, session: Session, entity: object, state: ChangeState):
        self.session = session
        self.entity = entity
        self._state = state
        self.soft_deletable = supports_soft_delete(entity)

    @property
    def state(self) -> ChangeState:
        return self._state

    @state.setter
    def state(self, new_state: ChangeState) -> None:
        current = self._state
        if new_state is current:
            return

        if current is ChangeState.REMOVED and new_state in (ChangeState.MODIFIED, ChangeState.UNCHANGED):
            # add() on a pending delete takes it back out of session.deleted
            self.session.add(self.entity)
            if new_state is ChangeState.MODIFIED:
                flag_dirty(self.entity)
        elif current in (ChangeState.UNCHANGED, ChangeState.MODIFIED) and new_state is ChangeState.REMOVED:
            self.session.delete(self.entity)
        elif current is ChangeState.UNCHANGED and new_state is ChangeState.MODIFIED:
            flag_dirty(self.entity)
        else:
            raise InvalidStateTransition(self.entity, current.value, new_state.value)

        self._state = new_state

    def __repr__(self) -> str:
        return f"<ChangeRecord {type(self.entity).__name__} {self._state.value}>"


def tracked_changes(session: Session, state: Optional[ChangeState] = None) -> List[ChangeRecord]:
    """
    Enumerate change records for every entity the session tracks

    Args:
        session: Session owning the unit of work
        state: Only return records in this state

    Returns:
        Change records, one per tracked entity
    """
    new = session.new
    dirty = session.dirty
    deleted = session.deleted

    if state is ChangeState.REMOVED:
        candidates = list(deleted)
    elif state is ChangeState.ADDED:
        candidates = list(new)
    else:
        candidates = list(session)

    records = []
    for entity in candidates:
        if entity in deleted:
            entity_state = ChangeState.REMOVED
        elif entity in new:
            entity_state = ChangeState.ADDED
        elif entity in dirty:
            entity_state = ChangeState.MODIFIED
        else:
            entity_state = ChangeState.UNCHANGED

        if state is None or entity_state is state:
            records.append(ChangeRecord(session, entity, entity_state))

    return records
