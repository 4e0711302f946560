"""
Change Tracking Tests

Change records mirror the session's pending state and apply transitions to it.
"""

import pytest
from sqlalchemy.orm import Session

from softdelete.change_tracking import ChangeState, tracked_changes
from softdelete.errors import InvalidStateTransition
from softdelete.models import Person, PersonNote


def _persisted_person(db_session: Session, first_name: str = "Ana") -> Person:
    person = Person(first_name=first_name, last_name="Silva")
    db_session.add(person)
    db_session.flush()
    return person


def _state_of(db_session: Session, entity) -> ChangeState:
    return next(r.state for r in tracked_changes(db_session) if r.entity is entity)


class TestTrackedChanges:
    """Enumerating change records by state"""

    def test_classifies_each_state(self, db_session: Session):
        unchanged = _persisted_person(db_session, "Unchanged")
        modified = _persisted_person(db_session, "Modified")
        removed = _persisted_person(db_session, "Removed")
        added = Person(first_name="Added")

        modified.first_name = "Changed"
        db_session.delete(removed)
        db_session.add(added)

        assert _state_of(db_session, unchanged) is ChangeState.UNCHANGED
        assert _state_of(db_session, modified) is ChangeState.MODIFIED
        assert _state_of(db_session, removed) is ChangeState.REMOVED
        assert _state_of(db_session, added) is ChangeState.ADDED

    def test_filter_by_state(self, db_session: Session):
        first = _persisted_person(db_session, "First")
        _persisted_person(db_session, "Second")
        db_session.delete(first)

        records = tracked_changes(db_session, ChangeState.REMOVED)

        assert [r.entity for r in records] == [first]
        assert tracked_changes(db_session, ChangeState.ADDED) == []

    def test_capability_resolved_per_record(self, db_session: Session):
        person = _persisted_person(db_session)
        note = PersonNote(person_id=person.id, content="hello")
        db_session.add(note)

        records = {type(r.entity): r for r in tracked_changes(db_session)}

        assert records[Person].soft_deletable is True
        assert records[PersonNote].soft_deletable is False


class TestStateTransitions:
    """Transitions are applied to the session"""

    def test_removed_to_modified_cancels_delete(self, db_session: Session):
        person = _persisted_person(db_session)
        db_session.delete(person)
        (record,) = tracked_changes(db_session, ChangeState.REMOVED)

        record.state = ChangeState.MODIFIED

        assert record.state is ChangeState.MODIFIED
        assert person not in db_session.deleted
        assert person in db_session.dirty

    def test_removed_to_unchanged_cancels_delete(self, db_session: Session):
        person = _persisted_person(db_session)
        db_session.delete(person)
        (record,) = tracked_changes(db_session, ChangeState.REMOVED)

        record.state = ChangeState.UNCHANGED

        assert person not in db_session.deleted
        db_session.flush()
        assert db_session.get(Person, person.id) is person

    def test_unchanged_to_removed_deletes(self, db_session: Session):
        person = _persisted_person(db_session)
        (record,) = tracked_changes(db_session, ChangeState.UNCHANGED)

        record.state = ChangeState.REMOVED

        assert person in db_session.deleted

    def test_same_state_is_noop(self, db_session: Session):
        person = _persisted_person(db_session)
        db_session.delete(person)
        (record,) = tracked_changes(db_session, ChangeState.REMOVED)

        record.state = ChangeState.REMOVED

        assert person in db_session.deleted

    @pytest.mark.parametrize("target", [ChangeState.UNCHANGED, ChangeState.MODIFIED, ChangeState.REMOVED])
    def test_added_records_cannot_transition(self, db_session: Session, target):
        db_session.add(Person(first_name="New"))
        (record,) = tracked_changes(db_session, ChangeState.ADDED)

        with pytest.raises(InvalidStateTransition):
            record.state = target

    def test_modified_cannot_become_unchanged(self, db_session: Session):
        person = _persisted_person(db_session)
        person.first_name = "Changed"
        (record,) = tracked_changes(db_session, ChangeState.MODIFIED)

        with pytest.raises(InvalidStateTransition):
            record.state = ChangeState.UNCHANGED
