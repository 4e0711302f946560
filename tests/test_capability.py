"""
Deletable Capability Tests

The deleted flag and the deletion timestamp must always move together.
"""

from datetime import datetime
from typing import Optional

import pytest

from softdelete.capability import Deletable, supports_soft_delete, utcnow
from softdelete.models import Person, PersonNote


class _PlainRecord:
    """Non-ORM object satisfying the contract structurally"""

    def __init__(self):
        self.is_deleted = False
        self.deleted_at: Optional[datetime] = None

    def mark_deleted(self):
        self.is_deleted = True
        self.deleted_at = utcnow()

    def mark_restored(self):
        self.is_deleted = False
        self.deleted_at = None


class TestDeletableInvariant:
    """deleted_at is set exactly when is_deleted is true"""

    def test_new_entity_is_not_deleted(self):
        person = Person(first_name="Ana")
        assert person.is_deleted is False
        assert person.deleted_at is None

    def test_mark_deleted_stamps_timestamp(self):
        person = Person(first_name="Ana")
        before = utcnow()

        person.mark_deleted()

        assert person.is_deleted is True
        assert person.deleted_at is not None
        assert person.deleted_at >= before

    def test_mark_restored_clears_timestamp(self):
        person = Person(first_name="Ana")
        person.mark_deleted()

        person.mark_restored()

        assert person.is_deleted is False
        assert person.deleted_at is None

    @pytest.mark.parametrize("flag", [True, False])
    def test_flag_setter_keeps_invariant(self, flag):
        person = Person(first_name="Ana")
        person.is_deleted = not flag
        person.is_deleted = flag

        assert person.is_deleted is flag
        assert (person.deleted_at is not None) is flag

    def test_marking_again_overwrites_timestamp(self):
        person = Person(first_name="Ana")
        person.mark_deleted()
        first_stamp = person.deleted_at

        person.mark_deleted()

        assert person.deleted_at >= first_stamp

    def test_constructor_flag_goes_through_setter(self):
        person = Person(first_name="Ana", is_deleted=True)
        assert person.is_deleted is True
        assert person.deleted_at is not None

    def test_deleted_at_is_not_assignable(self):
        person = Person(first_name="Ana")
        with pytest.raises(AttributeError):
            person.deleted_at = utcnow()
        assert person.deleted_at is None


class TestCapabilityCheck:
    """Soft delete is opt-in per entity type"""

    def test_mapped_classes(self):
        assert supports_soft_delete(Person) is True
        assert supports_soft_delete(PersonNote) is False

    def test_instances(self):
        assert supports_soft_delete(Person(first_name="Ana")) is True
        assert supports_soft_delete(PersonNote(content="x")) is False
        assert isinstance(Person(first_name="Ana"), Deletable)

    def test_structural_match_without_mixin(self):
        record = _PlainRecord()
        assert supports_soft_delete(record) is True
        assert supports_soft_delete(_PlainRecord) is False
