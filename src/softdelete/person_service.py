"""
People Service - Business Logic Layer

Person and note management on top of the soft-delete aware persistence
context. Removing a person soft deletes it; removing a note deletes the row.
"""

import logging
from typing import List, Optional

from softdelete.context import PersistenceContext
from softdelete.models import Person, PersonNote
from softdelete.read_filter import only_deleted

logger = logging.getLogger(__name__)


class PersonService:
    """People management with soft delete"""

    @staticmethod
    def create_person(ctx: PersistenceContext, first_name: str, last_name: str = "") -> Person:
        """
        Create a new person

        Args:
            ctx: Persistence context
            first_name: Given name
            last_name: Family name

        Returns:
            Created Person object
        """
        person = Person(first_name=first_name, last_name=last_name)
        ctx.add(person)
        ctx.commit()
        ctx.session.refresh(person)
        return person

    @staticmethod
    def get_person(ctx: PersistenceContext, person_id: int, include_deleted: bool = False) -> Optional[Person]:
        """Retrieve person by id; soft-deleted people only when include_deleted is set"""
        return ctx.get(Person, person_id, unfiltered=include_deleted)

    @staticmethod
    def list_people(
        ctx: PersistenceContext,
        last_name: Optional[str] = None,
        include_deleted: bool = False,
        limit: int = 100,
        offset: int = 0,
    ) -> tuple[List[Person], int]:
        """
        List people with optional filtering

        Returns:
            Tuple of (people list, total count)
        """
        criteria = []
        if last_name:
            criteria.append(Person.last_name == last_name)

        total = ctx.count(Person, *criteria, unfiltered=include_deleted)
        stmt = ctx.select(Person, *criteria, unfiltered=include_deleted).order_by(Person.id).offset(offset).limit(limit)
        people = ctx.execute(stmt).all()

        return list(people), total

    @staticmethod
    def list_deleted_people(ctx: PersistenceContext) -> List[Person]:
        """Soft-deleted people, most recently deleted first"""
        stmt = ctx.select(Person, only_deleted(Person), unfiltered=True).order_by(Person.deleted_at.desc())
        return list(ctx.execute(stmt).all())

    @staticmethod
    def delete_person(ctx: PersistenceContext, person_id: int) -> bool:
        """Soft delete a person"""
        person = ctx.get(Person, person_id)

        if person:
            ctx.remove(person)
            ctx.commit()
            logger.info(f"Person {person_id} soft deleted")
            return True

        return False


class PersonNoteService:
    """Notes attached to people; physically deleted"""

    @staticmethod
    def add_note(ctx: PersistenceContext, person_id: int, content: str) -> Optional[PersonNote]:
        """Attach a note to a live person"""
        person = ctx.get(Person, person_id)
        if not person:
            return None

        note = PersonNote(person_id=person.id, content=content)
        ctx.add(note)
        ctx.commit()
        ctx.session.refresh(note)
        return note

    @staticmethod
    def list_notes(ctx: PersistenceContext, person_id: int) -> List[PersonNote]:
        stmt = ctx.select(PersonNote, PersonNote.person_id == person_id).order_by(PersonNote.id)
        return list(ctx.execute(stmt).all())

    @staticmethod
    def delete_note(ctx: PersistenceContext, note_id: int) -> bool:
        """Hard delete a note"""
        note = ctx.get(PersonNote, note_id)

        if note:
            ctx.remove(note)
            ctx.commit()
            return True

        return False
