"""
People Models

Person records use the soft delete pattern; person notes do not and are
physically deleted. A partial index covers the live (non-deleted) rows.
"""

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String, Text, and_, false, text
from sqlalchemy.orm import declarative_base, relationship

from softdelete.capability import SoftDeleteMixin, utcnow

Base = declarative_base()


class Person(SoftDeleteMixin, Base):
    """
    People
    Soft-deletable: removing a person keeps the row with is_deleted set
    """

    __tablename__ = "people"

    id = Column(Integer, primary_key=True, autoincrement=True)
    first_name = Column(String(100), nullable=False, default="")
    last_name = Column(String(100), nullable=False, default="")
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    notes = relationship("PersonNote")

    __table_args__ = (
        Index(
            "idx_people_active_last_name",
            "last_name",
            sqlite_where=text("is_deleted = 0"),
            postgresql_where=text("is_deleted = false"),
        ),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "is_deleted": self.is_deleted,
            "deleted_at": self.deleted_at.isoformat() if self.deleted_at else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }


class PersonNote(Base):
    """
    Person Notes
    Free-text notes attached to a person; hard deleted
    """

    __tablename__ = "person_notes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    person_id = Column(Integer, ForeignKey("people.id"), nullable=False, index=True)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    # Navigation never reaches a soft-deleted person; the extra criterion
    # also keeps lazy loads off the identity-map shortcut. Use
    # ctx.get(Person, note.person_id, unfiltered=True) to reach one.
    person = relationship(
        "Person",
        primaryjoin=lambda: and_(PersonNote.person_id == Person.id, Person.is_deleted == false()),
        viewonly=True,
    )

    def to_dict(self):
        return {
            "id": self.id,
            "person_id": self.person_id,
            "content": self.content,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
