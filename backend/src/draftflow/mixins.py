"""Declarative mixin carrying the live/draft link.

Usage:
    class Business(DraftableMixin, Base):
        __tablename__ = "business"

        id = Column(Integer, primary_key=True)
        employees = relationship("Employee", back_populates="business")

The mixing class must define ``__tablename__`` and an ``id`` primary key;
``approved_version_id`` takes its type from that key.
"""

from sqlalchemy import Column, ForeignKey
from sqlalchemy.orm import declared_attr, relationship

from . import interrogators


class DraftableMixin:
    """Adds approved_version_id plus the approved_version/draft relationships."""

    @declared_attr
    def approved_version_id(cls):
        # unique: a live row has at most one outstanding draft
        return Column(
            ForeignKey(f"{cls.__tablename__}.id"),
            nullable=True,
            unique=True,
            comment="Live row this draft was cloned from; NULL on live rows",
        )

    @declared_attr
    def approved_version(cls):
        return relationship(
            cls.__name__,
            remote_side=f"{cls.__name__}.id",
            foreign_keys=f"{cls.__name__}.approved_version_id",
            back_populates="draft",
        )

    @declared_attr
    def draft(cls):
        return relationship(
            cls.__name__,
            foreign_keys=f"{cls.__name__}.approved_version_id",
            back_populates="approved_version",
            uselist=False,
        )

    def is_draft(self) -> bool:
        return interrogators.is_draft(self)

    def is_approved(self) -> bool:
        return interrogators.is_approved(self)

    def has_draft(self) -> bool:
        return interrogators.has_draft(self)

    def live_version(self):
        return interrogators.live_version(self)
