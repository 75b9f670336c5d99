"""Schema Port - interface to the persistence layer's schema knowledge.

The registry never talks to SQLAlchemy inspection directly; it asks this
port whether a table exists, which columns a type has and what a named
association looks like. Adapters live in ``draftflow.adapters``.
"""

from abc import ABC, abstractmethod
from typing import Optional, Set, Tuple

from .associations import AssociationSpec


class SchemaPort(ABC):
    """Port interface for schema introspection of draftable types.

    Example Usage:
        schema = SqlAlchemySchema(bind=engine)

        if schema.table_exists(Business):
            spec = schema.reflect_association(Business, "employees")
    """

    @abstractmethod
    def table_exists(self, entity_type: type) -> bool:
        """Return True if the type's table exists in storage.

        Registration is skipped (not failed) when this is False so models can
        be imported while migrations are still pending.
        """
        pass

    @abstractmethod
    def columns(self, entity_type: type) -> Set[str]:
        """Return the mapped column attribute names of ``entity_type``."""
        pass

    def has_column(self, entity_type: type, name: str) -> bool:
        return name in self.columns(entity_type)

    @abstractmethod
    def primary_key(self, entity_type: type) -> Tuple[str, ...]:
        """Return the attribute names forming the identity of ``entity_type``."""
        pass

    @abstractmethod
    def reflect_association(self, entity_type: type, name: str) -> Optional[AssociationSpec]:
        """Resolve a relationship by name, or None if there is no such relationship."""
        pass

    @abstractmethod
    def default_associations(self, entity_type: type) -> Tuple[str, ...]:
        """Names of the associations drafted when none are given explicitly."""
        pass
