"""Association classification for draftable entity types.

Resolves a relationship name on a mapped class into an AssociationSpec and
decides whether that relationship takes part in drafting.

Draftable kinds:
    TO_ONE        one-to-many direction with uselist=False (has one)
    TO_MANY       one-to-many direction, list/set collection (has many)
    MANY_TO_MANY  relationship through a secondary table

Many-to-one ("belongs to") and view-only relationships are never drafted:
the draft keeps pointing at the same parent row through its copied
foreign key.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from sqlalchemy import inspect as sa_inspect
from sqlalchemy.orm import RelationshipDirection

from .errors import ConfigurationError

# Relationship names installed by the live/draft link; never cloned.
RESERVED_ASSOCIATIONS = frozenset({"draft", "approved_version"})


class AssociationKind(str, Enum):
    """Structural kind of a relationship."""
    TO_ONE = "TO_ONE"
    TO_MANY = "TO_MANY"
    MANY_TO_MANY = "MANY_TO_MANY"
    BELONGS_TO = "BELONGS_TO"


DRAFTABLE_KINDS = frozenset({
    AssociationKind.TO_ONE,
    AssociationKind.TO_MANY,
    AssociationKind.MANY_TO_MANY,
})


@dataclass(frozen=True)
class AssociationSpec:
    """A relationship resolved once at registration time.

    Attributes:
        name: Relationship attribute name on the owning class
        kind: Structural kind (see AssociationKind)
        target: Mapped class on the other side
        viewonly: True if the relationship cannot be written
    """
    name: str
    kind: AssociationKind
    target: type
    viewonly: bool = False

    @property
    def is_draftable(self) -> bool:
        return self.kind in DRAFTABLE_KINDS and not self.viewonly

    @property
    def owns_targets(self) -> bool:
        """True if cloning produces new target rows (not shared references)."""
        return self.kind in (AssociationKind.TO_ONE, AssociationKind.TO_MANY)


def _classify(relationship_property) -> AssociationKind:
    direction = relationship_property.direction
    if direction is RelationshipDirection.MANYTOMANY:
        return AssociationKind.MANY_TO_MANY
    if direction is RelationshipDirection.MANYTOONE:
        return AssociationKind.BELONGS_TO
    if relationship_property.uselist:
        return AssociationKind.TO_MANY
    return AssociationKind.TO_ONE


def reflect_association(entity_type: type, name: str) -> Optional[AssociationSpec]:
    """Resolve a relationship by name.

    Args:
        entity_type: Mapped class owning the relationship
        name: Relationship attribute name

    Returns:
        AssociationSpec, or None if ``name`` is not a relationship
        (plain columns and unknown names both yield None)
    """
    relationships = sa_inspect(entity_type).relationships
    if name not in relationships:
        return None

    relationship_property = relationships[name]
    return AssociationSpec(
        name=name,
        kind=_classify(relationship_property),
        target=relationship_property.mapper.class_,
        viewonly=bool(relationship_property.viewonly),
    )


def resolve_association(entity_type: type, name: str) -> AssociationSpec:
    """Resolve a relationship the caller claims exists.

    Raises:
        ConfigurationError: If ``name`` is not a relationship on ``entity_type``
    """
    spec = reflect_association(entity_type, name)
    if spec is None:
        raise ConfigurationError(
            f"{entity_type.__name__} includes invalid association ({name})"
        )
    return spec


def is_relevant(entity_type: type, name: str) -> bool:
    """Check whether a relationship is one of the draftable kinds.

    Example:
        >>> is_relevant(Business, "employees")
        True
        >>> is_relevant(Employee, "business")  # many-to-one
        False
    """
    spec = reflect_association(entity_type, name)
    return spec is not None and spec.is_draftable


def list_associations(entity_type: type) -> Tuple[AssociationSpec, ...]:
    """All relationships of ``entity_type`` in mapper order."""
    relationships = sa_inspect(entity_type).relationships
    return tuple(reflect_association(entity_type, key) for key in relationships.keys())


def default_draft_associations(entity_type: type) -> Tuple[str, ...]:
    """Names of every draftable relationship, minus the reserved link names."""
    return tuple(
        spec.name
        for spec in list_associations(entity_type)
        if spec.is_draftable and spec.name not in RESERVED_ASSOCIATIONS
    )
