"""Recursive Clone Orchestrator.

Builds the draft of a live entity together with the drafts of every
configured association, using each type's own registry configuration.

The result is transient: nothing is added to a session or flushed. Saving
it (normally ``session.add(draft)`` followed by a commit, which cascades
to the cloned children) is the caller's job.
"""

import logging
from typing import Any, FrozenSet, Optional

from sqlalchemy.orm import object_mapper
from sqlalchemy.orm.collections import collection_adapter

from observability.operation_id import operation_scope

from .associations import AssociationKind, AssociationSpec
from .cloner import shallow_clone
from .errors import ConfigurationError
from .interrogators import APPROVED_VERSION_COLUMN, has_draft, is_draft
from .registry import DraftConfiguration, DraftRegistry

logger = logging.getLogger(__name__)


def _identity(entity: Any) -> Optional[Any]:
    values = object_mapper(entity).primary_key_from_instance(entity)
    if len(values) == 1:
        return values[0]
    return tuple(values)


def _members(collection) -> list:
    # Dict-keyed collections iterate their keys; the adapter yields members
    return list(collection_adapter(collection))


def _fill(draft: Any, name: str, items: list) -> None:
    # Appends into the draft's own collection_class instance
    adapter = collection_adapter(getattr(draft, name))
    for item in items:
        adapter.append_with_event(item)


class DraftOrchestrator:
    """Creates drafts of registered entity types.

    Args:
        registry: Registry holding the draft configurations

    Example:
        orchestrator = DraftOrchestrator(registry)
        draft = orchestrator.create_draft(business)
        session.add(draft)
        session.commit()
    """

    def __init__(self, registry: DraftRegistry):
        self._registry = registry

    def create_draft(self, live_entity: Any) -> Any:
        """Deep-clone ``live_entity`` into an unsaved draft.

        Args:
            live_entity: Live instance of a registered type

        Returns:
            Transient draft with its cloned subgraph attached

        Raises:
            DraftLookupError: If the entity's type is not registered
            ConfigurationError: If an owned association targets a type that
                is no longer registered, or the data loops back on itself
        """
        configuration = self._registry.get(type(live_entity))
        entity_name = type(live_entity).__name__

        with operation_scope():
            live_id = _identity(live_entity)
            logger.info(
                f"Creating draft of {entity_name} {live_id}",
                extra={"entity_type": entity_name, "live_id": live_id},
            )
            draft = self._clone(live_entity, configuration, frozenset())
            logger.info(
                f"Created draft of {entity_name} {live_id}",
                extra={"entity_type": entity_name, "live_id": live_id},
            )

        return draft

    def editable_version(self, entity: Any) -> Any:
        """Return the draft to edit for ``entity``.

        A draft is returned as is; a live entity returns its existing draft,
        or a newly built one when it has none.
        """
        if is_draft(entity):
            return entity
        if has_draft(entity):
            return entity.draft
        return self.create_draft(entity)

    def _clone(self, live: Any, configuration: DraftConfiguration, path: FrozenSet[int]) -> Any:
        if id(live) in path:
            raise ConfigurationError(
                f"{type(live).__name__} {_identity(live)} is reachable from itself; "
                f"cannot draft a cyclic object graph"
            )
        path = path | {id(live)}

        exclude = set(configuration.nullify)
        exclude.add(APPROVED_VERSION_COLUMN)
        draft = shallow_clone(live, exclude=exclude)
        for name in configuration.requested_nullify:
            setattr(draft, name, None)

        if configuration.linked:
            # Column only: setting the relationship would detach an existing draft via backref
            setattr(draft, APPROVED_VERSION_COLUMN, _identity(live))

        for spec in configuration.associations:
            self._clone_association(live, draft, configuration, spec, path)

        return draft

    def _clone_association(
        self,
        live: Any,
        draft: Any,
        configuration: DraftConfiguration,
        spec: AssociationSpec,
        path: FrozenSet[int],
    ) -> None:
        value = getattr(live, spec.name)
        logger.debug(
            f"Cloning {configuration.entity_type.__name__}.{spec.name} ({spec.kind.value})",
            extra={"entity_type": configuration.entity_type.__name__, "association": spec.name},
        )

        if spec.kind is AssociationKind.MANY_TO_MANY:
            # Shared rows: only the join rows are recreated
            _fill(draft, spec.name, _members(value))
        elif spec.kind is AssociationKind.TO_ONE:
            cloned = None if value is None else self._clone_owned(value, configuration, spec, path)
            setattr(draft, spec.name, cloned)
        elif spec.kind is AssociationKind.TO_MANY:
            members = [self._clone_owned(member, configuration, spec, path) for member in _members(value)]
            _fill(draft, spec.name, members)
        else:
            raise ConfigurationError(
                f"{configuration.entity_type.__name__} association ({spec.name}) "
                f"is a {spec.kind.value} association and cannot be drafted"
            )

    def _clone_owned(
        self,
        member: Any,
        owner: DraftConfiguration,
        spec: AssociationSpec,
        path: FrozenSet[int],
    ) -> Any:
        configuration = self._registry.find(type(member))
        if configuration is None:
            raise ConfigurationError(
                f"{owner.entity_type.__name__} association ({spec.name}) targets "
                f"{type(member).__name__}, which is not registered for drafting"
            )
        return self._clone(member, configuration, path)
