"""Draft Configuration Registry.

Stores, per mapped class, which associations are cloned into a draft and
which attributes are nulled on the clone. Registering a root type cascades
to every type reachable through its draftable associations.

Usage:
    registry = DraftRegistry(schema=SqlAlchemySchema(bind=engine))

    # Employee only drafts its home address
    registry.register_subset(Employee, ["home_address"])

    # Business drafts employees, images, address and vending machines;
    # their types (and Employee's home address type) are registered too
    registry.register(Business)

Thread-safety: registration is serialised by a lock. After the startup
phase the registry is only read and can be shared across threads.
"""

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from config import Settings, get_settings

from .adapters.sqlalchemy_schema import SqlAlchemySchema
from .associations import RESERVED_ASSOCIATIONS, AssociationSpec
from .errors import ConfigurationError, DraftLookupError
from .interrogators import APPROVED_VERSION_COLUMN
from .ports import SchemaPort
from .scopes import ScopeProvider

logger = logging.getLogger(__name__)


class RegistrationSource(str, Enum):
    """How a type entered the registry."""
    EXPLICIT = "EXPLICIT"  # register()
    SUBSET = "SUBSET"      # register_subset()
    CASCADE = "CASCADE"    # reached from another registered type


@dataclass(frozen=True)
class DraftConfiguration:
    """Draft settings of one entity type.

    Attributes:
        entity_type: Mapped class
        associations: Associations cloned recursively, in registration order
        nullify: Attributes left null on every clone (identity and creation
            timestamps included)
        source: How the type was registered
        use_default_scope: Whether reads are implicitly limited to approved rows
        linked: Whether the type carries the approved_version_id link
        requested_nullify: The caller's nullify names. These are written as
            NULL on the clone; the rest of ``nullify`` is left unset so
            column defaults fire on insert
    """
    entity_type: type
    associations: Tuple[AssociationSpec, ...]
    nullify: frozenset
    source: RegistrationSource
    use_default_scope: bool = False
    linked: bool = False
    requested_nullify: frozenset = frozenset()

    @property
    def association_names(self) -> Tuple[str, ...]:
        return tuple(spec.name for spec in self.associations)


class DraftRegistry:
    """Registry of draftable entity types.

    Args:
        schema: Schema port (default: SqlAlchemySchema without a bind)
        scopes: Scope provider receiving links and default scopes
        settings: Settings supplying timestamp and default nullify names
    """

    def __init__(
        self,
        schema: Optional[SchemaPort] = None,
        scopes: Optional[ScopeProvider] = None,
        settings: Optional[Settings] = None,
    ):
        self._schema = schema or SqlAlchemySchema()
        self._scopes = scopes or ScopeProvider()
        self._settings = settings or get_settings()
        self._configurations: Dict[type, DraftConfiguration] = {}
        self._lock = threading.RLock()

    @property
    def schema(self) -> SchemaPort:
        return self._schema

    @property
    def scopes(self) -> ScopeProvider:
        return self._scopes

    def register(
        self,
        entity_type: type,
        associations: Optional[Sequence[str]] = None,
        nullify: Optional[Iterable[str]] = None,
        use_default_scope: bool = False,
    ) -> Optional[DraftConfiguration]:
        """Make ``entity_type`` draftable and cascade to its associations.

        Args:
            entity_type: Mapped class to register
            associations: Association names to clone. Omitted or empty means
                every draftable association except ``draft``/``approved_version``
            nullify: Extra attribute names to null on every clone
            use_default_scope: Limit all reads of the type to approved rows

        Returns:
            The stored configuration, or None when the table does not exist
            yet (tolerated while migrating)

        Raises:
            ConfigurationError: If the type is already registered, or an
                association or nullify name is invalid
        """
        if not self._schema.table_exists(entity_type):
            logger.warning(
                f"Skipping draft registration of {entity_type.__name__}: table does not exist",
                extra={"entity_type": entity_type.__name__},
            )
            return None

        if isinstance(associations, str):
            associations = [associations]
        names = list(associations) if associations else list(self._schema.default_associations(entity_type))

        with self._lock:
            self._ensure_unregistered(entity_type, "register")
            specs = self._resolve(entity_type, names)
            before = set(self._configurations)
            try:
                configuration = self._store(
                    entity_type,
                    specs,
                    nullify=nullify,
                    source=RegistrationSource.EXPLICIT,
                    use_default_scope=use_default_scope,
                )
                self._cascade(configuration)
            except ConfigurationError:
                self._rollback(before)
                raise

        return configuration

    def register_subset(self, entity_type: type, associations: Sequence[str]) -> Optional[DraftConfiguration]:
        """Draft only the named associations of a type reached from a root.

        Does not cascade: the listed associations' own target types are
        configured when a root registration reaches them.

        Raises:
            ConfigurationError: If ``associations`` is empty, names an unknown
                association, or the type is already registered
        """
        if not self._schema.table_exists(entity_type):
            logger.warning(
                f"Skipping draft subset registration of {entity_type.__name__}: table does not exist",
                extra={"entity_type": entity_type.__name__},
            )
            return None

        if isinstance(associations, str):
            associations = [associations]
        if not associations:
            raise ConfigurationError(
                f"{entity_type.__name__} register_subset must include names of associations to create drafts for"
            )

        with self._lock:
            self._ensure_unregistered(entity_type, "register_subset")
            specs = self._resolve(entity_type, list(associations))
            return self._store(entity_type, specs, nullify=None, source=RegistrationSource.SUBSET)

    def deregister(self, entity_type: type) -> None:
        """Forget the configuration of ``entity_type`` (testing escape hatch).

        The type can no longer be cloned until registered again. Types that
        were registered by cascading from it keep their configurations.
        """
        with self._lock:
            removed = self._configurations.pop(entity_type, None)
            self._scopes.disable_default_scope(entity_type)

        if removed is not None:
            logger.info(
                f"Deregistered {entity_type.__name__} from drafting",
                extra={"entity_type": entity_type.__name__},
            )

    def get(self, entity_type: type) -> DraftConfiguration:
        """Get the configuration of a registered type.

        Raises:
            DraftLookupError: If the type is not registered
        """
        configuration = self._configurations.get(entity_type)
        if configuration is None:
            raise DraftLookupError(
                f"{entity_type.__name__} is not registered for drafting"
            )
        return configuration

    def find(self, entity_type: type) -> Optional[DraftConfiguration]:
        """Configuration of ``entity_type`` or of its closest registered base class."""
        for klass in getattr(entity_type, "__mro__", (entity_type,)):
            configuration = self._configurations.get(klass)
            if configuration is not None:
                return configuration
        return None

    def is_registered(self, entity_type: type) -> bool:
        return entity_type in self._configurations

    def configurations(self) -> List[DraftConfiguration]:
        return list(self._configurations.values())

    def clear(self) -> None:
        """Forget every configuration.

        Warning:
            This should only be used in tests.
        """
        with self._lock:
            for entity_type in list(self._configurations):
                self._scopes.disable_default_scope(entity_type)
            self._configurations.clear()

    def dispose(self) -> None:
        """Clear the registry and detach the scope provider's session listener."""
        self.clear()
        self._scopes.dispose()

    def __contains__(self, entity_type: type) -> bool:
        return self.is_registered(entity_type)

    def __len__(self) -> int:
        return len(self._configurations)

    def _ensure_unregistered(self, entity_type: type, operation: str) -> None:
        if entity_type in self._configurations:
            raise ConfigurationError(
                f"Cannot call {operation} multiple times for {entity_type.__name__}"
            )

    def _resolve(self, entity_type: type, names: List[str]) -> Tuple[AssociationSpec, ...]:
        specs: List[AssociationSpec] = []
        seen = set()
        for name in names:
            name = str(name)
            if name in seen:
                continue
            seen.add(name)

            if name in RESERVED_ASSOCIATIONS:
                raise ConfigurationError(
                    f"{entity_type.__name__} cannot draft reserved association ({name})"
                )
            spec = self._schema.reflect_association(entity_type, name)
            if spec is None:
                raise ConfigurationError(
                    f"{entity_type.__name__} includes invalid association ({name})"
                )
            if not spec.is_draftable:
                raise ConfigurationError(
                    f"{entity_type.__name__} association ({name}) is a {spec.kind.value} "
                    f"association and cannot be drafted"
                )
            specs.append(spec)
        return tuple(specs)

    def _rollback(self, before: set) -> None:
        added = [entity_type for entity_type in self._configurations if entity_type not in before]
        for entity_type in added:
            del self._configurations[entity_type]
            self._scopes.disable_default_scope(entity_type)
        logger.warning(
            f"Draft registration failed; discarded {[t.__name__ for t in added]}"
        )

    def _nullify_set(self, entity_type: type, nullify: Optional[Iterable[str]]) -> Tuple[frozenset, frozenset]:
        columns = self._schema.columns(entity_type)

        requested = list(nullify or ())
        for name in requested:
            if name not in columns:
                raise ConfigurationError(
                    f"{entity_type.__name__} cannot nullify unknown attribute ({name})"
                )

        always = set(self._schema.primary_key(entity_type))
        always.update(
            name
            for name in (*self._settings.DRAFT_TIMESTAMP_COLUMNS, *self._settings.DRAFT_DEFAULT_NULLIFY)
            if name in columns
        )
        return frozenset(always.union(requested)), frozenset(requested).difference(always)

    def _store(
        self,
        entity_type: type,
        specs: Tuple[AssociationSpec, ...],
        nullify: Optional[Iterable[str]],
        source: RegistrationSource,
        use_default_scope: bool = False,
    ) -> DraftConfiguration:
        nullify_set, requested_nullify = self._nullify_set(entity_type, nullify)
        linked = self._scopes.ensure_link(entity_type)
        if use_default_scope:
            self._scopes.enable_default_scope(entity_type)

        configuration = DraftConfiguration(
            entity_type=entity_type,
            associations=specs,
            nullify=nullify_set,
            source=source,
            use_default_scope=use_default_scope,
            linked=linked,
            requested_nullify=requested_nullify,
        )
        self._configurations[entity_type] = configuration

        logger.info(
            f"Registered {entity_type.__name__} for drafting "
            f"(associations={list(configuration.association_names)})",
            extra={"entity_type": entity_type.__name__, "source": source.value},
        )
        if not linked:
            logger.debug(
                f"{entity_type.__name__} has no {APPROVED_VERSION_COLUMN} column; its clones stay unlinked"
            )
        return configuration

    def _cascade(self, root: DraftConfiguration) -> None:
        # Depth-first over configured associations; visited guards cycles
        visited = {root.entity_type}
        pending = [root]

        while pending:
            configuration = pending.pop()
            for spec in configuration.associations:
                target = spec.target
                if target in visited:
                    continue
                visited.add(target)

                child = self._configurations.get(target)
                if child is None:
                    if not self._schema.table_exists(target):
                        logger.warning(
                            f"Skipping cascaded registration of {target.__name__}: table does not exist",
                            extra={"entity_type": target.__name__, "association": spec.name},
                        )
                        continue
                    logger.debug(
                        f"Cascading draft registration from {configuration.entity_type.__name__}.{spec.name} "
                        f"to {target.__name__}",
                        extra={"entity_type": target.__name__, "association": spec.name},
                    )
                    child = self._store(
                        target,
                        self._resolve(target, list(self._schema.default_associations(target))),
                        nullify=None,
                        source=RegistrationSource.CASCADE,
                    )
                pending.append(child)
