"""Scope Provider - approved/draft predicates over one table.

Approved rows have a NULL approved_version_id, drafts have it set. The two
predicates partition every row of a draftable type exactly once.

A type can additionally be default-scoped: every ORM SELECT touching it
then only sees approved rows, unless the statement carries the
``include_drafts`` execution option. The ``draft`` statement always
carries that option, so drafts stay reachable under a default scope.

Example:
    scopes = ScopeProvider()
    scopes.ensure_link(Business)

    live = session.scalars(scopes.approved(Business)).all()
    drafts = session.scalars(scopes.draft(Business)).all()
"""

import logging
import threading
from typing import Set

from sqlalchemy import ColumnElement, Select, event, inspect as sa_inspect, select
from sqlalchemy.orm import ORMExecuteState, Session, relationship, with_loader_criteria

from .errors import ConfigurationError
from .interrogators import APPROVED_VERSION_COLUMN

logger = logging.getLogger(__name__)

# Execution option bypassing default scopes
INCLUDE_DRAFTS = "include_drafts"


def _link_column(entity_type: type):
    mapper = sa_inspect(entity_type)
    if APPROVED_VERSION_COLUMN not in mapper.columns:
        raise ConfigurationError(
            f"{entity_type.__name__} has no {APPROVED_VERSION_COLUMN} column"
        )
    return getattr(entity_type, APPROVED_VERSION_COLUMN)


def has_link_column(entity_type: type) -> bool:
    return APPROVED_VERSION_COLUMN in sa_inspect(entity_type).columns


class ScopeProvider:
    """Defines approved/draft scopes and applies default scopes on read.

    Args:
        session_target: Session class or sessionmaker whose ``do_orm_execute``
            event carries the default scopes (default: every Session)

    Thread-safety: default scopes are toggled at configuration time; the
    event handler only reads a snapshot of the scoped types.
    """

    def __init__(self, session_target=Session):
        self._session_target = session_target
        self._default_scoped: Set[type] = set()
        self._listening = False
        self._lock = threading.Lock()

    def ensure_link(self, entity_type: type) -> bool:
        """Make sure a type with a link column exposes the link relationships.

        Types using DraftableMixin already have them. For a type that only
        declares an ``approved_version_id`` column, ``approved_version`` and
        ``draft`` relationships are added to its mapper.

        Returns:
            True if the type carries the live/draft link
        """
        if not has_link_column(entity_type):
            logger.debug(f"{entity_type.__name__} has no {APPROVED_VERSION_COLUMN}; drafts will not be linked")
            return False

        mapper = sa_inspect(entity_type)
        if "approved_version" in mapper.relationships:
            return True

        if len(mapper.primary_key) != 1:
            raise ConfigurationError(
                f"{entity_type.__name__} must have a single-column primary key to link drafts"
            )

        link = mapper.columns[APPROVED_VERSION_COLUMN]
        identity = mapper.primary_key[0]
        mapper.add_property(
            "approved_version",
            relationship(
                entity_type,
                primaryjoin=link == identity,
                foreign_keys=[link],
                remote_side=[identity],
                uselist=False,
            ),
        )
        mapper.add_property(
            "draft",
            relationship(
                entity_type,
                primaryjoin=link == identity,
                foreign_keys=[link],
                remote_side=[link],
                uselist=False,
                viewonly=True,
            ),
        )
        logger.info(f"Installed approved_version/draft relationships on {entity_type.__name__}")
        return True

    def approved_criteria(self, entity_type: type) -> ColumnElement:
        return _link_column(entity_type).is_(None)

    def draft_criteria(self, entity_type: type) -> ColumnElement:
        return _link_column(entity_type).is_not(None)

    def approved(self, entity_type: type) -> Select:
        """SELECT of the live rows of ``entity_type``."""
        return select(entity_type).where(self.approved_criteria(entity_type))

    def draft(self, entity_type: type) -> Select:
        """SELECT of the draft rows of ``entity_type``, bypassing any default scope."""
        return self.unscoped(select(entity_type).where(self.draft_criteria(entity_type)))

    def unscoped(self, statement):
        """Mark a Select or Query so default scopes are not applied to it."""
        return statement.execution_options(**{INCLUDE_DRAFTS: True})

    def enable_default_scope(self, entity_type: type) -> None:
        """Filter every ORM read of ``entity_type`` down to approved rows.

        Raises:
            ConfigurationError: If the type has no link column
        """
        _link_column(entity_type)
        with self._lock:
            self._default_scoped.add(entity_type)
            if not self._listening:
                event.listen(self._session_target, "do_orm_execute", self._apply_default_scopes)
                self._listening = True
        logger.info(f"Default approved scope enabled for {entity_type.__name__}")

    def disable_default_scope(self, entity_type: type) -> None:
        with self._lock:
            self._default_scoped.discard(entity_type)

    def is_default_scoped(self, entity_type: type) -> bool:
        return entity_type in self._default_scoped

    def dispose(self) -> None:
        """Remove the session event listener and forget all default scopes."""
        with self._lock:
            if self._listening:
                event.remove(self._session_target, "do_orm_execute", self._apply_default_scopes)
                self._listening = False
            self._default_scoped.clear()

    def _apply_default_scopes(self, orm_execute_state: ORMExecuteState) -> None:
        if (
            not orm_execute_state.is_select
            or orm_execute_state.is_column_load
            or orm_execute_state.is_relationship_load
            or orm_execute_state.execution_options.get(INCLUDE_DRAFTS, False)
        ):
            return

        # Not propagated to lazy loaders: live.draft must stay loadable
        for entity_type in tuple(self._default_scoped):
            orm_execute_state.statement = orm_execute_state.statement.options(
                with_loader_criteria(
                    entity_type,
                    self.approved_criteria(entity_type),
                    propagate_to_loaders=False,
                )
            )
