"""Draft/approval versioning for graphs of SQLAlchemy-mapped entities.

Register a root type once at startup, then build linked drafts of live rows:

    registry = DraftRegistry(schema=SqlAlchemySchema(bind=engine))
    registry.register(Business)

    orchestrator = DraftOrchestrator(registry)
    draft = orchestrator.create_draft(business)
    session.add(draft)
    session.commit()

    session.scalars(registry.scopes.draft(Business)).all()
"""

from .adapters import SqlAlchemySchema
from .associations import (
    AssociationKind,
    AssociationSpec,
    default_draft_associations,
    is_relevant,
    reflect_association,
    resolve_association,
)
from .cloner import shallow_clone
from .errors import ConfigurationError, DraftError, DraftLookupError
from .interrogators import APPROVED_VERSION_COLUMN, has_draft, is_approved, is_draft, live_version
from .mixins import DraftableMixin
from .orchestrator import DraftOrchestrator
from .ports import SchemaPort
from .registry import DraftConfiguration, DraftRegistry, RegistrationSource
from .scopes import INCLUDE_DRAFTS, ScopeProvider

__all__ = [
    "APPROVED_VERSION_COLUMN",
    "INCLUDE_DRAFTS",
    "AssociationKind",
    "AssociationSpec",
    "ConfigurationError",
    "DraftConfiguration",
    "DraftError",
    "DraftLookupError",
    "DraftOrchestrator",
    "DraftRegistry",
    "DraftableMixin",
    "RegistrationSource",
    "SchemaPort",
    "ScopeProvider",
    "SqlAlchemySchema",
    "default_draft_associations",
    "has_draft",
    "is_approved",
    "is_draft",
    "is_relevant",
    "live_version",
    "reflect_association",
    "resolve_association",
    "shallow_clone",
]
