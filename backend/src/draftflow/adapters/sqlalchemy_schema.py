"""SQLAlchemy adapter for SchemaPort.

Reads the mapper for column and relationship information and, when bound to
an engine, checks the live database for the table.
"""

import logging
from typing import Optional, Set, Tuple

from sqlalchemy import inspect as sa_inspect
from sqlalchemy.engine import Engine

from ..associations import AssociationSpec, default_draft_associations, reflect_association
from ..ports import SchemaPort

logger = logging.getLogger(__name__)


class SqlAlchemySchema(SchemaPort):
    """SchemaPort implementation over SQLAlchemy mappers.

    Args:
        bind: Engine used for ``table_exists``. Without a bind every mapped
            class is assumed to have its table.
    """

    def __init__(self, bind: Optional[Engine] = None):
        self._bind = bind

    def table_exists(self, entity_type: type) -> bool:
        table = getattr(entity_type, "__table__", None)
        if table is None:
            return False
        if self._bind is None:
            return True

        exists = sa_inspect(self._bind).has_table(table.name, schema=table.schema)
        if not exists:
            logger.debug(f"Table {table.name} not found for {entity_type.__name__}")
        return exists

    def columns(self, entity_type: type) -> Set[str]:
        return {attr.key for attr in sa_inspect(entity_type).column_attrs}

    def primary_key(self, entity_type: type) -> Tuple[str, ...]:
        mapper = sa_inspect(entity_type)
        return tuple(mapper.get_property_by_column(column).key for column in mapper.primary_key)

    def reflect_association(self, entity_type: type, name: str) -> Optional[AssociationSpec]:
        return reflect_association(entity_type, name)

    def default_associations(self, entity_type: type) -> Tuple[str, ...]:
        return default_draft_associations(entity_type)
