"""Shallow clone of a single mapped entity."""

import copy
from typing import Iterable, TypeVar

from sqlalchemy.orm import object_mapper

T = TypeVar("T")


def shallow_clone(entity: T, exclude: Iterable[str] = ()) -> T:
    """Copy the column attributes of ``entity`` into a new transient instance.

    Relationships are not copied. Attributes named in ``exclude`` are left
    unset, so they read as None and column defaults fire on insert.
    Mutable values (JSON dicts and lists) are deep-copied so the clone never
    shares state with its source.

    Args:
        entity: Mapped instance to copy (not modified)
        exclude: Column attribute names to leave unset

    Returns:
        New instance of ``type(entity)``, not attached to any session
    """
    mapper = object_mapper(entity)
    excluded = set(exclude)

    clone = mapper.class_manager.new_instance()
    for attr in mapper.column_attrs:
        if attr.key in excluded:
            continue
        value = getattr(entity, attr.key)
        if isinstance(value, (dict, list)):
            value = copy.deepcopy(value)
        setattr(clone, attr.key, value)

    return clone
