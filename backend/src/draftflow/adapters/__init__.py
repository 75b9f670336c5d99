"""Persistence adapters for the drafting core."""

from .sqlalchemy_schema import SqlAlchemySchema

__all__ = ["SqlAlchemySchema"]
