"""Database interfaces module."""

from .query_builder import QueryBuilder
from .schema_builder import SchemaBuilder
from .store import RecordStore

__all__ = [
    "QueryBuilder",
    "RecordStore",
    "SchemaBuilder",
]
