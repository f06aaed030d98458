"""SQLite database implementation package."""

from .query_builder import SQLiteQueryBuilder
from .schema_builder import SQLiteSchemaBuilder
from .sqlite_store import SQLiteStore

__all__ = [
    "SQLiteQueryBuilder",
    "SQLiteSchemaBuilder",
    "SQLiteStore",
]
