"""Schema catalog, migrations and store access."""

from .config import DatabaseConfig, create_store
from .implementations import SQLiteStore
from .interfaces import RecordStore
from .migration import MigrationEngine, MigrationStatus, MigrationUnit, next_version
from .operations import (
    AddColumn,
    AddIndex,
    CreateTable,
    DropTable,
    RemoveColumn,
    RemoveIndex,
    RenameColumn,
    RenameTable,
    SchemaOperation,
)
from .schema import ColumnDefinition, SchemaCatalog, TableSchema, columns_from_spec

__all__ = [
    "AddColumn",
    "AddIndex",
    "ColumnDefinition",
    "CreateTable",
    "DatabaseConfig",
    "DropTable",
    "MigrationEngine",
    "MigrationStatus",
    "MigrationUnit",
    "RecordStore",
    "RemoveColumn",
    "RemoveIndex",
    "RenameColumn",
    "RenameTable",
    "SQLiteStore",
    "SchemaCatalog",
    "SchemaOperation",
    "TableSchema",
    "columns_from_spec",
    "create_store",
    "next_version",
]
