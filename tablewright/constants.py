"""Schema and storage constants."""

from typing import Final

from .types import ColumnType

PRIMARY_KEY: Final[str] = "id"

DEFAULT_MIGRATIONS_TABLE: Final[str] = "schema_migrations"

CREATED_AT: Final[str] = "created_at"
UPDATED_AT: Final[str] = "updated_at"

# Declared column type -> SQLite storage type
SQLITE_COLUMN_TYPES: Final[dict[ColumnType, str]] = {
    ColumnType.STRING: "VARCHAR(255)",
    ColumnType.TEXT: "TEXT",
    ColumnType.INTEGER: "INTEGER",
    ColumnType.FLOAT: "REAL",
    ColumnType.BOOLEAN: "BOOLEAN",
    ColumnType.DATE: "DATE",
    ColumnType.DATETIME: "TIMESTAMP",
}

# Spellings accepted when parsing "title:string body:text" column specs
COLUMN_TYPE_ALIASES: Final[dict[str, ColumnType]] = {
    "string": ColumnType.STRING,
    "str": ColumnType.STRING,
    "text": ColumnType.TEXT,
    "integer": ColumnType.INTEGER,
    "int": ColumnType.INTEGER,
    "references": ColumnType.INTEGER,
    "float": ColumnType.FLOAT,
    "decimal": ColumnType.FLOAT,
    "boolean": ColumnType.BOOLEAN,
    "bool": ColumnType.BOOLEAN,
    "date": ColumnType.DATE,
    "datetime": ColumnType.DATETIME,
    "timestamp": ColumnType.DATETIME,
}
