"""SQLite-specific schema builder implementation."""

from datetime import date, datetime
from typing import Any

from tablewright.constants import SQLITE_COLUMN_TYPES
from tablewright.database.interfaces.schema_builder import SchemaBuilder
from tablewright.database.schema import ColumnDefinition, TableSchema


def _literal(value: Any) -> str:
    """Render a column default as an SQLite literal."""
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, (datetime, date)):
        value = value.isoformat()
    escaped = str(value).replace("'", "''")
    return f"'{escaped}'"


class SQLiteSchemaBuilder(SchemaBuilder):
    """SQLite-specific schema builder."""

    def column_sql(self, column: ColumnDefinition) -> str:
        """Render a single column definition."""
        col_def = f"{column.name} {SQLITE_COLUMN_TYPES[column.type]}"

        if column.primary_key:
            return f"{col_def} PRIMARY KEY AUTOINCREMENT"

        if not column.nullable:
            col_def += " NOT NULL"

        if column.unique:
            col_def += " UNIQUE"

        if column.default is not None:
            col_def += f" DEFAULT {_literal(column.default)}"

        return col_def

    def create_table_sql(self, table: TableSchema) -> str:
        """Generate CREATE TABLE SQL for SQLite.

        The statement deliberately has no IF NOT EXISTS clause so that
        creating an existing table is rejected by the store.
        """
        columns_sql = ", ".join(self.column_sql(col) for col in table.columns)
        return f"CREATE TABLE {table.name} ({columns_sql})"

    def drop_table_sql(self, table_name: str) -> str:
        return f"DROP TABLE {table_name}"

    def add_column_sql(self, table_name: str, column: ColumnDefinition) -> str:
        return f"ALTER TABLE {table_name} ADD COLUMN {self.column_sql(column)}"

    def drop_column_sql(self, table_name: str, column_name: str) -> str:
        return f"ALTER TABLE {table_name} DROP COLUMN {column_name}"

    def rename_column_sql(self, table_name: str, old: str, new: str) -> str:
        return f"ALTER TABLE {table_name} RENAME COLUMN {old} TO {new}"

    def rename_table_sql(self, old: str, new: str) -> str:
        return f"ALTER TABLE {old} RENAME TO {new}"

    def create_index_sql(
        self, table_name: str, index_name: str, columns: list[str], unique: bool = False
    ) -> str:
        """Generate CREATE INDEX SQL for SQLite.

        Args:
            table_name: Name of the table
            index_name: Name of the index
            columns: List of column names to index
            unique: Whether the index enforces uniqueness

        Returns:
            CREATE INDEX SQL statement
        """
        columns_sql = ", ".join(columns)
        kind = "UNIQUE INDEX" if unique else "INDEX"
        return f"CREATE {kind} {index_name} ON {table_name} ({columns_sql})"

    def drop_index_sql(self, index_name: str) -> str:
        return f"DROP INDEX {index_name}"

    def ledger_table_sql(self, table_name: str) -> str:
        """Generate the CREATE TABLE statement for the migration ledger."""
        return f"""
        CREATE TABLE IF NOT EXISTS {table_name} (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            version TEXT NOT NULL UNIQUE,
            applied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
        """
