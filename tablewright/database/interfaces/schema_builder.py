"""Abstract schema builder interface for different SQL backends."""

from abc import ABC, abstractmethod

from tablewright.database.operations import (
    AddColumn,
    AddIndex,
    RemoveColumn,
    RemoveIndex,
    RenameColumn,
    RenameTable,
    SchemaOperation,
)
from tablewright.database.schema import ColumnDefinition, TableSchema


class SchemaBuilder(ABC):
    """Abstract schema builder for different SQL backends."""

    @abstractmethod
    def create_table_sql(self, table: TableSchema) -> str:
        """Generate CREATE TABLE SQL.

        Args:
            table: Table schema

        Returns:
            CREATE TABLE SQL statement
        """
        pass

    @abstractmethod
    def drop_table_sql(self, table_name: str) -> str:
        """Generate DROP TABLE SQL."""
        pass

    @abstractmethod
    def add_column_sql(self, table_name: str, column: ColumnDefinition) -> str:
        """Generate ALTER TABLE ADD COLUMN SQL."""
        pass

    @abstractmethod
    def drop_column_sql(self, table_name: str, column_name: str) -> str:
        """Generate ALTER TABLE DROP COLUMN SQL."""
        pass

    @abstractmethod
    def rename_column_sql(self, table_name: str, old: str, new: str) -> str:
        """Generate ALTER TABLE RENAME COLUMN SQL."""
        pass

    @abstractmethod
    def rename_table_sql(self, old: str, new: str) -> str:
        """Generate ALTER TABLE RENAME TO SQL."""
        pass

    @abstractmethod
    def create_index_sql(
        self, table_name: str, index_name: str, columns: list[str], unique: bool = False
    ) -> str:
        """Generate CREATE INDEX SQL.

        Args:
            table_name: Name of the table
            index_name: Name of the index
            columns: List of column names to index
            unique: Whether the index enforces uniqueness

        Returns:
            CREATE INDEX SQL statement
        """
        pass

    @abstractmethod
    def drop_index_sql(self, index_name: str) -> str:
        """Generate DROP INDEX SQL."""
        pass

    def alter_table_sql(self, operation: SchemaOperation) -> str:
        """Generate SQL for a column, rename or index operation.

        Raises:
            ValueError: If the operation has no ALTER TABLE form
        """
        if isinstance(operation, AddColumn):
            return self.add_column_sql(operation.table_name, operation.column)
        if isinstance(operation, RemoveColumn):
            return self.drop_column_sql(operation.table_name, operation.name)
        if isinstance(operation, RenameColumn):
            return self.rename_column_sql(operation.table_name, operation.old, operation.new)
        if isinstance(operation, RenameTable):
            return self.rename_table_sql(operation.old, operation.new)
        if isinstance(operation, AddIndex):
            return self.create_index_sql(
                operation.table_name,
                operation.index_name,
                list(operation.columns),
                operation.unique,
            )
        if isinstance(operation, RemoveIndex):
            return self.drop_index_sql(operation.name)
        raise ValueError(f"Unsupported schema operation: {operation.describe()}")
