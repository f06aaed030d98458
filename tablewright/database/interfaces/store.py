"""Relational store interface used by the migration engine and persistence facade."""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from types import TracebackType
from typing import TYPE_CHECKING, Any

from tablewright.database.schema import TableSchema
from tablewright.log import get_logger
from tablewright.types import RowType

if TYPE_CHECKING:
    from tablewright.database.operations import SchemaOperation

logger = get_logger(__name__)


class RecordStore(ABC):
    """Abstract relational store.

    Implementations execute table-level reads and writes plus schema changes.
    Row values passed in and returned are plain storage values; conversion to
    typed Python values is the record mapper's job.
    """

    def __init__(self, migrations_table: str = "schema_migrations") -> None:
        """Initialize the store.

        Args:
            migrations_table: Name of the table holding applied versions
        """
        self.migrations_table = migrations_table
        self._transaction_depth = 0

    @abstractmethod
    async def connect(self) -> None:
        """Establish the store connection."""
        pass

    @abstractmethod
    async def disconnect(self) -> None:
        """Close the store connection."""
        pass

    @property
    @abstractmethod
    def is_connected(self) -> bool:
        """Check if the connection is active."""
        pass

    # Schema alteration

    @abstractmethod
    async def create_table(self, schema: TableSchema) -> None:
        """Create a table; fails if it already exists."""
        pass

    @abstractmethod
    async def drop_table(self, table: str) -> None:
        """Drop a table; fails if it does not exist."""
        pass

    @abstractmethod
    async def alter_table(self, table: str, operation: "SchemaOperation") -> None:
        """Apply a column, rename or index change to a table.

        Args:
            table: Table name
            operation: Schema operation to perform
        """
        pass

    # Rows

    @abstractmethod
    async def insert_row(self, table: str, row: RowType) -> int:
        """Insert a row.

        Args:
            table: Table name
            row: Column values (without the primary key)

        Returns:
            Primary key assigned by the store
        """
        pass

    @abstractmethod
    async def update_row(self, table: str, primary_key: int, row: RowType) -> None:
        """Update columns of the row with the given primary key."""
        pass

    @abstractmethod
    async def delete_row(self, table: str, primary_key: int) -> bool:
        """Delete a row.

        Returns:
            True if a row was deleted, False if none matched
        """
        pass

    @abstractmethod
    async def select_rows(
        self,
        table: str,
        where: dict[str, Any] | None = None,
        order_by: list[str] | None = None,
        limit: int | None = None,
    ) -> list[RowType]:
        """Select rows.

        Args:
            table: Table name
            where: Conjunctive equality conditions; list or tuple values
                match any of their members
            order_by: ORDER BY fields, e.g. ["id", "title DESC"]
            limit: Maximum number of rows

        Returns:
            Rows as dictionaries
        """
        pass

    @abstractmethod
    async def count_rows(self, table: str, where: dict[str, Any] | None = None) -> int:
        """Count rows matching the conditions."""
        pass

    # Migration ledger

    @abstractmethod
    async def ensure_ledger(self) -> None:
        """Create the migration ledger table if it doesn't exist."""
        pass

    @abstractmethod
    async def applied_versions(self) -> list[str]:
        """Get applied migration versions in the order they were recorded."""
        pass

    @abstractmethod
    async def append_version(self, version: str) -> None:
        """Record a version as applied."""
        pass

    @abstractmethod
    async def remove_version(self, version: str) -> None:
        """Forget an applied version (used by rollback)."""
        pass

    # Transactions

    @abstractmethod
    async def begin(self) -> None:
        """Begin a transaction."""
        pass

    @abstractmethod
    async def commit(self) -> None:
        """Commit the current transaction."""
        pass

    @abstractmethod
    async def rollback(self) -> None:
        """Roll back the current transaction."""
        pass

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator["RecordStore"]:
        """Run a block inside one transaction.

        Nested scopes join the outermost one; only the outermost scope commits
        or rolls back.
        """
        depth = self._transaction_depth
        self._transaction_depth = depth + 1
        try:
            if depth == 0:
                await self.begin()
            try:
                yield self
            except BaseException:
                if depth == 0:
                    logger.debug("Rolling back transaction")
                    await self.rollback()
                raise
            else:
                if depth == 0:
                    await self.commit()
        finally:
            self._transaction_depth = depth

    async def __aenter__(self) -> "RecordStore":
        """Async context manager entry."""
        await self.connect()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Async context manager exit."""
        await self.disconnect()
