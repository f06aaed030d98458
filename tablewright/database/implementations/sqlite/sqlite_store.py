"""SQLite record store implementation."""

import sqlite3
from pathlib import Path
from typing import TYPE_CHECKING, Any

from tablewright.constants import DEFAULT_MIGRATIONS_TABLE, PRIMARY_KEY
from tablewright.database.interfaces.store import RecordStore
from tablewright.database.schema import TableSchema
from tablewright.exceptions import StoreOperationError, StoreUnavailable
from tablewright.log import get_logger
from tablewright.types import DatabaseParamType, RowType

from .query_builder import SQLiteQueryBuilder
from .schema_builder import SQLiteSchemaBuilder

if TYPE_CHECKING:
    from tablewright.database.operations import SchemaOperation

logger = get_logger(__name__)

MEMORY_DATABASE = ":memory:"

# Fragments of sqlite3.OperationalError messages caused by resource problems
# rather than by the statement itself
_UNAVAILABLE_MARKERS = ("locked", "busy", "unable to open", "disk i/o")


class SQLiteStore(RecordStore):
    """Record store backed by a single SQLite connection."""

    def __init__(
        self,
        db_path: str | Path,
        migrations_table: str = DEFAULT_MIGRATIONS_TABLE,
        timeout: float = 60.0,
        foreign_keys: bool = True,
    ) -> None:
        """Initialize SQLite store.

        Args:
            db_path: Path to SQLite database file, or ":memory:"
            migrations_table: Name of the migration ledger table
            timeout: Seconds to wait on a locked database
            foreign_keys: Whether to enforce foreign key constraints
        """
        super().__init__(migrations_table)
        self.db_path = db_path if db_path == MEMORY_DATABASE else Path(db_path)
        self.timeout = timeout
        self.foreign_keys = foreign_keys
        self._connection: sqlite3.Connection | None = None
        self._schema_builder = SQLiteSchemaBuilder()
        self._query_builder = SQLiteQueryBuilder()

    async def connect(self) -> None:
        """Establish SQLite database connection."""
        try:
            if isinstance(self.db_path, Path):
                self.db_path.parent.mkdir(parents=True, exist_ok=True)
            # Autocommit mode; transactions are opened explicitly by begin()
            self._connection = sqlite3.connect(
                self.db_path,
                check_same_thread=False,
                timeout=self.timeout,
                isolation_level=None,
            )
            self._connection.row_factory = sqlite3.Row
            self._configure_connection()
            logger.info(f"Connected to SQLite: {self.db_path}")
        except sqlite3.Error as e:
            logger.error(f"Failed to connect to SQLite database: {e}")
            raise StoreUnavailable(f"Cannot open {self.db_path}: {e}") from e

    async def disconnect(self) -> None:
        """Close SQLite database connection."""
        if self._connection:
            self._connection.close()
            self._connection = None
            logger.info("Disconnected from SQLite")

    @property
    def is_connected(self) -> bool:
        return self._connection is not None

    def _configure_connection(self) -> None:
        if not self._connection:
            return

        self._connection.execute("PRAGMA journal_mode = DELETE")
        self._connection.execute("PRAGMA synchronous = NORMAL")
        self._connection.execute(
            f"PRAGMA foreign_keys = {'ON' if self.foreign_keys else 'OFF'}"
        )
        self._connection.execute(f"PRAGMA busy_timeout = {int(self.timeout * 1000)}")

    def _execute(self, query: str, params: DatabaseParamType = None) -> sqlite3.Cursor:
        """Execute a statement, translating sqlite3 errors into store errors."""
        if not self._connection:
            raise StoreUnavailable("Database not connected")

        logger.debug(f"SQL: {query.strip()} {params or ''}")
        try:
            cursor = self._connection.cursor()
            if params:
                cursor.execute(query, params)
            else:
                cursor.execute(query)
            return cursor
        except sqlite3.OperationalError as e:
            message = str(e).lower()
            if any(marker in message for marker in _UNAVAILABLE_MARKERS):
                logger.error(f"SQLite unavailable: {e}")
                raise StoreUnavailable(str(e)) from e
            logger.error(f"Query execution failed: {e}")
            raise StoreOperationError(str(e)) from e
        except sqlite3.Error as e:
            logger.error(f"Query execution failed: {e}")
            raise StoreOperationError(str(e)) from e

    # Schema alteration

    async def create_table(self, schema: TableSchema) -> None:
        self._execute(self._schema_builder.create_table_sql(schema))
        logger.debug(f"Created table {schema.name}")

    async def drop_table(self, table: str) -> None:
        self._execute(self._schema_builder.drop_table_sql(table))
        logger.debug(f"Dropped table {table}")

    async def alter_table(self, table: str, operation: "SchemaOperation") -> None:
        try:
            statement = self._schema_builder.alter_table_sql(operation)
        except ValueError as e:
            raise StoreOperationError(str(e)) from e
        self._execute(statement)

    # Rows

    async def insert_row(self, table: str, row: RowType) -> int:
        query, params = self._query_builder.insert(table, row)
        cursor = self._execute(query, params)
        if cursor.lastrowid is None:
            raise StoreOperationError(f"No primary key returned for insert into {table}")
        return cursor.lastrowid

    async def update_row(self, table: str, primary_key: int, row: RowType) -> None:
        if not row:
            return
        query, params = self._query_builder.update(table, row, {PRIMARY_KEY: primary_key})
        self._execute(query, params)

    async def delete_row(self, table: str, primary_key: int) -> bool:
        query, params = self._query_builder.delete(table, {PRIMARY_KEY: primary_key})
        cursor = self._execute(query, params)
        return cursor.rowcount > 0

    async def select_rows(
        self,
        table: str,
        where: dict[str, Any] | None = None,
        order_by: list[str] | None = None,
        limit: int | None = None,
    ) -> list[RowType]:
        query, params = self._query_builder.select(
            table, where=where, order_by=order_by, limit=limit
        )
        rows = self._execute(query, params).fetchall()
        return [dict(row) for row in rows]

    async def count_rows(self, table: str, where: dict[str, Any] | None = None) -> int:
        query, params = self._query_builder.count(table, where)
        row = self._execute(query, params).fetchone()
        return int(row[0]) if row else 0

    # Migration ledger

    async def ensure_ledger(self) -> None:
        self._execute(self._schema_builder.ledger_table_sql(self.migrations_table))

    async def applied_versions(self) -> list[str]:
        rows = self._execute(
            f"SELECT version FROM {self.migrations_table} ORDER BY id"
        ).fetchall()
        return [row["version"] for row in rows]

    async def append_version(self, version: str) -> None:
        self._execute(
            f"INSERT INTO {self.migrations_table} (version) VALUES (?)", (version,)
        )

    async def remove_version(self, version: str) -> None:
        self._execute(
            f"DELETE FROM {self.migrations_table} WHERE version = ?", (version,)
        )

    # Transactions

    async def begin(self) -> None:
        self._execute("BEGIN")

    async def commit(self) -> None:
        self._execute("COMMIT")

    async def rollback(self) -> None:
        if self._connection and self._connection.in_transaction:
            self._execute("ROLLBACK")
