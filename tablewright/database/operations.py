"""Schema-changing operations carried by migration units."""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from tablewright.constants import CREATED_AT, UPDATED_AT
from tablewright.database.schema import ColumnDefinition, SchemaCatalog, TableSchema
from tablewright.exceptions import SchemaError
from tablewright.types import ColumnType

if TYPE_CHECKING:
    from tablewright.database.interfaces.store import RecordStore


class SchemaOperation(ABC):
    """A single schema change that can be applied to a catalog and a store."""

    @property
    @abstractmethod
    def table(self) -> str:
        """Name of the table the operation targets."""
        pass

    @abstractmethod
    def apply_to(self, catalog: SchemaCatalog) -> None:
        """Apply the change to an in-memory catalog.

        Raises:
            SchemaError: If the change is inconsistent with the catalog
        """
        pass

    async def run(self, store: "RecordStore") -> None:
        """Apply the change to the store."""
        await store.alter_table(self.table, self)

    def invert(self) -> "SchemaOperation | None":
        """Return the operation undoing this one, or None if it can't be derived."""
        return None

    def describe(self) -> str:
        return repr(self)


@dataclass(frozen=True)
class CreateTable(SchemaOperation):
    """Create a table; the ``id`` primary key is added automatically."""

    name: str
    columns: Sequence[ColumnDefinition] = ()
    timestamps: bool = False

    @property
    def table(self) -> str:
        return self.name

    def schema(self) -> TableSchema:
        columns = list(self.columns)
        if self.timestamps:
            columns += [
                ColumnDefinition(CREATED_AT, ColumnType.DATETIME),
                ColumnDefinition(UPDATED_AT, ColumnType.DATETIME),
            ]
        return TableSchema.build(self.name, columns)

    def apply_to(self, catalog: SchemaCatalog) -> None:
        catalog.add_table(self.schema())

    async def run(self, store: "RecordStore") -> None:
        await store.create_table(self.schema())

    def invert(self) -> SchemaOperation:
        return DropTable(self.name, tuple(self.schema().data_columns))

    def describe(self) -> str:
        return f"create_table {self.name}"


@dataclass(frozen=True)
class DropTable(SchemaOperation):
    """Drop a table. Reversible only when the dropped columns are given."""

    name: str
    columns: Sequence[ColumnDefinition] | None = None

    @property
    def table(self) -> str:
        return self.name

    def apply_to(self, catalog: SchemaCatalog) -> None:
        catalog.remove_table(self.name)

    async def run(self, store: "RecordStore") -> None:
        await store.drop_table(self.name)

    def invert(self) -> SchemaOperation | None:
        if self.columns is None:
            return None
        return CreateTable(self.name, tuple(self.columns))

    def describe(self) -> str:
        return f"drop_table {self.name}"


@dataclass(frozen=True)
class AddColumn(SchemaOperation):
    """Add a column to an existing table."""

    table_name: str
    column: ColumnDefinition

    @property
    def table(self) -> str:
        return self.table_name

    def apply_to(self, catalog: SchemaCatalog) -> None:
        catalog.replace_table(catalog.require(self.table_name).with_column(self.column))

    def invert(self) -> SchemaOperation:
        return RemoveColumn(self.table_name, self.column.name, self.column)

    def describe(self) -> str:
        return f"add_column {self.table_name}.{self.column.name}"


@dataclass(frozen=True)
class RemoveColumn(SchemaOperation):
    """Remove a column. Reversible only when the removed definition is given."""

    table_name: str
    name: str
    column: ColumnDefinition | None = None

    @property
    def table(self) -> str:
        return self.table_name

    def apply_to(self, catalog: SchemaCatalog) -> None:
        catalog.replace_table(catalog.require(self.table_name).without_column(self.name))

    def invert(self) -> SchemaOperation | None:
        if self.column is None:
            return None
        return AddColumn(self.table_name, self.column)

    def describe(self) -> str:
        return f"remove_column {self.table_name}.{self.name}"


@dataclass(frozen=True)
class RenameColumn(SchemaOperation):
    """Rename a column."""

    table_name: str
    old: str
    new: str

    @property
    def table(self) -> str:
        return self.table_name

    def apply_to(self, catalog: SchemaCatalog) -> None:
        schema = catalog.require(self.table_name)
        catalog.replace_table(schema.with_renamed_column(self.old, self.new))

    def invert(self) -> SchemaOperation:
        return RenameColumn(self.table_name, self.new, self.old)

    def describe(self) -> str:
        return f"rename_column {self.table_name}.{self.old} -> {self.new}"


@dataclass(frozen=True)
class RenameTable(SchemaOperation):
    """Rename a table."""

    old: str
    new: str

    @property
    def table(self) -> str:
        return self.old

    def apply_to(self, catalog: SchemaCatalog) -> None:
        catalog.rename_table(self.old, self.new)

    def invert(self) -> SchemaOperation:
        return RenameTable(self.new, self.old)

    def describe(self) -> str:
        return f"rename_table {self.old} -> {self.new}"


def index_name_for(table: str, columns: Sequence[str]) -> str:
    return f"index_{table}_on_{'_and_'.join(columns)}"


@dataclass(frozen=True)
class AddIndex(SchemaOperation):
    """Create an index over one or more columns."""

    table_name: str
    columns: Sequence[str]
    name: str = ""
    unique: bool = False

    @property
    def table(self) -> str:
        return self.table_name

    @property
    def index_name(self) -> str:
        return self.name or index_name_for(self.table_name, self.columns)

    def apply_to(self, catalog: SchemaCatalog) -> None:
        schema = catalog.require(self.table_name)
        for column in self.columns:
            if not schema.has_column(column):
                raise SchemaError(f"Table {self.table_name} has no column {column!r}")
        catalog.replace_table(schema.with_index(self.index_name))

    def invert(self) -> SchemaOperation:
        return RemoveIndex(self.table_name, self.index_name, tuple(self.columns), self.unique)

    def describe(self) -> str:
        return f"add_index {self.index_name}"


@dataclass(frozen=True)
class RemoveIndex(SchemaOperation):
    """Drop an index. Reversible only when the indexed columns are given."""

    table_name: str
    name: str
    columns: Sequence[str] = field(default_factory=tuple)
    unique: bool = False

    @property
    def table(self) -> str:
        return self.table_name

    def apply_to(self, catalog: SchemaCatalog) -> None:
        catalog.replace_table(catalog.require(self.table_name).without_index(self.name))

    def invert(self) -> SchemaOperation | None:
        if not self.columns:
            return None
        return AddIndex(self.table_name, tuple(self.columns), self.name, self.unique)

    def describe(self) -> str:
        return f"remove_index {self.name}"
