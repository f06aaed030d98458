"""Schema catalog: table and column definitions built by applied migrations."""

from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field, replace
from typing import Any

from tablewright.constants import COLUMN_TYPE_ALIASES, PRIMARY_KEY
from tablewright.exceptions import SchemaError, UnknownTable
from tablewright.types import ColumnType


@dataclass(frozen=True)
class ColumnDefinition:
    """Database column definition."""

    name: str
    type: ColumnType
    nullable: bool = True
    default: Any = None
    unique: bool = False
    primary_key: bool = False

    def __post_init__(self) -> None:
        # Accept plain strings such as "string" for the declared type
        if not isinstance(self.type, ColumnType):
            object.__setattr__(self, "type", ColumnType(self.type))

    @property
    def required(self) -> bool:
        """Check if a value must be supplied before the row can be written."""
        return not self.nullable and self.default is None and not self.primary_key


PRIMARY_KEY_COLUMN = ColumnDefinition(
    PRIMARY_KEY, ColumnType.INTEGER, nullable=False, primary_key=True
)


@dataclass(frozen=True)
class TableSchema:
    """Database table definition.

    The primary key column is always first. Schemas are never edited in
    place; every change produces a new instance.
    """

    name: str
    columns: tuple[ColumnDefinition, ...]
    indexes: tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def build(
        cls,
        name: str,
        columns: Sequence[ColumnDefinition],
        indexes: Sequence[str] = (),
    ) -> "TableSchema":
        """Create a schema, prepending the primary key column."""
        names = [column.name for column in columns]
        if PRIMARY_KEY in names:
            raise SchemaError(f"Column {PRIMARY_KEY!r} is reserved in table {name}")
        duplicates = {n for n in names if names.count(n) > 1}
        if duplicates:
            raise SchemaError(
                f"Duplicate columns in table {name}: {', '.join(sorted(duplicates))}"
            )
        return cls(name, (PRIMARY_KEY_COLUMN, *columns), tuple(indexes))

    @property
    def primary_key(self) -> str:
        return PRIMARY_KEY

    @property
    def column_names(self) -> list[str]:
        return [column.name for column in self.columns]

    @property
    def data_columns(self) -> list[ColumnDefinition]:
        """Columns other than the primary key, in declaration order."""
        return [column for column in self.columns if not column.primary_key]

    def has_column(self, name: str) -> bool:
        return any(column.name == name for column in self.columns)

    def column(self, name: str) -> ColumnDefinition:
        for column in self.columns:
            if column.name == name:
                return column
        raise SchemaError(f"Table {self.name} has no column {name!r}")

    def with_column(self, column: ColumnDefinition) -> "TableSchema":
        if self.has_column(column.name):
            raise SchemaError(
                f"Column {column.name!r} already exists in table {self.name}"
            )
        return replace(self, columns=(*self.columns, column))

    def without_column(self, name: str) -> "TableSchema":
        if name == PRIMARY_KEY:
            raise SchemaError(f"Cannot remove the primary key of table {self.name}")
        self.column(name)
        return replace(
            self, columns=tuple(c for c in self.columns if c.name != name)
        )

    def with_renamed_column(self, old: str, new: str) -> "TableSchema":
        if old == PRIMARY_KEY:
            raise SchemaError(f"Cannot rename the primary key of table {self.name}")
        self.column(old)
        if self.has_column(new):
            raise SchemaError(f"Column {new!r} already exists in table {self.name}")
        return replace(
            self,
            columns=tuple(
                replace(c, name=new) if c.name == old else c for c in self.columns
            ),
        )

    def renamed(self, new_name: str) -> "TableSchema":
        return replace(self, name=new_name)

    def with_index(self, index_name: str) -> "TableSchema":
        if index_name in self.indexes:
            raise SchemaError(f"Index {index_name!r} already exists on {self.name}")
        return replace(self, indexes=(*self.indexes, index_name))

    def without_index(self, index_name: str) -> "TableSchema":
        if index_name not in self.indexes:
            raise SchemaError(f"Index {index_name!r} does not exist on {self.name}")
        return replace(
            self, indexes=tuple(i for i in self.indexes if i != index_name)
        )


class SchemaCatalog:
    """Current table definitions plus the ledger of applied migration versions.

    Only the migration engine changes a catalog. It works on a copy and swaps
    the copy in once a batch succeeds, so readers never see half a batch.
    """

    def __init__(self) -> None:
        self._tables: dict[str, TableSchema] = {}
        self._ledger: list[str] = []

    def __contains__(self, table_name: object) -> bool:
        return table_name in self._tables

    def __iter__(self) -> Iterator[TableSchema]:
        return iter(self._tables.values())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SchemaCatalog):
            return NotImplemented
        return self._tables == other._tables and self._ledger == other._ledger

    def __repr__(self) -> str:
        return f"SchemaCatalog(tables={sorted(self._tables)}, ledger={self._ledger})"

    @property
    def table_names(self) -> list[str]:
        return list(self._tables)

    @property
    def ledger(self) -> list[str]:
        """Applied migration versions, oldest first."""
        return list(self._ledger)

    @property
    def current_version(self) -> str | None:
        return self._ledger[-1] if self._ledger else None

    def get(self, table_name: str) -> TableSchema | None:
        return self._tables.get(table_name)

    def require(self, table_name: str) -> TableSchema:
        """Get a table schema or raise UnknownTable."""
        schema = self._tables.get(table_name)
        if schema is None:
            raise UnknownTable(table_name)
        return schema

    def add_table(self, schema: TableSchema) -> None:
        if schema.name in self._tables:
            raise SchemaError(f"Table {schema.name} already exists")
        self._tables[schema.name] = schema

    def replace_table(self, schema: TableSchema) -> None:
        self.require(schema.name)
        self._tables[schema.name] = schema

    def remove_table(self, table_name: str) -> TableSchema:
        schema = self.require(table_name)
        del self._tables[table_name]
        return schema

    def rename_table(self, old: str, new: str) -> None:
        if new in self._tables:
            raise SchemaError(f"Table {new} already exists")
        schema = self.remove_table(old)
        self._tables[new] = schema.renamed(new)

    def record_applied(self, version: str) -> None:
        """Append a version to the ledger; versions must strictly increase."""
        if self._ledger and version_key(version) <= version_key(self._ledger[-1]):
            raise SchemaError(
                f"Ledger version {version} is not after {self._ledger[-1]}", version
            )
        self._ledger.append(version)

    def record_reverted(self, version: str) -> None:
        """Remove the newest ledger entry, which must be ``version``."""
        if not self._ledger or self._ledger[-1] != version:
            raise SchemaError(f"Version {version} is not the newest ledger entry", version)
        self._ledger.pop()

    def adopt(self, other: "SchemaCatalog") -> None:
        """Take over the tables and ledger of another catalog in place."""
        self._tables = dict(other._tables)
        self._ledger = list(other._ledger)

    def copy(self) -> "SchemaCatalog":
        clone = SchemaCatalog()
        clone._tables = dict(self._tables)
        clone._ledger = list(self._ledger)
        return clone


def version_key(version: str) -> int:
    """Sort key for migration versions (numeric, so widths may differ)."""
    return int(version)


def columns_from_spec(spec: str) -> list[ColumnDefinition]:
    """Parse a declarative column description into column definitions.

    Each whitespace-separated entry is ``name:type``; a trailing ``!`` marks
    the column as non-nullable and the type defaults to string.

    Example:
        >>> columns_from_spec("title:string! body:text")
        [ColumnDefinition(name="title", type=ColumnType.STRING, nullable=False),
         ColumnDefinition(name="body", type=ColumnType.TEXT)]
    """
    columns: list[ColumnDefinition] = []
    for entry in spec.split():
        name, _, type_name = entry.partition(":")
        nullable = True
        if type_name.endswith("!"):
            type_name = type_name[:-1]
            nullable = False
        type_name = type_name or "string"
        if not name or type_name.lower() not in COLUMN_TYPE_ALIASES:
            raise SchemaError(f"Invalid column spec: {entry!r}")
        column_type = COLUMN_TYPE_ALIASES[type_name.lower()]
        if type_name.lower() == "references":
            name = f"{name}_id"
        columns.append(ColumnDefinition(name, column_type, nullable=nullable))
    return columns
