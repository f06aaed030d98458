"""Conversion between record instances and store rows."""

from collections.abc import Mapping
from datetime import date, datetime
from typing import Any

from pydantic import ConfigDict, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from tablewright.constants import PRIMARY_KEY
from tablewright.database.schema import ColumnDefinition, SchemaCatalog, TableSchema
from tablewright.exceptions import (
    MissingRequiredColumn,
    PrimaryKeyAssignment,
    TypeMismatch,
    UnknownColumn,
    WriteAfterDestroy,
)
from tablewright.log import get_logger
from tablewright.models.record import Record
from tablewright.models.record_type import RecordType
from tablewright.types import ColumnType, RecordState, RowType

logger = get_logger(__name__)

_TEXT_ADAPTER: TypeAdapter[Any] = TypeAdapter(
    str, config=ConfigDict(coerce_numbers_to_str=True)
)

_ADAPTERS: dict[ColumnType, TypeAdapter[Any]] = {
    ColumnType.STRING: _TEXT_ADAPTER,
    ColumnType.TEXT: _TEXT_ADAPTER,
    ColumnType.INTEGER: TypeAdapter(int),
    ColumnType.FLOAT: TypeAdapter(float),
    ColumnType.BOOLEAN: TypeAdapter(bool),
    ColumnType.DATE: TypeAdapter(date),
    ColumnType.DATETIME: TypeAdapter(datetime),
}


def coerce_value(column: ColumnDefinition, value: Any) -> Any:
    """Coerce a value to the Python type of a column.

    Raises:
        TypeMismatch: If the value can't be converted
    """
    if value is None:
        return None
    try:
        return _ADAPTERS[column.type].validate_python(value)
    except PydanticValidationError as e:
        raise TypeMismatch(column.name, column.type.value, value) from e


def serialize_value(value: Any) -> Any:
    """Convert a coerced Python value into its storage form."""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


class RecordMapper:
    """Translate records to rows and back using the current schema catalog.

    The catalog is consulted on every call, so a column only becomes usable
    once the migration that adds it has been applied.
    """

    def __init__(self, catalog: SchemaCatalog) -> None:
        self.catalog = catalog

    def schema_for(self, record_type: RecordType) -> TableSchema:
        return self.catalog.require(record_type.table_name)

    def build(self, record_type: RecordType, attrs: Mapping[str, Any] | None = None) -> Record:
        """Construct a new record; absent columns take their defaults.

        Raises:
            UnknownColumn: If an attribute has no column
            PrimaryKeyAssignment: If ``id`` is given
            TypeMismatch: If a value can't be coerced
        """
        schema = self.schema_for(record_type)
        record = Record(
            record_type,
            {
                column.name: coerce_value(column, column.default)
                for column in schema.data_columns
            },
        )
        self.assign(record, attrs or {})
        return record

    def assign(self, record: Record, attrs: Mapping[str, Any]) -> None:
        """Coerce and write attributes; nothing is written if any value fails.

        Raises:
            WriteAfterDestroy: If the record was destroyed
        """
        if record.is_destroyed:
            raise WriteAfterDestroy(
                f"Cannot modify destroyed {record.record_type.name} id={record.id}"
            )
        schema = self.schema_for(record.record_type)

        coerced: dict[str, Any] = {}
        for name, value in attrs.items():
            if name == PRIMARY_KEY:
                raise PrimaryKeyAssignment(
                    f"The primary key of {schema.name} is assigned by the store"
                )
            if not schema.has_column(name):
                raise UnknownColumn(schema.name, name)
            coerced[name] = coerce_value(schema.column(name), value)

        for name, value in coerced.items():
            record.write_attribute(name, value)

    def to_row(self, record: Record) -> RowType:
        """Serialize every non-key column of a record, in schema order.

        Raises:
            UnknownColumn: If the record holds an attribute the schema no
                longer has
            MissingRequiredColumn: If non-nullable columns have no value
        """
        schema = self.schema_for(record.record_type)

        for name in record.attributes:
            if not schema.has_column(name):
                raise UnknownColumn(schema.name, name)

        row: RowType = {}
        missing: list[str] = []
        for column in schema.data_columns:
            # Columns added after the record was built take their default
            value = record.get(column.name) if column.name in record else column.default
            if value is None and not column.nullable:
                missing.append(column.name)
            row[column.name] = serialize_value(value)

        if missing:
            raise MissingRequiredColumn(schema.name, missing)
        return row

    def condition_value(self, schema: TableSchema, name: str, value: Any) -> Any:
        """Coerce and serialize a filter value (or each member of a list)."""
        if not schema.has_column(name):
            raise UnknownColumn(schema.name, name)
        column = schema.column(name)
        if isinstance(value, (list, tuple, set, frozenset)):
            return [serialize_value(coerce_value(column, member)) for member in value]
        return serialize_value(coerce_value(column, value))

    def from_row(self, row: RowType, record_type: RecordType) -> Record:
        """Build a persisted record from a store row.

        Raises:
            UnknownColumn: If the row has a column the schema doesn't know
        """
        schema = self.schema_for(record_type)
        for name in row:
            if not schema.has_column(name):
                raise UnknownColumn(schema.name, name)

        values = {
            column.name: coerce_value(column, row.get(column.name))
            for column in schema.data_columns
        }
        return Record(
            record_type,
            values,
            state=RecordState.PERSISTED,
            record_id=row[PRIMARY_KEY],
        )
