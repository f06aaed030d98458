"""Tests for the record mapper."""

from datetime import date, datetime

import pytest

from tablewright.database import AddColumn, CreateTable, SchemaCatalog
from tablewright.database.schema import ColumnDefinition
from tablewright.exceptions import (
    MissingRequiredColumn,
    PrimaryKeyAssignment,
    TypeMismatch,
    UnknownColumn,
    UnknownTable,
    WriteAfterDestroy,
)
from tablewright.models import RecordType
from tablewright.services import RecordMapper, coerce_value, serialize_value
from tablewright.types import ColumnType, RecordState


@pytest.fixture
def catalog() -> SchemaCatalog:
    """Catalog with an events table covering every column type."""
    catalog = SchemaCatalog()
    CreateTable(
        "events",
        (
            ColumnDefinition("name", ColumnType.STRING, nullable=False),
            ColumnDefinition("notes", ColumnType.TEXT),
            ColumnDefinition("seats", ColumnType.INTEGER, default=10),
            ColumnDefinition("price", ColumnType.FLOAT),
            ColumnDefinition("public", ColumnType.BOOLEAN, default=False),
            ColumnDefinition("day", ColumnType.DATE),
            ColumnDefinition("starts_at", ColumnType.DATETIME),
        ),
    ).apply_to(catalog)
    return catalog


@pytest.fixture
def mapper(catalog: SchemaCatalog) -> RecordMapper:
    """Record mapper over the events catalog."""
    return RecordMapper(catalog)


@pytest.fixture
def event_type() -> RecordType:
    """Event record type."""
    return RecordType("Event")


@pytest.mark.parametrize(
    "column_type, value, expected",
    [
        (ColumnType.STRING, 42, "42"),
        (ColumnType.INTEGER, "7", 7),
        (ColumnType.FLOAT, "1.5", 1.5),
        (ColumnType.BOOLEAN, 1, True),
        (ColumnType.BOOLEAN, "false", False),
        (ColumnType.DATE, "2024-01-02", date(2024, 1, 2)),
        (ColumnType.DATETIME, "2024-01-02T03:04:05", datetime(2024, 1, 2, 3, 4, 5)),
    ],
)
def test_coerce_value(column_type: ColumnType, value: object, expected: object) -> None:
    """Test values are converted to the column's Python type."""
    assert coerce_value(ColumnDefinition("c", column_type), value) == expected


@pytest.mark.parametrize(
    "column_type, value",
    [
        (ColumnType.INTEGER, "seven"),
        (ColumnType.INTEGER, 1.5),
        (ColumnType.BOOLEAN, "maybe"),
        (ColumnType.DATE, "not a date"),
    ],
)
def test_coerce_value_mismatch(column_type: ColumnType, value: object) -> None:
    """Test unconvertible values raise TypeMismatch."""
    with pytest.raises(TypeMismatch) as exc_info:
        coerce_value(ColumnDefinition("c", column_type), value)

    assert exc_info.value.column == "c"
    assert exc_info.value.declared == column_type.value


def test_serialize_value() -> None:
    """Test storage forms of Python values."""
    assert serialize_value(True) == 1
    assert serialize_value(date(2024, 1, 2)) == "2024-01-02"
    assert serialize_value(datetime(2024, 1, 2, 3, 4, 5)) == "2024-01-02T03:04:05"
    assert serialize_value("x") == "x"


def test_build_applies_defaults(mapper: RecordMapper, event_type: RecordType) -> None:
    """Test a new record gets column defaults and coerced values."""
    record = mapper.build(event_type, {"name": "Launch", "seats": "25"})

    assert record.is_new
    assert record["name"] == "Launch"
    assert record["seats"] == 25
    assert record["public"] is False
    assert record["notes"] is None


def test_build_rejects_unknown_and_primary_key(
    mapper: RecordMapper, event_type: RecordType
) -> None:
    """Test unknown attributes and the primary key can't be assigned."""
    with pytest.raises(UnknownColumn) as exc_info:
        mapper.build(event_type, {"title": "Launch"})
    assert exc_info.value.column == "title"

    with pytest.raises(PrimaryKeyAssignment):
        mapper.build(event_type, {"id": 5})


def test_build_unknown_table(mapper: RecordMapper) -> None:
    """Test a record type without a table can't be mapped."""
    with pytest.raises(UnknownTable):
        mapper.build(RecordType("Ghost"))


def test_assign_is_all_or_nothing(mapper: RecordMapper, event_type: RecordType) -> None:
    """Test a failing value leaves every attribute untouched."""
    record = mapper.build(event_type, {"name": "Launch", "seats": 5})

    with pytest.raises(TypeMismatch):
        mapper.assign(record, {"name": "Relaunch", "seats": "many"})

    assert record["name"] == "Launch"
    assert record["seats"] == 5


def test_assign_after_destroy(mapper: RecordMapper, event_type: RecordType) -> None:
    """Test destroyed records can't be written."""
    record = mapper.build(event_type, {"name": "Launch"})
    record.mark_destroyed()

    with pytest.raises(WriteAfterDestroy):
        mapper.assign(record, {"name": "Relaunch"})


def test_to_row(mapper: RecordMapper, event_type: RecordType) -> None:
    """Test rows hold storage values for every data column in order."""
    record = mapper.build(
        event_type,
        {
            "name": "Launch",
            "public": True,
            "day": date(2024, 1, 2),
            "starts_at": datetime(2024, 1, 2, 9, 30),
        },
    )

    assert mapper.to_row(record) == {
        "name": "Launch",
        "notes": None,
        "seats": 10,
        "price": None,
        "public": 1,
        "day": "2024-01-02",
        "starts_at": "2024-01-02T09:30:00",
    }


def test_to_row_missing_required(mapper: RecordMapper, event_type: RecordType) -> None:
    """Test every missing non-nullable column is reported."""
    record = mapper.build(event_type)

    with pytest.raises(MissingRequiredColumn) as exc_info:
        mapper.to_row(record)

    assert exc_info.value.columns == ["name"]


def test_to_row_keeps_explicit_none(mapper: RecordMapper, event_type: RecordType) -> None:
    """Test an explicit None is stored as NULL rather than the column default."""
    record = mapper.build(event_type, {"name": "Launch", "seats": None, "public": None})

    row = mapper.to_row(record)

    assert row["seats"] is None
    assert row["public"] is None


def test_to_row_defaults_columns_added_later(
    mapper: RecordMapper, catalog: SchemaCatalog, event_type: RecordType
) -> None:
    """Test a column the record predates is written with its default."""
    record = mapper.build(event_type, {"name": "Launch"})
    AddColumn(
        "events", ColumnDefinition("capacity", ColumnType.INTEGER, default=50)
    ).apply_to(catalog)

    assert mapper.to_row(record)["capacity"] == 50


def test_to_row_stale_attribute(mapper: RecordMapper, event_type: RecordType) -> None:
    """Test attributes the schema no longer has are rejected."""
    record = mapper.build(event_type, {"name": "Launch"})
    record.write_attribute("removed", 1)

    with pytest.raises(UnknownColumn):
        mapper.to_row(record)


def test_from_row(mapper: RecordMapper, event_type: RecordType) -> None:
    """Test rows become persisted records with typed values."""
    record = mapper.from_row(
        {
            "id": 3,
            "name": "Launch",
            "notes": None,
            "seats": 10,
            "price": 9.5,
            "public": 1,
            "day": "2024-01-02",
            "starts_at": "2024-01-02T09:30:00",
        },
        event_type,
    )

    assert record.state == RecordState.PERSISTED
    assert record.id == 3
    assert record["public"] is True
    assert record["day"] == date(2024, 1, 2)
    assert record["starts_at"] == datetime(2024, 1, 2, 9, 30)
    assert not record.changed


def test_from_row_unknown_column(mapper: RecordMapper, event_type: RecordType) -> None:
    """Test a row column missing from the schema is rejected."""
    with pytest.raises(UnknownColumn):
        mapper.from_row({"id": 1, "name": "Launch", "extra": 1}, event_type)


def test_condition_value(mapper: RecordMapper, catalog: SchemaCatalog) -> None:
    """Test filter values are coerced and serialized."""
    schema = catalog.require("events")

    assert mapper.condition_value(schema, "public", True) == 1
    assert mapper.condition_value(schema, "id", ["1", 2]) == [1, 2]
    assert mapper.condition_value(schema, "notes", None) is None
    with pytest.raises(UnknownColumn):
        mapper.condition_value(schema, "missing", 1)
