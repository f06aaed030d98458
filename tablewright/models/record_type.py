"""Record types and the registry they are looked up in."""

from collections.abc import Iterable, Iterator, Sequence
from typing import Any

from tablewright.constants import PRIMARY_KEY
from tablewright.exceptions import InvalidAssociation, SchemaError
from tablewright.models.associations import AssociationDescriptor
from tablewright.models.validations import ValidationRule
from tablewright.utils import tableize


class RecordType:
    """A named, schema-bound entity such as ``Article``.

    The table name is derived from the type name (``Article`` -> ``articles``)
    unless given. Columns are not declared here: they come from the schema
    catalog, which only migrations change.
    """

    def __init__(
        self,
        name: str,
        table_name: str | None = None,
        validations: Sequence[ValidationRule] = (),
        associations: Sequence[AssociationDescriptor] = (),
        default_order: Sequence[str] | None = None,
    ) -> None:
        self.name = name
        self.table_name = table_name or tableize(name)
        self.validations: tuple[ValidationRule, ...] = tuple(validations)
        self.default_order: list[str] = list(default_order or [PRIMARY_KEY])
        self._associations: dict[str, AssociationDescriptor] = {}
        for descriptor in associations:
            if descriptor.name in self._associations:
                raise SchemaError(
                    f"Association {descriptor.name!r} declared twice on {name}"
                )
            self._associations[descriptor.name] = descriptor.bind(name)

    def __repr__(self) -> str:
        return f"RecordType({self.name!r}, table_name={self.table_name!r})"

    @property
    def associations(self) -> list[AssociationDescriptor]:
        return list(self._associations.values())

    def association(self, name: str) -> AssociationDescriptor:
        descriptor = self._associations.get(name)
        if descriptor is None:
            raise InvalidAssociation(f"{self.name} has no association {name!r}")
        return descriptor


class ModelRegistry:
    """Explicit registry of record types, looked up by name or table."""

    def __init__(self, record_types: Iterable[RecordType] = ()) -> None:
        self._types: dict[str, RecordType] = {}
        for record_type in record_types:
            self.register(record_type)

    def __contains__(self, name: object) -> bool:
        return name in self._types

    def __iter__(self) -> Iterator[RecordType]:
        return iter(self._types.values())

    def register(self, record_type: RecordType) -> RecordType:
        if record_type.name in self._types:
            raise SchemaError(f"Record type {record_type.name} is already registered")
        if any(t.table_name == record_type.table_name for t in self._types.values()):
            raise SchemaError(
                f"Table {record_type.table_name} is already mapped to another type"
            )
        self._types[record_type.name] = record_type
        return record_type

    def define(self, name: str, **options: Any) -> RecordType:
        """Create and register a record type in one step."""
        return self.register(RecordType(name, **options))

    def get(self, name: str) -> RecordType:
        record_type = self._types.get(name)
        if record_type is None:
            raise SchemaError(f"Unknown record type: {name}")
        return record_type

    def for_table(self, table_name: str) -> RecordType:
        for record_type in self._types.values():
            if record_type.table_name == table_name:
                return record_type
        raise SchemaError(f"No record type is mapped to table {table_name}")
