"""Persistence facade: create, find, query, update and destroy records."""

from collections.abc import AsyncIterator, Mapping, Sequence
from datetime import UTC, datetime
from typing import Any

from tablewright.constants import CREATED_AT, PRIMARY_KEY, UPDATED_AT
from tablewright.database.interfaces.store import RecordStore
from tablewright.database.schema import SchemaCatalog, TableSchema
from tablewright.exceptions import (
    AlreadyDestroyed,
    RecordNotFound,
    UnknownColumn,
    ValidationError,
    WriteAfterDestroy,
)
from tablewright.log import get_logger
from tablewright.models.record import Record
from tablewright.models.record_type import ModelRegistry, RecordType
from tablewright.services.association_resolver import (
    AssociationResolver,
    AssociationValue,
)
from tablewright.services.record_mapper import RecordMapper, coerce_value
from tablewright.services.validation_pipeline import ValidationPipeline
from tablewright.types import ResolveMode, RowType

logger = get_logger(__name__)

_DIRECTIONS = ("ASC", "DESC")


def _merge(attrs: Mapping[str, Any] | None, kwargs: Mapping[str, Any]) -> dict[str, Any]:
    merged = dict(attrs or {})
    merged.update(kwargs)
    return merged


class Persistence:
    """Entry point wiring the mapper, validator and resolver to one store.

    The store handle and the schema catalog are injected; the catalog is
    shared with the migration engine so that applied migrations are visible
    here immediately.
    """

    def __init__(
        self, store: RecordStore, catalog: SchemaCatalog, registry: ModelRegistry
    ) -> None:
        self.store = store
        self.catalog = catalog
        self.registry = registry
        self.mapper = RecordMapper(catalog)
        self.validator = ValidationPipeline()
        self.resolver = AssociationResolver(store, self.mapper, registry)

    def repository(self, record_type: RecordType | str) -> "RecordRepository":
        """Get a repository bound to one record type (by object or name)."""
        if isinstance(record_type, str):
            record_type = self.registry.get(record_type)
        return RecordRepository(self, record_type)

    async def save(self, record: Record) -> Record:
        return await self.repository(record.record_type).save(record)

    async def resolve(
        self,
        owner: Record,
        association: str,
        mode: ResolveMode = ResolveMode.LAZY,
    ) -> AssociationValue:
        return await self.resolver.resolve(owner, association, mode)

    async def preload(self, owners: Sequence[Record], association: str) -> None:
        await self.resolver.preload(owners, association)

    def check_associations(self) -> None:
        """Raise InvalidAssociation if any declared association is inconsistent."""
        self.resolver.check(self.registry, self.catalog)


class RecordRepository:
    """Write and read records of a single record type.

    Every write validates first. A record that fails validation never reaches
    the store: ``ValidationError`` is raised and the failures are left on
    ``record.errors``.
    """

    def __init__(self, persistence: Persistence, record_type: RecordType) -> None:
        self.persistence = persistence
        self.record_type = record_type

    def __repr__(self) -> str:
        return f"RecordRepository({self.record_type.name})"

    @property
    def store(self) -> RecordStore:
        return self.persistence.store

    @property
    def mapper(self) -> RecordMapper:
        return self.persistence.mapper

    @property
    def table_name(self) -> str:
        return self.record_type.table_name

    @property
    def schema(self) -> TableSchema:
        return self.mapper.schema_for(self.record_type)

    # Writes

    def new(self, attrs: Mapping[str, Any] | None = None, **kwargs: Any) -> Record:
        """Build an unsaved record."""
        return self.mapper.build(self.record_type, _merge(attrs, kwargs))

    async def create(self, attrs: Mapping[str, Any] | None = None, **kwargs: Any) -> Record:
        """Build, validate and insert a record.

        Returns:
            The persisted record carrying its store-assigned id

        Raises:
            ValidationError: If any rule fails; the store is not called
        """
        record = self.new(attrs, **kwargs)
        return await self.save(record)

    async def save(self, record: Record) -> Record:
        """Insert a new record or write the changed columns of a persisted one.

        Raises:
            WriteAfterDestroy: If the record was destroyed
            ValidationError: If any rule fails; the store is not called
            MissingRequiredColumn: If non-nullable columns have no value
        """
        if record.is_destroyed:
            raise WriteAfterDestroy(
                f"Cannot save destroyed {record.record_type.name} id={record.id}"
            )

        self._validate(record)
        if record.is_new:
            await self._insert(record)
        else:
            await self._update(record)
        return record

    async def update(self, record: Record, attrs: Mapping[str, Any] | None = None, **kwargs: Any) -> Record:
        """Merge attributes into a record, re-validate and save it.

        On a validation failure the merged values stay on the record and its
        lifecycle state is unchanged.
        """
        self.mapper.assign(record, _merge(attrs, kwargs))
        return await self.save(record)

    async def destroy(self, record: Record) -> Record:
        """Delete a record's row and mark it destroyed.

        Raises:
            AlreadyDestroyed: If the record was already destroyed
        """
        if record.is_destroyed:
            raise AlreadyDestroyed(
                f"{record.record_type.name} id={record.id} is already destroyed"
            )

        if record.is_persisted and record.id is not None:
            deleted = await self.store.delete_row(self.table_name, record.id)
            if not deleted:
                logger.warning(f"{self.table_name} row id={record.id} was already gone")
            else:
                logger.debug(f"Destroyed {self.table_name} id={record.id}")

        record.mark_destroyed()
        return record

    # Reads

    async def find(self, record_id: Any) -> Record:
        """Get the record with a primary key.

        Raises:
            RecordNotFound: If no row has that key
        """
        key = self.mapper.condition_value(self.schema, PRIMARY_KEY, record_id)
        rows = await self.store.select_rows(self.table_name, {PRIMARY_KEY: key}, limit=1)
        if not rows:
            raise RecordNotFound(self.table_name, record_id)
        return self.mapper.from_row(rows[0], self.record_type)

    async def find_by(self, attrs: Mapping[str, Any] | None = None, **kwargs: Any) -> Record | None:
        """Get the first record matching every given attribute, or None."""
        return await self.where(attrs, **kwargs).first()

    def all(self) -> "RecordQuery":
        return RecordQuery(self)

    def where(self, attrs: Mapping[str, Any] | None = None, **kwargs: Any) -> "RecordQuery":
        """Query records whose attributes equal every given value.

        Raises:
            UnknownColumn: If an attribute has no column
            TypeMismatch: If a value can't be coerced to its column type
        """
        return RecordQuery(self).where(attrs, **kwargs)

    async def count(self, attrs: Mapping[str, Any] | None = None, **kwargs: Any) -> int:
        return await self.where(attrs, **kwargs).count()

    async def exists(self, record_id: Any) -> bool:
        key = self.mapper.condition_value(self.schema, PRIMARY_KEY, record_id)
        return await self.store.count_rows(self.table_name, {PRIMARY_KEY: key}) > 0

    async def reload(self, record: Record) -> Record:
        """Refresh a persisted record from its row and clear its association cache."""
        if record.id is None:
            raise RecordNotFound(self.table_name, None)
        fresh = await self.find(record.id)

        current = {name for name in record.attributes if name != PRIMARY_KEY}
        values = {k: v for k, v in fresh.attributes.items() if k != PRIMARY_KEY}
        for name in current - values.keys():
            record.drop_attribute(name)
        for name, value in values.items():
            record.write_attribute(name, value)

        record.mark_persisted(fresh.id)
        record.reset_associations()
        record.errors = []
        return record

    # Internals

    def _validate(self, record: Record) -> None:
        failures = self.persistence.validator.validate(record)
        record.errors = failures
        if failures:
            logger.debug(
                f"{record.record_type.name} failed validation: "
                f"{', '.join(f.full_message for f in failures)}"
            )
            raise ValidationError(record, failures)

    def _timestamps(self, row: RowType, columns: Sequence[str]) -> dict[str, Any]:
        """Stamp the given timestamp columns (if the table has them) in a row."""
        schema = self.schema
        now = datetime.now(UTC)
        stamped: dict[str, Any] = {}
        for name in columns:
            if schema.has_column(name):
                stamped[name] = coerce_value(schema.column(name), now)
                row[name] = now.isoformat()
        return stamped

    async def _insert(self, record: Record) -> None:
        row = self.mapper.to_row(record)
        pending = [c for c in (CREATED_AT, UPDATED_AT) if record.get(c) is None]
        stamped = self._timestamps(row, pending)

        record_id = await self.store.insert_row(self.table_name, row)

        for name, value in stamped.items():
            record.write_attribute(name, value)
        record.mark_persisted(record_id)
        logger.debug(f"Inserted {self.table_name} id={record_id}")

    async def _update(self, record: Record) -> None:
        changes = record.changes
        if not changes:
            return

        full_row = self.mapper.to_row(record)
        row = {name: full_row[name] for name in changes}
        stamped = self._timestamps(row, [UPDATED_AT] if UPDATED_AT not in changes else [])

        if record.id is None:
            raise RecordNotFound(self.table_name, None)
        await self.store.update_row(self.table_name, record.id, row)

        for name, value in stamped.items():
            record.write_attribute(name, value)
        record.mark_persisted(record.id)
        logger.debug(f"Updated {self.table_name} id={record.id}: {', '.join(row)}")


class RecordQuery:
    """Lazy, chainable query over one record type.

    Nothing runs until the query is iterated (``async for``) or one of
    ``to_list``, ``first`` or ``count`` is awaited. Every run scans the
    store again; results are never cached on the query.
    """

    def __init__(
        self,
        repository: RecordRepository,
        conditions: dict[str, Any] | None = None,
        order: list[str] | None = None,
        limit_value: int | None = None,
        preloads: tuple[str, ...] = (),
    ) -> None:
        self.repository = repository
        self.conditions: dict[str, Any] = dict(conditions or {})
        self.order: list[str] = list(order or [])
        self.limit_value = limit_value
        self.preloads = preloads

    def __repr__(self) -> str:
        return (
            f"RecordQuery({self.repository.record_type.name}, where={self.conditions}, "
            f"order={self.order}, limit={self.limit_value})"
        )

    def _copy(self, **changes: Any) -> "RecordQuery":
        options: dict[str, Any] = {
            "conditions": self.conditions,
            "order": self.order,
            "limit_value": self.limit_value,
            "preloads": self.preloads,
        }
        options.update(changes)
        return RecordQuery(self.repository, **options)

    def where(self, attrs: Mapping[str, Any] | None = None, **kwargs: Any) -> "RecordQuery":
        schema = self.repository.schema
        conditions = dict(self.conditions)
        for name, value in _merge(attrs, kwargs).items():
            conditions[name] = self.repository.mapper.condition_value(schema, name, value)
        return self._copy(conditions=conditions)

    def order_by(self, *columns: str) -> "RecordQuery":
        """Order by columns; ``"-title"`` or ``"title DESC"`` sorts descending."""
        schema = self.repository.schema
        order: list[str] = []
        for column in columns:
            parts = column.split()
            name = parts[0]
            direction = parts[1].upper() if len(parts) > 1 else "ASC"
            if name.startswith("-"):
                name, direction = name[1:], "DESC"
            if not schema.has_column(name) or direction not in _DIRECTIONS or len(parts) > 2:
                raise UnknownColumn(schema.name, column)
            order.append(name if direction == "ASC" else f"{name} DESC")
        return self._copy(order=order)

    def limit(self, count: int) -> "RecordQuery":
        if count < 0:
            raise ValueError("limit must be non-negative")
        return self._copy(limit_value=count)

    def includes(self, *associations: str) -> "RecordQuery":
        """Eager-load associations for every record the query returns."""
        for name in associations:
            self.repository.record_type.association(name)
        return self._copy(preloads=self.preloads + tuple(associations))

    async def _fetch(self, limit: int | None = None) -> list[Record]:
        repository = self.repository
        rows = await repository.store.select_rows(
            repository.table_name,
            self.conditions or None,
            order_by=self.order or repository.record_type.default_order,
            limit=limit if limit is not None else self.limit_value,
        )
        records = [repository.mapper.from_row(row, repository.record_type) for row in rows]
        for name in self.preloads:
            await repository.persistence.resolver.preload(records, name)
        return records

    async def __aiter__(self) -> AsyncIterator[Record]:
        for record in await self._fetch():
            yield record

    async def to_list(self) -> list[Record]:
        return await self._fetch()

    async def first(self) -> Record | None:
        limit = 1 if self.limit_value is None else min(1, self.limit_value)
        records = await self._fetch(limit)
        return records[0] if records else None

    async def count(self) -> int:
        if self.limit_value is not None:
            return len(await self._fetch())
        repository = self.repository
        return await repository.store.count_rows(
            repository.table_name, self.conditions or None
        )
