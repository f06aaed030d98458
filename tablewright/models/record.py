"""In-memory record instances."""

from typing import TYPE_CHECKING, Any

from tablewright.constants import PRIMARY_KEY
from tablewright.exceptions import UnknownColumn
from tablewright.types import RecordState

if TYPE_CHECKING:
    from tablewright.models.record_type import RecordType
    from tablewright.models.validations import ValidationFailure

_MISSING = object()


class Record:
    """A typed row of a record type plus its lifecycle state.

    Attribute values are already coerced to their column types. Writes go
    through the record mapper (which enforces the schema); reads are plain
    lookups and stay available after the record is destroyed.

    Each record owns the cache slots of its resolved associations. The cache
    is never shared with other instances; ``reset_associations`` (or
    fetching the record again) clears it.
    """

    def __init__(
        self,
        record_type: "RecordType",
        attributes: dict[str, Any] | None = None,
        state: RecordState = RecordState.NEW,
        record_id: int | None = None,
    ) -> None:
        self.record_type = record_type
        self._attributes: dict[str, Any] = dict(attributes or {})
        self._state = state
        self._id = record_id
        # Values as last loaded from / written to the store
        self._original: dict[str, Any] = (
            dict(self._attributes) if state == RecordState.PERSISTED else {}
        )
        self._association_cache: dict[str, Any] = {}
        self.errors: "list[ValidationFailure]" = []

    def __repr__(self) -> str:
        shown = ", ".join(f"{k}={v!r}" for k, v in self._attributes.items())
        return f"<{self.record_type.name} id={self._id!r} {shown}>"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Record):
            return NotImplemented
        if self._id is None or other._id is None:
            return self is other
        return self.table_name == other.table_name and self._id == other._id

    def __hash__(self) -> int:
        if self._id is None:
            return id(self)
        return hash((self.table_name, self._id))

    def __getitem__(self, name: str) -> Any:
        value = self.get(name, _MISSING)
        if value is _MISSING:
            raise UnknownColumn(self.table_name, name)
        return value

    def __contains__(self, name: object) -> bool:
        return name == PRIMARY_KEY or name in self._attributes

    @property
    def table_name(self) -> str:
        return self.record_type.table_name

    @property
    def id(self) -> int | None:
        """Primary key; None until the first successful insert."""
        return self._id

    @property
    def state(self) -> RecordState:
        return self._state

    @property
    def is_new(self) -> bool:
        return self._state == RecordState.NEW

    @property
    def is_persisted(self) -> bool:
        return self._state == RecordState.PERSISTED

    @property
    def is_destroyed(self) -> bool:
        return self._state == RecordState.DESTROYED

    def get(self, name: str, default: Any = None) -> Any:
        if name == PRIMARY_KEY:
            return self._id
        return self._attributes.get(name, default)

    @property
    def attributes(self) -> dict[str, Any]:
        """Copy of all attribute values, primary key first."""
        return {PRIMARY_KEY: self._id, **self._attributes}

    @property
    def changes(self) -> dict[str, tuple[Any, Any]]:
        """Attributes changed since the record was loaded or saved: name -> (old, new)."""
        return {
            name: (self._original.get(name), value)
            for name, value in self._attributes.items()
            if name not in self._original or self._original[name] != value
        }

    @property
    def changed(self) -> bool:
        return bool(self.changes)

    @property
    def valid(self) -> bool:
        """Whether the last validation run found no failures."""
        return not self.errors

    # Used by the record mapper and the persistence facade

    def write_attribute(self, name: str, value: Any) -> None:
        self._attributes[name] = value

    def drop_attribute(self, name: str) -> None:
        self._attributes.pop(name, None)

    def mark_persisted(self, record_id: int) -> None:
        """Record a successful insert or update; clears pending changes."""
        self._id = record_id
        self._state = RecordState.PERSISTED
        self._original = dict(self._attributes)

    def mark_destroyed(self) -> None:
        self._state = RecordState.DESTROYED

    # Association cache slots

    def cached_association(self, name: str) -> tuple[bool, Any]:
        """Get ``(hit, value)`` for an association cache slot."""
        if name in self._association_cache:
            return True, self._association_cache[name]
        return False, None

    def cache_association(self, name: str, value: Any) -> None:
        self._association_cache[name] = value

    def reset_associations(self, name: str | None = None) -> None:
        """Clear one association cache slot, or all of them."""
        if name is None:
            self._association_cache.clear()
        else:
            self._association_cache.pop(name, None)
