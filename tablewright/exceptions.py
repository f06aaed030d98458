"""Exceptions raised by the tablewright runtime."""

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from tablewright.models.record import Record
    from tablewright.models.validations import ValidationFailure


class TablewrightError(Exception):
    """Base exception for tablewright errors."""

    pass


# Schema / migration errors


class SchemaError(TablewrightError):
    """Base exception for schema and migration errors."""

    def __init__(self, message: str, version: str | None = None) -> None:
        super().__init__(message)
        self.version = version


class DuplicateVersion(SchemaError):
    """Raised when two migration units share a version."""

    pass


class OutOfOrderApplication(SchemaError):
    """Raised when applying a unit would leave a gap in the ledger."""

    pass


class NoInverseDefined(SchemaError):
    """Raised when a unit selected for rollback has no inverse operation."""

    pass


class UnknownVersion(SchemaError):
    """Raised when the ledger names a version with no known migration unit."""

    pass


class StoreRejected(SchemaError):
    """Raised when the store refuses a schema change."""

    def __init__(self, version: str, reason: str) -> None:
        super().__init__(f"Migration {version} rejected: {reason}", version)
        self.reason = reason


class InvalidAssociation(SchemaError):
    """Raised when an association declaration does not match the schema."""

    pass


# Mapping errors


class MappingError(TablewrightError):
    """Base exception for record <-> row mapping errors."""

    pass


class UnknownTable(MappingError):
    """Raised when a table is not present in the schema catalog."""

    def __init__(self, table: str) -> None:
        super().__init__(f"Unknown table: {table}")
        self.table = table


class UnknownColumn(MappingError):
    """Raised when an attribute has no column in the table schema."""

    def __init__(self, table: str, column: str) -> None:
        super().__init__(f"Unknown column {column!r} for table {table}")
        self.table = table
        self.column = column


class TypeMismatch(MappingError):
    """Raised when a value cannot be coerced to the declared column type."""

    def __init__(self, column: str, declared: str, value: Any) -> None:
        super().__init__(
            f"Cannot convert {value!r} to {declared} for column {column!r}"
        )
        self.column = column
        self.declared = declared
        self.value = value


class MissingRequiredColumn(MappingError):
    """Raised at save time when non-nullable columns have no value."""

    def __init__(self, table: str, columns: list[str]) -> None:
        super().__init__(
            f"Missing required columns for table {table}: {', '.join(columns)}"
        )
        self.table = table
        self.columns = columns


class PrimaryKeyAssignment(MappingError):
    """Raised when a caller tries to set the primary key."""

    pass


# Validation errors


class ValidationError(TablewrightError):
    """Raised when a record fails validation; carries every failure."""

    def __init__(
        self, record: "Record", failures: "list[ValidationFailure]"
    ) -> None:
        messages = "; ".join(failure.full_message for failure in failures)
        super().__init__(f"Validation failed: {messages}")
        self.record = record
        self.failures = failures


# Association errors


class AssociationReferenceError(TablewrightError):
    """Base exception for association reference errors."""

    pass


class DanglingReference(AssociationReferenceError):
    """Raised when a foreign key points at a row that does not exist."""

    def __init__(self, association: str, target_table: str, key: Any) -> None:
        super().__init__(
            f"Association {association!r} references missing "
            f"{target_table} row with id={key!r}"
        )
        self.association = association
        self.target_table = target_table
        self.key = key


# Lifecycle errors


class LifecycleError(TablewrightError):
    """Base exception for invalid record lifecycle transitions."""

    pass


class AlreadyDestroyed(LifecycleError):
    """Raised when destroying a record twice."""

    pass


class WriteAfterDestroy(LifecycleError):
    """Raised when writing to a destroyed record."""

    pass


class RecordNotFound(TablewrightError):
    """Raised when no row matches the requested primary key."""

    def __init__(self, table: str, record_id: Any) -> None:
        super().__init__(f"Couldn't find {table} row with id={record_id!r}")
        self.table = table
        self.record_id = record_id


# Store errors


class StoreError(TablewrightError):
    """Base exception for store failures."""

    pass


class StoreUnavailable(StoreError):
    """Raised when the store cannot be reached or is exhausted."""

    pass


class StoreOperationError(StoreError):
    """Raised when the store refuses a statement."""

    pass
