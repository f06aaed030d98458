"""Common type definitions for the tablewright system."""

from enum import Enum
from typing import Any, TypeAlias

DatabaseParamType: TypeAlias = dict[str, Any] | list[Any] | tuple[Any, ...] | None
RowType: TypeAlias = dict[str, Any]


class Environment(str, Enum):
    """Application environment types."""

    DEVELOPMENT = "development"
    PRODUCTION = "production"
    TESTING = "testing"


class ColumnType(str, Enum):
    """Declared column types supported by the schema catalog."""

    STRING = "string"
    TEXT = "text"
    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"
    DATE = "date"
    DATETIME = "datetime"


class RecordState(str, Enum):
    """Lifecycle state of a record instance."""

    NEW = "new"
    PERSISTED = "persisted"
    DESTROYED = "destroyed"


class AssociationKind(str, Enum):
    """Kinds of relationships between record types."""

    BELONGS_TO = "belongs_to"
    HAS_MANY = "has_many"


class ResolveMode(str, Enum):
    """When an association is resolved."""

    LAZY = "lazy"
    EAGER = "eager"
