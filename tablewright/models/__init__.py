"""Record, record type, validation and association models."""

from tablewright.models.associations import AssociationDescriptor, belongs_to, has_many
from tablewright.models.record import Record
from tablewright.models.record_type import ModelRegistry, RecordType
from tablewright.models.validations import (
    ValidationFailure,
    ValidationRule,
    inclusion,
    length,
    matches,
    numericality,
    presence,
    rule,
)

__all__ = [
    "AssociationDescriptor",
    "ModelRegistry",
    "Record",
    "RecordType",
    "ValidationFailure",
    "ValidationRule",
    "belongs_to",
    "has_many",
    "inclusion",
    "length",
    "matches",
    "numericality",
    "presence",
    "rule",
]
