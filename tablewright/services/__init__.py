"""Record mapping, validation, association and persistence services."""

from .association_resolver import AssociationResolver
from .persistence import Persistence, RecordQuery, RecordRepository
from .record_mapper import RecordMapper, coerce_value, serialize_value
from .validation_pipeline import ValidationPipeline

__all__ = [
    "AssociationResolver",
    "Persistence",
    "RecordMapper",
    "RecordQuery",
    "RecordRepository",
    "ValidationPipeline",
    "coerce_value",
    "serialize_value",
]
