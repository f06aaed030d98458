"""Core functionality for the tablewright ORM runtime."""

from .config import Settings, settings
from .log import (
    get_logger,
    setup_logging,
    setup_logging_from_settings,
    setup_production_logging,
    setup_test_logging,
)
from .services import (
    Persistence,
    RecordQuery,
    RecordRepository,
)
from .types import ColumnType, Environment, RecordState, ResolveMode

__version__ = "0.1.0"

__all__ = [
    "ColumnType",
    "Environment",
    "RecordState",
    "ResolveMode",
    "Settings",
    "settings",
    "get_logger",
    "setup_logging",
    "setup_logging_from_settings",
    "setup_production_logging",
    "setup_test_logging",
    "Persistence",
    "RecordQuery",
    "RecordRepository",
]
