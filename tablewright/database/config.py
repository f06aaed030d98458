"""Database configuration for different environments."""

from datetime import datetime
from pathlib import Path

from tablewright.config import Settings
from tablewright.database.implementations.sqlite import SQLiteStore
from tablewright.database.implementations.sqlite.sqlite_store import MEMORY_DATABASE
from tablewright.log import get_logger
from tablewright.types import Environment

logger = get_logger(__name__)


class DatabaseConfig:
    """Resolve where the SQLite database lives for an environment."""

    def __init__(
        self,
        environment: Environment = Environment.DEVELOPMENT,
        base_dir: Path | None = None,
    ) -> None:
        """Initialize database configuration.

        Args:
            environment: Environment type (development, testing, production)
            base_dir: Directory containing the ``db`` folder (defaults to cwd)
        """
        self.environment = environment
        self._base_dir = base_dir or Path.cwd()

    @property
    def database_dir(self) -> Path:
        return self._base_dir / "db"

    @property
    def database_path(self) -> str | Path:
        """Get database location; tests run against an in-memory database."""
        if self.environment == Environment.TESTING:
            return MEMORY_DATABASE
        if self.environment == Environment.DEVELOPMENT:
            return self.database_dir / "tablewright.dev.db"
        return self.database_dir / "tablewright.db"

    def get_backup_path(self, backup_name: str | None = None) -> Path:
        """Get backup database path.

        Args:
            backup_name: Optional backup name, defaults to timestamp

        Returns:
            Backup file path
        """
        if backup_name is None:
            backup_name = f"backup_{datetime.now().strftime('%Y%m%d_%H%M%S')}.db"

        return self.database_dir / "backups" / backup_name


def create_store(settings: Settings) -> SQLiteStore:
    """Create an unconnected SQLite store from settings.

    An explicit ``database_path`` wins over the per-environment location.
    """
    db_path: str | Path
    if settings.database_path:
        db_path = settings.database_path
    else:
        db_path = DatabaseConfig(settings.environment).database_path
    logger.info(f"Creating SQLite store for: {db_path}")
    return SQLiteStore(
        db_path,
        migrations_table=settings.migrations_table,
        timeout=settings.sqlite_timeout,
        foreign_keys=settings.sqlite_foreign_keys,
    )
