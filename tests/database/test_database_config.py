"""Tests for environment-specific database configuration."""

from pathlib import Path

from tablewright.config import Settings
from tablewright.database import DatabaseConfig, SQLiteStore, create_store
from tablewright.types import Environment


def test_testing_uses_memory_database() -> None:
    """Test the testing environment never touches the filesystem."""
    config = DatabaseConfig(Environment.TESTING)

    assert config.database_path == ":memory:"


def test_development_database_path(tmp_path: Path) -> None:
    """Test development and production databases live under db/."""
    dev = DatabaseConfig(Environment.DEVELOPMENT, base_dir=tmp_path)
    prod = DatabaseConfig(Environment.PRODUCTION, base_dir=tmp_path)

    assert dev.database_path == tmp_path / "db" / "tablewright.dev.db"
    assert prod.database_path == tmp_path / "db" / "tablewright.db"


def test_backup_path(tmp_path: Path) -> None:
    """Test backup paths with and without an explicit name."""
    config = DatabaseConfig(base_dir=tmp_path)

    named = config.get_backup_path("before_upgrade.db")
    stamped = config.get_backup_path()

    assert named == tmp_path / "db" / "backups" / "before_upgrade.db"
    assert stamped.parent == tmp_path / "db" / "backups"
    assert stamped.name.startswith("backup_")
    assert stamped.suffix == ".db"


def test_create_store_explicit_path(tmp_path: Path) -> None:
    """Test an explicit database path overrides the environment default."""
    settings = Settings(
        environment=Environment.PRODUCTION,
        database_path=str(tmp_path / "app.db"),
        migrations_table="versions",
        sqlite_timeout=5.0,
        sqlite_foreign_keys=False,
    )

    store = create_store(settings)

    assert isinstance(store, SQLiteStore)
    assert store.db_path == tmp_path / "app.db"
    assert store.migrations_table == "versions"
    assert store.timeout == 5.0
    assert store.foreign_keys is False


def test_create_store_for_testing() -> None:
    """Test the testing environment gets an in-memory store."""
    store = create_store(Settings(environment=Environment.TESTING))

    assert store.db_path == ":memory:"
