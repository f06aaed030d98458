"""Global pytest configuration and fixtures."""

from collections.abc import AsyncGenerator
from logging import Logger
from pathlib import Path

import pytest
import pytest_asyncio

from tablewright import setup_test_logging
from tablewright.database import (
    CreateTable,
    MigrationEngine,
    MigrationUnit,
    SQLiteStore,
    columns_from_spec,
)
from tablewright.database.schema import ColumnDefinition
from tablewright.models import (
    ModelRegistry,
    belongs_to,
    has_many,
    length,
    presence,
)
from tablewright.services import Persistence
from tablewright.types import ColumnType


@pytest.fixture(scope="session", autouse=True)
def setup_logging() -> None:
    """Setup test logging for all tests."""
    setup_test_logging()


@pytest.fixture(scope="function")
def logger() -> Logger:
    """Provide a logger instance for tests."""
    from tablewright import get_logger

    return get_logger("test")


@pytest.fixture
def temp_db_path(tmp_path: Path) -> Path:
    """Create a temporary database path using pytest's tmp_path."""
    return tmp_path / "test.db"


@pytest_asyncio.fixture
async def store(temp_db_path: Path) -> AsyncGenerator[SQLiteStore, None]:
    """Connected SQLite store on a temporary database."""
    sqlite_store = SQLiteStore(temp_db_path)
    async with sqlite_store:
        yield sqlite_store


@pytest.fixture
def blog_migrations() -> list[MigrationUnit]:
    """Migrations creating the articles and comments tables."""
    return [
        MigrationUnit.reversible(
            "20240101000000",
            CreateTable(
                "articles",
                (
                    ColumnDefinition("title", ColumnType.STRING),
                    ColumnDefinition("body", ColumnType.TEXT),
                    ColumnDefinition("published", ColumnType.BOOLEAN, default=False),
                    ColumnDefinition("views", ColumnType.INTEGER, default=0),
                ),
                timestamps=True,
            ),
            name="create_articles",
        ),
        MigrationUnit.reversible(
            "20240102000000",
            CreateTable("comments", tuple(columns_from_spec("article:references body:text!"))),
            name="create_comments",
        ),
    ]


@pytest.fixture
def registry() -> ModelRegistry:
    """Article / Comment record types."""
    models = ModelRegistry()
    models.define(
        "Article",
        validations=[presence("title"), length("title", maximum=100)],
        associations=[has_many("comments")],
    )
    models.define(
        "Comment",
        validations=[presence("body")],
        associations=[belongs_to("article")],
    )
    return models


@pytest_asyncio.fixture
async def engine(
    store: SQLiteStore, blog_migrations: list[MigrationUnit]
) -> MigrationEngine:
    """Migration engine with the blog migrations applied."""
    migration_engine = MigrationEngine(store)
    await migration_engine.apply(blog_migrations)
    return migration_engine


@pytest.fixture
def persistence(
    store: SQLiteStore, engine: MigrationEngine, registry: ModelRegistry
) -> Persistence:
    """Persistence facade over the migrated blog schema."""
    return Persistence(store, engine.catalog, registry)
