"""Tests for the persistence facade."""

from datetime import datetime
from unittest.mock import AsyncMock

import pytest

from tablewright.database import CreateTable, SchemaCatalog, SQLiteStore
from tablewright.database.interfaces import RecordStore
from tablewright.database.schema import ColumnDefinition
from tablewright.exceptions import (
    AlreadyDestroyed,
    MissingRequiredColumn,
    RecordNotFound,
    TypeMismatch,
    UnknownColumn,
    ValidationError,
    WriteAfterDestroy,
)
from tablewright.models import ModelRegistry, Record, presence
from tablewright.services import Persistence, RecordQuery, RecordRepository
from tablewright.types import ColumnType, RecordState


@pytest.fixture
def articles(persistence: Persistence) -> RecordRepository:
    """Article repository."""
    return persistence.repository("Article")


@pytest.fixture
def mock_store() -> AsyncMock:
    """Store stub that records every call."""
    store = AsyncMock(spec=RecordStore)
    store.insert_row.return_value = 1
    return store


@pytest.fixture
def stubbed(mock_store: AsyncMock) -> Persistence:
    """Persistence over a stub store and an in-memory articles schema."""
    catalog = SchemaCatalog()
    CreateTable("articles", (ColumnDefinition("title", ColumnType.STRING),)).apply_to(catalog)
    registry = ModelRegistry()
    registry.define("Article", validations=[presence("title")])
    return Persistence(mock_store, catalog, registry)


@pytest.mark.asyncio
async def test_articles_example(articles: RecordRepository) -> None:
    """Test the first created article gets id 1 and a blank title fails."""
    article = await articles.create({"title": "First Post", "body": "Hello"})

    assert article.id == 1
    assert article.is_persisted
    assert article["title"] == "First Post"

    with pytest.raises(ValidationError) as exc_info:
        await articles.create({"title": "", "body": "No title"})

    error = exc_info.value
    assert [f.attribute for f in error.failures] == ["title"]
    assert str(error) == "Validation failed: title can't be blank"
    assert error.record.is_new
    assert error.record.id is None
    assert error.record["body"] == "No title"
    assert error.record.errors == error.failures
    assert await articles.count() == 1


@pytest.mark.asyncio
async def test_invalid_create_never_calls_insert(
    stubbed: Persistence, mock_store: AsyncMock
) -> None:
    """Test a violated rule stops the write before the store."""
    with pytest.raises(ValidationError):
        await stubbed.repository("Article").create(title="  ")

    mock_store.insert_row.assert_not_called()


@pytest.mark.asyncio
async def test_valid_create_inserts_full_row(
    stubbed: Persistence, mock_store: AsyncMock
) -> None:
    """Test a valid record is inserted with its storage row."""
    record = await stubbed.repository("Article").create(title="First Post")

    mock_store.insert_row.assert_awaited_once_with("articles", {"title": "First Post"})
    assert record.id == 1
    assert record.state == RecordState.PERSISTED


@pytest.mark.asyncio
async def test_create_then_find(articles: RecordRepository) -> None:
    """Test a created record can be found with equal attributes."""
    created = await articles.create(title="First Post", body="Hello", views=3)

    found = await articles.find(created.id)

    assert found == created
    assert found is not created
    assert found.attributes == created.attributes
    assert found["published"] is False


@pytest.mark.asyncio
async def test_explicit_none_round_trips(articles: RecordRepository) -> None:
    """Test nullable columns with defaults can be stored and cleared as NULL."""
    created = await articles.create(title="First Post", published=None, views=None)

    found = await articles.find(created.id)

    assert found["published"] is None
    assert found["views"] is None
    assert found.attributes == created.attributes

    counted = await articles.create(title="Second Post", views=3)
    await articles.update(counted, views=None)

    assert (await articles.find(counted.id))["views"] is None


@pytest.mark.asyncio
async def test_find_missing(articles: RecordRepository) -> None:
    """Test an unknown id raises RecordNotFound."""
    with pytest.raises(RecordNotFound) as exc_info:
        await articles.find(42)

    assert exc_info.value.record_id == 42
    assert await articles.exists(42) is False


@pytest.mark.asyncio
async def test_timestamps(articles: RecordRepository) -> None:
    """Test created_at / updated_at are filled on insert and update."""
    article = await articles.create(title="First Post")

    assert isinstance(article["created_at"], datetime)
    assert article["updated_at"] == article["created_at"]

    await articles.update(article, title="Edited")
    assert article["updated_at"] >= article["created_at"]
    assert (await articles.find(article.id))["updated_at"] == article["updated_at"]


@pytest.mark.asyncio
async def test_where(articles: RecordRepository) -> None:
    """Test conjunctive equality filtering."""
    await articles.create(title="First Post", views=1)
    await articles.create(title="Second Post", views=1)
    await articles.create(title="First Post", views=2)

    matches = await articles.where(title="First Post").to_list()
    narrowed = await articles.where(title="First Post", views=2).to_list()

    assert [a.id for a in matches] == [1, 3]
    assert [a.id for a in narrowed] == [3]
    assert await articles.where(title="Third Post").to_list() == []


@pytest.mark.asyncio
async def test_where_unknown_attribute(articles: RecordRepository) -> None:
    """Test filtering on an attribute without a column fails."""
    with pytest.raises(UnknownColumn):
        articles.where(author="nobody")
    with pytest.raises(TypeMismatch):
        articles.where(views="many")


@pytest.mark.asyncio
async def test_query_is_lazy_and_rescans(articles: RecordRepository) -> None:
    """Test each iteration runs the scan again."""
    query = articles.all()
    assert isinstance(query, RecordQuery)

    await articles.create(title="First Post")
    first_pass = [a.id async for a in query]
    await articles.create(title="Second Post")
    second_pass = [a.id async for a in query]

    assert first_pass == [1]
    assert second_pass == [1, 2]


@pytest.mark.asyncio
async def test_query_order_limit_first_count(articles: RecordRepository) -> None:
    """Test ordering, limiting and the terminal helpers."""
    for title, views in (("b", 2), ("a", 5), ("c", 1)):
        await articles.create(title=title, views=views)

    by_views = await articles.all().order_by("-views").to_list()
    top_two = await articles.all().order_by("title").limit(2).to_list()

    assert [a["title"] for a in by_views] == ["a", "b", "c"]
    assert [a["title"] for a in top_two] == ["a", "b"]
    assert (await articles.all().order_by("title DESC").first())["title"] == "c"
    assert await articles.where(title="missing").first() is None
    assert await articles.all().count() == 3
    assert await articles.all().limit(2).count() == 2
    assert await articles.count(views=5) == 1
    with pytest.raises(UnknownColumn):
        articles.all().order_by("popularity")


@pytest.mark.asyncio
async def test_query_includes(persistence: Persistence, articles: RecordRepository) -> None:
    """Test includes preloads associations for the query results."""
    first = await articles.create(title="First Post")
    await persistence.repository("Comment").create(article_id=first.id, body="Nice")

    loaded = await articles.all().includes("comments").to_list()

    hit, comments = loaded[0].cached_association("comments")
    assert hit is True
    assert [c["body"] for c in comments] == ["Nice"]


@pytest.mark.asyncio
async def test_find_by(articles: RecordRepository) -> None:
    """Test find_by returns the first match or None."""
    await articles.create(title="First Post")

    assert (await articles.find_by(title="First Post")).id == 1
    assert await articles.find_by(title="Other") is None


@pytest.mark.asyncio
async def test_update_writes_changed_columns_only(
    stubbed: Persistence, mock_store: AsyncMock
) -> None:
    """Test an update sends only the modified columns."""
    repository = stubbed.repository("Article")
    record = await repository.create(title="First Post")

    await repository.update(record, title="Edited")

    mock_store.update_row.assert_awaited_once_with("articles", 1, {"title": "Edited"})
    assert not record.changed


@pytest.mark.asyncio
async def test_update_without_id_raises(
    stubbed: Persistence, mock_store: AsyncMock
) -> None:
    """Test a persisted record that lost its key is refused before the store."""
    repository = stubbed.repository("Article")
    record = Record(
        stubbed.registry.get("Article"), {"title": "First Post"}, state=RecordState.PERSISTED
    )
    repository.mapper.assign(record, {"title": "Edited"})

    with pytest.raises(RecordNotFound):
        await repository.save(record)

    mock_store.update_row.assert_not_called()


@pytest.mark.asyncio
async def test_save_without_changes_skips_store(
    stubbed: Persistence, mock_store: AsyncMock
) -> None:
    """Test saving an unchanged persisted record writes nothing."""
    repository = stubbed.repository("Article")
    record = await repository.create(title="First Post")

    await repository.save(record)

    mock_store.update_row.assert_not_called()


@pytest.mark.asyncio
async def test_invalid_update_keeps_merged_values(articles: RecordRepository) -> None:
    """Test a failed update leaves the merged attributes and state in place."""
    article = await articles.create(title="First Post")

    with pytest.raises(ValidationError):
        await articles.update(article, title="")

    assert article["title"] == ""
    assert article.is_persisted
    assert article.changes == {"title": ("First Post", "")}
    assert [f.full_message for f in article.errors] == ["title can't be blank"]
    assert (await articles.find(article.id))["title"] == "First Post"


@pytest.mark.asyncio
async def test_missing_required_column(persistence: Persistence) -> None:
    """Test a non-nullable column without a value is refused at save time."""
    persistence.registry.get("Comment").validations = ()
    comments = persistence.repository("Comment")

    with pytest.raises(MissingRequiredColumn) as exc_info:
        await comments.create(article_id=1)

    assert exc_info.value.columns == ["body"]


@pytest.mark.asyncio
async def test_destroy_lifecycle(articles: RecordRepository) -> None:
    """Test destroy removes the row and later writes fail."""
    article = await articles.create(title="First Post")

    await articles.destroy(article)

    assert article.is_destroyed
    assert article["title"] == "First Post"
    with pytest.raises(RecordNotFound):
        await articles.find(article.id)
    with pytest.raises(AlreadyDestroyed):
        await articles.destroy(article)
    with pytest.raises(WriteAfterDestroy):
        await articles.save(article)
    with pytest.raises(WriteAfterDestroy):
        await articles.update(article, title="Back")


@pytest.mark.asyncio
async def test_destroy_new_record(
    stubbed: Persistence, mock_store: AsyncMock
) -> None:
    """Test destroying an unsaved record only changes its state."""
    repository = stubbed.repository("Article")
    record = repository.new(title="Draft")

    await repository.destroy(record)

    assert record.is_destroyed
    mock_store.delete_row.assert_not_called()


@pytest.mark.asyncio
async def test_reload(articles: RecordRepository, store: SQLiteStore) -> None:
    """Test reload discards local changes and cached associations."""
    article = await articles.create(title="First Post")
    await store.update_row("articles", article.id, {"title": "Changed elsewhere"})
    article.cache_association("comments", [])
    articles.mapper.assign(article, {"views": 9})

    await articles.reload(article)

    assert article["title"] == "Changed elsewhere"
    assert article["views"] == 0
    assert not article.changed
    assert article.cached_association("comments") == (False, None)


@pytest.mark.asyncio
async def test_persistence_save_dispatches_by_type(persistence: Persistence) -> None:
    """Test the facade-level save picks the record's repository."""
    comment = persistence.repository("Comment").new(article_id=1, body="Hi")

    await persistence.save(comment)

    assert comment.id == 1
    assert repr(persistence.repository("Comment")) == "RecordRepository(Comment)"
