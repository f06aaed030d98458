"""Tests for the validation pipeline."""

from tablewright.models import Record, RecordType, length, numericality, presence
from tablewright.services import ValidationPipeline


def test_collects_every_failure_in_declaration_order() -> None:
    """Test rules keep running after a failure."""
    article_type = RecordType(
        "Article",
        validations=[
            presence("title"),
            length("body", minimum=10),
            numericality("views", greater_than=-1),
            presence("body"),
        ],
    )
    record = Record(article_type, {"title": "", "body": "short", "views": 3})

    failures = ValidationPipeline().validate(record)

    assert [f.full_message for f in failures] == [
        "title can't be blank",
        "body is too short (minimum is 10 characters)",
    ]


def test_valid_record_is_left_unchanged() -> None:
    """Test validation neither fails nor modifies a valid record."""
    article_type = RecordType("Article", validations=[presence("title")])
    record = Record(article_type, {"title": "First Post"})
    pipeline = ValidationPipeline()

    assert pipeline.validate(record) == []
    assert pipeline.is_valid(record)
    assert record.attributes == {"id": None, "title": "First Post"}
    assert record.errors == []


def test_type_without_rules_is_valid() -> None:
    """Test a record type without validations always passes."""
    assert ValidationPipeline().is_valid(Record(RecordType("Tag")))
