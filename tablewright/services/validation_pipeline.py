"""Run a record type's validation rules against a record."""

from tablewright.models.record import Record
from tablewright.models.validations import ValidationFailure


class ValidationPipeline:
    """Evaluate validation rules in declaration order.

    Every rule runs even after an earlier one fails, so a single call reports
    all violations. The pipeline never touches the store and never changes
    the record.
    """

    def validate(self, record: Record) -> list[ValidationFailure]:
        """Return every failure; an empty list means the record is valid."""
        failures: list[ValidationFailure] = []
        for validation_rule in record.record_type.validations:
            failure = validation_rule.check(record)
            if failure is not None:
                failures.append(failure)
        return failures

    def is_valid(self, record: Record) -> bool:
        return not self.validate(record)
