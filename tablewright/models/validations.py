"""Validation rules attached to record types."""

import re
from collections.abc import Callable, Collection
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from tablewright.models.record import Record


@dataclass(frozen=True)
class ValidationFailure:
    """A failed rule: the attribute it concerns and a readable message."""

    attribute: str
    message: str

    @property
    def full_message(self) -> str:
        """Message prefixed with the attribute name, e.g. "title can't be blank"."""
        return f"{self.attribute} {self.message}"


@dataclass(frozen=True)
class ValidationRule:
    """A predicate over a record plus the message reported when it fails."""

    attribute: str
    predicate: Callable[["Record"], bool]
    message: str

    def check(self, record: "Record") -> ValidationFailure | None:
        if self.predicate(record):
            return None
        return ValidationFailure(self.attribute, self.message)


def is_blank(value: Any) -> bool:
    """Check if a value is absent, empty, or whitespace-only text."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, Collection):
        return len(value) == 0
    return False


def _skip_none(check: Callable[[Any], bool], attribute: str) -> Callable[["Record"], bool]:
    """Wrap a value check so absent values pass (presence handles those)."""

    def predicate(record: "Record") -> bool:
        value = record.get(attribute)
        return value is None or check(value)

    return predicate


def presence(attribute: str, message: str = "can't be blank") -> ValidationRule:
    """Require a non-blank value."""
    return ValidationRule(
        attribute, lambda record: not is_blank(record.get(attribute)), message
    )


def length(
    attribute: str,
    minimum: int | None = None,
    maximum: int | None = None,
    message: str | None = None,
) -> ValidationRule:
    """Bound the length of a textual (or collection) value."""
    if minimum is None and maximum is None:
        raise ValueError("length() needs a minimum or a maximum")

    if message is None:
        if minimum is not None and maximum is not None:
            message = f"length must be between {minimum} and {maximum}"
        elif minimum is not None:
            message = f"is too short (minimum is {minimum} characters)"
        else:
            message = f"is too long (maximum is {maximum} characters)"

    def check(value: Any) -> bool:
        # Non-textual scalars are measured by their text form
        size = len(value) if isinstance(value, (str, Collection)) else len(str(value))
        if minimum is not None and size < minimum:
            return False
        return maximum is None or size <= maximum

    return ValidationRule(attribute, _skip_none(check, attribute), message)


def numericality(
    attribute: str,
    only_integer: bool = False,
    greater_than: float | None = None,
    less_than: float | None = None,
    message: str | None = None,
) -> ValidationRule:
    """Require a number, optionally an integer within bounds."""

    def check(value: Any) -> bool:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return False
        if only_integer and not float(value).is_integer():
            return False
        if greater_than is not None and not value > greater_than:
            return False
        return less_than is None or value < less_than

    if message is None:
        message = "must be an integer" if only_integer else "is not a number"
        if greater_than is not None:
            message += f" greater than {greater_than}"
        if less_than is not None:
            message += f" less than {less_than}"

    return ValidationRule(attribute, _skip_none(check, attribute), message)


def matches(attribute: str, pattern: str, message: str = "is invalid") -> ValidationRule:
    """Require textual values to match a regular expression."""
    compiled = re.compile(pattern)
    return ValidationRule(
        attribute,
        _skip_none(lambda value: bool(compiled.search(str(value))), attribute),
        message,
    )


def inclusion(
    attribute: str,
    choices: Collection[Any],
    message: str = "is not included in the list",
) -> ValidationRule:
    """Require the value to be one of ``choices``."""
    allowed = tuple(choices)
    return ValidationRule(
        attribute, _skip_none(lambda value: value in allowed, attribute), message
    )


def rule(
    attribute: str, predicate: Callable[["Record"], bool], message: str
) -> ValidationRule:
    """Custom rule from a predicate over the whole record."""
    return ValidationRule(attribute, predicate, message)
