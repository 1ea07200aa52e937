"""
Typed errors raised by the analytics engine.

Each error also derives from ``ValueError`` so callers that already guard
analysis calls with ``except ValueError`` keep working.
"""

from collections.abc import Sequence


class AnalyticsError(ValueError):
    """Base class for all analytics engine errors."""

    kind = "AnalyticsError"


class DataQualityError(AnalyticsError):
    """A transaction row is missing a required field or holds an unparseable value."""

    kind = "DataQualityError"

    def __init__(self, message: str, row_index: int | None = None, fields: Sequence[str] = ()):
        super().__init__(message)
        self.row_index = row_index
        self.fields = tuple(fields)


class ConfigurationError(AnalyticsError):
    """Invalid parameters: empty vocabulary, bad cluster count, mismatched shapes."""

    kind = "ConfigurationError"


class OutOfRangeError(AnalyticsError):
    """A customer or product id lies outside a trained model's universe."""

    kind = "OutOfRangeError"


class EmptyInputError(AnalyticsError):
    """An operation that needs at least one example was given none."""

    kind = "EmptyInputError"
