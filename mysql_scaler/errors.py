"""Error taxonomy for the MySQL scaler.

Configuration and connection errors abort scaler construction. Query errors
are raised per evaluation and leave the scaler usable for the next call.
"""

from __future__ import annotations

from typing import Any


class ScalerError(Exception):
    """Base exception for scaler errors."""

    def __init__(self, message: str):
        """Initialize scaler error.

        Args:
            message: Error message.
        """
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary format.

        Returns:
            Dictionary with error details.
        """
        result = {
            'error': self.message,
            'type': type(self).__name__,
        }
        if self.__cause__ is not None:
            result['cause'] = str(self.__cause__)
        return result


class ConfigError(ScalerError):
    """Invalid or incomplete trigger configuration."""

    def __init__(self, message: str, field: str | None = None):
        """Initialize configuration error.

        Args:
            message: Error message.
            field: Configuration key that failed validation.
        """
        super().__init__(message)
        self.field = field

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.field:
            result['field'] = self.field
        return result


class DatabaseConnectionError(ScalerError):
    """Database unreachable, liveness probe failed, or close failed."""

    pass


class QueryError(ScalerError):
    """Query evaluation failed."""

    pass


class QueryResultError(QueryError):
    """Query result is not exactly one integer-coercible value."""

    pass


class EvaluationCancelled(QueryError):
    """Evaluation context was cancelled before the query finished."""

    pass


class EvaluationTimeout(EvaluationCancelled):
    """Evaluation context deadline passed before the query finished."""

    pass
