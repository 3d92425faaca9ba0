"""Exception hierarchy for the Naive Bayes text classifier."""

from __future__ import annotations


class NaiveBayesError(Exception):
    """Base class for all classifier errors."""


class ConfigurationError(NaiveBayesError, TypeError):
    """Raised when classifier options are malformed.

    Raised from the constructor, before any state is created.
    """


class SnapshotValidationError(NaiveBayesError, ValueError):
    """Raised when a snapshot cannot be imported.

    Attributes:
        field: Name of the missing or malformed snapshot field, if any.
    """

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class NotTrainedError(NaiveBayesError, RuntimeError):
    """Raised when inference is requested before anything was learned."""
