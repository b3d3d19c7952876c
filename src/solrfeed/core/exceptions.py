"""Translation-layer exceptions."""

from __future__ import annotations


class FeedError(Exception):
    """Base exception for feed translation and publication errors."""


class RecordError(FeedError):
    """Raised when a single record cannot be translated.

    Attributes:
        position: Zero-based position of the record within its page.
        field: Name of the offending record field.
    """

    def __init__(self, message: str, *, position: int, field: str) -> None:
        super().__init__(message)
        self.position = position
        self.field = field


class MissingRequiredFieldError(RecordError):
    """Raised when a record lacks a value for a required field."""


class MalformedRecordError(RecordError):
    """Raised when a record value cannot be represented in the feed."""


class PagingIndexMismatchError(FeedError):
    """Raised when the feed start index base disagrees with the description."""


class UpstreamQueryError(FeedError):
    """Raised when the Query Executor fails or times out."""


class InvalidRequestError(FeedError):
    """Raised when feed request parameters are unusable (e.g. unknown sort field)."""
