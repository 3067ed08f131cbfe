"""Failure kinds raised by the quote submission pipeline."""

from __future__ import annotations


class QuoteError(Exception):
    """Base class for every failure the pipeline reports."""

    def __init__(self, message: str, job_reference: str = "") -> None:
        super().__init__(message)
        self.message = message
        self.job_reference = job_reference


class ValidationError(QuoteError):
    """Missing required field or malformed email. Raised before any side effect."""

    def __init__(self, message: str, fields: list[str]) -> None:
        super().__init__(message)
        self.fields = list(fields)


class RenderError(QuoteError):
    """The job sheet could not be drawn."""


class StorageError(QuoteError):
    """The job sheet upload failed."""


class PersistenceError(QuoteError):
    """The submissions row could not be inserted."""


class NotificationError(QuoteError):
    """The business notification email was not accepted."""


class AcknowledgementError(QuoteError):
    """The customer acknowledgement email was not accepted. Logged by the runner, never raised to the caller."""
