"""
Domain-specific exception hierarchy for the task scheduler.
"""


class TaskslotError(Exception):
    """Base class for all application-level errors."""


class InvalidRequestError(TaskslotError, ValueError):
    """Raised when a search or task request is rejected before any work starts."""


class NoAvailableSlotError(TaskslotError):
    """Raised when no free slot exists in the requested range."""


class CalendarAPIError(TaskslotError):
    """Raised when calendar data cannot be fetched, parsed or written."""


class AuthenticationError(TaskslotError):
    """Raised when the calendar rejects or lacks an access token."""
