"""
Domain layer - Pure business logic without external dependencies.
"""

from .exceptions import (
    AuthenticationError,
    CalendarAPIError,
    InvalidRequestError,
    NoAvailableSlotError,
    TaskslotError,
)
from .models import (
    Booking,
    BusyIntervalSet,
    ScheduledTask,
    SchedulingWindow,
    SearchRequest,
    TimeRange,
)
from .slot_calculator import SlotCalculator

__all__ = [
    "AuthenticationError",
    "Booking",
    "BusyIntervalSet",
    "CalendarAPIError",
    "InvalidRequestError",
    "NoAvailableSlotError",
    "ScheduledTask",
    "SchedulingWindow",
    "SearchRequest",
    "SlotCalculator",
    "TaskslotError",
    "TimeRange",
]
