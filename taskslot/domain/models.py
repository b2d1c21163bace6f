"""
Domain models for time ranges, scheduling windows and slot searches.
"""

from dataclasses import dataclass, field
from typing import Iterable, Iterator, Tuple

from pendulum import DateTime

from .exceptions import InvalidRequestError


@dataclass(frozen=True)
class TimeRange:
    """
    Represents an immutable time range with start and end datetime.

    Invariant: start must be before end.
    """
    start: DateTime
    end: DateTime

    def __post_init__(self):
        if self.start >= self.end:
            raise ValueError(f"Start time {self.start} must be before end time {self.end}")

    def duration_minutes(self) -> int:
        """Return the duration in minutes."""
        return int((self.end - self.start).total_seconds() / 60)

    def overlaps(self, other: "TimeRange") -> bool:
        """Check if this range overlaps with another (touching ends do not count)."""
        return self.start < other.end and self.end > other.start

    def format_display(self, timezone: str) -> str:
        """
        Format the range for display in the given timezone.
        Format: Ddd, Mmm D YYYY | HH:mm – HH:mm (N min)
        """
        start = self.start.in_timezone(timezone)
        end = self.end.in_timezone(timezone)

        date_str = start.format("ddd, MMM D YYYY")
        time_str = f"{start.format('HH:mm')} – {end.format('HH:mm')}"

        return f"{date_str} | {time_str} ({self.duration_minutes()} min)"

    def __str__(self) -> str:
        return f"{self.start.to_iso8601_string()} - {self.end.to_iso8601_string()}"


@dataclass(frozen=True)
class SchedulingWindow:
    """
    Daily window during which new bookings may be placed.

    Hours are wall-clock hours in ``timezone``; an ``end_hour`` of 24 keeps
    the window open through the end of the day.
    """
    timezone: str = "America/Los_Angeles"
    start_hour: int = 5
    end_hour: int = 24

    def __post_init__(self):
        if not 0 <= self.start_hour < 24:
            raise ValueError(f"start_hour must be between 0 and 23, got {self.start_hour}")
        if not 0 < self.end_hour <= 24:
            raise ValueError(f"end_hour must be between 1 and 24, got {self.end_hour}")
        if self.start_hour >= self.end_hour:
            raise ValueError(
                f"start_hour ({self.start_hour}) must be before end_hour ({self.end_hour})"
            )

    def __str__(self) -> str:
        return f"{self.start_hour:02d}:00 - {self.end_hour:02d}:00 {self.timezone}"


@dataclass(frozen=True)
class SearchRequest:
    """
    Parameters of a single slot search.

    Raises InvalidRequestError on construction when the request cannot be
    searched, so nothing is enumerated for a bad request.
    """
    duration_minutes: int
    range_start: DateTime
    range_end: DateTime
    step_minutes: int = 30
    max_candidates: int = 500

    def __post_init__(self):
        if self.duration_minutes <= 0:
            raise InvalidRequestError(
                f"duration_minutes must be greater than zero, got {self.duration_minutes}"
            )
        if self.step_minutes <= 0:
            raise InvalidRequestError(
                f"step_minutes must be greater than zero, got {self.step_minutes}"
            )
        if self.max_candidates <= 0:
            raise InvalidRequestError(
                f"max_candidates must be greater than zero, got {self.max_candidates}"
            )
        if self.range_start >= self.range_end:
            raise InvalidRequestError(
                f"Search start {self.range_start} must be before search end {self.range_end}"
            )


@dataclass(frozen=True)
class BusyIntervalSet:
    """
    Existing commitments used for overlap testing.

    Intervals are kept sorted by start; duplicates and overlapping
    commitments are allowed.
    """
    intervals: Tuple[TimeRange, ...] = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(
            self,
            "intervals",
            tuple(sorted(self.intervals, key=lambda r: r.start))
        )

    @classmethod
    def from_ranges(cls, ranges: Iterable[TimeRange]) -> "BusyIntervalSet":
        return cls(intervals=tuple(ranges))

    def overlaps(self, candidate: TimeRange) -> bool:
        """Return True if any busy interval overlaps the candidate."""
        for busy in self.intervals:
            if busy.start >= candidate.end:
                # Sorted by start: nothing later can overlap
                break
            if candidate.overlaps(busy):
                return True
        return False

    def __iter__(self) -> Iterator[TimeRange]:
        return iter(self.intervals)

    def __len__(self) -> int:
        return len(self.intervals)


@dataclass(frozen=True)
class Booking:
    """A calendar event created for a scheduled task."""
    id: str
    link: str = ""


@dataclass(frozen=True)
class ScheduledTask:
    """
    Outcome of scheduling a task: the chosen slot and its calendar booking.
    """
    title: str
    slot: TimeRange
    booking: Booking

    def summary(self, timezone: str) -> str:
        """Human readable confirmation message."""
        start = self.slot.start.in_timezone(timezone)
        scheduled_time = start.format("ddd, MMM D, h:mm A")
        message = (
            f'Task "{self.title}" scheduled for {scheduled_time} '
            f"({self.slot.duration_minutes()} minutes)"
        )
        if self.booking.link:
            message += f"\n\nView event: {self.booking.link}"
        return message
