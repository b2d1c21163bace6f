"""
Scheduling-window policy.

All checks work on wall-clock time in the window's reference timezone, so
daylight-saving transitions shift the accepted instants on the exact dates
the zone rules say they happen.
"""

import pendulum
from pendulum import DateTime

from .models import SchedulingWindow, TimeRange


def local_hour(instant: DateTime, timezone: str) -> int:
    """Return the wall-clock hour of an instant in the given timezone."""
    return instant.in_timezone(timezone).hour


def is_instant_within_window(instant: DateTime, window: SchedulingWindow) -> bool:
    """Check whether the instant's local hour lies in [start_hour, end_hour)."""
    hour = local_hour(instant, window.timezone)
    return window.start_hour <= hour < window.end_hour


def is_interval_within_window(interval: TimeRange, window: SchedulingWindow) -> bool:
    """
    Check whether an interval may be booked inside the window.

    The start must lie strictly inside the window while the end may touch
    ``end_hour`` exactly (a task can finish at midnight when the window
    closes at 24). The end is measured in wall-clock hours from midnight
    of the start's local day, so 00:20 the following day counts as 24.33.
    """
    if not is_instant_within_window(interval.start, window):
        return False

    return _hours_since_start_day(interval, window.timezone) <= window.end_hour


def next_window_start(instant: DateTime, window: SchedulingWindow) -> DateTime:
    """
    Return the next moment the window opens, or the instant itself if it
    is already inside the window.

    Before the window the target is ``start_hour:00`` the same local day;
    at or after ``end_hour`` it is ``start_hour:00`` the next local day.
    A ``start_hour`` skipped by a daylight-saving jump resolves to the first
    wall time after the gap; a repeated one resolves to its first occurrence.
    """
    local = instant.in_timezone(window.timezone)

    if window.start_hour <= local.hour < window.end_hour:
        return instant

    if local.hour >= window.end_hour:
        local = local.add(days=1)

    return _wall_time(local, window.start_hour, window.timezone)


def _wall_time(day: DateTime, hour: int, timezone: str) -> DateTime:
    target = pendulum.datetime(day.year, day.month, day.day, hour, tz=timezone, fold=0)

    # fold=0 shifts a non-existent time backwards out of the gap
    if target.hour != hour:
        target = pendulum.datetime(day.year, day.month, day.day, hour, tz=timezone, fold=1)

    return target


def _hours_since_start_day(interval: TimeRange, timezone: str) -> float:
    local_start = interval.start.in_timezone(timezone)
    local_end = interval.end.in_timezone(timezone)

    day_offset = local_end.toordinal() - local_start.toordinal()

    return (
        day_offset * 24
        + local_end.hour
        + local_end.minute / 60
        + (local_end.second + local_end.microsecond / 1_000_000) / 3600
    )
