"""
Tests for domain models.
"""

import pendulum
import pytest

from taskslot.domain.exceptions import InvalidRequestError
from taskslot.domain.models import (
    Booking,
    BusyIntervalSet,
    ScheduledTask,
    SchedulingWindow,
    SearchRequest,
    TimeRange,
)

TZ = "America/Los_Angeles"


def _range(start: str, end: str) -> TimeRange:
    return TimeRange(start=pendulum.parse(start, tz=TZ), end=pendulum.parse(end, tz=TZ))


class TestTimeRange:
    """Tests for TimeRange model."""

    def test_create_valid_time_range(self):
        """Test creating a valid time range."""
        start = pendulum.parse("2025-01-06 09:00", tz=TZ)
        end = pendulum.parse("2025-01-06 17:00", tz=TZ)

        tr = TimeRange(start=start, end=end)

        assert tr.start == start
        assert tr.end == end
        assert tr.duration_minutes() == 480  # 8 hours

    def test_invalid_time_range_raises_error(self):
        """Test that creating an invalid time range raises ValueError."""
        start = pendulum.parse("2025-01-06 17:00", tz=TZ)
        end = pendulum.parse("2025-01-06 09:00", tz=TZ)

        with pytest.raises(ValueError, match="Start time .* must be before end time"):
            TimeRange(start=start, end=end)

    def test_zero_length_range_raises_error(self):
        instant = pendulum.parse("2025-01-06 09:00", tz=TZ)

        with pytest.raises(ValueError):
            TimeRange(start=instant, end=instant)

    def test_overlaps(self):
        """Test overlap detection."""
        tr1 = _range("2025-01-06 09:00", "2025-01-06 12:00")
        tr2 = _range("2025-01-06 11:00", "2025-01-06 14:00")
        tr3 = _range("2025-01-06 14:00", "2025-01-06 17:00")

        assert tr1.overlaps(tr2)
        assert tr2.overlaps(tr1)
        assert not tr1.overlaps(tr3)

    def test_touching_ranges_do_not_overlap(self):
        tr1 = _range("2025-01-06 09:00", "2025-01-06 10:00")
        tr2 = _range("2025-01-06 10:00", "2025-01-06 11:00")

        assert not tr1.overlaps(tr2)
        assert not tr2.overlaps(tr1)

    def test_format_display(self):
        tr = TimeRange(
            start=pendulum.datetime(2025, 1, 6, 17, 0, tz="UTC"),
            end=pendulum.datetime(2025, 1, 6, 18, 0, tz="UTC"),
        )

        assert tr.format_display(TZ) == "Mon, Jan 6 2025 | 09:00 – 10:00 (60 min)"


class TestSchedulingWindow:
    """Tests for SchedulingWindow model."""

    def test_defaults(self):
        window = SchedulingWindow()

        assert window.timezone == "America/Los_Angeles"
        assert window.start_hour == 5
        assert window.end_hour == 24

    @pytest.mark.parametrize(
        "start_hour, end_hour",
        [(-1, 10), (24, 24), (5, 25), (5, 0), (10, 10), (12, 9)],
    )
    def test_invalid_hours_raise_error(self, start_hour, end_hour):
        with pytest.raises(ValueError):
            SchedulingWindow(timezone=TZ, start_hour=start_hour, end_hour=end_hour)

    def test_full_day_window_is_valid(self):
        window = SchedulingWindow(timezone=TZ, start_hour=0, end_hour=24)

        assert str(window) == "00:00 - 24:00 America/Los_Angeles"


class TestSearchRequest:
    """Tests for SearchRequest validation."""

    def test_valid_request_has_defaults(self):
        request = SearchRequest(
            duration_minutes=30,
            range_start=pendulum.parse("2025-01-06 08:00", tz=TZ),
            range_end=pendulum.parse("2025-01-06 18:00", tz=TZ),
        )

        assert request.step_minutes == 30
        assert request.max_candidates == 500

    @pytest.mark.parametrize("duration", [0, -30])
    def test_non_positive_duration_rejected(self, duration):
        with pytest.raises(InvalidRequestError, match="duration_minutes"):
            SearchRequest(
                duration_minutes=duration,
                range_start=pendulum.parse("2025-01-06 08:00", tz=TZ),
                range_end=pendulum.parse("2025-01-06 18:00", tz=TZ),
            )

    def test_empty_range_rejected(self):
        instant = pendulum.parse("2025-01-06 08:00", tz=TZ)

        with pytest.raises(InvalidRequestError, match="must be before"):
            SearchRequest(duration_minutes=30, range_start=instant, range_end=instant)

    def test_non_positive_step_and_cap_rejected(self):
        start = pendulum.parse("2025-01-06 08:00", tz=TZ)
        end = pendulum.parse("2025-01-06 18:00", tz=TZ)

        with pytest.raises(InvalidRequestError, match="step_minutes"):
            SearchRequest(duration_minutes=30, range_start=start, range_end=end, step_minutes=0)

        with pytest.raises(InvalidRequestError, match="max_candidates"):
            SearchRequest(duration_minutes=30, range_start=start, range_end=end, max_candidates=0)

    def test_invalid_request_is_a_value_error(self):
        instant = pendulum.parse("2025-01-06 08:00", tz=TZ)

        with pytest.raises(ValueError):
            SearchRequest(duration_minutes=30, range_start=instant, range_end=instant)


class TestBusyIntervalSet:
    """Tests for BusyIntervalSet overlap checks."""

    def test_intervals_sorted_by_start(self):
        late = _range("2025-01-06 14:00", "2025-01-06 15:00")
        early = _range("2025-01-06 09:00", "2025-01-06 10:00")

        busy = BusyIntervalSet.from_ranges([late, early])

        assert list(busy) == [early, late]
        assert len(busy) == 2

    def test_overlaps_any(self):
        busy = BusyIntervalSet.from_ranges([
            _range("2025-01-06 09:00", "2025-01-06 10:00"),
            _range("2025-01-06 14:00", "2025-01-06 15:00"),
        ])

        assert busy.overlaps(_range("2025-01-06 14:30", "2025-01-06 15:30"))
        assert busy.overlaps(_range("2025-01-06 08:00", "2025-01-06 18:00"))
        assert not busy.overlaps(_range("2025-01-06 10:00", "2025-01-06 14:00"))

    def test_boundary_touch_is_not_conflict(self):
        busy = BusyIntervalSet.from_ranges([_range("2025-01-06 09:00", "2025-01-06 10:00")])

        assert not busy.overlaps(_range("2025-01-06 08:30", "2025-01-06 09:00"))
        assert not busy.overlaps(_range("2025-01-06 10:00", "2025-01-06 10:30"))

    def test_duplicates_and_nested_intervals(self):
        busy = BusyIntervalSet.from_ranges([
            _range("2025-01-06 09:00", "2025-01-06 17:00"),
            _range("2025-01-06 09:00", "2025-01-06 17:00"),
            _range("2025-01-06 11:00", "2025-01-06 12:00"),
        ])

        assert busy.overlaps(_range("2025-01-06 15:00", "2025-01-06 15:30"))
        assert not busy.overlaps(_range("2025-01-06 17:00", "2025-01-06 17:30"))

    def test_empty_set_never_overlaps(self):
        assert not BusyIntervalSet().overlaps(_range("2025-01-06 09:00", "2025-01-06 10:00"))


class TestScheduledTask:
    """Tests for the scheduling confirmation message."""

    def test_summary(self):
        scheduled = ScheduledTask(
            title="Write report",
            slot=_range("2025-01-06 16:00", "2025-01-06 17:00"),
            booking=Booking(id="evt1", link="https://calendar.google.com/event?eid=evt1"),
        )

        assert scheduled.summary(TZ) == (
            'Task "Write report" scheduled for Mon, Jan 6, 4:00 PM (60 minutes)\n\n'
            "View event: https://calendar.google.com/event?eid=evt1"
        )

    def test_summary_without_link(self):
        scheduled = ScheduledTask(
            title="Write report",
            slot=_range("2025-01-06 16:00", "2025-01-06 16:30"),
            booking=Booking(id="evt1"),
        )

        assert "View event" not in scheduled.summary(TZ)
