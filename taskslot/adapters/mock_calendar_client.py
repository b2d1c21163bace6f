"""
Mock calendar client for running without a Google account.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import pendulum
from pendulum import DateTime

from ..domain.exceptions import CalendarAPIError
from ..domain.models import Booking, TimeRange

logger = logging.getLogger(__name__)

DEFAULT_DATA_FILE = Path(__file__).parent / "mock_calendar_data.json"


class MockCalendarClient:
    """
    Mock client that simulates a calendar from a JSON file.

    Events are loaded from ``mock_calendar_data.json`` (or the given file);
    bookings are kept in memory and show up as busy in later searches.
    """

    def __init__(
        self,
        data_file: Optional[Path] = None,
        timezone: str = "America/Los_Angeles"
    ):
        """
        Initialize the mock client.

        Args:
            data_file: JSON file with a list of {id, summary, start, end} events
            timezone: IANA timezone for event times without an offset
        """
        self.data_file = data_file or DEFAULT_DATA_FILE
        self.timezone = timezone
        self.bookings: Dict[str, Dict[str, Any]] = {}
        self._next_id = 1
        self._load_calendar_data()

    def _load_calendar_data(self):
        """Load mock calendar data from JSON file."""
        if self.data_file.exists():
            with open(self.data_file, "r", encoding="utf-8") as f:
                self.calendar_events: List[Dict[str, Any]] = json.load(f)
        else:
            logger.warning("Mock calendar file %s not found, starting empty", self.data_file)
            self.calendar_events = []

    async def list_busy_intervals(
        self,
        range_start: DateTime,
        range_end: DateTime
    ) -> List[TimeRange]:
        """
        Load busy times from the mock events and bookings.

        Only events overlapping the requested window are returned.
        """
        busy_ranges: List[TimeRange] = []

        for event in [*self.calendar_events, *self.bookings.values()]:
            try:
                event_start = pendulum.parse(event["start"], tz=self.timezone)
                event_end = pendulum.parse(event["end"], tz=self.timezone)
                busy = TimeRange(start=event_start, end=event_end)

            except (KeyError, ValueError) as e:
                logger.warning("Skipping mock event %s: %s", event.get("id", "<unknown>"), e)
                continue

            if busy.start < range_end and busy.end > range_start:
                busy_ranges.append(busy)

        return sorted(busy_ranges, key=lambda r: r.start)

    async def create_booking(
        self,
        title: str,
        description: str,
        start: DateTime,
        end: DateTime
    ) -> Booking:
        """Record a booking in memory."""
        event_id = f"mock-event-{self._next_id}"
        self._next_id += 1

        self.bookings[event_id] = {
            "id": event_id,
            "summary": title,
            "description": description,
            "start": start.to_iso8601_string(),
            "end": end.to_iso8601_string()
        }

        return Booking(
            id=event_id,
            link=f"https://calendar.google.com/calendar/event?eid={event_id}"
        )

    async def update_booking(
        self,
        event_id: str,
        *,
        title: Optional[str] = None,
        description: Optional[str] = None,
        start: Optional[DateTime] = None,
        end: Optional[DateTime] = None
    ) -> None:
        booking = self._get_booking(event_id)
        if title:
            booking["summary"] = title
        if description:
            booking["description"] = description
        if start is not None:
            booking["start"] = start.to_iso8601_string()
        if end is not None:
            booking["end"] = end.to_iso8601_string()

    async def delete_booking(self, event_id: str) -> None:
        self._get_booking(event_id)
        del self.bookings[event_id]

    def test_connection(self) -> Dict[str, Any]:
        """
        Mock connection test.

        Returns:
            Mock calendar metadata
        """
        return {
            "id": "primary",
            "summary": "Mock Calendar",
            "timeZone": self.timezone
        }

    def _get_booking(self, event_id: str) -> Dict[str, Any]:
        try:
            return self.bookings[event_id]
        except KeyError as e:
            raise CalendarAPIError(f"Event not found: {event_id}") from e
