"""
Google Calendar API client for reading busy times and booking tasks.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import pendulum
import requests
from pendulum import DateTime

from ..domain.exceptions import AuthenticationError, CalendarAPIError
from ..domain.models import Booking, TimeRange

logger = logging.getLogger(__name__)


class GoogleCalendarClient:
    """
    Client for Google Calendar v3 event operations.

    Uses the events collection of a single calendar: listing for busy
    times, insert/patch/delete for bookings. The access token is obtained
    elsewhere and handed in as-is.
    """

    API_ENDPOINT = "https://www.googleapis.com/calendar/v3"
    PAGE_SIZE = 250

    def __init__(
        self,
        access_token: str,
        calendar_id: str = "primary",
        timezone: str = "America/Los_Angeles",
        reminder_minutes: int = 20
    ):
        """
        Initialize the Google Calendar client.

        Args:
            access_token: Valid OAuth access token with calendar scope
            calendar_id: Calendar to read from and write to
            timezone: IANA timezone used for all-day events and new bookings
            reminder_minutes: Popup reminder lead time for new bookings
        """
        if not access_token:
            raise AuthenticationError("No Google Calendar access token provided.")

        self.access_token = access_token
        self.calendar_id = calendar_id
        self.timezone = timezone
        self.reminder_minutes = reminder_minutes
        self.headers = {
            "Authorization": f"Bearer {access_token}",
            "Content-Type": "application/json"
        }

    async def list_busy_intervals(
        self,
        range_start: DateTime,
        range_end: DateTime
    ) -> List[TimeRange]:
        return await asyncio.to_thread(self.get_busy_intervals, range_start, range_end)

    async def create_booking(
        self,
        title: str,
        description: str,
        start: DateTime,
        end: DateTime
    ) -> Booking:
        return await asyncio.to_thread(self.insert_event, title, description, start, end)

    async def update_booking(
        self,
        event_id: str,
        *,
        title: Optional[str] = None,
        description: Optional[str] = None,
        start: Optional[DateTime] = None,
        end: Optional[DateTime] = None
    ) -> None:
        await asyncio.to_thread(
            self.patch_event,
            event_id,
            title=title,
            description=description,
            start=start,
            end=end
        )

    async def delete_booking(self, event_id: str) -> None:
        await asyncio.to_thread(self.delete_event, event_id)

    def get_busy_intervals(
        self,
        range_start: DateTime,
        range_end: DateTime
    ) -> List[TimeRange]:
        """
        Get busy time ranges from the calendar's events.

        Recurring events are expanded into single instances. Cancelled events
        and events marked "show as free" are not busy.

        Args:
            range_start: Start of the time window
            range_end: End of the time window

        Returns:
            List of busy TimeRange objects in start order

        Raises:
            CalendarAPIError: If the API call fails
            AuthenticationError: If the token is rejected
        """
        params: Dict[str, Any] = {
            "timeMin": range_start.in_timezone(pendulum.UTC).to_iso8601_string(),
            "timeMax": range_end.in_timezone(pendulum.UTC).to_iso8601_string(),
            "singleEvents": "true",
            "orderBy": "startTime",
            "maxResults": self.PAGE_SIZE
        }

        busy_ranges: List[TimeRange] = []

        while True:
            data = self._request("GET", "/events", params=params)

            for event in data.get("items", []):
                busy = self._parse_event(event)
                if busy is not None:
                    busy_ranges.append(busy)

            page_token = data.get("nextPageToken")
            if not page_token:
                break
            params = {**params, "pageToken": page_token}

        return busy_ranges

    def insert_event(
        self,
        title: str,
        description: str,
        start: DateTime,
        end: DateTime
    ) -> Booking:
        """
        Create an event for a scheduled task.

        Returns:
            Booking with the event id and its calendar link
        """
        payload = {
            "summary": title,
            "description": description,
            "start": self._event_time(start),
            "end": self._event_time(end),
            "reminders": {
                "useDefault": False,
                "overrides": [
                    {"method": "popup", "minutes": self.reminder_minutes}
                ]
            }
        }

        logger.debug("Creating calendar event: %s", payload)
        data = self._request("POST", "/events", payload=payload)

        try:
            event_id = data["id"]
        except KeyError as e:
            raise CalendarAPIError(f"Event creation response has no id: {data}") from e

        booking = Booking(id=event_id, link=data.get("htmlLink") or "")
        logger.info("Created event %s (%s)", booking.id, booking.link)
        return booking

    def patch_event(
        self,
        event_id: str,
        *,
        title: Optional[str] = None,
        description: Optional[str] = None,
        start: Optional[DateTime] = None,
        end: Optional[DateTime] = None
    ) -> None:
        """Update only the given fields of an event."""
        payload: Dict[str, Any] = {}
        if title:
            payload["summary"] = title
        if description:
            payload["description"] = description
        if start is not None:
            payload["start"] = self._event_time(start)
        if end is not None:
            payload["end"] = self._event_time(end)

        if not payload:
            return

        self._request("PATCH", f"/events/{quote(event_id, safe='')}", payload=payload)

    def delete_event(self, event_id: str) -> None:
        """Delete an event."""
        self._request("DELETE", f"/events/{quote(event_id, safe='')}")

    def test_connection(self) -> Dict[str, Any]:
        """
        Test the connection and token by fetching the calendar resource.

        Returns:
            Calendar metadata (summary, timeZone, ...)
        """
        return self._request("GET", "", timeout=10)

    def _event_time(self, instant: DateTime) -> Dict[str, str]:
        return {
            "dateTime": instant.in_timezone(self.timezone).to_iso8601_string(),
            "timeZone": self.timezone
        }

    def _parse_event(self, event: Dict[str, Any]) -> Optional[TimeRange]:
        """
        Convert an API event into a busy TimeRange.

        Returns None for events that do not block time or cannot be parsed.
        """
        if event.get("status") == "cancelled" or event.get("transparency") == "transparent":
            return None

        try:
            start = self._parse_event_time(event["start"])
            end = self._parse_event_time(event["end"])
            return TimeRange(start=start, end=end)

        except (KeyError, ValueError) as e:
            logger.warning("Skipping calendar event %s: %s", event.get("id", "<unknown>"), e)
            return None

    def _parse_event_time(self, value: Dict[str, str]) -> DateTime:
        """
        Parse an event start/end object.

        Timed events carry ``dateTime`` with an offset; all-day events carry
        ``date`` and start at local midnight in the configured timezone.
        """
        if "dateTime" in value:
            dt = pendulum.parse(value["dateTime"], tz=self.timezone)
        elif "date" in value:
            dt = pendulum.parse(value["date"], tz=self.timezone)
        else:
            raise KeyError("dateTime")

        if isinstance(dt, DateTime):
            return dt

        raise ValueError(f"Could not parse datetime: {value}")

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        payload: Optional[Dict[str, Any]] = None,
        timeout: int = 30
    ) -> Dict[str, Any]:
        url = f"{self.API_ENDPOINT}/calendars/{quote(self.calendar_id, safe='')}{path}"

        try:
            response = requests.request(
                method,
                url,
                headers=self.headers,
                params=params,
                json=payload,
                timeout=timeout
            )
            response.raise_for_status()

        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            if status in (401, 403):
                raise AuthenticationError(
                    f"Google Calendar rejected the access token ({status})"
                ) from e
            raise CalendarAPIError(f"Google Calendar request {method} {path or '/'} failed: {e}") from e

        except requests.exceptions.RequestException as e:
            raise CalendarAPIError(f"Failed to reach Google Calendar: {e}") from e

        if response.status_code == 204 or not response.content:
            return {}

        try:
            return response.json()
        except ValueError as e:
            raise CalendarAPIError(f"Invalid JSON from Google Calendar: {e}") from e
