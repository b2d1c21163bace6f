"""
Application services for finding free slots and booking tasks.

The service coordinates fetching busy intervals via a calendar client
adapter and delegates the actual availability calculation to the
domain-level ``SlotCalculator``. The calendar dependency is passed in
explicitly so the real Google adapter, the mock adapter or a test stub can
be plugged in.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Protocol

import pendulum
from pendulum import DateTime

from ..domain.exceptions import NoAvailableSlotError
from ..domain.models import Booking, BusyIntervalSet, ScheduledTask, SearchRequest, TimeRange
from ..domain.slot_calculator import SlotCalculator
from .task_request import TaskRequest

logger = logging.getLogger(__name__)


class CalendarClientProtocol(Protocol):
    """Protocol describing the calendar client behaviour needed by the service."""

    async def list_busy_intervals(
        self,
        range_start: DateTime,
        range_end: DateTime,
    ) -> List[TimeRange]:
        """Return existing commitments overlapping the range."""

    async def create_booking(
        self,
        title: str,
        description: str,
        start: DateTime,
        end: DateTime,
    ) -> Booking:
        """Create a calendar event and return its id and link."""

    async def update_booking(
        self,
        event_id: str,
        *,
        title: Optional[str] = None,
        description: Optional[str] = None,
        start: Optional[DateTime] = None,
        end: Optional[DateTime] = None,
    ) -> None:
        """Change fields of an existing event."""

    async def delete_booking(self, event_id: str) -> None:
        """Remove an event."""


class TaskSchedulerService:
    """
    Orchestrates busy-interval retrieval, slot search and booking.

    Calendar failures are propagated unchanged; nothing is retried here.
    """

    def __init__(
        self,
        calendar_client: CalendarClientProtocol,
        slot_calculator: SlotCalculator,
        *,
        step_minutes: int = 30,
        max_candidates: int = 500,
        default_duration_minutes: int = 60,
        min_search_days: int = 7,
    ) -> None:
        self._calendar_client = calendar_client
        self._slot_calculator = slot_calculator
        self._step_minutes = step_minutes
        self._max_candidates = max_candidates
        self._default_duration_minutes = default_duration_minutes
        self._min_search_days = min_search_days

    @property
    def timezone(self) -> str:
        return self._slot_calculator.window.timezone

    async def find_available_slots(
        self,
        duration_minutes: int,
        search_start: DateTime,
        search_end: DateTime,
    ) -> List[TimeRange]:
        """
        Retrieve busy data and compute free slots of the given duration.

        The request is validated before the calendar is queried.
        """
        request = SearchRequest(
            duration_minutes=duration_minutes,
            range_start=search_start,
            range_end=search_end,
            step_minutes=self._step_minutes,
            max_candidates=self._max_candidates,
        )

        busy = await self.fetch_busy_intervals(
            range_start=request.range_start,
            range_end=request.range_end,
        )

        return self.calculate_slots(request=request, busy=busy)

    async def fetch_busy_intervals(
        self,
        *,
        range_start: DateTime,
        range_end: DateTime,
    ) -> BusyIntervalSet:
        """Fetch existing commitments for the search range."""
        busy_ranges = await self._calendar_client.list_busy_intervals(
            range_start=range_start,
            range_end=range_end,
        )
        logger.debug("Found %d existing event(s) in calendar", len(busy_ranges))

        return BusyIntervalSet.from_ranges(busy_ranges)

    def calculate_slots(
        self,
        *,
        request: SearchRequest,
        busy: BusyIntervalSet,
    ) -> List[TimeRange]:
        """Calculate free slots from busy data."""
        return self._slot_calculator.find_available_slots(request=request, busy=busy)

    async def schedule_task(
        self,
        task: TaskRequest,
        *,
        now: Optional[DateTime] = None,
    ) -> ScheduledTask:
        """
        Book the earliest free slot for a task.

        The search starts now, or at the preferred start when that lies in
        the future, and runs for at least ``min_search_days`` or up to the
        deadline when that is later.

        Raises:
            NoAvailableSlotError: If no slot fits the search range
        """
        now = now or pendulum.now(pendulum.UTC)
        duration = task.estimated_duration or self._default_duration_minutes

        search_start = now
        preferred_start = task.preferred_start_in(self.timezone)
        if preferred_start is not None and preferred_start > now:
            search_start = preferred_start

        search_end = search_start.add(days=self._min_search_days)
        deadline = task.deadline_in(self.timezone)
        if deadline is not None and deadline > search_end:
            search_end = deadline

        logger.debug(
            "Scheduling %r: %d min between %s and %s (preferred start %s, deadline %s)",
            task.title,
            duration,
            search_start,
            search_end,
            preferred_start,
            deadline,
        )

        slots = await self.find_available_slots(
            duration_minutes=duration,
            search_start=search_start,
            search_end=search_end,
        )

        slot = self._slot_calculator.select_slot(slots)
        if slot is None:
            raise NoAvailableSlotError(
                f"No available {duration}-minute slot between "
                f"{search_start.in_timezone(self.timezone).format('YYYY-MM-DD HH:mm')} and "
                f"{search_end.in_timezone(self.timezone).format('YYYY-MM-DD HH:mm')} "
                f"({self.timezone})"
            )

        booking = await self._calendar_client.create_booking(
            title=task.title,
            description=task.description,
            start=slot.start,
            end=slot.end,
        )
        logger.info("Booked %r at %s as event %s", task.title, slot, booking.id)

        return ScheduledTask(title=task.title, slot=slot, booking=booking)

    async def cancel_task(self, event_id: str) -> None:
        """Remove a task's booking from the calendar."""
        await self._calendar_client.delete_booking(event_id)
        logger.info("Deleted event %s", event_id)
