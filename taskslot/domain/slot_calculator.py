"""
Core business logic for finding bookable time slots.

This is the heart of the application - pure domain logic without any
external dependencies (no API calls, no database, no I/O).
"""

import logging
from typing import List, Optional

import pendulum
from pendulum import DateTime

from .models import BusyIntervalSet, SchedulingWindow, SearchRequest, TimeRange
from .time_window import is_interval_within_window, next_window_start

logger = logging.getLogger(__name__)


class SlotCalculator:
    """
    Enumerates free slots of a fixed duration inside the scheduling window.

    Algorithm:
    1. Round the search start up to the next step boundary
    2. Build a candidate of the requested duration at the cursor
    3. Keep it if it fits the window and overlaps no busy interval
    4. Advance by one step, fast-forwarding to the next window opening
       when the cursor leaves the window
    5. Stop at the end of the range or after ``max_candidates`` positions
    """

    def __init__(self, window: SchedulingWindow):
        self.window = window

    def find_available_slots(
        self,
        request: SearchRequest,
        busy: BusyIntervalSet
    ) -> List[TimeRange]:
        """
        Find all free slots for the request, earliest first.

        Args:
            request: Validated search parameters
            busy: Existing commitments in the search range

        Returns:
            List of TimeRange objects, each exactly ``duration_minutes`` long.
            Empty when nothing fits; running into the candidate cap is not
            an error either.
        """
        logger.debug(
            "Searching %d-minute slots between %s and %s (window %s, %d busy intervals)",
            request.duration_minutes,
            request.range_start,
            request.range_end,
            self.window,
            len(busy),
        )

        slots: List[TimeRange] = []

        cursor = self._round_up_to_step(request.range_start, request.step_minutes)
        range_end = request.range_end.in_timezone(pendulum.UTC)
        examined = 0

        while cursor < range_end and examined < request.max_candidates:
            candidate = TimeRange(
                start=cursor,
                end=cursor.add(minutes=request.duration_minutes)
            )

            if is_interval_within_window(candidate, self.window) and not busy.overlaps(candidate):
                slots.append(candidate)

            cursor = cursor.add(minutes=request.step_minutes)
            cursor = next_window_start(cursor, self.window).in_timezone(pendulum.UTC)

            examined += 1

        logger.debug(
            "Found %d slot(s) after examining %d candidate(s); stopped at %s (%s)",
            len(slots),
            examined,
            cursor,
            "candidate cap reached" if cursor < range_end else "end of range reached",
        )

        return slots

    @staticmethod
    def select_slot(slots: List[TimeRange]) -> Optional[TimeRange]:
        """
        Pick the slot to book: the earliest one.

        Returns None when there is nothing to choose from.
        """
        if not slots:
            return None
        return slots[0]

    def _round_up_to_step(self, instant: DateTime, step_minutes: int) -> DateTime:
        """
        Round an instant up to the next step boundary within the hour.

        Partial minutes count as a full minute; a boundary at minute 60
        rolls over to the top of the next hour.
        """
        local = instant.in_timezone(self.window.timezone)

        if local.second or local.microsecond:
            local = local.set(second=0, microsecond=0).add(minutes=1)

        rounded = -(-local.minute // step_minutes) * step_minutes

        if rounded >= 60:
            local = local.set(minute=0).add(hours=1)
        else:
            local = local.set(minute=rounded)

        return local.in_timezone(pendulum.UTC)
