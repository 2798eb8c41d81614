"""
Core business logic for calculating free time slots.

This is the heart of the application - pure domain logic without any
external dependencies (no file access, no database, no I/O). Working hours
and bookings are handed in by the caller.
"""

import logging
from datetime import date
from typing import Callable, Iterable, List, Optional, Sequence

from .intervals import intersect, subtract
from .models import TimeRange, WorkingHours

logger = logging.getLogger(__name__)

WorkingHoursLookup = Callable[[int], Optional[WorkingHours]]
BookingsLookup = Callable[[int, date], Sequence[TimeRange]]


class SlotCalculator:
    """
    Calculates free slots for single entities and groups of entities.

    Algorithm:
    1. Anchor the entity's working hours to the requested date
    2. Subtract its bookings from that window to get free times
    3. Intersect the free times of every entity in the group
    4. Filter by minimum duration
    5. Return complete blocks (not split into smaller chunks)

    Entities without working hours have no free time unless
    ``fallback_hours`` is given, in which case those hours are used instead.
    """

    def __init__(
        self,
        timezone: str = "Europe/Berlin",
        fallback_hours: Optional[WorkingHours] = None,
    ):
        self.timezone = timezone
        self.fallback_hours = fallback_hours

    def working_window(
        self,
        working_hours: Optional[WorkingHours],
        day: date,
    ) -> TimeRange | None:
        """
        Get the bookable window for a specific day.
        Returns None if the entity has no working hours to offer.
        """
        hours = working_hours or self.fallback_hours
        if hours is None:
            return None
        return hours.window_for(day, self.timezone)

    def free_slots(
        self,
        working_hours: Optional[WorkingHours],
        day: date,
        booked: Iterable[TimeRange],
    ) -> List[TimeRange]:
        """
        Convert bookings to free times within working hours.

        Bookings may be unsorted, overlapping, or reach outside the window.
        """
        window = self.working_window(working_hours, day)
        if window is None:
            logger.debug("No working window on %s; no free time", day)
            return []

        free_times = subtract(window, booked)
        logger.debug("Window %s has %d free slot(s)", window, len(free_times))
        return free_times

    def common_free_slots(
        self,
        entity_ids: Iterable[int],
        day: date,
        working_hours_of: WorkingHoursLookup,
        booked_of: BookingsLookup,
    ) -> List[TimeRange]:
        """
        Calculate the intersection of free times across all entities.

        Only times when ALL entities are free will be returned. An empty
        entity set has no common availability.
        """
        ordered_ids = sorted(set(entity_ids))
        if not ordered_ids:
            return []

        result: List[TimeRange] | None = None

        for entity_id in ordered_ids:
            free_times = self.free_slots(
                working_hours_of(entity_id),
                day,
                booked_of(entity_id, day),
            )
            result = free_times if result is None else intersect(result, free_times)
            logger.debug(
                "Common availability after entity %s: %d slot(s)", entity_id, len(result)
            )

            # Early exit if no common time
            if not result:
                return []

        return result or []

    @staticmethod
    def at_least(intervals: Iterable[TimeRange], duration_minutes: int) -> List[TimeRange]:
        """Keep ranges that last at least ``duration_minutes``, unshrunk."""
        return [tr for tr in intervals if tr.lasts_at_least(duration_minutes)]
