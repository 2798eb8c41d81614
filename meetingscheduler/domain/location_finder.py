"""
Finds locations with a free window long enough for a meeting.
"""

import logging
from datetime import date
from typing import Callable, Iterable, List, Optional, Sequence

from .models import Location, LocationSlot, TimeRange
from .slot_calculator import SlotCalculator

logger = logging.getLogger(__name__)

LocationBookingsLookup = Callable[[int, date], Sequence[TimeRange]]


class LocationDurationFinder:
    """Applies free-slot calculation, capacity and duration filters to locations."""

    def __init__(self, slot_calculator: SlotCalculator):
        self._slot_calculator = slot_calculator

    @staticmethod
    def filter_by_capacity(
        locations: Iterable[Location],
        min_capacity: Optional[int],
    ) -> List[Location]:
        """
        Keep locations that seat ``min_capacity`` people.

        Without a minimum every location qualifies; with one, locations of
        unknown capacity are left out.
        """
        if min_capacity is None:
            return list(locations)
        return [location for location in locations if location.can_seat(min_capacity)]

    def free_slots_for(
        self,
        location: Location,
        day: date,
        booked_of: LocationBookingsLookup,
    ) -> List[TimeRange]:
        return self._slot_calculator.free_slots(
            location.working_hours,
            day,
            booked_of(location.id, day),
        )

    def find_by_duration(
        self,
        locations: Iterable[Location],
        day: date,
        duration_minutes: int,
        booked_of: LocationBookingsLookup,
        min_capacity: Optional[int] = None,
    ) -> List[LocationSlot]:
        """
        Pair every suitable location with each of its long-enough free slots.

        Results are ordered by location id, then slot start.
        """
        candidates = self.filter_by_capacity(locations, min_capacity)
        logger.debug(
            "%d location(s) match capacity >= %s", len(candidates), min_capacity or "N/A"
        )

        results: List[LocationSlot] = []
        for location in sorted(candidates, key=lambda loc: loc.id):
            free_times = self.free_slots_for(location, day, booked_of)
            for slot in SlotCalculator.at_least(free_times, duration_minutes):
                results.append(LocationSlot(location=location, slot=slot))

        logger.debug(
            "Found %d location slot(s) on %s lasting >= %d min",
            len(results), day, duration_minutes,
        )
        return results
