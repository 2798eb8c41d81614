"""
Ranks concrete meeting proposals for a group of attendees.

Ranking policy: earliest start first; ties go to the smallest room that
still seats everyone, then to the lowest location id.
"""

import logging
from datetime import date
from typing import Collection, Iterable, List

from .intervals import intersect
from .location_finder import LocationBookingsLookup, LocationDurationFinder
from .models import Location, MeetingSuggestion
from .slot_calculator import BookingsLookup, SlotCalculator, WorkingHoursLookup

logger = logging.getLogger(__name__)


class MeetingSuggestionEngine:
    """
    Combines common attendee availability with location availability.

    Algorithm:
    1. Intersect the free times of all attendees
    2. Keep common windows long enough for the meeting
    3. Intersect each window with the free times of every location that
       seats all attendees
    4. Anchor a suggestion at the start of each long-enough overlap
    5. Rank by start, capacity and location id
    """

    def __init__(
        self,
        slot_calculator: SlotCalculator,
        location_finder: LocationDurationFinder | None = None,
    ):
        self._slot_calculator = slot_calculator
        self._location_finder = location_finder or LocationDurationFinder(slot_calculator)

    def suggest(
        self,
        attendee_ids: Collection[int],
        duration_minutes: int,
        day: date,
        working_hours_of: WorkingHoursLookup,
        attendee_booked_of: BookingsLookup,
        locations: Iterable[Location],
        location_booked_of: LocationBookingsLookup,
    ) -> List[MeetingSuggestion]:
        """
        Find every (start, end, location) combination that fits the request.

        Returns an empty list when nothing fits.
        """
        attendees = set(attendee_ids)

        common = self._slot_calculator.common_free_slots(
            attendees, day, working_hours_of, attendee_booked_of
        )
        qualifying = SlotCalculator.at_least(common, duration_minutes)
        if not qualifying:
            logger.debug(
                "No common window of %d min for %d attendee(s)", duration_minutes, len(attendees)
            )
            return []

        rooms = LocationDurationFinder.filter_by_capacity(locations, len(attendees))
        if not rooms:
            logger.debug("No location seats %d attendee(s)", len(attendees))
            return []

        suggestions: List[MeetingSuggestion] = []

        for location in rooms:
            location_free = self._location_finder.free_slots_for(location, day, location_booked_of)
            if not location_free:
                continue

            for window in qualifying:
                overlaps = intersect([window], location_free)
                for overlap in SlotCalculator.at_least(overlaps, duration_minutes):
                    suggestions.append(
                        MeetingSuggestion(
                            start=overlap.start,
                            end=overlap.start.add(minutes=duration_minutes),
                            location=location,
                            window=overlap,
                        )
                    )

        suggestions.sort(key=lambda s: (s.start, s.location.capacity, s.location.id))
        logger.debug("Generated %d meeting suggestion(s)", len(suggestions))
        return suggestions
