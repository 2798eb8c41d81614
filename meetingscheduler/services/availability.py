"""
Application service answering availability and suggestion queries.

The service resolves entities and bookings through a repository adapter and
delegates every calculation to the domain layer. Keeping the repository
behind a simple protocol lets tests swap in an in-memory stub.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import List, Optional, Protocol

from pendulum import DateTime

from ..domain.location_finder import LocationDurationFinder
from ..domain.models import (
    Attendee,
    Location,
    LocationSlot,
    Meeting,
    MeetingSuggestion,
    TimeRange,
)
from ..domain.slot_calculator import SlotCalculator
from ..domain.suggestion_engine import MeetingSuggestionEngine
from .requests import (
    CommonAvailabilityRequest,
    LocationAvailabilityRequest,
    MeetingSuggestionRequest,
)

logger = logging.getLogger(__name__)


class ScheduleRepository(Protocol):
    """Protocol describing the read access the service needs."""

    def get_attendee(self, attendee_id: int) -> Attendee:
        """Return the attendee or raise ``UnknownEntityError``."""

    def get_location(self, location_id: int) -> Location:
        """Return the location or raise ``UnknownEntityError``."""

    def list_locations(self, min_capacity: Optional[int] = None) -> List[Location]:
        """Return locations, optionally only those seating ``min_capacity``."""

    def attendee_bookings(self, attendee_id: int, window: TimeRange) -> List[TimeRange]:
        """Return booked ranges of the attendee overlapping ``window``."""

    def location_bookings(self, location_id: int, window: TimeRange) -> List[TimeRange]:
        """Return booked ranges of the location overlapping ``window``."""

    def attendee_meetings(self, attendee_id: int, start: DateTime, end: DateTime) -> List[Meeting]:
        """Return meetings of the attendee starting within [start, end]."""

    def location_meetings(self, location_id: int, start: DateTime, end: DateTime) -> List[Meeting]:
        """Return meetings held at the location starting within [start, end]."""


class AvailabilityService:
    """
    Orchestrates repository lookups and the scheduling engine.

    Requests are expected to have passed their ``validate()`` guards.
    """

    def __init__(
        self,
        repository: ScheduleRepository,
        slot_calculator: SlotCalculator,
    ) -> None:
        self._repository = repository
        self._slot_calculator = slot_calculator
        self._location_finder = LocationDurationFinder(slot_calculator)
        self._suggestion_engine = MeetingSuggestionEngine(slot_calculator, self._location_finder)

    # --- Schedules ---

    def attendee_schedule(self, attendee_id: int, start: DateTime, end: DateTime) -> List[Meeting]:
        """List an attendee's meetings starting in the given range."""
        self._repository.get_attendee(attendee_id)
        meetings = self._repository.attendee_meetings(attendee_id, start, end)
        logger.info("Found %d meeting(s) for attendee %s", len(meetings), attendee_id)
        return meetings

    def location_schedule(self, location_id: int, start: DateTime, end: DateTime) -> List[Meeting]:
        """List meetings held at a location starting in the given range."""
        self._repository.get_location(location_id)
        meetings = self._repository.location_meetings(location_id, start, end)
        logger.info("Found %d meeting(s) for location %s", len(meetings), location_id)
        return meetings

    # --- Availability ---

    def attendee_availability(self, attendee_id: int, day: date) -> List[TimeRange]:
        """Free windows of one attendee on ``day``."""
        attendee = self._repository.get_attendee(attendee_id)
        slots = self._slot_calculator.free_slots(
            attendee.working_hours, day, self._attendee_bookings(attendee_id, day)
        )
        logger.info("Calculated %d free slot(s) for attendee %s on %s", len(slots), attendee_id, day)
        return slots

    def location_availability(self, location_id: int, day: date) -> List[TimeRange]:
        """Free windows of one location on ``day``."""
        location = self._repository.get_location(location_id)
        slots = self._slot_calculator.free_slots(
            location.working_hours, day, self._location_bookings(location_id, day)
        )
        logger.info("Calculated %d free slot(s) for location %s on %s", len(slots), location_id, day)
        return slots

    def common_availability(self, request: CommonAvailabilityRequest) -> List[TimeRange]:
        """Windows on the request date when every attendee is free."""
        slots = self._slot_calculator.common_free_slots(
            request.attendee_ids,
            request.date,
            self._attendee_hours,
            self._attendee_bookings,
        )
        logger.info(
            "Found %d common slot(s) for attendees %s on %s",
            len(slots), sorted(request.attendee_ids), request.date,
        )
        return slots

    def locations_by_duration(self, request: LocationAvailabilityRequest) -> List[LocationSlot]:
        """Locations with a free window of at least the requested duration."""
        locations = self._repository.list_locations(request.minimum_capacity)
        if not locations:
            logger.info("No locations match capacity >= %s", request.minimum_capacity)
            return []

        results = self._location_finder.find_by_duration(
            locations,
            request.date,
            request.duration_minutes,
            self._location_bookings,
            min_capacity=request.minimum_capacity,
        )
        logger.info(
            "Found %d location slot(s) on %s lasting >= %d min",
            len(results), request.date, request.duration_minutes,
        )
        return results

    def meeting_suggestions(self, request: MeetingSuggestionRequest) -> List[MeetingSuggestion]:
        """Ranked (start, end, location) proposals for the attendees."""
        suggestions = self._suggestion_engine.suggest(
            request.attendee_ids,
            request.duration_minutes,
            request.date,
            self._attendee_hours,
            self._attendee_bookings,
            self._repository.list_locations(len(request.attendee_ids)),
            self._location_bookings,
        )
        logger.info("Found %d meeting suggestion(s)", len(suggestions))
        return suggestions

    # --- Lookups handed to the engine ---

    def _attendee_hours(self, attendee_id: int):
        return self._repository.get_attendee(attendee_id).working_hours

    def _attendee_bookings(self, attendee_id: int, day: date) -> List[TimeRange]:
        window = self._slot_calculator.working_window(self._attendee_hours(attendee_id), day)
        if window is None:
            return []
        return self._repository.attendee_bookings(attendee_id, window)

    def _location_bookings(self, location_id: int, day: date) -> List[TimeRange]:
        location = self._repository.get_location(location_id)
        window = self._slot_calculator.working_window(location.working_hours, day)
        if window is None:
            return []
        return self._repository.location_bookings(location_id, window)
