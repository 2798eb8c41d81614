"""
Domain layer - Pure business logic without external dependencies.
"""

from .exceptions import DataSourceError, SchedulerError, UnknownEntityError
from .location_finder import LocationDurationFinder
from .models import (
    Attendee,
    Location,
    LocationSlot,
    Meeting,
    MeetingSuggestion,
    TimeRange,
    WorkingHours,
)
from .slot_calculator import SlotCalculator
from .suggestion_engine import MeetingSuggestionEngine

__all__ = [
    "Attendee",
    "DataSourceError",
    "Location",
    "LocationDurationFinder",
    "LocationSlot",
    "Meeting",
    "MeetingSuggestion",
    "MeetingSuggestionEngine",
    "SchedulerError",
    "SlotCalculator",
    "TimeRange",
    "UnknownEntityError",
    "WorkingHours",
]
