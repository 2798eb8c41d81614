"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .availability import AvailabilityService, ScheduleRepository
from .requests import (
    CommonAvailabilityRequest,
    LocationAvailabilityRequest,
    MeetingSuggestionRequest,
    RequestFailure,
)

__all__ = [
    "AvailabilityService",
    "CommonAvailabilityRequest",
    "LocationAvailabilityRequest",
    "MeetingSuggestionRequest",
    "RequestFailure",
    "ScheduleRepository",
]
