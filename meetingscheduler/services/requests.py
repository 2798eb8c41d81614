"""
Request values accepted by the availability service, and their guards.

Guards return ``RequestFailure`` values instead of raising, so the serving
layer decides how to report them. A request with no failures may be passed
to the service.
"""

from dataclasses import dataclass
from datetime import date
from typing import FrozenSet, List, Optional


@dataclass(frozen=True)
class RequestFailure:
    """A rejected request field."""
    field: str
    message: str

    def __str__(self) -> str:
        return f"{self.field}: {self.message}"


@dataclass(frozen=True)
class CommonAvailabilityRequest:
    attendee_ids: FrozenSet[int]
    date: date

    def validate(self) -> List[RequestFailure]:
        return _collect(require_attendees(self.attendee_ids))


@dataclass(frozen=True)
class LocationAvailabilityRequest:
    date: date
    duration_minutes: int
    minimum_capacity: Optional[int] = None

    def validate(self) -> List[RequestFailure]:
        return _collect(
            require_positive_duration(self.duration_minutes),
            require_capacity(self.minimum_capacity),
        )


@dataclass(frozen=True)
class MeetingSuggestionRequest:
    attendee_ids: FrozenSet[int]
    duration_minutes: int
    date: date

    def validate(self) -> List[RequestFailure]:
        return _collect(
            require_attendees(self.attendee_ids),
            require_positive_duration(self.duration_minutes),
        )


def require_attendees(attendee_ids: FrozenSet[int]) -> Optional[RequestFailure]:
    """Reject an empty attendee set."""
    if not attendee_ids:
        return RequestFailure("attendee_ids", "At least one attendee ID must be provided.")
    return None


def require_positive_duration(duration_minutes: int) -> Optional[RequestFailure]:
    """Reject durations shorter than one minute."""
    if duration_minutes < 1:
        return RequestFailure("duration_minutes", "Duration must be at least 1 minute.")
    return None


def require_capacity(minimum_capacity: Optional[int]) -> Optional[RequestFailure]:
    """An optional minimum capacity must be positive when given."""
    if minimum_capacity is not None and minimum_capacity < 1:
        return RequestFailure(
            "minimum_capacity", "Minimum capacity must be at least 1 if provided."
        )
    return None


def _collect(*results: Optional[RequestFailure]) -> List[RequestFailure]:
    return [failure for failure in results if failure is not None]
