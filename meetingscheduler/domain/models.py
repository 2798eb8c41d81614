"""
Domain models for time ranges, working hours and scheduling snapshots.
"""

from dataclasses import dataclass, field
from datetime import date, time, timedelta
from typing import FrozenSet, Optional

import pendulum
from pendulum import DateTime


@dataclass(frozen=True)
class TimeRange:
    """
    Represents an immutable half-open time range [start, end).

    Invariant: start must be before end.
    """
    start: DateTime
    end: DateTime

    def __post_init__(self):
        if self.start >= self.end:
            raise ValueError(f"Start time {self.start} must be before end time {self.end}")

    def duration_minutes(self) -> int:
        """Return the duration in whole minutes."""
        return int((self.end - self.start).total_seconds() / 60)

    def lasts_at_least(self, minutes: int) -> bool:
        """Check whether the range is long enough to host ``minutes``."""
        return (self.end - self.start).total_seconds() >= minutes * 60

    def overlaps(self, other: "TimeRange") -> bool:
        """Check if this range overlaps with another."""
        return self.start < other.end and other.start < self.end

    def intersect(self, other: "TimeRange") -> "TimeRange | None":
        """
        Calculate the intersection of two time ranges.
        Returns None if there is no overlap.
        """
        if not self.overlaps(other):
            return None

        return TimeRange(start=max(self.start, other.start), end=min(self.end, other.end))

    def __str__(self) -> str:
        return f"{self.start.format('DD.MM.YYYY HH:mm')} - {self.end.format('HH:mm')}"


@dataclass(frozen=True)
class WorkingHours:
    """
    Daily window within which an attendee or location can host meetings.

    An end time earlier than the start time describes an overnight shift
    that closes on the following day.
    """
    start_time: time
    end_time: time

    def __post_init__(self):
        if self.start_time == self.end_time:
            raise ValueError("Working hours must not start and end at the same time")

    @property
    def is_overnight(self) -> bool:
        return self.end_time < self.start_time

    def window_for(self, day: date, timezone: str = "Europe/Berlin") -> Optional[TimeRange]:
        """
        Anchor the working hours to a calendar date.

        Returns None when a daylight-saving shift leaves no time between
        start and end on that date.
        """
        start = pendulum.datetime(
            day.year, day.month, day.day,
            self.start_time.hour, self.start_time.minute,
            tz=timezone,
        )
        end_day = day + timedelta(days=1) if self.is_overnight else day
        end = pendulum.datetime(
            end_day.year, end_day.month, end_day.day,
            self.end_time.hour, self.end_time.minute,
            tz=timezone,
        )
        if start >= end:
            return None
        return TimeRange(start=start, end=end)

    def __str__(self) -> str:
        return f"{self.start_time.strftime('%H:%M')} - {self.end_time.strftime('%H:%M')}"


@dataclass(frozen=True)
class Attendee:
    """Read-only snapshot of an attendee."""
    id: int
    name: str
    email: str
    working_hours: Optional[WorkingHours] = None


@dataclass(frozen=True)
class Location:
    """Read-only snapshot of a bookable location."""
    id: int
    name: str
    capacity: Optional[int] = None
    working_hours: Optional[WorkingHours] = None

    def can_seat(self, headcount: int) -> bool:
        """Unknown capacity never counts as sufficient."""
        return self.capacity is not None and self.capacity >= headcount


@dataclass(frozen=True)
class Meeting:
    """Read-only snapshot of a booked meeting."""
    id: int
    title: str
    start: DateTime
    end: DateTime
    location_id: int
    attendee_ids: FrozenSet[int] = field(default_factory=frozenset)

    def time_range(self) -> TimeRange:
        return TimeRange(start=self.start, end=self.end)


@dataclass(frozen=True)
class LocationSlot:
    """A free window of a location that is long enough for a request."""
    location: Location
    slot: TimeRange


@dataclass(frozen=True)
class MeetingSuggestion:
    """
    A concrete proposal: exact start and end at one location.

    ``window`` keeps the whole overlap the proposal was anchored in.
    """
    start: DateTime
    end: DateTime
    location: Location
    window: TimeRange

    def duration_minutes(self) -> int:
        return int((self.end - self.start).total_seconds() / 60)

    def format_display(self) -> str:
        """
        Format the suggestion for display.
        Format: Weekday, DD.MM.YYYY | HH:mm - HH:mm @ Location (N min)
        """
        weekday = self.start.format("dddd")
        date_str = self.start.format("DD.MM.YYYY")
        time_str = f"{self.start.format('HH:mm')} - {self.end.format('HH:mm')}"
        return f"{weekday}, {date_str} | {time_str} @ {self.location.name} ({self.duration_minutes()} min)"
