"""
Read-only schedule repository backed by a YAML data file.
"""

from __future__ import annotations

import logging
from datetime import datetime, time
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

import pendulum
import yaml
from pendulum import DateTime
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from ..domain.exceptions import DataSourceError, UnknownEntityError
from ..domain.models import Attendee, Location, Meeting, TimeRange, WorkingHours

logger = logging.getLogger(__name__)


class WorkingHoursRecord(BaseModel):
    start: time
    end: time

    @field_validator("start", "end", mode="before")
    @classmethod
    def parse_sexagesimal(cls, value: Any) -> Any:
        """
        YAML 1.1 reads unquoted 17:00 as the integer 1020 and 9:00:00 as 32400.

        Values below a day's worth of minutes are H:MM; from one hour of
        seconds upwards they are H:MM:SS. Anything else is no clock time.
        """
        if not isinstance(value, int):
            return value

        if 0 <= value < 24 * 60:
            return time(hour=value // 60, minute=value % 60)
        if 3600 <= value < 24 * 3600:
            return time(hour=value // 3600, minute=value % 3600 // 60, second=value % 60)
        raise ValueError(f"Cannot read {value} as a clock time; quote times like \"09:00\"")

    def to_domain(self) -> WorkingHours:
        return WorkingHours(start_time=self.start, end_time=self.end)


class AttendeeRecord(BaseModel):
    id: int
    name: str
    email: str
    working_hours: Optional[WorkingHoursRecord] = None


class LocationRecord(BaseModel):
    id: int
    name: str
    capacity: Optional[int] = Field(default=None, ge=0)
    working_hours: Optional[WorkingHoursRecord] = None


class MeetingRecord(BaseModel):
    id: int
    title: str
    start: Union[str, datetime]
    end: Union[str, datetime]
    location_id: int
    attendee_ids: List[int] = Field(default_factory=list)


class ScheduleData(BaseModel):
    """Root of the data file."""
    attendees: List[AttendeeRecord] = Field(default_factory=list)
    locations: List[LocationRecord] = Field(default_factory=list)
    meetings: List[MeetingRecord] = Field(default_factory=list)

    @field_validator("attendees")
    @classmethod
    def validate_attendees(cls, value: List[AttendeeRecord]) -> List[AttendeeRecord]:
        """Ensure attendee ids and emails are unique."""
        seen_ids: set[int] = set()
        seen_emails: set[str] = set()
        for attendee in value:
            email_key = attendee.email.lower()
            if attendee.id in seen_ids:
                raise ValueError(f"Duplicate attendee id detected: {attendee.id}")
            if email_key in seen_emails:
                raise ValueError(f"Duplicate attendee email detected: {attendee.email}")
            seen_ids.add(attendee.id)
            seen_emails.add(email_key)
        return value

    @field_validator("locations")
    @classmethod
    def validate_locations(cls, value: List[LocationRecord]) -> List[LocationRecord]:
        """Ensure location ids and names are unique."""
        seen_ids: set[int] = set()
        seen_names: set[str] = set()
        for location in value:
            if location.id in seen_ids:
                raise ValueError(f"Duplicate location id detected: {location.id}")
            if location.name in seen_names:
                raise ValueError(f"Duplicate location name detected: {location.name}")
            seen_ids.add(location.id)
            seen_names.add(location.name)
        return value

    @model_validator(mode="after")
    def validate_references(self) -> "ScheduleData":
        """Meetings must point at known locations and attendees."""
        location_ids = {location.id for location in self.locations}
        attendee_ids = {attendee.id for attendee in self.attendees}
        for meeting in self.meetings:
            if meeting.location_id not in location_ids:
                raise ValueError(
                    f"Meeting {meeting.id} refers to unknown location {meeting.location_id}"
                )
            unknown = sorted(set(meeting.attendee_ids) - attendee_ids)
            if unknown:
                raise ValueError(f"Meeting {meeting.id} refers to unknown attendee(s) {unknown}")
        return self


class YamlScheduleRepository:
    """
    Serves attendee, location and meeting snapshots from parsed data.

    Data is loaded once; the repository never writes.
    """

    def __init__(self, data: Mapping[str, Any], timezone: str = "Europe/Berlin"):
        self.timezone = timezone

        try:
            parsed = ScheduleData.model_validate(dict(data))
        except ValidationError as exc:
            raise DataSourceError(f"Invalid schedule data: {exc}") from exc

        self._attendees: Dict[int, Attendee] = {
            record.id: Attendee(
                id=record.id,
                name=record.name,
                email=record.email,
                working_hours=self._working_hours(record.working_hours, f"attendee {record.id}"),
            )
            for record in parsed.attendees
        }
        self._locations: Dict[int, Location] = {
            record.id: Location(
                id=record.id,
                name=record.name,
                capacity=record.capacity,
                working_hours=self._working_hours(record.working_hours, f"location {record.id}"),
            )
            for record in parsed.locations
        }
        self._meetings: List[Meeting] = sorted(
            (self._meeting(record) for record in parsed.meetings),
            key=lambda m: (m.start, m.id),
        )

    @classmethod
    def load(cls, data_file: Path, timezone: str = "Europe/Berlin") -> "YamlScheduleRepository":
        """
        Load schedule data from a YAML file.

        Raises:
            DataSourceError: If the file is missing, unreadable or invalid
        """
        if not data_file.exists():
            raise DataSourceError(f"Schedule data file not found: {data_file}")

        try:
            with open(data_file, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as exc:
            raise DataSourceError(f"Could not read {data_file}: {exc}") from exc

        if not isinstance(data, dict):
            raise DataSourceError("Schedule data file must contain a mapping at the root level.")

        repository = cls(data, timezone=timezone)
        logger.debug(
            "Loaded %d attendee(s), %d location(s), %d meeting(s) from %s",
            len(repository._attendees), len(repository._locations),
            len(repository._meetings), data_file,
        )
        return repository

    # --- Entities ---

    def get_attendee(self, attendee_id: int) -> Attendee:
        try:
            return self._attendees[attendee_id]
        except KeyError:
            raise UnknownEntityError("attendee", attendee_id) from None

    def get_location(self, location_id: int) -> Location:
        try:
            return self._locations[location_id]
        except KeyError:
            raise UnknownEntityError("location", location_id) from None

    def list_attendees(self) -> List[Attendee]:
        return sorted(self._attendees.values(), key=lambda a: a.id)

    def list_locations(self, min_capacity: Optional[int] = None) -> List[Location]:
        locations = sorted(self._locations.values(), key=lambda loc: loc.id)
        if min_capacity is None:
            return locations
        return [location for location in locations if location.can_seat(min_capacity)]

    def resolve_attendee(self, identifier: str) -> Attendee:
        """
        Resolve an attendee by numeric id, name or email address.

        Raises:
            UnknownEntityError: If identifier cannot be resolved
        """
        identifier = identifier.strip()

        if identifier.isdigit():
            return self.get_attendee(int(identifier))

        key = identifier.lower()
        for attendee in self.list_attendees():
            if key in (attendee.email.lower(), attendee.name.lower()):
                return attendee

        raise UnknownEntityError("attendee", identifier)

    def resolve_attendees(self, identifiers: Sequence[str]) -> List[Attendee]:
        """
        Resolve multiple attendee identifiers, ensuring uniqueness.

        All unknown identifiers are reported together.
        """
        resolved: List[Attendee] = []
        unknown_identifiers: List[str] = []

        for identifier in identifiers:
            try:
                attendee = self.resolve_attendee(identifier)
            except UnknownEntityError:
                unknown_identifiers.append(identifier)
                continue

            if attendee not in resolved:
                resolved.append(attendee)

        if unknown_identifiers:
            raise UnknownEntityError("attendee", ", ".join(sorted(set(unknown_identifiers))))

        return resolved

    # --- Bookings ---

    def attendee_bookings(self, attendee_id: int, window: TimeRange) -> List[TimeRange]:
        return [
            meeting.time_range()
            for meeting in self._meetings
            if attendee_id in meeting.attendee_ids and meeting.time_range().overlaps(window)
        ]

    def location_bookings(self, location_id: int, window: TimeRange) -> List[TimeRange]:
        return [
            meeting.time_range()
            for meeting in self._meetings
            if meeting.location_id == location_id and meeting.time_range().overlaps(window)
        ]

    def attendee_meetings(self, attendee_id: int, start: DateTime, end: DateTime) -> List[Meeting]:
        return [
            meeting for meeting in self._meetings
            if attendee_id in meeting.attendee_ids and start <= meeting.start <= end
        ]

    def location_meetings(self, location_id: int, start: DateTime, end: DateTime) -> List[Meeting]:
        return [
            meeting for meeting in self._meetings
            if meeting.location_id == location_id and start <= meeting.start <= end
        ]

    # --- Conversion helpers ---

    @staticmethod
    def _working_hours(record: Optional[WorkingHoursRecord], owner: str) -> Optional[WorkingHours]:
        if record is None:
            return None
        try:
            return record.to_domain()
        except ValueError as exc:
            raise DataSourceError(f"Invalid working hours for {owner}: {exc}") from exc

    def _meeting(self, record: MeetingRecord) -> Meeting:
        try:
            start = pendulum.parse(str(record.start), tz=self.timezone)
            end = pendulum.parse(str(record.end), tz=self.timezone)
        except ValueError as exc:
            raise DataSourceError(f"Invalid time in meeting {record.id}: {exc}") from exc

        if not isinstance(start, DateTime) or not isinstance(end, DateTime):
            raise DataSourceError(
                f"Invalid time in meeting {record.id}: start and end must be date and time values"
            )

        meeting = Meeting(
            id=record.id,
            title=record.title,
            start=start,
            end=end,
            location_id=record.location_id,
            attendee_ids=frozenset(record.attendee_ids),
        )
        try:
            meeting.time_range()
        except ValueError as exc:
            raise DataSourceError(f"Invalid meeting {record.id}: {exc}") from exc
        return meeting
