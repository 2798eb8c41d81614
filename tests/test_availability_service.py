"""
Tests for the AvailabilityService orchestration layer.
"""

from datetime import time

import pendulum
import pytest

from meetingscheduler.adapters.yaml_repository import YamlScheduleRepository
from meetingscheduler.domain.exceptions import UnknownEntityError
from meetingscheduler.domain.models import TimeRange, WorkingHours
from meetingscheduler.domain.slot_calculator import SlotCalculator
from meetingscheduler.services.availability import AvailabilityService
from meetingscheduler.services.requests import (
    CommonAvailabilityRequest,
    LocationAvailabilityRequest,
    MeetingSuggestionRequest,
)

DAY = pendulum.date(2024, 11, 25)

SCHEDULE = {
    "attendees": [
        {"id": 1, "name": "alice", "email": "alice@example.com",
         "working_hours": {"start": "09:00", "end": "17:00"}},
        {"id": 2, "name": "bob", "email": "bob@example.com",
         "working_hours": {"start": "09:00", "end": "17:00"}},
        {"id": 3, "name": "carol", "email": "carol@example.com"},
    ],
    "locations": [
        {"id": 10, "name": "Focus Room", "capacity": 2,
         "working_hours": {"start": "08:00", "end": "18:00"}},
        {"id": 11, "name": "Board Room", "capacity": 12,
         "working_hours": {"start": "08:00", "end": "18:00"}},
        {"id": 12, "name": "Lounge",
         "working_hours": {"start": "08:00", "end": "20:00"}},
    ],
    "meetings": [
        {"id": 100, "title": "Standup", "start": "2024-11-25 09:00", "end": "2024-11-25 10:00",
         "location_id": 10, "attendee_ids": [1]},
        {"id": 101, "title": "Customer call", "start": "2024-11-25 15:00",
         "end": "2024-11-25 17:00", "location_id": 11, "attendee_ids": [2]},
        {"id": 102, "title": "Late night", "start": "2024-11-24 20:00",
         "end": "2024-11-25 09:30", "location_id": 12, "attendee_ids": []},
    ],
}


def _t(value: str):
    return pendulum.parse(value, tz="Europe/Berlin")


def _r(start: str, end: str) -> TimeRange:
    return TimeRange(start=_t(f"2024-11-25 {start}"), end=_t(f"2024-11-25 {end}"))


def _build_service(fallback_hours=None) -> AvailabilityService:
    repository = YamlScheduleRepository(SCHEDULE, timezone="Europe/Berlin")
    calculator = SlotCalculator(timezone="Europe/Berlin", fallback_hours=fallback_hours)
    return AvailabilityService(repository=repository, slot_calculator=calculator)


def test_attendee_availability():
    service = _build_service()

    assert service.attendee_availability(1, DAY) == [_r("10:00", "17:00")]


def test_location_availability_clips_meeting_from_previous_day():
    service = _build_service()

    assert service.location_availability(12, DAY) == [_r("09:30", "20:00")]


def test_unknown_attendee_raises():
    service = _build_service()

    with pytest.raises(UnknownEntityError, match="Attendee not found: 99"):
        service.attendee_availability(99, DAY)


def test_attendee_without_working_hours_has_no_availability():
    service = _build_service()

    assert service.attendee_availability(3, DAY) == []


def test_attendee_without_working_hours_uses_fallback():
    service = _build_service(fallback_hours=WorkingHours(start_time=time(9, 0), end_time=time(12, 0)))

    assert service.attendee_availability(3, DAY) == [_r("09:00", "12:00")]


def test_common_availability():
    service = _build_service()

    slots = service.common_availability(
        CommonAvailabilityRequest(attendee_ids=frozenset({1, 2}), date=DAY)
    )

    assert slots == [_r("10:00", "15:00")]


def test_common_availability_empty_with_closed_attendee():
    service = _build_service()

    slots = service.common_availability(
        CommonAvailabilityRequest(attendee_ids=frozenset({1, 3}), date=DAY)
    )

    assert slots == []


def test_locations_by_duration_with_capacity():
    """The lounge has no known capacity and must not appear."""
    service = _build_service()

    results = service.locations_by_duration(
        LocationAvailabilityRequest(date=DAY, duration_minutes=60, minimum_capacity=2)
    )

    assert [(r.location.id, r.slot) for r in results] == [
        (10, _r("08:00", "09:00")),
        (10, _r("10:00", "18:00")),
        (11, _r("08:00", "15:00")),
        (11, _r("17:00", "18:00")),
    ]


def test_locations_by_duration_without_capacity_includes_all():
    service = _build_service()

    results = service.locations_by_duration(
        LocationAvailabilityRequest(date=DAY, duration_minutes=120)
    )

    assert [(r.location.id, r.slot) for r in results] == [
        (10, _r("10:00", "18:00")),
        (11, _r("08:00", "15:00")),
        (12, _r("09:30", "20:00")),
    ]


def test_meeting_suggestions():
    """Earliest start first; the smaller adequate room wins the tie."""
    service = _build_service()

    suggestions = service.meeting_suggestions(
        MeetingSuggestionRequest(attendee_ids=frozenset({1, 2}), duration_minutes=60, date=DAY)
    )

    assert [(s.location.id, s.start, s.end) for s in suggestions] == [
        (10, _t("2024-11-25 10:00"), _t("2024-11-25 11:00")),
        (11, _t("2024-11-25 10:00"), _t("2024-11-25 11:00")),
    ]


def test_meeting_suggestions_too_long():
    service = _build_service()

    suggestions = service.meeting_suggestions(
        MeetingSuggestionRequest(attendee_ids=frozenset({1, 2}), duration_minutes=360, date=DAY)
    )

    assert suggestions == []


def test_schedules_list_meetings_starting_in_range():
    service = _build_service()
    start = _t("2024-11-25 00:00")
    end = start.end_of("day")

    assert [m.id for m in service.attendee_schedule(1, start, end)] == [100]
    assert [m.id for m in service.location_schedule(12, start, end)] == []
    assert [m.id for m in service.location_schedule(12, start.subtract(days=1), end)] == [102]
