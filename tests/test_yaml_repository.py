"""
Tests for the YAML schedule repository.
"""

from datetime import time

import pendulum
import pytest

from meetingscheduler.adapters.yaml_repository import YamlScheduleRepository
from meetingscheduler.domain.exceptions import DataSourceError, UnknownEntityError
from meetingscheduler.domain.models import TimeRange, WorkingHours

DATA = """
attendees:
  - id: 1
    name: alice
    email: Alice@Example.com
    working_hours: {start: "09:00", end: "17:00"}
  - id: 2
    name: bob
    email: bob@example.com
    working_hours:
      start: 8:30
      end: 16:45
locations:
  - id: 10
    name: Room A
    capacity: 4
  - id: 11
    name: Room B
meetings:
  - id: 100
    title: Review
    start: "2024-11-25 11:00"
    end: "2024-11-25 12:00"
    location_id: 10
    attendee_ids: [1, 2]
  - id: 101
    title: Early
    start: 2024-11-25 08:00:00
    end: 2024-11-25 09:15:00
    location_id: 11
    attendee_ids: [2]
"""


@pytest.fixture
def repository(tmp_path):
    data_file = tmp_path / "schedule.yaml"
    data_file.write_text(DATA, encoding="utf-8")
    return YamlScheduleRepository.load(data_file, timezone="Europe/Berlin")


def _window(start: str, end: str) -> TimeRange:
    return TimeRange(
        start=pendulum.parse(f"2024-11-25 {start}", tz="Europe/Berlin"),
        end=pendulum.parse(f"2024-11-25 {end}", tz="Europe/Berlin"),
    )


class TestLoading:

    def test_entities_are_loaded(self, repository):
        assert [a.name for a in repository.list_attendees()] == ["alice", "bob"]
        assert repository.get_attendee(1).working_hours == WorkingHours(time(9, 0), time(17, 0))
        assert repository.get_location(11).capacity is None

    def test_unquoted_times_are_read_as_clock_times(self, repository):
        """YAML turns 16:45 into a number; it must still mean 16:45."""
        assert repository.get_attendee(2).working_hours == WorkingHours(time(8, 30), time(16, 45))

    def test_missing_file(self, tmp_path):
        with pytest.raises(DataSourceError, match="not found"):
            YamlScheduleRepository.load(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path):
        data_file = tmp_path / "broken.yaml"
        data_file.write_text("attendees: [", encoding="utf-8")

        with pytest.raises(DataSourceError):
            YamlScheduleRepository.load(data_file)

    def test_root_must_be_mapping(self, tmp_path):
        data_file = tmp_path / "list.yaml"
        data_file.write_text("- 1\n- 2\n", encoding="utf-8")

        with pytest.raises(DataSourceError, match="mapping"):
            YamlScheduleRepository.load(data_file)

    def test_empty_file_is_empty_schedule(self, tmp_path):
        data_file = tmp_path / "empty.yaml"
        data_file.write_text("", encoding="utf-8")

        repository = YamlScheduleRepository.load(data_file)

        assert repository.list_attendees() == []
        assert repository.list_locations() == []

    def test_meeting_ending_before_it_starts_is_rejected(self):
        data = {
            "locations": [{"id": 1, "name": "A"}],
            "meetings": [
                {"id": 1, "title": "Bad", "start": "2024-11-25 10:00",
                 "end": "2024-11-25 09:00", "location_id": 1},
            ],
        }

        with pytest.raises(DataSourceError, match="Invalid meeting 1"):
            YamlScheduleRepository(data)

    def test_meeting_with_unknown_location_is_rejected(self):
        data = {
            "meetings": [
                {"id": 1, "title": "Orphan", "start": "2024-11-25 10:00",
                 "end": "2024-11-25 11:00", "location_id": 7},
            ],
        }

        with pytest.raises(DataSourceError, match="unknown location 7"):
            YamlScheduleRepository(data)

    def test_duplicate_attendee_email_is_rejected(self):
        data = {
            "attendees": [
                {"id": 1, "name": "a", "email": "same@example.com"},
                {"id": 2, "name": "b", "email": "SAME@example.com"},
            ],
        }

        with pytest.raises(DataSourceError, match="Duplicate attendee email"):
            YamlScheduleRepository(data)

    def test_equal_working_hours_are_rejected(self):
        data = {
            "attendees": [
                {"id": 1, "name": "a", "email": "a@example.com",
                 "working_hours": {"start": "09:00", "end": "09:00"}},
            ],
        }

        with pytest.raises(DataSourceError, match="Invalid working hours for attendee 1"):
            YamlScheduleRepository(data)

    def test_meeting_times_must_be_date_and_time(self):
        """ISO durations parse, but they are no meeting times."""
        data = {
            "locations": [{"id": 1, "name": "A"}],
            "meetings": [
                {"id": 1, "title": "Vague", "start": "P1D", "end": "P2D", "location_id": 1},
            ],
        }

        with pytest.raises(DataSourceError, match="Invalid time in meeting 1"):
            YamlScheduleRepository(data)

    def test_unquoted_times_with_seconds(self, tmp_path):
        """YAML turns 9:00:00 into 32400 seconds."""
        data_file = tmp_path / "seconds.yaml"
        data_file.write_text(
            "attendees:\n"
            "  - id: 1\n"
            "    name: a\n"
            "    email: a@example.com\n"
            "    working_hours: {start: 9:00:00, end: 17:30:00}\n",
            encoding="utf-8",
        )

        repository = YamlScheduleRepository.load(data_file)

        assert repository.get_attendee(1).working_hours == WorkingHours(time(9, 0), time(17, 30))

    def test_unquoted_time_out_of_range_asks_for_quotes(self, tmp_path):
        data_file = tmp_path / "late.yaml"
        data_file.write_text(
            "attendees:\n"
            "  - id: 1\n"
            "    name: a\n"
            "    email: a@example.com\n"
            "    working_hours: {start: 9:00, end: 25:00}\n",
            encoding="utf-8",
        )

        with pytest.raises(DataSourceError, match="quote times"):
            YamlScheduleRepository.load(data_file)


class TestLookups:

    def test_unknown_ids(self, repository):
        with pytest.raises(UnknownEntityError):
            repository.get_attendee(42)
        with pytest.raises(UnknownEntityError):
            repository.get_location(42)

    def test_list_locations_by_capacity_skips_unknown_capacity(self, repository):
        assert [loc.id for loc in repository.list_locations()] == [10, 11]
        assert [loc.id for loc in repository.list_locations(min_capacity=1)] == [10]

    def test_resolve_attendee_by_id_name_or_email(self, repository):
        assert repository.resolve_attendee("1").name == "alice"
        assert repository.resolve_attendee("BOB").id == 2
        assert repository.resolve_attendee("alice@example.com").id == 1

    def test_resolve_attendees_deduplicates(self, repository):
        people = repository.resolve_attendees(["alice", "1", "bob"])

        assert [p.id for p in people] == [1, 2]

    def test_resolve_attendees_reports_all_unknown(self, repository):
        with pytest.raises(UnknownEntityError, match="dave, eve"):
            repository.resolve_attendees(["eve", "alice", "dave"])

    def test_bookings_overlapping_window(self, repository):
        assert repository.attendee_bookings(2, _window("09:00", "17:00")) == [
            _window("08:00", "09:15"),
            _window("11:00", "12:00"),
        ]
        assert repository.attendee_bookings(1, _window("12:00", "17:00")) == []
        assert repository.location_bookings(10, _window("09:00", "17:00")) == [
            _window("11:00", "12:00"),
        ]

    def test_meetings_starting_in_range(self, repository):
        start = pendulum.parse("2024-11-25 09:00", tz="Europe/Berlin")
        end = pendulum.parse("2024-11-25 18:00", tz="Europe/Berlin")

        assert [m.id for m in repository.attendee_meetings(2, start, end)] == [100]
        assert [m.id for m in repository.location_meetings(11, start, end)] == []
