"""
Main CLI application using Typer.
"""

import logging
from contextlib import contextmanager
from datetime import date
from pathlib import Path
from typing import Iterator, List, Optional, Annotated, Sequence

import pendulum
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from ..adapters.yaml_repository import YamlScheduleRepository
from ..config import AppConfig, get_default_config_path
from ..domain.exceptions import SchedulerError
from ..domain.models import TimeRange
from ..domain.slot_calculator import SlotCalculator
from ..services.availability import AvailabilityService
from ..services.requests import (
    CommonAvailabilityRequest,
    LocationAvailabilityRequest,
    MeetingSuggestionRequest,
    RequestFailure,
)

app = typer.Typer(
    name="meetingscheduler",
    help="Find free time slots and meeting suggestions for attendees and locations",
    add_completion=False
)

console = Console()
logger = logging.getLogger(__name__)

ConfigOption = Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml")]
DataOption = Annotated[Optional[Path], typer.Option("--data", help="Path to schedule data file. Overrides data_file from the config.")]
DateOption = Annotated[Optional[str], typer.Option("--date", help="Date (YYYY-MM-DD). Defaults to today.")]
VerboseOption = Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging.")]


class _Context:
    """Loaded configuration, repository and service for one command."""

    def __init__(self, config: AppConfig, repository: YamlScheduleRepository):
        self.config = config
        self.repository = repository
        calculator = SlotCalculator(
            timezone=config.timezone,
            fallback_hours=config.fallback_hours(),
        )
        self.service = AvailabilityService(repository=repository, slot_calculator=calculator)

    def parse_date(self, value: Optional[str]) -> date:
        tz = self.config.timezone
        if not value:
            return pendulum.today(tz).date()
        try:
            return pendulum.from_format(value, "YYYY-MM-DD", tz=tz).date()
        except ValueError as e:
            raise ValueError(f"Could not parse date '{value}': {e}") from e


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)],
        force=True,
    )


def _load_context(config_file: Optional[Path], data_file: Optional[Path], verbose: bool) -> _Context:
    """Load configuration and schedule data; a missing default config means defaults."""
    config_path = config_file or get_default_config_path()
    if config_file is None and not config_path.exists():
        config = AppConfig()
        config_path = None
    else:
        config = AppConfig.load_from_yaml(config_path)

    _configure_logging("DEBUG" if verbose else config.log_level)

    data_path = data_file or config.resolve_data_file(config_path)
    repository = YamlScheduleRepository.load(data_path, timezone=config.timezone)
    return _Context(config, repository)


@contextmanager
def _handle_errors() -> Iterator[None]:
    try:
        yield
    except (SchedulerError, ValueError, FileNotFoundError) as e:
        logger.debug("Command failed", exc_info=True)
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


def _reject(failures: Sequence[RequestFailure]) -> None:
    """Print guard failures and stop before the service is called."""
    if not failures:
        return
    for failure in failures:
        console.print(f"[bold red]Invalid request:[/bold red] {failure}")
    raise typer.Exit(2)


def _print_slots(title: str, slots: Sequence[TimeRange]) -> None:
    if not slots:
        console.print(f"[yellow]⚠ No free time slots found ({title}).[/yellow]")
        return

    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Start", style="bold")
    table.add_column("End", style="bold")
    table.add_column("Minutes", justify="right", style="dim")
    for slot in slots:
        table.add_row(
            slot.start.format("YYYY-MM-DD HH:mm"),
            slot.end.format("YYYY-MM-DD HH:mm"),
            str(slot.duration_minutes()),
        )
    console.print(table)


@app.command()
def availability(
    attendee: Annotated[str, typer.Argument(help="Attendee id, name or email")],
    day: DateOption = None,
    config_file: ConfigOption = None,
    data_file: DataOption = None,
    verbose: VerboseOption = False,
):
    """
    Show the free time slots of one attendee.
    """
    with _handle_errors():
        ctx = _load_context(config_file, data_file, verbose)
        target = ctx.parse_date(day)
        person = ctx.repository.resolve_attendee(attendee)
        slots = ctx.service.attendee_availability(person.id, target)
        _print_slots(f"{person.name} on {target.isoformat()}", slots)


@app.command("location-availability")
def location_availability(
    location_id: Annotated[int, typer.Argument(help="Location id")],
    day: DateOption = None,
    config_file: ConfigOption = None,
    data_file: DataOption = None,
    verbose: VerboseOption = False,
):
    """
    Show the free time slots of one location.
    """
    with _handle_errors():
        ctx = _load_context(config_file, data_file, verbose)
        target = ctx.parse_date(day)
        location = ctx.repository.get_location(location_id)
        slots = ctx.service.location_availability(location.id, target)
        _print_slots(f"{location.name} on {target.isoformat()}", slots)


@app.command()
def common(
    attendees: Annotated[Optional[List[str]], typer.Argument(help="Attendee ids, names or emails")] = None,
    day: DateOption = None,
    config_file: ConfigOption = None,
    data_file: DataOption = None,
    verbose: VerboseOption = False,
):
    """
    Show the time slots when all given attendees are free.

    Example:

        meetingscheduler common alice bob --date 2024-11-25
    """
    with _handle_errors():
        ctx = _load_context(config_file, data_file, verbose)
        people = ctx.repository.resolve_attendees(attendees or [])
        request = CommonAvailabilityRequest(
            attendee_ids=frozenset(p.id for p in people),
            date=ctx.parse_date(day),
        )
        _reject(request.validate())

        slots = ctx.service.common_availability(request)
        names = ", ".join(p.name for p in people)
        _print_slots(f"{names} on {request.date.isoformat()}", slots)


@app.command()
def locations(
    day: DateOption = None,
    duration: Annotated[Optional[int], typer.Option("--duration", "-d", help="Minimum free time in minutes")] = None,
    min_capacity: Annotated[Optional[int], typer.Option("--min-capacity", help="Minimum number of seats")] = None,
    config_file: ConfigOption = None,
    data_file: DataOption = None,
    verbose: VerboseOption = False,
):
    """
    List locations with a free window of at least the given duration.
    """
    with _handle_errors():
        ctx = _load_context(config_file, data_file, verbose)
        request = LocationAvailabilityRequest(
            date=ctx.parse_date(day),
            duration_minutes=duration if duration is not None else ctx.config.defaults.duration_minutes,
            minimum_capacity=min_capacity,
        )
        _reject(request.validate())

        results = ctx.service.locations_by_duration(request)
        if not results:
            console.print("[yellow]⚠ No location is free for that long.[/yellow]")
            return

        table = Table(
            title=f"Free locations on {request.date.isoformat()} (>= {request.duration_minutes} min)",
            show_header=True,
            header_style="bold cyan"
        )
        table.add_column("ID", justify="right", style="dim")
        table.add_column("Location", style="bold yellow")
        table.add_column("Capacity", justify="right")
        table.add_column("Start")
        table.add_column("End")
        for row in results:
            table.add_row(
                str(row.location.id),
                row.location.name,
                "-" if row.location.capacity is None else str(row.location.capacity),
                row.slot.start.format("HH:mm"),
                row.slot.end.format("HH:mm"),
            )
        console.print(table)


@app.command()
def suggest(
    attendees: Annotated[Optional[List[str]], typer.Argument(help="Attendee ids, names or emails")] = None,
    day: DateOption = None,
    duration: Annotated[Optional[int], typer.Option("--duration", "-d", help="Meeting duration in minutes")] = None,
    config_file: ConfigOption = None,
    data_file: DataOption = None,
    verbose: VerboseOption = False,
):
    """
    Suggest meeting times and rooms for a group of attendees.

    Example:

        meetingscheduler suggest alice bob --duration 60 --date 2024-11-25
    """
    with _handle_errors():
        ctx = _load_context(config_file, data_file, verbose)
        people = ctx.repository.resolve_attendees(attendees or [])
        request = MeetingSuggestionRequest(
            attendee_ids=frozenset(p.id for p in people),
            duration_minutes=duration if duration is not None else ctx.config.defaults.duration_minutes,
            date=ctx.parse_date(day),
        )
        _reject(request.validate())

        suggestions = ctx.service.meeting_suggestions(request)
        if not suggestions:
            console.print(
                "[yellow]⚠ No meeting suggestions found.[/yellow]\n"
                "Try a shorter duration or another date."
            )
            return

        console.print(f"[bold green]✓ {len(suggestions)} suggestion(s) found:[/bold green]\n")
        for suggestion in suggestions:
            console.print(f"  {suggestion.format_display()}")


@app.command()
def schedule(
    identifier: Annotated[str, typer.Argument(help="Attendee id, name or email; a location id with --location")],
    day: DateOption = None,
    location: Annotated[bool, typer.Option("--location", help="Treat the identifier as a location id.")] = False,
    config_file: ConfigOption = None,
    data_file: DataOption = None,
    verbose: VerboseOption = False,
):
    """
    List the meetings starting on a date for an attendee or location.
    """
    with _handle_errors():
        ctx = _load_context(config_file, data_file, verbose)
        target = ctx.parse_date(day)
        start = pendulum.datetime(target.year, target.month, target.day, tz=ctx.config.timezone)
        end = start.end_of("day")

        if location:
            if not identifier.isdigit():
                raise ValueError(f"Location id must be a number, got '{identifier}'")
            owner = ctx.repository.get_location(int(identifier)).name
            meetings = ctx.service.location_schedule(int(identifier), start, end)
        else:
            person = ctx.repository.resolve_attendee(identifier)
            owner = person.name
            meetings = ctx.service.attendee_schedule(person.id, start, end)

        if not meetings:
            console.print(f"[yellow]No meetings for {owner} on {target.isoformat()}.[/yellow]")
            return

        table = Table(title=f"Meetings for {owner} on {target.isoformat()}", header_style="bold cyan")
        table.add_column("Start")
        table.add_column("End")
        table.add_column("Title", style="bold")
        for meeting in meetings:
            table.add_row(
                meeting.start.format("HH:mm"),
                meeting.end.format("YYYY-MM-DD HH:mm") if meeting.end.date() != meeting.start.date() else meeting.end.format("HH:mm"),
                meeting.title,
            )
        console.print(table)


@app.command("list-attendees")
def list_attendees(
    config_file: ConfigOption = None,
    data_file: DataOption = None,
):
    """
    List all known attendees.
    """
    with _handle_errors():
        ctx = _load_context(config_file, data_file, verbose=False)
        people = ctx.repository.list_attendees()

        if not people:
            console.print("[yellow]No attendees defined in the data file.[/yellow]")
            return

        table = Table(title="Attendees", show_header=True, header_style="bold cyan")
        table.add_column("ID", justify="right", style="dim")
        table.add_column("Name", style="bold yellow")
        table.add_column("E-Mail", style="dim")
        table.add_column("Working hours")
        for person in people:
            table.add_row(str(person.id), person.name, person.email, str(person.working_hours or "-"))

        console.print()
        console.print(table)
        console.print()


@app.command("list-locations")
def list_locations(
    config_file: ConfigOption = None,
    data_file: DataOption = None,
):
    """
    List all known locations.
    """
    with _handle_errors():
        ctx = _load_context(config_file, data_file, verbose=False)
        rooms = ctx.repository.list_locations()

        if not rooms:
            console.print("[yellow]No locations defined in the data file.[/yellow]")
            return

        table = Table(title="Locations", show_header=True, header_style="bold cyan")
        table.add_column("ID", justify="right", style="dim")
        table.add_column("Name", style="bold yellow")
        table.add_column("Capacity", justify="right")
        table.add_column("Working hours")
        for room in rooms:
            table.add_row(
                str(room.id),
                room.name,
                "-" if room.capacity is None else str(room.capacity),
                str(room.working_hours or "-"),
            )

        console.print()
        console.print(table)
        console.print()


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]meetingscheduler[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
