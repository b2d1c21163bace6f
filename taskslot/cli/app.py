"""
Main CLI application using Typer.
"""

import asyncio
import logging
from pathlib import Path
from typing import Annotated, Optional

import pendulum
import typer
from pendulum import DateTime
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from ..adapters.google_calendar_client import GoogleCalendarClient
from ..adapters.mock_calendar_client import MockCalendarClient
from ..config import AppConfig, load_config
from ..domain.exceptions import NoAvailableSlotError, TaskslotError
from ..domain.slot_calculator import SlotCalculator
from ..services.task_request import TaskRequest
from ..services.task_scheduler import TaskSchedulerService

app = typer.Typer(
    name="taskslot",
    help="Find a free slot on your Google Calendar and book tasks into it",
    add_completion=False
)

console = Console()

ConfigOption = Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml")]
MockOption = Annotated[bool, typer.Option("--mock", help="Use mock calendar data instead of Google Calendar.")]
TokenOption = Annotated[Optional[str], typer.Option("--token", envvar="GOOGLE_ACCESS_TOKEN", help="Google OAuth access token.")]


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging.")] = False,
):
    """
    taskslot - schedule tasks into free calendar time.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )


def _parse_datetime(value: str, tz: str, label: str) -> DateTime:
    """Parse a user supplied date/time; values without offset are read in ``tz``."""
    try:
        parsed = pendulum.parse(value, tz=tz)
    except ValueError as e:
        console.print(f"[red]Could not parse {label} '{escape(value)}': {escape(str(e))}[/red]")
        raise typer.Exit(1)

    if not isinstance(parsed, DateTime):
        console.print(f"[red]{label.capitalize()} '{value}' is not a date/time[/red]")
        raise typer.Exit(1)

    return parsed


def _build_client(config: AppConfig, mock: bool, token: Optional[str]):
    if mock:
        console.print("[yellow]⚠  MOCK MODE: using sample calendar data[/yellow]\n")
        return MockCalendarClient(timezone=config.timezone)

    if not token:
        console.print(
            "[bold red]Error:[/bold red] No access token. "
            "Pass --token or set GOOGLE_ACCESS_TOKEN (or use --mock)."
        )
        raise typer.Exit(1)

    return GoogleCalendarClient(
        access_token=token,
        calendar_id=config.calendar_id,
        timezone=config.timezone,
        reminder_minutes=config.search.reminder_minutes
    )


def _build_service(config: AppConfig, client) -> TaskSchedulerService:
    return TaskSchedulerService(
        calendar_client=client,
        slot_calculator=SlotCalculator(window=config.to_window()),
        step_minutes=config.search.step_minutes,
        max_candidates=config.search.max_candidates,
        default_duration_minutes=config.search.default_duration_minutes,
        min_search_days=config.search.min_search_days
    )


@app.command()
def find(
    duration: Annotated[Optional[int], typer.Option("--duration", "-d", help="Slot duration in minutes")] = None,
    start: Annotated[Optional[str], typer.Option("--start", help="Search start (YYYY-MM-DD or YYYY-MM-DD HH:mm). Defaults to now.")] = None,
    end: Annotated[Optional[str], typer.Option("--end", help="Search end. Defaults to start + min_search_days.")] = None,
    limit: Annotated[int, typer.Option("--limit", "-n", help="Maximum number of slots to show")] = 10,
    mock: MockOption = False,
    token: TokenOption = None,
    config_file: ConfigOption = None,
):
    """
    List free slots in the scheduling window.

    Examples:

        taskslot find --duration 60

        taskslot find --start "2025-01-06 08:00" --end 2025-01-10 --mock
    """
    try:
        config = load_config(config_file)
        tz = config.timezone

        search_start = _parse_datetime(start, tz, "start") if start else pendulum.now(tz)
        if end:
            search_end = _parse_datetime(end, tz, "end")
        else:
            search_end = search_start.add(days=config.search.min_search_days)
        duration_minutes = duration if duration is not None else config.search.default_duration_minutes

        console.print("[bold cyan]📊 Search:[/bold cyan]")
        console.print(f"   Range: {search_start.in_timezone(tz).format('YYYY-MM-DD HH:mm')} - {search_end.in_timezone(tz).format('YYYY-MM-DD HH:mm')}")
        console.print(f"   Duration: {duration_minutes} minutes")
        console.print(f"   Window: {config.to_window()}")
        console.print()

        client = _build_client(config, mock, token)
        service = _build_service(config, client)

        slots = asyncio.run(
            service.find_available_slots(
                duration_minutes=duration_minutes,
                search_start=search_start,
                search_end=search_end
            )
        )

        if not slots:
            console.print(
                "[yellow]⚠ No available slots found.[/yellow]\n"
                "Try a longer range or a shorter duration."
            )
            return

        console.print(f"[bold green]✓ {len(slots)} available slot(s) found:[/bold green]\n")
        for slot in slots[:limit]:
            console.print(f"  {slot.format_display(tz)}")
        if len(slots) > limit:
            console.print(f"  [dim]... and {len(slots) - limit} more[/dim]")
        console.print()

    except (TaskslotError, FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def schedule(
    title: Annotated[str, typer.Argument(help="Task title (becomes the event summary)")],
    description: Annotated[str, typer.Option("--description", help="Event description")] = "",
    duration: Annotated[Optional[int], typer.Option("--duration", "-d", help="Estimated duration in minutes")] = None,
    priority: Annotated[str, typer.Option("--priority", help="Informational label: low, medium or high. Does not affect which slot is chosen.")] = "medium",
    start: Annotated[Optional[str], typer.Option("--start", help="Preferred earliest start")] = None,
    deadline: Annotated[Optional[str], typer.Option("--deadline", help="Deadline; extends the search range if later than the default")] = None,
    mock: MockOption = False,
    token: TokenOption = None,
    config_file: ConfigOption = None,
):
    """
    Book the earliest free slot for a task.
    """
    try:
        config = load_config(config_file)
        tz = config.timezone

        task = TaskRequest(
            title=title,
            description=description,
            priority=priority,
            estimated_duration=duration,
            preferred_start_date=_parse_datetime(start, tz, "start") if start else None,
            deadline=_parse_datetime(deadline, tz, "deadline") if deadline else None
        )

        client = _build_client(config, mock, token)
        service = _build_service(config, client)

        scheduled = asyncio.run(service.schedule_task(task))

        console.print(f"[bold green]✅ {scheduled.summary(tz)}[/bold green]\n")

    except NoAvailableSlotError as e:
        console.print(f"[yellow]⚠ {e}[/yellow]")
        raise typer.Exit(1)

    except (TaskslotError, FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def cancel(
    event_id: Annotated[str, typer.Argument(help="Calendar event id of the booking")],
    mock: MockOption = False,
    token: TokenOption = None,
    config_file: ConfigOption = None,
):
    """
    Delete a task's calendar booking.
    """
    try:
        config = load_config(config_file)
        client = _build_client(config, mock, token)
        service = _build_service(config, client)

        asyncio.run(service.cancel_task(event_id))
        console.print(f"\n[green]✓ Event {event_id} deleted.[/green]\n")

    except (TaskslotError, FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def show_config(
    config_file: ConfigOption = None,
):
    """
    Show the effective scheduling settings.
    """
    try:
        config = load_config(config_file)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    table = Table(
        title="Scheduling settings",
        show_header=True,
        header_style="bold cyan"
    )
    table.add_column("Setting", style="bold yellow")
    table.add_column("Value", style="dim")

    table.add_row("Calendar", config.calendar_id)
    table.add_row("Timezone", config.window.timezone)
    table.add_row("Window", f"{config.window.start_hour:02d}:00 - {config.window.end_hour:02d}:00")
    table.add_row("Default duration", f"{config.search.default_duration_minutes} min")
    table.add_row("Step", f"{config.search.step_minutes} min")
    table.add_row("Max candidates", str(config.search.max_candidates))
    table.add_row("Min search range", f"{config.search.min_search_days} days")
    table.add_row("Reminder", f"{config.search.reminder_minutes} min")

    console.print()
    console.print(table)
    console.print()


@app.command()
def test_connection(
    mock: MockOption = False,
    token: TokenOption = None,
    config_file: ConfigOption = None,
):
    """
    Test access to the configured calendar.
    """
    try:
        config = load_config(config_file)
        client = _build_client(config, mock, token)
        calendar_info = client.test_connection()

        console.print(Panel.fit(
            f"[bold green]✓ Connection successful![/bold green]\n\n"
            f"[bold]Calendar:[/bold] {calendar_info.get('summary', 'N/A')}\n"
            f"[bold]Timezone:[/bold] {calendar_info.get('timeZone', 'N/A')}",
            title="✓ Connection test"
        ))
        console.print()

    except (TaskslotError, FileNotFoundError, ValueError) as e:
        console.print(f"\n[bold red]✗ Error:[/bold red] {e}\n")
        raise typer.Exit(1)


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]taskslot[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
