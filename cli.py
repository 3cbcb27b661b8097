"""CLI commands for event management."""

import asyncio
from datetime import UTC, datetime, timedelta
from uuid import UUID

import typer

from src.events.errors import EventsError
from src.events.features.manage_events.dtos import EventPayload
from src.events.features.manage_events.write_model import StoreEventWriteModel
from src.events.repository.event_store import SqlEventStore
from src.events.repository.read_models import StoreEventReadModel
from src.identity.permissions import MEMBER_GROUPS

app = typer.Typer(help="CLI commands for event management")


@app.command()
def create_event(
    name: str = typer.Option(
        "Castle Open Day",
        "--name",
        "-n",
        help="Name of the event",
    ),
    city: str = typer.Option(
        "Utrecht",
        "--city",
        help="City the event takes place in",
    ),
    days_ahead: int = typer.Option(
        14,
        "--days-ahead",
        help="Days from now until the event date",
    ),
    spots: int = typer.Option(
        None,
        "--spots",
        help="Available spots, leave out for no limit",
    ),
    groups: list[str] = typer.Option(
        ["dutch_garrison"],
        "--group",
        "-g",
        help="Member group that may see the event (repeatable)",
    ),
):
    """Seed an event with a single date; sign-up closes a day before it."""
    event_date = datetime.now(UTC).replace(hour=10, minute=0, second=0, microsecond=0) + timedelta(
        days=days_ahead
    )
    try:
        payload = EventPayload(
            name=name,
            city=city,
            group_visibility=groups,
            event_dates=[{"date": event_date, "available_spots": spots}],
            max_signup_date=event_date - timedelta(days=1),
            gather_time="09:00",
            start_time="10:00",
            end_time="17:00",
        )
    except ValueError as e:
        typer.secho(str(e), fg=typer.colors.RED)
        raise typer.Exit(1)

    event = asyncio.run(StoreEventWriteModel(SqlEventStore()).create_event(payload))

    typer.secho("Event created!", fg=typer.colors.GREEN)
    typer.secho(f"  Event ID: {event.id}", fg=typer.colors.CYAN)
    typer.secho(f"  Name: {event.name} ({event.city})", fg=typer.colors.BLUE)
    typer.secho(f"  Date: {event_date:%Y-%m-%d %H:%M} UTC", fg=typer.colors.BLUE)
    typer.secho(f"  Event date ID: {event.event_dates[0].id}", fg=typer.colors.CYAN)


@app.command()
def list_events(
    groups: list[str] = typer.Option(
        list(MEMBER_GROUPS),
        "--group",
        "-g",
        help="Member group whose events to list (repeatable)",
    ),
):
    """List the upcoming events visible to the given member groups."""
    read_model = StoreEventReadModel(SqlEventStore())
    events = asyncio.run(read_model.list_active(frozenset(groups), datetime.now(UTC)))

    if not events:
        typer.secho("No upcoming events", fg=typer.colors.YELLOW)
        return

    for event in events:
        typer.secho(f"{event.first_date:%Y-%m-%d}  {event.name}", fg=typer.colors.GREEN)
        typer.secho(f"  Event ID: {event.id} (version {event.version})", fg=typer.colors.CYAN)
        for event_date in event.event_dates:
            spots = "unlimited" if event_date.available_spots is None else event_date.available_spots
            typer.secho(
                f"  - {event_date.date:%Y-%m-%d %H:%M}: "
                f"{len(event_date.signed_up_users)} signed up, {spots} spots",
                fg=typer.colors.BLUE,
            )


@app.command()
def archive_event(
    event_id: str = typer.Argument(
        ...,
        help="Event UUID to archive",
    ),
):
    """Archive an event so it only shows up in the archive."""
    try:
        uuid = UUID(event_id)
    except ValueError:
        typer.secho(f"Not a valid event ID: {event_id}", fg=typer.colors.RED)
        raise typer.Exit(1)

    try:
        event = asyncio.run(StoreEventWriteModel(SqlEventStore()).archive_event(uuid))
    except EventsError as e:
        typer.secho(e.message, fg=typer.colors.RED)
        raise typer.Exit(1)

    typer.secho("Event archived!", fg=typer.colors.GREEN)
    typer.secho(f"  {event.name} is now at version {event.version}", fg=typer.colors.BLUE)


if __name__ == "__main__":
    app()
