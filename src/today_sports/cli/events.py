from __future__ import annotations

import json

import typer

from today_sports.aggregation.resource import events_to_json
from today_sports.aggregation.today import build_today_events_service
from today_sports.cli.common import make_session_factory, parse_day
from today_sports.core.config import settings
from today_sports.core.timewindow import InvalidTimezoneError

app = typer.Typer(help="Read today's events.")


@app.command("today")
def today_cmd(
    timezone: str = typer.Option(
        settings.default_timezone, "--timezone", help="IANA timezone (e.g. America/Los_Angeles)."
    ),
    day: str | None = typer.Option(None, "--date", help="Local date YYYY-MM-DD (default today)."),
) -> None:
    """Fetch every provider live and print the merged, sorted events as JSON."""

    service = build_today_events_service(settings)
    try:
        events = service.get_today_events(timezone, parse_day(day))
    except InvalidTimezoneError as e:
        raise typer.BadParameter(str(e)) from e
    finally:
        service.close()

    typer.echo(json.dumps(events_to_json(events), indent=2))


@app.command("stored")
def stored_cmd(
    timezone: str = typer.Option(
        settings.default_timezone, "--timezone", help="IANA timezone (e.g. America/Los_Angeles)."
    ),
    day: str | None = typer.Option(None, "--date", help="Local date YYYY-MM-DD (default today)."),
) -> None:
    """Print the stored games of the day as JSON."""

    service = build_today_events_service(settings, session_factory=make_session_factory())
    try:
        events = service.get_persisted_events(timezone, parse_day(day))
    except InvalidTimezoneError as e:
        raise typer.BadParameter(str(e)) from e
    finally:
        service.close()

    typer.echo(json.dumps(events_to_json(events), indent=2))
