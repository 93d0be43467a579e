from __future__ import annotations

import typer

from today_sports.cli.events import app as events_app
from today_sports.cli.ingest import app as ingest_app
from today_sports.core.logging import configure_logging

app = typer.Typer(no_args_is_help=True)
app.add_typer(events_app, name="events")
app.add_typer(ingest_app, name="ingest")


@app.callback()
def main(
    log_level: str | None = typer.Option(None, "--log-level", help="DEBUG, INFO, WARNING..."),
) -> None:
    """Aggregate and store today's NHL/NBA/MLB/NFL games."""

    configure_logging(log_level)
