from __future__ import annotations

import typer

from today_sports.cli.common import make_session_factory, parse_day, parse_leagues, session_scope
from today_sports.core.config import settings
from today_sports.core.timewindow import InvalidTimezoneError, resolve_today_window
from today_sports.db.enums import LeagueEnum
from today_sports.ingestion.jobs import (
    IngestSummary,
    InlineDispatcher,
    TaskDispatcher,
    ThreadPoolDispatcher,
    collect_results,
    dispatch_date_jobs,
    dispatch_season_chunks,
)
from today_sports.ingestion.providers.base.errors import ProviderError
from today_sports.ingestion.providers.nba.adapter import NbaScheduleSource
from today_sports.ingestion.providers.sources import build_default_registry, make_http_client
from today_sports.ingestion.teams import (
    TeamRecord,
    fetch_espn_teams,
    fetch_nhl_teams,
    ingest_teams,
)

app = typer.Typer(help="Ingest provider data into the local DB.")


def _dispatcher(sync: bool, workers: int) -> TaskDispatcher:
    if sync:
        return InlineDispatcher()
    return ThreadPoolDispatcher(max_workers=workers)


def _echo_summary(label: str, summary: IngestSummary) -> None:
    totals = summary.totals
    typer.echo(
        " ".join(
            [
                f"{label}:",
                f"jobs={len(summary.outcomes)}",
                f"jobs_failed={len(summary.failed)}",
                f"games_seen={totals.seen}",
                f"games_created={totals.created}",
                f"games_updated={totals.updated}",
                f"games_skipped={totals.skipped}",
            ]
        )
    )
    for outcome in summary.outcomes:
        if outcome.error is not None:
            typer.echo(f"  {outcome.name} failed: {outcome.error}", err=True)
        elif outcome.source_error is not None:
            typer.echo(f"  {outcome.name} source unavailable: {outcome.source_error}", err=True)


@app.command("games")
def ingest_games_cmd(
    day: str | None = typer.Option(None, "--date", help="Local date YYYY-MM-DD (default today)."),
    leagues: list[str] | None = typer.Option(
        None, "--league", help="League to ingest (repeatable; default all)."
    ),
    timezone: str = typer.Option(
        settings.default_timezone, "--timezone", help="IANA timezone defining the day."
    ),
    workers: int = typer.Option(settings.ingest_max_workers, "--workers", min=1),
    sync: bool = typer.Option(False, "--sync", help="Run every job on the calling thread."),
) -> None:
    """Fetch one day of games per league and upsert them, one job per league."""

    try:
        window = resolve_today_window(timezone, parse_day(day))
    except InvalidTimezoneError as e:
        raise typer.BadParameter(str(e)) from e

    dispatcher = _dispatcher(sync, workers)
    try:
        futures = dispatch_date_jobs(
            dispatcher,
            registry=build_default_registry(settings),
            session_factory=make_session_factory(),
            day=window.local_date,
            timezone=window.timezone,
            game_date_timezone=settings.game_date_timezone,
            leagues=parse_leagues(leagues),
        )
        summary = collect_results(futures)
    finally:
        dispatcher.shutdown()

    _echo_summary(f"Ingested games {window.local_date.isoformat()} {window.timezone}", summary)
    if summary.failed:
        raise typer.Exit(code=1)


@app.command("nba-season")
def ingest_nba_season_cmd(
    chunk_size: int = typer.Option(
        settings.season_chunk_size, "--chunk-size", min=1, help="Games per store job."
    ),
    workers: int = typer.Option(settings.ingest_max_workers, "--workers", min=1),
    sync: bool = typer.Option(False, "--sync", help="Run every job on the calling thread."),
) -> None:
    """Fetch the full NBA season schedule and upsert it in bounded chunks."""

    source = NbaScheduleSource(http=make_http_client(settings.nba_base_url, settings))
    try:
        events = source.fetch_season()
    finally:
        source.close()

    if not events:
        typer.echo("No NBA season games fetched.")
        return

    dispatcher = _dispatcher(sync, workers)
    try:
        futures = dispatch_season_chunks(
            dispatcher,
            events,
            session_factory=make_session_factory(),
            game_date_timezone=settings.game_date_timezone,
            chunk_size=chunk_size,
        )
        summary = collect_results(futures)
    finally:
        dispatcher.shutdown()

    _echo_summary("Ingested NBA season", summary)
    if summary.failed:
        raise typer.Exit(code=1)


def _fetch_team_records(league: LeagueEnum) -> list[TeamRecord]:
    if league is LeagueEnum.NHL:
        base_url = settings.nhl_base_url
    else:
        base_url = settings.espn_site_base_url

    http = make_http_client(base_url, settings)
    try:
        if league is LeagueEnum.NHL:
            return fetch_nhl_teams(http)
        return fetch_espn_teams(http, league)
    finally:
        http.close()


@app.command("teams")
def ingest_teams_cmd(
    leagues: list[str] | None = typer.Option(
        None, "--league", help="League to ingest (repeatable; default all)."
    ),
) -> None:
    """Fetch team reference data (names, abbreviations, logos, colors) and upsert it."""

    failed: list[LeagueEnum] = []
    for league in parse_leagues(leagues):
        try:
            records = _fetch_team_records(league)
        except ProviderError as e:
            typer.echo(f"  {league.value} teams unavailable: {e}", err=True)
            failed.append(league)
            continue

        with session_scope() as session:
            result = ingest_teams(session, league=league, records=records)

        typer.echo(
            " ".join(
                [
                    f"Ingested {result.league.value} teams:",
                    f"teams_seen={result.teams_seen}",
                    f"teams_created={result.teams_created}",
                    f"teams_updated={result.teams_updated}",
                ]
            )
        )

    if failed:
        raise typer.Exit(code=1)
