from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    environment: str = "development"
    log_level: str | None = None

    # DB
    database_url: str = Field(
        default="sqlite+pysqlite:///./today_sports.db",
        validation_alias="DATABASE_URL",
    )
    db_echo: bool = False

    # providers
    nhl_base_url: str = "https://api-web.nhle.com/v1"
    nba_base_url: str = "https://cdn.nba.com/static/json"
    mlb_base_url: str = "https://statsapi.mlb.com/api/v1"
    espn_base_url: str = "https://partners.api.espn.com/v2/sports/football/nfl"
    espn_site_base_url: str = "https://site.api.espn.com/apis/site/v2/sports"

    http_timeout_s: float = 10.0
    http_retries: int = 1
    http_retry_backoff_s: float = 0.2

    # aggregation
    default_timezone: str = "America/New_York"
    live_cache_ttl_s: float = 60.0
    persisted_cache_ttl_s: float = 3600.0

    # ingestion
    game_date_timezone: str = "America/New_York"
    season_chunk_size: int = 75
    ingest_max_workers: int = 4


settings = Settings()
