from __future__ import annotations

import httpx

from today_sports.core.config import Settings
from today_sports.db.enums import LeagueEnum, ProviderEnum
from today_sports.ingestion.providers.base.client import BaseHttpClient
from today_sports.ingestion.providers.base.registry import AdapterKey, AdapterRegistry
from today_sports.ingestion.providers.espn.adapter import EspnNflScheduleSource
from today_sports.ingestion.providers.mlb.adapter import MlbScheduleSource
from today_sports.ingestion.providers.nba.adapter import NbaScheduleSource
from today_sports.ingestion.providers.nhl.adapter import NhlScheduleSource


def make_http_client(
    base_url: str,
    cfg: Settings,
    *,
    transport: httpx.BaseTransport | None = None,
) -> BaseHttpClient:
    return BaseHttpClient(
        base_url=base_url,
        timeout_s=cfg.http_timeout_s,
        retries=cfg.http_retries,
        retry_backoff_s=cfg.http_retry_backoff_s,
        transport=transport,
    )


def register_default_sources(
    registry: AdapterRegistry,
    *,
    cfg: Settings,
    transport: httpx.BaseTransport | None = None,
) -> AdapterRegistry:
    """Register the four league sources. `transport` lets tests stub every provider."""

    registry.register(
        AdapterKey(provider=ProviderEnum.NHL_WEB.value, league=LeagueEnum.NHL),
        lambda: NhlScheduleSource(
            http=make_http_client(cfg.nhl_base_url, cfg, transport=transport)
        ),
    )
    registry.register(
        AdapterKey(provider=ProviderEnum.NBA_CDN.value, league=LeagueEnum.NBA),
        lambda: NbaScheduleSource(
            http=make_http_client(cfg.nba_base_url, cfg, transport=transport)
        ),
    )
    registry.register(
        AdapterKey(provider=ProviderEnum.MLB_STATS.value, league=LeagueEnum.MLB),
        lambda: MlbScheduleSource(
            http=make_http_client(cfg.mlb_base_url, cfg, transport=transport)
        ),
    )
    registry.register(
        AdapterKey(provider=ProviderEnum.ESPN.value, league=LeagueEnum.NFL),
        lambda: EspnNflScheduleSource(
            http=make_http_client(cfg.espn_base_url, cfg, transport=transport)
        ),
    )
    return registry


def build_default_registry(
    cfg: Settings, *, transport: httpx.BaseTransport | None = None
) -> AdapterRegistry:
    return register_default_sources(AdapterRegistry(), cfg=cfg, transport=transport)
