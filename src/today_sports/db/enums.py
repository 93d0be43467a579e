from __future__ import annotations

from enum import Enum, StrEnum


class ProviderEnum(StrEnum):
    NHL_WEB = "nhl_web"
    NBA_CDN = "nba_cdn"
    MLB_STATS = "mlb_stats"
    ESPN = "espn"


class LeagueEnum(str, Enum):
    NHL = "NHL"
    NBA = "NBA"
    MLB = "MLB"
    NFL = "NFL"


class GameStatusEnum(str, Enum):
    SCHEDULED = "scheduled"
    LIVE = "live"
    FINAL = "final"
