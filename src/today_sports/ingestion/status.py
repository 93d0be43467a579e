"""
Reduce each provider's status vocabulary to scheduled / live / final.

Matching is case-insensitive. Anything unrecognized (including missing
values) is treated as scheduled.
"""

from __future__ import annotations

import re
from typing import Any, Callable

from today_sports.db.enums import GameStatusEnum, LeagueEnum

_NBA_LIVE_RE = re.compile(r"\d{1,2}:\d{2} [1-4][A-Z]?|Q[1-4]|\bOT\b|HALF", re.IGNORECASE)


def _upper(value: Any) -> str:
    if not isinstance(value, str):
        return ""
    return value.strip().upper()


def normalize_nhl_status(game_state: Any) -> GameStatusEnum:
    s = _upper(game_state)
    if "FINAL" in s or s == "OFF":
        return GameStatusEnum.FINAL
    if s in {"LIVE", "CRIT", "IN_PROGRESS", "IN PROGRESS"}:
        return GameStatusEnum.LIVE
    return GameStatusEnum.SCHEDULED


def normalize_nba_status(status_text: Any) -> GameStatusEnum:
    s = _upper(status_text)
    if "FINAL" in s:
        return GameStatusEnum.FINAL
    if _NBA_LIVE_RE.search(s):
        return GameStatusEnum.LIVE
    return GameStatusEnum.SCHEDULED


def normalize_mlb_status(detailed_state: Any) -> GameStatusEnum:
    s = _upper(detailed_state)
    if "FINAL" in s or "GAME OVER" in s or "COMPLETED EARLY" in s:
        return GameStatusEnum.FINAL
    if s in {"IN PROGRESS", "LIVE"} or s.startswith("MANAGER CHALLENGE"):
        return GameStatusEnum.LIVE
    return GameStatusEnum.SCHEDULED


def normalize_espn_status(type_name: Any) -> GameStatusEnum:
    s = _upper(type_name)
    if s in {"STATUS_FINAL", "FINAL"}:
        return GameStatusEnum.FINAL
    if s in {
        "STATUS_IN_PROGRESS",
        "IN_PROGRESS",
        "LIVE",
        "STATUS_HALFTIME",
        "STATUS_END_PERIOD",
    }:
        return GameStatusEnum.LIVE
    return GameStatusEnum.SCHEDULED


_BY_LEAGUE: dict[LeagueEnum, Callable[[Any], GameStatusEnum]] = {
    LeagueEnum.NHL: normalize_nhl_status,
    LeagueEnum.NBA: normalize_nba_status,
    LeagueEnum.MLB: normalize_mlb_status,
    LeagueEnum.NFL: normalize_espn_status,
}


def normalize_status(league: LeagueEnum, value: Any) -> GameStatusEnum:
    return _BY_LEAGUE[league](value)
