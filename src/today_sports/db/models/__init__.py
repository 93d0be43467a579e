from today_sports.db.models.core.game import Game
from today_sports.db.models.core.team import Team

__all__ = [
    "Game",
    "Team",
]
