"""ORM models."""

from models.base import Base
from models.contest import Contest, ContestEntry
from models.contest_event import ContestEvent
from models.fantasy_team import FantasyTeam, FantasyTeamPlayer
from models.match import Match
from models.player_stat import PlayerStat
from models.user import User

__all__ = [
    "Base",
    "Contest",
    "ContestEntry",
    "ContestEvent",
    "FantasyTeam",
    "FantasyTeamPlayer",
    "Match",
    "PlayerStat",
    "User",
]
