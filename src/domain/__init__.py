"""Fantasy settlement domain modules."""

from domain.common import FantasyPointsBreakdown, PlayerRawStat
from domain.protocol import ContestStatus, MatchFormat, MatchStatus, PlayerRole

__all__ = [
    "ContestStatus",
    "FantasyPointsBreakdown",
    "MatchFormat",
    "MatchStatus",
    "PlayerRawStat",
    "PlayerRole",
]
