"""Shared value types for scoring and settlement."""

from __future__ import annotations

from dataclasses import dataclass

from domain.protocol import PlayerRole


@dataclass(frozen=True)
class BattingStat:
    runs: int = 0
    balls_faced: int = 0
    fours: int = 0
    sixes: int = 0
    is_out: bool = False


@dataclass(frozen=True)
class BowlingStat:
    overs_bowled: float = 0.0
    wickets_taken: int = 0
    maiden_overs: int = 0
    lbw_count: int = 0
    bowled_count: int = 0
    runs_given: int = 0


@dataclass(frozen=True)
class FieldingStat:
    catches: int = 0
    stumpings: int = 0
    run_outs: int = 0


@dataclass(frozen=True)
class PlayerRawStat:
    """Observed match performance of one real player, the input to scoring."""

    player_id: int
    role: PlayerRole = PlayerRole.BATSMAN
    batting: BattingStat = BattingStat()
    bowling: BowlingStat = BowlingStat()
    fielding: FieldingStat = FieldingStat()
    is_man_of_match: bool = False


@dataclass(frozen=True)
class FantasyPointsBreakdown:
    """Derived fantasy points; always recomputed from a PlayerRawStat."""

    batting_points: float = 0.0
    bowling_points: float = 0.0
    fielding_points: float = 0.0
    bonus_points: float = 0.0
    total_points: float = 0.0


__all__ = [
    "BattingStat",
    "BowlingStat",
    "FantasyPointsBreakdown",
    "FieldingStat",
    "PlayerRawStat",
]
