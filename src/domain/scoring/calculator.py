"""Fantasy points scoring for cricket performances."""

from __future__ import annotations

from dataclasses import dataclass

from domain.common import (
    BattingStat,
    BowlingStat,
    FantasyPointsBreakdown,
    FieldingStat,
    PlayerRawStat,
)
from domain.protocol import MatchFormat, PlayerRole


@dataclass(frozen=True)
class ScoringParameters:
    run_points: float = 1.0
    four_bonus: float = 4.0
    six_bonus: float = 6.0
    milestone_25_bonus: float = 4.0
    milestone_50_bonus: float = 8.0
    milestone_75_bonus: float = 12.0
    milestone_100_bonus: float = 16.0
    milestone_125_bonus: float = 20.0
    milestone_150_bonus: float = 24.0
    wicket_points: float = 28.0
    test_wicket_points: float = 16.0
    lbw_bonus: float = 8.0
    bowled_bonus: float = 8.0
    haul_bonus_small: float = 4.0
    haul_bonus_medium: float = 8.0
    haul_bonus_large: float = 16.0
    maiden_points: float = 12.0
    t10_maiden_points: float = 16.0
    catch_points: float = 8.0
    stumping_points: float = 12.0
    run_out_points: float = 12.0
    duck_penalty: float = 2.0
    test_duck_penalty: float = 4.0
    man_of_match_bonus: float = 25.0


_ALL_FORMATS = frozenset(MatchFormat)

# (runs threshold, parameter attribute, eligible formats); bonuses stack.
_BATTING_MILESTONES: tuple[tuple[int, str, frozenset[MatchFormat]], ...] = (
    (25, "milestone_25_bonus", frozenset({MatchFormat.T20, MatchFormat.T10})),
    (50, "milestone_50_bonus", _ALL_FORMATS),
    (75, "milestone_75_bonus", frozenset({MatchFormat.T20})),
    (100, "milestone_100_bonus", _ALL_FORMATS),
    (125, "milestone_125_bonus", frozenset({MatchFormat.ODI, MatchFormat.TEST})),
    (150, "milestone_150_bonus", frozenset({MatchFormat.ODI, MatchFormat.TEST})),
)

# (wickets threshold, parameter attribute) per format; bonuses stack.
_WICKET_HAULS: dict[MatchFormat, tuple[tuple[int, str], ...]] = {
    MatchFormat.TEST: ((5, "haul_bonus_medium"), (10, "haul_bonus_large")),
    MatchFormat.T10: ((2, "haul_bonus_small"), (3, "haul_bonus_medium")),
    MatchFormat.T20: ((3, "haul_bonus_small"), (4, "haul_bonus_medium"), (5, "haul_bonus_large")),
    MatchFormat.ODI: ((3, "haul_bonus_small"), (4, "haul_bonus_medium"), (5, "haul_bonus_large")),
}


def strike_rate(runs: float, balls_faced: float) -> float:
    """Runs per hundred balls, rounded to 2 decimals."""
    if balls_faced <= 0 or runs < 0:
        return 0.0
    return round((runs / balls_faced) * 100.0, 2)


def economy_rate(runs_given: float, overs_bowled: float) -> float:
    """Runs conceded per over, rounded to 2 decimals."""
    if overs_bowled <= 0 or runs_given < 0:
        return 0.0
    return round(runs_given / overs_bowled, 2)


def batting_milestone_bonus(
    runs: int,
    match_format: MatchFormat,
    params: ScoringParameters = ScoringParameters(),
) -> float:
    bonus = 0.0
    for threshold, attribute, formats in _BATTING_MILESTONES:
        if runs >= threshold and match_format in formats:
            bonus += getattr(params, attribute)
    return bonus


def wicket_haul_bonus(
    wickets: int,
    match_format: MatchFormat,
    params: ScoringParameters = ScoringParameters(),
) -> float:
    bonus = 0.0
    for threshold, attribute in _WICKET_HAULS.get(match_format, ()):
        if wickets >= threshold:
            bonus += getattr(params, attribute)
    return bonus


def duck_penalty(
    batting: BattingStat,
    role: PlayerRole,
    match_format: MatchFormat,
    params: ScoringParameters = ScoringParameters(),
) -> float:
    """Penalty (as a positive number) for a 0-run dismissal by a non-bowler."""
    if batting.runs != 0 or not batting.is_out or role == PlayerRole.BOWLER:
        return 0.0
    if match_format == MatchFormat.TEST:
        return params.test_duck_penalty
    return params.duck_penalty


def _batting_components(
    batting: BattingStat,
    match_format: MatchFormat,
    params: ScoringParameters,
) -> tuple[float, float]:
    points = batting.runs * params.run_points
    bonus = batting_milestone_bonus(batting.runs, match_format, params)
    bonus += batting.fours * params.four_bonus + batting.sixes * params.six_bonus
    return points, bonus


def _bowling_components(
    bowling: BowlingStat,
    match_format: MatchFormat,
    params: ScoringParameters,
) -> tuple[float, float]:
    wicket_unit = params.test_wicket_points if match_format == MatchFormat.TEST else params.wicket_points
    points = bowling.wickets_taken * wicket_unit
    if match_format != MatchFormat.TEST:
        maiden_unit = params.t10_maiden_points if match_format == MatchFormat.T10 else params.maiden_points
        points += bowling.maiden_overs * maiden_unit

    bonus = wicket_haul_bonus(bowling.wickets_taken, match_format, params)
    bonus += bowling.lbw_count * params.lbw_bonus + bowling.bowled_count * params.bowled_bonus
    return points, bonus


def _fielding_points(fielding: FieldingStat, params: ScoringParameters) -> float:
    return (
        fielding.catches * params.catch_points
        + fielding.stumpings * params.stumping_points
        + fielding.run_outs * params.run_out_points
    )


def compute_fantasy_points(
    stat: PlayerRawStat,
    match_format: MatchFormat,
    params: ScoringParameters = ScoringParameters(),
) -> FantasyPointsBreakdown:
    """Compute the full fantasy breakdown for one player's match stats.

    The result depends only on the arguments, so corrections are applied by
    calling this again on the corrected stats rather than by adding deltas.
    """
    batting_points, batting_bonus = _batting_components(stat.batting, match_format, params)
    bowling_points, bowling_bonus = _bowling_components(stat.bowling, match_format, params)
    fielding_points = _fielding_points(stat.fielding, params)

    bonus_points = batting_bonus + bowling_bonus
    bonus_points -= duck_penalty(stat.batting, stat.role, match_format, params)
    if stat.is_man_of_match:
        bonus_points += params.man_of_match_bonus

    return FantasyPointsBreakdown(
        batting_points=batting_points,
        bowling_points=bowling_points,
        fielding_points=fielding_points,
        bonus_points=bonus_points,
        total_points=batting_points + bowling_points + fielding_points + bonus_points,
    )


__all__ = [
    "ScoringParameters",
    "batting_milestone_bonus",
    "compute_fantasy_points",
    "duck_penalty",
    "economy_rate",
    "strike_rate",
    "wicket_haul_bonus",
]
