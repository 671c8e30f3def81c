"""Fantasy points scoring."""

from domain.scoring.calculator import (
    ScoringParameters,
    compute_fantasy_points,
    economy_rate,
    strike_rate,
    wicket_haul_bonus,
)

__all__ = [
    "ScoringParameters",
    "compute_fantasy_points",
    "economy_rate",
    "strike_rate",
    "wicket_haul_bonus",
]
