"""Persistence helpers for per-match player stats."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any

from sqlalchemy import delete, func, insert, select
from sqlalchemy.orm import Session

from domain.common import (
    BattingStat,
    BowlingStat,
    FantasyPointsBreakdown,
    FieldingStat,
    PlayerRawStat,
)
from domain.protocol import PlayerRole
from models import PlayerStat

BATTING_FIELDS = ("runs", "balls_faced", "fours", "sixes", "is_out")
BOWLING_FIELDS = (
    "overs_bowled",
    "wickets_taken",
    "maiden_overs",
    "lbw_count",
    "bowled_count",
    "runs_given",
)
FIELDING_FIELDS = ("catches", "stumpings", "run_outs")


def count_stats_for_match(session: Session, match_id: int) -> int:
    result = session.scalar(
        select(func.count()).select_from(PlayerStat).where(PlayerStat.match_id == match_id)
    )
    return int(result or 0)


def fetch_stats_for_players(
    session: Session,
    match_id: int,
    player_ids: Iterable[int],
    *,
    for_update: bool = False,
) -> dict[int, PlayerStat]:
    """Load stat rows keyed by player id, optionally row-locked for the batch."""
    statement = (
        select(PlayerStat)
        .where(PlayerStat.match_id == match_id, PlayerStat.player_id.in_(list(player_ids)))
        .order_by(PlayerStat.player_id)
    )
    if for_update:
        statement = statement.with_for_update()
    return {row.player_id: row for row in session.scalars(statement)}


def fetch_player_points(session: Session, match_id: int) -> dict[int, float]:
    """Snapshot of scoring base (breakdown total plus selection bonus) per player."""
    rows = session.execute(
        select(
            PlayerStat.player_id,
            PlayerStat.total_points,
            PlayerStat.selection_bonus,
        ).where(PlayerStat.match_id == match_id)
    )
    return {
        int(player_id): float(total_points) + float(selection_bonus)
        for player_id, total_points, selection_bonus in rows
    }


def to_raw_stat(row: PlayerStat) -> PlayerRawStat:
    return PlayerRawStat(
        player_id=row.player_id,
        role=PlayerRole(row.role),
        batting=BattingStat(**{name: getattr(row, name) for name in BATTING_FIELDS}),
        bowling=BowlingStat(**{name: getattr(row, name) for name in BOWLING_FIELDS}),
        fielding=FieldingStat(**{name: getattr(row, name) for name in FIELDING_FIELDS}),
        is_man_of_match=row.is_man_of_match,
    )


def apply_breakdown(row: PlayerStat, breakdown: FantasyPointsBreakdown) -> None:
    row.batting_points = breakdown.batting_points
    row.bowling_points = breakdown.bowling_points
    row.fielding_points = breakdown.fielding_points
    row.bonus_points = breakdown.bonus_points
    row.total_points = breakdown.total_points


def insert_player_stats(session: Session, rows: Sequence[dict[str, Any]]) -> None:
    """Bulk insert freshly seeded stat rows."""
    if not rows:
        return
    session.execute(insert(PlayerStat), list(rows))


def delete_stats_for_match(session: Session, match_id: int) -> int:
    result = session.execute(delete(PlayerStat).where(PlayerStat.match_id == match_id))
    return int(result.rowcount or 0)


__all__ = [
    "BATTING_FIELDS",
    "BOWLING_FIELDS",
    "FIELDING_FIELDS",
    "apply_breakdown",
    "count_stats_for_match",
    "delete_stats_for_match",
    "fetch_player_points",
    "fetch_stats_for_players",
    "insert_player_stats",
    "to_raw_stat",
]
