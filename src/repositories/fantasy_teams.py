"""Persistence helpers for fantasy teams."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import select, update
from sqlalchemy.orm import Session, selectinload

from models import FantasyTeam, FantasyTeamPlayer


def fetch_team_chunk(
    session: Session,
    match_id: int,
    *,
    after_id: int,
    limit: int,
) -> list[FantasyTeam]:
    """Keyset-paginated batch of teams with their roster rows loaded."""
    statement = (
        select(FantasyTeam)
        .options(selectinload(FantasyTeam.players))
        .where(FantasyTeam.match_id == match_id, FantasyTeam.id > after_id)
        .order_by(FantasyTeam.id)
        .limit(limit)
    )
    return list(session.scalars(statement))


def get_team(session: Session, team_id: int) -> FantasyTeam | None:
    return session.get(FantasyTeam, team_id, options=[selectinload(FantasyTeam.players)])


def create_team(
    session: Session,
    *,
    user_id: int,
    match_id: int,
    player_ids: Sequence[int],
    captain_id: int,
    vice_captain_id: int,
    name: str | None = None,
) -> FantasyTeam:
    team = FantasyTeam(
        user_id=user_id,
        match_id=match_id,
        name=name,
        captain_id=captain_id,
        vice_captain_id=vice_captain_id,
        total_points=0.0,
        players=[FantasyTeamPlayer(player_id=player_id, final_points=0.0) for player_id in player_ids],
    )
    session.add(team)
    session.flush()
    return team


def reset_points_for_match(session: Session, match_id: int) -> int:
    """Zero every roster slot and team total for a match; returns teams touched."""
    team_ids = select(FantasyTeam.id).where(FantasyTeam.match_id == match_id)
    session.execute(
        update(FantasyTeamPlayer)
        .where(FantasyTeamPlayer.team_id.in_(team_ids))
        .values(final_points=0.0)
        .execution_options(synchronize_session=False)
    )
    result = session.execute(
        update(FantasyTeam)
        .where(FantasyTeam.match_id == match_id)
        .values(total_points=0.0)
        .execution_options(synchronize_session=False)
    )
    return int(result.rowcount or 0)


__all__ = [
    "create_team",
    "fetch_team_chunk",
    "get_team",
    "reset_points_for_match",
]
