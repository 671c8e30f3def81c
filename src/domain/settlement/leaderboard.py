"""Ranked contest standings."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import select

from domain.errors import NotFoundError
from domain.settlement.common import SessionFactory, persistence_boundary
from models import FantasyTeamPlayer
from repositories import contests as contest_repository
from repositories.matches import get_match


@dataclass(frozen=True)
class LeaderboardEntry:
    rank: int
    entry_id: int
    user_id: int
    username: str
    team_id: int
    captain_id: int
    vice_captain_id: int
    player_ids: tuple[int, ...]
    total_points: float
    joined_at: datetime
    match_status: str


def leaderboard(*, session_factory: SessionFactory, contest_id: int) -> list[LeaderboardEntry]:
    """Entries by total points desc; ties go to the earlier join, then the lower entry id."""
    with persistence_boundary("leaderboard", contest_id=contest_id):
        with session_factory() as session:
            contest = contest_repository.get_contest(session, contest_id)
            if contest is None:
                raise NotFoundError("contest", contest_id)
            match = get_match(session, contest.match_id)
            match_status = "" if match is None else match.status

            rows = contest_repository.fetch_standings_rows(session, contest_id)
            team_ids = [row.team_id for row in rows]
            players_by_team: dict[int, list[int]] = defaultdict(list)
            if team_ids:
                slots = session.execute(
                    select(FantasyTeamPlayer.team_id, FantasyTeamPlayer.player_id)
                    .where(FantasyTeamPlayer.team_id.in_(team_ids))
                    .order_by(FantasyTeamPlayer.team_id, FantasyTeamPlayer.id)
                )
                for team_id, player_id in slots:
                    players_by_team[team_id].append(player_id)

    return [
        LeaderboardEntry(
            rank=index + 1,
            entry_id=row.entry_id,
            user_id=row.user_id,
            username=row.username,
            team_id=row.team_id,
            captain_id=row.captain_id,
            vice_captain_id=row.vice_captain_id,
            player_ids=tuple(players_by_team[row.team_id]),
            total_points=float(row.total_points),
            joined_at=row.joined_at,
            match_status=match_status,
        )
        for index, row in enumerate(rows)
    ]


__all__ = ["LeaderboardEntry", "leaderboard"]
