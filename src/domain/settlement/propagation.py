"""Propagate player fantasy points into every fantasy team of a match."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from domain.errors import NotFoundError, ValidationError
from domain.settlement.common import SessionFactory, persistence_boundary
from models import FantasyTeam
from repositories import fantasy_teams as team_repository
from repositories.matches import get_match
from repositories.player_stats import fetch_player_points

logger = logging.getLogger(__name__)

CAPTAIN_MULTIPLIER = 2.0
VICE_CAPTAIN_MULTIPLIER = 1.5


@dataclass(frozen=True)
class RefreshSummary:
    match_id: int
    updated_teams: int
    total_teams: int


def role_multiplier(player_id: int, *, captain_id: int, vice_captain_id: int) -> float:
    if player_id == captain_id:
        return CAPTAIN_MULTIPLIER
    if player_id == vice_captain_id:
        return VICE_CAPTAIN_MULTIPLIER
    return 1.0


def compute_team_points(
    player_ids: Iterable[int],
    *,
    captain_id: int,
    vice_captain_id: int,
    player_points: Mapping[int, float],
) -> tuple[dict[int, float], float]:
    """Per-player final points and the team total; players without stats score 0."""
    final_points = {
        player_id: player_points.get(player_id, 0.0)
        * role_multiplier(player_id, captain_id=captain_id, vice_captain_id=vice_captain_id)
        for player_id in player_ids
    }
    return final_points, sum(final_points.values())


def _refresh_team(team: FantasyTeam, player_points: Mapping[int, float]) -> bool:
    final_points, total_points = compute_team_points(
        [slot.player_id for slot in team.players],
        captain_id=team.captain_id,
        vice_captain_id=team.vice_captain_id,
        player_points=player_points,
    )

    changed = team.total_points != total_points
    for slot in team.players:
        if slot.final_points != final_points[slot.player_id]:
            slot.final_points = final_points[slot.player_id]
            changed = True
    if team.total_points != total_points:
        team.total_points = total_points
    return changed


def refresh_team_points(
    *,
    session_factory: SessionFactory,
    match_id: int,
    chunk_size: int = 500,
) -> RefreshSummary:
    """Fully recompute every fantasy team bound to ``match_id``.

    Player points are read once up front, so every team in the call sees the
    same post-batch snapshot. Teams are then processed in id-ordered chunks with
    one commit per chunk, and teams whose stored points already match are not
    written.
    """
    if chunk_size <= 0:
        raise ValidationError("chunk_size must be greater than 0")

    with persistence_boundary("refresh_team_points", match_id=match_id):
        with session_factory() as session:
            if get_match(session, match_id) is None:
                raise NotFoundError("match", match_id)

            player_points = fetch_player_points(session, match_id)

            total_teams = 0
            updated_teams = 0
            after_id = 0
            try:
                while True:
                    teams = team_repository.fetch_team_chunk(
                        session,
                        match_id,
                        after_id=after_id,
                        limit=chunk_size,
                    )
                    if not teams:
                        break

                    for team in teams:
                        total_teams += 1
                        if _refresh_team(team, player_points):
                            updated_teams += 1

                    session.commit()
                    after_id = teams[-1].id
            except Exception:
                session.rollback()
                raise

    logger.info(
        "refreshed team points match_id=%s updated_teams=%s total_teams=%s players_with_stats=%s",
        match_id,
        updated_teams,
        total_teams,
        len(player_points),
    )
    return RefreshSummary(match_id=match_id, updated_teams=updated_teams, total_teams=total_teams)


__all__ = [
    "CAPTAIN_MULTIPLIER",
    "RefreshSummary",
    "VICE_CAPTAIN_MULTIPLIER",
    "compute_team_points",
    "refresh_team_points",
    "role_multiplier",
]
