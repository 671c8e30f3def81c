"""Playing XI registration, match resets and fantasy team creation."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from domain.errors import NotFoundError, StateConflictError, ValidationError
from domain.protocol import MatchStatus, PlayerRole
from domain.settlement.common import SessionFactory, persistence_boundary
from models import Match, User
from repositories import fantasy_teams as team_repository
from repositories import player_stats as stat_repository
from repositories.matches import get_match

logger = logging.getLogger(__name__)

PLAYING_XI_SIZE = 11
FANTASY_TEAM_SIZE = 11
MAX_TEAM_NAME_LENGTH = 20


@dataclass(frozen=True)
class PlayingXIEntry:
    player_id: int
    role: str
    batting_order: int | None = None


@dataclass(frozen=True)
class PlayingXISummary:
    match_id: int
    seeded_players: int
    selection_bonus: float


@dataclass(frozen=True)
class ResetSummary:
    match_id: int
    deleted_stats: int
    reset_teams: int


@dataclass(frozen=True)
class FantasyTeamSummary:
    id: int
    user_id: int
    match_id: int
    name: str | None
    captain_id: int
    vice_captain_id: int
    player_ids: tuple[int, ...]


def _validate_side(label: str, players: Sequence[PlayingXIEntry]) -> None:
    if len(players) != PLAYING_XI_SIZE:
        raise ValidationError(
            f"{label} must list exactly {PLAYING_XI_SIZE} players, got {len(players)}"
        )
    for entry in players:
        try:
            PlayerRole(entry.role)
        except ValueError as exc:
            available = ", ".join(member.value for member in PlayerRole)
            raise ValidationError(
                f"{label}: player {entry.player_id} has unsupported role '{entry.role}'. "
                f"Choose one of: {available}."
            ) from exc


def parse_playing_xi_side(label: str, raw: Any) -> list[PlayingXIEntry]:
    """Turn a JSON list of ``{player_id, role, batting_order}`` objects into entries."""
    if not isinstance(raw, list):
        raise ValidationError(f"{label} must be a list of players")
    entries: list[PlayingXIEntry] = []
    for item in raw:
        if not isinstance(item, Mapping):
            raise ValidationError(f"{label}: each player must be an object")
        player_id = item.get("player_id")
        if isinstance(player_id, bool) or not isinstance(player_id, int):
            raise ValidationError(f"{label}: invalid player_id {player_id!r}")
        role = item.get("role")
        if not isinstance(role, str):
            raise ValidationError(f"{label}: player {player_id} needs a role")
        batting_order = item.get("batting_order")
        if batting_order is not None and (
            isinstance(batting_order, bool) or not isinstance(batting_order, int)
        ):
            raise ValidationError(f"{label}: player {player_id} has an invalid batting_order")
        entries.append(PlayingXIEntry(player_id=player_id, role=role, batting_order=batting_order))
    return entries


def _ensure_not_archived(match: Match) -> None:
    if match.archived_at is not None:
        raise StateConflictError(f"Match {match.id} is archived; its stats are read-only")


def _seed_rows(
    match_id: int,
    team_id: int,
    players: Sequence[PlayingXIEntry],
    selection_bonus: float,
) -> list[dict[str, object]]:
    return [
        {
            "match_id": match_id,
            "player_id": entry.player_id,
            "team_id": team_id,
            "role": PlayerRole(entry.role).value,
            "batting_order": entry.batting_order,
            "selection_bonus": selection_bonus,
        }
        for entry in players
    ]


def register_playing_xi(
    *,
    session_factory: SessionFactory,
    match_id: int,
    team1_players: Sequence[PlayingXIEntry],
    team2_players: Sequence[PlayingXIEntry],
    selection_bonus: float = 0.0,
) -> PlayingXISummary:
    """Seed zeroed stat rows for both sides of a finalized Playing XI.

    ``selection_bonus`` is written once here and is never changed by later
    rescoring.
    """
    if selection_bonus < 0:
        raise ValidationError("selection_bonus must be >= 0")
    _validate_side("team1_players", team1_players)
    _validate_side("team2_players", team2_players)

    player_ids = [entry.player_id for entry in (*team1_players, *team2_players)]
    if len(set(player_ids)) != len(player_ids):
        raise ValidationError("Playing XI lists must not repeat a player")

    with persistence_boundary("register_playing_xi", match_id=match_id):
        with session_factory() as session:
            match = get_match(session, match_id)
            if match is None:
                raise NotFoundError("match", match_id)
            _ensure_not_archived(match)
            if stat_repository.count_stats_for_match(session, match_id) > 0:
                raise StateConflictError(f"Scores for match {match_id} already exist")

            stat_repository.insert_player_stats(
                session,
                _seed_rows(match_id, match.team1_id, team1_players, selection_bonus)
                + _seed_rows(match_id, match.team2_id, team2_players, selection_bonus),
            )
            session.commit()

    logger.info(
        "registered playing xi match_id=%s players=%s selection_bonus=%s",
        match_id,
        len(player_ids),
        selection_bonus,
    )
    return PlayingXISummary(
        match_id=match_id,
        seeded_players=len(player_ids),
        selection_bonus=selection_bonus,
    )


def reset_match_points(*, session_factory: SessionFactory, match_id: int) -> ResetSummary:
    with persistence_boundary("reset_match_points", match_id=match_id):
        with session_factory() as session:
            match = get_match(session, match_id)
            if match is None:
                raise NotFoundError("match", match_id)
            _ensure_not_archived(match)
            deleted_stats = stat_repository.delete_stats_for_match(session, match_id)
            reset_teams = team_repository.reset_points_for_match(session, match_id)
            session.commit()

    logger.info(
        "reset match points match_id=%s deleted_stats=%s reset_teams=%s",
        match_id,
        deleted_stats,
        reset_teams,
    )
    return ResetSummary(match_id=match_id, deleted_stats=deleted_stats, reset_teams=reset_teams)


def _validate_roster(
    player_ids: Sequence[int],
    *,
    captain_id: int,
    vice_captain_id: int,
    name: str | None,
) -> None:
    if len(player_ids) != FANTASY_TEAM_SIZE:
        raise ValidationError(
            f"A fantasy team needs exactly {FANTASY_TEAM_SIZE} players, got {len(player_ids)}"
        )
    if len(set(player_ids)) != len(player_ids):
        raise ValidationError("A fantasy team must not repeat a player")
    if captain_id == vice_captain_id:
        raise ValidationError("Captain and vice-captain must be different players")
    if captain_id not in player_ids:
        raise ValidationError(f"Captain {captain_id} is not in the team")
    if vice_captain_id not in player_ids:
        raise ValidationError(f"Vice-captain {vice_captain_id} is not in the team")
    if name is not None and len(name) > MAX_TEAM_NAME_LENGTH:
        raise ValidationError(f"Team name must be at most {MAX_TEAM_NAME_LENGTH} characters")


def create_fantasy_team(
    *,
    session_factory: SessionFactory,
    user_id: int,
    match_id: int,
    player_ids: Sequence[int],
    captain_id: int,
    vice_captain_id: int,
    name: str | None = None,
) -> FantasyTeamSummary:
    _validate_roster(player_ids, captain_id=captain_id, vice_captain_id=vice_captain_id, name=name)

    with persistence_boundary("create_fantasy_team", user_id=user_id, match_id=match_id):
        with session_factory() as session:
            if session.get(User, user_id) is None:
                raise NotFoundError("user", user_id)
            match = get_match(session, match_id)
            if match is None:
                raise NotFoundError("match", match_id)
            if match.status != MatchStatus.UPCOMING.value:
                raise StateConflictError(
                    f"Match {match_id} is {match.status}; teams can no longer be created"
                )

            team = team_repository.create_team(
                session,
                user_id=user_id,
                match_id=match_id,
                player_ids=player_ids,
                captain_id=captain_id,
                vice_captain_id=vice_captain_id,
                name=name,
            )
            summary = FantasyTeamSummary(
                id=team.id,
                user_id=user_id,
                match_id=match_id,
                name=name,
                captain_id=captain_id,
                vice_captain_id=vice_captain_id,
                player_ids=tuple(player_ids),
            )
            session.commit()

    logger.info("created fantasy team team_id=%s user_id=%s match_id=%s", summary.id, user_id, match_id)
    return summary


__all__ = [
    "FantasyTeamSummary",
    "PlayingXIEntry",
    "PlayingXISummary",
    "ResetSummary",
    "create_fantasy_team",
    "parse_playing_xi_side",
    "register_playing_xi",
    "reset_match_points",
]
