"""Tests for Playing XI registration, match resets and fantasy team creation."""

from __future__ import annotations

from datetime import datetime

import pytest
from sqlalchemy import select

from domain.errors import NotFoundError, StateConflictError, ValidationError
from domain.settlement import (
    PlayingXIEntry,
    apply_stat_updates,
    create_fantasy_team,
    parse_playing_xi_side,
    register_playing_xi,
    reset_match_points,
)
from models import FantasyTeam, FantasyTeamPlayer, Match, PlayerStat

TEAM1_PLAYERS = list(range(1, 12))
TEAM2_PLAYERS = list(range(101, 112))


def _side(player_ids: list[int], role: str = "batsman") -> list[PlayingXIEntry]:
    return [
        PlayingXIEntry(player_id=player_id, role=role, batting_order=index + 1)
        for index, player_id in enumerate(player_ids)
    ]


def test_register_playing_xi_seeds_zeroed_stats(session_factory, seed) -> None:
    match_id = seed.match()

    summary = register_playing_xi(
        session_factory=session_factory,
        match_id=match_id,
        team1_players=_side(TEAM1_PLAYERS),
        team2_players=_side(TEAM2_PLAYERS, role="bowler"),
        selection_bonus=4.0,
    )

    assert summary.seeded_players == 22
    with session_factory() as session:
        rows = session.scalars(
            select(PlayerStat).where(PlayerStat.match_id == match_id).order_by(PlayerStat.player_id)
        ).all()
        assert len(rows) == 22
        assert {row.team_id for row in rows if row.player_id < 100} == {1}
        assert {row.team_id for row in rows if row.player_id > 100} == {2}
        assert {row.role for row in rows if row.player_id > 100} == {"bowler"}
        assert all(row.total_points == 0.0 and row.runs == 0 for row in rows)
        assert {row.selection_bonus for row in rows} == {4.0}


def test_register_playing_xi_twice_is_a_conflict(session_factory, seed) -> None:
    match_id = seed.match()
    arguments = {
        "session_factory": session_factory,
        "match_id": match_id,
        "team1_players": _side(TEAM1_PLAYERS),
        "team2_players": _side(TEAM2_PLAYERS),
    }
    register_playing_xi(**arguments)

    with pytest.raises(StateConflictError, match="already exist"):
        register_playing_xi(**arguments)


@pytest.mark.parametrize(
    ("team1", "team2", "message"),
    [
        (_side(TEAM1_PLAYERS[:10]), _side(TEAM2_PLAYERS), "exactly 11"),
        (_side(TEAM1_PLAYERS), _side(TEAM1_PLAYERS), "must not repeat"),
        (_side(TEAM1_PLAYERS, role="coach"), _side(TEAM2_PLAYERS), "unsupported role"),
    ],
)
def test_register_playing_xi_validates_sides(session_factory, seed, team1, team2, message) -> None:
    match_id = seed.match()

    with pytest.raises(ValidationError, match=message):
        register_playing_xi(
            session_factory=session_factory,
            match_id=match_id,
            team1_players=team1,
            team2_players=team2,
        )


def test_register_playing_xi_unknown_match(session_factory) -> None:
    with pytest.raises(NotFoundError):
        register_playing_xi(
            session_factory=session_factory,
            match_id=77,
            team1_players=_side(TEAM1_PLAYERS),
            team2_players=_side(TEAM2_PLAYERS),
        )


def test_reset_match_points_clears_stats_and_team_totals(session_factory, seed) -> None:
    match_id = seed.match()
    register_playing_xi(
        session_factory=session_factory,
        match_id=match_id,
        team1_players=_side(TEAM1_PLAYERS),
        team2_players=_side(TEAM2_PLAYERS),
    )
    user_id = seed.user()
    team_id = seed.team(user_id, match_id, TEAM1_PLAYERS)
    apply_stat_updates(
        session_factory=session_factory,
        match_id=match_id,
        updates=[{"player_id": 3, "batting": {"runs": 10}}],
    )

    summary = reset_match_points(session_factory=session_factory, match_id=match_id)

    assert summary.deleted_stats == 22
    assert summary.reset_teams == 1
    with session_factory() as session:
        assert session.get(FantasyTeam, team_id).total_points == 0.0
        slots = session.scalars(
            select(FantasyTeamPlayer.final_points).where(FantasyTeamPlayer.team_id == team_id)
        ).all()
        assert set(slots) == {0.0}
        assert session.scalars(select(PlayerStat).where(PlayerStat.match_id == match_id)).all() == []


def _archive(session_factory, match_id: int) -> None:
    with session_factory() as session:
        session.get(Match, match_id).archived_at = datetime(2024, 1, 1)
        session.commit()


def test_archived_match_cannot_be_reset(session_factory, seed) -> None:
    match_id = seed.match(status="completed")
    seed.stats(match_id, [1, 2], runs=30)
    _archive(session_factory, match_id)

    with pytest.raises(StateConflictError, match="archived"):
        reset_match_points(session_factory=session_factory, match_id=match_id)

    with session_factory() as session:
        rows = session.scalars(select(PlayerStat).where(PlayerStat.match_id == match_id)).all()
        assert len(rows) == 2
        assert {row.runs for row in rows} == {30}


def test_archived_match_cannot_register_playing_xi(session_factory, seed) -> None:
    match_id = seed.match(status="completed")
    _archive(session_factory, match_id)

    with pytest.raises(StateConflictError, match="archived"):
        register_playing_xi(
            session_factory=session_factory,
            match_id=match_id,
            team1_players=_side(TEAM1_PLAYERS),
            team2_players=_side(TEAM2_PLAYERS),
        )

    with session_factory() as session:
        assert session.scalars(select(PlayerStat).where(PlayerStat.match_id == match_id)).all() == []


def test_create_fantasy_team(session_factory, seed) -> None:
    match_id = seed.match()
    user_id = seed.user()

    summary = create_fantasy_team(
        session_factory=session_factory,
        user_id=user_id,
        match_id=match_id,
        player_ids=TEAM1_PLAYERS,
        captain_id=4,
        vice_captain_id=9,
        name="Night Owls",
    )

    with session_factory() as session:
        team = session.get(FantasyTeam, summary.id)
        assert team.captain_id == 4
        assert team.vice_captain_id == 9
        assert team.name == "Night Owls"
        assert [slot.player_id for slot in team.players] == TEAM1_PLAYERS


@pytest.mark.parametrize(
    ("player_ids", "captain_id", "vice_captain_id", "message"),
    [
        (TEAM1_PLAYERS[:10], 1, 2, "exactly 11"),
        (TEAM1_PLAYERS[:10] + [1], 1, 2, "must not repeat"),
        (TEAM1_PLAYERS, 1, 1, "must be different"),
        (TEAM1_PLAYERS, 50, 2, "Captain 50"),
        (TEAM1_PLAYERS, 1, 50, "Vice-captain 50"),
    ],
)
def test_create_fantasy_team_validates_roster(
    session_factory, seed, player_ids, captain_id, vice_captain_id, message
) -> None:
    match_id = seed.match()
    user_id = seed.user()

    with pytest.raises(ValidationError, match=message):
        create_fantasy_team(
            session_factory=session_factory,
            user_id=user_id,
            match_id=match_id,
            player_ids=player_ids,
            captain_id=captain_id,
            vice_captain_id=vice_captain_id,
        )


def test_create_fantasy_team_requires_upcoming_match_and_known_user(session_factory, seed) -> None:
    live_match = seed.match(status="live")
    user_id = seed.user()
    arguments = {
        "session_factory": session_factory,
        "player_ids": TEAM1_PLAYERS,
        "captain_id": 1,
        "vice_captain_id": 2,
    }

    with pytest.raises(StateConflictError):
        create_fantasy_team(user_id=user_id, match_id=live_match, **arguments)
    with pytest.raises(NotFoundError):
        create_fantasy_team(user_id=999, match_id=live_match, **arguments)


def test_parse_playing_xi_side_reads_json_entries() -> None:
    entries = parse_playing_xi_side(
        "team1",
        [{"player_id": 7, "role": "bowler", "batting_order": 10}, {"player_id": 8, "role": "batsman"}],
    )

    assert entries == [
        PlayingXIEntry(player_id=7, role="bowler", batting_order=10),
        PlayingXIEntry(player_id=8, role="batsman", batting_order=None),
    ]


@pytest.mark.parametrize(
    ("raw", "message"),
    [
        (None, "must be a list"),
        ([7], "must be an object"),
        ([{"player_id": "7", "role": "bowler"}], "invalid player_id"),
        ([{"player_id": 7}], "needs a role"),
        ([{"player_id": 7, "role": "bowler", "batting_order": "1"}], "invalid batting_order"),
    ],
)
def test_parse_playing_xi_side_rejects_malformed_entries(raw, message: str) -> None:
    with pytest.raises(ValidationError, match=message):
        parse_playing_xi_side("team1", raw)
