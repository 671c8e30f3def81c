"""Shared fixtures: a file-backed SQLite settlement database and seed helpers."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from datetime import datetime, timedelta
from decimal import Decimal
from pathlib import Path

import pytest
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from db import create_db_engine, create_session_factory
from models import Contest, Match, PlayerStat, User
from repositories import ensure_settlement_schema
from repositories.fantasy_teams import create_team

TEAM1_PLAYERS = list(range(1, 12))


class SteppingClock:
    """Deterministic clock; each call advances by one second."""

    def __init__(self, start: datetime = datetime(2024, 5, 1, 12, 0, 0)) -> None:
        self.current = start

    def __call__(self) -> datetime:
        value = self.current
        self.current += timedelta(seconds=1)
        return value


class Seeder:
    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self.session_factory = session_factory
        self._user_count = 0

    def match(self, *, match_format: str = "T20", status: str = "upcoming") -> int:
        with self.session_factory() as session:
            match = Match(format=match_format, team1_id=1, team2_id=2, status=status)
            session.add(match)
            session.commit()
            return match.id

    def user(self, *, balance: str = "100.00", username: str | None = None) -> int:
        self._user_count += 1
        with self.session_factory() as session:
            user = User(
                username=username or f"user{self._user_count}",
                balance=Decimal(balance),
            )
            session.add(user)
            session.commit()
            return user.id

    def stats(
        self,
        match_id: int,
        player_ids: Sequence[int],
        *,
        role: str = "batsman",
        team_id: int = 1,
        **values: object,
    ) -> None:
        with self.session_factory() as session:
            for player_id in player_ids:
                session.add(
                    PlayerStat(
                        match_id=match_id,
                        player_id=player_id,
                        team_id=team_id,
                        role=role,
                        **values,
                    )
                )
            session.commit()

    def team(
        self,
        user_id: int,
        match_id: int,
        player_ids: Sequence[int] = tuple(TEAM1_PLAYERS),
        *,
        captain_id: int | None = None,
        vice_captain_id: int | None = None,
    ) -> int:
        with self.session_factory() as session:
            team = create_team(
                session,
                user_id=user_id,
                match_id=match_id,
                player_ids=list(player_ids),
                captain_id=player_ids[0] if captain_id is None else captain_id,
                vice_captain_id=player_ids[1] if vice_captain_id is None else vice_captain_id,
            )
            session.commit()
            return team.id

    def contest(
        self,
        match_id: int,
        *,
        entry_fee: str = "10.00",
        prize_pool: str = "100.00",
        total_spots: int = 2,
        max_team_per_user: int = 1,
        contest_format: str = "h2h",
        prize_distribution: list[dict[str, object]] | None = None,
    ) -> int:
        with self.session_factory() as session:
            contest = Contest(
                match_id=match_id,
                format=contest_format,
                entry_fee=Decimal(entry_fee),
                prize_pool=Decimal(prize_pool),
                total_spots=total_spots,
                current_participants=0,
                max_team_per_user=max_team_per_user,
                status="open",
                prize_distribution=prize_distribution or [],
            )
            session.add(contest)
            session.commit()
            return contest.id


@pytest.fixture
def engine(tmp_path: Path) -> Iterator[Engine]:
    engine = create_db_engine(f"sqlite:///{tmp_path / 'settlement.db'}")
    ensure_settlement_schema(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine: Engine) -> sessionmaker[Session]:
    return create_session_factory(engine)


@pytest.fixture
def seed(session_factory: sessionmaker[Session]) -> Seeder:
    return Seeder(session_factory)


@pytest.fixture
def clock() -> SteppingClock:
    return SteppingClock()
