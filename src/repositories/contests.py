"""Persistence helpers for contests, entries and contest events."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import case, func, insert, select, update
from sqlalchemy.orm import Session

from domain.protocol import ContestEventStatus, ContestStatus
from models import Contest, ContestEntry, ContestEvent, FantasyTeam, User


def get_contest(session: Session, contest_id: int) -> Contest | None:
    return session.get(Contest, contest_id)


def list_contests_for_match(session: Session, match_id: int) -> list[Contest]:
    statement = select(Contest).where(Contest.match_id == match_id).order_by(Contest.id)
    return list(session.scalars(statement))


def create_contest(
    session: Session,
    *,
    match_id: int,
    contest_format: str,
    entry_fee: Decimal,
    prize_pool: Decimal,
    total_spots: int,
    max_team_per_user: int,
    prize_distribution: list[dict[str, Any]] | None = None,
    spawned_from_id: int | None = None,
) -> Contest:
    contest = Contest(
        match_id=match_id,
        format=contest_format,
        entry_fee=entry_fee,
        prize_pool=prize_pool,
        total_spots=total_spots,
        current_participants=0,
        max_team_per_user=max_team_per_user,
        status=ContestStatus.OPEN.value,
        prize_distribution=list(prize_distribution or []),
        spawned_from_id=spawned_from_id,
    )
    session.add(contest)
    session.flush()
    return contest


def claim_spot(session: Session, contest_id: int) -> bool:
    """Atomically take one spot; closes the contest when the last spot goes.

    Increment and close are a single conditional UPDATE, so concurrent callers
    can never push current_participants past total_spots. On PostgreSQL the
    updated row stays locked until the surrounding transaction ends.
    """
    next_count = Contest.current_participants + 1
    result = session.execute(
        update(Contest)
        .where(
            Contest.id == contest_id,
            Contest.status == ContestStatus.OPEN.value,
            Contest.current_participants < Contest.total_spots,
        )
        .values(
            current_participants=next_count,
            status=case(
                (next_count >= Contest.total_spots, ContestStatus.CLOSED.value),
                else_=ContestStatus.OPEN.value,
            ),
        )
        .execution_options(synchronize_session=False)
    )
    return int(result.rowcount or 0) == 1


def fetch_capacity(session: Session, contest_id: int) -> tuple[int, int, str] | None:
    """Return (current_participants, total_spots, status) straight from the database."""
    row = session.execute(
        select(Contest.current_participants, Contest.total_spots, Contest.status).where(
            Contest.id == contest_id
        )
    ).one_or_none()
    if row is None:
        return None
    return int(row[0]), int(row[1]), str(row[2])


def count_user_entries(session: Session, contest_id: int, user_id: int) -> int:
    result = session.scalar(
        select(func.count())
        .select_from(ContestEntry)
        .where(ContestEntry.contest_id == contest_id, ContestEntry.user_id == user_id)
    )
    return int(result or 0)


def team_already_entered(session: Session, contest_id: int, team_id: int) -> bool:
    result = session.scalar(
        select(ContestEntry.id).where(
            ContestEntry.contest_id == contest_id,
            ContestEntry.team_id == team_id,
        )
    )
    return result is not None


def insert_entry(
    session: Session,
    *,
    contest_id: int,
    user_id: int,
    team_id: int,
    joined_at: datetime,
) -> ContestEntry:
    entry = ContestEntry(
        contest_id=contest_id,
        user_id=user_id,
        team_id=team_id,
        joined_at=joined_at,
    )
    session.add(entry)
    session.flush()
    return entry


def close_open_contests_for_match(session: Session, match_id: int) -> list[int]:
    """Close every open contest of a match; returns the affected contest ids."""
    contest_ids = list(
        session.scalars(
            select(Contest.id).where(
                Contest.match_id == match_id,
                Contest.status == ContestStatus.OPEN.value,
            )
        )
    )
    if contest_ids:
        session.execute(
            update(Contest)
            .where(Contest.id.in_(contest_ids))
            .values(status=ContestStatus.CLOSED.value)
            .execution_options(synchronize_session=False)
        )
    return contest_ids


def fetch_entries_for_match(session: Session, match_id: int) -> list[ContestEntry]:
    statement = (
        select(ContestEntry)
        .join(Contest, Contest.id == ContestEntry.contest_id)
        .where(Contest.match_id == match_id)
        .order_by(ContestEntry.contest_id, ContestEntry.id)
    )
    return list(session.scalars(statement))


def fetch_standings_rows(session: Session, contest_id: int) -> list[Any]:
    """Entries joined with team totals and usernames in leaderboard order."""
    statement = (
        select(
            ContestEntry.id.label("entry_id"),
            ContestEntry.user_id,
            ContestEntry.team_id,
            ContestEntry.joined_at,
            User.username,
            FantasyTeam.total_points,
            FantasyTeam.captain_id,
            FantasyTeam.vice_captain_id,
        )
        .join(FantasyTeam, FantasyTeam.id == ContestEntry.team_id)
        .join(User, User.id == ContestEntry.user_id)
        .where(ContestEntry.contest_id == contest_id)
        .order_by(
            FantasyTeam.total_points.desc(),
            ContestEntry.joined_at.asc(),
            ContestEntry.id.asc(),
        )
    )
    return list(session.execute(statement))


def enqueue_event(
    session: Session,
    *,
    kind: str,
    contest_id: int,
    payload: dict[str, Any],
) -> None:
    session.execute(
        insert(ContestEvent).values(
            kind=kind,
            contest_id=contest_id,
            payload_json=payload,
            status=ContestEventStatus.PENDING.value,
            attempts=0,
        )
    )


def fetch_pending_event_ids(session: Session, *, limit: int | None = None) -> list[int]:
    statement = (
        select(ContestEvent.id)
        .where(ContestEvent.status == ContestEventStatus.PENDING.value)
        .order_by(ContestEvent.id)
    )
    if limit is not None:
        statement = statement.limit(limit)
    return list(session.scalars(statement))


def lock_pending_event(session: Session, event_id: int) -> ContestEvent | None:
    """Load one pending event row-locked, skipping rows another worker holds."""
    statement = (
        select(ContestEvent)
        .where(
            ContestEvent.id == event_id,
            ContestEvent.status == ContestEventStatus.PENDING.value,
        )
        .with_for_update(skip_locked=True)
    )
    return session.scalars(statement).one_or_none()


__all__ = [
    "claim_spot",
    "close_open_contests_for_match",
    "count_user_entries",
    "create_contest",
    "enqueue_event",
    "fetch_capacity",
    "fetch_entries_for_match",
    "fetch_pending_event_ids",
    "fetch_standings_rows",
    "get_contest",
    "insert_entry",
    "list_contests_for_match",
    "lock_pending_event",
    "team_already_entered",
]
