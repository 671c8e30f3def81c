"""Concurrent joins against one contest never overshoot capacity or double-debit."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal

import pytest
from sqlalchemy import func, select

from domain.errors import ContestFullError, InsufficientFundsError, StateConflictError
from domain.settlement import ContestLedger
from models import Contest, ContestEntry, ContestEvent, User


@pytest.mark.parametrize("joiners", [2, 5, 12])
def test_concurrent_joins_respect_total_spots(session_factory, seed, joiners: int) -> None:
    match_id = seed.match()
    users = [seed.user(balance="10.00") for _ in range(joiners)]
    teams = [seed.team(user_id, match_id) for user_id in users]
    contest_id = seed.contest(match_id, entry_fee="10.00", total_spots=2)
    ledger = ContestLedger(session_factory)

    def attempt(index: int) -> str:
        try:
            ledger.join(contest_id, users[index], teams[index])
        except ContestFullError:
            return "full"
        return "joined"

    with ThreadPoolExecutor(max_workers=min(joiners, 8)) as executor:
        outcomes = list(executor.map(attempt, range(joiners)))

    assert outcomes.count("joined") == 2
    assert outcomes.count("full") == joiners - 2
    with session_factory() as session:
        contest = session.get(Contest, contest_id)
        assert contest.current_participants == 2
        assert contest.status == "closed"
        entries = session.scalar(
            select(func.count()).select_from(ContestEntry).where(ContestEntry.contest_id == contest_id)
        )
        assert entries == 2
        debited = session.scalar(select(func.count()).select_from(User).where(User.balance == 0))
        assert debited == 2
        assert session.scalar(select(func.count()).select_from(ContestEvent)) == 1


def test_concurrent_joins_by_one_user_cannot_double_spend(session_factory, seed) -> None:
    match_id = seed.match()
    user_id = seed.user(balance="15.00")
    teams = [seed.team(user_id, match_id) for _ in range(4)]
    contest_ids = [seed.contest(match_id, entry_fee="10.00", total_spots=5) for _ in range(4)]
    ledger = ContestLedger(session_factory)

    def attempt(index: int) -> str:
        try:
            ledger.join(contest_ids[index], user_id, teams[index])
        except InsufficientFundsError:
            return "insufficient"
        except StateConflictError:
            return "conflict"
        return "joined"

    with ThreadPoolExecutor(max_workers=4) as executor:
        outcomes = list(executor.map(attempt, range(4)))

    assert outcomes.count("joined") == 1
    assert outcomes.count("insufficient") == 3
    with session_factory() as session:
        assert session.get(User, user_id).balance == Decimal("5.00")
