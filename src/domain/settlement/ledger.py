"""Contest capacity and wallet ledger."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any

from sqlalchemy.orm import Session

from domain.errors import (
    ContestFullError,
    InsufficientFundsError,
    MatchNotJoinableError,
    NotFoundError,
    StateConflictError,
    TeamLimitExceededError,
    ValidationError,
)
from domain.protocol import (
    ContestEventKind,
    ContestFormat,
    ContestStatus,
    MatchStatus,
)
from domain.settlement.common import Clock, SessionFactory, persistence_boundary, utc_now
from models import Contest, User
from repositories import contests as contest_repository
from repositories.fantasy_teams import get_team
from repositories.matches import get_match, set_match_status
from repositories.wallets import debit_if_sufficient, get_balance

logger = logging.getLogger(__name__)

FilledDispatcher = Callable[[int], None]


@dataclass(frozen=True)
class PrizeSlot:
    rank: int
    prize: Decimal

    def as_json(self) -> dict[str, Any]:
        return {"rank": self.rank, "prize": str(self.prize)}


@dataclass(frozen=True)
class ContestSummary:
    id: int
    match_id: int
    format: str
    entry_fee: Decimal
    prize_pool: Decimal
    total_spots: int
    current_participants: int
    max_team_per_user: int
    status: str
    spawned_from_id: int | None = None
    prize_distribution: tuple[PrizeSlot, ...] = ()

    @classmethod
    def from_model(cls, contest: Contest) -> ContestSummary:
        return cls(
            id=contest.id,
            match_id=contest.match_id,
            format=contest.format,
            entry_fee=Decimal(contest.entry_fee),
            prize_pool=Decimal(contest.prize_pool),
            total_spots=contest.total_spots,
            current_participants=contest.current_participants,
            max_team_per_user=contest.max_team_per_user,
            status=contest.status,
            spawned_from_id=contest.spawned_from_id,
            prize_distribution=tuple(
                PrizeSlot(rank=int(slot["rank"]), prize=Decimal(str(slot["prize"])))
                for slot in contest.prize_distribution or []
            ),
        )


@dataclass(frozen=True)
class JoinReceipt:
    contest_id: int
    entry_id: int
    user_id: int
    team_id: int
    entry_fee: Decimal
    balance_after: Decimal
    current_participants: int
    total_spots: int
    contest_closed: bool
    joined_at: datetime


@dataclass(frozen=True)
class RefundDue:
    contest_id: int
    user_id: int
    team_id: int
    amount: Decimal


@dataclass(frozen=True)
class CancellationSummary:
    match_id: int
    closed_contest_ids: tuple[int, ...]
    refunds: tuple[RefundDue, ...]


def contest_economics(contest: Contest) -> dict[str, object]:
    """The fields a sibling contest copies from the contest it replaces."""
    return {
        "match_id": contest.match_id,
        "format": contest.format,
        "entry_fee": str(contest.entry_fee),
        "prize_pool": str(contest.prize_pool),
        "total_spots": contest.total_spots,
        "max_team_per_user": contest.max_team_per_user,
        "prize_distribution": list(contest.prize_distribution or []),
    }


class ContestLedger:
    """Contest joins: capacity, per-user team limits and wallet debits.

    Each join runs in one transaction that takes a spot, debits the wallet
    and appends the entry, so either all of them happen or none do. When a
    join takes the last spot, a ``contest_filled`` event is written in the
    same transaction. The optional dispatcher is told after commit, and
    sibling spawning never affects the join result.
    """

    def __init__(
        self,
        session_factory: SessionFactory,
        *,
        clock: Clock | None = None,
        dispatcher: FilledDispatcher | None = None,
    ) -> None:
        self.session_factory = session_factory
        self.clock = clock or utc_now
        self.dispatcher = dispatcher

    def create_contest(
        self,
        *,
        match_id: int,
        contest_format: str,
        entry_fee: Decimal | int | str,
        prize_pool: Decimal | int | str,
        total_spots: int,
        max_team_per_user: int = 1,
        prize_distribution: Sequence[Mapping[str, Any]] = (),
    ) -> ContestSummary:
        fee = _to_amount(entry_fee, "entry_fee")
        pool = _to_amount(prize_pool, "prize_pool")
        if total_spots < 1:
            raise ValidationError("total_spots must be >= 1")
        slots = _parse_prize_distribution(prize_distribution, prize_pool=pool, total_spots=total_spots)
        if max_team_per_user < 1:
            raise ValidationError("max_team_per_user must be >= 1")
        try:
            normalized_format = ContestFormat(contest_format).value
        except ValueError as exc:
            available = ", ".join(member.value for member in ContestFormat)
            raise ValidationError(
                f"Unsupported contest format '{contest_format}'. Choose one of: {available}."
            ) from exc

        with persistence_boundary("create_contest", match_id=match_id):
            with self.session_factory() as session:
                match = get_match(session, match_id)
                if match is None:
                    raise NotFoundError("match", match_id)
                if match.status != MatchStatus.UPCOMING.value:
                    raise StateConflictError(
                        f"Match {match_id} is {match.status}; contest creation not allowed"
                    )
                contest = contest_repository.create_contest(
                    session,
                    match_id=match_id,
                    contest_format=normalized_format,
                    entry_fee=fee,
                    prize_pool=pool,
                    total_spots=total_spots,
                    max_team_per_user=max_team_per_user,
                    prize_distribution=[slot.as_json() for slot in slots],
                )
                summary = ContestSummary.from_model(contest)
                session.commit()

        logger.info("created contest contest_id=%s match_id=%s", summary.id, match_id)
        return summary

    def list_contests(self, match_id: int) -> list[ContestSummary]:
        with persistence_boundary("list_contests", match_id=match_id):
            with self.session_factory() as session:
                if get_match(session, match_id) is None:
                    raise NotFoundError("match", match_id)
                return [
                    ContestSummary.from_model(contest)
                    for contest in contest_repository.list_contests_for_match(session, match_id)
                ]

    def join(self, contest_id: int, user_id: int, team_id: int) -> JoinReceipt:
        with persistence_boundary("join", contest_id=contest_id, user_id=user_id, team_id=team_id):
            with self.session_factory() as session:
                try:
                    receipt = self._join(session, contest_id, user_id, team_id)
                    session.commit()
                except Exception:
                    session.rollback()
                    raise

        logger.info(
            "joined contest contest_id=%s user_id=%s team_id=%s participants=%s/%s",
            contest_id,
            user_id,
            team_id,
            receipt.current_participants,
            receipt.total_spots,
        )
        if receipt.contest_closed:
            self._notify_filled(contest_id)
        return receipt

    def _join(self, session: Session, contest_id: int, user_id: int, team_id: int) -> JoinReceipt:
        contest = contest_repository.get_contest(session, contest_id)
        if contest is None:
            raise NotFoundError("contest", contest_id)

        match = get_match(session, contest.match_id)
        if match is None:
            raise NotFoundError("match", contest.match_id)
        if match.status != MatchStatus.UPCOMING.value:
            raise MatchNotJoinableError(match.id, match.status)

        team = get_team(session, team_id)
        if team is None:
            raise NotFoundError("fantasy_team", team_id)
        if team.user_id != user_id:
            raise ValidationError(f"Team {team_id} does not belong to user {user_id}")
        if team.match_id != contest.match_id:
            raise ValidationError(f"Team {team_id} is not built for match {contest.match_id}")

        if session.get(User, user_id) is None:
            raise NotFoundError("user", user_id)

        entry_fee = Decimal(contest.entry_fee)

        # From here on the contest row is locked until commit or rollback.
        if not contest_repository.claim_spot(session, contest_id):
            current, total, _ = contest_repository.fetch_capacity(session, contest_id) or (
                contest.current_participants,
                contest.total_spots,
                contest.status,
            )
            raise ContestFullError(contest_id, total_spots=total, current_participants=current)

        existing = contest_repository.count_user_entries(session, contest_id, user_id)
        if existing >= contest.max_team_per_user:
            raise TeamLimitExceededError(
                contest_id,
                limit=contest.max_team_per_user,
                existing=existing,
            )
        if contest_repository.team_already_entered(session, contest_id, team_id):
            raise StateConflictError(f"Team {team_id} has already joined contest {contest_id}")

        if not debit_if_sufficient(session, user_id, entry_fee):
            available = _balance_or_zero(session, user_id)
            raise InsufficientFundsError(required=entry_fee, available=available)

        joined_at = self.clock()
        entry = contest_repository.insert_entry(
            session,
            contest_id=contest_id,
            user_id=user_id,
            team_id=team_id,
            joined_at=joined_at,
        )

        capacity = contest_repository.fetch_capacity(session, contest_id)
        if capacity is None:
            raise NotFoundError("contest", contest_id)
        current, total, status = capacity
        contest_closed = status == ContestStatus.CLOSED.value
        if contest_closed:
            contest_repository.enqueue_event(
                session,
                kind=ContestEventKind.CONTEST_FILLED.value,
                contest_id=contest_id,
                payload=contest_economics(contest),
            )

        return JoinReceipt(
            contest_id=contest_id,
            entry_id=entry.id,
            user_id=user_id,
            team_id=team_id,
            entry_fee=entry_fee,
            balance_after=_balance_or_zero(session, user_id),
            current_participants=current,
            total_spots=total,
            contest_closed=contest_closed,
            joined_at=joined_at,
        )

    def _notify_filled(self, contest_id: int) -> None:
        if self.dispatcher is None:
            logger.info("contest filled contest_id=%s sibling spawn queued", contest_id)
            return
        try:
            self.dispatcher(contest_id)
        except Exception:
            # The join is already committed; the queued event is retried later.
            logger.exception("sibling spawn dispatch failed contest_id=%s", contest_id)

    def cancel_match(self, match_id: int) -> CancellationSummary:
        """Stop all joins for a match and report the entries that need refunds."""
        with persistence_boundary("cancel_match", match_id=match_id):
            with self.session_factory() as session:
                match = get_match(session, match_id)
                if match is None:
                    raise NotFoundError("match", match_id)
                if match.status == MatchStatus.COMPLETED.value:
                    raise StateConflictError(f"Match {match_id} is completed and cannot be cancelled")

                set_match_status(session, match_id, MatchStatus.CANCELLED.value)
                closed_ids = contest_repository.close_open_contests_for_match(session, match_id)
                fees = {
                    contest.id: Decimal(contest.entry_fee)
                    for contest in contest_repository.list_contests_for_match(session, match_id)
                }
                refunds = tuple(
                    RefundDue(
                        contest_id=entry.contest_id,
                        user_id=entry.user_id,
                        team_id=entry.team_id,
                        amount=fees[entry.contest_id],
                    )
                    for entry in contest_repository.fetch_entries_for_match(session, match_id)
                    if fees[entry.contest_id] > 0
                )
                session.commit()

        logger.info(
            "cancelled match match_id=%s closed_contests=%s refunds_due=%s",
            match_id,
            len(closed_ids),
            len(refunds),
        )
        return CancellationSummary(
            match_id=match_id,
            closed_contest_ids=tuple(closed_ids),
            refunds=refunds,
        )


def _balance_or_zero(session: Session, user_id: int) -> Decimal:
    balance = get_balance(session, user_id)
    return Decimal("0") if balance is None else balance


def _to_amount(value: Decimal | int | str, label: str) -> Decimal:
    try:
        amount = Decimal(str(value))
    except ArithmeticError as exc:
        raise ValidationError(f"{label} must be a number") from exc
    if not amount.is_finite() or amount < 0:
        raise ValidationError(f"{label} must be >= 0")
    return amount


def _parse_prize_distribution(
    raw: Sequence[Mapping[str, Any]],
    *,
    prize_pool: Decimal,
    total_spots: int,
) -> list[PrizeSlot]:
    """Validate (rank, prize) payouts: distinct ranks within capacity, summing to at most the pool."""
    slots: list[PrizeSlot] = []
    for item in raw:
        rank = item.get("rank")
        if isinstance(rank, bool) or not isinstance(rank, int) or not 1 <= rank <= total_spots:
            raise ValidationError(f"prize rank must be an integer between 1 and {total_spots}, got {rank!r}")
        slots.append(PrizeSlot(rank=rank, prize=_to_amount(item.get("prize"), f"prize for rank {rank}")))

    ranks = [slot.rank for slot in slots]
    if len(set(ranks)) != len(ranks):
        raise ValidationError("prize_distribution must not repeat a rank")
    if sum((slot.prize for slot in slots), Decimal("0")) > prize_pool:
        raise ValidationError("prize_distribution pays out more than the prize_pool")
    return sorted(slots, key=lambda slot: slot.rank)


__all__ = [
    "CancellationSummary",
    "ContestLedger",
    "ContestSummary",
    "JoinReceipt",
    "PrizeSlot",
    "RefundDue",
    "contest_economics",
]
