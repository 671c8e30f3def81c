"""Consume contest events: spawn a sibling contest for every filled contest."""

from __future__ import annotations

import logging
from concurrent.futures import Executor, Future
from dataclasses import dataclass

from sqlalchemy.orm import Session

from domain.errors import NotFoundError, SettlementError
from domain.protocol import ContestEventKind, ContestEventStatus, MatchStatus
from domain.settlement.common import Clock, SessionFactory, utc_now
from models import Contest, ContestEvent
from repositories import contests as contest_repository
from repositories.matches import get_match

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EventProcessingSummary:
    processed: int
    retried: int
    failed: int
    skipped: int


class ContestEventProcessor:
    """Retrying consumer for ``contest_filled`` events.

    The sibling contest and the event's ``processed`` mark are committed
    together, so an event yields at most one sibling no matter how often it is
    retried. Events that keep failing are parked as ``failed`` after
    ``max_attempts`` and logged at ERROR for operator follow-up.
    """

    def __init__(
        self,
        session_factory: SessionFactory,
        *,
        max_attempts: int = 5,
        clock: Clock | None = None,
    ) -> None:
        if max_attempts <= 0:
            raise ValueError("max_attempts must be greater than 0")
        self.session_factory = session_factory
        self.max_attempts = max_attempts
        self.clock = clock or utc_now

    def process_pending(self, limit: int | None = None) -> EventProcessingSummary:
        with self.session_factory() as session:
            event_ids = contest_repository.fetch_pending_event_ids(session, limit=limit)

        counts = {"processed": 0, "retried": 0, "failed": 0, "skipped": 0}
        for event_id in event_ids:
            counts[self._process_one(event_id)] += 1
        return EventProcessingSummary(**counts)

    def _process_one(self, event_id: int) -> str:
        try:
            with self.session_factory() as session:
                event = contest_repository.lock_pending_event(session, event_id)
                if event is None:
                    return "skipped"
                sibling_id = self._handle(session, event)
                event.status = ContestEventStatus.PROCESSED.value
                event.attempts += 1
                event.result_contest_id = sibling_id
                event.processed_at = self.clock()
                session.commit()
        except Exception as exc:
            return self._record_failure(event_id, exc)

        logger.info(
            "processed contest event event_id=%s sibling_contest_id=%s",
            event_id,
            sibling_id,
        )
        return "processed"

    def _handle(self, session: Session, event: ContestEvent) -> int | None:
        if event.kind != ContestEventKind.CONTEST_FILLED.value:
            raise SettlementError(f"Unsupported contest event kind '{event.kind}'")
        return self._spawn_sibling(session, event.contest_id)

    def _spawn_sibling(self, session: Session, contest_id: int) -> int | None:
        source = contest_repository.get_contest(session, contest_id)
        if source is None:
            raise NotFoundError("contest", contest_id)

        match = get_match(session, source.match_id)
        if match is None or match.status != MatchStatus.UPCOMING.value:
            logger.info(
                "skipping sibling spawn contest_id=%s match_status=%s",
                contest_id,
                None if match is None else match.status,
            )
            return None

        sibling: Contest = contest_repository.create_contest(
            session,
            match_id=source.match_id,
            contest_format=source.format,
            entry_fee=source.entry_fee,
            prize_pool=source.prize_pool,
            total_spots=source.total_spots,
            max_team_per_user=source.max_team_per_user,
            prize_distribution=list(source.prize_distribution or []),
            spawned_from_id=source.id,
        )
        return sibling.id

    def _record_failure(self, event_id: int, exc: Exception) -> str:
        with self.session_factory() as session:
            event = session.get(ContestEvent, event_id)
            if event is None:
                return "skipped"
            event.attempts += 1
            event.last_error = f"{type(exc).__name__}: {exc}"[:512]
            exhausted = event.attempts >= self.max_attempts
            if exhausted:
                event.status = ContestEventStatus.FAILED.value
            attempts = event.attempts
            contest_id = event.contest_id
            session.commit()

        if exhausted:
            logger.error(
                "sibling spawn failed permanently event_id=%s contest_id=%s attempts=%s",
                event_id,
                contest_id,
                attempts,
                exc_info=exc,
            )
            return "failed"
        logger.warning(
            "sibling spawn failed event_id=%s contest_id=%s attempts=%s/%s",
            event_id,
            contest_id,
            attempts,
            self.max_attempts,
            exc_info=exc,
        )
        return "retried"


class BackgroundSpawnDispatcher:
    """Ledger dispatcher that drains pending events on an executor after each fill."""

    def __init__(self, processor: ContestEventProcessor, executor: Executor) -> None:
        self.processor = processor
        self.executor = executor

    def __call__(self, contest_id: int) -> None:
        future = self.executor.submit(self.processor.process_pending)
        future.add_done_callback(lambda done: self._log_outcome(contest_id, done))

    @staticmethod
    def _log_outcome(contest_id: int, future: Future[EventProcessingSummary]) -> None:
        exc = future.exception()
        if exc is not None:
            logger.error(
                "background sibling spawn crashed contest_id=%s",
                contest_id,
                exc_info=exc,
            )


__all__ = ["BackgroundSpawnDispatcher", "ContestEventProcessor", "EventProcessingSummary"]
