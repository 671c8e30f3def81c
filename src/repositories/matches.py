"""Persistence helpers for matches."""

from __future__ import annotations

from sqlalchemy import update
from sqlalchemy.orm import Session

from models import Match


def get_match(session: Session, match_id: int) -> Match | None:
    return session.get(Match, match_id)


def set_match_status(session: Session, match_id: int, status: str) -> int:
    """Update a match status; returns the number of rows changed."""
    result = session.execute(
        update(Match)
        .where(Match.id == match_id)
        .values(status=status)
        .execution_options(synchronize_session=False)
    )
    return int(result.rowcount or 0)
