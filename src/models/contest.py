"""contests and contest_entries table models."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import (
    JSON,
    CheckConstraint,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base
from models.mixins import TimestampMixin


class Contest(TimestampMixin, Base):
    """A capacity-limited pool that fantasy teams join for an entry fee."""

    __tablename__ = "contests"
    __table_args__ = (
        CheckConstraint("entry_fee >= 0", name="ck_contests_entry_fee"),
        CheckConstraint("total_spots >= 1", name="ck_contests_total_spots"),
        CheckConstraint(
            "current_participants >= 0 AND current_participants <= total_spots",
            name="ck_contests_participants_within_capacity",
        ),
        CheckConstraint("max_team_per_user >= 1", name="ck_contests_max_team_per_user"),
        Index("idx_contests_match_status", "match_id", "status"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    match_id: Mapped[int] = mapped_column(ForeignKey("matches.id"), nullable=False)
    format: Mapped[str] = mapped_column(String(32), nullable=False)
    entry_fee: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    prize_pool: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    total_spots: Mapped[int] = mapped_column(Integer, nullable=False)
    current_participants: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    max_team_per_user: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    status: Mapped[str] = mapped_column(
        Enum("open", "closed", name="contest_status", native_enum=False),
        nullable=False,
        default="open",
    )
    # [{"rank": 1, "prize": "60.00"}, ...] ordered by rank.
    prize_distribution: Mapped[list[dict[str, Any]]] = mapped_column(
        JSON().with_variant(JSONB(), "postgresql"),
        nullable=False,
        default=list,
    )
    spawned_from_id: Mapped[int | None] = mapped_column(ForeignKey("contests.id"), nullable=True)


class ContestEntry(Base):
    __tablename__ = "contest_entries"
    __table_args__ = (
        UniqueConstraint("contest_id", "team_id", name="uq_contest_entries_contest_team"),
        Index("idx_contest_entries_contest_user", "contest_id", "user_id"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    contest_id: Mapped[int] = mapped_column(ForeignKey("contests.id"), nullable=False)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    team_id: Mapped[int] = mapped_column(ForeignKey("fantasy_teams.id"), nullable=False)
    joined_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False)
