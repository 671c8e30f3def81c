"""matches table model."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Enum, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base
from models.mixins import TimestampMixin


class Match(TimestampMixin, Base):
    """A real fixture; its format drives scoring and its status gates contests."""

    __tablename__ = "matches"
    __table_args__ = (Index("idx_matches_status", "status"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    sport: Mapped[str] = mapped_column(String(32), nullable=False, default="cricket")
    format: Mapped[str] = mapped_column(
        Enum("T20", "T10", "ODI", "Test", "League", "Cup", name="match_format", native_enum=False),
        nullable=False,
    )
    team1_id: Mapped[int] = mapped_column(Integer, nullable=False)
    team2_id: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(
        Enum("upcoming", "live", "completed", "cancelled", name="match_status", native_enum=False),
        nullable=False,
        default="upcoming",
    )
    start_time: Mapped[datetime | None] = mapped_column(DateTime(timezone=False), nullable=True)
    archived_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=False), nullable=True)
