"""player_stats table model."""

from __future__ import annotations

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base
from models.mixins import TimestampMixin


class PlayerStat(TimestampMixin, Base):
    """Raw per-match stats for one Playing XI player plus the derived fantasy breakdown."""

    __tablename__ = "player_stats"
    __table_args__ = (
        UniqueConstraint("match_id", "player_id", name="uq_player_stats_match_player"),
        CheckConstraint("runs >= 0", name="ck_player_stats_runs"),
        CheckConstraint("wickets_taken >= 0", name="ck_player_stats_wickets"),
        Index("idx_player_stats_match", "match_id"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    match_id: Mapped[int] = mapped_column(ForeignKey("matches.id"), nullable=False)
    player_id: Mapped[int] = mapped_column(Integer, nullable=False)
    team_id: Mapped[int] = mapped_column(Integer, nullable=False)
    role: Mapped[str] = mapped_column(
        Enum(
            "batsman",
            "bowler",
            "all_rounder",
            "wicket_keeper",
            name="player_role",
            native_enum=False,
        ),
        nullable=False,
    )
    batting_order: Mapped[int | None] = mapped_column(Integer, nullable=True)

    runs: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    balls_faced: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    fours: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    sixes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_out: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    strike_rate: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    overs_bowled: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    wickets_taken: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    maiden_overs: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    lbw_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    bowled_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    runs_given: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    economy_rate: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    catches: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    stumpings: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    run_outs: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    is_man_of_match: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Granted once when the Playing XI is registered; never touched by rescoring.
    selection_bonus: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    batting_points: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    bowling_points: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    fielding_points: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    bonus_points: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    total_points: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
