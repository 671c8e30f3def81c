"""fantasy_teams and fantasy_team_players table models."""

from __future__ import annotations

from sqlalchemy import (
    CheckConstraint,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from models.base import Base
from models.mixins import TimestampMixin


class FantasyTeam(TimestampMixin, Base):
    """A user-built 11-player roster for one match."""

    __tablename__ = "fantasy_teams"
    __table_args__ = (
        CheckConstraint("captain_id <> vice_captain_id", name="ck_fantasy_teams_distinct_leaders"),
        Index("idx_fantasy_teams_match", "match_id"),
        Index("idx_fantasy_teams_user_match", "user_id", "match_id"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    match_id: Mapped[int] = mapped_column(ForeignKey("matches.id"), nullable=False)
    name: Mapped[str | None] = mapped_column(String(20), nullable=True)
    captain_id: Mapped[int] = mapped_column(Integer, nullable=False)
    vice_captain_id: Mapped[int] = mapped_column(Integer, nullable=False)
    total_points: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    players: Mapped[list["FantasyTeamPlayer"]] = relationship(
        back_populates="team",
        cascade="all, delete-orphan",
        order_by="FantasyTeamPlayer.id",
    )


class FantasyTeamPlayer(Base):
    """One roster slot with the player's points after the captaincy multiplier."""

    __tablename__ = "fantasy_team_players"
    __table_args__ = (
        UniqueConstraint("team_id", "player_id", name="uq_fantasy_team_players_team_player"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    team_id: Mapped[int] = mapped_column(
        ForeignKey("fantasy_teams.id", ondelete="CASCADE"),
        nullable=False,
    )
    player_id: Mapped[int] = mapped_column(Integer, nullable=False)
    final_points: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    team: Mapped[FantasyTeam] = relationship(back_populates="players")
