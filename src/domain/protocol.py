"""Shared enums for settlement components."""

from __future__ import annotations

from enum import Enum


class MatchFormat(str, Enum):
    """Match format; drives format-dependent scoring rules."""

    T20 = "T20"
    T10 = "T10"
    ODI = "ODI"
    TEST = "Test"
    LEAGUE = "League"
    CUP = "Cup"


class MatchStatus(str, Enum):
    """Lifecycle of a real match."""

    UPCOMING = "upcoming"
    LIVE = "live"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class ContestStatus(str, Enum):
    """Contest state machine: OPEN -> CLOSED (terminal)."""

    OPEN = "open"
    CLOSED = "closed"


class ContestFormat(str, Enum):
    """Prize structure of a contest."""

    H2H = "h2h"
    LEAGUE = "league"
    WINNERS_TAKE_ALL = "winners-takes-all"
    MEGA_CONTEST = "mega-contest"
    PRACTICE = "practice"


class PlayerRole(str, Enum):
    """Declared playing role, snapshotted onto each stat row."""

    BATSMAN = "batsman"
    BOWLER = "bowler"
    ALL_ROUNDER = "all_rounder"
    WICKET_KEEPER = "wicket_keeper"


class ContestEventKind(str, Enum):
    CONTEST_FILLED = "contest_filled"


class ContestEventStatus(str, Enum):
    PENDING = "pending"
    PROCESSED = "processed"
    FAILED = "failed"


def parse_match_format(value: str | MatchFormat) -> MatchFormat:
    """Resolve a format string case-insensitively."""
    if isinstance(value, MatchFormat):
        return value
    normalized = str(value).strip().lower()
    for member in MatchFormat:
        if member.value.lower() == normalized:
            return member
    available = ", ".join(member.value for member in MatchFormat)
    raise ValueError(f"Unsupported match format '{value}'. Choose one of: {available}.")


__all__ = [
    "ContestEventKind",
    "ContestEventStatus",
    "ContestFormat",
    "ContestStatus",
    "MatchFormat",
    "MatchStatus",
    "PlayerRole",
    "parse_match_format",
]
