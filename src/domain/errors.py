"""Typed errors raised at settlement operation boundaries."""

from __future__ import annotations

from decimal import Decimal
from typing import Any


class SettlementError(Exception):
    """Base class for every error a settlement operation can raise."""

    code = "settlement_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def as_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message}


class ValidationError(SettlementError):
    """Malformed or missing input, rejected before any mutation."""

    code = "validation_error"


class NotFoundError(SettlementError):
    code = "not_found"

    def __init__(self, entity: str, key: Any, message: str | None = None) -> None:
        super().__init__(message or f"{entity} not found: {key}")
        self.entity = entity
        self.key = key

    def as_dict(self) -> dict[str, Any]:
        return {**super().as_dict(), "entity": self.entity, "key": self.key}


class StateConflictError(SettlementError):
    """The request is well-formed but conflicts with current state."""

    code = "state_conflict"


class ContestFullError(StateConflictError):
    code = "contest_full"

    def __init__(self, contest_id: int, *, total_spots: int, current_participants: int) -> None:
        super().__init__(
            f"Contest {contest_id} is full: {current_participants}/{total_spots} spots taken"
        )
        self.contest_id = contest_id
        self.total_spots = total_spots
        self.current_participants = current_participants

    def as_dict(self) -> dict[str, Any]:
        return {
            **super().as_dict(),
            "total_spots": self.total_spots,
            "current_participants": self.current_participants,
        }


class TeamLimitExceededError(StateConflictError):
    code = "team_limit_exceeded"

    def __init__(self, contest_id: int, *, limit: int, existing: int) -> None:
        super().__init__(
            f"Contest {contest_id} allows {limit} team(s) per user; user already has {existing}"
        )
        self.contest_id = contest_id
        self.limit = limit
        self.existing = existing


class MatchNotJoinableError(StateConflictError):
    code = "match_not_joinable"

    def __init__(self, match_id: int, match_status: str) -> None:
        super().__init__(f"Match {match_id} is {match_status}; contests can no longer be joined")
        self.match_id = match_id
        self.match_status = match_status


class InsufficientFundsError(SettlementError):
    code = "insufficient_funds"

    def __init__(self, *, required: Decimal, available: Decimal) -> None:
        self.required = Decimal(required)
        self.available = Decimal(available)
        self.shortfall = self.required - self.available
        super().__init__(
            f"Insufficient balance: entry fee {self.required}, available {self.available}, "
            f"short by {self.shortfall}"
        )

    def as_dict(self) -> dict[str, Any]:
        return {
            **super().as_dict(),
            "required": str(self.required),
            "available": str(self.available),
            "shortfall": str(self.shortfall),
        }


class InternalError(SettlementError):
    """Unexpected persistence failure. The external message stays opaque."""

    code = "internal_error"

    def __init__(self, message: str = "Internal error while processing the request") -> None:
        super().__init__(message)


__all__ = [
    "ContestFullError",
    "InsufficientFundsError",
    "InternalError",
    "MatchNotJoinableError",
    "NotFoundError",
    "SettlementError",
    "StateConflictError",
    "TeamLimitExceededError",
    "ValidationError",
]
