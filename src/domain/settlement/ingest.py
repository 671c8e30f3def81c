"""Validate and apply operator-submitted stat corrections for a match."""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from domain.errors import NotFoundError, StateConflictError, ValidationError
from domain.protocol import parse_match_format
from domain.scoring.calculator import (
    ScoringParameters,
    compute_fantasy_points,
    economy_rate,
    strike_rate,
)
from domain.settlement.common import SessionFactory, persistence_boundary
from domain.settlement.propagation import RefreshSummary, refresh_team_points
from models import PlayerStat
from repositories.matches import get_match
from repositories.player_stats import (
    BATTING_FIELDS,
    BOWLING_FIELDS,
    FIELDING_FIELDS,
    apply_breakdown,
    fetch_stats_for_players,
    to_raw_stat,
)

logger = logging.getLogger(__name__)

_BOOLEAN_FIELDS = frozenset({"is_out"})
_FLOAT_FIELDS = frozenset({"overs_bowled"})
_SECTIONS: dict[str, tuple[str, ...]] = {
    "batting": BATTING_FIELDS,
    "bowling": BOWLING_FIELDS,
    "fielding": FIELDING_FIELDS,
}
_TOP_LEVEL_KEYS = frozenset({"player_id", "is_man_of_match", *_SECTIONS})


@dataclass(frozen=True)
class PlayerStatUpdate:
    """Latest known values for a subset of one player's stats."""

    player_id: int
    batting: Mapping[str, Any] = field(default_factory=dict)
    bowling: Mapping[str, Any] = field(default_factory=dict)
    fielding: Mapping[str, Any] = field(default_factory=dict)
    is_man_of_match: bool | None = None


@dataclass(frozen=True)
class RowOutcome:
    player_id: int
    ok: bool
    total_points: float | None = None
    error: str | None = None


@dataclass(frozen=True)
class IngestSummary:
    match_id: int
    rows: tuple[RowOutcome, ...]
    propagation: RefreshSummary | None

    @property
    def updated_players(self) -> list[int]:
        return [row.player_id for row in self.rows if row.ok]

    @property
    def failed_players(self) -> list[int]:
        return [row.player_id for row in self.rows if not row.ok]


def _parse_value(section: str, name: str, value: Any, player_id: int) -> Any:
    label = f"player {player_id}: {section}.{name}"
    if name in _BOOLEAN_FIELDS:
        if not isinstance(value, bool):
            raise ValidationError(f"{label} must be a boolean")
        return value
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"{label} must be a number")
    if not math.isfinite(value):
        raise ValidationError(f"{label} must be a finite number")
    if value < 0:
        raise ValidationError(f"{label} must be >= 0")
    if name in _FLOAT_FIELDS:
        return float(value)
    if isinstance(value, float) and not value.is_integer():
        raise ValidationError(f"{label} must be a whole number")
    return int(value)


def _parse_section(raw: Mapping[str, Any], section: str, player_id: int) -> dict[str, Any]:
    values = raw.get(section)
    if values is None:
        return {}
    if not isinstance(values, Mapping):
        raise ValidationError(f"player {player_id}: {section} must be an object")

    allowed = _SECTIONS[section]
    unknown = sorted(set(values) - set(allowed))
    if unknown:
        raise ValidationError(f"player {player_id}: unknown {section} fields {unknown}")

    return {
        name: _parse_value(section, name, value, player_id)
        for name, value in values.items()
        if value is not None
    }


def parse_stat_updates(updates: Sequence[Mapping[str, Any] | PlayerStatUpdate]) -> list[PlayerStatUpdate]:
    """Turn raw update payloads into typed updates, rejecting anything malformed."""
    if not updates:
        raise ValidationError("updates must contain at least one player update")

    parsed: list[PlayerStatUpdate] = []
    seen: set[int] = set()
    for raw in updates:
        if isinstance(raw, PlayerStatUpdate):
            raw = {
                "player_id": raw.player_id,
                "batting": raw.batting,
                "bowling": raw.bowling,
                "fielding": raw.fielding,
                "is_man_of_match": raw.is_man_of_match,
            }
        if not isinstance(raw, Mapping):
            raise ValidationError("each update must be an object")

        player_id = raw.get("player_id")
        if isinstance(player_id, bool) or not isinstance(player_id, int):
            raise ValidationError(f"invalid player_id: {player_id!r}")
        if player_id in seen:
            raise ValidationError(f"duplicate update for player {player_id}")
        seen.add(player_id)

        unknown = sorted(set(raw) - _TOP_LEVEL_KEYS)
        if unknown:
            raise ValidationError(f"player {player_id}: unknown fields {unknown}")

        is_man_of_match = raw.get("is_man_of_match")
        if is_man_of_match is not None and not isinstance(is_man_of_match, bool):
            raise ValidationError(f"player {player_id}: is_man_of_match must be a boolean")

        parsed.append(
            PlayerStatUpdate(
                player_id=player_id,
                batting=_parse_section(raw, "batting", player_id),
                bowling=_parse_section(raw, "bowling", player_id),
                fielding=_parse_section(raw, "fielding", player_id),
                is_man_of_match=is_man_of_match,
            )
        )
    return parsed


def merge_update(row: PlayerStat, update: PlayerStatUpdate) -> None:
    """Overwrite only the supplied fields and refresh the derived rates they feed."""
    for values in (update.batting, update.bowling, update.fielding):
        for name, value in values.items():
            setattr(row, name, value)
    if update.is_man_of_match is not None:
        row.is_man_of_match = update.is_man_of_match

    if "runs" in update.batting or "balls_faced" in update.batting:
        row.strike_rate = strike_rate(row.runs, row.balls_faced)
    if "runs_given" in update.bowling or "overs_bowled" in update.bowling:
        row.economy_rate = economy_rate(row.runs_given, row.overs_bowled)


def apply_stat_updates(
    *,
    session_factory: SessionFactory,
    match_id: int,
    updates: Sequence[Mapping[str, Any] | PlayerStatUpdate],
    scoring: ScoringParameters = ScoringParameters(),
    chunk_size: int = 500,
) -> IngestSummary:
    """Apply one correction batch, rescore the touched players and refresh all teams.

    Validation is all-or-nothing: one unknown player rejects the whole batch
    before anything is written. Each valid row is written in its own savepoint
    so a persistence failure is reported for that row alone.
    """
    parsed = parse_stat_updates(updates)
    player_ids = [update.player_id for update in parsed]
    outcomes: list[RowOutcome] = []

    with persistence_boundary("apply_stat_updates", match_id=match_id):
        with session_factory() as session:
            match = get_match(session, match_id)
            if match is None:
                raise NotFoundError("match", match_id)
            if match.archived_at is not None:
                raise StateConflictError(f"Match {match_id} is archived; its stats are read-only")
            match_format = parse_match_format(match.format)

            rows = fetch_stats_for_players(session, match_id, player_ids, for_update=True)
            missing = [player_id for player_id in player_ids if player_id not in rows]
            if missing:
                raise NotFoundError(
                    "player_stat",
                    missing[0],
                    message=(
                        f"No stats for player {missing[0]} in match {match_id}; "
                        "batch rejected"
                    ),
                )

            for update in parsed:
                row = rows[update.player_id]
                try:
                    with session.begin_nested():
                        merge_update(row, update)
                        breakdown = compute_fantasy_points(to_raw_stat(row), match_format, scoring)
                        apply_breakdown(row, breakdown)
                        session.flush()
                except SQLAlchemyError as exc:
                    logger.warning(
                        "stat update failed match_id=%s player_id=%s",
                        match_id,
                        update.player_id,
                        exc_info=True,
                    )
                    outcomes.append(
                        RowOutcome(player_id=update.player_id, ok=False, error=type(exc).__name__)
                    )
                    continue
                outcomes.append(
                    RowOutcome(player_id=update.player_id, ok=True, total_points=breakdown.total_points)
                )

            session.commit()

    propagation = None
    if any(outcome.ok for outcome in outcomes):
        propagation = refresh_team_points(
            session_factory=session_factory,
            match_id=match_id,
            chunk_size=chunk_size,
        )

    logger.info(
        "applied stat updates match_id=%s updated=%s failed=%s",
        match_id,
        sum(1 for outcome in outcomes if outcome.ok),
        sum(1 for outcome in outcomes if not outcome.ok),
    )
    return IngestSummary(match_id=match_id, rows=tuple(outcomes), propagation=propagation)


__all__ = [
    "IngestSummary",
    "PlayerStatUpdate",
    "RowOutcome",
    "apply_stat_updates",
    "merge_update",
    "parse_stat_updates",
]
