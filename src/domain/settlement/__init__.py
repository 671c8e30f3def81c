"""Stateful settlement operations over the settlement schema."""

from domain.settlement.events import (
    BackgroundSpawnDispatcher,
    ContestEventProcessor,
    EventProcessingSummary,
)
from domain.settlement.ingest import IngestSummary, PlayerStatUpdate, RowOutcome, apply_stat_updates
from domain.settlement.leaderboard import LeaderboardEntry, leaderboard
from domain.settlement.ledger import (
    CancellationSummary,
    ContestLedger,
    ContestSummary,
    JoinReceipt,
    PrizeSlot,
    RefundDue,
)
from domain.settlement.propagation import RefreshSummary, refresh_team_points
from domain.settlement.rosters import (
    FantasyTeamSummary,
    PlayingXIEntry,
    PlayingXISummary,
    ResetSummary,
    create_fantasy_team,
    parse_playing_xi_side,
    register_playing_xi,
    reset_match_points,
)

__all__ = [
    "BackgroundSpawnDispatcher",
    "CancellationSummary",
    "ContestEventProcessor",
    "ContestLedger",
    "ContestSummary",
    "EventProcessingSummary",
    "FantasyTeamSummary",
    "IngestSummary",
    "JoinReceipt",
    "LeaderboardEntry",
    "PlayerStatUpdate",
    "PlayingXIEntry",
    "PlayingXISummary",
    "PrizeSlot",
    "RefreshSummary",
    "RefundDue",
    "ResetSummary",
    "RowOutcome",
    "apply_stat_updates",
    "create_fantasy_team",
    "leaderboard",
    "parse_playing_xi_side",
    "refresh_team_points",
    "register_playing_xi",
    "reset_match_points",
]
