"""
Services package for the league scorekeeper.

This package contains the scoring engine (ledger, aggregation, roster,
timeouts, session state machine), the league service gateways and the
sync machinery between them.
"""
from .errors import (
    ScoringError, NoActivePlayerError, InvalidPlayerError, InvalidTeamError,
    InvalidStatError, InvalidTransitionError, SyncFailure,
)
from .league_gateway import LeagueGateway, GameRecord, PlayerStatResult
from .memory_gateway import InMemoryLeagueGateway
from .http_gateway import HttpLeagueGateway
from .sync_adapter import SyncAdapter, SyncResult, SyncNotice
from .sync_queue import SerialSyncQueue
from .aggregation import AggregationService, compute_team_totals
from .roster_controller import RosterController
from .timeout_service import TimeoutTracker
from .stat_ledger import StatLedger
from .game_session_service import GameSessionService
from .game_commands import (
    Command, CommandDispatcher, RecordPoint, UndoLastPoint, IncrementStat,
    DecrementStat, SelectPlayer, CheckInPlayer, TakeTimeout, StartScoring,
    BackToSelection, FinishGame, FinishDefaultGame, BackToScoring, SetPlayerOfGame,
)
from .persistence_service import PersistenceService
from .service_factory import ServiceFactory

__all__ = [
    "ScoringError", "NoActivePlayerError", "InvalidPlayerError", "InvalidTeamError",
    "InvalidStatError", "InvalidTransitionError", "SyncFailure",
    "LeagueGateway", "GameRecord", "PlayerStatResult",
    "InMemoryLeagueGateway", "HttpLeagueGateway",
    "SyncAdapter", "SyncResult", "SyncNotice", "SerialSyncQueue",
    "AggregationService", "compute_team_totals", "RosterController",
    "TimeoutTracker", "StatLedger", "GameSessionService",
    "Command", "CommandDispatcher", "RecordPoint", "UndoLastPoint",
    "IncrementStat", "DecrementStat", "SelectPlayer", "CheckInPlayer",
    "TakeTimeout", "StartScoring", "BackToSelection", "FinishGame",
    "FinishDefaultGame", "BackToScoring", "SetPlayerOfGame",
    "PersistenceService", "ServiceFactory",
]
