"""
Game session state machine for the league scorekeeper.

Owns the Setup -> Live -> Summary workflow, the score of record, and the
finalize / player-of-the-game round trips. Stat mutations are delegated to
the StatLedger and timeouts to the TimeoutTracker.
"""
import threading
from concurrent.futures import Future, wait
from typing import Dict, List, Optional

from ..models import (
    FinalizeResult, GameSession, GameSummary, PlayerGameStat, PlayerLine,
    SessionState, TeamGameStat,
)
from ..utils import FORFEIT_LOSING_SCORE, FORFEIT_WINNING_SCORE, get_logger, set_game_id
from .aggregation import AggregationService
from .errors import InvalidTeamError, InvalidTransitionError
from .league_gateway import GameRecord
from .roster_controller import RosterController
from .stat_ledger import StatLedger
from .sync_adapter import SyncAdapter, SyncResult
from .sync_queue import SerialSyncQueue
from .timeout_service import TimeoutTracker

logger = get_logger(__name__)


class GameSessionService:
    """
    Service for driving one game's scoring session.

    Every command the presentation layer can issue is a method here; the
    typed commands in ``game_commands`` call into these methods.
    """

    def __init__(self, session: GameSession, adapter: SyncAdapter, queue: SerialSyncQueue):
        self.session = session
        self.adapter = adapter
        self.queue = queue
        self.roster = RosterController(session)
        self.aggregation = AggregationService(session)
        self.ledger = StatLedger(session, self.roster, self.aggregation, adapter, queue)
        self.timeouts = TimeoutTracker(session)
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------
    @classmethod
    def load(cls, game_id: str, adapter: SyncAdapter, queue: SerialSyncQueue) -> "GameSessionService":
        """
        Open a game from the league service.

        The session starts in Summary when both teams already have team
        statistics recorded for this game, otherwise in Setup.

        Raises:
            SyncFailure: If the game could not be fetched
        """
        set_game_id(game_id)
        result = adapter.call("fetch_game", game_id)
        if not result.ok:
            raise result.error
        session = cls.session_from_record(result.value)
        logger.info("Loaded game %s in %s mode", game_id, session.state.value)
        return cls(session, adapter, queue)

    @staticmethod
    def session_from_record(record: GameRecord) -> GameSession:
        both_scored = record.home_has_team_stats and record.away_has_team_stats
        session = GameSession(
            game_id=record.game_id,
            home_team_id=record.home_team_id,
            away_team_id=record.away_team_id,
            state=SessionState.SUMMARY if both_scored else SessionState.SETUP,
            home_score=record.home_score,
            away_score=record.away_score,
            player_of_game_id=record.player_of_game_id,
            finalized=both_scored,
        )
        for player in record.players:
            session.roster[player.player_id] = player
        for stat in record.stats:
            player = session.roster.get(stat.player_id)
            if stat.game_id == record.game_id and player is not None:
                session.ledgers[stat.player_id] = stat
        if both_scored:
            session.winner_team_id = record.winner_team_id or _winner_by_score(
                session.home_team_id, session.away_team_id, session.home_score, session.away_score
            )
        return session

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------
    def start_scoring(self) -> None:
        self._transition({SessionState.SETUP}, SessionState.LIVE)

    def back_to_selection(self) -> None:
        self._transition({SessionState.LIVE}, SessionState.SETUP)

    def back_to_scoring(self) -> None:
        """Reopen live scoring after a game has been finalized."""
        self._transition({SessionState.SUMMARY}, SessionState.LIVE)

    def finish_game(self) -> Future:
        """
        Close live scoring and finalize the game with the league service.

        The session moves to Summary immediately with a winner derived from
        the local score; the league service's result replaces it when the
        round trip completes. The finalize call waits for stat syncs that
        were still pending.
        """
        with self._lock:
            self._require_state({SessionState.SETUP, SessionState.LIVE}, "finish the game")
            session = self.session
            session.winner_team_id = _winner_by_score(
                session.home_team_id, session.away_team_id, session.home_score, session.away_score
            )
            session.state = SessionState.SUMMARY
            logger.info(
                "Finishing game %s at %d-%d", session.game_id, session.home_score, session.away_score
            )

        pending = self.queue.pending()
        return self.queue.submit(
            f"game:{self.session.game_id}",
            lambda: self._finalize_round_trip(pending),
        )

    def finish_default_game(self, winner_team_id: str) -> Future:
        """
        Record a walkover: the winner gets a 20-0 result.

        Raises:
            InvalidTeamError: If the team is not playing in this game
        """
        with self._lock:
            if not self.session.is_team(winner_team_id):
                raise InvalidTeamError(f"Team {winner_team_id!r} is not playing in this game")
            self._require_state({SessionState.SETUP, SessionState.LIVE}, "record a walkover")

            session = self.session
            home_won = winner_team_id == session.home_team_id
            session.home_score = FORFEIT_WINNING_SCORE if home_won else FORFEIT_LOSING_SCORE
            session.away_score = FORFEIT_LOSING_SCORE if home_won else FORFEIT_WINNING_SCORE
            session.winner_team_id = winner_team_id
            session.state = SessionState.SUMMARY
            logger.info("Game %s recorded as a walkover for %s", session.game_id, winner_team_id)

        pending = self.queue.pending()

        def job() -> SyncResult:
            wait(pending)
            result = self.adapter.call(
                "finalize_default_game",
                self.session.game_id,
                self.session.home_team_id,
                self.session.away_team_id,
                winner_team_id,
            )
            if result.ok:
                self._apply_finalize(result.value)
            return result

        return self.queue.submit(f"game:{self.session.game_id}", job)

    def set_player_of_game(self, player_id: str) -> Future:
        """Select the player of the game; allowed in every state."""
        player = self.roster.require_player(player_id)
        with self._lock:
            self.session.player_of_game_id = player.player_id
        return self.queue.submit(
            f"game:{self.session.game_id}",
            lambda: self.adapter.call("set_player_of_game", self.session.game_id, player.player_id),
        )

    # ------------------------------------------------------------------
    # Scoring commands
    # ------------------------------------------------------------------
    def set_active_player(self, player_id: str):
        return self.roster.set_active_player(player_id)

    def check_in_player(self, player_id: str, team_id: str, name: str = "",
                        jersey_number: Optional[int] = None) -> PlayerGameStat:
        return self.roster.check_in_player(player_id, team_id, name, jersey_number)

    def record_point(self, value: int, player_id: Optional[str] = None) -> Future:
        return self.ledger.record_point(player_id or self.session.active_player_id, value)

    def undo_last_point(self, player_id: Optional[str] = None) -> Optional[Future]:
        return self.ledger.undo_last_point(player_id or self.session.active_player_id)

    def increment_counter_stat(self, stat: str, player_id: Optional[str] = None) -> Future:
        return self.ledger.increment_counter_stat(player_id or self.session.active_player_id, stat)

    def decrement_counter_stat(self, stat: str, player_id: Optional[str] = None) -> Optional[Future]:
        return self.ledger.decrement_counter_stat(player_id or self.session.active_player_id, stat)

    def take_timeout(self, team_id: str, half: str) -> bool:
        return self.timeouts.take_timeout(team_id, half)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def active_player_stat(self) -> Optional[PlayerGameStat]:
        if not self.session.active_player_id:
            return None
        return self.ledger.stat_for(self.session.active_player_id)

    def team_stats(self) -> Dict[str, TeamGameStat]:
        return self.aggregation.all_totals()

    def snapshot(self) -> dict:
        with self._lock:
            return self.session.snapshot()

    def summary(self) -> GameSummary:
        session = self.session
        lines: List[PlayerLine] = []
        for player_id, stat in session.ledgers.items():
            player = session.roster[player_id]
            lines.append(PlayerLine(
                player_id=player_id,
                name=player.name,
                jersey_number=player.jersey_number,
                team_id=player.team_id,
                stat=stat.copy(),
            ))
        lines.sort(key=lambda line: (line.team_id != session.home_team_id, -line.stat.points))
        return GameSummary(
            game_id=session.game_id,
            state=session.state.value,
            home_score=session.home_score,
            away_score=session.away_score,
            winner_team_id=session.winner_team_id,
            player_of_game_id=session.player_of_game_id,
            team_totals=self.team_stats(),
            players=lines,
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _require_state(self, allowed, action: str) -> None:
        if self.session.state not in allowed:
            raise InvalidTransitionError(
                f"Cannot {action} while the session is in {self.session.state.value} mode"
            )

    def _transition(self, allowed, target: SessionState) -> None:
        with self._lock:
            self._require_state(allowed, f"switch to {target.value}")
            previous = self.session.state
            self.session.state = target
        logger.info("Game %s: %s -> %s", self.session.game_id, previous.value, target.value)

    def _finalize_round_trip(self, pending: List[Future]) -> SyncResult:
        wait(pending)
        result = self.adapter.call(
            "finalize_game",
            self.session.game_id,
            self.session.home_team_id,
            self.session.away_team_id,
        )
        if result.ok:
            self._apply_finalize(result.value)
        return result

    def _apply_finalize(self, outcome: FinalizeResult) -> None:
        with self._lock:
            session = self.session
            session.winner_team_id = outcome.winner_team_id
            if outcome.player_of_game_id is not None:
                session.player_of_game_id = outcome.player_of_game_id
            if outcome.home_score is not None and outcome.away_score is not None:
                session.home_score = int(outcome.home_score)
                session.away_score = int(outcome.away_score)
            session.finalized = True
        logger.info(
            "Game %s finalized: winner=%s player_of_game=%s",
            session.game_id, session.winner_team_id, session.player_of_game_id,
        )


def _winner_by_score(home_team_id: str, away_team_id: str,
                     home_score: int, away_score: int) -> Optional[str]:
    """Higher score wins; a tie has no winner."""
    if home_score > away_score:
        return home_team_id
    if away_score > home_score:
        return away_team_id
    return None
