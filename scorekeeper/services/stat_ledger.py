"""
Stat ledger service for the league scorekeeper.

Applies point events and counting-stat changes to a player's PlayerGameStat,
recomputes the team score, and sends the player's record to the league
service. Every mutation is validated before any local state changes.

Round trips for one player run one at a time. Each one sends the ledger as it
stands when the round trip starts, so it carries every earlier event. The
record the league service returns replaces the local one only if no newer
local change has happened since it was sent.
"""
import threading
from concurrent.futures import Future
from typing import Dict, Optional

from ..models import GameSession, PlayerGameStat, SessionState
from ..utils import COUNTER_STATS, POINT_VALUES, get_logger
from .aggregation import AggregationService
from .errors import (
    InvalidStatError, InvalidTransitionError, NoActivePlayerError, SyncFailure,
)
from .roster_controller import RosterController
from .sync_adapter import SyncAdapter, SyncResult
from .sync_queue import SerialSyncQueue

logger = get_logger(__name__)


class StatLedger:
    """Mutators for per-player game statistics."""

    def __init__(
        self,
        session: GameSession,
        roster: RosterController,
        aggregation: AggregationService,
        adapter: SyncAdapter,
        queue: SerialSyncQueue,
    ):
        self.session = session
        self.roster = roster
        self.aggregation = aggregation
        self.adapter = adapter
        self.queue = queue
        self._locks: Dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()
        # Local change counter per player, bumped under the player's lock
        self._revisions: Dict[str, int] = {}

    # ------------------------------------------------------------------
    # Point events
    # ------------------------------------------------------------------
    def record_point(self, player_id: Optional[str], value: int) -> Future:
        """
        Append a 1, 2 or 3 point event to the player's log.

        Raises:
            NoActivePlayerError: If no player is given
            InvalidPlayerError: If the player is on neither roster
            InvalidStatError: If ``value`` is not 1, 2 or 3
        """
        player_id = self._resolve(player_id)
        if value not in POINT_VALUES:
            raise InvalidStatError(f"Point value must be one of {POINT_VALUES}, got {value!r}")

        with self._lock_for(player_id):
            ledger = self._ledger(player_id)
            ledger.append_point(value)
            self._bump(player_id)
            total = ledger.points
            self.aggregation.refresh_scores()

        logger.debug("Player %s scored %d (total %d)", player_id, value, total)
        return self._sync(player_id, send_scores=True)

    def undo_last_point(self, player_id: Optional[str]) -> Optional[Future]:
        """
        Remove the most recent point event.

        Returns:
            The pending sync, or None when the log was already empty
        """
        player_id = self._resolve(player_id)

        with self._lock_for(player_id):
            ledger = self._ledger(player_id)
            removed = ledger.pop_point()
            if removed is None:
                return None
            self._bump(player_id)
            self.aggregation.refresh_scores()

        logger.debug("Undid %d point event for %s", removed, player_id)
        return self._sync(player_id, send_scores=True)

    # ------------------------------------------------------------------
    # Counting stats
    # ------------------------------------------------------------------
    def increment_counter_stat(self, player_id: Optional[str], stat: str) -> Future:
        player_id = self._resolve(player_id)
        self._check_counter(stat)

        with self._lock_for(player_id):
            ledger = self._ledger(player_id)
            value = getattr(ledger, stat) + 1
            setattr(ledger, stat, value)
            self._bump(player_id)

        logger.debug("%s %s -> %d", player_id, stat, value)
        return self._sync(player_id, send_scores=False)

    def decrement_counter_stat(self, player_id: Optional[str], stat: str) -> Optional[Future]:
        """Subtract one from a counting stat; a stat at zero is left alone and not synced."""
        player_id = self._resolve(player_id)
        self._check_counter(stat)

        with self._lock_for(player_id):
            ledger = self._ledger(player_id)
            current = getattr(ledger, stat)
            if current <= 0:
                return None
            setattr(ledger, stat, current - 1)
            self._bump(player_id)

        logger.debug("%s %s -> %d", player_id, stat, current - 1)
        return self._sync(player_id, send_scores=False)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def stat_for(self, player_id: str) -> Optional[PlayerGameStat]:
        ledger = self.session.ledgers.get(player_id)
        return ledger.copy() if ledger else None

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _resolve(self, player_id: Optional[str]) -> str:
        if not player_id:
            raise NoActivePlayerError("No player selected")
        player = self.roster.require_player(player_id)
        if self.session.state is SessionState.SETUP:
            raise InvalidTransitionError("Scoring is not enabled during setup")
        return player.player_id

    def _ledger(self, player_id: str) -> PlayerGameStat:
        return self.roster.ensure_ledger(self.session.roster[player_id])

    @staticmethod
    def _check_counter(stat: str) -> None:
        if stat not in COUNTER_STATS:
            raise InvalidStatError(f"Unknown stat {stat!r}; expected one of {COUNTER_STATS}")

    def _lock_for(self, player_id: str) -> threading.Lock:
        with self._locks_guard:
            return self._locks.setdefault(player_id, threading.Lock())

    def _bump(self, player_id: str) -> None:
        self._revisions[player_id] = self._revisions.get(player_id, 0) + 1

    def _sync(self, player_id: str, send_scores: bool) -> Future:
        return self.queue.submit(
            f"player:{player_id}",
            lambda: self._round_trip(player_id, send_scores),
        )

    def _round_trip(self, player_id: str, send_scores: bool) -> SyncResult:
        game_id = self.session.game_id
        with self._lock_for(player_id):
            snapshot = self.session.ledgers[player_id].copy()
            revision = self._revisions.get(player_id, 0)
            team_scores = self.aggregation.refresh_scores() if send_scores else None

        result = self.adapter.call(
            "submit_player_stat", game_id, player_id, snapshot, team_scores
        )
        if not result.ok:
            return result

        canonical = result.value.player
        if canonical.player_id != player_id or canonical.game_id != game_id:
            failure = SyncFailure(
                f"League service returned a record for {canonical.player_id}/{canonical.game_id}",
                "submit_player_stat",
            )
            self.adapter.report(failure)
            return SyncResult(ok=False, error=failure)

        with self._lock_for(player_id):
            if self._revisions.get(player_id, 0) == revision:
                self.session.ledgers[player_id] = canonical
                if result.value.team_scores is not None:
                    self.aggregation.apply_reconciled_scores(result.value.team_scores)
                else:
                    self.aggregation.refresh_scores()
            else:
                # A queued round trip will send the newer local record
                logger.debug("Kept newer local record for %s over league response", player_id)
            totals = self.aggregation.all_totals()

        self.adapter.call(
            "submit_team_stat",
            game_id,
            totals[self.session.home_team_id],
            totals[self.session.away_team_id],
        )
        return result
