"""
Unit tests for the stat ledger.

Covers point events, undo, counting stats, validation before mutation and
reconciliation with the league service's canonical records.
"""
import threading
import time
import unittest
from unittest.mock import MagicMock

from scorekeeper.models import SessionState
from scorekeeper.services import (
    GameSessionService, InvalidPlayerError, InvalidStatError,
    InvalidTransitionError, LeagueGateway, NoActivePlayerError,
    PlayerStatResult, SerialSyncQueue, SyncAdapter, SyncFailure,
)

from factories import AWAY, GAME_ID, HOME, live_session, open_session, seed_gateway, stat


class TestStatLedgerWithLeagueService(unittest.TestCase):
    """Ledger mutations against the in-memory league service."""

    def setUp(self) -> None:
        self.service = open_session()
        self.gateway = self.service.adapter.gateway
        self.service.start_scoring()
        self.service.set_active_player("h1")
        self.gateway.calls.clear()

    def test_point_events_update_ledger_and_score(self) -> None:
        for value in (2, 3, 1):
            self.service.record_point(value)

        current = self.service.active_player_stat()
        self.assertEqual(current.points, 6)
        self.assertEqual(current.twos_made, 1)
        self.assertEqual(current.threes_made, 1)
        self.assertEqual(current.free_throws_made, 1)

        self.assertEqual(self.service.session.home_score, 6)
        self.assertEqual(self.service.session.away_score, 0)
        self.assertEqual(self.gateway.player_stat("h1", GAME_ID).points, 6)
        self.assertEqual(self.gateway.game(GAME_ID)["home_score"], 6)
        self.assertEqual(self.gateway.team_stat(HOME, GAME_ID).points, 6)

    def test_each_mutation_submits_player_then_team_stats(self) -> None:
        self.service.record_point(2)
        self.assertEqual(self.gateway.calls, ["submit_player_stat", "submit_team_stat"])

    def test_record_then_undo_restores_prior_record(self) -> None:
        self.service.increment_counter_stat("rebounds")
        self.service.record_point(3)
        before = self.service.active_player_stat()

        self.service.record_point(2)
        self.service.undo_last_point()

        self.assertEqual(self.service.active_player_stat(), before)
        self.assertEqual(self.service.session.home_score, 3)

    def test_record_then_undo_leaves_empty_log(self) -> None:
        self.service.record_point(2)
        self.service.undo_last_point()

        current = self.service.active_player_stat()
        self.assertEqual(current.points_log, [])
        self.assertEqual(current.points, 0)

    def test_undo_on_empty_log_skips_league_service(self) -> None:
        result = self.service.undo_last_point()

        self.assertIsNone(result)
        self.assertEqual(self.gateway.calls, [])
        self.assertEqual(self.service.active_player_stat().points_log, [])

    def test_decrement_never_goes_below_zero(self) -> None:
        self.service.increment_counter_stat("fouls")
        for _ in range(3):
            self.service.decrement_counter_stat("fouls")

        self.assertEqual(self.service.active_player_stat().fouls, 0)
        self.assertEqual(self.gateway.calls.count("submit_player_stat"), 2)

    def test_decrement_at_zero_is_a_silent_no_op(self) -> None:
        result = self.service.decrement_counter_stat("steals")

        self.assertIsNone(result)
        self.assertEqual(self.gateway.calls, [])

    def test_counter_stats_do_not_touch_score(self) -> None:
        self.service.record_point(3)
        self.service.increment_counter_stat("assists")
        self.service.increment_counter_stat("blocks")

        current = self.service.active_player_stat()
        self.assertEqual(current.assists, 1)
        self.assertEqual(current.blocks, 1)
        self.assertEqual(self.service.session.home_score, 3)

    def test_explicit_player_overrides_active_player(self) -> None:
        self.service.record_point(3, player_id="a1")

        self.assertEqual(self.service.ledger.stat_for("a1").points, 3)
        self.assertEqual(self.service.session.away_score, 3)
        self.assertIsNone(self.service.active_player_stat())

    def test_mutations_allowed_after_finish(self) -> None:
        self.service.record_point(2)
        self.service.finish_game()

        self.service.record_point(3)
        self.assertEqual(self.service.session.state, SessionState.SUMMARY)
        self.assertEqual(self.service.active_player_stat().points, 5)


class TestStatLedgerValidation(unittest.TestCase):
    """Rejected mutations leave local state untouched."""

    def setUp(self) -> None:
        self.service = open_session()
        self.gateway = self.service.adapter.gateway

    def test_no_active_player(self) -> None:
        self.service.start_scoring()
        self.gateway.calls.clear()

        with self.assertRaises(NoActivePlayerError):
            self.service.record_point(2)
        with self.assertRaises(NoActivePlayerError):
            self.service.increment_counter_stat("rebounds")

        self.assertEqual(self.service.session.ledgers, {})
        self.assertEqual(self.gateway.calls, [])

    def test_player_not_on_either_roster(self) -> None:
        self.service.start_scoring()
        with self.assertRaises(InvalidPlayerError):
            self.service.record_point(2, player_id="ghost")
        self.assertNotIn("ghost", self.service.session.ledgers)

    def test_invalid_point_value_creates_no_ledger(self) -> None:
        self.service.start_scoring()
        self.service.set_active_player("h2")

        with self.assertRaises(InvalidStatError):
            self.service.record_point(4)
        self.assertNotIn("h2", self.service.session.ledgers)

    def test_unknown_counter_stat(self) -> None:
        self.service.start_scoring()
        self.service.set_active_player("h2")

        with self.assertRaises(InvalidStatError):
            self.service.increment_counter_stat("dunks")
        with self.assertRaises(InvalidStatError):
            self.service.decrement_counter_stat("points")
        self.assertNotIn("h2", self.service.session.ledgers)

    def test_scoring_disabled_during_setup(self) -> None:
        self.service.set_active_player("h1")
        with self.assertRaises(InvalidTransitionError):
            self.service.record_point(2)
        self.assertEqual(self.service.session.ledgers, {})


class TestStatLedgerReconciliation(unittest.TestCase):
    """The league service's returned records overwrite local state."""

    def setUp(self) -> None:
        self.gateway = MagicMock(spec=LeagueGateway)
        self.adapter = SyncAdapter(self.gateway)
        self.service = GameSessionService(live_session(), self.adapter, SerialSyncQueue())
        self.service.set_active_player("h1")

    def test_canonical_record_and_scores_replace_local(self) -> None:
        canonical = stat("h1", HOME, [3, 3], rebounds=1)
        self.gateway.submit_player_stat.return_value = PlayerStatResult(
            player=canonical, team_scores={"home": 40, "away": 38}
        )

        self.service.record_point(2)

        self.assertEqual(self.service.active_player_stat(), canonical)
        self.assertEqual(self.service.session.home_score, 40)
        self.assertEqual(self.service.session.away_score, 38)

        home_totals, away_totals = self.gateway.submit_team_stat.call_args[0][1:]
        self.assertEqual(home_totals.team_id, HOME)
        self.assertEqual(home_totals.points, 6)
        self.assertEqual(away_totals.team_id, AWAY)

    def test_locally_computed_scores_are_sent_with_point_events(self) -> None:
        self.gateway.submit_player_stat.return_value = PlayerStatResult(player=stat("h1", HOME, [2]))

        self.service.record_point(2)

        args = self.gateway.submit_player_stat.call_args[0]
        self.assertEqual(args[0], GAME_ID)
        self.assertEqual(args[1], "h1")
        self.assertEqual(args[2].points_log, [2])
        self.assertEqual(args[3], {"home": 2, "away": 0})

    def test_counter_stats_send_no_scores(self) -> None:
        self.gateway.submit_player_stat.return_value = PlayerStatResult(
            player=stat("h1", HOME, rebounds=1)
        )

        self.service.increment_counter_stat("rebounds")

        self.assertIsNone(self.gateway.submit_player_stat.call_args[0][3])

    def test_record_for_another_player_is_rejected(self) -> None:
        self.gateway.submit_player_stat.return_value = PlayerStatResult(player=stat("h2", HOME, [3]))

        result = self.service.record_point(2).result()

        self.assertFalse(result.ok)
        self.assertEqual(self.service.active_player_stat().points_log, [2])
        self.assertEqual(len(self.adapter.notices), 1)
        self.gateway.submit_team_stat.assert_not_called()

    def test_sync_failure_keeps_optimistic_state(self) -> None:
        self.gateway.submit_player_stat.side_effect = SyncFailure("Service unavailable", status_code=503)

        with self.assertLogs("scorekeeper.sync", level="WARNING"):
            result = self.service.record_point(3).result()

        self.assertFalse(result.ok)
        self.assertEqual(result.error.operation, "submit_player_stat")
        self.assertEqual(self.service.active_player_stat().points, 3)
        self.assertEqual(self.service.session.home_score, 3)
        self.assertEqual(self.gateway.submit_player_stat.call_count, 1)
        self.gateway.submit_team_stat.assert_not_called()

        notices = self.adapter.drain_notices()
        self.assertEqual(len(notices), 1)
        self.assertEqual(notices[0].operation, "submit_player_stat")


class TestStatLedgerOverlappingSyncs(unittest.TestCase):
    """Mutations made while a round trip for the same player is in flight."""

    def slow_gateway(self, gate=None, delay: float = 0.0):
        gateway = seed_gateway()
        submit = gateway.submit_player_stat
        self.sent = []
        self.entered = threading.Event()

        def submit_player_stat(game_id, player_id, stat, team_scores=None):
            self.sent.append(list(stat.points_log))
            self.entered.set()
            if gate is not None and len(self.sent) == 1:
                gate.wait(5)
            time.sleep(delay)
            return submit(game_id, player_id, stat, team_scores)

        gateway.submit_player_stat = submit_player_stat
        return gateway

    def test_queued_events_survive_a_stale_response(self) -> None:
        release = threading.Event()
        gateway = self.slow_gateway(gate=release)
        queue = SerialSyncQueue(inline=False, max_workers=4)
        self.addCleanup(queue.shutdown)
        self.addCleanup(release.set)
        service = open_session(gateway, queue)
        service.start_scoring()
        service.set_active_player("h1")

        first = service.record_point(2)
        self.assertTrue(self.entered.wait(5))
        service.record_point(3)

        release.set()
        self.assertTrue(first.result(timeout=5).ok)
        self.assertEqual(service.active_player_stat().points_log, [2, 3])

        service.record_point(1)
        queue.flush(timeout=5)

        self.assertEqual(self.sent[0], [2])
        self.assertEqual(self.sent[-1], [2, 3, 1])
        self.assertEqual(gateway.player_stat("h1", GAME_ID).points_log, [2, 3, 1])
        self.assertEqual(service.active_player_stat().points_log, [2, 3, 1])
        self.assertEqual(service.session.home_score, 6)
        self.assertEqual(gateway.game(GAME_ID)["home_score"], 6)
        self.assertEqual(gateway.team_stat(HOME, GAME_ID).points, 6)

    def test_concurrent_callers_lose_no_events(self) -> None:
        gateway = self.slow_gateway(delay=0.002)
        service = open_session(gateway, SerialSyncQueue(inline=True))
        service.start_scoring()

        def score():
            for _ in range(5):
                service.record_point(2, player_id="h1")
                service.increment_counter_stat("rebounds", player_id="h1")

        threads = [threading.Thread(target=score) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(10)

        server = gateway.player_stat("h1", GAME_ID)
        local = service.ledger.stat_for("h1")
        self.assertEqual(server.points_log, [2] * 20)
        self.assertEqual(server.rebounds, 20)
        self.assertEqual(local, server)
        self.assertEqual(gateway.game(GAME_ID)["home_score"], 40)


if __name__ == "__main__":
    unittest.main()
