"""
Unit tests for the HTTP league service client.

The requests session is replaced by a MagicMock so no network is used.
"""
import unittest
from unittest.mock import MagicMock

import requests

from scorekeeper.models import TeamGameStat
from scorekeeper.services import HttpLeagueGateway, SyncFailure

from factories import AWAY, GAME_ID, HOME, stat

BASE_URL = "http://league.test"


def make_response(body=None, status_code=200, reason="OK"):
    response = MagicMock()
    response.ok = status_code < 400
    response.status_code = status_code
    response.reason = reason
    response.content = b"{}" if body is not None else b""
    response.json.return_value = body
    return response


class TestHttpLeagueGateway(unittest.TestCase):
    """Request building and response parsing."""

    def setUp(self) -> None:
        self.session = MagicMock()
        self.session.headers = {}
        self.gateway = HttpLeagueGateway(BASE_URL + "/", token="secret", timeout=5, session=self.session)

    def test_bearer_token_and_base_url(self) -> None:
        self.assertEqual(self.session.headers["Authorization"], "Bearer secret")
        self.assertEqual(self.gateway.base_url, BASE_URL)

    def test_fetch_game_parses_rosters_and_stats(self) -> None:
        self.session.request.return_value = make_response({
            "currentGame": {
                "_id": GAME_ID,
                "homeTeam": {"_id": HOME, "seasonStatistics": [{"gameId": GAME_ID}]},
                "awayTeam": {"_id": AWAY, "seasonStatistics": [{"gameId": "g0"}]},
                "homeTeamScore": 12,
                "awayTeamScore": 9,
                "playerOfTheGame": {"_id": "h1"},
            },
            "allPlayers": [
                {
                    "_id": "h1", "playerName": "Hana", "teamId": HOME, "jerseyNumber": 4,
                    "allStats": [
                        {"game": GAME_ID, "pointsString": "2 3 1", "rebounds": 2},
                        {"game": "g0", "pointsString": "3 3"},
                    ],
                },
                {"_id": "a1", "playerName": "Ari", "teamId": {"_id": AWAY}, "jerseyNumber": "10"},
            ],
        })

        record = self.gateway.fetch_game(GAME_ID)

        method, url = self.session.request.call_args[0]
        self.assertEqual(method, "GET")
        self.assertEqual(url, f"{BASE_URL}/api/v1/scorekeeper/{GAME_ID}")
        self.assertEqual((record.home_team_id, record.away_team_id), (HOME, AWAY))
        self.assertEqual([p.player_id for p in record.players], ["h1", "a1"])
        self.assertEqual(record.players[1].team_id, AWAY)
        self.assertEqual(record.players[1].jersey_number, 10)
        self.assertEqual(len(record.stats), 1)
        self.assertEqual(record.stats[0].points_log, [2, 3, 1])
        self.assertEqual(record.stats[0].points, 6)
        self.assertEqual(record.stats[0].rebounds, 2)
        self.assertTrue(record.home_has_team_stats)
        self.assertFalse(record.away_has_team_stats)
        self.assertEqual((record.home_score, record.away_score), (12, 9))
        self.assertEqual(record.player_of_game_id, "h1")

    def test_fetch_game_rejects_malformed_payload(self) -> None:
        self.session.request.return_value = make_response({"allPlayers": []})

        with self.assertRaises(SyncFailure) as ctx:
            self.gateway.fetch_game(GAME_ID)
        self.assertEqual(ctx.exception.operation, "fetch_game")

    def test_submit_player_stat_sends_points_string_and_scores(self) -> None:
        self.session.request.return_value = make_response({
            "player": {"allStats": [
                {"game": "g0", "pointsString": "1"},
                {"game": GAME_ID, "pointsString": "2 3", "assists": 1},
            ]},
            "scores": {"home": 5, "away": 0},
        })

        result = self.gateway.submit_player_stat(
            GAME_ID, "h1", stat("h1", HOME, [2, 3]), {"home": 5, "away": 0}
        )

        method, url = self.session.request.call_args[0]
        kwargs = self.session.request.call_args[1]
        self.assertEqual(method, "PATCH")
        self.assertEqual(url, f"{BASE_URL}/api/v1/scorekeeper/{GAME_ID}/player-stats")
        self.assertEqual(kwargs["timeout"], 5)
        payload = kwargs["json"]
        self.assertEqual(payload["chosenPlayer"], "h1")
        self.assertEqual(payload["statistics"]["pointsString"], "2 3")
        self.assertEqual(payload["statistics"]["threesMade"], 1)
        self.assertTrue(payload["points"])
        self.assertEqual(payload["updatedTotalScores"], {"home": 5, "away": 0})

        self.assertEqual(result.player.player_id, "h1")
        self.assertEqual(result.player.game_id, GAME_ID)
        self.assertEqual(result.player.points, 5)
        self.assertEqual(result.player.assists, 1)
        self.assertEqual(result.team_scores, {"home": 5, "away": 0})

    def test_submit_counter_stat_without_scores(self) -> None:
        self.session.request.return_value = make_response({
            "player": {"game": GAME_ID, "pointsLog": [], "fouls": 2},
        })

        result = self.gateway.submit_player_stat(GAME_ID, "h1", stat("h1", HOME, fouls=2))

        payload = self.session.request.call_args[1]["json"]
        self.assertFalse(payload["points"])
        self.assertNotIn("updatedTotalScores", payload)
        self.assertEqual(result.player.fouls, 2)
        self.assertIsNone(result.team_scores)

    def test_submit_team_stat(self) -> None:
        self.session.request.return_value = make_response(None, status_code=204)

        self.gateway.submit_team_stat(
            GAME_ID, TeamGameStat(HOME, GAME_ID, points=7), TeamGameStat(AWAY, GAME_ID, points=3)
        )

        payload = self.session.request.call_args[1]["json"]
        self.assertEqual(payload["statistics"]["homeTeam"]["points"], 7)
        self.assertEqual(payload["statistics"]["awayTeam"]["teamId"], AWAY)

    def test_finalize_game_parses_winner(self) -> None:
        self.session.request.return_value = make_response({
            "gameWinner": {"_id": HOME},
            "playerOfTheGame": "h1",
        })

        result = self.gateway.finalize_game(GAME_ID, HOME, AWAY)

        method, url = self.session.request.call_args[0]
        self.assertEqual(method, "POST")
        self.assertTrue(url.endswith("/finish"))
        self.assertEqual(result.winner_team_id, HOME)
        self.assertEqual(result.player_of_game_id, "h1")

    def test_finalize_game_null_winner_is_a_tie(self) -> None:
        self.session.request.return_value = make_response({"gameWinner": None, "playerOfTheGame": "a1"})

        result = self.gateway.finalize_game(GAME_ID, HOME, AWAY)

        self.assertIsNone(result.winner_team_id)
        self.assertEqual(result.player_of_game_id, "a1")

    def test_finalize_game_without_winner_field_fails(self) -> None:
        for body in (None, {}, {"playerOfTheGame": "h1"}):
            self.session.request.return_value = make_response(body)

            with self.assertRaises(SyncFailure) as ctx:
                self.gateway.finalize_game(GAME_ID, HOME, AWAY)
            self.assertEqual(ctx.exception.operation, "finalize_game")

    def test_rejected_request_raises_with_status(self) -> None:
        response = make_response({"error": "Game not found"}, status_code=404, reason="Not Found")
        self.session.request.return_value = response

        with self.assertRaises(SyncFailure) as ctx:
            self.gateway.set_player_of_game(GAME_ID, "h1")
        self.assertEqual(ctx.exception.status_code, 404)
        self.assertIn("Game not found", str(ctx.exception))

    def test_connection_error_raises_sync_failure(self) -> None:
        self.session.request.side_effect = requests.ConnectionError("refused")

        with self.assertRaises(SyncFailure) as ctx:
            self.gateway.finalize_game(GAME_ID, HOME, AWAY)
        self.assertEqual(ctx.exception.operation, "finalize_game")
        self.assertIsNone(ctx.exception.status_code)

    def test_invalid_json_raises_sync_failure(self) -> None:
        response = make_response({})
        response.json.side_effect = ValueError("not json")
        self.session.request.return_value = response

        with self.assertRaises(SyncFailure):
            self.gateway.finalize_game(GAME_ID, HOME, AWAY)


if __name__ == "__main__":
    unittest.main()
