"""
HTTP client for the hosted league service.

Translates between the scorekeeper's dataclasses and the service's JSON
documents. The service still stores a player's point events as a
space-separated ``pointsString``; that encoding lives only in this module.
"""
from typing import Any, Dict, List, Optional

import requests

from ..models import FinalizeResult, Player, PlayerGameStat, TeamGameStat
from ..utils import get_logger
from ..utils.constants import (
    API_FINISH_DEFAULT_PATH, API_FINISH_PATH, API_GAME_PATH,
    API_PLAYER_OF_GAME_PATH, API_PLAYER_STATS_PATH, API_TEAM_STATS_PATH,
    COUNTER_STATS,
)
from .errors import SyncFailure
from .league_gateway import GameRecord, LeagueGateway, PlayerStatResult

logger = get_logger(__name__)


def _ref_id(value: Any) -> Optional[str]:
    """Return the id of a populated document or a bare id."""
    if value is None:
        return None
    if isinstance(value, dict):
        value = value.get("_id")
    return str(value) if value is not None else None


def stat_to_wire(stat: PlayerGameStat) -> Dict[str, Any]:
    data = {
        "game": stat.game_id,
        "player": stat.player_id,
        "teamId": stat.team_id,
        "pointsString": " ".join(str(v) for v in stat.points_log),
        "points": stat.points,
        "twosMade": stat.twos_made,
        "threesMade": stat.threes_made,
        "freeThrowsMade": stat.free_throws_made,
    }
    for name in COUNTER_STATS:
        data[name] = getattr(stat, name)
    return data


def stat_from_wire(
    data: Dict[str, Any], player_id: str, team_id: str, game_id: Optional[str] = None
) -> PlayerGameStat:
    """
    Build a PlayerGameStat from a service stat document.

    Raises:
        ValueError: If the document is malformed
    """
    points_log = data.get("pointsLog")
    if points_log is None:
        points_log = [int(token) for token in str(data.get("pointsString") or "").split()]
    return PlayerGameStat.from_dict({
        "player_id": player_id,
        "game_id": _ref_id(data.get("game") or data.get("gameId")) or game_id,
        "team_id": _ref_id(data.get("teamId")) or team_id,
        "points_log": points_log,
        **{name: data.get(name, 0) for name in COUNTER_STATS},
    })


def team_to_wire(totals: TeamGameStat) -> Dict[str, Any]:
    return {
        "teamId": totals.team_id,
        "gameId": totals.game_id,
        "game": totals.game_id,
        "points": totals.points,
        "twosMade": totals.twos_made,
        "threesMade": totals.threes_made,
        "freeThrowsMade": totals.free_throws_made,
        "rebounds": totals.rebounds,
        "assists": totals.assists,
        "blocks": totals.blocks,
        "steals": totals.steals,
        "fouls": totals.fouls,
    }


def _has_team_stats(team: Dict[str, Any], game_id: str) -> bool:
    return any(
        _ref_id(s.get("gameId")) == game_id or _ref_id(s.get("game")) == game_id
        for s in team.get("seasonStatistics") or []
    )


class HttpLeagueGateway(LeagueGateway):
    """LeagueGateway backed by the league service's REST API."""

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"Content-Type": "application/json"})
        if token:
            self.session.headers.update({"Authorization": f"Bearer {token}"})

    # ------------------------------------------------------------------
    # LeagueGateway
    # ------------------------------------------------------------------
    def fetch_game(self, game_id: str) -> GameRecord:
        body = self._request("GET", API_GAME_PATH.format(game_id=game_id), "fetch_game")
        try:
            game = body["currentGame"]
            home = game["homeTeam"]
            away = game["awayTeam"]
            home_id, away_id = _ref_id(home), _ref_id(away)

            players: List[Player] = []
            stats: List[PlayerGameStat] = []
            for pdata in body.get("allPlayers") or []:
                player = Player.from_dict({
                    "player_id": _ref_id(pdata),
                    "name": pdata.get("playerName"),
                    "team_id": _ref_id(pdata.get("teamId") or pdata.get("team")),
                    "jersey_number": pdata.get("jerseyNumber"),
                })
                players.append(player)
                for sdata in pdata.get("allStats") or []:
                    if _ref_id(sdata.get("game")) == game_id:
                        stats.append(stat_from_wire(sdata, player.player_id, player.team_id))

            return GameRecord(
                game_id=game_id,
                home_team_id=home_id,
                away_team_id=away_id,
                players=players,
                stats=stats,
                home_has_team_stats=_has_team_stats(home, game_id),
                away_has_team_stats=_has_team_stats(away, game_id),
                home_score=int(game.get("homeTeamScore") or 0),
                away_score=int(game.get("awayTeamScore") or 0),
                player_of_game_id=_ref_id(game.get("playerOfTheGame")),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise SyncFailure(f"Malformed game payload: {exc}", "fetch_game") from exc

    def submit_player_stat(self, game_id, player_id, stat, team_scores=None):
        payload: Dict[str, Any] = {
            "chosenPlayer": player_id,
            "statistics": stat_to_wire(stat),
            "points": team_scores is not None,
        }
        if team_scores is not None:
            payload["updatedTotalScores"] = {"home": team_scores["home"], "away": team_scores["away"]}

        body = self._request(
            "PATCH", API_PLAYER_STATS_PATH.format(game_id=game_id), "submit_player_stat", payload
        )
        try:
            pdata = body["player"]
            record = pdata
            if "allStats" in pdata:
                record = next(
                    s for s in pdata["allStats"] if _ref_id(s.get("game")) == game_id
                )
            canonical = stat_from_wire(record, player_id, stat.team_id, game_id)
            scores = body.get("scores")
            if scores is not None:
                scores = {"home": int(scores["home"]), "away": int(scores["away"])}
            return PlayerStatResult(player=canonical, team_scores=scores)
        except (KeyError, TypeError, ValueError, StopIteration) as exc:
            raise SyncFailure(f"Malformed player payload: {exc}", "submit_player_stat") from exc

    def submit_team_stat(self, game_id, home_totals, away_totals):
        payload = {
            "statistics": {
                "homeTeam": team_to_wire(home_totals),
                "awayTeam": team_to_wire(away_totals),
            }
        }
        self._request("PATCH", API_TEAM_STATS_PATH.format(game_id=game_id), "submit_team_stat", payload)

    def finalize_game(self, game_id, home_team_id, away_team_id):
        body = self._request(
            "POST",
            API_FINISH_PATH.format(game_id=game_id),
            "finalize_game",
            {"homeTeamId": home_team_id, "awayTeamId": away_team_id},
        )
        # An explicit null winner is a tie; a missing key is a bad response
        if not isinstance(body, dict) or "gameWinner" not in body:
            raise SyncFailure("Finish response has no gameWinner", "finalize_game")
        return FinalizeResult(
            winner_team_id=_ref_id(body.get("gameWinner")),
            player_of_game_id=_ref_id(body.get("playerOfTheGame")),
        )

    def finalize_default_game(self, game_id, home_team_id, away_team_id, winner_team_id):
        body = self._request(
            "POST",
            API_FINISH_DEFAULT_PATH.format(game_id=game_id),
            "finalize_default_game",
            {"homeTeamId": home_team_id, "awayTeamId": away_team_id, "winnerTeamId": winner_team_id},
        )
        game = body.get("game") or {}
        return FinalizeResult(
            winner_team_id=winner_team_id,
            player_of_game_id=_ref_id(game.get("playerOfTheGame")),
            home_score=game.get("homeTeamScore"),
            away_score=game.get("awayTeamScore"),
        )

    def set_player_of_game(self, game_id, player_id):
        self._request(
            "PATCH",
            API_PLAYER_OF_GAME_PATH.format(game_id=game_id),
            "set_player_of_game",
            {"playerId": player_id},
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _request(
        self, method: str, path: str, operation: str, payload: Optional[dict] = None
    ) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        logger.debug("%s %s", method, url)
        try:
            response = self.session.request(method, url, json=payload, timeout=self.timeout)
        except requests.RequestException as exc:
            raise SyncFailure(f"{operation} request failed: {exc}", operation) from exc

        if not response.ok:
            try:
                message = response.json().get("error") or response.reason
            except (ValueError, AttributeError):
                message = response.reason
            raise SyncFailure(f"{operation} rejected: {message}", operation, response.status_code)

        try:
            return response.json() if response.content else {}
        except ValueError as exc:
            raise SyncFailure(f"{operation} returned invalid JSON", operation, response.status_code) from exc
