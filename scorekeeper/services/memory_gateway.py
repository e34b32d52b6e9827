"""
In-process implementation of the league service.

Keeps games, player stat records and team stat records in dictionaries and
applies the same finalize rules as the hosted service. Used by the test suite
and by the web server when started with ``--offline``.
"""
import threading
from typing import Dict, List, Optional, Tuple

from ..models import FinalizeResult, Player, PlayerGameStat, TeamGameStat
from ..utils import get_logger
from ..utils.constants import (
    FORFEIT_LOSING_SCORE, FORFEIT_WINNING_SCORE, PLAYER_OF_GAME_FIELDS,
)
from .errors import SyncFailure
from .league_gateway import GameRecord, LeagueGateway, PlayerStatResult

logger = get_logger(__name__)


class InMemoryLeagueGateway(LeagueGateway):
    """Dictionary-backed league service."""

    def __init__(self):
        self._lock = threading.Lock()
        self._games: Dict[str, Dict] = {}
        self._players: Dict[str, Player] = {}
        # (player_id, game_id) -> record; a player may hold records for many games
        self._player_stats: Dict[Tuple[str, str], PlayerGameStat] = {}
        # (team_id, game_id) -> record
        self._team_stats: Dict[Tuple[str, str], TeamGameStat] = {}
        self.calls: List[str] = []

    # ------------------------------------------------------------------
    # Seeding helpers
    # ------------------------------------------------------------------
    def add_game(
        self,
        game_id: str,
        home_team_id: str,
        away_team_id: str,
        players: Optional[List[Player]] = None,
    ) -> None:
        with self._lock:
            self._games[game_id] = {
                "home_team_id": home_team_id,
                "away_team_id": away_team_id,
                "home_score": 0,
                "away_score": 0,
                "player_of_game_id": None,
                "winner_team_id": None,
                "completed": False,
            }
            for player in players or []:
                self._players[player.player_id] = player

    def add_player(self, player: Player) -> None:
        with self._lock:
            self._players[player.player_id] = player

    def put_player_stat(self, stat: PlayerGameStat) -> None:
        with self._lock:
            self._player_stats[(stat.player_id, stat.game_id)] = stat.copy()

    def put_team_stat(self, totals: TeamGameStat) -> None:
        with self._lock:
            self._team_stats[(totals.team_id, totals.game_id)] = totals

    def player_stat(self, player_id: str, game_id: str) -> Optional[PlayerGameStat]:
        stat = self._player_stats.get((player_id, game_id))
        return stat.copy() if stat else None

    def team_stat(self, team_id: str, game_id: str) -> Optional[TeamGameStat]:
        return self._team_stats.get((team_id, game_id))

    def game(self, game_id: str) -> Dict:
        return dict(self._require_game(game_id))

    # ------------------------------------------------------------------
    # LeagueGateway
    # ------------------------------------------------------------------
    def fetch_game(self, game_id: str) -> GameRecord:
        self.calls.append("fetch_game")
        with self._lock:
            game = self._require_game(game_id)
            home, away = game["home_team_id"], game["away_team_id"]
            players = [p for p in self._players.values() if p.team_id in (home, away)]
            stats = [
                s.copy() for (pid, gid), s in self._player_stats.items()
                if gid == game_id and pid in {p.player_id for p in players}
            ]
            return GameRecord(
                game_id=game_id,
                home_team_id=home,
                away_team_id=away,
                players=players,
                stats=stats,
                home_has_team_stats=(home, game_id) in self._team_stats,
                away_has_team_stats=(away, game_id) in self._team_stats,
                home_score=game["home_score"],
                away_score=game["away_score"],
                player_of_game_id=game["player_of_game_id"],
                winner_team_id=game["winner_team_id"],
            )

    def submit_player_stat(self, game_id, player_id, stat, team_scores=None):
        self.calls.append("submit_player_stat")
        with self._lock:
            game = self._require_game(game_id)
            if player_id not in self._players:
                raise SyncFailure("Player not found", "submit_player_stat", 404)

            stored = stat.copy()
            self._player_stats[(player_id, game_id)] = stored

            scores = None
            if team_scores is not None:
                game["home_score"] = int(team_scores["home"])
                game["away_score"] = int(team_scores["away"])
                scores = {"home": game["home_score"], "away": game["away_score"]}

            return PlayerStatResult(player=stored.copy(), team_scores=scores)

    def submit_team_stat(self, game_id, home_totals, away_totals):
        self.calls.append("submit_team_stat")
        with self._lock:
            self._require_game(game_id)
            for totals in (home_totals, away_totals):
                self._team_stats[(totals.team_id, game_id)] = totals

    def finalize_game(self, game_id, home_team_id, away_team_id):
        self.calls.append("finalize_game")
        with self._lock:
            game = self._require_game(game_id)
            self._require_teams(game, home_team_id, away_team_id)
            game["completed"] = True

            home_score, away_score = game["home_score"], game["away_score"]
            if home_score > away_score:
                winner = home_team_id
            elif away_score > home_score:
                winner = away_team_id
            else:
                winner = None
            game["winner_team_id"] = winner

            if game["player_of_game_id"] is None:
                candidates = [winner] if winner else [home_team_id, away_team_id]
                game["player_of_game_id"] = self._pick_player_of_game(game_id, candidates)

            logger.info("Game %s finalized: winner=%s", game_id, winner)
            return FinalizeResult(
                winner_team_id=winner,
                player_of_game_id=game["player_of_game_id"],
                home_score=home_score,
                away_score=away_score,
            )

    def finalize_default_game(self, game_id, home_team_id, away_team_id, winner_team_id):
        self.calls.append("finalize_default_game")
        with self._lock:
            game = self._require_game(game_id)
            self._require_teams(game, home_team_id, away_team_id)
            if winner_team_id not in (home_team_id, away_team_id):
                raise SyncFailure("Teams not found", "finalize_default_game", 404)

            home_won = winner_team_id == home_team_id
            game["home_score"] = FORFEIT_WINNING_SCORE if home_won else FORFEIT_LOSING_SCORE
            game["away_score"] = FORFEIT_LOSING_SCORE if home_won else FORFEIT_WINNING_SCORE
            game["winner_team_id"] = winner_team_id
            game["completed"] = True
            for team_id in (home_team_id, away_team_id):
                self._team_stats[(team_id, game_id)] = TeamGameStat(team_id=team_id, game_id=game_id)

            return FinalizeResult(
                winner_team_id=winner_team_id,
                player_of_game_id=game["player_of_game_id"],
                home_score=game["home_score"],
                away_score=game["away_score"],
            )

    def set_player_of_game(self, game_id, player_id):
        self.calls.append("set_player_of_game")
        with self._lock:
            game = self._require_game(game_id)
            game["player_of_game_id"] = player_id

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _require_game(self, game_id: str) -> Dict:
        game = self._games.get(game_id)
        if game is None:
            raise SyncFailure("Game not found", status_code=404)
        return game

    @staticmethod
    def _require_teams(game: Dict, home_team_id: str, away_team_id: str) -> None:
        if (home_team_id, away_team_id) != (game["home_team_id"], game["away_team_id"]):
            raise SyncFailure("Teams not found", status_code=404)

    def _pick_player_of_game(self, game_id: str, team_ids: List[str]) -> Optional[str]:
        best_id, best_total = None, 0
        for player in self._players.values():
            if player.team_id not in team_ids:
                continue
            stat = self._player_stats.get((player.player_id, game_id))
            if stat is None:
                continue
            total = stat.stat_total(PLAYER_OF_GAME_FIELDS)
            if total > best_total:
                best_id, best_total = player.player_id, total
        return best_id
