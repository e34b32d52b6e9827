"""
Contract for the remote league data service.

The league service owns persistence of games, players and team statistics.
The scorekeeper sends every mutation through a LeagueGateway and treats the
returned records as authoritative.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ..models import FinalizeResult, Player, PlayerGameStat, TeamGameStat


@dataclass
class GameRecord:
    """Everything the scorekeeper needs to open a game."""
    game_id: str
    home_team_id: str
    away_team_id: str
    players: List[Player] = field(default_factory=list)
    stats: List[PlayerGameStat] = field(default_factory=list)
    home_has_team_stats: bool = False
    away_has_team_stats: bool = False
    home_score: int = 0
    away_score: int = 0
    player_of_game_id: Optional[str] = None
    winner_team_id: Optional[str] = None


@dataclass
class PlayerStatResult:
    """Canonical player record, plus the game score when one was recorded."""
    player: PlayerGameStat
    team_scores: Optional[Dict[str, int]] = None  # {"home": int, "away": int}


class LeagueGateway(ABC):
    """Abstract league service client."""

    @abstractmethod
    def fetch_game(self, game_id: str) -> GameRecord:
        pass

    @abstractmethod
    def submit_player_stat(
        self,
        game_id: str,
        player_id: str,
        stat: PlayerGameStat,
        team_scores: Optional[Dict[str, int]] = None,
    ) -> PlayerStatResult:
        pass

    @abstractmethod
    def submit_team_stat(
        self, game_id: str, home_totals: TeamGameStat, away_totals: TeamGameStat
    ) -> None:
        pass

    @abstractmethod
    def finalize_game(
        self, game_id: str, home_team_id: str, away_team_id: str
    ) -> FinalizeResult:
        pass

    @abstractmethod
    def finalize_default_game(
        self, game_id: str, home_team_id: str, away_team_id: str, winner_team_id: str
    ) -> FinalizeResult:
        pass

    @abstractmethod
    def set_player_of_game(self, game_id: str, player_id: str) -> None:
        pass
