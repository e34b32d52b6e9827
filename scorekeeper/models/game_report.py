"""Dataclasses representing finalize results and game summaries."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .player_stat import PlayerGameStat, TeamGameStat


@dataclass
class FinalizeResult:
    """Canonical outcome returned by the league service when a game is finished."""

    winner_team_id: Optional[str]
    player_of_game_id: Optional[str]
    home_score: Optional[int] = None
    away_score: Optional[int] = None


@dataclass
class PlayerLine:
    """One row of the summary box score."""

    player_id: str
    name: str
    jersey_number: Optional[int]
    team_id: str
    stat: PlayerGameStat


@dataclass
class GameSummary:
    """Box score snapshot shown once a game has been finalized."""

    game_id: str
    state: str
    home_score: int
    away_score: int
    winner_team_id: Optional[str]
    player_of_game_id: Optional[str]
    team_totals: Dict[str, TeamGameStat] = field(default_factory=dict)
    players: List[PlayerLine] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "game_id": self.game_id,
            "state": self.state,
            "home_score": self.home_score,
            "away_score": self.away_score,
            "winner_team_id": self.winner_team_id,
            "player_of_game_id": self.player_of_game_id,
            "team_totals": {k: v.to_dict() for k, v in self.team_totals.items()},
            "players": [
                {
                    "player_id": line.player_id,
                    "name": line.name,
                    "jersey_number": line.jersey_number,
                    "team_id": line.team_id,
                    **{k: v for k, v in line.stat.to_dict().items()
                       if k not in ("player_id", "team_id", "game_id")},
                }
                for line in self.players
            ],
        }
