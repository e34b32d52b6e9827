"""
GameSession model for the league scorekeeper.

This module contains the GameSession dataclass which represents one live
scoring instance of a game: rosters, per-player ledgers, timeouts, the
session mode and the score of record.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from .player_stat import PlayerGameStat
from ..utils.constants import HALVES, TIMEOUTS_PER_HALF


class SessionState(Enum):
    """Scoring workflow modes."""
    SETUP = "setup"
    LIVE = "live"
    SUMMARY = "summary"


@dataclass
class Player:
    """A rostered player for one side of the game."""
    player_id: str
    name: str
    team_id: str
    jersey_number: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "player_id": self.player_id,
            "name": self.name,
            "team_id": self.team_id,
            "jersey_number": self.jersey_number,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Player":
        if not data.get("player_id") or not data.get("team_id"):
            raise ValueError("Player requires player_id and team_id")
        number = data.get("jersey_number")
        return cls(
            player_id=str(data["player_id"]),
            name=str(data.get("name") or ""),
            team_id=str(data["team_id"]),
            jersey_number=int(number) if number is not None else None,
        )


@dataclass
class TeamTimeouts:
    """Remaining timeouts for one team, per half."""
    first_half: int = TIMEOUTS_PER_HALF
    second_half: int = TIMEOUTS_PER_HALF

    def remaining(self, half: str) -> int:
        if half not in HALVES:
            raise ValueError(f"Unknown half: {half!r}")
        return getattr(self, half)

    def to_dict(self) -> Dict[str, int]:
        return {"first_half": self.first_half, "second_half": self.second_half}


@dataclass
class GameSession:
    """
    Complete state of one scoring session.
    
    Attributes:
        game_id: Game being scored
        home_team_id: Home side
        away_team_id: Away side
        state: Current workflow mode
        active_player_id: Player receiving stat input, None when nobody is selected
        roster: Players of both sides keyed by player id
        ledgers: Stat records for this game keyed by player id (checked-in players)
        team_timeouts: Remaining timeouts keyed by team id
        home_score: Score of record for the home side
        away_score: Score of record for the away side
        winner_team_id: Set by finalize; None before finalize or on a tie
        player_of_game_id: Player of the game selection, settable at any time
        finalized: Whether a finalize result has been applied
    """
    game_id: str
    home_team_id: str
    away_team_id: str
    state: SessionState = SessionState.SETUP
    active_player_id: Optional[str] = None
    roster: Dict[str, Player] = field(default_factory=dict)
    ledgers: Dict[str, PlayerGameStat] = field(default_factory=dict)
    team_timeouts: Dict[str, TeamTimeouts] = field(default_factory=dict)
    home_score: int = 0
    away_score: int = 0
    winner_team_id: Optional[str] = None
    player_of_game_id: Optional[str] = None
    finalized: bool = False

    def __post_init__(self) -> None:
        for team_id in self.team_ids:
            self.team_timeouts.setdefault(team_id, TeamTimeouts())

    @property
    def team_ids(self) -> List[str]:
        return [self.home_team_id, self.away_team_id]

    def is_team(self, team_id: Optional[str]) -> bool:
        return team_id in (self.home_team_id, self.away_team_id)

    def roster_for(self, team_id: str) -> List[Player]:
        return [p for p in self.roster.values() if p.team_id == team_id]

    def set_team_score(self, team_id: str, score: int) -> None:
        if team_id == self.home_team_id:
            self.home_score = score
        elif team_id == self.away_team_id:
            self.away_score = score

    def snapshot(self) -> Dict[str, Any]:
        """Read-only view of the session for the presentation layer."""
        return {
            "game_id": self.game_id,
            "state": self.state.value,
            "home_team_id": self.home_team_id,
            "away_team_id": self.away_team_id,
            "home_score": self.home_score,
            "away_score": self.away_score,
            "active_player_id": self.active_player_id,
            "timeouts": {k: v.to_dict() for k, v in self.team_timeouts.items()},
            "winner_team_id": self.winner_team_id,
            "player_of_game_id": self.player_of_game_id,
            "finalized": self.finalized,
            "checked_in": list(self.ledgers.keys()),
        }

    def to_json(self) -> dict:
        """
        Convert GameSession to JSON-serializable dictionary.
        
        Returns:
            Dictionary representation suitable for JSON serialization
        """
        data = self.snapshot()
        data.pop("checked_in")
        data["roster"] = [p.to_dict() for p in self.roster.values()]
        data["ledgers"] = [s.to_dict() for s in self.ledgers.values()]
        return data

    @staticmethod
    def from_json(data: dict) -> "GameSession":
        """
        Create GameSession from JSON dictionary.
        
        Args:
            data: Dictionary with session data
            
        Returns:
            New GameSession instance

        Raises:
            ValueError: If a roster entry or ledger is malformed
        """
        session = GameSession(
            game_id=str(data["game_id"]),
            home_team_id=str(data["home_team_id"]),
            away_team_id=str(data["away_team_id"]),
            state=SessionState(data.get("state", SessionState.SETUP.value)),
            active_player_id=data.get("active_player_id"),
            home_score=int(data.get("home_score", 0)),
            away_score=int(data.get("away_score", 0)),
            winner_team_id=data.get("winner_team_id"),
            player_of_game_id=data.get("player_of_game_id"),
            finalized=bool(data.get("finalized", False)),
        )
        for pdata in data.get("roster", []):
            player = Player.from_dict(pdata)
            session.roster[player.player_id] = player
        for sdata in data.get("ledgers", []):
            stat = PlayerGameStat.from_dict(sdata)
            session.ledgers[stat.player_id] = stat
        for team_id, tdata in (data.get("timeouts") or {}).items():
            session.team_timeouts[team_id] = TeamTimeouts(
                first_half=max(0, int(tdata.get("first_half", TIMEOUTS_PER_HALF))),
                second_half=max(0, int(tdata.get("second_half", TIMEOUTS_PER_HALF))),
            )
        return session
