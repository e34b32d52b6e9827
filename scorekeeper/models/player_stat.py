"""
Stat ledger records for the league scorekeeper.

This module contains the PlayerGameStat dataclass, the per-player per-game
record of point events and counting statistics, and the TeamGameStat
dataclass holding a team's totals derived from those records.
"""
from dataclasses import dataclass, field, fields
from typing import Any, Dict, Iterable, List, Optional

from ..utils.constants import COUNTER_STATS, POINT_VALUES, TEAM_TOTAL_FIELDS


@dataclass
class PlayerGameStat:
    """
    Ledger for one player in one game.

    Attributes:
        player_id: Player the record belongs to
        game_id: Game the record belongs to
        team_id: Team the player represents in this game
        points_log: Ordered point events (1, 2 or 3), appended and removed at the tail only
        points: Sum of the point events
        twos_made: Number of 2-point events
        threes_made: Number of 3-point events
        free_throws_made: Number of 1-point events
        rebounds, assists, blocks, steals, fouls: Counting stats, never negative
    """
    player_id: str
    game_id: str
    team_id: str
    points_log: List[int] = field(default_factory=list)
    points: int = 0
    twos_made: int = 0
    threes_made: int = 0
    free_throws_made: int = 0
    rebounds: int = 0
    assists: int = 0
    blocks: int = 0
    steals: int = 0
    fouls: int = 0

    def recompute(self) -> None:
        """Derive the scoring fields from the full point log."""
        self.points = sum(self.points_log)
        self.twos_made = self.points_log.count(2)
        self.threes_made = self.points_log.count(3)
        self.free_throws_made = self.points_log.count(1)

    def append_point(self, value: int) -> None:
        if value not in POINT_VALUES:
            raise ValueError(f"Invalid point value: {value!r}")
        self.points_log.append(value)
        self.recompute()

    def pop_point(self) -> Optional[int]:
        """Remove the most recent point event; returns None when the log is empty."""
        if not self.points_log:
            return None
        value = self.points_log.pop()
        self.recompute()
        return value

    def copy(self) -> "PlayerGameStat":
        return PlayerGameStat.from_dict(self.to_dict())

    def stat_total(self, names: Iterable[str]) -> int:
        return sum(getattr(self, name) for name in names)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "player_id": self.player_id,
            "game_id": self.game_id,
            "team_id": self.team_id,
            "points_log": list(self.points_log),
            "points": self.points,
            "twos_made": self.twos_made,
            "threes_made": self.threes_made,
            "free_throws_made": self.free_throws_made,
            "rebounds": self.rebounds,
            "assists": self.assists,
            "blocks": self.blocks,
            "steals": self.steals,
            "fouls": self.fouls,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PlayerGameStat":
        """
        Create from dictionary, validating the payload.

        Derived scoring fields are recomputed from ``points_log`` rather than
        trusted, so a record with an inconsistent total is repaired on load.

        Raises:
            ValueError: If ids are missing, a point event is not 1, 2 or 3,
                        or a counting stat is negative
        """
        for key in ("player_id", "game_id", "team_id"):
            if not data.get(key):
                raise ValueError(f"Stat record is missing {key}")

        raw_log = data.get("points_log") or []
        points_log: List[int] = []
        for raw in raw_log:
            value = int(raw)
            if value not in POINT_VALUES:
                raise ValueError(f"Invalid point value in log: {raw!r}")
            points_log.append(value)

        counters: Dict[str, int] = {}
        for name in COUNTER_STATS:
            value = int(data.get(name) or 0)
            if value < 0:
                raise ValueError(f"Counting stat {name} cannot be negative")
            counters[name] = value

        stat = cls(
            player_id=str(data["player_id"]),
            game_id=str(data["game_id"]),
            team_id=str(data["team_id"]),
            points_log=points_log,
            **counters,
        )
        stat.recompute()
        return stat


@dataclass
class TeamGameStat:
    """Totals for one team in one game, derived from its players' ledgers."""
    team_id: str
    game_id: str
    points: int = 0
    twos_made: int = 0
    threes_made: int = 0
    free_throws_made: int = 0
    rebounds: int = 0
    assists: int = 0
    blocks: int = 0
    steals: int = 0
    fouls: int = 0

    def add(self, stat: PlayerGameStat) -> None:
        for name in TEAM_TOTAL_FIELDS:
            setattr(self, name, getattr(self, name) + getattr(stat, name))

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TeamGameStat":
        totals = {name: int(data.get(name) or 0) for name in TEAM_TOTAL_FIELDS}
        return cls(team_id=str(data["team_id"]), game_id=str(data["game_id"]), **totals)
