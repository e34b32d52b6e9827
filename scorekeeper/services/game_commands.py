"""
Command pattern implementation for scoring actions.

Each operator action is a small typed command applied to a
GameSessionService. The CommandDispatcher is the single entry point the
presentation layer uses to change the session, and it keeps a bounded
history of what was applied.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from ..utils import get_logger, now_ts
from ..utils.constants import MAX_COMMAND_HISTORY
from .game_session_service import GameSessionService

logger = get_logger(__name__)


class Command(ABC):
    """Abstract base class for all scoring commands."""

    @abstractmethod
    def execute(self, service: GameSessionService) -> Any:
        """
        Apply the command to a session.

        Returns:
            Whatever the underlying service operation returns

        Raises:
            ScoringError: If the command is rejected by validation
        """

    @property
    @abstractmethod
    def description(self) -> str:
        """Get human-readable description of the command."""


@dataclass
class RecordPoint(Command):
    value: int
    player_id: Optional[str] = None

    def execute(self, service):
        return service.record_point(self.value, self.player_id)

    @property
    def description(self) -> str:
        return f"Record {self.value} point(s)" + _for(self.player_id)


@dataclass
class UndoLastPoint(Command):
    player_id: Optional[str] = None

    def execute(self, service):
        return service.undo_last_point(self.player_id)

    @property
    def description(self) -> str:
        return "Undo last point" + _for(self.player_id)


@dataclass
class IncrementStat(Command):
    stat: str
    player_id: Optional[str] = None

    def execute(self, service):
        return service.increment_counter_stat(self.stat, self.player_id)

    @property
    def description(self) -> str:
        return f"{self.stat} +1" + _for(self.player_id)


@dataclass
class DecrementStat(Command):
    stat: str
    player_id: Optional[str] = None

    def execute(self, service):
        return service.decrement_counter_stat(self.stat, self.player_id)

    @property
    def description(self) -> str:
        return f"{self.stat} -1" + _for(self.player_id)


@dataclass
class SelectPlayer(Command):
    player_id: str

    def execute(self, service):
        return service.set_active_player(self.player_id)

    @property
    def description(self) -> str:
        return f"Select player {self.player_id}"


@dataclass
class CheckInPlayer(Command):
    player_id: str
    team_id: str
    name: str = ""
    jersey_number: Optional[int] = None

    def execute(self, service):
        return service.check_in_player(self.player_id, self.team_id, self.name, self.jersey_number)

    @property
    def description(self) -> str:
        return f"Check in {self.player_id} for {self.team_id}"


@dataclass
class TakeTimeout(Command):
    team_id: str
    half: str

    def execute(self, service):
        return service.take_timeout(self.team_id, self.half)

    @property
    def description(self) -> str:
        return f"Timeout {self.team_id} ({self.half})"


class StartScoring(Command):
    def execute(self, service):
        return service.start_scoring()

    @property
    def description(self) -> str:
        return "Start scoring"


class BackToSelection(Command):
    def execute(self, service):
        return service.back_to_selection()

    @property
    def description(self) -> str:
        return "Back to player selection"


class FinishGame(Command):
    def execute(self, service):
        return service.finish_game()

    @property
    def description(self) -> str:
        return "Finish game"


@dataclass
class FinishDefaultGame(Command):
    winner_team_id: str

    def execute(self, service):
        return service.finish_default_game(self.winner_team_id)

    @property
    def description(self) -> str:
        return f"Walkover for {self.winner_team_id}"


class BackToScoring(Command):
    def execute(self, service):
        return service.back_to_scoring()

    @property
    def description(self) -> str:
        return "Back to scoring"


@dataclass
class SetPlayerOfGame(Command):
    player_id: str

    def execute(self, service):
        return service.set_player_of_game(self.player_id)

    @property
    def description(self) -> str:
        return f"Player of the game: {self.player_id}"


def _for(player_id: Optional[str]) -> str:
    return f" for {player_id}" if player_id else ""


class CommandDispatcher:
    """
    Applies commands to one session and tracks what was applied.

    Rejected commands propagate their ScoringError and are not recorded.
    """

    def __init__(self, service: GameSessionService, max_history: int = MAX_COMMAND_HISTORY):
        """
        Initialize command dispatcher.

        Args:
            service: Session the commands act on
            max_history: Maximum number of commands to keep in history
        """
        self.service = service
        self.max_history = max_history
        self._history: List[Dict[str, Any]] = []

    def dispatch(self, command: Command) -> Any:
        result = command.execute(self.service)

        self._history.append({"timestamp": now_ts(), "description": command.description})
        if len(self._history) > self.max_history:
            self._history.pop(0)

        logger.debug("Applied command: %s", command.description)
        return result

    def get_command_history(self) -> List[Dict[str, Any]]:
        """Get history of applied commands, oldest first."""
        return list(self._history)

    def clear_history(self) -> None:
        self._history.clear()
