"""Active-player selection and game roster membership."""

from typing import Optional

from ..models import GameSession, Player, PlayerGameStat
from ..utils import get_logger
from .errors import InvalidPlayerError, InvalidTeamError

logger = get_logger(__name__)


class RosterController:
    """
    Tracks which player is receiving stat input and which side each player is on.

    Selection and check-in never touch existing ledgers.
    """

    def __init__(self, session: GameSession):
        self.session = session

    def require_player(self, player_id: Optional[str]) -> Player:
        """
        Look up a rostered player.

        Raises:
            InvalidPlayerError: If the player is on neither roster of the game
        """
        player = self.session.roster.get(player_id) if player_id else None
        if player is None or not self.session.is_team(player.team_id):
            raise InvalidPlayerError(f"Player {player_id!r} is not on either roster for this game")
        return player

    def team_of(self, player_id: str) -> str:
        return self.require_player(player_id).team_id

    def is_home(self, player_id: str) -> bool:
        return self.team_of(player_id) == self.session.home_team_id

    def set_active_player(self, player_id: str) -> Player:
        """
        Select the player receiving stat input.

        Returns:
            The selected Player, so callers can read its team affiliation
        """
        player = self.require_player(player_id)
        self.session.active_player_id = player.player_id
        logger.debug("Active player set to %s (%s)", player.player_id, player.team_id)
        return player

    def clear_active_player(self) -> None:
        self.session.active_player_id = None

    def check_in_player(
        self,
        player_id: str,
        team_id: str,
        name: str = "",
        jersey_number: Optional[int] = None,
    ) -> PlayerGameStat:
        """
        Make sure a player has a ledger for this game.

        A player not yet on the roster is added to ``team_id`` (late roster
        addition). An existing ledger is returned untouched.

        Raises:
            InvalidTeamError: If ``team_id`` is neither side of the game
            InvalidPlayerError: If the player is rostered to the other side
        """
        if not self.session.is_team(team_id):
            raise InvalidTeamError(f"Team {team_id!r} is not playing in this game")

        player = self.session.roster.get(player_id)
        if player is None:
            player = Player(player_id=player_id, name=name, team_id=team_id, jersey_number=jersey_number)
            self.session.roster[player_id] = player
            logger.info("Late roster addition: %s joins %s", player_id, team_id)
        elif player.team_id != team_id:
            raise InvalidPlayerError(f"Player {player_id!r} is rostered to team {player.team_id!r}")

        return self.ensure_ledger(player)

    def ensure_ledger(self, player: Player) -> PlayerGameStat:
        return self.session.ledgers.setdefault(
            player.player_id,
            PlayerGameStat(
                player_id=player.player_id,
                game_id=self.session.game_id,
                team_id=player.team_id,
            ),
        )
