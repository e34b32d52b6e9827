"""Timeout tracking for the league scorekeeper."""

from typing import Dict

from ..models import GameSession, TeamTimeouts
from ..utils import HALVES, TIMEOUTS_PER_HALF, get_logger
from .errors import InvalidStatError, InvalidTeamError

logger = get_logger(__name__)

# Accept the camelCase half names used by the league front end
_HALF_ALIASES = {
    "first_half": "first_half",
    "firstHalf": "first_half",
    "second_half": "second_half",
    "secondHalf": "second_half",
}


def normalize_half(half: str) -> str:
    try:
        return _HALF_ALIASES[half]
    except KeyError:
        raise InvalidStatError(f"Unknown half: {half!r}") from None


class TimeoutTracker:
    """
    Per-team, per-half countdown of remaining timeouts.

    State is local to the scoring device and is never sent to the league
    service.
    """

    def __init__(self, session: GameSession):
        self.session = session

    # ------------------------------------------------------------------
    # Controls
    # ------------------------------------------------------------------
    def take_timeout(self, team_id: str, half: str) -> bool:
        """
        Use one timeout for ``team_id`` in ``half``.

        Returns:
            True if a timeout was taken, False if none were left (no-op)
        """
        timeouts = self._team(team_id)
        key = normalize_half(half)

        remaining = getattr(timeouts, key)
        if remaining <= 0:
            logger.debug("Team %s has no %s timeouts left", team_id, key)
            return False

        setattr(timeouts, key, remaining - 1)
        logger.info("Timeout %s for %s, %d left", key, team_id, remaining - 1)
        return True

    def reset(self) -> None:
        """Restore the full allowance for both teams."""
        for team_id in self.session.team_ids:
            self.session.team_timeouts[team_id] = TeamTimeouts()

    # ------------------------------------------------------------------
    # Query helpers
    # ------------------------------------------------------------------
    def remaining(self, team_id: str, half: str) -> int:
        return getattr(self._team(team_id), normalize_half(half))

    def can_take(self, team_id: str, half: str) -> bool:
        return self.remaining(team_id, half) > 0

    def get_timeout_summary(self) -> Dict[str, Dict[str, int]]:
        return {
            team_id: {half: getattr(self._team(team_id), half) for half in HALVES}
            for team_id in self.session.team_ids
        }

    def _team(self, team_id: str) -> TeamTimeouts:
        if not self.session.is_team(team_id):
            raise InvalidTeamError(f"Team {team_id!r} is not playing in this game")
        return self.session.team_timeouts.setdefault(
            team_id, TeamTimeouts(TIMEOUTS_PER_HALF, TIMEOUTS_PER_HALF)
        )
