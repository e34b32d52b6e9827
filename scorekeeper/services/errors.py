"""Exceptions raised by the scoring services."""
from typing import Optional


class ScoringError(Exception):
    """Base class for rejected scoring operations."""
    pass


class NoActivePlayerError(ScoringError):
    """A stat mutation was attempted with no player selected."""
    pass


class InvalidPlayerError(ScoringError):
    """The player is not on the home or away roster of the current game."""
    pass


class InvalidTeamError(ScoringError):
    """The team is neither the home nor the away side of the current game."""
    pass


class InvalidStatError(ScoringError):
    """Unknown counting stat, point value or half."""
    pass


class InvalidTransitionError(ScoringError):
    """The requested session transition is not allowed from the current state."""
    pass


class SyncFailure(Exception):
    """A league service call failed or was rejected."""

    def __init__(self, message: str, operation: str = "", status_code: Optional[int] = None):
        super().__init__(message)
        self.operation = operation
        self.status_code = status_code
