"""
Models package for the league scorekeeper.

This package contains the core data models used throughout the application.
"""
from .player_stat import PlayerGameStat, TeamGameStat
from .game_session import GameSession, SessionState, Player, TeamTimeouts
from .game_report import FinalizeResult, GameSummary, PlayerLine

__all__ = [
    "PlayerGameStat", "TeamGameStat", "GameSession", "SessionState",
    "Player", "TeamTimeouts", "FinalizeResult", "GameSummary", "PlayerLine",
]
