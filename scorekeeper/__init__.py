"""
League Scorekeeper

Live game scoring for a recreational basketball league: per-player stat
ledgers, team totals, timeouts and the Setup / Live / Summary workflow,
synchronized with the hosted league service.

This package provides a Flask JSON interface for the scorer's browser.
"""
from .models import GameSession, PlayerGameStat, TeamGameStat, SessionState
from .services import GameSessionService, ServiceFactory, CommandDispatcher
from .ui import create_app, run_web_app
from .utils import APP_TITLE, configure_logging, get_logger

__version__ = "1.0.0"
__author__ = "League Scorekeeper Development Team"

__all__ = [
    "GameSession", "PlayerGameStat", "TeamGameStat", "SessionState",
    "GameSessionService", "ServiceFactory", "CommandDispatcher",
    "create_app", "run_web_app", "APP_TITLE", "configure_logging", "get_logger",
]
