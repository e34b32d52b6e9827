"""
Utilities package for the league scorekeeper.

This package contains constants, time helpers, logging and settings.
"""
from .time_utils import now_ts, timestamp_slug
from .constants import (
    APP_TITLE, POINT_VALUES, COUNTER_STATS, TEAM_TOTAL_FIELDS,
    TIMEOUTS_PER_HALF, HALVES, FORFEIT_WINNING_SCORE, FORFEIT_LOSING_SCORE,
)
from .logging_config import configure_logging, get_logger, set_game_id

__all__ = [
    "now_ts", "timestamp_slug", "APP_TITLE", "POINT_VALUES", "COUNTER_STATS",
    "TEAM_TOTAL_FIELDS", "TIMEOUTS_PER_HALF", "HALVES",
    "FORFEIT_WINNING_SCORE", "FORFEIT_LOSING_SCORE",
    "configure_logging", "get_logger", "set_game_id",
]
