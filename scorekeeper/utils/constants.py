"""
Constants for the league scorekeeper.

This module contains configuration constants used throughout the application.
"""

# Application metadata
APP_TITLE = "League Scorekeeper"

# Point values a single scoring event may carry (free throw, two, three)
POINT_VALUES = (1, 2, 3)

# Counting statistics tracked per player per game
COUNTER_STATS = ("rebounds", "assists", "blocks", "steals", "fouls")

# Every numeric field summed into a team total
TEAM_TOTAL_FIELDS = (
    "points",
    "twos_made",
    "threes_made",
    "free_throws_made",
    "rebounds",
    "assists",
    "blocks",
    "steals",
    "fouls",
)

# Stats that count towards the automatic player-of-the-game pick
PLAYER_OF_GAME_FIELDS = ("points", "rebounds", "assists", "steals", "blocks")

# Timeouts
TIMEOUTS_PER_HALF = 2
HALVES = ("first_half", "second_half")

# Walkover scoring (winner gets 20-0)
FORFEIT_WINNING_SCORE = 20
FORFEIT_LOSING_SCORE = 0

# Command history kept by the dispatcher
MAX_COMMAND_HISTORY = 50

# Remote league service paths (relative to the configured base URL)
API_GAME_PATH = "/api/v1/scorekeeper/{game_id}"
API_PLAYER_STATS_PATH = "/api/v1/scorekeeper/{game_id}/player-stats"
API_TEAM_STATS_PATH = "/api/v1/scorekeeper/{game_id}/team-stats"
API_FINISH_PATH = "/api/v1/scorekeeper/{game_id}/finish"
API_FINISH_DEFAULT_PATH = "/api/v1/scorekeeper/{game_id}/finish-default"
API_PLAYER_OF_GAME_PATH = "/api/v1/scorekeeper/{game_id}/player-of-game"
