"""
Utility functions for the league scorekeeper.

This module contains common time helpers used throughout the application.
"""
import time
from datetime import datetime


def now_ts() -> float:
    """
    Get current timestamp in epoch seconds.
    
    Returns:
        Current time as floating point epoch seconds
    """
    return time.time()


def timestamp_slug(ts: float) -> str:
    """
    Format an epoch timestamp for use in file names.

    Example:
        >>> timestamp_slug(0)  # doctest: +SKIP
        '19700101_000000'
    """
    return datetime.fromtimestamp(ts).strftime("%Y%m%d_%H%M%S")
