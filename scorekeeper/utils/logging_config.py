"""
Logging setup for the league scorekeeper.

Provides a JSON formatter for structured output, a plain console formatter,
and a context variable carrying the id of the game being scored so every
record emitted while handling a game can be traced back to it.
"""
import json
import logging
import sys
from contextvars import ContextVar
from datetime import datetime
from typing import Any, Dict, Optional

game_id_var: ContextVar[str] = ContextVar("game_id", default="")

_STANDARD_ATTRS = {
    "name", "msg", "args", "levelname", "levelno", "pathname", "filename",
    "module", "exc_info", "exc_text", "stack_info", "lineno", "funcName",
    "created", "msecs", "relativeCreated", "thread", "threadName",
    "processName", "process", "message", "asctime", "taskName",
}


class JSONFormatter(logging.Formatter):
    """Render each record as a single JSON object."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "game_id": game_id_var.get(),
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        extra = {k: v for k, v in record.__dict__.items() if k not in _STANDARD_ATTRS}
        if extra:
            log_data["extra"] = extra

        return json.dumps(log_data, default=str)


class ConsoleFormatter(logging.Formatter):
    """Human readable single-line formatter."""

    def format(self, record: logging.LogRecord) -> str:
        message = f"[{record.levelname}] {record.name}: {record.getMessage()}"
        game_id = game_id_var.get()
        if game_id:
            message += f" | game_id={game_id}"
        if record.exc_info:
            message += "\n" + self.formatException(record.exc_info)
        return message


def configure_logging(
    level: str = "INFO",
    json_output: bool = False,
    handler: Optional[logging.Handler] = None,
) -> None:
    """
    Configure application logging.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: Use the JSON formatter instead of the console formatter
        handler: Optional custom handler, defaults to a stdout stream handler
    """
    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    log_level = getattr(logging, level.upper(), logging.INFO)
    root_logger.setLevel(log_level)

    if handler is None:
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(log_level)

    handler.setFormatter(JSONFormatter() if json_output else ConsoleFormatter())
    root_logger.addHandler(handler)

    # Quiet chatty third-party loggers
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("werkzeug").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Return a logger for the given module name."""
    return logging.getLogger(name)


def set_game_id(game_id: str) -> Any:
    """Bind a game id to the current context; returns a reset token."""
    return game_id_var.set(game_id)
