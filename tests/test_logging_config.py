"""Tests for logging setup."""

import io
import json
import logging

import pytest

from scorekeeper.utils import configure_logging, get_logger, set_game_id
from scorekeeper.utils.logging_config import game_id_var


@pytest.fixture
def stream():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield io.StringIO()
    root.handlers[:] = handlers
    root.setLevel(level)


def test_json_output_carries_game_id_and_extra(stream):
    configure_logging("DEBUG", json_output=True, handler=logging.StreamHandler(stream))
    token = set_game_id("g1")
    try:
        get_logger("scorekeeper.sync").warning(
            "League service call failed", extra={"operation": "finalize_game", "status_code": 503}
        )
    finally:
        game_id_var.reset(token)

    record = json.loads(stream.getvalue().strip())
    assert record["level"] == "WARNING"
    assert record["logger"] == "scorekeeper.sync"
    assert record["game_id"] == "g1"
    assert record["extra"] == {"operation": "finalize_game", "status_code": 503}


def test_console_output_respects_level(stream):
    configure_logging("WARNING", handler=logging.StreamHandler(stream))

    logger = get_logger("scorekeeper.services.stat_ledger")
    logger.info("hidden")
    logger.warning("shown")

    output = stream.getvalue()
    assert "hidden" not in output
    assert "[WARNING] scorekeeper.services.stat_ledger: shown" in output
