"""
Persistence service for the league scorekeeper.

Writes device-local JSON snapshots of a scoring session so a crashed or
closed browser tab can resume. Snapshots include timeouts, which are never
sent to the league service.
"""
import json
import os
from typing import List, Optional, Tuple

from ..models import GameSession
from ..utils import get_logger, now_ts, timestamp_slug

logger = get_logger(__name__)


class PersistenceService:
    """Service for persisting game sessions to JSON files."""

    @staticmethod
    def save_session(session: GameSession, file_path: str) -> None:
        """
        Save a session to a JSON file.

        Args:
            session: The session to save
            file_path: Path where to save the file

        Raises:
            OSError: If the file cannot be written
        """
        directory = os.path.dirname(file_path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        with open(file_path, "w", encoding="utf-8") as f:
            json.dump(session.to_json(), f, indent=2)

    @staticmethod
    def load_session(file_path: str) -> GameSession:
        """
        Load a session from a JSON file.

        Raises:
            FileNotFoundError: If file doesn't exist
            json.JSONDecodeError: If file contains invalid JSON
            ValueError: If a roster entry or ledger is malformed
        """
        if not os.path.exists(file_path):
            raise FileNotFoundError(f"Session file not found: {file_path}")

        with open(file_path, "r", encoding="utf-8") as f:
            data = json.load(f)

        try:
            return GameSession.from_json(data)
        except KeyError as exc:
            raise ValueError(f"Session file is missing {exc.args[0]!r}") from exc

    @staticmethod
    def auto_save(session: GameSession, auto_save_dir: str = "autosave",
                  keep: Optional[int] = None) -> Optional[str]:
        """
        Save a session under a timestamped file name.

        Args:
            session: The session to save
            auto_save_dir: Directory for snapshot files
            keep: Number of this game's snapshots to retain; older ones are
                deleted. None keeps all of them.

        Returns:
            Path to saved file, or None if save failed
        """
        filename = f"game_{session.game_id}_{timestamp_slug(now_ts())}.json"
        file_path = os.path.join(auto_save_dir, filename)
        try:
            PersistenceService.save_session(session, file_path)
        except OSError as exc:
            logger.warning("Auto-save to %s failed: %s", file_path, exc)
            return None

        if keep is not None:
            PersistenceService._prune(auto_save_dir, f"game_{session.game_id}_", keep)
        return file_path

    @staticmethod
    def _prune(save_dir: str, prefix: str, keep: int) -> None:
        # Timestamp slugs sort chronologically by name
        slug_length = len(timestamp_slug(0))
        names = sorted(
            (n for n in os.listdir(save_dir)
             if n.startswith(prefix) and n.endswith(".json")
             and len(n) - len(prefix) - len(".json") == slug_length),
            reverse=True,
        )
        for name in names[max(1, keep):]:
            try:
                os.remove(os.path.join(save_dir, name))
            except OSError as exc:
                logger.warning("Could not remove old snapshot %s: %s", name, exc)

    @staticmethod
    def get_recent_saves(save_dir: str = "autosave", limit: int = 10) -> List[Tuple[str, float]]:
        """
        List recent snapshot files.

        Returns:
            (filename, modification_time) tuples, newest first
        """
        if not os.path.isdir(save_dir):
            return []

        try:
            saves = [
                (name, os.path.getmtime(os.path.join(save_dir, name)))
                for name in os.listdir(save_dir)
                if name.endswith(".json") and os.path.isfile(os.path.join(save_dir, name))
            ]
        except OSError:
            return []

        saves.sort(key=lambda x: x[1], reverse=True)
        return saves[:limit]
