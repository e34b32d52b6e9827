"""
Runtime configuration for the league scorekeeper.

Values are read from the environment (prefix ``SCOREKEEPER_``) and from an
optional ``.env`` file in the project root.
"""
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

PROJECT_ROOT = Path(__file__).parent.parent.parent


class Settings(BaseSettings):
    """Scorekeeper settings with environment overrides."""

    model_config = SettingsConfigDict(
        env_prefix="SCOREKEEPER_",
        env_file=str(PROJECT_ROOT / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Remote league service
    API_URL: str = "http://127.0.0.1:3000"
    API_TOKEN: Optional[str] = None
    HTTP_TIMEOUT: float = 10.0

    # Sync queue
    SYNC_INLINE: bool = True
    SYNC_WORKERS: int = 4

    # Web server
    HOST: str = "127.0.0.1"
    PORT: int = 8123

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    # Local snapshots
    AUTOSAVE: bool = False
    AUTOSAVE_DIR: str = "autosave"
    AUTOSAVE_KEEP: int = 5


@lru_cache()
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings()
