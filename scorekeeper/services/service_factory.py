"""
Service Factory for wiring the scorekeeper's services.

Builds the league gateway from settings and hands every session the shared
sync adapter and queue.
"""
from typing import Optional

from ..utils.settings import Settings, get_settings
from .game_session_service import GameSessionService
from .http_gateway import HttpLeagueGateway
from .league_gateway import LeagueGateway
from .memory_gateway import InMemoryLeagueGateway
from .persistence_service import PersistenceService
from .sync_adapter import SyncAdapter
from .sync_queue import SerialSyncQueue


class ServiceFactory:
    """
    Factory for creating session services with their collaborators injected.

    The gateway, adapter, queue and persistence service are created once and
    shared by every session the factory opens.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        gateway: Optional[LeagueGateway] = None,
        offline: bool = False,
    ):
        """
        Initialize factory.

        Args:
            settings: Runtime settings; the process-wide settings by default
            gateway: Gateway to use instead of building one from settings
            offline: Use an in-memory league service instead of HTTP
        """
        self.settings = settings or get_settings()
        self.offline = offline
        self._gateway = gateway
        self._adapter: Optional[SyncAdapter] = None
        self._queue: Optional[SerialSyncQueue] = None
        self._persistence_service: Optional[PersistenceService] = None

    def create_session_service(self, game_id: str) -> GameSessionService:
        """
        Load a game and return the service driving its session.

        Raises:
            SyncFailure: If the game could not be fetched
        """
        return GameSessionService.load(game_id, self.get_adapter(), self.get_queue())

    def get_gateway(self) -> LeagueGateway:
        if self._gateway is None:
            if self.offline:
                self._gateway = InMemoryLeagueGateway()
            else:
                self._gateway = HttpLeagueGateway(
                    self.settings.API_URL,
                    token=self.settings.API_TOKEN,
                    timeout=self.settings.HTTP_TIMEOUT,
                )
        return self._gateway

    def get_adapter(self) -> SyncAdapter:
        """Get singleton sync adapter."""
        if self._adapter is None:
            self._adapter = SyncAdapter(self.get_gateway())
        return self._adapter

    def get_queue(self) -> SerialSyncQueue:
        """Get singleton sync queue."""
        if self._queue is None:
            self._queue = SerialSyncQueue(
                inline=self.settings.SYNC_INLINE,
                max_workers=self.settings.SYNC_WORKERS,
            )
        return self._queue

    def get_persistence_service(self) -> PersistenceService:
        if self._persistence_service is None:
            self._persistence_service = PersistenceService()
        return self._persistence_service

    def shutdown(self) -> None:
        if self._queue is not None:
            self._queue.shutdown()
