"""
Failure policy for league service calls.

Every gateway call made by the scoring services goes through SyncAdapter.call,
which turns the outcome into a SyncResult. A failed call is logged, recorded
as a notification for the presentation layer, and passed to any registered
listeners. Failed calls are never retried and local state is left as is.
"""
import threading
from dataclasses import dataclass
from typing import Any, Callable, Generic, List, Optional, TypeVar

from ..utils import get_logger, now_ts
from .errors import SyncFailure
from .league_gateway import LeagueGateway

logger = get_logger("scorekeeper.sync")

T = TypeVar("T")


@dataclass
class SyncResult(Generic[T]):
    """Outcome of one league service call."""
    ok: bool
    value: Optional[T] = None
    error: Optional[SyncFailure] = None


@dataclass
class SyncNotice:
    """Transient failure notice shown to the operator."""
    timestamp: float
    operation: str
    message: str

    def to_dict(self) -> dict:
        return {"timestamp": self.timestamp, "operation": self.operation, "message": self.message}


FailureListener = Callable[[SyncNotice], None]


class SyncAdapter:
    """Wraps a LeagueGateway with the log-and-notify failure policy."""

    def __init__(self, gateway: LeagueGateway, max_notices: int = 100):
        self.gateway = gateway
        self.max_notices = max_notices
        self._notices: List[SyncNotice] = []
        self._listeners: List[FailureListener] = []
        self._lock = threading.Lock()

    def add_listener(self, listener: FailureListener) -> None:
        self._listeners.append(listener)

    def call(self, operation: str, *args: Any, **kwargs: Any) -> SyncResult:
        """Invoke ``gateway.<operation>(*args, **kwargs)`` under the failure policy."""
        method = getattr(self.gateway, operation)
        try:
            value = method(*args, **kwargs)
        except SyncFailure as exc:
            if not exc.operation:
                exc.operation = operation
            self.report(exc)
            return SyncResult(ok=False, error=exc)
        return SyncResult(ok=True, value=value)

    def drain_notices(self) -> List[SyncNotice]:
        """Return and clear pending failure notices."""
        with self._lock:
            notices, self._notices = self._notices, []
        return notices

    @property
    def notices(self) -> List[SyncNotice]:
        with self._lock:
            return list(self._notices)

    def report(self, exc: SyncFailure) -> None:
        """Log a failure and record it as a notice."""
        logger.warning(
            "League service call %s failed: %s", exc.operation, exc,
            extra={"operation": exc.operation, "status_code": exc.status_code},
        )
        notice = SyncNotice(timestamp=now_ts(), operation=exc.operation, message=str(exc))
        with self._lock:
            self._notices.append(notice)
            if len(self._notices) > self.max_notices:
                self._notices.pop(0)
        for listener in self._listeners:
            listener(notice)
