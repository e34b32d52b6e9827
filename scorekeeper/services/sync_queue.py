"""
Per-key serial job queue for league service round trips.

Jobs submitted under the same key run one at a time in submission order, so a
recompute-then-sync cycle for one player can never interleave with another
for the same player. Different keys may run concurrently on the pool.
"""
import contextvars
import threading
from collections import deque
from concurrent.futures import Future, ThreadPoolExecutor, wait
from functools import partial
from typing import Any, Callable, Deque, Dict, List, Optional, Set, Tuple

from ..utils import get_logger

logger = get_logger(__name__)

Job = Callable[[], Any]


class SerialSyncQueue:
    """
    FIFO executor keyed by resource.

    With ``inline=True`` every job runs on the caller's thread and the
    returned future is already resolved. Callers on different threads (the
    threaded Flask server) still take turns per key.
    """

    def __init__(self, inline: bool = True, max_workers: int = 4):
        self.inline = inline
        self._executor: Optional[ThreadPoolExecutor] = None
        if not inline:
            self._executor = ThreadPoolExecutor(
                max_workers=max(1, max_workers), thread_name_prefix="scorekeeper-sync"
            )
        self._lock = threading.Lock()
        self._pending: Dict[str, Deque[Tuple[Job, Future]]] = {}
        self._active: Set[str] = set()
        self._outstanding: Set[Future] = set()
        self._inline_locks: Dict[str, threading.Lock] = {}

    def submit(self, key: str, job: Job) -> Future:
        """Queue ``job`` behind any earlier job with the same key."""
        future: Future = Future()

        if self.inline:
            with self._inline_lock(key):
                future.set_running_or_notify_cancel()
                self._run(job, future)
            return future

        # Log records from the worker keep the submitter's game id
        job = partial(contextvars.copy_context().run, job)
        with self._lock:
            self._pending.setdefault(key, deque()).append((job, future))
            self._outstanding.add(future)
            if key in self._active:
                return future
            self._active.add(key)

        self._executor.submit(self._drain, key)
        return future

    def pending(self) -> List[Future]:
        """Futures of every job not yet finished."""
        with self._lock:
            return [f for f in self._outstanding if not f.done()]

    def flush(self, timeout: Optional[float] = None) -> None:
        """Block until every job queued so far has finished."""
        wait(self.pending(), timeout=timeout)

    def shutdown(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True)

    def _inline_lock(self, key: str) -> threading.Lock:
        with self._lock:
            return self._inline_locks.setdefault(key, threading.Lock())

    def _drain(self, key: str) -> None:
        while True:
            with self._lock:
                queue = self._pending.get(key)
                if not queue:
                    self._pending.pop(key, None)
                    self._active.discard(key)
                    return
                job, future = queue.popleft()

            if future.set_running_or_notify_cancel():
                self._run(job, future)

            with self._lock:
                self._outstanding.discard(future)

    @staticmethod
    def _run(job: Job, future: Future) -> None:
        try:
            future.set_result(job())
        except Exception as exc:
            logger.exception("Sync job failed")
            future.set_exception(exc)
