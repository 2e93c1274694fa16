import logging
import queue
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Optional

from stitch_config import BACKGROUND_WORKER_PREFIX

logger = logging.getLogger(__name__)


class BackgroundExecutor:
    """Single background worker; tasks run one at a time in submit order."""

    def __init__(self, name: str = BACKGROUND_WORKER_PREFIX):
        self.name = name
        self._pool: Optional[ThreadPoolExecutor] = ThreadPoolExecutor(max_workers=1, thread_name_prefix=name)

    def submit(self, task: Callable, *args, **kwargs) -> Future:
        if self._pool is None:
            raise RuntimeError(f"Executor {self.name} has been shut down")
        future = self._pool.submit(task, *args, **kwargs)
        future.add_done_callback(self._log_failure)
        return future

    def _log_failure(self, future: Future) -> None:
        if future.cancelled():
            return
        error = future.exception()
        if error is not None:
            logger.error("Background task on %s failed: %s", self.name, error, exc_info=error)

    def shutdown(self, wait: bool = True) -> None:
        if self._pool is not None:
            self._pool.shutdown(wait=wait)
            self._pool = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.shutdown()


class CallQueue:
    """
    Calls posted from any thread, run later by whichever thread drains them.

    Used to hand state updates from the background worker to the
    interactive thread.
    """

    def __init__(self):
        self._calls: "queue.SimpleQueue[Callable[[], None]]" = queue.SimpleQueue()

    def post(self, call: Callable[[], None]) -> None:
        self._calls.put(call)

    def drain(self) -> int:
        """Run every queued call in posting order; returns how many ran."""
        count = 0
        while True:
            try:
                call = self._calls.get_nowait()
            except queue.Empty:
                return count
            try:
                call()
            except Exception:
                logger.exception("Queued call %r failed", call)
            count += 1
