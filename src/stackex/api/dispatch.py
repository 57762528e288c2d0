"""Background dispatch of API calls.

Asynchronous calls run the same synchronous pipeline on a worker thread
and report through a completion callback invoked exactly once with either
``(response, None)`` or ``(None, error)``.
"""

import logging
import threading
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, TypeVar

from stackex.core.constants import DEFAULT_DISPATCH_WORKERS

logger = logging.getLogger(__name__)

T = TypeVar("T")

Completion = Callable[[T | None, Exception | None], None]


class Dispatcher:
    """Thread pool that completes each scheduled call through its callback.

    Args:
        max_workers: Worker threads (default: 4)
        thread_name_prefix: Prefix for worker thread names
    """

    def __init__(self, max_workers: int = DEFAULT_DISPATCH_WORKERS, thread_name_prefix: str = "stackex-dispatch"):
        self.max_workers = max_workers
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix=thread_name_prefix)
        self._lock = threading.Lock()
        self._pending = 0
        self._idle = threading.Condition(self._lock)
        self._closed = False

        # Statistics
        self._total_submitted = 0
        self._total_succeeded = 0
        self._total_failed = 0

    def submit(self, call: Callable[[], T], callback: Completion[T]) -> Future:
        """
        Schedule ``call`` and return immediately.

        Args:
            call: Zero-argument function performing the synchronous pipeline
            callback: Receives ``(result, None)`` or ``(None, error)`` exactly once

        Returns:
            Future that resolves after the callback has run

        Raises:
            RuntimeError: If the dispatcher has been shut down
        """
        with self._lock:
            if self._closed:
                raise RuntimeError("Dispatcher has been shut down")
            # _run cannot decrement _pending until this lock is released
            future = self._executor.submit(self._run, call, callback)
            self._pending += 1
            self._total_submitted += 1
        return future

    def submit_error(self, error: Exception, callback: Completion[Any]) -> Future:
        """Deliver ``error`` through ``callback`` on a worker, as a failed call would."""

        def fail() -> Any:
            raise error

        return self.submit(fail, callback)

    def _run(self, call: Callable[[], T], callback: Completion[T]) -> None:
        try:
            try:
                result = call()
            except Exception as e:
                self._count(succeeded=False)
                self._complete(callback, None, e)
            else:
                self._count(succeeded=True)
                self._complete(callback, result, None)
        finally:
            with self._lock:
                self._pending -= 1
                if self._pending == 0:
                    self._idle.notify_all()

    def _count(self, succeeded: bool) -> None:
        with self._lock:
            if succeeded:
                self._total_succeeded += 1
            else:
                self._total_failed += 1

    @staticmethod
    def _complete(callback: Completion[Any], result: Any, error: Exception | None) -> None:
        try:
            callback(result, error)
        except Exception:
            logger.exception("Completion callback raised")

    def drain(self, timeout: float | None = None) -> bool:
        """
        Block until every scheduled call has completed its callback.

        Returns:
            True if the queue drained, False if ``timeout`` elapsed first
        """
        with self._idle:
            return self._idle.wait_for(lambda: self._pending == 0, timeout=timeout)

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting calls; already scheduled calls still run their callbacks."""
        with self._lock:
            self._closed = True
        self._executor.shutdown(wait=wait, cancel_futures=False)
        logger.debug("Dispatcher shut down")

    @property
    def closed(self) -> bool:
        with self._lock:
            return self._closed

    def get_statistics(self) -> dict[str, int]:
        """
        Get dispatch statistics.

        Returns:
            Dict with pending and lifetime counts
        """
        with self._lock:
            return {
                "pending": self._pending,
                "total_submitted": self._total_submitted,
                "total_succeeded": self._total_succeeded,
                "total_failed": self._total_failed,
            }
