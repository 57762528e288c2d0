"""API client for stackex."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Mapping
from concurrent.futures import Future
from typing import Any, TypeVar

from stackex.api.dispatch import Completion, Dispatcher
from stackex.api.executor import RequestExecutor
from stackex.api.ledger import BackoffLedger, QuotaState
from stackex.api.transport import HTTPExecutor, RequestsExecutor, SleepWaiter, Waiter
from stackex.codec.envelope import APIResponse
from stackex.core.config import BackoffBehavior, ClientConfig, DispatchConfig
from stackex.endpoints import QuestionsMixin, SitesMixin, UsersMixin

logger = logging.getLogger(__name__)

T = TypeVar("T")


class APIClient(QuestionsMixin, SitesMixin, UsersMixin):
    """Client for the Stack Exchange API.

    The client owns the backoff ledger and quota state for its lifetime.
    Every call is available synchronously (returns or raises) and
    asynchronously (queued, completes through a callback).

    Args:
        config: Default site/filter/key and connection settings
        dispatch_config: Background queue and backoff wait settings
        http_executor: HTTP seam (default: requests-backed)
        waiter: Wait seam (default: interruptible sleep)
        clock: Epoch time source shared by the ledger and default waiter

    Example:
        with APIClient(ClientConfig(default_site="stackoverflow")) as client:
            response = client.fetch_questions([1, 2])
            print(client.quota, client.max_quota)
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        dispatch_config: DispatchConfig | None = None,
        http_executor: HTTPExecutor | None = None,
        waiter: Waiter | None = None,
        clock: Callable[[], float] = time.time,
    ):
        self.config = config or ClientConfig()
        self.dispatch_config = dispatch_config or DispatchConfig()
        self.http_executor = http_executor or RequestsExecutor(timeout=self.config.timeout)
        self.waiter = waiter or SleepWaiter(clock=clock)
        self.ledger = BackoffLedger(clock=clock)
        self.quota_state = QuotaState()
        self.executor = RequestExecutor(
            self.config,
            self.http_executor,
            self.waiter,
            self.ledger,
            self.quota_state,
            max_backoff_wait=self.dispatch_config.max_backoff_wait,
        )
        self.dispatcher = Dispatcher(max_workers=self.dispatch_config.max_workers)

    # ==================== STATE ====================

    @property
    def quota(self) -> int | None:
        """Remaining quota as last reported by the server."""
        return self.quota_state.remaining

    @property
    def max_quota(self) -> int | None:
        return self.quota_state.maximum

    @property
    def backoffs(self) -> dict[str, float]:
        """Snapshot of active backoff expirations by route."""
        return self.ledger.snapshot()

    # ==================== CALLS ====================

    def perform_api_request(
        self,
        route: str,
        item_type: type[T] | None = None,
        parameters: Mapping[str, Any] | None = None,
        backoff_behavior: BackoffBehavior = BackoffBehavior.WAIT,
    ) -> APIResponse[T]:
        """
        Perform a call on the calling thread.

        Returns:
            The decoded envelope

        Raises:
            BackoffError, TransportError, DecodeError, APIError
        """
        return self.executor.execute(route, item_type, parameters, backoff_behavior)

    def perform_api_request_async(
        self,
        route: str,
        item_type: type[T] | None = None,
        parameters: Mapping[str, Any] | None = None,
        backoff_behavior: BackoffBehavior = BackoffBehavior.WAIT,
        callback: Completion[APIResponse[T]] | None = None,
    ) -> Future:
        """
        Queue a call and return immediately.

        ``callback`` is invoked exactly once from a worker thread with
        ``(response, None)`` on success or ``(None, error)`` on failure.

        Returns:
            Future resolving once the callback has run
        """
        parameters = dict(parameters) if parameters else None
        return self.dispatcher.submit(
            lambda: self.executor.execute(route, item_type, parameters, backoff_behavior),
            callback or _log_unhandled(route),
        )

    def fail_async(self, route: str, error: Exception, callback: Completion[Any] | None = None) -> Future:
        """Report ``error`` for ``route`` through ``callback`` without sending anything."""
        return self.dispatcher.submit_error(error, callback or _log_unhandled(route))

    # ==================== LIFECYCLE ====================

    def drain(self, timeout: float | None = None) -> bool:
        """Wait for all queued calls to finish; False if ``timeout`` elapsed."""
        return self.dispatcher.drain(timeout)

    def close(self, interrupt_waits: bool = False) -> None:
        """
        Shut the client down.

        Queued calls still complete and invoke their callbacks. With
        ``interrupt_waits``, calls blocked on a backoff are released and
        fail with ``BackoffError``.
        """
        if interrupt_waits and hasattr(self.waiter, "interrupt"):
            self.waiter.interrupt()
        self.dispatcher.shutdown(wait=True)
        if hasattr(self.http_executor, "close"):
            self.http_executor.close()
        logger.debug(f"Client closed (quota {self.quota}/{self.max_quota})")

    def __enter__(self) -> APIClient:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def _log_unhandled(route: str) -> Completion[Any]:
    def callback(response: Any, error: Exception | None) -> None:
        if error is not None:
            logger.error(f"Async call to {route} failed with no callback: {error}")

    return callback
