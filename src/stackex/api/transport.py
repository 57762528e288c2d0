"""I/O seams of the client: the HTTP executor and the wait capability.

Both are plain objects handed to the client so tests can substitute
recording fakes and assert on every request and every wait instant.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Protocol

import requests

from stackex.core.constants import DEFAULT_TIMEOUT
from stackex.core.logging import redact_message

logger = logging.getLogger(__name__)


@dataclass
class HTTPResult:
    """Outcome of one HTTP exchange.

    ``body`` and ``status`` are set whenever the server answered, whatever
    the status. ``error`` is set when no usable answer was received.
    """

    body: bytes | None = None
    status: int | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.status is not None and 200 <= self.status < 300


class HTTPExecutor(Protocol):
    def execute(self, method: str, url: str, headers: Mapping[str, str]) -> HTTPResult: ...


class Waiter(Protocol):
    def wait_until(self, instant: float) -> bool: ...


class RequestsExecutor:
    """HTTP executor backed by a ``requests.Session``.

    Network failures are reported in ``HTTPResult.error`` rather than
    raised, so the request executor owns the error mapping.
    """

    def __init__(self, timeout: float = DEFAULT_TIMEOUT, session: requests.Session | None = None):
        self.timeout = timeout
        self.session = session or requests.Session()

    def execute(self, method: str, url: str, headers: Mapping[str, str]) -> HTTPResult:
        try:
            response = self.session.request(method, url, headers=dict(headers), timeout=self.timeout)
        except requests.RequestException as e:
            logger.debug(f"{method} {redact_message(url)} failed: {type(e).__name__}: {e}")
            return HTTPResult(error=e)
        return HTTPResult(body=response.content, status=response.status_code)

    def close(self) -> None:
        self.session.close()


class SleepWaiter:
    """
    Blocks the calling thread until an epoch instant.

    The wait sleeps on a ``threading.Event`` so ``interrupt`` can release
    every blocked thread at once (used when the client shuts down).
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._interrupted = threading.Event()

    def wait_until(self, instant: float) -> bool:
        """
        Block until ``instant``.

        Returns:
            True if the instant was reached, False if interrupted first
        """
        remaining = instant - self._clock()
        while remaining > 0:
            if self._interrupted.wait(timeout=remaining):
                return False
            remaining = instant - self._clock()
        return not self._interrupted.is_set()

    def interrupt(self) -> None:
        self._interrupted.set()

    def reset(self) -> None:
        self._interrupted.clear()

    @property
    def interrupted(self) -> bool:
        return self._interrupted.is_set()
