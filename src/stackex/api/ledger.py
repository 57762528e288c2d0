"""Per-route backoff bookkeeping and quota state.

The API answers with a ``backoff`` field when a caller must leave a route
alone for some seconds. The ledger remembers, per route, the instant before
which that route must not be called again.
"""

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

logger = logging.getLogger(__name__)


class BackoffLedger:
    """
    Thread-safe mapping of route -> backoff expiration (epoch seconds).

    Entries only come from ``record`` and always hold a concrete instant;
    there is no "never expires" entry. A single lock serializes every access,
    which also serializes access to any one route.

    Example:
        ledger = BackoffLedger()
        ledger.record("questions/1", 10)

        expiration = ledger.peek("questions/1")
        if expiration is not None and expiration > time.time():
            ...
        ledger.consume("questions/1")
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        """
        Initialize an empty ledger.

        Args:
            clock: Source of the current epoch time (injectable for tests)
        """
        self._clock = clock
        self._entries: dict[str, float] = {}
        self._lock = threading.Lock()

        # Statistics
        self._total_recorded = 0
        self._total_consumed = 0
        self._total_pruned = 0

    def now(self) -> float:
        return self._clock()

    def peek(self, route: str) -> float | None:
        """Expiration recorded for ``route``, or None. Does not mutate."""
        with self._lock:
            return self._entries.get(route)

    def record(self, route: str, seconds: float) -> float:
        """
        Set ``route`` to expire ``seconds`` from now, overwriting any prior entry.

        Returns:
            The recorded expiration instant
        """
        with self._lock:
            expiration = self._clock() + seconds
            self._entries[route] = expiration
            self._total_recorded += 1
        logger.warning(f"Backoff of {seconds}s recorded for {route}")
        return expiration

    def consume(self, route: str, expected: float | None = None) -> bool:
        """
        Remove the entry for ``route`` once a call has acted on it.

        Args:
            route: Route whose entry to remove
            expected: Only remove the entry if it still holds this expiration;
                a backoff recorded since the caller peeked is kept

        Returns:
            True if an entry was removed
        """
        with self._lock:
            current = self._entries.get(route)
            removed = current is not None and (expected is None or current == expected)
            if removed:
                del self._entries[route]
                self._total_consumed += 1
            return removed

    def prune(self) -> list[str]:
        """
        Remove every entry whose expiration has passed.

        Returns:
            Routes whose entries were removed
        """
        with self._lock:
            now = self._clock()
            expired = [route for route, expiration in self._entries.items() if expiration <= now]
            for route in expired:
                del self._entries[route]
            self._total_pruned += len(expired)
        if expired:
            logger.debug(f"Pruned expired backoffs: {expired}")
        return expired

    def snapshot(self) -> dict[str, float]:
        """Copy of all current entries."""
        with self._lock:
            return dict(self._entries)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, route: object) -> bool:
        with self._lock:
            return route in self._entries

    def get_statistics(self) -> dict[str, int]:
        """
        Get ledger statistics.

        Returns:
            Dict with active entry count and lifetime counters
        """
        with self._lock:
            return {
                "active": len(self._entries),
                "total_recorded": self._total_recorded,
                "total_consumed": self._total_consumed,
                "total_pruned": self._total_pruned,
            }


@dataclass(frozen=True)
class QuotaSnapshot:
    """Quota as last reported by the server."""

    remaining: int | None
    maximum: int | None


class QuotaState:
    """Process-lifetime quota counters, overwritten in full by each envelope."""

    def __init__(self):
        self._remaining: int | None = None
        self._maximum: int | None = None
        self._lock = threading.Lock()

    def update(self, remaining: int, maximum: int) -> None:
        with self._lock:
            self._remaining = remaining
            self._maximum = maximum

    def snapshot(self) -> QuotaSnapshot:
        with self._lock:
            return QuotaSnapshot(self._remaining, self._maximum)

    @property
    def remaining(self) -> int | None:
        with self._lock:
            return self._remaining

    @property
    def maximum(self) -> int | None:
        with self._lock:
            return self._maximum
