"""Pytest configuration and fixtures for stackex tests"""
import json
import logging
import threading

import pytest

from stackex.api.client import APIClient
from stackex.api.transport import HTTPResult
from stackex.core.config import ClientConfig, DispatchConfig

START_TIME = 1_000_000.0


class FakeClock:
    """Manually advanced epoch clock"""

    def __init__(self, start=START_TIME):
        self.now = start
        self._lock = threading.Lock()

    def __call__(self):
        with self._lock:
            return self.now

    def advance(self, seconds):
        with self._lock:
            self.now += seconds

    def set(self, instant):
        with self._lock:
            self.now = instant


class FakeWaiter:
    """Records every wait instant and jumps the fake clock to it"""

    def __init__(self, clock, completes=True):
        self.clock = clock
        self.completes = completes
        self.waits = []

    def wait_until(self, instant):
        self.waits.append(instant)
        if not self.completes:
            return False
        if instant > self.clock():
            self.clock.set(instant)
        return True


class GatedWaiter:
    """Blocks each wait until the test opens that wait's gate, then jumps the fake clock"""

    def __init__(self, clock, timeout=5):
        self.clock = clock
        self.timeout = timeout
        self.waits = []
        self._gates = []
        self._changed = threading.Condition()

    def wait_until(self, instant):
        gate = threading.Event()
        with self._changed:
            self.waits.append(instant)
            self._gates.append(gate)
            self._changed.notify_all()
        if not gate.wait(self.timeout):
            return False
        with self._changed:
            if instant > self.clock():
                self.clock.set(instant)
        return True

    def wait_for_waiters(self, count):
        """Block until ``count`` waits have started"""
        with self._changed:
            return self._changed.wait_for(lambda: len(self.waits) >= count, self.timeout)

    def release(self, index):
        with self._changed:
            self._gates[index].set()


class FakeHTTPExecutor:
    """Replays queued responses and records each request with the clock time it was sent"""

    def __init__(self, clock):
        self.clock = clock
        self.requests = []
        self._responses = []
        self._default = HTTPResult(body=b'{"items": [], "quota_remaining": 9999, "quota_max": 10000}', status=200)
        self._lock = threading.Lock()
        self.closed = False

    def respond(self, body=None, status=200, error=None):
        """Queue one response; ``body`` may be a dict (JSON-encoded), str, or bytes"""
        if isinstance(body, dict):
            body = json.dumps(body)
        if isinstance(body, str):
            body = body.encode("utf-8")
        with self._lock:
            self._responses.append(HTTPResult(body=body, status=status if error is None else None, error=error))

    def execute(self, method, url, headers):
        with self._lock:
            self.requests.append({"method": method, "url": url, "headers": dict(headers), "sent_at": self.clock()})
            if self._responses:
                return self._responses.pop(0)
            return self._default

    def close(self):
        self.closed = True

    @property
    def urls(self):
        return [r["url"] for r in self.requests]


def envelope(items=None, quota_remaining=9999, quota_max=10000, **extra):
    """Build a success envelope body"""
    body = {"items": items or [], "has_more": False, "quota_remaining": quota_remaining, "quota_max": quota_max}
    body.update(extra)
    return body


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def waiter(clock):
    return FakeWaiter(clock)


@pytest.fixture
def gated_waiter(clock):
    return GatedWaiter(clock)


@pytest.fixture
def http(clock):
    return FakeHTTPExecutor(clock)


@pytest.fixture
def client_config():
    return ClientConfig(default_site="stackoverflow", default_filter="default")


@pytest.fixture
def client(client_config, http, waiter, clock):
    """APIClient wired to the recording fakes"""
    api_client = APIClient(
        client_config,
        DispatchConfig(max_workers=2),
        http_executor=http,
        waiter=waiter,
        clock=clock,
    )
    yield api_client
    api_client.close()


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Undo setup_logging side effects so caplog keeps seeing stackex records"""
    yield
    package_logger = logging.getLogger("stackex")
    for handler in package_logger.handlers[:]:
        handler.close()
        package_logger.removeHandler(handler)
    package_logger.propagate = True
    package_logger.setLevel(logging.NOTSET)


@pytest.fixture
def make_envelope():
    """Factory for success envelope bodies"""
    return envelope
