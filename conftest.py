import threading

import pytest

from shared.application.message_bus import MessageBus
from shared.infrastructure.clock import ManualClock


class FakeApi:
    """
    In-memory stand-in for BookingApiClient

    Routes are keyed by (method, path). Each route holds a queue of
    responses; the last one repeats. A response can be a value, an
    exception instance (raised), or a callable taking the request payload.
    """

    def __init__(self):
        self.calls = []
        self._routes = {}
        self._lock = threading.Lock()

    def on(self, method, path, *responses):
        self._routes.setdefault((method, path), []).extend(responses)
        return self

    def count(self, method, path=None):
        with self._lock:
            return sum(
                1 for m, p, _ in self.calls
                if m == method and (path is None or p == path)
            )

    def payloads(self, method, path):
        with self._lock:
            return [payload for m, p, payload in self.calls if m == method and p == path]

    def _dispatch(self, method, path, payload):
        with self._lock:
            self.calls.append((method, path, payload))
            queue = self._routes.get((method, path))
            if not queue:
                raise AssertionError(f"Unexpected call: {method} {path}")
            response = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(response, BaseException):
            raise response
        if callable(response):
            response = response(payload)
        return response

    def get(self, path, params=None):
        return self._dispatch("GET", path, params)

    def post(self, path, json=None):
        return self._dispatch("POST", path, json)

    def put(self, path, json=None):
        return self._dispatch("PUT", path, json)


@pytest.fixture
def api():
    return FakeApi()


@pytest.fixture
def bus():
    return MessageBus()


@pytest.fixture
def clock():
    return ManualClock()
