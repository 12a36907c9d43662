"""Stand-ins for the status service, shared by the test modules."""
import json
import threading

import requests

BASE_URL = "http://status.test/v1/accounts"

STATUSES = {
    1: {"account_id": 1, "status": "active", "status_set_on": "2020-01-01"},
    2: {"account_id": 2, "status": "inactive", "status_set_on": "2019-05-05"},
}


# --- Stand-in for requests.Session talking to the status service ---
class FakeResponse:
    """body is JSON-encoded; text is sent as-is."""
    def __init__(self, status_code=200, body=None, text=None, chunk_size=None):
        self.status_code = status_code
        self.content = text.encode("utf-8") if text is not None else json.dumps(body).encode("utf-8")
        self.chunk_size = chunk_size
        self.closed = False

    def iter_content(self, chunk_size=1):
        size = self.chunk_size or chunk_size
        for i in range(0, len(self.content), size):
            yield self.content[i:i + size]

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error", response=self)

    def close(self):
        self.closed = True


class DripResponse(FakeResponse):
    """Sends its body a few bytes at a time, moving `clock` forward per chunk."""
    def __init__(self, body, clock, seconds_per_chunk, chunk_size=4):
        super().__init__(200, body, chunk_size=chunk_size)
        self.clock = clock
        self.seconds_per_chunk = seconds_per_chunk

    def iter_content(self, chunk_size=1):
        for chunk in super().iter_content(chunk_size):
            self.clock.now += self.seconds_per_chunk
            yield chunk


class FakeClock:
    def __init__(self, now=0.0):
        self.now = now

    def __call__(self):
        return self.now


class FakeSession:
    """
    routes: {url suffix (the key as text): FakeResponse | Exception | callable}
    Unknown keys answer 404 like the real service.
    """
    def __init__(self, routes=None):
        self.headers = {}
        self.routes = dict(routes or {})
        self.calls = []
        self.timeouts = []
        self.sent_headers = []
        self._lock = threading.Lock()
        self.closed = False

    def get(self, url, headers=None, timeout=None, allow_redirects=True, stream=False):
        with self._lock:
            self.calls.append(url)
            self.timeouts.append(timeout)
            self.sent_headers.append(dict(headers or {}))
        key = url.rsplit("/", 1)[-1]
        route = self.routes.get(key, FakeResponse(404, {"error": "not found"}))
        if callable(route):
            route = route()
        if isinstance(route, Exception):
            raise route
        return route

    def close(self):
        self.closed = True


def session_for(records):
    return FakeSession({str(k): FakeResponse(200, v) for k, v in records.items()})


