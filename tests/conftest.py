import threading

import pytest
import requests

from football_dashboard import logging_utils
from football_dashboard.cache import TTLCache
from football_dashboard.sportradar_client import SportradarClient


class MockResponse:
    def __init__(self, status_code=200, json_data=None, headers=None, reason="OK", raises=None):
        self.status_code = status_code
        self._json_data = json_data if json_data is not None else {}
        self.headers = headers or {}
        self.reason = reason
        self._raises = raises

    def json(self):
        if self._raises is not None:
            raise self._raises
        return self._json_data


class FakeSession:
    """Stands in for requests.Session; replays queued responses or exceptions."""

    def __init__(self, *outcomes, handler=None):
        self.outcomes = list(outcomes)
        self.handler = handler
        self.calls = []
        self._lock = threading.Lock()

    def get(self, url, params=None, timeout=None):
        with self._lock:
            self.calls.append({"url": url, "params": dict(params or {}), "timeout": timeout})
            outcome = self.outcomes.pop(0) if self.outcomes else None
        if self.handler is not None:
            return self.handler(url, params, timeout)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome if outcome is not None else MockResponse(200, {})

    def close(self):
        pass


class FakeClock:
    def __init__(self, start=1000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture(autouse=True)
def _no_sleep(monkeypatch):
    monkeypatch.setattr("football_dashboard.net_retry.time.sleep", lambda *_: None)


@pytest.fixture(autouse=True)
def _reset_warn_once():
    logging_utils.reset_warn_once_cache()
    yield
    logging_utils.reset_warn_once_cache()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def make_client(clock):
    def _make(*outcomes, handler=None, api_key="test-key", max_attempts=3):
        session = FakeSession(*outcomes, handler=handler)
        client = SportradarClient(
            api_key,
            "http://proxy.test/api/sportradar",
            session=session,
            cache=TTLCache(clock=clock),
            timeout=2.0,
            max_attempts=max_attempts,
            retry_delay=0.0,
        )
        return client, session

    return _make


def timeout_error():
    return requests.Timeout("read timed out")
