import logging

import pytest
import requests

from conftest import FakeSession, MockResponse
from football_dashboard import net_retry
from football_dashboard.errors import APIError
from football_dashboard.inflight import CancelToken


def test_retries_until_success_counts_attempts(monkeypatch):
    sleeps = []
    monkeypatch.setattr(net_retry.time, "sleep", sleeps.append)
    session = FakeSession(MockResponse(500), MockResponse(503), MockResponse(200, {"ok": True}))

    response, attempts = net_retry.fetch_with_backoff(
        session, "http://x.test/a", max_attempts=3, base_delay=0.5
    )

    assert response.json() == {"ok": True}
    assert attempts == 3
    assert len(session.calls) == 3
    assert sleeps == [0.5, 1.0]


def test_always_failing_raises_after_max_attempts():
    session = FakeSession(*[MockResponse(502, reason="Bad Gateway") for _ in range(4)])

    with pytest.raises(APIError) as exc:
        net_retry.fetch_with_backoff(session, "http://x.test/a", max_attempts=4, base_delay=0)

    assert exc.value.code == "502"
    assert len(session.calls) == 4


def test_client_errors_are_retried_too():
    session = FakeSession(MockResponse(404), MockResponse(200, {}))
    _, attempts = net_retry.fetch_with_backoff(session, "http://x.test/a", base_delay=0)
    assert attempts == 2


def test_timeout_maps_to_timeout_code():
    session = FakeSession(requests.Timeout(), requests.Timeout())
    with pytest.raises(APIError) as exc:
        net_retry.fetch_with_backoff(session, "http://x.test/a", max_attempts=2, base_delay=0)
    assert exc.value.code == "TIMEOUT"


def test_connection_error_maps_to_network_error():
    session = FakeSession(requests.ConnectionError("refused"))
    with pytest.raises(APIError) as exc:
        net_retry.fetch_with_backoff(session, "http://x.test/a", max_attempts=1)
    assert exc.value.code == "NETWORK_ERROR"
    assert exc.value.details == "ConnectionError"


def test_rate_limited_details_and_retry_after(monkeypatch):
    sleeps = []
    monkeypatch.setattr(net_retry.time, "sleep", sleeps.append)
    session = FakeSession(
        MockResponse(429, headers={"Retry-After": "2"}),
        MockResponse(429, headers={"Retry-After": "2"}),
    )
    with pytest.raises(APIError) as exc:
        net_retry.fetch_with_backoff(session, "http://x.test/a", max_attempts=2, base_delay=0.1)
    assert exc.value.code == "429"
    assert exc.value.details == "rate_limited"
    assert sleeps == [2.0]


@pytest.mark.parametrize(
    "attempt,expected",
    [(1, 1.0), (2, 2.0), (3, 4.0), (5, 10.0)],
)
def test_compute_retry_delay_is_exponential_and_capped(attempt, expected):
    assert net_retry.compute_retry_delay(attempt, 1.0) == expected


def test_cancelled_token_stops_before_first_attempt():
    token = CancelToken("k")
    token.cancel()
    session = FakeSession(MockResponse(200))
    with pytest.raises(APIError) as exc:
        net_retry.fetch_with_backoff(session, "http://x.test/a", token=token)
    assert exc.value.code == "CANCELLED"
    assert session.calls == []


def test_cancel_during_call_discards_response():
    token = CancelToken("k")

    def handler(url, params, timeout):
        token.cancel()
        return MockResponse(200, {"stale": True})

    session = FakeSession(handler=handler)
    with pytest.raises(APIError) as exc:
        net_retry.fetch_with_backoff(session, "http://x.test/a", token=token)
    assert exc.value.code == "CANCELLED"


def test_logs_never_include_api_key(caplog):
    caplog.set_level(logging.WARNING)
    session = FakeSession(MockResponse(500), MockResponse(500))
    with pytest.raises(APIError):
        net_retry.fetch_with_backoff(
            session, "http://x.test/a?api_key=secret123", max_attempts=2, base_delay=0
        )
    assert caplog.messages
    assert not any("secret123" in msg for msg in caplog.messages)
