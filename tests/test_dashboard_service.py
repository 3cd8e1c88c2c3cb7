import threading
import time

import pytest

from conftest import MockResponse
from football_dashboard.services import dashboard
from football_dashboard.services.dashboard import DashboardService, LivePoller, ResourceState

STANDINGS = {
    "standings": [
        {
            "type": "total",
            "groups": [
                {
                    "group_standings": [
                        {
                            "position": 1,
                            "competitor": {"id": "sr:competitor:40", "name": "Liverpool"},
                            "played": 2,
                            "wins": 2,
                            "goals_for": 5,
                            "goals_against": 1,
                            "points": 6,
                        }
                    ]
                }
            ],
        }
    ]
}


def _event(event_id, start):
    return {
        "id": event_id,
        "start_time": start,
        "competitors": [
            {"id": "sr:competitor:1", "qualifier": "home"},
            {"id": "sr:competitor:2", "qualifier": "away"},
        ],
        "status": "live",
    }


def test_resource_state_error_auto_clears(clock):
    state = ResourceState(clock=clock, clear_after=5)
    state.fail("boom")
    assert state.status == "error"
    clock.advance(4.9)
    assert state.error == "boom"
    clock.advance(0.1)
    assert state.error is None
    assert state.status == "error"
    state.clear_error()
    assert state.status == "idle"


def test_load_competitions_success(make_client, clock):
    client, _ = make_client(
        MockResponse(200, {"competitions": [{"id": "sr:competition:17", "name": "Premier League"}]})
    )
    service = DashboardService(client, clock=clock)

    env = service.load_competitions()

    assert env["success"] is True
    assert service.competitions.status == "success"
    assert service.competitions.data[0]["name"] == "Premier League"
    assert service.competitions.last_fetch is not None
    assert service.is_connected is True
    assert service.global_loading is False


def test_failed_load_sets_error_then_retry_recovers(make_client, clock):
    client, session = make_client(
        MockResponse(500),
        MockResponse(200, STANDINGS),
        max_attempts=1,
    )
    service = DashboardService(client, clock=clock, clear_after=5)

    service.load_season_standings("sr:season:1")
    assert service.standings.status == "error"
    assert service.standings.error.startswith("HTTP 500")
    assert service.is_connected is False

    assert service.retry_last_failed() == 1
    assert service.standings.status == "success"
    assert service.standings.data[0]["competitor"]["name"] == "Liverpool"
    assert service.standings.data[0]["goal_difference"] == 4
    assert service.retry_last_failed() == 0
    assert len(session.calls) == 2


def test_empty_seasons_is_a_business_error(make_client, clock):
    client, _ = make_client(MockResponse(200, {"seasons": []}))
    service = DashboardService(client, clock=clock)

    env = service.load_competition_seasons("sr:competition:17")

    assert env["success"] is False
    assert env["code"] == "EMPTY_RESULT"
    assert service.seasons.error == "No seasons found for this competition"


def test_daily_matches_sorted_and_bad_date_reported(make_client, clock):
    payload = {
        "sport_events": [
            _event("late", "2024-01-15T20:00:00Z"),
            _event("early", "2024-01-15T12:00:00Z"),
        ]
    }
    client, session = make_client(MockResponse(200, payload))
    service = DashboardService(client, clock=clock)

    service.load_daily_matches("2024-01-15")
    assert [e["id"] for e in service.daily_matches.data] == ["early", "late"]

    service.load_match_summaries("2024-1-15")
    assert service.match_summaries.status == "error"
    assert "Invalid date" in service.match_summaries.error
    assert len(session.calls) == 1


def test_clear_error_by_key_and_all(make_client, clock):
    client, _ = make_client(MockResponse(500), MockResponse(500), max_attempts=1)
    service = DashboardService(client, clock=clock)
    service.load_competitions()
    service.load_live_matches()

    service.clear_error("competitions")
    assert service.competitions.error is None
    assert service.live_matches.error is not None

    service.clear_error()
    assert service.live_matches.error is None
    with pytest.raises(KeyError):
        service.clear_error("nope")


def test_selection_and_api_key(make_client, clock):
    client, _ = make_client(MockResponse(200, {"competitions": []}))
    service = DashboardService(client, clock=clock)
    service.load_competitions()
    service.select_competition({"id": "c"})
    service.select_season({"id": "s"})
    service.select_competition({"id": "d"})
    assert service.selected_season is None

    service.set_api_key("new-key")
    assert service.is_connected is False
    assert client.api_key == "new-key"
    assert service.cache_stats()["size"] == 0
    snap = service.snapshot()
    assert snap["selected_competition"] == {"id": "d"}
    assert snap["competitions"]["status"] == "success"


def test_live_poller_runs_until_stopped():
    ticked = threading.Event()
    calls = []

    def tick():
        calls.append(1)
        if len(calls) >= 3:
            ticked.set()

    poller = LivePoller(tick, interval=0.01)
    poller.start()
    poller.start()
    assert ticked.wait(2)
    poller.stop()
    poller.stop()
    seen = len(calls)
    time.sleep(0.05)
    assert len(calls) == seen
    assert poller.running is False


def test_live_poller_survives_failing_tick():
    done = threading.Event()
    state = {"n": 0}

    def tick():
        state["n"] += 1
        if state["n"] == 1:
            raise RuntimeError("upstream hiccup")
        done.set()

    poller = LivePoller(tick, interval=0.01)
    poller.start()
    try:
        assert done.wait(2)
    finally:
        poller.stop()


def test_start_live_polling_clamps_interval(make_client, clock):
    client, _ = make_client()
    service = DashboardService(client, clock=clock)

    poller = service.start_live_polling(1)
    try:
        assert poller.interval == 10
        assert poller.running
    finally:
        service.stop_live_polling()
    assert not poller.running
    service.stop_live_polling()


def test_malformed_standings_rows_become_a_format_error(make_client, clock):
    client, _ = make_client(MockResponse(200, {"standings": ["garbage"]}))
    service = DashboardService(client, clock=clock)

    env = service.load_season_standings("sr:season:1")

    assert env["success"] is False
    assert env["code"] == "INVALID_PAYLOAD"
    assert service.standings.loading is False
    assert service.standings.status == "error"
    assert service.standings.error == "The server response format is invalid"


def test_unreadable_data_after_validation_fails_the_resource(make_client, clock, monkeypatch):
    client, _ = make_client(MockResponse(200, {"standings": []}))
    service = DashboardService(client, clock=clock)

    def broken(_payload):
        raise TypeError("unexpected shape")

    monkeypatch.setattr(dashboard, "normalize_standings", broken)
    env = service.load_season_standings("sr:season:1")

    assert env["code"] == "INVALID_PAYLOAD"
    assert service.standings.status == "error"
    assert service.global_loading is False


def test_repeated_failures_keep_one_retry_per_resource(make_client, clock):
    client, session = make_client(*[MockResponse(500)] * 5, max_attempts=1)
    service = DashboardService(client, clock=clock)

    for _ in range(5):
        service.load_live_matches()
    assert len(session.calls) == 5

    assert service.retry_last_failed() == 1
    assert len(session.calls) == 6


def test_success_drops_pending_retry(make_client, clock):
    client, session = make_client(MockResponse(500), MockResponse(200, {"sport_events": []}), max_attempts=1)
    service = DashboardService(client, clock=clock)

    service.load_live_matches()
    service.load_live_matches()

    assert service.live_matches.status == "success"
    assert service.retry_last_failed() == 0
    assert len(session.calls) == 2


def test_cancel_all_releases_loading_state(make_client, clock):
    entered = threading.Event()
    release = threading.Event()

    def handler(url, params, timeout):
        entered.set()
        release.wait(2)
        return MockResponse(200, {"sport_events": []})

    client, _ = make_client(handler=handler)
    service = DashboardService(client, clock=clock)
    results = []
    worker = threading.Thread(target=lambda: results.append(service.load_live_matches()))
    worker.start()
    assert entered.wait(2)
    assert service.live_matches.loading is True

    client.cancel_all()
    release.set()
    worker.join(2)

    assert results[0]["code"] == "CANCELLED"
    assert service.live_matches.loading is False
    assert service.live_matches.status == "idle"
    assert service.global_loading is False
