from datetime import datetime, timezone

from football_dashboard import demo_data
from football_dashboard.demo_data import DemoDataGenerator, realistic_score
from football_dashboard.stats_calculator import analyze_matches
from football_dashboard.validators import (
    validate_competitions_payload,
    validate_competitors_payload,
    validate_seasons_payload,
    validate_sport_events_payload,
    validate_summaries_payload,
)

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def test_generated_matches_are_reproducible():
    gen = DemoDataGenerator()
    a = gen.generate_matches("sr:season:118689", now=NOW)
    b = gen.generate_matches("sr:season:118689", now=NOW)
    c = gen.generate_matches("sr:season:118689", seed=99, now=NOW)

    assert len(a) == 150
    assert a == b
    assert a != c


def test_generated_matches_are_valid_completed_summaries():
    matches = DemoDataGenerator(match_count=40).generate_matches("s1", seed=7, now=NOW)

    validate_summaries_payload({"summaries": matches})
    for match in matches:
        home, away = match["sport_event"]["competitors"]
        assert home["id"] != away["id"]
        start = datetime.fromisoformat(match["sport_event"]["start_time"].replace("Z", "+00:00"))
        assert 0 <= (NOW - start).days < 180

    stats = analyze_matches(matches)
    assert stats["total_matches"] == 40


def test_realistic_score_buckets():
    assert realistic_score(0.0) == 0
    assert realistic_score(0.45) == 1
    assert realistic_score(0.7) == 2
    assert realistic_score(0.9) == 3
    assert realistic_score(0.95) == 4
    assert realistic_score(0.99) == 7


def test_demo_competitions_are_keyed_by_season():
    comps = DemoDataGenerator().generate_competitions()
    assert len(comps) == 7
    assert all(c["id"].startswith("sr:season:") for c in comps)


def test_literal_fallback_payloads_pass_validation():
    validate_competitions_payload(demo_data.demo_competitions())
    seasons = validate_seasons_payload(demo_data.demo_seasons("sr:competition:17"))
    assert {s["competition_id"] for s in seasons["seasons"]} == {"sr:competition:17"}
    daily = validate_sport_events_payload(demo_data.demo_daily_schedule("2024-01-15"))
    assert daily["sport_events"][0]["start_time"].startswith("2024-01-15T15:00")
    live = validate_sport_events_payload(demo_data.demo_live_schedule(NOW))
    assert all(e["status"] == "live" for e in live["sport_events"])
    validate_competitors_payload(demo_data.demo_season_competitors())


def test_fallback_payloads_are_fresh_copies():
    first = demo_data.demo_competitions()
    first["competitions"][0]["name"] = "changed"
    assert demo_data.demo_competitions()["competitions"][0]["name"] == "Premier League"
