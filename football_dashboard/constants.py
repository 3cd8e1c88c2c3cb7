"""Centralized configuration constants for the Football Dashboard."""

# ---- Upstream provider ----
SPORTRADAR_DEFAULT_BASE = "https://api.sportradar.com/soccer-extended/trial/v4"
PROXY_URL_PREFIX = "/api/sportradar"

# Cache TTLs per data type (seconds)
CACHE_SETTINGS = {
    "live": 10,           # live scores change every few seconds
    "daily": 300,         # daily schedules
    "standings": 300,     # league tables
    "season": 3600,       # season info / schedules
    "competitor": 1800,   # team profiles
    "static": 86400,      # competitions and other metadata
}
DEFAULT_CACHE_TTL = 300


def cache_ttl_for(cache_type: str) -> int:
    """Return the TTL (seconds) for a cache type; unknown types get the default."""

    return CACHE_SETTINGS.get(cache_type, DEFAULT_CACHE_TTL)


# Client endpoint templates (relative to the proxy base URL)
API_ENDPOINTS = {
    "competitions": "/competitions",
    "competition_info": "/competitions/{id}/info",
    "competition_seasons": "/competitions/{id}/seasons",
    "season_info": "/seasons/{id}/info",
    "season_standings": "/seasons/{id}/standings",
    "season_schedule": "/seasons/{id}/schedule",
    "season_competitors": "/seasons/{id}/competitors",
    "season_summaries": "/seasons/{id}/summaries",
    "season_leaders": "/seasons/{id}/leaders",
    "season_competitor_statistics": "/seasons/{season_id}/competitors/{competitor_id}/statistics",
    "season_probabilities": "/seasons/{id}/probabilities",
    "live_schedules": "/schedules/live",
    "live_summaries": "/schedules/live/summaries",
    "live_timelines": "/schedules/live/timelines",
    "daily_schedules": "/schedules/daily/{date}",
    "daily_summaries": "/schedules/daily/{date}/summaries",
    "competitor_profile": "/competitors/{id}/profile",
    "competitor_schedules": "/competitors/{id}/schedules",
    "competitor_summaries": "/competitors/{id}/summaries",
    "competitor_versus": "/competitors/{id}/versus/{other_id}/matches",
    "player_profile": "/players/{id}/profile",
    "sport_event_summary": "/sport_events/{id}/summary",
    "sport_event_timeline": "/sport_events/{id}/timeline",
    "sport_event_lineups": "/sport_events/{id}/lineups",
    "sport_event_fun_facts": "/sport_events/{id}/fun_facts",
    "sport_event_probabilities": "/sport_events/{id}/probabilities",
    "live_probabilities": "/probabilities/live",
}

# Proxy path -> upstream path (the daily schedule is the one that differs)
UPSTREAM_DAILY_SCHEDULE = "/schedules/{date}/schedule"
UPSTREAM_DAILY_SUMMARIES = "/schedules/{date}/summaries"
UPSTREAM_LIVE_SCHEDULE = "/schedules/live/schedule"

# ---- Match statuses ----
COMPLETED_STATUSES = frozenset({"ended", "closed"})
LIVE_STATUS = "live"
QUALIFIER_HOME = "home"
QUALIFIER_AWAY = "away"

# ---- Statistics ----
OVER_UNDER_LINE = 2.5
FEATURED_MATCH_LIMIT = 15
ACCURACY_BASE = 75
CONFIDENCE_BASE = 60
SCORE_CEILING = 95
STRONG_PICK_THRESHOLD = 70
MEDIUM_PICK_THRESHOLD = 50

LEADERBOARD_KINDS = {
    "goal_scorers": "goals",
    "assist_providers": "assists",
    "yellow_cards": "yellow_cards",
}

# ---- Demo data ----
DEMO_MATCH_COUNT = 150
DEMO_HISTORY_DAYS = 180

# ---- View state ----
ERROR_CLEAR_SECONDS = 5.0
LIVE_POLL_MIN_SECONDS = 10
LIVE_POLL_MAX_SECONDS = 30

# Retry
MAX_RETRY_AFTER = 10.0

# Dev server
DEV_SERVER_HOST = "0.0.0.0"
DEV_SERVER_PORT = 5000
