"""
Demo data for the Football Dashboard
Seeded match generator plus the literal payloads the proxy serves when the
upstream is down and the demo fallback is enabled
"""

import copy
import random
from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Dict, List, Optional

from .constants import DEMO_HISTORY_DAYS, DEMO_MATCH_COUNT, QUALIFIER_AWAY, QUALIFIER_HOME
from .domain.contracts import Competition, MatchSummary


DEMO_TEAMS = (
    "Arsenal", "Manchester City", "Liverpool", "Chelsea", "Manchester United",
    "Tottenham", "Newcastle", "Brighton", "Aston Villa", "West Ham",
    "Crystal Palace", "Fulham", "Wolves", "Everton", "Brentford",
    "Nottingham Forest", "Sheffield United", "Burnley", "Luton", "Bournemouth",
)

# id is the current season id, which is what the stats view selects by
DEMO_COMPETITIONS = (
    {"id": "sr:season:118689", "name": "Premier League 2024/25"},
    {"id": "sr:season:118691", "name": "La Liga 2024/25"},
    {"id": "sr:season:118693", "name": "Bundesliga 2024/25"},
    {"id": "sr:season:118695", "name": "Serie A 2024/25"},
    {"id": "sr:season:118697", "name": "Ligue 1 2024/25"},
    {"id": "sr:season:118699", "name": "Champions League 2024/25"},
    {"id": "sr:season:118701", "name": "Europa League 2024/25"},
)


def realistic_score(roll: float) -> int:
    """Map a uniform roll in [0, 1) to a goal count with a Poisson-like shape."""
    if roll < 0.3:
        return 0
    if roll < 0.6:
        return 1
    if roll < 0.8:
        return 2
    if roll < 0.92:
        return 3
    if roll < 0.98:
        return 4
    return int(roll * 3) + 5


def _team_id(name: str) -> str:
    return "sr:team:" + name.lower().replace(" ", "_")


class DemoDataGenerator:
    """Reproducible stand-in data for when the API is unreachable."""

    def __init__(self, match_count: int = DEMO_MATCH_COUNT, history_days: int = DEMO_HISTORY_DAYS):
        self.match_count = match_count
        self.history_days = history_days

    def generate_competitions(self) -> List[Dict[str, str]]:
        return [dict(c) for c in DEMO_COMPETITIONS]

    def generate_matches(
        self,
        season_id: str,
        seed: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> List[MatchSummary]:
        """Ended matches between demo teams; same (season_id, seed, now) gives the same list."""

        rng = random.Random(len(season_id) if seed is None else seed)
        now = now or datetime.now(timezone.utc)
        team_count = len(DEMO_TEAMS)

        matches: List[MatchSummary] = []
        for i in range(self.match_count):
            home_idx = rng.randrange(team_count)
            away_idx = rng.randrange(team_count)
            while away_idx == home_idx:
                away_idx = rng.randrange(team_count)

            home, away = DEMO_TEAMS[home_idx], DEMO_TEAMS[away_idx]
            home_score = realistic_score(rng.random())
            away_score = realistic_score(rng.random())
            kickoff = now - timedelta(days=rng.randrange(self.history_days))

            matches.append(
                {
                    "sport_event": {
                        "id": f"sr:match:demo_{season_id}_{i}",
                        "start_time": kickoff.strftime("%Y-%m-%dT%H:%M:%SZ"),
                        "competitors": [
                            {"id": _team_id(home), "name": home, "qualifier": QUALIFIER_HOME},
                            {"id": _team_id(away), "name": away, "qualifier": QUALIFIER_AWAY},
                        ],
                    },
                    "sport_event_status": {
                        "status": "closed",
                        "match_status": "ended",
                        "home_score": home_score,
                        "away_score": away_score,
                    },
                }
            )
        return matches


# ---- Literal proxy fallback payloads ----

_COMPETITIONS: List[Competition] = [
    {
        "id": "sr:competition:17",
        "name": "Premier League",
        "category": {"id": "sr:category:1", "name": "England", "country_code": "ENG"},
        "type": "league",
        "gender": "men",
    },
    {
        "id": "sr:competition:8",
        "name": "La Liga",
        "category": {"id": "sr:category:5", "name": "Spain", "country_code": "ESP"},
        "type": "league",
        "gender": "men",
    },
    {
        "id": "sr:competition:35",
        "name": "Bundesliga",
        "category": {"id": "sr:category:3", "name": "Germany", "country_code": "DEU"},
        "type": "league",
        "gender": "men",
    },
    {
        "id": "sr:competition:23",
        "name": "Serie A",
        "category": {"id": "sr:category:31", "name": "Italy", "country_code": "ITA"},
        "type": "league",
        "gender": "men",
    },
    {
        "id": "sr:competition:34",
        "name": "Ligue 1",
        "category": {"id": "sr:category:9", "name": "France", "country_code": "FRA"},
        "type": "league",
        "gender": "men",
    },
]

_SEASONS = [
    ("sr:season:118689", "2024/25", "2024-08-16", "2025-05-25", "2024"),
    ("sr:season:114317", "2023/24", "2023-08-18", "2024-05-19", "2023"),
    ("sr:season:106581", "2022/23", "2022-08-05", "2023-05-28", "2022"),
]

_SEASON_COMPETITORS = [
    ("sr:competitor:40", "Liverpool", "LIV"),
    ("sr:competitor:35", "Manchester City", "MCI"),
    ("sr:competitor:42", "Arsenal", "ARS"),
    ("sr:competitor:33", "Chelsea", "CHE"),
    ("sr:competitor:44", "Tottenham", "TOT"),
    ("sr:competitor:39", "Newcastle", "NEW"),
    ("sr:competitor:45", "Brighton", "BHA"),
    ("sr:competitor:41", "Aston Villa", "AVL"),
    ("sr:competitor:43", "West Ham", "WHU"),
    ("sr:competitor:46", "Crystal Palace", "CRY"),
]

# (position, id, name, played, wins, draws, losses, gf, ga, points)
_STANDINGS = [
    (1, "sr:competitor:40", "Liverpool", 15, 11, 3, 1, 35, 15, 36),
    (2, "sr:competitor:35", "Manchester City", 15, 10, 2, 3, 32, 18, 32),
    (3, "sr:competitor:42", "Arsenal", 15, 9, 4, 2, 28, 16, 31),
    (4, "sr:competitor:33", "Chelsea", 15, 8, 5, 2, 26, 17, 29),
    (5, "sr:competitor:44", "Tottenham", 15, 7, 3, 5, 24, 20, 24),
]

_VENUES = {
    "sr:competitor:40": {"id": "sr:venue:1272", "name": "Anfield", "city_name": "Liverpool"},
    "sr:competitor:42": {"id": "sr:venue:1273", "name": "Emirates Stadium", "city_name": "London"},
    "sr:competitor:44": {"id": "sr:venue:1274", "name": "Tottenham Hotspur Stadium", "city_name": "London"},
    "sr:competitor:45": {"id": "sr:venue:1275", "name": "Amex Stadium", "city_name": "Brighton"},
}


def _competitor(comp_id: str, name: str, qualifier: str) -> Dict[str, Any]:
    return {
        "id": comp_id,
        "name": name,
        "country": "England",
        "country_code": "ENG",
        "qualifier": qualifier,
    }


def _event(event_id, kickoff: datetime, home, away, status: str, match_status: str) -> Dict[str, Any]:
    venue = dict(_VENUES[home[0]], country_name="England")
    return {
        "id": event_id,
        "start_time": kickoff.strftime("%Y-%m-%dT%H:%M:%S.000Z"),
        "start_time_confirmed": True,
        "competitors": [
            _competitor(home[0], home[1], QUALIFIER_HOME),
            _competitor(away[0], away[1], QUALIFIER_AWAY),
        ],
        "venue": venue,
        "status": status,
        "match_status": match_status,
    }


def demo_competitions() -> Dict[str, Any]:
    return {"competitions": copy.deepcopy(_COMPETITIONS)}


def demo_seasons(competition_id: str) -> Dict[str, Any]:
    return {
        "seasons": [
            {
                "id": sid,
                "name": name,
                "start_date": start,
                "end_date": end,
                "year": year,
                "competition_id": competition_id,
            }
            for sid, name, start, end, year in _SEASONS
        ]
    }


def demo_daily_schedule(day: str) -> Dict[str, Any]:
    """Two afternoon fixtures on ``day`` (YYYY-MM-DD, already validated)."""

    midnight = datetime.combine(date.fromisoformat(day), time.min, tzinfo=timezone.utc)
    return {
        "sport_events": [
            _event(
                f"sr:match:demo_{day}_1",
                midnight + timedelta(hours=15),
                ("sr:competitor:44", "Tottenham"),
                ("sr:competitor:39", "Newcastle"),
                "not_started",
                "not_started",
            ),
            _event(
                f"sr:match:demo_{day}_2",
                midnight + timedelta(hours=17, minutes=30),
                ("sr:competitor:45", "Brighton"),
                ("sr:competitor:41", "Aston Villa"),
                "not_started",
                "not_started",
            ),
        ]
    }


def demo_live_schedule(now: Optional[datetime] = None) -> Dict[str, Any]:
    now = now or datetime.now(timezone.utc)
    return {
        "sport_events": [
            _event(
                "sr:match:demo_live_1",
                now - timedelta(minutes=45),
                ("sr:competitor:40", "Liverpool"),
                ("sr:competitor:35", "Manchester City"),
                "live",
                "1st_half",
            ),
            _event(
                "sr:match:demo_live_2",
                now - timedelta(minutes=20),
                ("sr:competitor:42", "Arsenal"),
                ("sr:competitor:33", "Chelsea"),
                "live",
                "1st_half",
            ),
        ]
    }


def demo_season_competitors() -> Dict[str, Any]:
    return {
        "season_competitors": [
            {"id": cid, "name": name, "country": "England", "country_code": "ENG", "abbreviation": abbr}
            for cid, name, abbr in _SEASON_COMPETITORS
        ]
    }


def demo_standings() -> Dict[str, Any]:
    rows = [
        {
            "position": pos,
            "competitor": {"id": cid, "name": name},
            "played": played,
            "wins": wins,
            "draws": draws,
            "losses": losses,
            "goals_for": gf,
            "goals_against": ga,
            "goal_diff": gf - ga,
            "points": points,
        }
        for pos, cid, name, played, wins, draws, losses, gf, ga, points in _STANDINGS
    ]
    return {
        "standings": [
            {
                "type": "total",
                "groups": [{"id": "sr:league:1", "name": "Premier League", "group_standings": rows}],
            }
        ]
    }
