"""
Match statistics for the Football Dashboard
Folds completed match summaries into league and per-team aggregates
"""

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional

import pandas as pd

from .constants import (
    ACCURACY_BASE,
    COMPLETED_STATUSES,
    CONFIDENCE_BASE,
    FEATURED_MATCH_LIMIT,
    LEADERBOARD_KINDS,
    MEDIUM_PICK_THRESHOLD,
    OVER_UNDER_LINE,
    QUALIFIER_AWAY,
    QUALIFIER_HOME,
    SCORE_CEILING,
    STRONG_PICK_THRESHOLD,
)
from .domain.contracts import FeaturedMatch, MatchStats, Standing, TeamStats
from .utils import find_competitor, parse_iso


_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _score(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value


def _scores(match: Mapping[str, Any]):
    status = match.get("sport_event_status") or {}
    return _score(status.get("home_score")), _score(status.get("away_score"))


def is_completed(match: Mapping[str, Any]) -> bool:
    """True when the match is terminal and both scores are numbers."""
    status = match.get("sport_event_status")
    if not isinstance(status, Mapping):
        return False
    terminal = (
        status.get("status") in COMPLETED_STATUSES
        or status.get("match_status") in COMPLETED_STATUSES
    )
    home, away = _scores(match)
    return terminal and home is not None and away is not None


def completed_matches(matches: Iterable[Mapping[str, Any]]) -> List[Mapping[str, Any]]:
    return [m for m in matches or [] if isinstance(m, Mapping) and is_completed(m)]


def calculate_accuracy(avg_goals: float, over25: float, btts: float) -> float:
    """Illustrative score from goal level and how far over 2.5 % sits from 50.

    This is a display heuristic, not a fitted model. ``btts`` is accepted for
    symmetry with the confidence score but does not affect the result.
    """
    goal_consistency = min((avg_goals - 1) * 10, 15)
    prediction_consistency = min(abs(50 - over25) / 2, 10)
    return min(ACCURACY_BASE + goal_consistency + prediction_consistency, SCORE_CEILING)


def calculate_confidence(total_matches: int, over25_count: int, btts_count: int) -> float:
    """Illustrative score that grows with sample size; capped at 95."""
    sample_size = min(total_matches / 10, 20)
    consistency = 10 if abs(over25_count - btts_count) < 10 else 0
    return min(CONFIDENCE_BASE + sample_size + consistency, SCORE_CEILING)


def _team_name(event: Mapping[str, Any], qualifier: str, fallback: str) -> str:
    competitor = find_competitor(dict(event), qualifier) or {}
    return competitor.get("name") or fallback


def analyze_matches(matches: Iterable[Mapping[str, Any]]) -> Optional[MatchStats]:
    """League-level aggregates, or None when no match has a final score."""

    completed = completed_matches(matches)
    if not completed:
        return None

    total_goals = 0
    over25_count = 0
    btts_count = 0
    featured: List[tuple] = []

    for match in completed:
        home, away = _scores(match)
        goals = home + away
        total_goals += goals
        is_over = goals > OVER_UNDER_LINE
        is_btts = home > 0 and away > 0
        over25_count += is_over
        btts_count += is_btts

        if is_over and is_btts:
            event = match.get("sport_event") or {}
            start = event.get("start_time") or ""
            featured.append(
                (
                    parse_iso(start) or _EPOCH,
                    FeaturedMatch(
                        home_team=_team_name(event, QUALIFIER_HOME, "Home"),
                        away_team=_team_name(event, QUALIFIER_AWAY, "Away"),
                        home_score=home,
                        away_score=away,
                        total_goals=goals,
                        date=str(start).split("T")[0],
                    ),
                )
            )

    count = len(completed)
    avg_goals = total_goals / count
    over25_pct = over25_count / count * 100
    btts_pct = btts_count / count * 100

    featured.sort(key=lambda item: (item[1]["total_goals"], item[0]), reverse=True)

    return MatchStats(
        avg_goals=avg_goals,
        over25_percentage=over25_pct,
        btts_percentage=btts_pct,
        total_matches=count,
        accuracy=calculate_accuracy(avg_goals, over25_pct, btts_pct),
        confidence=calculate_confidence(count, over25_count, btts_count),
        featured_matches=[fm for _, fm in featured[:FEATURED_MATCH_LIMIT]],
    )


def generate_team_stats(matches: Iterable[Mapping[str, Any]]) -> Dict[str, TeamStats]:
    """Per-team aggregates keyed by competitor id.

    Goals are credited by the home/away qualifier; percentages are over the
    team's own completed matches.
    """

    acc: Dict[str, Dict[str, Any]] = {}
    for match in completed_matches(matches):
        event = match.get("sport_event") or {}
        home, away = _scores(match)
        goals = home + away
        for comp in event.get("competitors") or []:
            team_id = comp.get("id")
            if not team_id:
                continue
            row = acc.setdefault(
                team_id,
                {"name": comp.get("name") or team_id, "matches": 0, "gf": 0, "ga": 0, "btts": 0, "over": 0},
            )
            is_home = comp.get("qualifier") == QUALIFIER_HOME
            row["matches"] += 1
            row["gf"] += home if is_home else away
            row["ga"] += away if is_home else home
            row["btts"] += home > 0 and away > 0
            row["over"] += goals > OVER_UNDER_LINE

    stats: Dict[str, TeamStats] = {}
    for team_id, row in acc.items():
        n = row["matches"]
        stats[team_id] = TeamStats(
            name=row["name"],
            matches=n,
            goals_for=row["gf"],
            goals_against=row["ga"],
            btts_percentage=row["btts"] / n * 100,
            over25_percentage=row["over"] / n * 100,
            avg_goals_for=row["gf"] / n,
            avg_goals_against=row["ga"] / n,
        )
    return stats


def team_stats_frame(team_stats: Mapping[str, TeamStats]) -> pd.DataFrame:
    """Team table ranked by average goals scored (ties: more matches first)."""

    columns = [
        "team_id",
        "name",
        "matches",
        "goals_for",
        "goals_against",
        "avg_goals_for",
        "avg_goals_against",
        "over25_percentage",
        "btts_percentage",
    ]
    if not team_stats:
        return pd.DataFrame(columns=["rank", *columns])

    df = pd.DataFrame.from_records(
        [{"team_id": tid, **row} for tid, row in team_stats.items()]
    )[columns]
    df = df.sort_values(["avg_goals_for", "matches"], ascending=[False, False]).reset_index(drop=True)
    df.insert(0, "rank", range(1, len(df) + 1))
    return df


def compare_teams(team_stats: Mapping[str, TeamStats], team_a: str, team_b: str) -> Dict[str, Any]:
    """Side-by-side stats plus a per-metric difference (a minus b)."""

    if not team_a or not team_b:
        raise ValueError("Two teams are required for a comparison")
    if team_a == team_b:
        raise ValueError("Pick two different teams")
    a, b = team_stats.get(team_a), team_stats.get(team_b)
    if a is None or b is None:
        raise ValueError("No statistics found for the selected teams")

    metrics = (
        "avg_goals_for",
        "avg_goals_against",
        "over25_percentage",
        "btts_percentage",
    )
    return {
        "team_a": a,
        "team_b": b,
        "difference": {m: a[m] - b[m] for m in metrics},
    }


def predict_fixture(team_stats: Mapping[str, TeamStats], home: str, away: str) -> Dict[str, Any]:
    """Combine two teams' over 2.5 and BTTS rates into a pick strength."""

    pair = compare_teams(team_stats, home, away)
    h, a = pair["team_a"], pair["team_b"]

    expected_goals = (
        h["avg_goals_for"] + a["avg_goals_for"] + h["avg_goals_against"] + a["avg_goals_against"]
    ) / 2
    over25 = (h["over25_percentage"] + a["over25_percentage"]) / 2
    btts = (h["btts_percentage"] + a["btts_percentage"]) / 2
    combined = (over25 + btts) / 2

    if combined >= STRONG_PICK_THRESHOLD:
        strength = "strong"
    elif combined >= MEDIUM_PICK_THRESHOLD:
        strength = "medium"
    else:
        strength = "low"

    return {
        "home": h["name"],
        "away": a["name"],
        "expected_goals": expected_goals,
        "over25_probability": over25,
        "btts_probability": btts,
        "combined_probability": combined,
        "strength": strength,
    }


def _int(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def normalize_standings(payload: Mapping[str, Any], standing_type: str = "total") -> List[Standing]:
    """Flatten ``standings[].groups[].group_standings[]`` into Standing rows.

    Only tables of ``standing_type`` are read; rows keep upstream order, and
    rank falls back to position within the flattened list.
    """

    rows: List[Standing] = []
    for table in (payload or {}).get("standings") or []:
        if table.get("type", standing_type) != standing_type:
            continue
        for group in table.get("groups") or []:
            for entry in group.get("group_standings") or []:
                gf = _int(entry.get("goals_for"))
                ga = _int(entry.get("goals_against"))
                goal_diff = entry.get("goal_diff", entry.get("goal_difference"))
                rows.append(
                    Standing(
                        competitor=entry.get("competitor") or {},
                        played=_int(entry.get("played")),
                        won=_int(entry.get("wins", entry.get("won"))),
                        drawn=_int(entry.get("draws", entry.get("drawn"))),
                        lost=_int(entry.get("losses", entry.get("lost"))),
                        goals_for=gf,
                        goals_against=ga,
                        goal_difference=gf - ga if goal_diff is None else _int(goal_diff),
                        points=_int(entry.get("points")),
                        rank=_int(entry.get("position", entry.get("rank"))) or len(rows) + 1,
                    )
                )
    return rows


def leaderboard(leaders_payload: Mapping[str, Any], kind: str) -> List[Dict[str, Any]]:
    """Rows of ``{rank, name, value, subtitle}`` for one leaders list."""

    if kind not in LEADERBOARD_KINDS:
        raise ValueError(f"Unknown leaderboard: {kind}")
    value_key = LEADERBOARD_KINDS[kind]
    leaders = (leaders_payload or {}).get("leaders") or {}

    board: List[Dict[str, Any]] = []
    for idx, row in enumerate(leaders.get(kind) or [], start=1):
        player = row.get("player") or {}
        board.append(
            {
                "rank": idx,
                "name": player.get("name"),
                "value": row.get(value_key, 0),
                "subtitle": (row.get("competitor") or {}).get("name"),
            }
        )
    return board
