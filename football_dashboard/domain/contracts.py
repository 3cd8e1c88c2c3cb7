from typing import Any, Dict, List, NotRequired, Optional, TypedDict


class Category(TypedDict, total=False):
    id: str
    name: str
    country_code: Optional[str]


class Competition(TypedDict, total=False):
    id: str
    name: str
    category: Category
    type: str
    gender: str


class Season(TypedDict, total=False):
    id: str
    name: str
    start_date: str
    end_date: str
    year: str
    competition_id: str
    disabled: bool


class Competitor(TypedDict, total=False):
    id: str
    name: str
    country: Optional[str]
    country_code: Optional[str]
    abbreviation: Optional[str]
    # "home" / "away" inside a sport event
    qualifier: Optional[str]


class Venue(TypedDict, total=False):
    id: str
    name: str
    city_name: str
    country_name: str
    country_code: Optional[str]


class SportEvent(TypedDict, total=False):
    id: str
    start_time: str
    start_time_confirmed: bool
    competitors: List[Competitor]
    venue: Optional[Venue]
    status: str
    match_status: str


class SportEventStatus(TypedDict, total=False):
    status: str
    match_status: str
    home_score: Optional[float]
    away_score: Optional[int]
    winner_id: Optional[str]


class MatchSummary(TypedDict, total=False):
    sport_event: SportEvent
    sport_event_status: SportEventStatus
    statistics: Optional[Dict[str, Any]]


class Standing(TypedDict):
    competitor: Competitor
    played: int
    won: int
    drawn: int
    lost: int
    goals_for: int
    goals_against: int
    goal_difference: int
    points: int
    rank: int


class ApiResponse(TypedDict):
    success: bool
    data: Any
    error: Optional[str]
    timestamp: str
    code: NotRequired[str]
    cached: NotRequired[bool]
    attempts: NotRequired[int]


class FeaturedMatch(TypedDict):
    home_team: str
    away_team: str
    home_score: int
    away_score: int
    total_goals: int
    date: str


class MatchStats(TypedDict):
    avg_goals: float
    over25_percentage: float
    btts_percentage: float
    total_matches: int
    accuracy: float
    confidence: float
    featured_matches: List[FeaturedMatch]


class TeamStats(TypedDict):
    name: str
    matches: int
    goals_for: int
    goals_against: int
    btts_percentage: float
    over25_percentage: float
    avg_goals_for: float
    avg_goals_against: float
