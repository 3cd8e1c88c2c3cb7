from __future__ import annotations

import time
from typing import Any, Callable, Dict, List, Mapping, Optional

from .. import config
from ..config import setup_logger
from ..demo_data import DemoDataGenerator
from ..domain.contracts import MatchStats, MatchSummary, TeamStats
from ..errors import APIError
from ..sportradar_client import SOURCE, SportradarClient
from ..stats_calculator import analyze_matches, generate_team_stats
from .dashboard import ResourceState

logger = setup_logger(__name__)

DEMO_NOTICE = "Demo data in use - API unavailable"
DEFAULT_SEASON_LABEL = "2024/25"


class FootballStatsService:
    """Competition picker and season statistics, falling back to demo data."""

    def __init__(
        self,
        client: SportradarClient,
        demo: Optional[DemoDataGenerator] = None,
        *,
        clock: Callable[[], float] = time.monotonic,
        clear_after: float = config.ERROR_CLEAR_AFTER,
    ) -> None:
        self.client = client
        self.demo = demo or DemoDataGenerator()
        self.competitions: List[Dict[str, str]] = []
        self.selected_competition = ""
        self.state = ResourceState(data=[], clock=clock, clear_after=clear_after)
        self.using_demo = False

    @property
    def match_data(self) -> List[MatchSummary]:
        return self.state.data or []

    @property
    def error(self) -> Optional[str]:
        return self.state.error

    @property
    def loading(self) -> bool:
        return self.state.loading

    @property
    def has_data(self) -> bool:
        return bool(self.match_data)

    @property
    def stats(self) -> Optional[MatchStats]:
        return analyze_matches(self.match_data) if self.match_data else None

    @property
    def team_stats(self) -> Dict[str, TeamStats]:
        return generate_team_stats(self.match_data) if self.match_data else {}

    def _show(self, message: str) -> None:
        self.state.set_error(message)

    @staticmethod
    def _unwrap(envelope) -> Any:
        if not envelope["success"]:
            raise APIError.from_envelope(envelope, SOURCE)
        return envelope["data"]

    def load_competitions(self) -> List[Dict[str, str]]:
        """Competitions that have a current season, keyed by that season id."""

        self.state.start()
        try:
            payload = self._unwrap(self.client.get_competitions())

            competitions = []
            for comp in payload.get("competitions") or []:
                season = comp.get("current_season")
                if not isinstance(season, Mapping) or not season.get("id"):
                    continue
                label = season.get("name") or season.get("year") or DEFAULT_SEASON_LABEL
                competitions.append({"id": season["id"], "name": f"{comp['name']} ({label})"})

            if not competitions:
                raise APIError(SOURCE, "EMPTY_RESULT", "No competitions with an active season were found")

            self.competitions = competitions
            self.using_demo = False
            self.state.succeed(self.match_data)
        except APIError as exc:
            logger.warning("competitions unavailable, using demo data: [%s] %s", exc.code, exc.message)
            self.competitions = self.demo.generate_competitions()
            self.using_demo = True
            self.state.succeed(self.match_data)
            self._show(DEMO_NOTICE)
        return self.competitions

    def load_stats(self, competition_id: Optional[str] = None) -> Optional[MatchStats]:
        if competition_id:
            self.selected_competition = competition_id
        if not self.selected_competition:
            self._show("Please select a competition")
            return None

        season_id = self.selected_competition
        self.state.start()
        try:
            summaries = self._unwrap(self.client.get_season_summaries(season_id)).get("summaries") or []
            if not summaries:
                raise APIError(SOURCE, "EMPTY_RESULT", "No matches found for this season")
            self.using_demo = False
            self.state.succeed(summaries)
        except APIError as exc:
            logger.warning("season %s unavailable, using demo data: [%s] %s", season_id, exc.code, exc.message)
            self.using_demo = True
            self.state.succeed(self.demo.generate_matches(season_id))
            self._show(DEMO_NOTICE)
        return self.stats

    def clear_cache(self) -> None:
        self.client.clear_cache()
        self._show("Cache cleared")
