from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from .. import config
from ..config import setup_logger
from ..domain.contracts import ApiResponse
from ..sportradar_client import INVALID_FORMAT_MESSAGE, SportradarClient
from ..stats_calculator import normalize_standings
from ..utils import sort_events_by_time
from ..validators import validate_poll_interval

logger = setup_logger(__name__)

RESOURCES = (
    "competitions",
    "seasons",
    "live_matches",
    "daily_matches",
    "match_summaries",
    "standings",
)


@dataclass
class ResourceState:
    """Data, loading flag and error text for one dashboard collection.

    The error text hides itself ``clear_after`` seconds after it was set;
    ``status`` keeps saying ``error`` until the next load or ``clear_error``.
    """

    data: Any = field(default_factory=list)
    loading: bool = False
    status: str = "idle"
    last_fetch: Optional[datetime] = None
    clear_after: float = field(default=config.ERROR_CLEAR_AFTER, repr=False)
    clock: Callable[[], float] = field(default=time.monotonic, repr=False)
    _error: Optional[str] = field(default=None, init=False, repr=False)
    _error_at: float = field(default=0.0, init=False, repr=False)

    @property
    def error(self) -> Optional[str]:
        if self._error is not None and self.clock() - self._error_at >= self.clear_after:
            self._error = None
        return self._error

    def set_error(self, message: str) -> None:
        self._error = message
        self._error_at = self.clock()

    def clear_error(self) -> None:
        self._error = None
        if self.status == "error":
            self.status = "idle"

    def start(self) -> None:
        self.loading = True
        self.status = "loading"
        self._error = None

    def succeed(self, data: Any) -> None:
        self.data = data
        self.loading = False
        self.status = "success"
        self._error = None
        self.last_fetch = datetime.now(timezone.utc)

    def abandon(self, status: str) -> None:
        """Drop an in-progress load that nothing will complete."""
        self.loading = False
        self.status = status

    def fail(self, message: str) -> None:
        self.loading = False
        self.status = "error"
        self.set_error(message)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "data": self.data,
            "loading": self.loading,
            "error": self.error,
            "status": self.status,
            "last_fetch": self.last_fetch.isoformat() if self.last_fetch else None,
        }


class LivePoller:
    """Calls ``fn`` every ``interval`` seconds on a daemon thread until stopped."""

    def __init__(self, fn: Callable[[], Any], interval: float, name: str = "live-poller") -> None:
        self.fn = fn
        self.interval = float(interval)
        self.name = name
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self.ticks = 0

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name=self.name, daemon=True)
        self._thread.start()
        logger.info("%s started (every %.0fs)", self.name, self.interval)

    def _run(self) -> None:
        while not self._stop.wait(self.interval):
            try:
                self.fn()
            except Exception:
                # a failed tick never ends the thread
                logger.exception("%s tick failed", self.name)
            self.ticks += 1

    def stop(self, timeout: float = 1.0) -> None:
        self._stop.set()
        thread, self._thread = self._thread, None
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
            logger.info("%s stopped", self.name)


class DashboardService:
    """Holds the dashboard collections and loads them through the client."""

    def __init__(
        self,
        client: SportradarClient,
        *,
        clock: Callable[[], float] = time.monotonic,
        clear_after: float = config.ERROR_CLEAR_AFTER,
    ) -> None:
        self.client = client
        self._lock = threading.RLock()
        self.states: Dict[str, ResourceState] = {
            name: ResourceState(clock=clock, clear_after=clear_after) for name in RESOURCES
        }
        self.selected_competition: Optional[Dict[str, Any]] = None
        self.selected_season: Optional[Dict[str, Any]] = None
        self.is_connected = False
        # latest failed load per resource
        self._failed: Dict[str, Callable[[], Any]] = {}
        self._generations: Dict[str, int] = dict.fromkeys(RESOURCES, 0)
        self._poller: Optional[LivePoller] = None

    def __getattr__(self, name: str) -> ResourceState:
        states = self.__dict__.get("states") or {}
        if name in states:
            return states[name]
        raise AttributeError(name)

    @property
    def global_loading(self) -> bool:
        return any(state.loading for state in self.states.values())

    def _load(
        self,
        resource: str,
        call: Callable[[], ApiResponse],
        extract: Callable[[Any], Any],
        retry: Callable[[], Any],
        empty_message: Optional[str] = None,
    ) -> ApiResponse:
        state = self.states[resource]
        with self._lock:
            previous_status = "idle" if state.status == "loading" else state.status
            generation = self._generations[resource] = self._generations[resource] + 1
            state.start()

        envelope = call()

        with self._lock:
            if envelope.get("code") == "CANCELLED":
                # a newer load for this resource owns the state
                if self._generations[resource] == generation:
                    state.abandon(previous_status)
                return envelope

            if envelope["success"]:
                try:
                    data = extract(envelope["data"])
                except (AttributeError, KeyError, TypeError, ValueError):
                    logger.exception("load %s returned an unreadable payload", resource)
                    envelope = {
                        **envelope,
                        "success": False,
                        "data": None,
                        "error": INVALID_FORMAT_MESSAGE,
                        "code": "INVALID_PAYLOAD",
                    }
                else:
                    if empty_message and not data:
                        envelope = {**envelope, "success": False, "error": empty_message, "code": "EMPTY_RESULT"}
                    else:
                        state.succeed(data)
                        self.is_connected = True
                        self._failed.pop(resource, None)
                        return envelope

            state.fail(envelope.get("error") or "Unknown error occurred")
            if envelope.get("code") != "EMPTY_RESULT":
                self.is_connected = False
            self._failed[resource] = retry
            logger.warning("load %s failed: %s", resource, envelope.get("error"))
            return envelope

    def load_competitions(self) -> ApiResponse:
        return self._load(
            "competitions",
            self.client.get_competitions,
            lambda payload: payload.get("competitions") or [],
            self.load_competitions,
        )

    def load_competition_seasons(self, competition_id: str) -> ApiResponse:
        return self._load(
            "seasons",
            lambda: self.client.get_competition_seasons(competition_id),
            lambda payload: payload.get("seasons") or [],
            lambda: self.load_competition_seasons(competition_id),
            empty_message="No seasons found for this competition",
        )

    def load_live_matches(self) -> ApiResponse:
        return self._load(
            "live_matches",
            self.client.get_live_schedules,
            lambda payload: sort_events_by_time(payload.get("sport_events") or []),
            self.load_live_matches,
        )

    def load_daily_matches(self, date: str) -> ApiResponse:
        return self._load(
            "daily_matches",
            lambda: self.client.get_daily_schedules(date),
            lambda payload: sort_events_by_time(payload.get("sport_events") or []),
            lambda: self.load_daily_matches(date),
        )

    def load_match_summaries(self, date: str) -> ApiResponse:
        return self._load(
            "match_summaries",
            lambda: self.client.get_daily_summaries(date),
            lambda payload: payload.get("summaries") or [],
            lambda: self.load_match_summaries(date),
        )

    def load_season_standings(self, season_id: str) -> ApiResponse:
        return self._load(
            "standings",
            lambda: self.client.get_season_standings(season_id),
            normalize_standings,
            lambda: self.load_season_standings(season_id),
        )

    def retry_last_failed(self) -> int:
        """Re-run the latest failed load of each resource; return how many ran."""

        with self._lock:
            pending, self._failed = list(self._failed.values()), {}
        for op in pending:
            op()
        return len(pending)

    def clear_error(self, key: Optional[str] = None) -> None:
        with self._lock:
            if key is None:
                for state in self.states.values():
                    state.clear_error()
            elif key in self.states:
                self.states[key].clear_error()
            else:
                raise KeyError(key)

    def select_competition(self, competition: Optional[Dict[str, Any]]) -> None:
        self.selected_competition = competition
        self.selected_season = None

    def select_season(self, season: Optional[Dict[str, Any]]) -> None:
        self.selected_season = season

    def set_api_key(self, api_key: Optional[str]) -> None:
        self.client.set_api_key(api_key)
        self.is_connected = False

    def clear_cache(self, key: Optional[str] = None) -> None:
        self.client.clear_cache(key)

    def cache_stats(self) -> Dict[str, int]:
        return self.client.cache_stats()

    def start_live_polling(self, interval: Any = None) -> LivePoller:
        seconds, warnings = validate_poll_interval(interval, config.LIVE_POLL_SECONDS)
        if warnings:
            logger.info("live poll interval adjusted to %ss (%s)", seconds, ", ".join(warnings))
        self.stop_live_polling()
        self._poller = LivePoller(self.load_live_matches, seconds)
        self._poller.start()
        return self._poller

    def stop_live_polling(self) -> None:
        poller, self._poller = self._poller, None
        if poller is not None:
            poller.stop()

    def snapshot(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "is_connected": self.is_connected,
                "global_loading": self.global_loading,
                "selected_competition": self.selected_competition,
                "selected_season": self.selected_season,
                "cache": self.cache_stats(),
                **{name: state.as_dict() for name, state in self.states.items()},
            }
