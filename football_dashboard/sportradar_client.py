"""Client for the Sportradar proxy endpoints.

Every call goes through :meth:`SportradarClient.request`, which layers a
read-through TTL cache, single-in-flight cancellation per cache key, bounded
exponential-backoff retry and payload validation over a ``requests`` session,
and always answers with an :class:`~football_dashboard.domain.contracts.ApiResponse`
envelope unless the caller passes ``safe=False``.
"""
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, Mapping, Optional

from . import config, settings
from .cache import TTLCache
from .config import setup_logger
from .constants import API_ENDPOINTS, cache_ttl_for
from .domain.contracts import ApiResponse
from .errors import APIError
from .inflight import InFlightRegistry
from .logging_utils import warn_once
from .net_retry import fetch_with_backoff
from .utils import create_retry_session
from .validators import (
    validate_competitions_payload,
    validate_competitors_payload,
    validate_date,
    validate_object_payload,
    validate_resource_id,
    validate_seasons_payload,
    validate_sport_events_payload,
    validate_standings_payload,
    validate_summaries_payload,
)

logger = setup_logger(__name__)

SOURCE = "SportradarAPI"
INVALID_FORMAT_MESSAGE = "The server response format is invalid"
MAX_BATCH_WORKERS = 8

Validator = Callable[[Any], Any]

_MISS = object()


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class SportradarClient:
    """Synchronous, thread-safe client; construct one per process and inject it."""

    def __init__(
        self,
        api_key: Optional[str],
        base_url: Optional[str] = None,
        *,
        session: Any = None,
        cache: Optional[TTLCache] = None,
        timeout: Optional[float] = None,
        max_attempts: Optional[int] = None,
        retry_delay: Optional[float] = None,
    ) -> None:
        self.api_key = (api_key or "").strip() or None
        self.base_url = (base_url or settings.PROXY_BASE_URL).rstrip("/")
        self.session = session if session is not None else create_retry_session()
        self.cache = cache if cache is not None else TTLCache()
        self.timeout = config.API_TIMEOUT if timeout is None else float(timeout)
        self.max_attempts = config.API_MAX_RETRIES if max_attempts is None else int(max_attempts)
        self.retry_delay = config.RETRY_DELAY_BASE if retry_delay is None else float(retry_delay)
        self._inflight = InFlightRegistry()

    # ---- envelope helpers ----

    @staticmethod
    def _ok(data: Any, *, cached: bool = False, attempts: Optional[int] = None) -> ApiResponse:
        envelope: ApiResponse = {
            "success": True,
            "data": data,
            "error": None,
            "timestamp": _now_iso(),
            "cached": cached,
        }
        if attempts is not None:
            envelope["attempts"] = attempts
        return envelope

    @staticmethod
    def _fail(error: APIError, safe: bool = True) -> ApiResponse:
        if not safe:
            raise error
        return error.to_envelope(_now_iso())

    @staticmethod
    def cache_key(endpoint: str, params: Optional[Mapping[str, Any]] = None) -> str:
        if not params:
            return endpoint
        query = "&".join(f"{k}={params[k]}" for k in sorted(params))
        return f"{endpoint}?{query}"

    # ---- core ----

    def request(
        self,
        endpoint: str,
        *,
        params: Optional[Mapping[str, Any]] = None,
        use_cache: bool = True,
        cache_type: str = "static",
        ttl: Optional[float] = None,
        validator: Optional[Validator] = None,
        safe: bool = True,
    ) -> ApiResponse:
        key = self.cache_key(endpoint, params)

        if use_cache:
            hit = self.cache.get(key, _MISS)
            if hit is not _MISS:
                logger.debug("cache hit %s", key)
                return self._ok(hit, cached=True)

        if not self.api_key:
            warn_once(
                "sportradar_api_key_missing",
                "Sportradar API key is not configured; requests are refused",
                logger=logger,
            )
            return self._fail(
                APIError(SOURCE, "API_KEY_MISSING", "A Sportradar API key is required."), safe
            )

        query: Dict[str, Any] = dict(params or {})
        query["api_key"] = self.api_key

        token = self._inflight.begin(key)
        try:
            response, attempts = fetch_with_backoff(
                self.session,
                f"{self.base_url}{endpoint}",
                params=query,
                timeout=self.timeout,
                max_attempts=self.max_attempts,
                base_delay=self.retry_delay,
                token=token,
                source=SOURCE,
                logger=logger,
            )
            try:
                payload = response.json()
            except ValueError:
                raise APIError(SOURCE, "INVALID_PAYLOAD", INVALID_FORMAT_MESSAGE, "not JSON") from None

            if validator is not None:
                try:
                    payload = validator(payload)
                except ValueError as exc:
                    logger.warning("invalid payload from %s: %s", endpoint, exc)
                    raise APIError(SOURCE, "INVALID_PAYLOAD", INVALID_FORMAT_MESSAGE, str(exc)) from None

            # A newer call for the same key may have started while we parsed.
            if token.cancelled:
                raise APIError(SOURCE, "CANCELLED", "The request was superseded by a newer one.", key)

            if use_cache:
                self.cache.set(key, payload, cache_ttl_for(cache_type) if ttl is None else ttl)
            return self._ok(payload, attempts=attempts)
        except APIError as exc:
            if exc.code != "CANCELLED":
                logger.error("request %s failed: [%s] %s", endpoint, exc.code, exc.message)
            return self._fail(exc, safe)
        finally:
            self._inflight.finish(token)

    def _get(
        self,
        name: str,
        *,
        cache_type: str = "static",
        use_cache: bool = True,
        validator: Optional[Validator] = validate_object_payload,
        safe: bool = True,
        **path_params: Any,
    ) -> ApiResponse:
        try:
            values = {
                key: validate_date(value) if key == "date" else validate_resource_id(value, key)
                for key, value in path_params.items()
            }
        except APIError as exc:
            return self._fail(exc, safe)
        endpoint = API_ENDPOINTS[name].format(**values)
        return self.request(
            endpoint,
            use_cache=use_cache,
            cache_type=cache_type,
            validator=validator,
            safe=safe,
        )

    # ---- competitions ----

    def get_competitions(self, **kw: Any) -> ApiResponse:
        return self._get("competitions", validator=validate_competitions_payload, **kw)

    def get_competition_info(self, competition_id: str, **kw: Any) -> ApiResponse:
        return self._get("competition_info", id=competition_id, **kw)

    def get_competition_seasons(self, competition_id: str, **kw: Any) -> ApiResponse:
        return self._get(
            "competition_seasons",
            id=competition_id,
            cache_type="season",
            validator=validate_seasons_payload,
            **kw,
        )

    # ---- seasons ----

    def get_season_info(self, season_id: str, **kw: Any) -> ApiResponse:
        return self._get("season_info", id=season_id, cache_type="season", **kw)

    def get_season_standings(self, season_id: str, **kw: Any) -> ApiResponse:
        return self._get(
            "season_standings",
            id=season_id,
            cache_type="standings",
            validator=validate_standings_payload,
            **kw,
        )

    def get_season_schedule(self, season_id: str, **kw: Any) -> ApiResponse:
        return self._get("season_schedule", id=season_id, cache_type="season", **kw)

    def get_season_competitors(self, season_id: str, **kw: Any) -> ApiResponse:
        return self._get(
            "season_competitors",
            id=season_id,
            cache_type="competitor",
            validator=validate_competitors_payload,
            **kw,
        )

    def get_season_summaries(self, season_id: str, **kw: Any) -> ApiResponse:
        return self._get(
            "season_summaries",
            id=season_id,
            cache_type="season",
            validator=validate_summaries_payload,
            **kw,
        )

    def get_season_leaders(self, season_id: str, **kw: Any) -> ApiResponse:
        return self._get("season_leaders", id=season_id, cache_type="season", **kw)

    def get_seasonal_competitor_statistics(
        self, season_id: str, competitor_id: str, **kw: Any
    ) -> ApiResponse:
        return self._get(
            "season_competitor_statistics",
            season_id=season_id,
            competitor_id=competitor_id,
            cache_type="competitor",
            **kw,
        )

    def get_season_probabilities(self, season_id: str, **kw: Any) -> ApiResponse:
        return self._get("season_probabilities", id=season_id, cache_type="season", **kw)

    # ---- schedules ----

    def get_live_schedules(self, **kw: Any) -> ApiResponse:
        return self._get(
            "live_schedules",
            cache_type="live",
            use_cache=False,
            validator=validate_sport_events_payload,
            **kw,
        )

    def get_live_summaries(self, **kw: Any) -> ApiResponse:
        return self._get(
            "live_summaries",
            cache_type="live",
            use_cache=False,
            validator=validate_summaries_payload,
            **kw,
        )

    def get_live_timelines(self, **kw: Any) -> ApiResponse:
        return self._get("live_timelines", cache_type="live", use_cache=False, **kw)

    def get_daily_schedules(self, date: str, **kw: Any) -> ApiResponse:
        return self._get(
            "daily_schedules",
            date=date,
            cache_type="daily",
            validator=validate_sport_events_payload,
            **kw,
        )

    def get_daily_summaries(self, date: str, **kw: Any) -> ApiResponse:
        return self._get(
            "daily_summaries",
            date=date,
            cache_type="daily",
            validator=validate_summaries_payload,
            **kw,
        )

    # ---- competitors / players ----

    def get_competitor_profile(self, competitor_id: str, **kw: Any) -> ApiResponse:
        return self._get("competitor_profile", id=competitor_id, cache_type="competitor", **kw)

    def get_competitor_schedules(self, competitor_id: str, **kw: Any) -> ApiResponse:
        return self._get("competitor_schedules", id=competitor_id, cache_type="competitor", **kw)

    def get_competitor_summaries(self, competitor_id: str, **kw: Any) -> ApiResponse:
        return self._get(
            "competitor_summaries",
            id=competitor_id,
            cache_type="competitor",
            validator=validate_summaries_payload,
            **kw,
        )

    def get_competitor_versus(self, competitor_id: str, other_id: str, **kw: Any) -> ApiResponse:
        return self._get(
            "competitor_versus",
            id=competitor_id,
            other_id=other_id,
            cache_type="competitor",
            **kw,
        )

    def get_player_profile(self, player_id: str, **kw: Any) -> ApiResponse:
        return self._get("player_profile", id=player_id, cache_type="competitor", **kw)

    # ---- sport events ----

    def get_sport_event_summary(self, event_id: str, **kw: Any) -> ApiResponse:
        return self._get("sport_event_summary", id=event_id, cache_type="live", **kw)

    def get_sport_event_timeline(self, event_id: str, **kw: Any) -> ApiResponse:
        return self._get("sport_event_timeline", id=event_id, cache_type="live", **kw)

    def get_sport_event_lineups(self, event_id: str, **kw: Any) -> ApiResponse:
        return self._get("sport_event_lineups", id=event_id, cache_type="daily", **kw)

    def get_sport_event_fun_facts(self, event_id: str, **kw: Any) -> ApiResponse:
        return self._get("sport_event_fun_facts", id=event_id, cache_type="daily", **kw)

    def get_sport_event_probabilities(self, event_id: str, **kw: Any) -> ApiResponse:
        return self._get("sport_event_probabilities", id=event_id, cache_type="daily", **kw)

    def get_live_probabilities(self, **kw: Any) -> ApiResponse:
        return self._get("live_probabilities", cache_type="live", use_cache=False, **kw)

    def get_batch_live_data(self, match_ids: Iterable[str]) -> Dict[str, Dict[str, ApiResponse]]:
        """Fetch summary and timeline for each match concurrently."""

        ids = list(dict.fromkeys(match_ids))
        if not ids:
            return {}

        results: Dict[str, Dict[str, ApiResponse]] = {mid: {} for mid in ids}
        workers = min(MAX_BATCH_WORKERS, 2 * len(ids))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="sr-batch") as pool:
            futures = {}
            for mid in ids:
                futures[pool.submit(self.get_sport_event_summary, mid)] = (mid, "summary")
                futures[pool.submit(self.get_sport_event_timeline, mid)] = (mid, "timeline")
            for future, (mid, part) in futures.items():
                results[mid][part] = future.result()
        return results

    # ---- housekeeping ----

    def clear_cache(self, key: Optional[str] = None) -> None:
        if key is None:
            self.cache.clear()
        else:
            self.cache.delete(key)

    def set_api_key(self, api_key: Optional[str]) -> None:
        """Swap the key; cached payloads fetched with the old key are dropped."""

        self.api_key = (api_key or "").strip() or None
        self.cache.clear()
        logger.info("Sportradar API key %s", "updated" if self.api_key else "cleared")

    def cache_stats(self) -> Dict[str, int]:
        return self.cache.stats()

    def cancel_all(self) -> None:
        self._inflight.cancel_all()

    def close(self) -> None:
        self.cancel_all()
        close = getattr(self.session, "close", None)
        if callable(close):
            close()


__all__ = ["SportradarClient", "INVALID_FORMAT_MESSAGE"]
