from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from flask import Blueprint, request

from .. import config, settings
from ..app_utils import AdaptiveTimeoutController, make_error, relay_json
from ..constants import (
    PROXY_URL_PREFIX,
    UPSTREAM_DAILY_SCHEDULE,
    UPSTREAM_DAILY_SUMMARIES,
    UPSTREAM_LIVE_SCHEDULE,
)
from ..demo_data import (
    demo_competitions,
    demo_daily_schedule,
    demo_live_schedule,
    demo_season_competitors,
    demo_seasons,
    demo_standings,
)
from ..errors import APIError
from ..logging_utils import RateLimitedLogger, warn_once
from ..net_retry import fetch_with_backoff
from ..utils import create_retry_session
from ..validators import validate_date, validate_resource_id

bp = Blueprint("sportradar_api", __name__, url_prefix=PROXY_URL_PREFIX)
log = logging.getLogger(__name__)
_demo_log = RateLimitedLogger(log, window_seconds=60)

SOURCE = "SportradarProxy"

_session_singleton = None
_timeout_singleton: Optional[AdaptiveTimeoutController] = None


def _get_session():
    global _session_singleton
    if _session_singleton is None:
        _session_singleton = create_retry_session()
    return _session_singleton


def _get_timeout_controller() -> AdaptiveTimeoutController:
    global _timeout_singleton
    if _timeout_singleton is None:
        _timeout_singleton = AdaptiveTimeoutController(
            base_timeout=settings.SPORTRADAR_TIMEOUT_MS / 1000.0,
            max_timeout=config.UPSTREAM_MAX_TIMEOUT,
        )
    return _timeout_singleton


def proxy_status() -> dict:
    return {
        "demo_fallback": settings.SPORTRADAR_DEMO_FALLBACK,
        "api_key_configured": bool(settings.SPORTRADAR_API_KEY),
        "upstream": _get_timeout_controller().get_metrics(),
    }


def _api_key() -> Optional[str]:
    key = (request.args.get("api_key") or "").strip() or settings.SPORTRADAR_API_KEY
    if not key:
        warn_once(
            "proxy_api_key_missing",
            "No Sportradar API key configured (SPORTRADAR_API_KEY / SPORTRADAR_API_KEY_FILE)",
            logger=log,
        )
    return key or None


def _forward(upstream_path: str, demo: Optional[Callable[[], Any]] = None):
    """GET ``SPORTRADAR_BASE + upstream_path + .json`` and relay the JSON body."""

    key = _api_key()
    if not key:
        return make_error(
            APIError(SOURCE, "API_KEY_MISSING", "A Sportradar API key is required."),
            "Missing API key",
            status_code=401,
        )

    controller = _get_timeout_controller()
    url = f"{settings.SPORTRADAR_BASE}{upstream_path}.json"
    try:
        response, _ = fetch_with_backoff(
            _get_session(),
            url,
            params={"api_key": key},
            timeout=controller.get_timeout(),
            max_attempts=1,
            source=SOURCE,
            logger=log,
        )
        try:
            payload = response.json()
        except ValueError:
            raise APIError(SOURCE, "INVALID_PAYLOAD", "Upstream returned a non-JSON body.") from None
    except APIError as exc:
        if exc.code == "TIMEOUT":
            controller.record_failure()

        if settings.SPORTRADAR_DEMO_FALLBACK and demo is not None:
            _demo_log.warning(
                ("demo", upstream_path),
                "Serving demo payload for %s after upstream error [%s]",
                upstream_path,
                exc.code,
            )
            return relay_json(demo(), "demo")

        status_code = 504 if exc.code == "TIMEOUT" else 502
        return make_error(exc, "Upstream request failed", status_code=status_code)

    controller.record_success()
    return relay_json(payload, "upstream")


def _bad_request(exc: APIError):
    return make_error(exc, "Invalid request", status_code=400)


@bp.get("/competitions")
def competitions():
    return _forward("/competitions", demo_competitions)


@bp.get("/competitions/<competition_id>/seasons")
def competition_seasons(competition_id: str):
    try:
        cid = validate_resource_id(competition_id, "competition_id")
    except APIError as exc:
        return _bad_request(exc)
    return _forward(f"/competitions/{cid}/seasons", lambda: demo_seasons(cid))


@bp.get("/schedules/daily/<date>")
def daily_schedule(date: str):
    try:
        day = validate_date(date)
    except APIError as exc:
        return _bad_request(exc)
    return _forward(UPSTREAM_DAILY_SCHEDULE.format(date=day), lambda: demo_daily_schedule(day))


@bp.get("/schedules/daily/<date>/summaries")
def daily_summaries(date: str):
    try:
        day = validate_date(date)
    except APIError as exc:
        return _bad_request(exc)
    return _forward(UPSTREAM_DAILY_SUMMARIES.format(date=day))


@bp.get("/schedules/live")
def live_schedule():
    return _forward(UPSTREAM_LIVE_SCHEDULE, demo_live_schedule)


@bp.get("/seasons/<season_id>/competitors")
def season_competitors(season_id: str):
    try:
        sid = validate_resource_id(season_id, "season_id")
    except APIError as exc:
        return _bad_request(exc)
    return _forward(f"/seasons/{sid}/competitors", demo_season_competitors)


@bp.get("/seasons/<season_id>/standings")
def season_standings(season_id: str):
    try:
        sid = validate_resource_id(season_id, "season_id")
    except APIError as exc:
        return _bad_request(exc)
    return _forward(f"/seasons/{sid}/standings", demo_standings)


@bp.get("/<path:subpath>")
def passthrough(subpath: str):
    """Relay any other client endpoint unchanged; no demo payload exists for these."""

    try:
        segments = [validate_resource_id(seg, "path segment") for seg in subpath.split("/")]
    except APIError as exc:
        return _bad_request(exc)
    return _forward("/" + "/".join(segments))
