"""
Utility functions for the Football Dashboard
Date helpers, event list helpers and HTTP session construction
"""

import logging
from collections import defaultdict
from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Optional
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .constants import LIVE_STATUS


logger = logging.getLogger(__name__)

_DEFAULT_ALLOWED_METHODS: frozenset[str] = frozenset(["HEAD", "GET", "OPTIONS"])
_SECRET_PARAMS = frozenset({"api_key", "api_token", "apikey"})


def format_date(value: date) -> str:
    """Return ``value`` as YYYY-MM-DD."""
    return value.strftime("%Y-%m-%d")


def get_today_date(today: Optional[date] = None) -> str:
    return format_date(today or datetime.now(timezone.utc).date())


def get_yesterday_date(today: Optional[date] = None) -> str:
    base = today or datetime.now(timezone.utc).date()
    return format_date(base - timedelta(days=1))


def get_tomorrow_date(today: Optional[date] = None) -> str:
    base = today or datetime.now(timezone.utc).date()
    return format_date(base + timedelta(days=1))


def get_date_range(start: date, end: date) -> List[str]:
    """Inclusive list of YYYY-MM-DD strings from ``start`` to ``end``."""
    days: List[str] = []
    current = start
    while current <= end:
        days.append(format_date(current))
        current += timedelta(days=1)
    return days


def parse_iso(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO timestamp (``Z`` or offset) into an aware UTC datetime."""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def filter_live_matches(events: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [event for event in events if event.get("status") == LIVE_STATUS]


def sort_events_by_time(events: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Return a new list ordered by kickoff; unparseable times sort last."""
    far_future = datetime.max.replace(tzinfo=timezone.utc)
    return sorted(events, key=lambda event: parse_iso(event.get("start_time")) or far_future)


def group_events_by_date(events: Iterable[Dict[str, Any]]) -> Dict[str, List[Dict[str, Any]]]:
    groups: Dict[str, List[Dict[str, Any]]] = defaultdict(list)
    for event in events:
        day = str(event.get("start_time") or "").split("T")[0]
        groups[day].append(event)
    return dict(groups)


def find_competitor(event: Dict[str, Any], qualifier: str) -> Optional[Dict[str, Any]]:
    """Return the competitor with the given qualifier (``home``/``away``)."""
    for competitor in event.get("competitors") or []:
        if isinstance(competitor, dict) and competitor.get("qualifier") == qualifier:
            return competitor
    return None


def scrub_url(url: Optional[str]) -> str:
    """Mask secret query params so URLs can be logged."""
    if not url:
        return ""
    try:
        parts = urlsplit(str(url))
        query = [
            (key, "***" if key.lower() in _SECRET_PARAMS else value)
            for key, value in parse_qsl(parts.query, keep_blank_values=True)
        ]
        return urlunsplit((parts.scheme, parts.netloc, parts.path, urlencode(query), parts.fragment))
    except ValueError:
        return str(url)


def create_retry_session(
    backoff_factor: float = 0.0,
    status_forcelist: Iterable[int] | None = None,
) -> requests.Session:
    """Create a :class:`requests.Session` with JSON headers.

    Transport-level retries stay disabled; attempts are counted and backed off
    by ``net_retry.fetch_with_backoff`` so they can be cancelled.
    """

    retry_adapter = HTTPAdapter(
        max_retries=Retry(
            total=0,
            connect=0,
            read=0,
            backoff_factor=backoff_factor,
            status_forcelist=tuple(status_forcelist or ()),
            allowed_methods=_DEFAULT_ALLOWED_METHODS,
            raise_on_status=False,
        )
    )

    session = requests.Session()
    session.headers.update({"Accept": "application/json"})
    session.mount("https://", retry_adapter)
    session.mount("http://", retry_adapter)
    return session
