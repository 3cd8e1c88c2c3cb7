import re
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional

from .config import setup_logger
from .constants import (
    LIVE_POLL_MAX_SECONDS,
    LIVE_POLL_MIN_SECONDS,
    QUALIFIER_AWAY,
    QUALIFIER_HOME,
)
from .errors import APIError

logger = setup_logger(__name__)

DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_ID_PATTERN = re.compile(r"^[A-Za-z0-9:_\-.]+$")


class ValidationWarning(str):
    """Lightweight tag for soft validation warnings."""
    pass


def validate_date(value: Optional[str]) -> str:
    """Return ``value`` when it is a real calendar date in YYYY-MM-DD form.

    Raises APIError(INVALID_DATE) otherwise, so callers can fail before any
    network round-trip.
    """
    text = (value or "").strip() if isinstance(value, str) else ""
    if not DATE_PATTERN.match(text):
        raise APIError(
            "Validator",
            "INVALID_DATE",
            f"Invalid date format: {value}. Use YYYY-MM-DD.",
        )
    try:
        datetime.strptime(text, "%Y-%m-%d")
    except ValueError:
        raise APIError(
            "Validator",
            "INVALID_DATE",
            f"Invalid date: {value}. Use YYYY-MM-DD.",
        ) from None
    return text


def is_valid_date(value: Optional[str]) -> bool:
    try:
        validate_date(value)
    except APIError:
        return False
    return True


def validate_resource_id(value: Any, name: str = "id") -> str:
    """Normalize a provider id (e.g. ``sr:season:118689``) used as a path segment."""

    text = str(value).strip() if value is not None else ""
    if not text or not _ID_PATTERN.match(text) or not text.strip("."):
        raise APIError("Validator", "INVALID_ID", f"Invalid {name}: {value!r}")
    return text


def validate_poll_interval(raw: Any, default: int = LIVE_POLL_MAX_SECONDS):
    """Coerce to int and clamp to the live polling window. Return (value, warnings)."""
    if raw is None:
        return default, []
    try:
        v = int(raw)
    except (TypeError, ValueError):
        logger.warning("poll_interval_invalid: %s", raw)
        return default, [ValidationWarning("poll_interval_invalid")]
    if v < LIVE_POLL_MIN_SECONDS:
        logger.warning("poll_interval_floor: %s -> %s", v, LIVE_POLL_MIN_SECONDS)
        return LIVE_POLL_MIN_SECONDS, [ValidationWarning("poll_interval_floor")]
    if v > LIVE_POLL_MAX_SECONDS:
        logger.warning("poll_interval_cap: %s -> %s", v, LIVE_POLL_MAX_SECONDS)
        return LIVE_POLL_MAX_SECONDS, [ValidationWarning("poll_interval_cap")]
    return v, []


# ---- Payload shape validation ----
# These raise ValueError; the client maps it to INVALID_PAYLOAD.

def _require_mapping(payload: Any, what: str = "payload") -> Mapping[str, Any]:
    if not isinstance(payload, Mapping):
        raise ValueError(f"{what} must be an object, got {type(payload).__name__}")
    return payload


def _require_list(payload: Any, key: str) -> List[Any]:
    data = _require_mapping(payload)
    rows = data.get(key)
    if not isinstance(rows, list):
        raise ValueError(f"'{key}' must be a list")
    return rows


def _optional_list(row: Mapping[str, Any], key: str, where: str) -> List[Any]:
    value = row.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError(f"{where}.{key} must be a list")
    return value


def _require_str(row: Mapping[str, Any], key: str, where: str) -> str:
    value = row.get(key)
    if not isinstance(value, str) or not value:
        raise ValueError(f"{where}.{key} must be a non-empty string")
    return value


def _optional_score(row: Mapping[str, Any], key: str, where: str) -> None:
    value = row.get(key)
    if value is None:
        return
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{where}.{key} must be a number")


def validate_competitors(competitors: Any, where: str = "sport_event") -> None:
    """Exactly one home and one away competitor."""
    if not isinstance(competitors, list):
        raise ValueError(f"{where}.competitors must be a list")
    qualifiers: List[str] = []
    for idx, comp in enumerate(competitors):
        comp = _require_mapping(comp, f"{where}.competitors[{idx}]")
        _require_str(comp, "id", f"{where}.competitors[{idx}]")
        qualifiers.append(comp.get("qualifier"))
    if qualifiers.count(QUALIFIER_HOME) != 1 or qualifiers.count(QUALIFIER_AWAY) != 1:
        raise ValueError(f"{where} needs exactly one home and one away competitor")


def validate_sport_event(event: Any, where: str = "sport_event") -> Mapping[str, Any]:
    event = _require_mapping(event, where)
    _require_str(event, "id", where)
    _require_str(event, "start_time", where)
    validate_competitors(event.get("competitors"), where)
    return event


def validate_competitions_payload(payload: Any) -> Dict[str, Any]:
    for idx, row in enumerate(_require_list(payload, "competitions")):
        row = _require_mapping(row, f"competitions[{idx}]")
        _require_str(row, "id", f"competitions[{idx}]")
        _require_str(row, "name", f"competitions[{idx}]")
        if row.get("current_season") is not None:
            _require_mapping(row["current_season"], f"competitions[{idx}].current_season")
    return dict(payload)


def validate_seasons_payload(payload: Any) -> Dict[str, Any]:
    for idx, row in enumerate(_require_list(payload, "seasons")):
        row = _require_mapping(row, f"seasons[{idx}]")
        _require_str(row, "id", f"seasons[{idx}]")
    return dict(payload)


def validate_sport_events_payload(payload: Any) -> Dict[str, Any]:
    for idx, row in enumerate(_require_list(payload, "sport_events")):
        validate_sport_event(row, f"sport_events[{idx}]")
    return dict(payload)


def validate_summaries_payload(payload: Any) -> Dict[str, Any]:
    for idx, row in enumerate(_require_list(payload, "summaries")):
        where = f"summaries[{idx}]"
        row = _require_mapping(row, where)
        validate_sport_event(row.get("sport_event"), f"{where}.sport_event")
        status = _require_mapping(row.get("sport_event_status"), f"{where}.sport_event_status")
        _require_str(status, "match_status", f"{where}.sport_event_status")
        _optional_score(status, "home_score", f"{where}.sport_event_status")
        _optional_score(status, "away_score", f"{where}.sport_event_status")
    return dict(payload)


def validate_standings_payload(payload: Any) -> Dict[str, Any]:
    """Tables, groups and rows must all be objects; missing lists count as empty."""
    for t_idx, table in enumerate(_require_list(payload, "standings")):
        where = f"standings[{t_idx}]"
        table = _require_mapping(table, where)
        for g_idx, group in enumerate(_optional_list(table, "groups", where)):
            group_where = f"{where}.groups[{g_idx}]"
            group = _require_mapping(group, group_where)
            for r_idx, row in enumerate(_optional_list(group, "group_standings", group_where)):
                row_where = f"{group_where}.group_standings[{r_idx}]"
                row = _require_mapping(row, row_where)
                if row.get("competitor") is not None:
                    _require_mapping(row["competitor"], f"{row_where}.competitor")
    return dict(payload)


def validate_competitors_payload(payload: Any) -> Dict[str, Any]:
    for idx, row in enumerate(_require_list(payload, "season_competitors")):
        row = _require_mapping(row, f"season_competitors[{idx}]")
        _require_str(row, "id", f"season_competitors[{idx}]")
    return dict(payload)


def validate_object_payload(payload: Any) -> Dict[str, Any]:
    return dict(_require_mapping(payload))
