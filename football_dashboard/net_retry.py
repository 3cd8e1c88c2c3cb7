# football_dashboard/net_retry.py
"""Bounded exponential-backoff retry for outbound requests (cancellable)."""
from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any, Mapping, Optional, Tuple

import requests

from .config import setup_logger
from .constants import MAX_RETRY_AFTER
from .errors import APIError
from .inflight import CancelToken
from .utils import scrub_url

_logger = setup_logger(__name__)


def _parse_retry_after_seconds(value: Optional[str]) -> Optional[float]:
    if value is None:
        return None

    try:
        seconds = float(value)
    except (TypeError, ValueError):
        pass
    else:
        return max(0.0, min(seconds, MAX_RETRY_AFTER))

    try:
        dt = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return None

    if dt is None:
        return None

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)

    delay = (dt - datetime.now(dt.tzinfo)).total_seconds()
    return max(0.0, min(delay, MAX_RETRY_AFTER))


def compute_retry_delay(
    attempt: int,
    base_delay: float,
    response: Optional[requests.Response] = None,
) -> float:
    """Delay before attempt ``attempt + 1``: ``base * 2**(attempt-1)`` or Retry-After."""

    if response is not None and "Retry-After" in (response.headers or {}):
        parsed = _parse_retry_after_seconds(response.headers.get("Retry-After"))
        if parsed is not None:
            return parsed

    delay = base_delay * (2 ** (attempt - 1))
    return max(0.0, min(delay, MAX_RETRY_AFTER))


def _cancelled(source: str, context: str) -> APIError:
    return APIError(source, "CANCELLED", "The request was superseded by a newer one.", context)


def _pause(delay: float, token: Optional[CancelToken]) -> bool:
    """Wait ``delay`` seconds; return True if the token was cancelled meanwhile."""
    if token is None:
        if delay > 0:
            time.sleep(delay)
        return False
    return token.wait(delay)


def fetch_with_backoff(
    session: Any,
    url: str,
    *,
    params: Optional[Mapping[str, Any]] = None,
    timeout: float = 10.0,
    max_attempts: int = 3,
    base_delay: float = 1.0,
    token: Optional[CancelToken] = None,
    source: str = "SportradarAPI",
    logger: Optional[logging.Logger] = None,
) -> Tuple[requests.Response, int]:
    """GET ``url`` until a 2xx arrives or ``max_attempts`` are spent.

    Every non-2xx status and every ``requests`` exception is retried.
    Returns ``(response, attempts)``. Raises APIError with code ``TIMEOUT``,
    ``NETWORK_ERROR`` or the last HTTP status once attempts are exhausted,
    and ``CANCELLED`` as soon as ``token`` is cancelled.
    """

    log = logger or _logger
    attempts = max(1, int(max_attempts))
    safe_url = scrub_url(url)

    last_error: Optional[requests.RequestException] = None
    last_response: Optional[requests.Response] = None

    for attempt in range(1, attempts + 1):
        if token is not None and token.cancelled:
            raise _cancelled(source, safe_url)

        try:
            response = session.get(url, params=params, timeout=timeout)
        except requests.RequestException as exc:
            last_error, last_response = exc, None
        else:
            if token is not None and token.cancelled:
                raise _cancelled(source, safe_url)
            if 200 <= response.status_code < 300:
                if attempt > 1:
                    log.info("Recovered %s after %d attempts", safe_url, attempt)
                return response, attempt
            last_error, last_response = None, response

        if attempt == attempts:
            break

        delay = compute_retry_delay(attempt, base_delay, last_response)
        log.warning(
            "%s %s, retrying in %.1fs (attempt %d/%d)",
            source,
            last_response.status_code if last_response is not None else type(last_error).__name__,
            delay,
            attempt,
            attempts,
        )
        if _pause(delay, token):
            raise _cancelled(source, safe_url)

    if last_response is not None:
        status = last_response.status_code
        log.error("Failed %s after %d attempts: HTTP %s", safe_url, attempts, status)
        raise APIError(
            source,
            str(status),
            f"HTTP {status}: {getattr(last_response, 'reason', '') or 'request failed'}",
            "rate_limited" if status == 429 else None,
        )

    log.error("Failed %s after %d attempts: %s", safe_url, attempts, type(last_error).__name__)
    if isinstance(last_error, requests.Timeout):
        raise APIError(source, "TIMEOUT", "The request took too long.", safe_url)
    raise APIError(
        source, "NETWORK_ERROR", "Network error while contacting the API.", type(last_error).__name__
    )


__all__ = ["compute_retry_delay", "fetch_with_backoff"]
