"""
Configuration values for the Football Dashboard
Env-driven tunables for the client, proxy and view-state layers
"""

import logging
import os
from logging.handlers import RotatingFileHandler

from .constants import (
    DEFAULT_CACHE_TTL,
    ERROR_CLEAR_SECONDS,
    LIVE_POLL_MAX_SECONDS,
    LIVE_POLL_MIN_SECONDS,
)


API_TIMEOUT = float(os.getenv("API_TIMEOUT", 10))
"""Default timeout (seconds) for outbound API calls."""

API_MAX_RETRIES = int(os.getenv("API_MAX_RETRIES", 3))
"""Maximum attempts for a single client request."""

RETRY_DELAY_BASE = float(os.getenv("RETRY_DELAY_BASE", 1.0))
"""Base delay (seconds) for exponential backoff between attempts."""

CACHE_DEFAULT_TTL = int(os.getenv("CACHE_DEFAULT_TTL", DEFAULT_CACHE_TTL))

ERROR_CLEAR_AFTER = float(os.getenv("ERROR_CLEAR_AFTER", ERROR_CLEAR_SECONDS))
"""Seconds a view-state error stays visible before auto-clearing."""

LIVE_POLL_SECONDS = min(
    max(int(os.getenv("LIVE_POLL_SECONDS", LIVE_POLL_MAX_SECONDS)), LIVE_POLL_MIN_SECONDS),
    LIVE_POLL_MAX_SECONDS,
)

UPSTREAM_MAX_TIMEOUT = float(os.getenv("UPSTREAM_MAX_TIMEOUT", 30))


LOG_FILE = os.getenv(
    "LOG_FILE",
    os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "football_dashboard.log"),
)
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def _level() -> int:
    return getattr(logging, os.getenv("LOG_LEVEL", "DEBUG").upper(), logging.DEBUG)


def setup_logger(name: str) -> logging.Logger:
    """Module logger; writes to a rotating LOG_FILE unless the root logger is configured."""

    logger = logging.getLogger(name)
    level = _level()
    logger.setLevel(level)

    # an app or test harness that configured the root logger owns output
    if logging.getLogger().handlers:
        logger.propagate = True
        return logger

    if not any(isinstance(h, RotatingFileHandler) for h in logger.handlers):
        os.makedirs(os.path.dirname(LOG_FILE) or ".", exist_ok=True)
        file_handler = RotatingFileHandler(LOG_FILE, maxBytes=5 * 1024 * 1024, backupCount=3)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        file_handler.setLevel(level)
        logger.addHandler(file_handler)
        logger.propagate = False

    return logger
