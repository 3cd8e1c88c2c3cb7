"""Log throttling for the proxy and client.

Upstream outages tend to produce the same warning on every request; these
helpers keep one line per key per window and report how many were dropped.
"""
from __future__ import annotations

import logging
import threading
import time
from typing import Any, Callable, Dict, Hashable, Iterable, Optional, Tuple


class RateLimitedLogger:
    """Emit at most one record per key every ``window_seconds``.

    When a key is allowed through again, the number of records suppressed
    since its last emission is appended to the message.
    """

    def __init__(
        self,
        logger: logging.Logger,
        window_seconds: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._logger = logger
        self._window = max(float(window_seconds), 0.0)
        self._clock = clock
        # key -> (last emitted at, suppressed since then)
        self._seen: Dict[Tuple[Any, ...], Tuple[float, int]] = {}
        self._lock = threading.Lock()

    def _admit(self, key: Tuple[Any, ...]) -> Optional[int]:
        """Return the suppressed count if the record may go out, else None."""
        now = self._clock()
        with self._lock:
            entry = self._seen.get(key)
            if entry is not None and now - entry[0] < self._window:
                self._seen[key] = (entry[0], entry[1] + 1)
                return None
            self._seen[key] = (now, 0)
            return entry[1] if entry else 0

    def log(self, level: int, key: Iterable[Any], msg: str, *args: Any, **kwargs: Any) -> bool:
        suppressed = self._admit(tuple(key))
        if suppressed is None:
            return False
        if suppressed:
            msg = f"{msg} ({suppressed} similar suppressed)"
        self._logger.log(level, msg, *args, **kwargs)
        return True

    def info(self, key: Iterable[Any], msg: str, *args: Any, **kwargs: Any) -> bool:
        return self.log(logging.INFO, key, msg, *args, **kwargs)

    def warning(self, key: Iterable[Any], msg: str, *args: Any, **kwargs: Any) -> bool:
        return self.log(logging.WARNING, key, msg, *args, **kwargs)

    def error(self, key: Iterable[Any], msg: str, *args: Any, **kwargs: Any) -> bool:
        return self.log(logging.ERROR, key, msg, *args, **kwargs)


_warned: set = set()
_warned_lock = threading.Lock()


def warn_once(key: Hashable, msg: str, *, logger: Optional[logging.Logger] = None) -> bool:
    """Log ``msg`` as a warning the first time ``key`` is seen in this process."""
    with _warned_lock:
        first = key not in _warned
        _warned.add(key)
    if first:
        (logger or logging.getLogger(__name__)).warning(msg)
    return first


def reset_warn_once_cache() -> None:
    with _warned_lock:
        _warned.clear()
