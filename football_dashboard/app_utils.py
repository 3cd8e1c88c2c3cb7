import logging
import threading
import time
from typing import Any, Callable, Dict, Optional

from flask import jsonify

from .errors import APIError

DATA_SOURCE_HEADER = "X-Data-Source"


class AdaptiveTimeoutController:
    """Upstream timeout that widens after timeouts and narrows after successes.

    Shared by all proxy requests, so every adjustment happens under a lock.
    ``clock`` returns wall-clock seconds and is only used for metrics.
    """

    def __init__(
        self,
        base_timeout: float = 10,
        max_timeout: float = 30,
        increase_factor: float = 1.5,
        recovery_rate: float = 0.95,
        summary_every: float = 600,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.base_timeout = float(base_timeout)
        self.max_timeout = max(float(max_timeout), self.base_timeout)
        self.timeout = self.base_timeout
        self.increase_factor = increase_factor
        self.recovery_rate = recovery_rate
        self.summary_every = summary_every
        self.logger = logging.getLogger(__name__)
        self._clock = clock
        self._lock = threading.Lock()
        self._successes = 0
        self._failures = 0
        self._last_failure: Optional[float] = None
        self._last_summary = clock()

    def _set_timeout(self, value: float) -> float:
        old, self.timeout = self.timeout, value
        return old

    def record_failure(self) -> None:
        with self._lock:
            self._failures += 1
            self._last_failure = self._clock()
            old = self._set_timeout(min(self.timeout * self.increase_factor, self.max_timeout))
        if old != self.timeout:
            self.logger.warning("[AdaptiveTimeout] Increased timeout from %.1fs to %.1fs", old, self.timeout)
        self._maybe_log_summary()

    def record_success(self) -> None:
        with self._lock:
            self._successes += 1
            old = self._set_timeout(max(self.base_timeout, self.timeout * self.recovery_rate))
        # small steps are not worth a log line
        if old - self.timeout > 0.5:
            self.logger.info("[AdaptiveTimeout] Reduced timeout from %.1fs to %.1fs", old, self.timeout)
        self._maybe_log_summary()

    def get_timeout(self) -> float:
        with self._lock:
            return self.timeout

    def get_metrics(self) -> Dict[str, Any]:
        """Snapshot for the /status endpoint."""

        with self._lock:
            total = self._successes + self._failures
            last_failure = self._last_failure
            metrics = {
                "current_timeout": round(self.timeout, 2),
                "base_timeout": self.base_timeout,
                "max_timeout": self.max_timeout,
                "successes": self._successes,
                "failures": self._failures,
                "success_rate": round(self._successes / total, 4) if total else 1.0,
            }
        metrics["last_failure"] = (
            time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime(last_failure))
            if last_failure is not None
            else None
        )
        return metrics

    def _maybe_log_summary(self) -> None:
        now = self._clock()
        if now - self._last_summary < self.summary_every:
            return
        self._last_summary = now
        m = self.get_metrics()
        self.logger.info(
            "[UpstreamHealth] timeout=%.1fs failures=%d success_rate=%d%%",
            m["current_timeout"],
            m["failures"],
            int(m["success_rate"] * 100),
        )


def make_ok(data: Optional[Any] = None, message: str = "success", status_code: int = 200):
    """Return a standardized success response."""
    return jsonify({"status": "ok", "message": message, "data": data}), status_code


def make_error(error: Any, message: str = "An error occurred", status_code: int = 400):
    """Return a standardized error response; APIError is serialized via to_dict."""
    if isinstance(error, APIError):
        error = error.to_dict()
    return jsonify({"status": "error", "message": message, "error": error}), status_code


def relay_json(payload: Any, source: str, status_code: int = 200):
    """Pass a provider-shaped body through unchanged, labelled with where it came from."""
    response = jsonify(payload)
    response.headers[DATA_SOURCE_HEADER] = source
    return response, status_code
