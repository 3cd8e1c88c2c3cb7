"""Single in-flight request per resource key."""
from __future__ import annotations

import threading
from typing import Dict, Optional


class CancelToken:
    """Cooperative cancellation flag shared between a request and its registry."""

    def __init__(self, key: str) -> None:
        self.key = key
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def wait(self, seconds: float) -> bool:
        """Sleep up to ``seconds``; return True early if cancelled meanwhile."""
        if seconds <= 0:
            return self._event.is_set()
        return self._event.wait(seconds)


class InFlightRegistry:
    """Tracks the newest request per key; starting a new one cancels the old."""

    def __init__(self) -> None:
        self._tokens: Dict[str, CancelToken] = {}
        self._lock = threading.Lock()

    def begin(self, key: str) -> CancelToken:
        token = CancelToken(key)
        with self._lock:
            previous = self._tokens.get(key)
            self._tokens[key] = token
        if previous is not None:
            previous.cancel()
        return token

    def finish(self, token: CancelToken) -> None:
        with self._lock:
            if self._tokens.get(token.key) is token:
                del self._tokens[token.key]

    def current(self, key: str) -> Optional[CancelToken]:
        with self._lock:
            return self._tokens.get(key)

    def cancel_all(self) -> None:
        with self._lock:
            tokens = list(self._tokens.values())
            self._tokens.clear()
        for token in tokens:
            token.cancel()

    def __len__(self) -> int:
        with self._lock:
            return len(self._tokens)
