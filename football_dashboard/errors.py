from typing import Any, Mapping, Optional


class APIError(Exception):
    """Failure raised by the Sportradar client, the proxy or a validator.

    ``source`` names the layer that failed and ``code`` is a stable machine
    readable tag (``TIMEOUT``, ``INVALID_PAYLOAD``, an HTTP status, ...).
    The same error converts to the JSON error body via :meth:`to_dict` and
    to the client's non-raising envelope via :meth:`to_envelope`.
    """

    def __init__(self, source: str, code: str, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.source = source
        self.code = code
        self.message = message
        self.details = details

    def __repr__(self) -> str:
        return f"APIError({self.source!r}, {self.code!r}, {self.message!r})"

    def to_dict(self) -> dict:
        body = {"source": self.source, "code": self.code, "message": self.message}
        if self.details:
            body["details"] = self.details
        return body

    def to_envelope(self, timestamp: str) -> dict:
        return {
            "success": False,
            "data": None,
            "error": self.message,
            "timestamp": timestamp,
            "code": self.code,
        }

    @classmethod
    def from_envelope(cls, envelope: Mapping[str, Any], source: str) -> "APIError":
        return cls(
            source,
            envelope.get("code") or "NETWORK_ERROR",
            envelope.get("error") or "Unknown error occurred",
        )
