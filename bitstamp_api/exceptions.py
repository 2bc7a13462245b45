"""Exception hierarchy for the Bitstamp client.

Every failure raised by this package derives from ``BitstampError``. None of
them are retried internally; each is reported once to the caller.

    BitstampError
    ├── TransportError          connect / I-O / TLS failures (cause chained)
    │   ├── ConnectError        WebSocket handshake failed
    │   └── StreamClosedError   socket closed by peer, or used after close
    ├── ProtocolError           non-2xx HTTP response
    │   ├── ProtocolStatusError bare status, body carried no known envelope
    │   ├── ProtocolErrorV1     {"error": ...}
    │   └── ProtocolErrorV2     {"status": ..., "reason": ..., "code": ...}
    ├── DecodeError             payload did not have the expected shape
    │   └── ChannelDecodeError  unknown wire channel string
    └── StreamTimeoutError      no frame within the stale timeout
"""
from typing import Optional


class BitstampError(Exception):
    """Base exception for all Bitstamp client errors."""
    pass


class TransportError(BitstampError):
    """Raised when the underlying HTTP or WebSocket transport fails."""
    pass


class ConnectError(TransportError):
    """Raised when the WebSocket handshake cannot be completed."""
    pass


class StreamClosedError(TransportError):
    """Raised when the event stream socket is closed."""
    pass


def _status_prefix(status: int) -> str:
    if 400 <= status < 500:
        return "HTTP status client error"
    return "HTTP status server error"


class ProtocolError(BitstampError):
    """Base for errors generated from a non-success HTTP response."""

    def __init__(self, status: int, message: str):
        super().__init__(message)
        self.status = status


class ProtocolStatusError(ProtocolError):
    """Non-success status whose body matched no known error envelope."""

    def __init__(self, status: int):
        super().__init__(status, f"{_status_prefix(status)} ({status})")


class ProtocolErrorV1(ProtocolError):
    """Non-success status with a v1 ``{"error": ...}`` envelope."""

    def __init__(self, status: int, error: str):
        super().__init__(status, f"{_status_prefix(status)} ({status}) - {error}")
        self.error = error


class ProtocolErrorV2(ProtocolError):
    """Non-success status with a v2 ``{"status", "reason", "code"}`` envelope."""

    def __init__(self, status: int, reason: str, code: str):
        super().__init__(status, f"{_status_prefix(status)} ({status}) - {reason} ({code})")
        self.reason = reason
        self.code = code


class DecodeError(BitstampError):
    """Raised when a payload cannot be decoded into the expected shape.

    ``raw`` holds the offending text so callers can log or inspect it.
    """

    def __init__(self, message: str, raw: Optional[str] = None):
        super().__init__(message)
        self.raw = raw


class ChannelDecodeError(DecodeError):
    """Raised when a wire channel string names no known channel."""

    def __init__(self, raw: str, reason: str = "unknown channel"):
        super().__init__(f"{reason}: {raw!r}", raw=raw)


class StreamTimeoutError(BitstampError):
    """Raised when an event stream stays silent for longer than its timeout."""

    def __init__(self, timeout: float):
        super().__init__(f"no activity for at least {timeout}s")
        self.timeout = timeout
