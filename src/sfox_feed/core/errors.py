from __future__ import annotations

from typing import Any


class FeedClientError(RuntimeError):
    """Base class for every error raised by the feed client."""


class InitializationError(FeedClientError):
    """Raised when the websocket transport cannot be established."""


class AuthenticationError(FeedClientError):
    """Raised when the credential is missing or the authenticate frame cannot be sent."""


class TxError(FeedClientError):
    """Raised when an outbound frame cannot be written to the socket."""


class RxError(FeedClientError):
    """Raised by the frame reader when the transport fails mid-stream."""


class LockError(FeedClientError):
    """Raised when the write half cannot be acquired; the send may be retried."""


class FrameError(FeedClientError):
    """Base class for per-message failures. The connection stays usable."""


class ParseError(FrameError):
    def __init__(self, message: str, *, raw: str | bytes | None = None) -> None:
        super().__init__(message)
        self.raw = raw


class ClassificationError(FrameError):
    def __init__(self, message: str, *, recipient: str | None = None, frame: Any = None) -> None:
        super().__init__(message)
        self.recipient = recipient
        self.frame = frame


class DecodeError(FrameError):
    def __init__(self, message: str, *, feed: Any = None, field: str | None = None) -> None:
        super().__init__(message)
        self.feed = feed
        self.field = field

    def __str__(self) -> str:
        base = super().__str__()
        if self.field is None:
            return base
        return f"{base} (field={self.field})"
