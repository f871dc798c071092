from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Generic, TypeAlias, TypeVar

from sfox_feed.core.enums import Feed
from sfox_feed.core.errors import DecodeError, FrameError

from .classifier import classify
from .numbers import parse_uint
from .payloads import SystemPayload, TypedPayload, decode, decode_system_payload
from .wire import parse_frame

PayloadT = TypeVar("PayloadT")

AUTHENTICATE_ACTION = "authenticate"
SUCCESS_TYPE = "success"


@dataclass(frozen=True, slots=True)
class Envelope(Generic[PayloadT]):
    feed: Feed
    recipient: str
    sequence: int
    timestamp: int
    payload: PayloadT


@dataclass(frozen=True, slots=True)
class SystemEnvelope:
    message_type: str
    sequence: int
    timestamp: int
    payload: SystemPayload

    @property
    def feed(self) -> Feed:
        return Feed.SYSTEM

    def is_authentication_success(self) -> bool:
        return self.message_type == SUCCESS_TYPE and self.payload.action == AUTHENTICATE_ACTION


FeedMessage: TypeAlias = Envelope[TypedPayload] | SystemEnvelope


@dataclass(frozen=True, slots=True)
class RejectedFrame:
    """An inbound frame that could not be parsed, routed or decoded."""

    raw: str | bytes
    error: FrameError


def _header_uint(frame: Mapping[str, Any], name: str, feed: Feed) -> int:
    if name not in frame:
        raise DecodeError("missing field", feed=feed, field=name)
    try:
        return parse_uint(frame[name])
    except ValueError as exc:
        raise DecodeError(str(exc), feed=feed, field=name) from exc


def _payload(frame: Mapping[str, Any], feed: Feed) -> Any:
    if "payload" not in frame:
        raise DecodeError("missing field", feed=feed, field="payload")
    return frame["payload"]


def decode_system_envelope(frame: Any) -> SystemEnvelope:
    if not isinstance(frame, Mapping):
        raise DecodeError(f"expected a JSON object, got {type(frame).__name__}", feed=Feed.SYSTEM)
    message_type = frame.get("type")
    if not isinstance(message_type, str):
        raise DecodeError("expected string", feed=Feed.SYSTEM, field="type")
    return SystemEnvelope(
        message_type=message_type,
        sequence=_header_uint(frame, "sequence", Feed.SYSTEM),
        timestamp=_header_uint(frame, "timestamp", Feed.SYSTEM),
        payload=decode_system_payload(_payload(frame, Feed.SYSTEM)),
    )


def decode_envelope(frame: Mapping[str, Any], feed: Feed) -> Envelope[TypedPayload]:
    recipient = frame.get("recipient")
    if not isinstance(recipient, str):
        raise DecodeError("expected string", feed=feed, field="recipient")
    return Envelope(
        feed=feed,
        recipient=recipient,
        sequence=_header_uint(frame, "sequence", feed),
        timestamp=_header_uint(frame, "timestamp", feed),
        payload=decode(feed, _payload(frame, feed)),
    )


def decode_frame(frame: Any) -> FeedMessage:
    """Classify an already-parsed frame and decode it into its typed envelope."""
    feed = classify(frame)
    if feed is Feed.SYSTEM:
        return decode_system_envelope(frame)
    return decode_envelope(frame, feed)


def read_message(raw: str | bytes) -> FeedMessage:
    """Parse, classify and decode one inbound text frame.

    Raises a :class:`~sfox_feed.core.errors.FrameError` subclass when the
    frame is malformed, unroutable or does not match its feed's shape.
    """
    return decode_frame(parse_frame(raw))


def is_authentication_ack(raw: str | bytes) -> bool:
    """True when ``raw`` is the server's success reply to an authenticate frame."""
    return decode_system_envelope(parse_frame(raw)).is_authentication_success()
