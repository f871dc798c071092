from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from sfox_feed.core.enums import Feed, SubscribeAction
from sfox_feed.core.topics import topic_for_feed

from .wire import encode_frame


@dataclass(frozen=True, slots=True)
class SubscriptionRequest:
    action: SubscribeAction
    feed: Feed
    symbols: tuple[str, ...] = field(default=())

    def __post_init__(self) -> None:
        # system acks are not a subscribable topic family
        if self.feed == Feed.SYSTEM:
            raise ValueError("cannot subscribe to the system feed")

    @classmethod
    def subscribe(cls, feed: Feed, symbols: Sequence[str] = ()) -> SubscriptionRequest:
        return cls(action=SubscribeAction.SUBSCRIBE, feed=feed, symbols=tuple(symbols))

    @classmethod
    def unsubscribe(cls, feed: Feed, symbols: Sequence[str] = ()) -> SubscriptionRequest:
        return cls(action=SubscribeAction.UNSUBSCRIBE, feed=feed, symbols=tuple(symbols))


def topics_for(feed: Feed, symbols: Sequence[str] = ()) -> list[str]:
    entry = topic_for_feed(feed)
    if not entry.per_instrument:
        return [entry.topic]
    return [entry.topic_for(symbol) for symbol in symbols]


def topics_message(action: SubscribeAction, topics: Sequence[str]) -> dict[str, Any]:
    return {"type": SubscribeAction(action).value, "feeds": list(topics)}


def build(request: SubscriptionRequest) -> dict[str, Any]:
    """Return the outbound ``{"type": ..., "feeds": [...]}`` message for ``request``.

    Account-scoped feeds ignore ``symbols`` and always carry their single topic.
    """
    return topics_message(request.action, topics_for(request.feed, request.symbols))


def build_frame(request: SubscriptionRequest) -> str:
    return encode_frame(build(request))
