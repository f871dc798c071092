from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from sfox_feed.core.enums import Feed
from sfox_feed.core.errors import ClassificationError
from sfox_feed.core.topics import feed_topics

RECIPIENT_KEY = "recipient"
TYPE_KEY = "type"


def classify_recipient(recipient: str) -> Feed:
    for entry in feed_topics():
        if entry.matches(recipient):
            return entry.feed
    raise ClassificationError(f"unrecognized feed recipient {recipient!r}", recipient=recipient)


def classify(frame: Any) -> Feed:
    """Route a parsed frame to the feed whose decoder applies.

    Frames carrying ``recipient`` are matched against the topic table in
    order; frames without it but with a string ``type`` are system acks.
    """
    if not isinstance(frame, Mapping):
        raise ClassificationError(f"expected a JSON object, got {type(frame).__name__}", frame=frame)

    if RECIPIENT_KEY in frame:
        recipient = frame[RECIPIENT_KEY]
        if not isinstance(recipient, str):
            raise ClassificationError(
                f"recipient must be a string, got {type(recipient).__name__}",
                frame=frame,
            )
        try:
            return classify_recipient(recipient)
        except ClassificationError as exc:
            exc.frame = frame
            raise

    if isinstance(frame.get(TYPE_KEY), str):
        return Feed.SYSTEM

    raise ClassificationError("frame has neither a recipient nor a type", frame=frame)
