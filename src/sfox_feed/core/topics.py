from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from .enums import Feed

TOPIC_SEPARATOR: Final = "."


@dataclass(frozen=True, slots=True)
class FeedTopic:
    """Routing entry shared by the subscription builder and the classifier.

    ``match_prefix`` is what an inbound ``recipient`` must start with.
    ``topic`` is the outbound topic: a prefix joined with the symbol for
    per-instrument feeds, or the complete topic for account-scoped feeds.
    """

    feed: Feed
    match_prefix: str
    topic: str
    per_instrument: bool

    def topic_for(self, symbol: str) -> str:
        return f"{self.topic}{TOPIC_SEPARATOR}{symbol}"

    def matches(self, recipient: str) -> bool:
        """Prefix match on whole topic segments, not a bare ``startswith``.

        ``ticker.sfox.btcusd`` matches the ``ticker`` prefix but
        ``tickers.sfox.btcusd`` does not: the prefix must be the whole
        recipient or be followed by ``.``.
        """
        if recipient == self.match_prefix:
            return True
        return recipient.startswith(self.match_prefix + TOPIC_SEPARATOR)


# Evaluated top to bottom, first match wins: both orderbook rules share the
# "orderbook" root and must stay ahead of anything more generic.
_FEED_TOPICS: Final[tuple[FeedTopic, ...]] = (
    FeedTopic(Feed.NET_ORDERBOOK, "orderbook.net", "orderbook.net", per_instrument=True),
    FeedTopic(Feed.RAW_ORDERBOOK, "orderbook.sfox", "orderbook.sfox", per_instrument=True),
    FeedTopic(Feed.TICKER, "ticker", "ticker.sfox", per_instrument=True),
    FeedTopic(Feed.TRADE, "trades", "trades.sfox", per_instrument=True),
    FeedTopic(Feed.BALANCES, "private.user.balances", "private.user.balances", per_instrument=False),
    FeedTopic(Feed.ORDERS, "private.user.open-orders", "private.user.open-orders", per_instrument=False),
    FeedTopic(
        Feed.POST_TRADE_SETTLEMENT,
        "private.user.post-trade-settlement",
        "private.user.post-trade-settlement",
        per_instrument=False,
    ),
)

_BY_FEED: Final[dict[Feed, FeedTopic]] = {entry.feed: entry for entry in _FEED_TOPICS}


def feed_topics() -> tuple[FeedTopic, ...]:
    return _FEED_TOPICS


def topic_for_feed(feed: Feed) -> FeedTopic:
    try:
        return _BY_FEED[feed]
    except KeyError as exc:
        raise ValueError(f"feed {feed!s} has no subscription topic") from exc


def order_book_feed(pair: str, *, fee_adjusted: bool = True) -> str:
    feed = Feed.NET_ORDERBOOK if fee_adjusted else Feed.RAW_ORDERBOOK
    return _BY_FEED[feed].topic_for(pair)


def ticker_feed(pair: str) -> str:
    return _BY_FEED[Feed.TICKER].topic_for(pair)


def trades_feed(pair: str) -> str:
    return _BY_FEED[Feed.TRADE].topic_for(pair)


def balance_feed() -> str:
    return _BY_FEED[Feed.BALANCES].topic


def open_order_feed() -> str:
    return _BY_FEED[Feed.ORDERS].topic


def post_trade_settlement_feed() -> str:
    return _BY_FEED[Feed.POST_TRADE_SETTLEMENT].topic
