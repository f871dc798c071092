from __future__ import annotations

from enum import IntEnum, StrEnum


class Feed(StrEnum):
    BALANCES = "balances"
    ORDERS = "orders"
    POST_TRADE_SETTLEMENT = "post_trade_settlement"
    NET_ORDERBOOK = "net_orderbook"
    RAW_ORDERBOOK = "raw_orderbook"
    TICKER = "ticker"
    TRADE = "trade"
    SYSTEM = "system"


class SubscribeAction(StrEnum):
    SUBSCRIBE = "subscribe"
    UNSUBSCRIBE = "unsubscribe"


class ConnectionState(StrEnum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    AUTHENTICATED = "authenticated"
    CLOSED = "closed"


class TradeSide(StrEnum):
    BUY = "buy"
    SELL = "sell"


class VolumeInterval(IntEnum):
    MINUTE = 60
    HOUR = 3600
    DAY = 86400
