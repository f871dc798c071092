from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, TypeAlias

from sfox_feed.core.enums import Feed, TradeSide
from sfox_feed.core.errors import DecodeError

from .numbers import parse_bool, parse_decimal, parse_uint

LEVEL_ARITY = 3


@dataclass(frozen=True, slots=True)
class Level:
    price: float
    quantity: float
    source: str


@dataclass(frozen=True, slots=True)
class MarketMaking:
    asks: tuple[Level, ...]
    bids: tuple[Level, ...]


@dataclass(frozen=True, slots=True)
class Orderbook:
    pair: str
    asks: tuple[Level, ...]
    bids: tuple[Level, ...]
    market_making: MarketMaking
    lastupdated: int
    lastpublished: int
    currency: str | None = None


@dataclass(frozen=True, slots=True)
class Balance:
    currency: str
    balance: float
    available: float
    held: float
    trading_wallet: float
    collateral_wallet: float
    borrow_wallet: float
    lending_wallet: float


@dataclass(frozen=True, slots=True)
class Order:
    id: int
    client_order_id: str
    status: str
    filled: float
    filled_amount: float
    vwap: float
    price: float
    quantity: float
    pair: str
    action: str
    order_type: str
    algorithm_id: int
    fees: float


@dataclass(frozen=True, slots=True)
class PostTradeSettlement:
    enabled: bool
    equity: float
    equity_for_withdrawals: float
    available_exposure: float
    exposure: float
    exposure_limit: float


@dataclass(frozen=True, slots=True)
class Ticker:
    amount: float
    exchange: str
    last: float
    high: float
    low: float
    open: float
    pair: str
    route: str
    source: str
    timestamp: str
    volume: float
    vwap: float


@dataclass(frozen=True, slots=True)
class Trade:
    buy_order_id: str
    sell_order_id: str
    pair: str
    pair_id: int
    price: float
    quantity: float
    side: TradeSide
    exchange: str
    exchange_id: int
    timestamp: str
    is_decimal: bool


@dataclass(frozen=True, slots=True)
class SystemPayload:
    """Payload of connection-level acks (authenticate, subscribe, unsubscribe)."""

    action: str | None
    feeds: tuple[str, ...] = ()


TypedPayload: TypeAlias = (
    Balance
    | tuple[Balance, ...]
    | Order
    | tuple[Order, ...]
    | PostTradeSettlement
    | Orderbook
    | Ticker
    | Trade
    | SystemPayload
)


class FieldReader:
    """Reads named fields from one payload object, attaching feed/field context to failures."""

    def __init__(self, payload: Any, feed: Feed | str, path: str = "") -> None:
        if not isinstance(payload, Mapping):
            raise DecodeError(
                f"expected a JSON object, got {type(payload).__name__}",
                feed=feed,
                field=path or None,
            )
        self._payload = payload
        self._feed = feed
        self._path = path

    def _qualified(self, name: str) -> str:
        return f"{self._path}.{name}" if self._path else name

    def raw(self, name: str) -> Any:
        if name not in self._payload:
            raise DecodeError("missing field", feed=self._feed, field=self._qualified(name))
        return self._payload[name]

    def optional_raw(self, name: str) -> Any:
        return self._payload.get(name)

    def convert(self, name: str, parser: Callable[[Any], Any]) -> Any:
        value = self.raw(name)
        try:
            return parser(value)
        except ValueError as exc:
            raise DecodeError(str(exc), feed=self._feed, field=self._qualified(name)) from exc

    def string(self, name: str) -> str:
        value = self.raw(name)
        if not isinstance(value, str):
            raise DecodeError(
                f"expected string, got {type(value).__name__}",
                feed=self._feed,
                field=self._qualified(name),
            )
        return value

    def optional_string(self, name: str) -> str | None:
        if self.optional_raw(name) is None:
            return None
        return self.string(name)

    def decimal(self, name: str) -> float:
        return self.convert(name, parse_decimal)

    def uint(self, name: str, *, allow_string: bool = False) -> int:
        return self.convert(name, lambda value: parse_uint(value, allow_string=allow_string))

    def boolean(self, name: str) -> bool:
        return self.convert(name, parse_bool)

    def nested(self, name: str) -> FieldReader:
        return FieldReader(self.raw(name), self._feed, self._qualified(name))

    def levels(self, name: str) -> tuple[Level, ...]:
        value = self.raw(name)
        field = self._qualified(name)
        if not isinstance(value, list):
            raise DecodeError(f"expected a list of levels, got {type(value).__name__}", feed=self._feed, field=field)
        return tuple(_decode_level(item, self._feed, f"{field}[{index}]") for index, item in enumerate(value))


def _decode_level(item: Any, feed: Feed | str, field: str) -> Level:
    if not isinstance(item, (list, tuple)) or len(item) != LEVEL_ARITY:
        raise DecodeError(
            f"expected [price, quantity, source] tuple, got {item!r}",
            feed=feed,
            field=field,
        )
    price_raw, quantity_raw, source = item
    try:
        price = parse_decimal(price_raw)
    except ValueError as exc:
        raise DecodeError(str(exc), feed=feed, field=f"{field}.price") from exc
    try:
        quantity = parse_decimal(quantity_raw)
    except ValueError as exc:
        raise DecodeError(str(exc), feed=feed, field=f"{field}.quantity") from exc
    if not isinstance(source, str):
        raise DecodeError(f"expected string, got {type(source).__name__}", feed=feed, field=f"{field}.source")
    return Level(price=price, quantity=quantity, source=source)


def _decode_trade_side(value: Any) -> TradeSide:
    if isinstance(value, str):
        try:
            return TradeSide(value.lower())
        except ValueError:
            pass
    raise ValueError(f"{value!r} is not one of {[side.value for side in TradeSide]}")


def decode_level(item: Any, feed: Feed = Feed.RAW_ORDERBOOK) -> Level:
    return _decode_level(item, feed, "level")


def decode_balance(payload: Any) -> Balance:
    fields = FieldReader(payload, Feed.BALANCES)
    return Balance(
        currency=fields.string("currency"),
        balance=fields.decimal("balance"),
        available=fields.decimal("available"),
        held=fields.decimal("held"),
        trading_wallet=fields.decimal("trading_wallet"),
        collateral_wallet=fields.decimal("collateral_wallet"),
        borrow_wallet=fields.decimal("borrow_wallet"),
        lending_wallet=fields.decimal("lending_wallet"),
    )


def decode_order(payload: Any) -> Order:
    fields = FieldReader(payload, Feed.ORDERS)
    return Order(
        id=fields.uint("id", allow_string=True),
        client_order_id=fields.string("client_order_id"),
        status=fields.string("status"),
        filled=fields.decimal("filled"),
        filled_amount=fields.decimal("filled_amount"),
        vwap=fields.decimal("vwap"),
        price=fields.decimal("price"),
        quantity=fields.decimal("quantity"),
        pair=fields.string("pair"),
        action=fields.string("action"),
        order_type=fields.string("type"),
        algorithm_id=fields.uint("algorithm_id", allow_string=True),
        fees=fields.decimal("fees"),
    )


def decode_post_trade_settlement(payload: Any) -> PostTradeSettlement:
    fields = FieldReader(payload, Feed.POST_TRADE_SETTLEMENT)
    return PostTradeSettlement(
        enabled=fields.boolean("enabled"),
        equity=fields.decimal("equity"),
        equity_for_withdrawals=fields.decimal("equity_for_withdrawals"),
        available_exposure=fields.decimal("available_exposure"),
        exposure=fields.decimal("exposure"),
        exposure_limit=fields.decimal("exposure_limit"),
    )


def decode_orderbook(payload: Any, feed: Feed = Feed.RAW_ORDERBOOK) -> Orderbook:
    fields = FieldReader(payload, feed)
    market_making = fields.nested("market_making")
    return Orderbook(
        pair=fields.string("pair"),
        asks=fields.levels("asks"),
        bids=fields.levels("bids"),
        market_making=MarketMaking(
            asks=market_making.levels("asks"),
            bids=market_making.levels("bids"),
        ),
        lastupdated=fields.uint("lastupdated"),
        lastpublished=fields.uint("lastpublished"),
        currency=fields.optional_string("currency"),
    )


def decode_ticker(payload: Any) -> Ticker:
    fields = FieldReader(payload, Feed.TICKER)
    return Ticker(
        amount=fields.decimal("amount"),
        exchange=fields.string("exchange"),
        last=fields.decimal("last"),
        high=fields.decimal("high"),
        low=fields.decimal("low"),
        open=fields.decimal("open"),
        pair=fields.string("pair"),
        route=fields.string("route"),
        source=fields.string("source"),
        timestamp=fields.string("timestamp"),
        volume=fields.decimal("volume"),
        vwap=fields.decimal("vwap"),
    )


def decode_trade(payload: Any) -> Trade:
    fields = FieldReader(payload, Feed.TRADE)
    return Trade(
        buy_order_id=fields.string("buyOrderId"),
        sell_order_id=fields.string("sellOrderId"),
        pair=fields.string("pair"),
        pair_id=fields.uint("pair_id"),
        price=fields.decimal("price"),
        quantity=fields.decimal("quantity"),
        side=fields.convert("side", _decode_trade_side),
        exchange=fields.string("exchange"),
        exchange_id=fields.uint("exchange_id"),
        timestamp=fields.string("timestamp"),
        is_decimal=fields.boolean("is_decimal"),
    )


def decode_system_payload(payload: Any) -> SystemPayload:
    fields = FieldReader(payload, Feed.SYSTEM)
    action = fields.optional_string("action")
    raw_feeds = fields.optional_raw("feeds")
    if raw_feeds is None:
        return SystemPayload(action=action)
    if not isinstance(raw_feeds, list) or not all(isinstance(topic, str) for topic in raw_feeds):
        raise DecodeError("expected a list of topic strings", feed=Feed.SYSTEM, field="feeds")
    return SystemPayload(action=action, feeds=tuple(raw_feeds))


def _one_or_many(decoder: Callable[[Any], Any]) -> Callable[[Any], Any]:
    def decode_items(payload: Any) -> Any:
        if isinstance(payload, list):
            return tuple(decoder(item) for item in payload)
        return decoder(payload)

    return decode_items


_DECODERS: dict[Feed, Callable[[Any], TypedPayload]] = {
    Feed.BALANCES: _one_or_many(decode_balance),
    Feed.ORDERS: _one_or_many(decode_order),
    Feed.POST_TRADE_SETTLEMENT: decode_post_trade_settlement,
    Feed.NET_ORDERBOOK: lambda payload: decode_orderbook(payload, Feed.NET_ORDERBOOK),
    Feed.RAW_ORDERBOOK: lambda payload: decode_orderbook(payload, Feed.RAW_ORDERBOOK),
    Feed.TICKER: decode_ticker,
    Feed.TRADE: decode_trade,
    Feed.SYSTEM: decode_system_payload,
}


def decode(feed: Feed, payload: Any) -> TypedPayload:
    """Decode the ``payload`` member of an envelope into the typed record for ``feed``.

    Pure and side-effect free: the same input always produces an equal result.
    Balances and open-orders accept either one object or a list of objects.
    """
    try:
        decoder = _DECODERS[feed]
    except KeyError as exc:
        raise DecodeError(f"no decoder registered for feed {feed!r}", feed=feed) from exc
    return decoder(payload)
