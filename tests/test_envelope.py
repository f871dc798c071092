from __future__ import annotations

import json

import pytest

from sfox_feed.core.enums import Feed
from sfox_feed.core.errors import ClassificationError, DecodeError, ParseError
from sfox_feed.messages.envelope import Envelope, SystemEnvelope, is_authentication_ack, read_message
from sfox_feed.messages.payloads import Balance, Ticker
from sfox_feed.messages.wire import excerpt, parse_frame

AUTH_SUCCESS = """
{
    "type": "success",
    "sequence": 1,
    "payload": {
        "action": "authenticate"
    },
    "timestamp": 1589389200000
}
"""


def _ticker_frame(**overrides: object) -> str:
    frame = {
        "recipient": "ticker.sfox.btcusd",
        "sequence": 7,
        "timestamp": 1589389200000,
        "payload": {
            "amount": 0.02,
            "exchange": "bitstamp",
            "last": "9390.82",
            "high": 9500,
            "low": 9100,
            "open": 9200.1,
            "pair": "btcusd",
            "route": "Smart",
            "source": "ticker-info",
            "timestamp": "2020-05-13T17:55:19.000Z",
            "volume": 1234.5,
            "vwap": 9300.25,
        },
    }
    frame.update(overrides)
    return json.dumps(frame)


def test_parse_frame_accepts_text_and_bytes() -> None:
    assert parse_frame('{"a": 1}') == {"a": 1}
    assert parse_frame(b'{"a": [1, "2"]}') == {"a": [1, "2"]}


@pytest.mark.parametrize("raw", ["", "{", "not json", "NaN", '{"a": Infinity}', b"\xff\xfe"])
def test_parse_frame_rejects_malformed_input(raw: str | bytes) -> None:
    with pytest.raises(ParseError) as excinfo:
        parse_frame(raw)
    assert excinfo.value.raw == raw


def test_excerpt_truncates_long_frames() -> None:
    assert excerpt("x" * 10, limit=4) == "xxxx..."
    assert excerpt(b"abc") == "abc"


def test_read_message_decodes_feed_envelope() -> None:
    message = read_message(_ticker_frame())

    assert isinstance(message, Envelope)
    assert message.feed is Feed.TICKER
    assert message.recipient == "ticker.sfox.btcusd"
    assert message.sequence == 7
    assert message.timestamp == 1589389200000
    assert isinstance(message.payload, Ticker)
    assert message.payload.last == 9390.82


def test_read_message_decodes_balance_envelope() -> None:
    raw = json.dumps(
        {
            "recipient": "private.user.balances",
            "sequence": 3,
            "timestamp": 10,
            "payload": [
                {
                    "currency": "usd",
                    "balance": "140.55",
                    "available": "140.55",
                    "held": "0",
                    "trading_wallet": "140.55",
                    "collateral_wallet": "0",
                    "borrow_wallet": "0",
                    "lending_wallet": "0",
                }
            ],
        }
    )

    message = read_message(raw)

    assert message.feed is Feed.BALANCES
    assert message.payload == (
        Balance(
            currency="usd",
            balance=140.55,
            available=140.55,
            held=0.0,
            trading_wallet=140.55,
            collateral_wallet=0.0,
            borrow_wallet=0.0,
            lending_wallet=0.0,
        ),
    )


def test_read_message_decodes_subscription_ack() -> None:
    raw = json.dumps(
        {
            "type": "success",
            "sequence": 2,
            "timestamp": 1589389200001,
            "payload": {"action": "subscribe", "feeds": ["ticker.sfox.btcusd"]},
        }
    )

    message = read_message(raw)

    assert isinstance(message, SystemEnvelope)
    assert message.feed is Feed.SYSTEM
    assert message.payload.action == "subscribe"
    assert message.payload.feeds == ("ticker.sfox.btcusd",)
    assert not message.is_authentication_success()


def test_read_message_reports_each_failure_kind() -> None:
    with pytest.raises(ParseError):
        read_message("{oops")
    with pytest.raises(ClassificationError) as classification:
        read_message(_ticker_frame(recipient="candles.sfox.btcusd"))
    assert classification.value.recipient == "candles.sfox.btcusd"
    with pytest.raises(DecodeError) as header:
        read_message(_ticker_frame(sequence=-1))
    assert header.value.field == "sequence"
    with pytest.raises(DecodeError) as missing_payload:
        read_message(json.dumps({"recipient": "ticker.sfox.btcusd", "sequence": 1, "timestamp": 1}))
    assert missing_payload.value.field == "payload"


def test_authentication_ack_check() -> None:
    assert is_authentication_ack(AUTH_SUCCESS) is True
    assert is_authentication_ack(AUTH_SUCCESS.replace('"success"', '"error"')) is False


def test_authentication_ack_check_rejects_non_system_shape() -> None:
    raw = """
    {
        "msgType": "error",
        "payload": {
            "action": "authenticate"
        }
    }
    """

    with pytest.raises(DecodeError):
        is_authentication_ack(raw)
