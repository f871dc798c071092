from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Sequence
from typing import Any

from websockets.asyncio.client import ClientConnection
from websockets.asyncio.client import connect as ws_connect
from websockets.exceptions import ConnectionClosedOK, WebSocketException

from sfox_feed.core.config import DEFAULT_WS_SERVER_URL, Settings
from sfox_feed.core.enums import ConnectionState, Feed, SubscribeAction
from sfox_feed.core.errors import (
    AuthenticationError,
    FrameError,
    InitializationError,
    LockError,
    RxError,
    TxError,
)
from sfox_feed.messages.envelope import FeedMessage, RejectedFrame, read_message
from sfox_feed.messages.subscription import SubscriptionRequest, build, topics_message
from sfox_feed.messages.wire import encode_frame, excerpt

logger = logging.getLogger(__name__)

AUTHENTICATE_TYPE = "authenticate"


def _is_informational(status_code: int | None) -> bool:
    return status_code is not None and 100 <= status_code < 200


def authentication_message(api_key: str | None) -> dict[str, Any]:
    if not api_key:
        raise AuthenticationError("no API key configured; set SFOX_API_KEY or pass api_key")
    return {"type": AUTHENTICATE_TYPE, "apiKey": api_key}


class FeedClient:
    """One websocket session against the sFOX feed.

    Holds the socket, the credential used by :meth:`authenticate`, a read side
    (:meth:`frames` / :meth:`messages`) and a lock-guarded write side
    (:meth:`send`). There is no reconnect: once the transport fails the client
    is closed and the caller decides what to do next.
    """

    def __init__(
        self,
        url: str = DEFAULT_WS_SERVER_URL,
        *,
        api_key: str | None = None,
        open_timeout_seconds: float | None = 10.0,
        send_lock_timeout_seconds: float | None = 10.0,
    ) -> None:
        self._url = url
        self._api_key = api_key
        self._open_timeout_seconds = open_timeout_seconds
        self._send_lock_timeout_seconds = send_lock_timeout_seconds
        self._connection: ClientConnection | None = None
        self._write_lock = asyncio.Lock()
        self._state = ConnectionState.DISCONNECTED

    @classmethod
    def from_settings(cls, settings: Settings) -> FeedClient:
        return cls(
            settings.ws_server_url,
            api_key=settings.api_key,
            open_timeout_seconds=settings.ws_open_timeout_seconds,
            send_lock_timeout_seconds=settings.ws_send_lock_timeout_seconds,
        )

    @property
    def url(self) -> str:
        return self._url

    @property
    def state(self) -> ConnectionState:
        return self._state

    async def __aenter__(self) -> FeedClient:
        if self._state is ConnectionState.DISCONNECTED:
            await self.connect()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    def _set_state(self, state: ConnectionState) -> None:
        if state is self._state:
            return
        logger.info(
            "Feed connection state changed",
            extra={"url": self._url, "from_state": self._state.value, "to_state": state.value},
        )
        self._state = state

    async def connect(self) -> FeedClient:
        if self._state is not ConnectionState.DISCONNECTED:
            raise InitializationError(f"cannot connect from state {self._state.value}")

        self._set_state(ConnectionState.CONNECTING)
        try:
            connection = await ws_connect(self._url, open_timeout=self._open_timeout_seconds)
        except (WebSocketException, OSError, TimeoutError) as exc:
            self._set_state(ConnectionState.CLOSED)
            raise InitializationError(f"could not connect to websocket server {self._url}: {exc}") from exc

        status_code = connection.response.status_code if connection.response is not None else None
        if not _is_informational(status_code):
            await connection.close()
            self._set_state(ConnectionState.CLOSED)
            raise InitializationError(f"websocket handshake with {self._url} returned status {status_code}")

        self._connection = connection
        self._set_state(ConnectionState.CONNECTED)
        return self

    async def authenticate(self) -> None:
        """Send the authenticate frame. The server's ack arrives on the read side."""
        if self._state not in (ConnectionState.CONNECTED, ConnectionState.AUTHENTICATED):
            raise AuthenticationError(f"cannot authenticate from state {self._state.value}")

        message = authentication_message(self._api_key)
        try:
            await self.send(message)
        except (TxError, LockError) as exc:
            raise AuthenticationError(f"could not send authentication message: {exc}") from exc
        self._set_state(ConnectionState.AUTHENTICATED)

    async def send(self, message: dict[str, Any] | str) -> None:
        """Write one frame, holding the write lock for the duration of the send."""
        text = message if isinstance(message, str) else encode_frame(message)

        try:
            async with asyncio.timeout(self._send_lock_timeout_seconds):
                await self._write_lock.acquire()
        except TimeoutError as exc:
            raise LockError(
                f"write lock not acquired within {self._send_lock_timeout_seconds}s; retry the send"
            ) from exc

        try:
            connection = self._connection
            if connection is None or self._state is ConnectionState.CLOSED:
                raise TxError(f"cannot send while {self._state.value}")
            try:
                await connection.send(text)
            except (WebSocketException, OSError) as exc:
                logger.warning("Feed send failed", extra={"url": self._url, "reason": exc.__class__.__name__})
                self._set_state(ConnectionState.CLOSED)
                raise TxError(f"could not send message: {exc}") from exc
        finally:
            self._write_lock.release()

    async def send_request(self, request: SubscriptionRequest) -> None:
        await self.send(build(request))

    async def subscribe(self, feed: Feed, symbols: Sequence[str] = ()) -> None:
        await self.send_request(SubscriptionRequest.subscribe(feed, symbols))

    async def unsubscribe(self, feed: Feed, symbols: Sequence[str] = ()) -> None:
        await self.send_request(SubscriptionRequest.unsubscribe(feed, symbols))

    async def subscribe_topics(self, topics: Sequence[str]) -> None:
        await self.send(topics_message(SubscribeAction.SUBSCRIBE, topics))

    async def unsubscribe_topics(self, topics: Sequence[str]) -> None:
        await self.send(topics_message(SubscribeAction.UNSUBSCRIBE, topics))

    async def frames(self) -> AsyncIterator[str | bytes]:
        """Yield raw inbound frames until the connection is closed.

        A clean close (including :meth:`close` from another task) ends the
        iteration; an abnormal close raises :class:`RxError`.
        """
        connection = self._connection
        if connection is None:
            raise RxError(f"cannot read while {self._state.value}")

        try:
            async for raw in connection:
                yield raw
        except ConnectionClosedOK:
            pass
        except (WebSocketException, OSError) as exc:
            self._set_state(ConnectionState.CLOSED)
            raise RxError(f"websocket connection lost: {exc}") from exc
        self._set_state(ConnectionState.CLOSED)

    async def messages(self) -> AsyncIterator[FeedMessage | RejectedFrame]:
        """Yield a typed message per inbound frame, in arrival order.

        Frames that fail to parse, classify or decode are yielded as
        :class:`RejectedFrame` and the stream carries on.
        """
        async for raw in self.frames():
            try:
                message = read_message(raw)
            except FrameError as exc:
                logger.warning(
                    "Rejected inbound feed frame",
                    extra={"error_kind": exc.__class__.__name__, "detail": str(exc), "frame": excerpt(raw)},
                )
                yield RejectedFrame(raw=raw, error=exc)
                continue
            yield message

    async def close(self) -> None:
        connection = self._connection
        if connection is not None:
            await connection.close()
        self._set_state(ConnectionState.CLOSED)


async def connect(
    url: str = DEFAULT_WS_SERVER_URL,
    *,
    api_key: str | None = None,
    open_timeout_seconds: float | None = 10.0,
    send_lock_timeout_seconds: float | None = 10.0,
) -> FeedClient:
    client = FeedClient(
        url,
        api_key=api_key,
        open_timeout_seconds=open_timeout_seconds,
        send_lock_timeout_seconds=send_lock_timeout_seconds,
    )
    return await client.connect()
