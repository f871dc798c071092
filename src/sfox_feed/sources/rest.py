from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeAlias

import httpx

from sfox_feed.core.config import DEFAULT_HTTP_SERVER_URL, Settings
from sfox_feed.core.enums import VolumeInterval
from sfox_feed.core.errors import AuthenticationError, DecodeError
from sfox_feed.messages.payloads import FieldReader, Orderbook, decode_orderbook

logger = logging.getLogger(__name__)

API_VERSION_PREFIX = "/v1"
_VOLUME_LABEL = "volume"


@dataclass(frozen=True, slots=True)
class ExchangeVolume:
    exchange: str
    volume: float
    usd_notional: float


@dataclass(frozen=True, slots=True)
class ExchangeVolumeTick:
    timestamp: int
    volumes: tuple[ExchangeVolume, ...]


@dataclass(frozen=True, slots=True)
class TotalVolumeTick:
    timestamp: int
    volume: float
    usd_notional: float


VolumeTick: TypeAlias = ExchangeVolumeTick | TotalVolumeTick


def _decode_exchange_volume_tick(item: Any) -> ExchangeVolumeTick:
    fields = FieldReader(item, _VOLUME_LABEL)
    raw_volumes = fields.raw("volumes")
    if not isinstance(raw_volumes, list):
        raise DecodeError("expected a list", feed=_VOLUME_LABEL, field="volumes")
    volumes = []
    for index, raw_volume in enumerate(raw_volumes):
        volume_fields = FieldReader(raw_volume, _VOLUME_LABEL, f"volumes[{index}]")
        volumes.append(
            ExchangeVolume(
                exchange=volume_fields.string("exchange"),
                volume=volume_fields.decimal("volume"),
                usd_notional=volume_fields.decimal("usd_notional"),
            )
        )
    return ExchangeVolumeTick(timestamp=fields.uint("timestamp"), volumes=tuple(volumes))


def _decode_total_volume_tick(item: Any) -> TotalVolumeTick:
    fields = FieldReader(item, _VOLUME_LABEL)
    return TotalVolumeTick(
        timestamp=fields.uint("timestamp"),
        volume=fields.decimal("volume"),
        usd_notional=fields.decimal("usd_notional"),
    )


# Tried in order; the first shape that decodes cleanly wins.
_VOLUME_TICK_SHAPES: tuple[tuple[str, Callable[[Any], VolumeTick]], ...] = (
    ("by_exchange", _decode_exchange_volume_tick),
    ("total", _decode_total_volume_tick),
)


def decode_volume_tick(item: Any) -> VolumeTick:
    failures: list[str] = []
    for shape, decoder in _VOLUME_TICK_SHAPES:
        try:
            return decoder(item)
        except DecodeError as exc:
            failures.append(f"{shape}: {exc}")
    raise DecodeError(f"volume tick matches no known shape ({'; '.join(failures)})", feed=_VOLUME_LABEL)


class SFoxRESTClient:
    """Minimal HTTP collaborator sharing the feed client's credential and base URL."""

    def __init__(
        self,
        base_url: str = DEFAULT_HTTP_SERVER_URL,
        api_key: str | None = None,
        timeout_seconds: int = 20,
        *,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        headers = {"Authorization": f"Bearer {api_key}"} if api_key else {}
        self._client = httpx.Client(
            base_url=base_url.rstrip("/"),
            timeout=timeout_seconds,
            headers=headers,
            transport=transport,
        )
        self._has_credential = bool(api_key)

    @classmethod
    def from_settings(cls, settings: Settings, *, transport: httpx.BaseTransport | None = None) -> SFoxRESTClient:
        return cls(
            base_url=settings.http_server_url,
            api_key=settings.api_key,
            timeout_seconds=settings.http_timeout_seconds,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> SFoxRESTClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _get(self, resource: str, params: dict[str, Any] | None = None) -> Any:
        if not self._has_credential:
            raise AuthenticationError("no API key configured for REST requests")

        path = f"{API_VERSION_PREFIX}/{resource.lstrip('/')}"
        response = self._client.get(path, params=params)
        if response.status_code >= 400:
            logger.warning(
                "sFOX REST request failed",
                extra={"path": path, "status_code": response.status_code},
            )
        response.raise_for_status()
        return response.json()

    def order_book(self, pair: str) -> Orderbook:
        payload = self._get(f"markets/orderbook/{pair.lower()}")
        return decode_orderbook(payload)

    def volume(
        self,
        *,
        start_time: int,
        end_time: int,
        interval: VolumeInterval,
        currency: str,
        net: bool = False,
        by_exchange: bool = False,
    ) -> list[VolumeTick]:
        payload = self._get(
            "analytics/volume",
            {
                "start_time": start_time,
                "end_time": end_time,
                "interval": int(interval),
                "currency": currency.lower(),
                "net": str(net).lower(),
                "by_exchange": str(by_exchange).lower(),
            },
        )
        data = FieldReader(payload, _VOLUME_LABEL).raw("data")
        if not isinstance(data, list):
            raise DecodeError("expected a list", feed=_VOLUME_LABEL, field="data")
        return [decode_volume_tick(item) for item in data]
