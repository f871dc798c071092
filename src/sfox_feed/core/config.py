from __future__ import annotations

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_WS_SERVER_URL = "wss://ws.sfox.com/ws"
DEFAULT_HTTP_SERVER_URL = "https://api.sfox.com"


class Settings(BaseSettings):
    api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("SFOX_API_KEY", "SFOX_AUTH_TOKEN"),
    )

    ws_server_url: str = Field(default=DEFAULT_WS_SERVER_URL)
    http_server_url: str = Field(default=DEFAULT_HTTP_SERVER_URL)

    http_timeout_seconds: int = Field(default=20, ge=1)
    ws_open_timeout_seconds: float = Field(default=10.0, ge=1)
    ws_send_lock_timeout_seconds: float = Field(default=10.0, gt=0)

    log_level: str = Field(default="INFO")

    model_config = SettingsConfigDict(
        env_prefix="SFOX_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )
