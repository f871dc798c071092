from __future__ import annotations

import logging
from pathlib import Path

import pytest

from sfox_feed.core.config import DEFAULT_HTTP_SERVER_URL, DEFAULT_WS_SERVER_URL, Settings
from sfox_feed.core.logging import configure_logging


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.chdir(tmp_path)
    for name in ("SFOX_API_KEY", "SFOX_AUTH_TOKEN", "SFOX_WS_SERVER_URL", "SFOX_HTTP_SERVER_URL"):
        monkeypatch.delenv(name, raising=False)


def test_settings_defaults_without_environment() -> None:
    settings = Settings()

    assert settings.api_key is None
    assert settings.ws_server_url == DEFAULT_WS_SERVER_URL
    assert settings.http_server_url == DEFAULT_HTTP_SERVER_URL


def test_settings_read_prefixed_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SFOX_API_KEY", "abc123")
    monkeypatch.setenv("SFOX_WS_SERVER_URL", "ws://localhost:8080/ws")

    settings = Settings()

    assert settings.api_key == "abc123"
    assert settings.ws_server_url == "ws://localhost:8080/ws"


def test_settings_accept_legacy_auth_token_variable(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SFOX_AUTH_TOKEN", "legacy")

    assert Settings().api_key == "legacy"


def test_configure_logging_is_idempotent() -> None:
    logger = configure_logging("debug")
    handler_count = len(logger.handlers)

    configure_logging("WARNING")

    assert len(logger.handlers) == handler_count
    assert logger.level == logging.WARNING


def test_configure_logging_installs_a_single_stream_handler() -> None:
    logger = configure_logging()
    configure_logging()

    installed = [handler for handler in logger.handlers if isinstance(handler, logging.StreamHandler)]
    assert len(installed) == 1
