from __future__ import annotations

import logging

_PACKAGE_LOGGER = "sfox_feed"
_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class _FeedLogHandler(logging.StreamHandler):
    """Stream handler installed by :func:`configure_logging`."""


def configure_logging(level: str = "INFO") -> logging.Logger:
    """Attach one stream handler to the package logger; repeated calls only update the level."""
    logger = logging.getLogger(_PACKAGE_LOGGER)
    logger.setLevel(level.upper())

    if not any(isinstance(handler, _FeedLogHandler) for handler in logger.handlers):
        handler = _FeedLogHandler()
        handler.setFormatter(logging.Formatter(_LOG_FORMAT))
        logger.addHandler(handler)

    return logger
