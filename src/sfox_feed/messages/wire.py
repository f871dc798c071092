from __future__ import annotations

import json
from typing import Any

from sfox_feed.core.errors import ParseError

_MAX_EXCERPT = 200


def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-standard JSON constant {name}")


def excerpt(raw: str | bytes | None, limit: int = _MAX_EXCERPT) -> str:
    if raw is None:
        return ""
    text = raw.decode("utf-8", errors="replace") if isinstance(raw, bytes) else raw
    if len(text) <= limit:
        return text
    return text[:limit] + "..."


def parse_frame(raw: str | bytes) -> Any:
    """Parse one inbound text frame into plain JSON values (dict, list, str, int, float, bool, None)."""
    if isinstance(raw, bytes):
        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ParseError(f"frame is not valid UTF-8: {exc}", raw=raw) from exc
    else:
        text = raw

    try:
        return json.loads(text, parse_constant=_reject_constant)
    except ValueError as exc:
        raise ParseError(f"frame is not valid JSON: {exc}", raw=raw) from exc


def encode_frame(value: dict[str, Any]) -> str:
    return json.dumps(value, separators=(",", ":"))
