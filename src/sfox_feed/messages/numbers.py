from __future__ import annotations

import math
import re
from typing import Any

_NUMBER_RE = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:e[+-]?\d+)?")
_UINT_RE = re.compile(r"\d+")


def _finite(value: float) -> float:
    if not math.isfinite(value):
        raise ValueError(f"{value!r} is not a finite number")
    return value


def _json_number(value: Any) -> float | None:
    # bool is an int subclass; JSON true/false are never amounts
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            return _finite(float(value))
        except OverflowError as exc:
            raise ValueError(f"{value!r} does not fit a float") from exc
    return None


def parse_decimal(value: Any) -> float:
    """Accept a JSON number or a numeric string.

    Strings may be plain (``"140.55"``) or carry an exponent with either
    marker (``"1e-08"``, ``"0E-8"``). ``nan`` and ``inf`` are rejected.
    """
    number = _json_number(value)
    if number is not None:
        return number
    if isinstance(value, str):
        text = value.strip().replace("E", "e")
        if _NUMBER_RE.fullmatch(text):
            return _finite(float(text))
        raise ValueError(f"{value!r} is not a number")
    raise ValueError(f"expected number or numeric string, got {type(value).__name__}")


def parse_uint(value: Any, *, allow_string: bool = False) -> int:
    if isinstance(value, bool):
        raise ValueError("expected unsigned integer, got bool")
    if isinstance(value, int):
        if value < 0:
            raise ValueError(f"{value} is negative")
        return value
    if allow_string and isinstance(value, str) and _UINT_RE.fullmatch(value.strip()):
        return int(value.strip())
    raise ValueError(f"expected unsigned integer, got {value!r}")


def parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized == "true":
            return True
        if normalized == "false":
            return False
    raise ValueError(f"expected boolean, got {value!r}")
