"""
app/parsing/scalars.py

Total numeric coercion for raw CSV cell values.

Rules
-----
- ``None`` / ``""`` / whitespace-only        -> default
- finite int or float                       -> returned as a number
- string: thousands commas are stripped
- string containing ``%``: the sign is stripped; ``to_int`` rounds half up,
  ``to_float`` keeps the parsed value (no division by 100)
- otherwise the longest numeric prefix is parsed (``"12abc"`` -> 12)
- anything unparseable, NaN, or infinite     -> default

Neither function ever raises.
"""

from __future__ import annotations

import math
import re
from typing import Any

_FLOAT_PREFIX = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
_INT_PREFIX = re.compile(r"^[+-]?\d+")


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _finite_number(value: Any) -> float | int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and math.isfinite(value):
        return value
    return None


def _parse_float_prefix(text: str) -> float | None:
    match = _FLOAT_PREFIX.match(text.strip())
    if match is None:
        return None
    try:
        parsed = float(match.group(0))
    except ValueError:
        return None
    return parsed if math.isfinite(parsed) else None


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def to_int(value: Any, default: int = 0) -> int:
    """
    Coerce *value* to an integer, returning *default* when it cannot be read.
    """

    if _is_blank(value):
        return default

    number = _finite_number(value)
    if number is not None:
        return int(number)
    if not isinstance(value, str):
        return default

    text = value.replace(",", "")
    if "%" in text:
        parsed = _parse_float_prefix(text.replace("%", ""))
        return default if parsed is None else _round_half_up(parsed)

    match = _INT_PREFIX.match(text.strip())
    if match is None:
        return default
    return int(match.group(0))


def to_float(value: Any, default: float = 0) -> float:
    """
    Coerce *value* to a float, returning *default* when it cannot be read.
    """

    if _is_blank(value):
        return default

    number = _finite_number(value)
    if number is not None:
        return number
    if not isinstance(value, str):
        return default

    parsed = _parse_float_prefix(value.replace(",", "").replace("%", ""))
    return default if parsed is None else parsed
