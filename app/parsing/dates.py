"""
app/parsing/dates.py

Multi-format date recognition for drifting CSV exports.

Strategies are tried in a fixed order and the first one that yields a valid
calendar date wins:

    1. ISO 8601 (``2024-01-15``, ``2024-01-15T10:00:00Z``)
    2. ``MM/DD/YYYY``            (swapped with 3 when ``day_first`` is set)
    3. ``DD/MM/YYYY``
    4. ``YYYY-MM-DD`` without zero padding
    5. ``MM-DD-YYYY``
    6. ``Month D[st|nd|rd|th], YYYY``
    7. GA compact stamps ``YYYYMMDD`` / ``YYYYMMDDHH``
    8. millisecond Unix timestamp at or after 2000-01-01
    9. pandas' general parser, only for non-numeric strings carrying a
       four-digit year

All results are naive datetimes; timezone-aware inputs are converted to UTC
first. Unparseable input returns ``None``.
"""

from __future__ import annotations

import re
import warnings
from datetime import date, datetime, timezone
from typing import Any, Callable

import pandas as pd

MIN_TIMESTAMP_MS = 946_684_800_000  # 2000-01-01T00:00:00Z

MONTH_NAMES: tuple[str, ...] = (
    "january",
    "february",
    "march",
    "april",
    "may",
    "june",
    "july",
    "august",
    "september",
    "october",
    "november",
    "december",
)

_TIME_SUFFIX = r"(?:[ T,]+(\d{1,2}):(\d{2})(?::(\d{2}))?\s*([AaPp][Mm])?)?"
_ISO_PREFIX = re.compile(r"^\d{4}-\d{2}-\d{2}")
_SLASHED = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})" + _TIME_SUFFIX + r"$")
_YEAR_FIRST_DASHED = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})" + _TIME_SUFFIX + r"$")
_YEAR_LAST_DASHED = re.compile(r"^(\d{1,2})-(\d{1,2})-(\d{4})" + _TIME_SUFFIX + r"$")
_LONG_FORM = re.compile(
    r"(" + "|".join(MONTH_NAMES) + r")\s+(\d{1,2})(?:st|nd|rd|th)?,?\s+(\d{4})",
    re.IGNORECASE,
)
_COMPACT = re.compile(r"^(\d{4})(\d{2})(\d{2})(\d{2})?$")
_DIGITS = re.compile(r"^\d+$")
_FOUR_DIGIT_YEAR = re.compile(r"(?<!\d)\d{4}(?!\d)")
_BARE_NUMBER = re.compile(r"^[+-]?\d+(?:\.\d+)?$")


def _to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def _build(
    year: str,
    month: str,
    day: str,
    hour: str | None = None,
    minute: str | None = None,
    second: str | None = None,
    meridiem: str | None = None,
) -> datetime:
    hours = int(hour) if hour else 0
    if meridiem:
        if not 1 <= hours <= 12:
            raise ValueError("12-hour clock value out of range")
        hours = hours % 12 + (12 if meridiem.lower() == "pm" else 0)
    return datetime(
        int(year),
        int(month),
        int(day),
        hours,
        int(minute) if minute else 0,
        int(second) if second else 0,
    )


# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------


def _from_iso(text: str) -> datetime | None:
    if not _ISO_PREFIX.match(text):
        return None
    normalized = text[:-1] + "+00:00" if text.endswith("Z") else text
    return _to_naive_utc(datetime.fromisoformat(normalized))


def _from_month_first(text: str) -> datetime | None:
    match = _SLASHED.match(text)
    if match is None:
        return None
    month, day, year, *clock = match.groups()
    return _build(year, month, day, *clock)


def _from_day_first(text: str) -> datetime | None:
    match = _SLASHED.match(text)
    if match is None:
        return None
    day, month, year, *clock = match.groups()
    return _build(year, month, day, *clock)


def _from_year_first_dashed(text: str) -> datetime | None:
    match = _YEAR_FIRST_DASHED.match(text)
    if match is None:
        return None
    year, month, day, *clock = match.groups()
    return _build(year, month, day, *clock)


def _from_year_last_dashed(text: str) -> datetime | None:
    match = _YEAR_LAST_DASHED.match(text)
    if match is None:
        return None
    month, day, year, *clock = match.groups()
    return _build(year, month, day, *clock)


def _from_long_form(text: str) -> datetime | None:
    match = _LONG_FORM.search(text)
    if match is None:
        return None
    month = MONTH_NAMES.index(match.group(1).lower()) + 1
    return datetime(int(match.group(3)), month, int(match.group(2)))


def _from_compact(text: str) -> datetime | None:
    match = _COMPACT.match(text)
    if match is None:
        return None
    year, month, day, hour = match.groups()
    return _build(year, month, day, hour)


def _from_epoch_millis(text: str) -> datetime | None:
    if not _DIGITS.match(text):
        return None
    millis = int(text)
    if millis < MIN_TIMESTAMP_MS:
        return None
    return datetime.fromtimestamp(millis / 1000, tz=timezone.utc).replace(tzinfo=None)


def _from_pandas(text: str) -> datetime | None:
    # metric values such as "2023" or "2012.4" watch hours are not dates
    if _BARE_NUMBER.match(text) or not _FOUR_DIGIT_YEAR.search(text):
        return None
    with warnings.catch_warnings():
        warnings.simplefilter("ignore")
        parsed = pd.to_datetime(text, errors="coerce")
    if parsed is None or pd.isna(parsed):
        return None
    return _to_naive_utc(parsed.to_pydatetime())


_Strategy = Callable[[str], "datetime | None"]

_MONTH_FIRST_ORDER: tuple[_Strategy, ...] = (
    _from_iso,
    _from_month_first,
    _from_day_first,
    _from_year_first_dashed,
    _from_year_last_dashed,
    _from_long_form,
    _from_compact,
    _from_epoch_millis,
    _from_pandas,
)

_DAY_FIRST_ORDER: tuple[_Strategy, ...] = (
    _from_iso,
    _from_day_first,
    _from_month_first,
    *_MONTH_FIRST_ORDER[3:],
)


def parse_date(raw: Any, *, day_first: bool = False) -> datetime | None:
    """
    Parse *raw* into a naive datetime, or return ``None``.

    ``day_first`` resolves ``NN/NN/YYYY`` as day/month for sources that
    export in that locale.
    """

    if raw is None:
        return None
    if isinstance(raw, datetime):
        return _to_naive_utc(raw)
    if isinstance(raw, date):
        return datetime(raw.year, raw.month, raw.day)
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        raw = str(raw)
    if not isinstance(raw, str):
        return None

    text = raw.strip()
    if not text:
        return None

    for strategy in _DAY_FIRST_ORDER if day_first else _MONTH_FIRST_ORDER:
        try:
            parsed = strategy(text)
        except (ValueError, TypeError, OverflowError, OSError):
            continue
        if parsed is not None:
            return parsed
    return None
