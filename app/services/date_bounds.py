"""
app/services/date_bounds.py

Available-range extraction across all loaded datasets.

Two scans feed one pool of dates:

- a generic scan of the first ``sample_size`` rows of every dataset,
  reading every column whose name contains ``date``, ``time`` or
  ``publish``
- a full scan of the documented date columns of each known file

Dates outside ``[2000-01-01, end of next year]`` are discarded. When no
date survives, or the span is shorter than a day, a trailing one-year
window ending now is returned instead.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from functools import partial
from typing import Callable, Iterable, Mapping, Sequence

from app.domain.date_range import AvailableDateBounds
from app.parsing.dates import parse_date
from app.services.csv_loader import RawRow, RawRowSet

logger = logging.getLogger(__name__)

DATE_KEY_MARKERS: tuple[str, ...] = ("date", "time", "publish")
MIN_PLAUSIBLE_YEAR = 2000
MIN_SPAN = timedelta(days=1)


def fallback_bounds(now: datetime) -> AvailableDateBounds:
    """
    One-year trailing window ending at *now*.
    """

    try:
        earliest = now.replace(year=now.year - 1)
    except ValueError:
        earliest = now.replace(year=now.year - 1, day=28)
    return AvailableDateBounds(earliest=earliest, latest=now, is_fallback=True)


def _looks_like_date_key(key: str) -> bool:
    lowered = key.lower()
    return any(marker in lowered for marker in DATE_KEY_MARKERS)


def _sampled_dates(
    rows: Sequence[RawRow],
    sample_size: int,
    parse: Callable[[object], datetime | None],
) -> Iterable[datetime]:
    for row in rows[:sample_size]:
        for key, value in row.items():
            if not isinstance(value, str) or not _looks_like_date_key(key):
                continue
            parsed = parse(value)
            if parsed is not None:
                yield parsed


def _known_field_dates(
    rows: Sequence[RawRow],
    fields: Sequence[str],
    parse: Callable[[object], datetime | None],
) -> Iterable[datetime]:
    for row in rows:
        for field_name in fields:
            if field_name not in row:
                continue
            parsed = parse(row[field_name])
            if parsed is not None:
                yield parsed


def extract_bounds(
    datasets: Mapping[str, RawRowSet],
    *,
    known_date_fields: Mapping[str, Sequence[str]] | None = None,
    sample_size: int = 100,
    day_first_files: Iterable[str] = (),
    now: datetime | None = None,
) -> AvailableDateBounds:
    """
    Compute the earliest and latest plausible dates across *datasets*.
    """

    reference = now or datetime.now()
    latest_year = reference.year + 1
    known = known_date_fields or {}
    day_first = set(day_first_files)

    collected: list[datetime] = []
    for filename, rows in datasets.items():
        if not rows:
            continue

        parse = partial(parse_date, day_first=filename in day_first)
        candidates = list(_sampled_dates(rows, sample_size, parse))
        candidates.extend(_known_field_dates(rows, known.get(filename, ()), parse))
        collected.extend(
            moment for moment in candidates if MIN_PLAUSIBLE_YEAR <= moment.year <= latest_year
        )

    if not collected:
        logger.warning("No plausible dates found in %d dataset(s); using fallback window", len(datasets))
        return fallback_bounds(reference)

    earliest = min(collected)
    latest = max(collected)
    if latest - earliest < MIN_SPAN:
        logger.warning(
            "Date span %s..%s is shorter than a day; using fallback window",
            earliest.isoformat(),
            latest.isoformat(),
        )
        return fallback_bounds(reference)

    logger.debug("Available date bounds %s..%s from %d dates", earliest, latest, len(collected))
    return AvailableDateBounds(earliest=earliest, latest=latest)
