"""
app/services/date_filter.py

Range slicing of raw row sets.
"""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, Sequence

from app.domain.date_range import DateRange
from app.parsing.dates import parse_date
from app.services.csv_loader import RawRow, RawRowSet

DEFAULT_DATE_FIELDS: tuple[str, ...] = ("Date", "Publish time", "publish_time", "date")


def row_date(
    row: RawRow,
    date_fields: Sequence[str] = DEFAULT_DATE_FIELDS,
    *,
    day_first: bool = False,
) -> datetime | None:
    """
    Return the first candidate date column of *row* that parses.
    """

    for field_name in date_fields:
        if field_name not in row:
            continue
        parsed = parse_date(row[field_name], day_first=day_first)
        if parsed is not None:
            return parsed
    return None


def has_date_column(rows: Iterable[RawRow], date_fields: Sequence[str]) -> bool:
    """
    True when any row carries one of *date_fields* as a column.
    """

    return any(field_name in row for row in rows for field_name in date_fields)


def filter_by_range(
    rows: RawRowSet,
    date_range: DateRange,
    date_fields: Sequence[str] = DEFAULT_DATE_FIELDS,
    *,
    day_first: bool = False,
) -> RawRowSet:
    """
    Keep the rows whose resolved date lies in ``[start, end]`` inclusive.

    Rows without a parseable date are always dropped.
    """

    selected = []
    for row in rows:
        moment = row_date(row, date_fields, day_first=day_first)
        if moment is not None and date_range.contains(moment):
            selected.append(row)
    return tuple(selected)
