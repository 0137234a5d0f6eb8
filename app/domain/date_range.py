"""
app/domain/date_range.py

Date-range value objects used to scope every analysis call.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta


class InvalidDateRangeError(ValueError):
    """
    Raised when a date range is missing a bound or is inverted.
    """

    def __init__(self, message: str, *, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field

    def to_dict(self) -> dict[str, object]:
        return {"message": str(self), "field": self.field}


def _as_start(value: date | datetime) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.combine(value, time.min)


def _as_end(value: date | datetime) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.combine(value, time.max)


def _shift_years(value: datetime, years: int) -> datetime:
    try:
        return value.replace(year=value.year + years)
    except ValueError:
        # Feb 29 in a non-leap target year
        return value.replace(year=value.year + years, day=28)


@dataclass(frozen=True)
class DateRange:
    """
    Inclusive ``[start, end]`` interval.

    Plain ``date`` bounds are widened to whole days: the start becomes
    00:00 and the end 23:59:59.999999.
    """

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if self.start is None:
            raise InvalidDateRangeError("Date range start is required.", field="start")
        if self.end is None:
            raise InvalidDateRangeError("Date range end is required.", field="end")
        object.__setattr__(self, "start", _as_start(self.start))
        object.__setattr__(self, "end", _as_end(self.end))
        if self.start > self.end:
            raise InvalidDateRangeError(
                f"Date range start {self.start.isoformat()} is after end {self.end.isoformat()}.",
                field="start",
            )

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment <= self.end

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    def previous_period(self) -> DateRange:
        """
        Range of the same duration ending the day before this one starts.
        """

        new_end = self.start - timedelta(days=1)
        return DateRange(start=new_end - self.duration, end=new_end)

    def same_period_last_year(self) -> DateRange:
        return DateRange(start=_shift_years(self.start, -1), end=_shift_years(self.end, -1))


@dataclass(frozen=True)
class DateRangeSelection:
    """
    Current range plus an optional comparison range.

    The comparison range is only consulted when ``comparison_enabled`` is
    true, and in that case it must be present.
    """

    current: DateRange
    comparison: DateRange | None = None
    comparison_enabled: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.current, DateRange):
            raise InvalidDateRangeError("A current date range is required.", field="current")
        if self.comparison_enabled and not isinstance(self.comparison, DateRange):
            raise InvalidDateRangeError(
                "Comparison is enabled but no valid comparison range was supplied.",
                field="comparison",
            )

    @property
    def active_comparison(self) -> DateRange | None:
        return self.comparison if self.comparison_enabled else None


@dataclass(frozen=True)
class AvailableDateBounds:
    """
    Earliest and latest plausible dates across all loaded datasets.
    """

    earliest: datetime
    latest: datetime
    is_fallback: bool = False

    def as_range(self) -> DateRange:
        return DateRange(start=self.earliest, end=self.latest)
