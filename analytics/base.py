"""
analytics/base.py

Abstract base class and shared formulas for per-platform analyzers.

Every analyzer receives the read-only dataset mapping and a validated
:class:`DateRangeSelection` and returns a plain dictionary snapshot. The
snapshot always carries these keys, whatever the state of the backing
files:

metrics : dict
    Current-period totals.
comparison_metrics : dict | None
    Same totals for the comparison period; None when comparison is
    disabled or the backing data has no date column.
changes : dict
    Percentage change per metric; None when it cannot be computed.

Division-by-zero cases return None (changes) or 0.0 (rates), never
``inf`` or ``nan``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable, Iterable, Mapping, Sequence, TypeVar

from app.domain.date_range import DateRange, DateRangeSelection
from app.mappers.field_resolver import resolve
from app.parsing.scalars import to_int
from app.services.csv_loader import EMPTY_ROW_SET, RawRow, RawRowSet
from app.services.date_filter import DEFAULT_DATE_FIELDS, filter_by_range, has_date_column

_SENTINEL = None  # value stored when a metric cannot be computed

NOT_SET_LABELS = frozenset({"(not set)", "not set"})

T = TypeVar("T")

Datasets = Mapping[str, RawRowSet]


class BasePlatformAnalyzer(ABC):
    """
    Contract for per-platform analyzers.

    No I/O and no mutation of the datasets are permitted inside
    :meth:`analyze`; identical inputs must produce identical snapshots.
    """

    platform: str = ""

    def __init__(self, *, day_first_files: Iterable[str] = ()) -> None:
        self._day_first_files = frozenset(day_first_files)

    @abstractmethod
    def analyze(self, datasets: Datasets, selection: DateRangeSelection) -> dict[str, Any]:
        """
        Compute this platform's snapshot for *selection*.

        Parameters
        ----------
        datasets:
            Row sets keyed by manifest filename. Missing files read as empty.
        selection:
            Current range plus the optional comparison range.

        Returns
        -------
        dict[str, Any]
            JSON-serializable snapshot.
        """

    # ------------------------------------------------------------------
    # Scoping
    # ------------------------------------------------------------------

    @staticmethod
    def rows_of(datasets: Datasets, filename: str) -> RawRowSet:
        rows = datasets.get(filename)
        return rows if rows else EMPTY_ROW_SET

    def scope(
        self,
        datasets: Datasets,
        filename: str,
        date_range: DateRange,
        date_fields: Sequence[str] = DEFAULT_DATE_FIELDS,
    ) -> RawRowSet:
        """
        Rows of *filename* inside *date_range*.

        A file with no date column at all is a period aggregate export and
        is used whole; otherwise rows are filtered strictly.
        """

        rows = self.rows_of(datasets, filename)
        if not has_date_column(rows, date_fields):
            return rows
        return filter_by_range(
            rows,
            date_range,
            date_fields,
            day_first=filename in self._day_first_files,
        )

    def scope_comparison(
        self,
        datasets: Datasets,
        filename: str,
        selection: DateRangeSelection,
        date_fields: Sequence[str] = DEFAULT_DATE_FIELDS,
    ) -> RawRowSet | None:
        """
        Rows of *filename* inside the comparison range, or None when there
        is nothing to compare against.
        """

        comparison = selection.active_comparison
        if comparison is None:
            return None
        rows = self.rows_of(datasets, filename)
        if rows and not has_date_column(rows, date_fields):
            return None
        return self.scope(datasets, filename, comparison, date_fields)


# ---------------------------------------------------------------------------
# Pure formula functions
# ---------------------------------------------------------------------------


def percent_change(current: float | None, previous: float | None) -> float | None:
    """
    (current - previous) / previous * 100.

    Returns None when either side is missing or previous is zero.
    """
    if current is None or previous is None or previous == 0:
        return _SENTINEL
    return (current - previous) / previous * 100


def changes_between(
    current: Mapping[str, float | None],
    previous: Mapping[str, float | None] | None,
) -> dict[str, float | None]:
    """Percentage change for every key of *current*."""
    if previous is None:
        return {key: _SENTINEL for key in current}
    return {key: percent_change(value, previous.get(key)) for key, value in current.items()}


def rate(numerator: float, denominator: float, *, scale: float = 100.0) -> float:
    """numerator / denominator * scale, or 0.0 when denominator <= 0."""
    if denominator <= 0:
        return 0.0
    return numerator / denominator * scale


def sum_metric(
    rows: Iterable[RawRow],
    candidates: Sequence[str],
    *,
    coerce: Callable[[Any, Any], Any] = to_int,
) -> Any:
    """Sum a resolved metric over *rows*; counts default to exact integers."""
    return sum(resolve(row, candidates, 0, coerce=coerce) for row in rows)


def top_n(items: Iterable[T], key: Callable[[T], float], limit: int | None) -> list[T]:
    """Stable descending sort truncated to *limit* (None keeps everything)."""
    ranked = sorted(items, key=key, reverse=True)
    return ranked if limit is None else ranked[:limit]


def is_set_label(label: str) -> bool:
    """False for blank and GA ``(not set)`` labels."""
    return bool(label) and label.strip().lower() not in NOT_SET_LABELS


def snapshot_metrics(
    current: dict[str, Any],
    previous: dict[str, Any] | None,
) -> dict[str, Any]:
    """Package current totals, comparison totals, and per-metric changes."""
    return {
        "metrics": current,
        "comparison_metrics": previous,
        "changes": changes_between(current, previous),
    }
