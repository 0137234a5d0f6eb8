"""
analytics/social.py

Shared page-level metrics for Facebook and Instagram.

Expected files (``<prefix>`` is ``FB`` or ``IG``)
-------------------------------------------------
<prefix>_Follows.csv, <prefix>_Reach.csv, <prefix>_Visits.csv,
<prefix>_Interactions.csv
    Daily series with a ``Date`` column and a ``Primary`` value column.

Formulas
--------
Followers / Reach / Visits / Interactions = sum(Primary) over the range
Engagement Rate  = interactions / reach * 100   (0 when reach is 0)
Follower Growth  = sum(Primary) per calendar month (``YYYY-MM``)
"""

from __future__ import annotations

from collections import defaultdict
from typing import Any

from analytics.base import BasePlatformAnalyzer, Datasets, rate, snapshot_metrics, sum_metric
from app.domain.date_range import DateRangeSelection
from app.mappers.field_resolver import resolve
from app.manifest import SOCIAL_DATE_FIELDS
from app.parsing.scalars import to_int
from app.services.csv_loader import RawRowSet
from app.services.date_filter import row_date

PRIMARY_FIELDS = ("Primary",)

PAGE_SERIES: tuple[tuple[str, str], ...] = (
    ("followers", "Follows"),
    ("reach", "Reach"),
    ("visits", "Visits"),
    ("interactions", "Interactions"),
)


def _page_totals(series: dict[str, RawRowSet]) -> dict[str, Any]:
    totals: dict[str, Any] = {
        metric: sum_metric(rows, PRIMARY_FIELDS) for metric, rows in series.items()
    }
    totals["engagement"] = rate(totals["interactions"], totals["reach"])
    return totals


class SocialPageAnalyzer(BasePlatformAnalyzer):
    """
    Base for analyzers that also report page rank and follower growth.
    """

    file_prefix: str = ""

    def series_file(self, suffix: str) -> str:
        return f"{self.file_prefix}_{suffix}.csv"

    def page_rank(self, datasets: Datasets, selection: DateRangeSelection) -> dict[str, Any]:
        current_series: dict[str, RawRowSet] = {}
        comparison_series: dict[str, RawRowSet] = {}
        comparable = selection.active_comparison is not None

        for metric, suffix in PAGE_SERIES:
            filename = self.series_file(suffix)
            current_series[metric] = self.scope(
                datasets, filename, selection.current, SOCIAL_DATE_FIELDS
            )
            comparison_rows = self.scope_comparison(datasets, filename, selection, SOCIAL_DATE_FIELDS)
            if comparison_rows is None:
                comparable = False
            else:
                comparison_series[metric] = comparison_rows

        current = _page_totals(current_series)
        previous = _page_totals(comparison_series) if comparable else None
        return snapshot_metrics(current, previous)

    def follower_growth(
        self,
        datasets: Datasets,
        selection: DateRangeSelection,
    ) -> list[dict[str, Any]]:
        filename = self.series_file("Follows")
        rows = self.scope(datasets, filename, selection.current, SOCIAL_DATE_FIELDS)
        day_first = filename in self._day_first_files

        monthly: dict[str, int] = defaultdict(int)
        for row in rows:
            moment = row_date(row, SOCIAL_DATE_FIELDS, day_first=day_first)
            if moment is None:
                continue
            monthly[moment.strftime("%Y-%m")] += resolve(row, PRIMARY_FIELDS, coerce=to_int)

        return [{"month": month, "followers": monthly[month]} for month in sorted(monthly)]
