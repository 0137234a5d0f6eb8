"""
analytics/utm.py

UTM campaign rollups from GA_UTMs.csv.

Rows are dated by the GA compact ``Date + hour (YYYYMMDDHH)`` column and
grouped four ways: campaign, source / medium, source platform, and ad
content. ``(not set)`` labels are dropped from every group.

Per-group engagement rate is the average of the exported row rates
(``sum(rate) / count``), not engaged sessions over sessions.
"""

from __future__ import annotations

from typing import Any

from analytics.base import (
    BasePlatformAnalyzer,
    Datasets,
    is_set_label,
    percent_change,
    snapshot_metrics,
    sum_metric,
    top_n,
)
from app.domain.date_range import DateRangeSelection
from app.mappers.field_resolver import resolve, resolve_text
from app.manifest import UTM_DATE_FIELDS
from app.parsing.scalars import to_float, to_int
from app.services.csv_loader import RawRowSet

UTM_FILE = "GA_UTMs.csv"
TOP_GROUPS = 10

SESSION_FIELDS = ("Sessions",)
ENGAGED_SESSION_FIELDS = ("Engaged sessions",)
ENGAGEMENT_RATE_FIELDS = ("Engagement rate",)
KEY_EVENT_FIELDS = ("Key events",)

# rollup name -> (label columns, top-N limit)
ROLLUPS: dict[str, tuple[tuple[str, ...], int | None]] = {
    "campaigns": (("Manual campaign name", "campaign name"), TOP_GROUPS),
    "sources": (("Manual source / medium", "source / medium"), TOP_GROUPS),
    "platforms": (("Manual source platform", "source platform"), None),
    "content": (("Manual ad content", "ad content"), TOP_GROUPS),
}


def _new_group(name: str) -> dict[str, Any]:
    return {
        "name": name,
        "sessions": 0,
        "comparison_sessions": 0,
        "engaged_sessions": 0,
        "key_events": 0.0,
        "rate_sum": 0.0,
        "count": 0,
    }


def rollup(
    current_rows: RawRowSet,
    comparison_rows: RawRowSet | None,
    label_fields: tuple[str, ...],
    limit: int | None,
) -> list[dict[str, Any]]:
    """
    Group sessions by the label in *label_fields* for both periods.
    """

    groups: dict[str, dict[str, Any]] = {}
    for row in current_rows:
        name = resolve_text(row, label_fields)
        if not is_set_label(name):
            continue
        group = groups.setdefault(name, _new_group(name))
        group["sessions"] += resolve(row, SESSION_FIELDS, coerce=to_int)
        group["engaged_sessions"] += resolve(row, ENGAGED_SESSION_FIELDS, coerce=to_int)
        group["key_events"] += resolve(row, KEY_EVENT_FIELDS, coerce=to_float)
        group["rate_sum"] += resolve(row, ENGAGEMENT_RATE_FIELDS, coerce=to_float)
        group["count"] += 1

    for row in comparison_rows or ():
        name = resolve_text(row, label_fields)
        if not is_set_label(name):
            continue
        group = groups.setdefault(name, _new_group(name))
        group["comparison_sessions"] += resolve(row, SESSION_FIELDS, coerce=to_int)

    results = []
    for group in groups.values():
        rate_sum = group.pop("rate_sum")
        group["engagement_rate"] = rate_sum / group["count"] if group["count"] else 0.0
        group["change"] = (
            percent_change(group["sessions"], group["comparison_sessions"])
            if comparison_rows is not None
            else None
        )
        results.append(group)
    return top_n(results, key=lambda group: group["sessions"], limit=limit)


def _totals(rows: RawRowSet) -> dict[str, Any]:
    return {
        "sessions": sum_metric(rows, SESSION_FIELDS),
        "engaged_sessions": sum_metric(rows, ENGAGED_SESSION_FIELDS),
        "key_events": sum_metric(rows, KEY_EVENT_FIELDS, coerce=to_float),
    }


class UTMAnalyzer(BasePlatformAnalyzer):
    """
    Campaign, source, platform, and ad-content rollups.
    """

    platform = "utm"

    def analyze(self, datasets: Datasets, selection: DateRangeSelection) -> dict[str, Any]:
        current_rows = self.scope(datasets, UTM_FILE, selection.current, UTM_DATE_FIELDS)
        comparison_rows = self.scope_comparison(datasets, UTM_FILE, selection, UTM_DATE_FIELDS)
        previous = _totals(comparison_rows) if comparison_rows is not None else None

        snapshot = snapshot_metrics(_totals(current_rows), previous)
        for name, (label_fields, limit) in ROLLUPS.items():
            snapshot[name] = rollup(current_rows, comparison_rows, label_fields, limit)
        return snapshot
