"""
analytics/web.py

Google Analytics analyzer: traffic acquisition, demographics, and pages.

Expected files
--------------
GA_Traffic_Acquisition.csv
    Sessions, engaged sessions, and engagement rate per channel group.
GA_Demographics.csv
    Users and sessions per country / city / language.
GA_Pages_And_Screens.csv
    Views, active users, and event count per page path.

Formulas
--------
Channel Engagement Rate  = sum(row engagement rate) / row count
Overall Engagement Rate  = sum(engaged sessions) / sum(sessions) * 100
Views per User           = page views / active users

The two engagement formulas intentionally differ: the per-channel figure
averages the exported rates as-is while the overall figure is a ratio of
sums.
"""

from __future__ import annotations

import logging
from typing import Any

from analytics.base import (
    BasePlatformAnalyzer,
    Datasets,
    is_set_label,
    rate,
    snapshot_metrics,
    sum_metric,
    top_n,
)
from app.domain.date_range import DateRangeSelection
from app.mappers.field_resolver import resolve, resolve_text
from app.manifest import WEB_DATE_FIELDS
from app.parsing.scalars import to_float, to_int
from app.services.csv_loader import RawRowSet

logger = logging.getLogger(__name__)

TRAFFIC_FILE = "GA_Traffic_Acquisition.csv"
DEMOGRAPHICS_FILE = "GA_Demographics.csv"
PAGES_FILE = "GA_Pages_And_Screens.csv"
TOP_DEMOGRAPHICS = 10
TOP_PAGES = 10

CHANNEL_FIELDS = ("Session primary channel group (Default Channel Group)", "channel group")
SESSION_FIELDS = ("Sessions",)
ENGAGED_SESSION_FIELDS = ("Engaged sessions",)
ENGAGEMENT_RATE_FIELDS = ("Engagement rate",)
COUNTRY_FIELDS = ("Country",)
CITY_FIELDS = ("City",)
LANGUAGE_FIELDS = ("Language",)
TOTAL_USER_FIELDS = ("Total users",)
NEW_USER_FIELDS = ("New users",)
RETURNING_USER_FIELDS = ("Returning users",)
PAGE_PATH_FIELDS = ("Page path and screen class", "Page path")
PAGE_TITLE_FIELDS = ("Page title and screen class", "Page title")
VIEW_FIELDS = ("Views",)
ACTIVE_USER_FIELDS = ("Active users",)
EVENT_FIELDS = ("Event count",)


# ---------------------------------------------------------------------------
# Traffic acquisition
# ---------------------------------------------------------------------------


def _channels(rows: RawRowSet) -> list[dict[str, Any]]:
    grouped: dict[str, dict[str, Any]] = {}
    for row in rows:
        name = resolve_text(row, CHANNEL_FIELDS)
        if not is_set_label(name):
            continue
        channel = grouped.setdefault(
            name,
            {"name": name, "sessions": 0, "engaged_sessions": 0, "rate_sum": 0.0, "count": 0},
        )
        channel["sessions"] += resolve(row, SESSION_FIELDS, coerce=to_int)
        channel["engaged_sessions"] += resolve(row, ENGAGED_SESSION_FIELDS, coerce=to_int)
        channel["rate_sum"] += resolve(row, ENGAGEMENT_RATE_FIELDS, coerce=to_float)
        channel["count"] += 1

    channels = [
        {
            "name": channel["name"],
            "sessions": channel["sessions"],
            "engaged_sessions": channel["engaged_sessions"],
            "engagement_rate": channel["rate_sum"] / channel["count"] if channel["count"] else 0.0,
        }
        for channel in grouped.values()
    ]
    return top_n(channels, key=lambda channel: channel["sessions"], limit=None)


def _traffic_totals(rows: RawRowSet) -> dict[str, Any]:
    sessions = sum_metric(rows, SESSION_FIELDS)
    engaged = sum_metric(rows, ENGAGED_SESSION_FIELDS)
    return {
        "sessions": sessions,
        "engaged_sessions": engaged,
        "engagement_rate": rate(engaged, sessions),
    }


# ---------------------------------------------------------------------------
# Demographics
# ---------------------------------------------------------------------------


def _group_users(
    rows: RawRowSet,
    label_fields: tuple[str, ...],
    *,
    with_sessions: bool,
) -> list[dict[str, Any]]:
    grouped: dict[str, dict[str, Any]] = {}
    for row in rows:
        name = resolve_text(row, label_fields)
        if not is_set_label(name):
            continue
        entry = grouped.get(name)
        if entry is None:
            entry = grouped[name] = {"name": name, "users": 0}
            if with_sessions:
                entry["sessions"] = 0
        entry["users"] += resolve(row, TOTAL_USER_FIELDS, coerce=to_int)
        if with_sessions:
            entry["sessions"] += resolve(row, SESSION_FIELDS, coerce=to_int)
    return top_n(grouped.values(), key=lambda entry: entry["users"], limit=TOP_DEMOGRAPHICS)


def _demographic_totals(rows: RawRowSet) -> dict[str, Any]:
    return {
        "total_users": sum_metric(rows, TOTAL_USER_FIELDS),
        "new_users": sum_metric(rows, NEW_USER_FIELDS),
        "returning_users": sum_metric(rows, RETURNING_USER_FIELDS),
        "demographic_sessions": sum_metric(rows, SESSION_FIELDS),
    }


# ---------------------------------------------------------------------------
# Pages and screens
# ---------------------------------------------------------------------------


def _pages(rows: RawRowSet) -> list[dict[str, Any]]:
    grouped: dict[str, dict[str, Any]] = {}
    for row in rows:
        path = resolve_text(row, PAGE_PATH_FIELDS, "Unknown")
        page = grouped.setdefault(
            path,
            {
                "path": path,
                "title": resolve_text(row, PAGE_TITLE_FIELDS, "Unknown"),
                "views": 0,
                "users": 0,
                "events": 0,
            },
        )
        page["views"] += resolve(row, VIEW_FIELDS, coerce=to_int)
        page["users"] += resolve(row, ACTIVE_USER_FIELDS, coerce=to_int)
        page["events"] += resolve(row, EVENT_FIELDS, coerce=to_int)
    return list(grouped.values())


def _page_totals(pages: list[dict[str, Any]]) -> dict[str, Any]:
    views = sum(page["views"] for page in pages)
    users = sum(page["users"] for page in pages)
    return {
        "page_views": views,
        "active_users": users,
        "views_per_user": rate(views, users, scale=1.0),
    }


class WebAnalyzer(BasePlatformAnalyzer):
    """
    Website traffic, audience, and page performance.
    """

    platform = "web"

    def analyze(self, datasets: Datasets, selection: DateRangeSelection) -> dict[str, Any]:
        traffic_rows = self.scope(datasets, TRAFFIC_FILE, selection.current, WEB_DATE_FIELDS)
        demographic_rows = self.scope(datasets, DEMOGRAPHICS_FILE, selection.current, WEB_DATE_FIELDS)
        page_rows = self.scope(datasets, PAGES_FILE, selection.current, WEB_DATE_FIELDS)
        pages = _pages(page_rows)

        current = {
            **_traffic_totals(traffic_rows),
            **_demographic_totals(demographic_rows),
            **_page_totals(pages),
        }
        previous = self._comparison_totals(datasets, selection)
        logger.debug(
            "Web totals sessions=%s users=%s page_views=%s",
            current["sessions"],
            current["total_users"],
            current["page_views"],
        )

        return {
            **snapshot_metrics(current, previous),
            "channels": _channels(traffic_rows),
            "top_countries": _group_users(demographic_rows, COUNTRY_FIELDS, with_sessions=True),
            "top_cities": _group_users(demographic_rows, CITY_FIELDS, with_sessions=True),
            "top_languages": _group_users(demographic_rows, LANGUAGE_FIELDS, with_sessions=False),
            "top_pages": top_n(pages, key=lambda page: page["views"], limit=TOP_PAGES),
        }

    def _comparison_totals(
        self,
        datasets: Datasets,
        selection: DateRangeSelection,
    ) -> dict[str, Any] | None:
        traffic = self.scope_comparison(datasets, TRAFFIC_FILE, selection, WEB_DATE_FIELDS)
        demographics = self.scope_comparison(datasets, DEMOGRAPHICS_FILE, selection, WEB_DATE_FIELDS)
        page_rows = self.scope_comparison(datasets, PAGES_FILE, selection, WEB_DATE_FIELDS)
        if traffic is None or demographics is None or page_rows is None:
            return None
        return {
            **_traffic_totals(traffic),
            **_demographic_totals(demographics),
            **_page_totals(_pages(page_rows)),
        }
