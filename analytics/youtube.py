"""
analytics/youtube.py

YouTube analyzer.

Expected files
--------------
YouTube_Age.csv, YouTube_Gender.csv
    Period aggregates: one row per age band / gender with percentage columns.
YouTube_Geography.csv
    Period aggregate: views and watch time per country.
YouTube_Subscription_Status.csv
    Period aggregate: views and watch time per subscription status.
YouTube_Content.csv
    One row per video, dated by ``Video publish time``.

Formulas
--------
Bucket Percentage   = bucket views / total views * 100
Subscriber Share    = subscribed views / total views * 100
"""

from __future__ import annotations

from typing import Any

from analytics.base import BasePlatformAnalyzer, Datasets, rate, snapshot_metrics, sum_metric, top_n
from app.domain.date_range import DateRangeSelection
from app.mappers.field_resolver import resolve, resolve_text
from app.manifest import SOCIAL_DATE_FIELDS, YOUTUBE_CONTENT_DATE_FIELDS
from app.parsing.scalars import to_float, to_int
from app.services.csv_loader import RawRow, RawRowSet

AGE_FILE = "YouTube_Age.csv"
GENDER_FILE = "YouTube_Gender.csv"
GEOGRAPHY_FILE = "YouTube_Geography.csv"
SUBSCRIPTION_FILE = "YouTube_Subscription_Status.csv"
CONTENT_FILE = "YouTube_Content.csv"
TOP_COUNTRIES = 10
TOP_VIDEOS = 5

SUBSCRIBED_STATUS = "subscribed"

VIEWS_FIELDS = ("Views",)
VIEWS_PCT_FIELDS = ("Views (%)",)
WATCH_TIME_FIELDS = ("Watch time (hours)",)
WATCH_TIME_PCT_FIELDS = ("Watch time (hours) (%)",)
AVG_DURATION_FIELDS = ("Average view duration",)
AVG_PCT_VIEWED_FIELDS = ("Average percentage viewed (%)",)
AGE_FIELDS = ("Viewer age",)
GENDER_FIELDS = ("Viewer gender",)
STATUS_FIELDS = ("Subscription status",)
COUNTRY_FIELDS = ("Geography", "Country")
TITLE_FIELDS = ("Video title", "Title")
PUBLISHED_FIELDS = ("Video publish time",)
DURATION_FIELDS = ("Duration",)
LIKE_FIELDS = ("Likes",)
COMMENT_FIELDS = ("Comments added", "Comments")
SHARE_FIELDS = ("Shares",)
SUBSCRIBER_FIELDS = ("Subscribers",)
IMPRESSION_FIELDS = ("Impressions",)
CTR_FIELDS = ("Impressions click-through rate (%)",)


def _audience_entry(row: RawRow, label_key: str, label_fields: tuple[str, ...]) -> dict[str, Any]:
    return {
        label_key: resolve_text(row, label_fields, "Unknown"),
        "views_pct": resolve(row, VIEWS_PCT_FIELDS),
        "watch_time_pct": resolve(row, WATCH_TIME_PCT_FIELDS),
        "avg_pct_viewed": resolve(row, AVG_PCT_VIEWED_FIELDS),
        "avg_view_duration": resolve_text(row, AVG_DURATION_FIELDS),
    }


def _subscription_buckets(rows: RawRowSet) -> list[dict[str, Any]]:
    buckets = [
        {
            "status": resolve_text(row, STATUS_FIELDS, "Unknown"),
            "views": resolve(row, VIEWS_FIELDS, coerce=to_int),
            "watch_time_hours": resolve(row, WATCH_TIME_FIELDS, coerce=to_float),
        }
        for row in rows
    ]
    total_views = sum(bucket["views"] for bucket in buckets)
    for bucket in buckets:
        bucket["percentage"] = rate(bucket["views"], total_views)
    return buckets


def subscriber_share(buckets: list[dict[str, Any]]) -> dict[str, float]:
    """
    Split of views between subscribed and every other status.
    """

    total_views = sum(bucket["views"] for bucket in buckets)
    subscribed = sum(
        bucket["views"] for bucket in buckets if bucket["status"].strip().lower() == SUBSCRIBED_STATUS
    )
    return {
        "subscribed": rate(subscribed, total_views),
        "not_subscribed": rate(total_views - subscribed, total_views),
    }


def _country_entry(row: RawRow) -> dict[str, Any]:
    return {
        "country": resolve_text(row, COUNTRY_FIELDS, "Unknown"),
        "views": resolve(row, VIEWS_FIELDS, coerce=to_int),
        "watch_time_hours": resolve(row, WATCH_TIME_FIELDS, coerce=to_float),
        "avg_view_duration": resolve_text(row, AVG_DURATION_FIELDS),
    }


def _video_entry(row: RawRow) -> dict[str, Any]:
    return {
        "title": resolve_text(row, TITLE_FIELDS, "Untitled video"),
        "published": resolve_text(row, PUBLISHED_FIELDS),
        "duration": resolve(row, DURATION_FIELDS, coerce=to_int),
        "views": resolve(row, VIEWS_FIELDS, coerce=to_int),
        "watch_time_hours": resolve(row, WATCH_TIME_FIELDS, coerce=to_float),
        "likes": resolve(row, LIKE_FIELDS, coerce=to_int),
        "comments": resolve(row, COMMENT_FIELDS, coerce=to_int),
        "shares": resolve(row, SHARE_FIELDS, coerce=to_int),
        "subscribers": resolve(row, SUBSCRIBER_FIELDS, coerce=to_int),
        "impressions": resolve(row, IMPRESSION_FIELDS, coerce=to_int),
        "impressions_ctr": resolve(row, CTR_FIELDS, coerce=to_float),
    }


def _content_totals(rows: RawRowSet) -> dict[str, Any]:
    return {
        "views": sum_metric(rows, VIEWS_FIELDS),
        "watch_time_hours": sum_metric(rows, WATCH_TIME_FIELDS, coerce=to_float),
        "likes": sum_metric(rows, LIKE_FIELDS),
        "comments": sum_metric(rows, COMMENT_FIELDS),
        "shares": sum_metric(rows, SHARE_FIELDS),
        "subscribers": sum_metric(rows, SUBSCRIBER_FIELDS),
        "impressions": sum_metric(rows, IMPRESSION_FIELDS),
        "videos": len(rows),
    }


class YouTubeAnalyzer(BasePlatformAnalyzer):
    """
    Audience breakdowns, subscription split, geography, and content ranking.
    """

    platform = "youtube"

    def analyze(self, datasets: Datasets, selection: DateRangeSelection) -> dict[str, Any]:
        current = selection.current
        age_rows = self.scope(datasets, AGE_FILE, current, SOCIAL_DATE_FIELDS)
        gender_rows = self.scope(datasets, GENDER_FILE, current, SOCIAL_DATE_FIELDS)
        geography_rows = self.scope(datasets, GEOGRAPHY_FILE, current, SOCIAL_DATE_FIELDS)
        subscription_rows = self.scope(datasets, SUBSCRIPTION_FILE, current, SOCIAL_DATE_FIELDS)
        content_rows = self.scope(datasets, CONTENT_FILE, current, YOUTUBE_CONTENT_DATE_FIELDS)
        comparison_content = self.scope_comparison(
            datasets, CONTENT_FILE, selection, YOUTUBE_CONTENT_DATE_FIELDS
        )

        buckets = _subscription_buckets(subscription_rows)
        previous = _content_totals(comparison_content) if comparison_content is not None else None
        return {
            **snapshot_metrics(_content_totals(content_rows), previous),
            "age": [_audience_entry(row, "age", AGE_FIELDS) for row in age_rows],
            "gender": [_audience_entry(row, "gender", GENDER_FIELDS) for row in gender_rows],
            "subscription": buckets,
            "subscriber_share": subscriber_share(buckets),
            "top_countries": top_n(
                (_country_entry(row) for row in geography_rows),
                key=lambda country: country["views"],
                limit=TOP_COUNTRIES,
            ),
            "top_videos": top_n(
                (_video_entry(row) for row in content_rows),
                key=lambda video: video["views"],
                limit=TOP_VIDEOS,
            ),
        }
