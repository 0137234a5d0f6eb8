"""
analytics/instagram.py

Instagram analyzer.

Formulas
--------
Engagement = likes + comments + shares + saves (per post, summed)
"""

from __future__ import annotations

from typing import Any

from analytics.base import Datasets, snapshot_metrics, sum_metric, top_n
from analytics.social import SocialPageAnalyzer
from app.domain.date_range import DateRangeSelection
from app.mappers.field_resolver import resolve, resolve_text
from app.manifest import SOCIAL_DATE_FIELDS
from app.parsing.scalars import to_int
from app.services.csv_loader import RawRow, RawRowSet

POSTS_FILE = "IG_Posts.csv"
TOP_POSTS = 5

REACH_FIELDS = ("Reach",)
LIKE_FIELDS = ("Likes",)
COMMENT_FIELDS = ("Comments",)
SHARE_FIELDS = ("Shares",)
SAVE_FIELDS = ("Saves",)
FOLLOW_FIELDS = ("Follows",)
DESCRIPTION_FIELDS = ("Description", "Caption")
POST_TYPE_FIELDS = ("Post type",)
ACCOUNT_FIELDS = ("Account username",)
PUBLISHED_FIELDS = ("Publish time", "Date")

ENGAGEMENT_PARTS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("likes", LIKE_FIELDS),
    ("comments", COMMENT_FIELDS),
    ("shares", SHARE_FIELDS),
    ("saves", SAVE_FIELDS),
)


def _breakdown(rows: RawRowSet) -> dict[str, int]:
    return {name: sum_metric(rows, fields) for name, fields in ENGAGEMENT_PARTS}


def _totals(rows: RawRowSet) -> dict[str, Any]:
    return {
        "reach": sum_metric(rows, REACH_FIELDS),
        "engagement": sum(_breakdown(rows).values()),
        "follows": sum_metric(rows, FOLLOW_FIELDS),
        "posts": len(rows),
    }


def _post_entry(row: RawRow) -> dict[str, Any]:
    entry: dict[str, Any] = {
        "description": resolve_text(row, DESCRIPTION_FIELDS),
        "account": resolve_text(row, ACCOUNT_FIELDS),
        "post_type": resolve_text(row, POST_TYPE_FIELDS),
        "published": resolve_text(row, PUBLISHED_FIELDS),
        "reach": resolve(row, REACH_FIELDS, coerce=to_int),
    }
    for name, fields in ENGAGEMENT_PARTS:
        entry[name] = resolve(row, fields, coerce=to_int)
    return entry


class InstagramAnalyzer(SocialPageAnalyzer):
    """
    Post reach ranking, engagement mix, and page-level metrics.
    """

    platform = "instagram"
    file_prefix = "IG"

    def analyze(self, datasets: Datasets, selection: DateRangeSelection) -> dict[str, Any]:
        posts = self.scope(datasets, POSTS_FILE, selection.current, SOCIAL_DATE_FIELDS)
        comparison_posts = self.scope_comparison(datasets, POSTS_FILE, selection, SOCIAL_DATE_FIELDS)
        previous = _totals(comparison_posts) if comparison_posts is not None else None

        return {
            **snapshot_metrics(_totals(posts), previous),
            "top_posts": top_n(
                (_post_entry(row) for row in posts),
                key=lambda post: post["reach"],
                limit=TOP_POSTS,
            ),
            "engagement_breakdown": [
                {"name": name, "value": value} for name, value in _breakdown(posts).items()
            ],
            "page_rank": self.page_rank(datasets, selection),
            "follower_growth": self.follower_growth(datasets, selection),
        }
