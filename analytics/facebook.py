"""
analytics/facebook.py

Facebook analyzer: videos, posts, audience segments, and page rank.
"""

from __future__ import annotations

import re
from typing import Any

from analytics.base import Datasets, snapshot_metrics, sum_metric, top_n
from analytics.social import SocialPageAnalyzer
from app.domain.date_range import DateRangeSelection
from app.mappers.field_resolver import resolve, resolve_text
from app.manifest import SOCIAL_DATE_FIELDS
from app.parsing.scalars import to_float, to_int
from app.services.csv_loader import RawRow, RawRowSet

VIDEOS_FILE = "FB_Videos.csv"
POSTS_FILE = "FB_Posts.csv"
TOP_VIDEOS = 5
TOP_POSTS = 5

VIEW_FIELDS = ("3-second video views", "video views", "Views")
REACTION_FIELDS = ("Reactions",)
COMMENT_FIELDS = ("Comments",)
SHARE_FIELDS = ("Shares",)
REACH_FIELDS = ("Reach",)
CLICK_FIELDS = ("Total clicks", "Clicks")
TITLE_FIELDS = ("Title",)
DESCRIPTION_FIELDS = ("Description",)
POST_ID_FIELDS = ("Post ID",)
AVG_SECONDS_FIELDS = ("Average Seconds viewed", "Average seconds viewed")
PUBLISHED_FIELDS = ("Publish time", "Date")

AUDIENCE_SEGMENTS: tuple[str, ...] = tuple(
    f"{gender}, {ages}" for gender in ("F", "M") for ages in ("18-24", "25-34", "35-44", "45-54")
)
_SEGMENT_IN_PARENS = re.compile(r"\((.*?)\)")
_SEGMENT_SUFFIX = re.compile(r"((?:F|M),.*?)$")


def _engagement(row: RawRow) -> int:
    return (
        resolve(row, REACTION_FIELDS, coerce=to_int)
        + resolve(row, COMMENT_FIELDS, coerce=to_int)
        + resolve(row, SHARE_FIELDS, coerce=to_int)
    )


def _views(row: RawRow) -> int:
    return resolve(row, VIEW_FIELDS, coerce=to_int)


def _totals(videos: RawRowSet, posts: RawRowSet) -> dict[str, Any]:
    return {
        "views": sum_metric(videos, VIEW_FIELDS),
        "engagement": sum(_engagement(row) for row in videos),
        "videos": len(videos),
        "post_reach": sum_metric(posts, REACH_FIELDS),
        "post_engagement": sum(_engagement(row) for row in posts),
        "post_clicks": sum_metric(posts, CLICK_FIELDS),
    }


def _video_entry(row: RawRow) -> dict[str, Any]:
    return {
        "title": resolve_text(row, TITLE_FIELDS, "Untitled video"),
        "views": _views(row),
        "reactions": resolve(row, REACTION_FIELDS, coerce=to_int),
        "comments": resolve(row, COMMENT_FIELDS, coerce=to_int),
        "shares": resolve(row, SHARE_FIELDS, coerce=to_int),
        "avg_seconds_viewed": resolve(row, AVG_SECONDS_FIELDS, coerce=to_float),
        "published": resolve_text(row, PUBLISHED_FIELDS),
    }


def _post_entry(row: RawRow) -> dict[str, Any]:
    return {
        "post_id": resolve_text(row, POST_ID_FIELDS),
        "title": resolve_text(row, TITLE_FIELDS),
        "description": resolve_text(row, DESCRIPTION_FIELDS),
        "reach": resolve(row, REACH_FIELDS, coerce=to_int),
        "reactions": resolve(row, REACTION_FIELDS, coerce=to_int),
        "comments": resolve(row, COMMENT_FIELDS, coerce=to_int),
        "shares": resolve(row, SHARE_FIELDS, coerce=to_int),
        "clicks": resolve(row, CLICK_FIELDS, coerce=to_int),
        "published": resolve_text(row, PUBLISHED_FIELDS),
    }


def audience_segments(video: RawRow) -> list[dict[str, Any]]:
    """
    Audience split of one video's views by gender and age band.

    Known column patterns are tried first; if none yields a positive value,
    any column mentioning ``audience`` (or ``video views`` with a gender
    marker) is read and its segment label is taken from the column name.
    """

    segments = []
    for segment in AUDIENCE_SEGMENTS:
        patterns = (
            f"3-second video views by top audience ({segment})",
            f"3-second video views by top audience {segment}",
            f"video views by audience ({segment})",
            f"video views by audience {segment}",
        )
        value = next((to_float(video[p]) for p in patterns if p in video), 0.0)
        if value > 0:
            segments.append({"segment": segment, "value": value})
    if segments:
        return segments

    for key, raw in video.items():
        is_audience = "audience" in key or (
            "video views" in key and ("F," in key or "M," in key)
        )
        if not is_audience:
            continue
        value = to_float(raw)
        if value <= 0:
            continue
        match = _SEGMENT_IN_PARENS.search(key) or _SEGMENT_SUFFIX.search(key)
        segments.append({"segment": match.group(1) if match else key, "value": value})
    return segments


class FacebookAnalyzer(SocialPageAnalyzer):
    """
    Video and post performance plus page-level metrics.
    """

    platform = "facebook"
    file_prefix = "FB"

    def analyze(self, datasets: Datasets, selection: DateRangeSelection) -> dict[str, Any]:
        videos = self.scope(datasets, VIDEOS_FILE, selection.current, SOCIAL_DATE_FIELDS)
        posts = self.scope(datasets, POSTS_FILE, selection.current, SOCIAL_DATE_FIELDS)
        comparison_videos = self.scope_comparison(datasets, VIDEOS_FILE, selection, SOCIAL_DATE_FIELDS)
        comparison_posts = self.scope_comparison(datasets, POSTS_FILE, selection, SOCIAL_DATE_FIELDS)

        previous = None
        if comparison_videos is not None and comparison_posts is not None:
            previous = _totals(comparison_videos, comparison_posts)

        ranked_videos = top_n(videos, key=_views, limit=TOP_VIDEOS)
        return {
            **snapshot_metrics(_totals(videos, posts), previous),
            "top_videos": [_video_entry(row) for row in ranked_videos],
            "top_posts": top_n(
                (_post_entry(row) for row in posts),
                key=lambda post: post["reach"],
                limit=TOP_POSTS,
            ),
            "demographics": audience_segments(ranked_videos[0]) if ranked_videos else [],
            "page_rank": self.page_rank(datasets, selection),
            "follower_growth": self.follower_growth(datasets, selection),
        }
