"""
tests/test_social_analyzers.py

Pytest unit tests for the Facebook and Instagram analyzers.
"""

from __future__ import annotations

from datetime import date

import pytest

from analytics.facebook import FacebookAnalyzer, audience_segments
from analytics.instagram import InstagramAnalyzer
from app.domain.date_range import DateRange, DateRangeSelection

JANUARY = DateRange(start=date(2024, 1, 1), end=date(2024, 1, 31))
DECEMBER = DateRange(start=date(2023, 12, 1), end=date(2023, 12, 31))
WINTER = DateRange(start=date(2023, 12, 1), end=date(2024, 1, 31))


def _selection(current: DateRange = JANUARY, comparison: DateRange | None = None) -> DateRangeSelection:
    return DateRangeSelection(current=current, comparison=comparison, comparison_enabled=comparison is not None)


def _series(*points: tuple[str, str]) -> tuple[dict[str, str], ...]:
    return tuple({"Date": day, "Primary": value} for day, value in points)


def _page_files(prefix: str) -> dict[str, tuple[dict[str, str], ...]]:
    return {
        f"{prefix}_Follows.csv": _series(("2023-12-20", "4"), ("2024-01-05", "10"), ("2024-01-20", "5")),
        f"{prefix}_Reach.csv": _series(("2023-12-20", "100"), ("2024-01-05", "1,000")),
        f"{prefix}_Visits.csv": _series(("2024-01-05", "30")),
        f"{prefix}_Interactions.csv": _series(("2023-12-20", "10"), ("2024-01-05", "50")),
    }


# ---------------------------------------------------------------------------
# Facebook
# ---------------------------------------------------------------------------


class TestFacebookAnalyzer:
    def test_missing_files_produce_empty_snapshot(self) -> None:
        snapshot = FacebookAnalyzer().analyze({"FB_Videos.csv": ()}, _selection())

        assert snapshot["top_videos"] == []
        assert snapshot["top_posts"] == []
        assert snapshot["demographics"] == []
        assert snapshot["follower_growth"] == []
        assert snapshot["page_rank"]["metrics"] == {
            "followers": 0,
            "reach": 0,
            "visits": 0,
            "interactions": 0,
            "engagement": 0.0,
        }
        assert snapshot["metrics"]["views"] == 0

    def test_videos_ranked_by_views_with_engagement(self) -> None:
        videos = (
            {"Title": "Small", "Publish time": "01/02/2024 10:00 AM", "3-second video views": "50", "Reactions": "1"},
            {
                "Title": "Big",
                "Publish time": "01/03/2024 10:00 AM",
                "3-second video views": "1,500",
                "Reactions": "20",
                "Comments": "5",
                "Shares": "2",
                "Average Seconds viewed": "7.5",
            },
            {"Title": "Old", "Publish time": "12/15/2023 10:00 AM", "3-second video views": "9,999"},
        )

        snapshot = FacebookAnalyzer().analyze({"FB_Videos.csv": videos}, _selection())

        assert [video["title"] for video in snapshot["top_videos"]] == ["Big", "Small"]
        assert snapshot["top_videos"][0]["avg_seconds_viewed"] == pytest.approx(7.5)
        assert snapshot["metrics"]["views"] == 1550
        assert snapshot["metrics"]["engagement"] == 28
        assert snapshot["metrics"]["videos"] == 2

    def test_posts_ranked_by_reach(self) -> None:
        posts = (
            {"Post ID": "1", "Publish time": "01/04/2024", "Reach": "10", "Total clicks": "3"},
            {"Post ID": "2", "Publish time": "01/05/2024", "Reach": "90", "Total clicks": "4"},
        )

        snapshot = FacebookAnalyzer().analyze({"FB_Posts.csv": posts}, _selection())

        assert [post["post_id"] for post in snapshot["top_posts"]] == ["2", "1"]
        assert snapshot["metrics"]["post_reach"] == 100
        assert snapshot["metrics"]["post_clicks"] == 7

    def test_page_rank_with_comparison(self) -> None:
        snapshot = FacebookAnalyzer().analyze(_page_files("FB"), _selection(comparison=DECEMBER))

        page_rank = snapshot["page_rank"]
        assert page_rank["metrics"]["reach"] == 1000
        assert page_rank["metrics"]["engagement"] == pytest.approx(5.0)
        assert page_rank["comparison_metrics"]["reach"] == 100
        assert page_rank["comparison_metrics"]["visits"] == 0
        assert page_rank["changes"]["reach"] == pytest.approx(900.0)
        assert page_rank["changes"]["visits"] is None
        assert page_rank["changes"]["engagement"] == pytest.approx(-50.0)

    def test_follower_growth_is_monthly_within_range(self) -> None:
        snapshot = FacebookAnalyzer().analyze(_page_files("FB"), _selection(current=WINTER))

        assert snapshot["follower_growth"] == [
            {"month": "2023-12", "followers": 4},
            {"month": "2024-01", "followers": 15},
        ]

    def test_audience_segments_from_known_columns(self) -> None:
        video = {
            "3-second video views by top audience (F, 18-24)": "40",
            "3-second video views by top audience (M, 25-34)": "60",
            "3-second video views by top audience (M, 45-54)": "0",
        }

        assert audience_segments(video) == [
            {"segment": "F, 18-24", "value": 40.0},
            {"segment": "M, 25-34", "value": 60.0},
        ]

    def test_audience_segments_fall_back_to_any_audience_column(self) -> None:
        video = {"Views by audience (F, 65+)": "12", "Title": "x"}

        assert audience_segments(video) == [{"segment": "F, 65+", "value": 12.0}]


# ---------------------------------------------------------------------------
# Instagram
# ---------------------------------------------------------------------------


class TestInstagramAnalyzer:
    def test_posts_engagement_and_breakdown(self) -> None:
        posts = (
            {
                "Publish time": "01/10/2024 08:00",
                "Description": "Launch",
                "Reach": "500",
                "Likes": "40",
                "Comments": "5",
                "Shares": "3",
                "Saves": "2",
                "Follows": "4",
            },
            {"Publish time": "01/11/2024 08:00", "Description": "Teaser", "Reach": "800", "Likes": "10"},
            {"Publish time": "11/11/2023 08:00", "Description": "Old", "Reach": "9000", "Likes": "900"},
        )

        snapshot = InstagramAnalyzer().analyze({"IG_Posts.csv": posts}, _selection())

        assert snapshot["metrics"] == {"reach": 1300, "engagement": 60, "follows": 4, "posts": 2}
        assert [post["description"] for post in snapshot["top_posts"]] == ["Teaser", "Launch"]
        assert snapshot["engagement_breakdown"] == [
            {"name": "likes", "value": 50},
            {"name": "comments", "value": 5},
            {"name": "shares", "value": 3},
            {"name": "saves", "value": 2},
        ]

    def test_page_rank_uses_instagram_files(self) -> None:
        snapshot = InstagramAnalyzer().analyze(_page_files("IG"), _selection())

        assert snapshot["page_rank"]["metrics"]["followers"] == 15
        assert snapshot["page_rank"]["metrics"]["visits"] == 30
        assert snapshot["page_rank"]["comparison_metrics"] is None

    def test_comparison_totals(self) -> None:
        posts = (
            {"Date": "2024-01-10", "Reach": "200", "Likes": "2"},
            {"Date": "2023-12-10", "Reach": "100", "Likes": "1"},
        )

        snapshot = InstagramAnalyzer().analyze({"IG_Posts.csv": posts}, _selection(comparison=DECEMBER))

        assert snapshot["comparison_metrics"]["reach"] == 100
        assert snapshot["changes"]["reach"] == pytest.approx(100.0)
        assert snapshot["changes"]["follows"] is None
