"""
tests/test_date_filter.py

Pytest unit tests for row date resolution and range filtering.
"""

from __future__ import annotations

from datetime import date, datetime

from app.domain.date_range import DateRange
from app.services.date_filter import filter_by_range, has_date_column, row_date

JANUARY = DateRange(start=date(2024, 1, 1), end=date(2024, 1, 31))


def test_rows_inside_range_are_kept_inclusive() -> None:
    rows = (
        {"Date": "2023-12-31", "Reach": "1"},
        {"Date": "2024-01-01", "Reach": "2"},
        {"Date": "01/31/2024 11:59 PM", "Reach": "3"},
        {"Date": "2024-02-01", "Reach": "4"},
    )

    selected = filter_by_range(rows, JANUARY)

    assert [row["Reach"] for row in selected] == ["2", "3"]


def test_rows_without_a_parseable_date_are_dropped() -> None:
    rows = (
        {"Date": "", "Reach": "1"},
        {"Date": "soon", "Reach": "2"},
        {"Reach": "3"},
        {"Date": "2024-01-10", "Reach": "4"},
    )

    assert [row["Reach"] for row in filter_by_range(rows, JANUARY)] == ["4"]


def test_first_parseable_candidate_field_wins() -> None:
    row = {"Date": "", "Publish time": "01/05/2024 9:00 AM"}

    assert row_date(row) == datetime(2024, 1, 5, 9)


def test_custom_fields_are_honoured() -> None:
    rows = ({"Video publish time": "Jan 10, 2024", "Views": "5"},)

    assert filter_by_range(rows, JANUARY, ("Video publish time",)) == rows
    assert filter_by_range(rows, JANUARY) == ()


def test_day_first_changes_which_rows_match() -> None:
    rows = ({"Date": "05/01/2024", "Reach": "1"},)

    assert filter_by_range(rows, JANUARY) == ()
    assert filter_by_range(rows, JANUARY, day_first=True) == rows


def test_result_is_a_subset_in_original_order() -> None:
    rows = tuple({"Date": f"2024-01-{day:02d}", "n": str(day)} for day in (3, 1, 2))

    assert [row["n"] for row in filter_by_range(rows, JANUARY)] == ["3", "1", "2"]


def test_has_date_column() -> None:
    assert has_date_column([{"Date": ""}], ("Date",))
    assert not has_date_column([{"Country": "US"}], ("Date",))
    assert not has_date_column([], ("Date",))
