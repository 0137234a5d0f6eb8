"""
tests/test_dates.py

Pytest unit tests for the multi-format date parser.
"""

from __future__ import annotations

from datetime import date, datetime

import pytest

from app.parsing.dates import parse_date

JAN_15 = date(2024, 1, 15)


@pytest.mark.parametrize(
    "raw",
    [
        "2024-01-15",
        "01/15/2024",
        "January 15th, 2024",
        "january 15 2024",
        "1705276800000",
        "15/01/2024",
        "1-15-2024",
        "2024-1-15",
        "20240115",
    ],
)
def test_equivalent_formats_resolve_to_same_calendar_date(raw: str) -> None:
    parsed = parse_date(raw)
    assert parsed is not None
    assert parsed.date() == JAN_15


@pytest.mark.parametrize(
    "raw",
    ["not a date", "", "   ", None, "12", "946684799999", "02/30/2024", "2023", "2012.4", "-2015.3"],
)
def test_unparseable_input_returns_none(raw: object) -> None:
    assert parse_date(raw) is None


def test_ambiguous_slash_date_defaults_to_month_first() -> None:
    assert parse_date("03/04/2024") == datetime(2024, 3, 4)


def test_ambiguous_slash_date_honours_day_first() -> None:
    assert parse_date("03/04/2024", day_first=True) == datetime(2024, 4, 3)


def test_day_first_still_falls_back_to_month_first() -> None:
    assert parse_date("01/15/2024", day_first=True) == datetime(2024, 1, 15)


def test_iso_with_zulu_is_naive_utc() -> None:
    assert parse_date("2024-01-15T10:30:00Z") == datetime(2024, 1, 15, 10, 30)


def test_iso_with_offset_is_converted_to_utc() -> None:
    assert parse_date("2024-01-15T10:30:00+02:00") == datetime(2024, 1, 15, 8, 30)


def test_iso_with_space_separator_keeps_time() -> None:
    assert parse_date("2024-01-15 10:30:00") == datetime(2024, 1, 15, 10, 30)


def test_slash_date_with_twelve_hour_clock() -> None:
    assert parse_date("01/15/2024 10:30 PM") == datetime(2024, 1, 15, 22, 30)


def test_ga_compact_hour_stamp() -> None:
    assert parse_date("2024011510") == datetime(2024, 1, 15, 10)


def test_millisecond_timestamp_is_utc() -> None:
    assert parse_date("1705276800000") == datetime(2024, 1, 15)


def test_abbreviated_month_uses_general_parser() -> None:
    parsed = parse_date("Mar 5, 2024")
    assert parsed is not None
    assert parsed.date() == date(2024, 3, 5)


def test_typed_values_pass_through() -> None:
    assert parse_date(datetime(2024, 1, 15, 9)) == datetime(2024, 1, 15, 9)
    assert parse_date(date(2024, 1, 15)) == datetime(2024, 1, 15)
    assert parse_date(1705276800000) == datetime(2024, 1, 15)
