"""
tests/test_csv_loader.py

Pytest unit tests for CSVLoader and its sources.
"""

from __future__ import annotations

from pathlib import Path

import pytest
import requests

from app.services.csv_loader import (
    EMPTY_ROW_SET,
    CSVLoader,
    CSVSourceError,
    HTTPSource,
    LocalDirectorySource,
)


def _loader(tmp_path: Path) -> CSVLoader:
    return CSVLoader(source=LocalDirectorySource(tmp_path))


# ---------------------------------------------------------------------------
# Stub HTTP session
# ---------------------------------------------------------------------------


class _StubResponse:
    def __init__(self, status_code: int, content: bytes = b"") -> None:
        self.status_code = status_code
        self.content = content

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error", response=self)


class _StubSession:
    def __init__(self, response: _StubResponse | None = None, exc: Exception | None = None) -> None:
        self._response = response
        self._exc = exc
        self.calls: list[tuple[str, float]] = []

    def get(self, url: str, timeout: float) -> _StubResponse:
        self.calls.append((url, timeout))
        if self._exc is not None:
            raise self._exc
        assert self._response is not None
        return self._response


# ---------------------------------------------------------------------------
# Local loading
# ---------------------------------------------------------------------------


class TestCSVLoader:
    def test_utf8_file_loads_as_string_rows(self, tmp_path: Path) -> None:
        (tmp_path / "Email.csv").write_text(
            "Campaign, Emails sent\nSpring,1000\nSummer,500\n", encoding="utf-8"
        )
        errors: dict[str, str] = {}

        rows = _loader(tmp_path).load("Email.csv", errors=errors)

        assert errors == {}
        assert len(rows) == 2
        assert rows[0]["Campaign"] == "Spring"
        assert rows[0]["Emails sent"] == "1000"

    def test_rows_are_read_only(self, tmp_path: Path) -> None:
        (tmp_path / "Email.csv").write_text("a,b\n1,2\n", encoding="utf-8")

        rows = _loader(tmp_path).load("Email.csv")

        with pytest.raises(TypeError):
            rows[0]["a"] = "changed"  # type: ignore[index]

    def test_cp1252_file_falls_back_past_utf8(self, tmp_path: Path) -> None:
        (tmp_path / "IG_Posts.csv").write_bytes("Caption,Reach\nCafé,10\n".encode("cp1252"))

        rows = _loader(tmp_path).load("IG_Posts.csv")

        assert rows[0]["Caption"] == "Café"
        assert rows[0]["Reach"] == "10"

    def test_utf8_bom_is_removed_from_first_header(self, tmp_path: Path) -> None:
        (tmp_path / "GA_Traffic.csv").write_bytes(b"\xef\xbb\xbfDate,Sessions\n2024-01-01,3\n")

        rows = _loader(tmp_path).load("GA_Traffic.csv")

        assert list(rows[0]) == ["Date", "Sessions"]

    def test_single_column_is_rejected(self, tmp_path: Path) -> None:
        (tmp_path / "Email.csv").write_text("only\n1\n2\n", encoding="utf-8")
        errors: dict[str, str] = {}

        rows = _loader(tmp_path).load("Email.csv", errors=errors)

        assert rows == EMPTY_ROW_SET
        assert "column(s) detected" in errors["Email.csv"]

    def test_missing_file_records_error(self, tmp_path: Path) -> None:
        errors: dict[str, str] = {}

        rows = _loader(tmp_path).load("FB_Posts.csv", errors=errors)

        assert rows == EMPTY_ROW_SET
        assert "not found" in errors["FB_Posts.csv"]

    def test_header_only_file_has_no_data_rows(self, tmp_path: Path) -> None:
        (tmp_path / "Email.csv").write_text("Campaign,Emails sent\n", encoding="utf-8")
        errors: dict[str, str] = {}

        rows = _loader(tmp_path).load("Email.csv", errors=errors)

        assert rows == EMPTY_ROW_SET
        assert "no data rows" in errors["Email.csv"]

    def test_empty_file_is_reported(self, tmp_path: Path) -> None:
        (tmp_path / "Email.csv").write_bytes(b"")
        errors: dict[str, str] = {}

        assert _loader(tmp_path).load("Email.csv", errors=errors) == EMPTY_ROW_SET
        assert errors["Email.csv"] == "file is empty"

    def test_blank_lines_and_blank_rows_are_dropped(self, tmp_path: Path) -> None:
        (tmp_path / "Email.csv").write_text("a,b\n1,2\n\n,\n3,4\n", encoding="utf-8")

        rows = _loader(tmp_path).load("Email.csv")

        assert [row["a"] for row in rows] == ["1", "3"]

    def test_load_without_error_map_still_returns_empty(self, tmp_path: Path) -> None:
        assert _loader(tmp_path).load("nope.csv") == EMPTY_ROW_SET

    def test_attempt_reports_decode_failure(self) -> None:
        loader = CSVLoader(source=LocalDirectorySource("."), encodings=("utf-8",))

        attempt = loader.attempt("a,b\nCafé,1\n".encode("cp1252"), "utf-8")

        assert not attempt.ok
        assert attempt.rows == EMPTY_ROW_SET
        assert attempt.error is not None and attempt.error.startswith("decode failed")

    def test_every_encoding_failure_is_listed(self) -> None:
        loader = CSVLoader(source=LocalDirectorySource("."), encodings=("utf-8", "ascii"))
        errors: dict[str, str] = {}

        loader.parse_bytes("Email.csv", "a,b\nCafé,1\n".encode("cp1252"), errors=errors)

        assert errors["Email.csv"].startswith("utf-8: decode failed")
        assert "; ascii: decode failed" in errors["Email.csv"]


# ---------------------------------------------------------------------------
# HTTP source
# ---------------------------------------------------------------------------


class TestHTTPSource:
    def test_fetches_relative_to_base_url(self) -> None:
        session = _StubSession(_StubResponse(200, b"a,b\n1,2\n"))
        source = HTTPSource("https://data.example.com/csv/", timeout_seconds=5, session=session)

        assert source.read_bytes("Email.csv") == b"a,b\n1,2\n"
        assert session.calls == [("https://data.example.com/csv/Email.csv", 5)]

    def test_http_error_status_raises_source_error(self) -> None:
        source = HTTPSource(
            "https://data.example.com",
            timeout_seconds=5,
            session=_StubSession(_StubResponse(404)),
        )

        with pytest.raises(CSVSourceError, match="HTTP 404"):
            source.read_bytes("Email.csv")

    def test_network_failure_raises_source_error(self) -> None:
        source = HTTPSource(
            "https://data.example.com",
            timeout_seconds=5,
            session=_StubSession(exc=requests.ConnectionError("refused")),
        )

        with pytest.raises(CSVSourceError, match="failed"):
            source.read_bytes("Email.csv")

    def test_loader_turns_http_failure_into_error_entry(self) -> None:
        source = HTTPSource(
            "https://data.example.com",
            timeout_seconds=5,
            session=_StubSession(_StubResponse(500)),
        )
        errors: dict[str, str] = {}

        rows = CSVLoader(source=source).load("GA_Traffic.csv", errors=errors)

        assert rows == EMPTY_ROW_SET
        assert "HTTP 500" in errors["GA_Traffic.csv"]
