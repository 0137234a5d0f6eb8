"""
app/services/csv_loader.py

CSV loading with an explicit encoding fallback chain.

A file is read once as bytes, then decoded and parsed once per encoding in
order. Each attempt produces an :class:`EncodingAttempt`; the first
successful attempt wins. A file for which every attempt fails becomes an
empty row set and the reasons are recorded in the caller's error map. The
loader never raises for a bad file.

Every cell value is kept as a string; typing happens later in the field
resolver and the scalar coercion helpers.
"""

from __future__ import annotations

import io
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping, MutableMapping, Sequence

import pandas as pd
import requests

from app.config import DEFAULT_CSV_ENCODINGS, DashboardSettings, get_dashboard_settings
from app.logging_utils import log_event

logger = logging.getLogger(__name__)

MIN_COLUMNS = 2

RawRow = Mapping[str, str]
RawRowSet = tuple[RawRow, ...]

EMPTY_ROW_SET: RawRowSet = ()


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class CSVSourceError(RuntimeError):
    """
    Raised by a source when a file's bytes cannot be fetched.
    """


# ---------------------------------------------------------------------------
# Sources
# ---------------------------------------------------------------------------


class CSVSource(ABC):
    """
    Where CSV bytes come from.
    """

    @abstractmethod
    def read_bytes(self, filename: str) -> bytes:
        """
        Return the raw bytes of *filename* or raise CSVSourceError.
        """


class LocalDirectorySource(CSVSource):
    """
    Reads files from a directory on disk.
    """

    def __init__(self, root: str | Path) -> None:
        self._root = Path(root)

    def read_bytes(self, filename: str) -> bytes:
        path = self._root / filename
        try:
            return path.read_bytes()
        except FileNotFoundError as exc:
            raise CSVSourceError(f"{filename}: file not found in {self._root}.") from exc
        except OSError as exc:
            raise CSVSourceError(f"{filename}: could not be read ({exc}).") from exc


class HTTPSource(CSVSource):
    """
    Fetches files relative to a base URL.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout_seconds: float,
        session: requests.Session | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout_seconds = timeout_seconds
        self._session = session or requests.Session()

    def read_bytes(self, filename: str) -> bytes:
        url = f"{self._base_url}/{filename}"
        try:
            response = self._session.get(url, timeout=self._timeout_seconds)
            response.raise_for_status()
        except requests.HTTPError as exc:
            status_code = exc.response.status_code if exc.response is not None else None
            raise CSVSourceError(f"{filename}: HTTP {status_code} from {url}.") from exc
        except requests.RequestException as exc:
            raise CSVSourceError(f"{filename}: request to {url} failed ({exc}).") from exc
        return response.content


def build_source(settings: DashboardSettings) -> CSVSource:
    """
    Pick the HTTP source when a base URL is configured, the local one otherwise.
    """

    if settings.data_base_url:
        return HTTPSource(settings.data_base_url, timeout_seconds=settings.http_timeout_seconds)
    return LocalDirectorySource(settings.data_dir)


# ---------------------------------------------------------------------------
# Loader
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class EncodingAttempt:
    """
    Outcome of decoding and parsing a payload with one encoding.
    """

    encoding: str
    rows: RawRowSet = EMPTY_ROW_SET
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


class CSVLoader:
    """
    Loads named CSV files into immutable row sets.
    """

    def __init__(
        self,
        *,
        source: CSVSource,
        encodings: Sequence[str] = DEFAULT_CSV_ENCODINGS,
    ) -> None:
        self._source = source
        self._encodings = tuple(encodings) or DEFAULT_CSV_ENCODINGS

    @property
    def encodings(self) -> tuple[str, ...]:
        return self._encodings

    def load(
        self,
        filename: str,
        *,
        errors: MutableMapping[str, str] | None = None,
    ) -> RawRowSet:
        """
        Fetch and parse *filename*; failures yield an empty row set.
        """

        try:
            payload = self._source.read_bytes(filename)
        except CSVSourceError as exc:
            return self._fail(filename, str(exc), errors)
        return self.parse_bytes(filename, payload, errors=errors)

    def parse_bytes(
        self,
        filename: str,
        payload: bytes,
        *,
        errors: MutableMapping[str, str] | None = None,
    ) -> RawRowSet:
        """
        Parse an in-memory CSV payload through the encoding chain.
        """

        if not payload or not payload.strip():
            return self._fail(filename, "file is empty", errors)

        failures: list[str] = []
        for encoding in self._encodings:
            attempt = self.attempt(payload, encoding)
            if attempt.ok:
                log_event(
                    logger,
                    logging.INFO,
                    "csv_loaded",
                    filename=filename,
                    encoding=encoding,
                    rows=len(attempt.rows),
                    failed_encodings=len(failures),
                )
                return attempt.rows
            failures.append(f"{encoding}: {attempt.error}")

        return self._fail(filename, "; ".join(failures), errors)

    def attempt(self, payload: bytes, encoding: str) -> EncodingAttempt:
        """
        Decode *payload* strictly with *encoding* and parse it.
        """

        try:
            text = payload.decode(encoding)
        except (UnicodeDecodeError, LookupError) as exc:
            return EncodingAttempt(encoding=encoding, error=f"decode failed ({exc.__class__.__name__})")

        try:
            frame = pd.read_csv(
                io.StringIO(text),
                dtype=str,
                keep_default_na=False,
                skip_blank_lines=True,
            )
        except (pd.errors.ParserError, pd.errors.EmptyDataError, ValueError) as exc:
            return EncodingAttempt(encoding=encoding, error=f"parse failed ({exc})")

        if len(frame.columns) < MIN_COLUMNS:
            return EncodingAttempt(
                encoding=encoding,
                error=f"only {len(frame.columns)} column(s) detected",
            )

        frame.columns = [str(column).strip() for column in frame.columns]
        rows = tuple(
            MappingProxyType(record)
            for record in frame.to_dict(orient="records")
            if not all(_is_blank(value) for value in record.values())
        )
        if not rows:
            return EncodingAttempt(encoding=encoding, error="no data rows")
        return EncodingAttempt(encoding=encoding, rows=rows)

    @staticmethod
    def _fail(
        filename: str,
        reason: str,
        errors: MutableMapping[str, str] | None,
    ) -> RawRowSet:
        if errors is not None:
            errors[filename] = reason
        log_event(logger, logging.WARNING, "csv_load_failed", filename=filename, reason=reason)
        return EMPTY_ROW_SET


@lru_cache(maxsize=1)
def get_csv_loader() -> CSVLoader:
    """
    Return a cached loader built from environment settings.
    """

    settings = get_dashboard_settings()
    return CSVLoader(source=build_source(settings), encodings=settings.csv_encodings)
