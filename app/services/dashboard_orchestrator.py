"""
app/services/dashboard_orchestrator.py

Service layer coordinating load cycles and per-platform analysis.

A load cycle runs in two batches (``core`` then ``extended``). Files in a
batch are loaded concurrently on worker threads and the batch waits until
every load has settled; one failing file never cancels its siblings. After
both batches the available date bounds are computed once and the results
are committed to the :class:`DatasetStore` under the cycle's generation, so
a stale cycle that finishes late is discarded. Slots uploaded while a
cycle runs are newer than what it read and survive its commit.

Analysis is synchronous and pure: every analyzer receives the same
read-only dataset view and the same validated selection.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from functools import lru_cache
from typing import Any, Mapping, Sequence

from analytics.base import BasePlatformAnalyzer
from analytics.email_campaign import EmailAnalyzer
from analytics.facebook import FacebookAnalyzer
from analytics.instagram import InstagramAnalyzer
from analytics.utm import UTMAnalyzer
from analytics.web import WebAnalyzer
from analytics.youtube import YouTubeAnalyzer
from app.config import get_dashboard_settings
from app.domain.date_range import (
    AvailableDateBounds,
    DateRange,
    DateRangeSelection,
    InvalidDateRangeError,
)
from app.logging_utils import log_event
from app.manifest import CORE_BATCH, EXTENDED_BATCH, MANIFEST_BY_FILENAME, filenames_for_batch, known_date_fields
from app.repositories.dataset_store import DatasetStore, DatasetView
from app.services.csv_loader import EMPTY_ROW_SET, CSVLoader, RawRowSet, get_csv_loader
from app.services.date_bounds import extract_bounds

logger = logging.getLogger(__name__)

LOAD_BATCHES: tuple[str, ...] = (CORE_BATCH, EXTENDED_BATCH)
DEFAULT_WINDOW = timedelta(days=30)


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class UnknownDatasetError(KeyError):
    """
    Raised when an upload names a file outside the manifest.
    """

    def __init__(self, filename: str) -> None:
        super().__init__(filename)
        self.filename = filename

    def __str__(self) -> str:
        return f"'{self.filename}' is not a known dataset file."

    def to_dict(self) -> dict[str, object]:
        return {
            "message": str(self),
            "filename": self.filename,
            "known_files": sorted(MANIFEST_BY_FILENAME),
        }


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LoadResult:
    """
    Outcome of one load cycle.
    """

    datasets: Mapping[str, RawRowSet]
    bounds: AvailableDateBounds
    errors: dict[str, str] = field(default_factory=dict)
    generation: int = 0
    committed: bool = True


@dataclass(frozen=True)
class UploadResult:
    """
    Outcome of replacing one dataset slot.
    """

    filename: str
    rows: int
    bounds: AvailableDateBounds
    error: str | None = None


def build_selection(
    current_start: date | datetime | None,
    current_end: date | datetime | None,
    comparison_start: date | datetime | None = None,
    comparison_end: date | datetime | None = None,
    comparison_enabled: bool = False,
) -> DateRangeSelection:
    """
    Validate raw bounds into a selection; raises InvalidDateRangeError.

    Comparison bounds are ignored entirely when comparison is disabled.
    """

    current = DateRange(start=current_start, end=current_end)
    comparison = None
    if comparison_enabled:
        comparison = DateRange(start=comparison_start, end=comparison_end)
    return DateRangeSelection(
        current=current,
        comparison=comparison,
        comparison_enabled=comparison_enabled,
    )


def default_analyzers(day_first_files: Sequence[str] = ()) -> tuple[BasePlatformAnalyzer, ...]:
    return tuple(
        analyzer_type(day_first_files=day_first_files)
        for analyzer_type in (
            EmailAnalyzer,
            FacebookAnalyzer,
            InstagramAnalyzer,
            YouTubeAnalyzer,
            WebAnalyzer,
            UTMAnalyzer,
        )
    )


# ---------------------------------------------------------------------------
# Orchestrator
# ---------------------------------------------------------------------------


class DashboardOrchestrator:
    """
    Owns the dataset store and runs load cycles and analysis requests.
    """

    def __init__(
        self,
        *,
        loader: CSVLoader,
        store: DatasetStore | None = None,
        analyzers: Sequence[BasePlatformAnalyzer] | None = None,
        batch_pause_seconds: float = 0.0,
        date_sample_size: int = 100,
        day_first_files: Sequence[str] = (),
    ) -> None:
        self._loader = loader
        self._store = store or DatasetStore()
        self._day_first_files = tuple(day_first_files)
        self._analyzers = tuple(analyzers) if analyzers is not None else default_analyzers(self._day_first_files)
        self._batch_pause_seconds = max(0.0, batch_pause_seconds)
        self._date_sample_size = max(1, date_sample_size)

    @property
    def store(self) -> DatasetStore:
        return self._store

    @property
    def platforms(self) -> tuple[str, ...]:
        return tuple(analyzer.platform for analyzer in self._analyzers)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def load_all(self) -> LoadResult:
        """
        Load every manifest file in batches and commit the cycle.
        """

        generation = self._store.begin_cycle()
        datasets: dict[str, RawRowSet] = {}
        errors: dict[str, str] = {}

        for index, batch in enumerate(LOAD_BATCHES):
            if index and self._batch_pause_seconds:
                await asyncio.sleep(self._batch_pause_seconds)
            await self._load_batch(filenames_for_batch(batch), datasets, errors)

        bounds = self._extract_bounds(datasets)
        committed = self._store.commit(generation, datasets=datasets, errors=errors, bounds=bounds)
        view = DatasetView(datasets)
        if committed:
            view = self._store.view()
            errors = self._store.errors
            if self._store.replaced_since(generation):
                bounds = self._extract_bounds(view)
                self._store.set_bounds(bounds)
        log_event(
            logger,
            logging.INFO,
            "dashboard_load_cycle",
            generation=generation,
            committed=committed,
            files=len(datasets),
            failed_files=sorted(errors),
            earliest=bounds.earliest,
            latest=bounds.latest,
            fallback_bounds=bounds.is_fallback,
        )
        return LoadResult(
            datasets=view,
            bounds=bounds,
            errors=errors,
            generation=generation,
            committed=committed,
        )

    async def _load_batch(
        self,
        filenames: Sequence[str],
        datasets: dict[str, RawRowSet],
        errors: dict[str, str],
    ) -> None:
        results = await asyncio.gather(
            *(asyncio.to_thread(self._load_one, filename) for filename in filenames),
            return_exceptions=True,
        )
        for filename, result in zip(filenames, results):
            if isinstance(result, Exception):
                logger.warning("Unexpected failure loading %s: %s", filename, result)
                datasets[filename] = EMPTY_ROW_SET
                errors[filename] = f"Unexpected loader failure: {result}"
                continue
            if isinstance(result, BaseException):
                raise result
            rows, error = result
            datasets[filename] = rows
            if error is not None:
                errors[filename] = error

    def _load_one(self, filename: str) -> tuple[RawRowSet, str | None]:
        file_errors: dict[str, str] = {}
        rows = self._loader.load(filename, errors=file_errors)
        return rows, file_errors.get(filename)

    def _extract_bounds(self, datasets: Mapping[str, RawRowSet]) -> AvailableDateBounds:
        return extract_bounds(
            datasets,
            known_date_fields=known_date_fields(),
            sample_size=self._date_sample_size,
            day_first_files=self._day_first_files,
        )

    def upload(self, filename: str, payload: bytes) -> UploadResult:
        """
        Replace one dataset slot with uploaded CSV bytes and refresh bounds.
        """

        if filename not in MANIFEST_BY_FILENAME:
            raise UnknownDatasetError(filename)

        file_errors: dict[str, str] = {}
        rows = self._loader.parse_bytes(filename, payload, errors=file_errors)
        error = file_errors.get(filename)
        self._store.replace(filename, rows, error=error)
        bounds = self._extract_bounds(self._store.view())
        self._store.set_bounds(bounds)
        logger.info("Replaced dataset %s rows=%d error=%s", filename, len(rows), error)
        return UploadResult(filename=filename, rows=len(rows), bounds=bounds, error=error)

    # ------------------------------------------------------------------
    # Date ranges
    # ------------------------------------------------------------------

    @property
    def bounds(self) -> AvailableDateBounds:
        bounds = self._store.bounds
        if bounds is None:
            bounds = self._extract_bounds(self._store.view())
        return bounds

    def previous_period(self, date_range: DateRange) -> DateRange | None:
        """
        Same-length range just before *date_range*; None if it would start
        before the earliest available date.
        """

        candidate = date_range.previous_period()
        return candidate if candidate.start >= self.bounds.earliest else None

    def same_period_last_year(self, date_range: DateRange) -> DateRange | None:
        candidate = date_range.same_period_last_year()
        return candidate if candidate.start >= self.bounds.earliest else None

    def default_selection(self) -> DateRangeSelection:
        """
        Last 30 days of available data, with the 30 days before as a
        disabled comparison.
        """

        bounds = self.bounds
        latest = bounds.latest
        start = max(latest - DEFAULT_WINDOW, bounds.earliest)
        comparison_start = max(latest - 2 * DEFAULT_WINDOW, bounds.earliest)
        comparison_end = start - timedelta(days=1)

        comparison = None
        if comparison_start <= comparison_end:
            comparison = DateRange(start=comparison_start, end=comparison_end)
        return DateRangeSelection(
            current=DateRange(start=start, end=latest),
            comparison=comparison,
            comparison_enabled=False,
        )

    # ------------------------------------------------------------------
    # Analysis
    # ------------------------------------------------------------------

    def analyze(self, selection: DateRangeSelection) -> dict[str, dict[str, Any]]:
        """
        Run every analyzer against the current store for *selection*.
        """

        if not isinstance(selection, DateRangeSelection):
            raise InvalidDateRangeError("A validated date range selection is required.", field="selection")

        view = self._store.view()
        snapshots = {analyzer.platform: analyzer.analyze(view, selection) for analyzer in self._analyzers}
        logger.debug(
            "Analyzed %d platform(s) for %s..%s comparison=%s",
            len(snapshots),
            selection.current.start,
            selection.current.end,
            selection.comparison_enabled,
        )
        return snapshots


@lru_cache(maxsize=1)
def get_dashboard_orchestrator() -> DashboardOrchestrator:
    """
    Return the process-wide orchestrator built from environment settings.
    """

    settings = get_dashboard_settings()
    return DashboardOrchestrator(
        loader=get_csv_loader(),
        batch_pause_seconds=settings.batch_pause_seconds,
        date_sample_size=settings.date_sample_size,
        day_first_files=settings.day_first_files,
    )
