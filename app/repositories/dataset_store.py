"""
app/repositories/dataset_store.py

In-memory data-access object for loaded row sets.

The store is owned by the orchestrator and handed to analyzers as a
read-only view. Load cycles are stamped with a generation number so a slow,
stale cycle cannot overwrite the results of a newer one.
"""

from __future__ import annotations

import logging
import threading
from types import MappingProxyType
from typing import Iterator, Mapping

from app.domain.date_range import AvailableDateBounds
from app.services.csv_loader import EMPTY_ROW_SET, RawRowSet

logger = logging.getLogger(__name__)


class DatasetView(Mapping[str, RawRowSet]):
    """
    Read-only mapping where an unknown or unloaded file reads as an empty row set.
    """

    def __init__(self, datasets: Mapping[str, RawRowSet]) -> None:
        self._datasets = MappingProxyType(dict(datasets))

    def __getitem__(self, filename: str) -> RawRowSet:
        return self._datasets.get(filename, EMPTY_ROW_SET)

    def __iter__(self) -> Iterator[str]:
        return iter(self._datasets)

    def __len__(self) -> int:
        return len(self._datasets)

    def __contains__(self, filename: object) -> bool:
        return filename in self._datasets


class DatasetStore:
    """
    Holds the latest committed datasets, bounds, and load errors.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._generation = 0
        self._committed_generation = 0
        self._datasets: dict[str, RawRowSet] = {}
        self._errors: dict[str, str] = {}
        self._bounds: AvailableDateBounds | None = None
        # filename -> generation that was current when the slot was replaced
        self._slot_generations: dict[str, int] = {}

    def begin_cycle(self) -> int:
        """
        Start a new load cycle and return its generation number.
        """

        with self._lock:
            self._generation += 1
            return self._generation

    @property
    def generation(self) -> int:
        return self._generation

    def commit(
        self,
        generation: int,
        *,
        datasets: Mapping[str, RawRowSet],
        errors: Mapping[str, str],
        bounds: AvailableDateBounds,
    ) -> bool:
        """
        Apply a cycle's results unless a newer cycle has already started.

        Slots replaced after the cycle began are newer than anything the
        cycle read, so they and their error entries are kept as they are.
        """

        with self._lock:
            if generation != self._generation:
                logger.warning(
                    "Discarding stale load cycle generation=%s current=%s",
                    generation,
                    self._generation,
                )
                return False

            merged = dict(datasets)
            merged_errors = dict(errors)
            for filename in self._replaced_since_locked(generation):
                merged[filename] = self._datasets.get(filename, EMPTY_ROW_SET)
                if filename in self._errors:
                    merged_errors[filename] = self._errors[filename]
                else:
                    merged_errors.pop(filename, None)
                logger.info("Keeping %s replaced during load cycle generation=%s", filename, generation)

            self._datasets = merged
            self._errors = merged_errors
            self._bounds = bounds
            self._committed_generation = generation
            return True

    def replace(self, filename: str, rows: RawRowSet, *, error: str | None = None) -> None:
        """
        Swap one dataset slot wholesale.
        """

        with self._lock:
            self._datasets[filename] = tuple(rows)
            self._slot_generations[filename] = self._generation
            if error is None:
                self._errors.pop(filename, None)
            else:
                self._errors[filename] = error

    def replaced_since(self, generation: int) -> frozenset[str]:
        """
        Filenames replaced after cycle *generation* began.
        """

        with self._lock:
            return self._replaced_since_locked(generation)

    def _replaced_since_locked(self, generation: int) -> frozenset[str]:
        return frozenset(
            filename
            for filename, slot_generation in self._slot_generations.items()
            if slot_generation >= generation
        )

    def set_bounds(self, bounds: AvailableDateBounds) -> None:
        with self._lock:
            self._bounds = bounds

    def view(self) -> DatasetView:
        with self._lock:
            return DatasetView(self._datasets)

    @property
    def errors(self) -> dict[str, str]:
        with self._lock:
            return dict(self._errors)

    @property
    def bounds(self) -> AvailableDateBounds | None:
        return self._bounds

    @property
    def is_loaded(self) -> bool:
        return self._committed_generation > 0
