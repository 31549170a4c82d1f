"""Exploration session: the active dataset, the column selection, and uploads.

Ingestion is the one place where work can overlap: a second upload may
start before the first finishes. ``UploadSlot`` hands out a ticket per
upload and only the newest ticket may register its dataset, so the last
upload started always wins regardless of completion order.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Sequence

from magic_charts.analysis.field_analyzer import FieldSet, build_field_set
from magic_charts.charts.render import ChartBundle, build_chart, build_gallery
from magic_charts.charts.suggestion_engine import ChartSuggestionEngine, SuggestionResult
from magic_charts.charts.variants import (
    ChartVariant,
    auto_select_columns,
    compatible_variants,
    is_column_addable,
)
from magic_charts.data.ingest import Dataset, load_csv_file, load_csv_text
from magic_charts.data.samples import SampleCatalog
from magic_charts.exceptions import MagicChartsError, NoDatasetError
from magic_charts.insights import Insight, generate_insights

logger = logging.getLogger(__name__)


class UploadSlot:
    """Thread-safe holder for the most recently registered dataset.

    ``begin()`` issues a ticket; ``complete()`` and ``fail()`` only take
    effect for the newest ticket. Older completions are dropped.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._latest = 0
        self._dataset: Dataset | None = None
        self._error: str | None = None
        self._in_flight = False

    def begin(self) -> int:
        """Start an upload, superseding any upload still in flight."""
        with self._lock:
            self._latest += 1
            self._in_flight = True
            self._error = None
            return self._latest

    def complete(self, ticket: int, dataset: Dataset) -> bool:
        """Register ``dataset`` if ``ticket`` is still the newest upload.

        Returns:
            True if the dataset became active, False if it was stale.
        """
        with self._lock:
            if ticket != self._latest:
                logger.warning(
                    "Dropping stale upload %d (%s); upload %d is newer",
                    ticket,
                    dataset.name,
                    self._latest,
                )
                return False
            self._dataset = dataset
            self._error = None
            self._in_flight = False
        logger.info("Registered dataset %s (%d rows)", dataset.name, dataset.record_count)
        return True

    def fail(self, ticket: int, message: str) -> bool:
        """Record an ingestion error; the active dataset is left untouched."""
        with self._lock:
            if ticket != self._latest:
                logger.warning("Ignoring error from stale upload %d: %s", ticket, message)
                return False
            self._error = message
            self._in_flight = False
        return True

    @property
    def dataset(self) -> Dataset | None:
        with self._lock:
            return self._dataset

    @property
    def error(self) -> str | None:
        with self._lock:
            return self._error

    @property
    def in_flight(self) -> bool:
        with self._lock:
            return self._in_flight


class ExplorationSession:
    """State behind one exploration: which dataset, which columns.

    Field sets, suggestions and variants are recomputed from the current
    selection on every call; nothing is cached.
    """

    def __init__(
        self,
        catalog: SampleCatalog | None = None,
        engine: ChartSuggestionEngine | None = None,
        palette: Sequence[str] | None = None,
    ):
        self._catalog = catalog
        self._engine = engine or ChartSuggestionEngine()
        self._palette = list(palette) if palette is not None else None
        self.uploads = UploadSlot()
        self._selection: list[str] = []
        self._selection_dataset_id: str | None = None

    @property
    def catalog(self) -> SampleCatalog:
        if self._catalog is None:
            self._catalog = SampleCatalog()
        return self._catalog

    # -- Loading --

    def _ingest(self, load) -> Dataset:
        ticket = self.uploads.begin()
        try:
            dataset = load()
        except MagicChartsError as e:
            self.uploads.fail(ticket, str(e))
            raise
        self.uploads.complete(ticket, dataset)
        return dataset

    def load_text(self, text: str, name: str | None = None) -> Dataset:
        return self._ingest(lambda: load_csv_text(text, name))

    def load_file(self, path: Path | str) -> Dataset:
        return self._ingest(lambda: load_csv_file(path))

    def load_sample(self, sample_id: str) -> Dataset:
        return self._ingest(lambda: self.catalog.load(sample_id))

    @property
    def dataset(self) -> Dataset | None:
        return self.uploads.dataset

    def require_dataset(self) -> Dataset:
        dataset = self.uploads.dataset
        if dataset is None:
            raise NoDatasetError()
        return dataset

    # -- Selection --

    @property
    def selection(self) -> list[str]:
        dataset = self.uploads.dataset
        if dataset is None or dataset.id != self._selection_dataset_id:
            return []
        return list(self._selection)

    def select(self, columns: Sequence[str]) -> list[str]:
        """Replace the selection; every column must exist in the dataset."""
        dataset = self.require_dataset()
        dataset.require_columns(columns)
        self._selection = list(dict.fromkeys(columns))
        self._selection_dataset_id = dataset.id
        return self.selection

    def toggle(self, column: str) -> list[str]:
        current = self.selection
        if column in current:
            current.remove(column)
        else:
            current.append(column)
        return self.select(current)

    def clear_selection(self) -> None:
        self._selection = []

    # -- Analysis --

    def field_set(self) -> FieldSet:
        return build_field_set(self.require_dataset().rows, self.selection)

    def suggestions(self) -> SuggestionResult:
        dataset = self.require_dataset()
        return self._engine.suggest_for_rows(dataset.rows, self.selection)

    def validate(self, chart_type: str) -> bool:
        """Structural check of a suggested chart type against the selection."""
        dataset = self.require_dataset()
        return self._engine.validate(chart_type, self.field_set(), dataset.record_count)

    def compatible_variants(self, family: str | None = None) -> list[tuple[str, ChartVariant]]:
        dataset = self.require_dataset()
        return compatible_variants(self.selection, dataset.column_types, dataset.rows, family)

    def addable_columns(self) -> list[str]:
        """Columns that could extend the selection into some compatible chart."""
        dataset = self.require_dataset()
        selection = self.selection
        return [
            c
            for c in dataset.column_names
            if c not in selection and is_column_addable(c, selection, dataset.column_types, dataset.rows)
        ]

    def auto_select(self, family: str) -> list[str] | None:
        """Select the first column combination ``family`` can draw, if any."""
        dataset = self.require_dataset()
        columns = auto_select_columns(family, dataset.column_names, dataset.column_types, dataset.rows)
        if columns is not None:
            self.select(columns)
        return columns

    def render(self, family: str, variant: str) -> ChartBundle:
        return build_chart(family, variant, self.selection, self.require_dataset(), self._palette)

    def gallery(self, limit: int = 9) -> list[ChartBundle]:
        return build_gallery(self.require_dataset(), self._palette, limit=limit)

    def insights(self) -> list[Insight]:
        return generate_insights(self.require_dataset())
