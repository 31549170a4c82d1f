"""Sample dataset catalog.

Each catalog directory holds a ``catalog.yml`` listing datasets, with the
CSV either inline (``csv_data``) or in a sibling file (``csv_file``). The
built-in library ships with the package; extra directories come from
``MAGIC_CHARTS_SAMPLE_DIRS`` or the constructor.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ValidationError, model_validator

from magic_charts.data.ingest import Dataset, load_csv_text
from magic_charts.exceptions import IngestionError, SampleDatasetNotFoundError

logger = logging.getLogger(__name__)

CATALOG_FILE = "catalog.yml"


class SampleDataset(BaseModel):
    """Catalog entry for a bundled or user-supplied sample."""

    id: str
    name: str
    description: str = ""
    category: str = ""
    csv_file: Path | None = None
    csv_data: str | None = None

    @model_validator(mode="after")
    def check_source(self) -> SampleDataset:
        if self.csv_file is None and self.csv_data is None:
            raise ValueError(f"sample '{self.id}' needs csv_file or csv_data")
        return self

    def read_csv(self) -> str:
        if self.csv_data is not None:
            return self.csv_data
        try:
            return self.csv_file.read_text(encoding="utf-8-sig")
        except OSError as e:
            raise IngestionError(f"Failed to read sample {self.id} from {self.csv_file}: {e}") from e


class SampleCatalog:
    """Discover sample datasets across the built-in library and extra directories.

    Later directories cannot shadow an id that an earlier one already
    defined; the duplicate is skipped with a warning.
    """

    def __init__(self, sample_dirs: list[Path] | None = None):
        self._dirs: list[Path] = []

        builtin_dir = Path(__file__).parent / "library"
        if builtin_dir.exists():
            self._dirs.append(builtin_dir)

        if sample_dirs is None:
            from magic_charts.config import get_settings

            sample_dirs = get_settings().sample_dirs
        self._dirs.extend(sample_dirs)
        self._cache: dict[str, SampleDataset] | None = None

    @property
    def samples(self) -> dict[str, SampleDataset]:
        """All catalog entries keyed by id (cached)."""
        if self._cache is None:
            entries: dict[str, SampleDataset] = {}
            for directory in self._dirs:
                for sample in self._read_catalog(directory):
                    if sample.id in entries:
                        logger.warning("Duplicate sample id %s in %s, skipping", sample.id, directory)
                        continue
                    entries[sample.id] = sample
            self._cache = entries
        return self._cache

    def _read_catalog(self, directory: Path) -> list[SampleDataset]:
        path = directory / CATALOG_FILE
        if not path.exists():
            logger.warning("No %s in sample directory %s", CATALOG_FILE, directory)
            return []
        try:
            with open(path) as f:
                content = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning("Could not read sample catalog %s: %s", path, e)
            return []

        samples: list[SampleDataset] = []
        for raw in content.get("datasets", []) if isinstance(content, dict) else []:
            entry = self._parse_entry(raw, directory)
            if entry is not None:
                samples.append(entry)
        return samples

    @staticmethod
    def _parse_entry(raw: Any, directory: Path) -> SampleDataset | None:
        if not isinstance(raw, dict):
            return None
        data = dict(raw)
        if data.get("csv_file"):
            data["csv_file"] = directory / data["csv_file"]
        try:
            return SampleDataset(**data)
        except ValidationError as e:
            logger.warning("Invalid sample entry in %s: %s", directory, e)
            return None

    def list(self) -> list[SampleDataset]:
        return list(self.samples.values())

    def ids(self) -> list[str]:
        return list(self.samples)

    def get(self, sample_id: str) -> SampleDataset:
        try:
            return self.samples[sample_id]
        except KeyError:
            raise SampleDatasetNotFoundError(sample_id, self.ids()) from None

    def load(self, sample_id: str) -> Dataset:
        """Parse a sample into a Dataset named after the catalog entry."""
        sample = self.get(sample_id)
        dataset = load_csv_text(sample.read_csv(), name=sample.name)
        logger.info("Loaded sample %s (%d rows)", sample_id, dataset.record_count)
        return dataset

    def invalidate_cache(self) -> None:
        self._cache = None
