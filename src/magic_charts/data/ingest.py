"""CSV ingestion and upload-time column typing.

Parsing is delegated to pandas. Every cell is read as text, trimmed, and
kept as a string; numeric and date interpretation happens later, in the
analysis layer.
"""

from __future__ import annotations

import io
import logging
import re
import uuid
from enum import Enum
from pathlib import Path
from typing import Any, Sequence

import pandas as pd
from pydantic import BaseModel, Field

from magic_charts.analysis.classifier import is_null, to_number
from magic_charts.exceptions import ColumnNotFoundError, EmptyDatasetError, IngestionError

logger = logging.getLogger(__name__)

DEFAULT_DATASET_NAME = "Uploaded Dataset"

TYPE_SAMPLE_SIZE = 10
NUMERIC_THRESHOLD = 0.8
CATEGORICAL_MAX_VALUES = 20
CATEGORICAL_MAX_RATIO = 0.5

_ISO_DAY = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class ColumnType(str, Enum):
    """Ingestion-time column type, shown next to each column name."""

    NUMERIC = "numeric"
    CATEGORICAL = "categorical"
    DATE = "date"
    TEXT = "text"


class DataColumn(BaseModel):
    name: str
    type: ColumnType
    values: list[str] = Field(default_factory=list)


class Dataset(BaseModel):
    """An ingested table: typed columns plus the same data as row mappings."""

    id: str
    name: str
    columns: list[DataColumn] = Field(default_factory=list)
    rows: list[dict[str, str]] = Field(default_factory=list)
    source: str | None = None

    @property
    def column_names(self) -> list[str]:
        return [c.name for c in self.columns]

    @property
    def column_types(self) -> dict[str, ColumnType]:
        return {c.name: c.type for c in self.columns}

    @property
    def record_count(self) -> int:
        return len(self.rows)

    def column(self, name: str) -> DataColumn:
        for c in self.columns:
            if c.name == name:
                return c
        raise ColumnNotFoundError(name, self.column_names)

    def values(self, name: str) -> list[str]:
        return self.column(name).values

    def require_columns(self, names: Sequence[str]) -> None:
        """Raise ColumnNotFoundError for the first name not in the dataset."""
        known = set(self.column_names)
        for name in names:
            if name not in known:
                raise ColumnNotFoundError(name, self.column_names)


def detect_column_type(values: Sequence[Any]) -> ColumnType:
    """Type a column from its first few non-empty values.

    Only the first 10 values are sampled, so a column that changes
    character further down keeps the type of its head.
    """
    sample = [v for v in values[:TYPE_SAMPLE_SIZE] if not is_null(v)]
    if not sample:
        return ColumnType.TEXT

    if all(_ISO_DAY.match(str(v).strip()) for v in sample):
        return ColumnType.DATE

    numeric = sum(1 for v in sample if to_number(v) is not None)
    if numeric / len(sample) > NUMERIC_THRESHOLD:
        return ColumnType.NUMERIC

    distinct = {str(v).lower() for v in sample}
    if len(distinct) <= min(CATEGORICAL_MAX_VALUES, len(sample) * CATEGORICAL_MAX_RATIO):
        return ColumnType.CATEGORICAL

    return ColumnType.TEXT


def generate_dataset_id() -> str:
    return f"dataset-{uuid.uuid4().hex[:12]}"


def build_dataset(
    records: Sequence[dict[str, Any]],
    columns: Sequence[str],
    name: str | None = None,
    source: str | None = None,
) -> Dataset:
    """Assemble a Dataset from row mappings, typing each column.

    Cells are stored as trimmed strings; missing cells become "".
    """
    if not records:
        raise EmptyDatasetError(source)

    rows = [{c: _cell(record.get(c)) for c in columns} for record in records]
    typed = [
        DataColumn(name=c, type=detect_column_type(values), values=values)
        for c, values in ((c, [row[c] for row in rows]) for c in columns)
    ]
    dataset = Dataset(
        id=generate_dataset_id(),
        name=name or source or DEFAULT_DATASET_NAME,
        columns=typed,
        rows=rows,
        source=source,
    )
    logger.debug(
        "Built dataset %s: %d rows, types=%s",
        dataset.name,
        dataset.record_count,
        {c.name: c.type.value for c in typed},
    )
    return dataset


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and pd.isna(value):
        return ""
    return str(value).strip()


def _read_frame(buffer: io.StringIO, source: str | None) -> pd.DataFrame:
    try:
        df = pd.read_csv(
            buffer,
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
        )
    except pd.errors.EmptyDataError as e:
        raise EmptyDatasetError(source) from e
    except pd.errors.ParserError as e:
        raise IngestionError(f"CSV parsing errors: {e}") from e

    # pandas turns leading extra fields on every row into an index
    if not isinstance(df.index, pd.RangeIndex):
        raise IngestionError(
            f"CSV parsing errors: rows have more fields than the {len(df.columns)}-column header"
        )

    df = df.fillna("")
    df.columns = [str(c).strip() for c in df.columns]
    df = df.apply(lambda col: col.str.strip())
    # Lines holding only delimiters and whitespace count as empty
    return df[(df != "").any(axis=1)].reset_index(drop=True)


def load_csv_text(text: str, name: str | None = None) -> Dataset:
    """Parse CSV text (header row first) into a Dataset.

    Raises:
        IngestionError: The text is not well-formed CSV.
        EmptyDatasetError: There is no header or no data row.
    """
    df = _read_frame(io.StringIO(text), name)
    if df.empty:
        raise EmptyDatasetError(name)
    columns = list(df.columns)
    return build_dataset(df.to_dict(orient="records"), columns, name=name, source=name)


def load_csv_file(path: Path | str) -> Dataset:
    """Read and parse a CSV file; the file name becomes the dataset name."""
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8-sig")
    except FileNotFoundError as e:
        raise IngestionError(f"CSV file not found: {path}") from e
    except (OSError, UnicodeDecodeError) as e:
        raise IngestionError(f"Failed to read file {path}: {e}") from e
    dataset = load_csv_text(text, name=path.name)
    logger.info("Loaded %s (%d rows, %d columns)", path, dataset.record_count, len(dataset.columns))
    return dataset
