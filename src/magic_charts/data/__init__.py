"""Dataset ingestion and the sample catalog."""

from magic_charts.data.ingest import ColumnType, Dataset, load_csv_file, load_csv_text
from magic_charts.data.samples import SampleCatalog, SampleDataset

__all__ = ["ColumnType", "Dataset", "SampleCatalog", "SampleDataset", "load_csv_file", "load_csv_text"]
