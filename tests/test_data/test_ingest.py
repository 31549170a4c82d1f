"""Tests for CSV ingestion and column typing."""

from __future__ import annotations

import pytest

from magic_charts.data.ingest import (
    DEFAULT_DATASET_NAME,
    ColumnType,
    build_dataset,
    detect_column_type,
    load_csv_file,
    load_csv_text,
)
from magic_charts.exceptions import ColumnNotFoundError, EmptyDatasetError, IngestionError


class TestDetectColumnType:
    def test_iso_dates(self):
        assert detect_column_type(["2024-01-01", "2024-02-01"]) == ColumnType.DATE

    def test_one_non_iso_value_is_not_a_date(self):
        assert detect_column_type(["2024-01-01", "01/02/2024"]) == ColumnType.TEXT

    def test_numeric_above_threshold(self):
        assert detect_column_type([str(i) for i in range(9)] + ["n/a"]) == ColumnType.NUMERIC

    def test_numeric_at_threshold_is_not_numeric(self):
        values = [str(i) for i in range(8)] + ["n/a", "unknown"]
        assert detect_column_type(values) != ColumnType.NUMERIC

    def test_categorical_is_case_insensitive(self):
        assert detect_column_type(["East", "east", "West", "west"]) == ColumnType.CATEGORICAL

    def test_text(self):
        assert detect_column_type(["alpha", "beta", "gamma", "delta"]) == ColumnType.TEXT

    def test_empty_is_text(self):
        assert detect_column_type(["", "  "]) == ColumnType.TEXT

    def test_only_head_is_sampled(self):
        values = [str(i) for i in range(10)] + ["word"] * 100
        assert detect_column_type(values) == ColumnType.NUMERIC


class TestLoadCsvText:
    def test_rows_and_types(self):
        ds = load_csv_text("Region,Sales\nEast,100\nWest,200\nEast,150\nWest,50\n")
        assert ds.column_names == ["Region", "Sales"]
        assert ds.record_count == 4
        assert ds.rows[0] == {"Region": "East", "Sales": "100"}
        assert ds.column_types == {"Region": ColumnType.CATEGORICAL, "Sales": ColumnType.NUMERIC}
        assert ds.id.startswith("dataset-")

    def test_default_name(self):
        ds = load_csv_text("a\n1\n")
        assert ds.name == DEFAULT_DATASET_NAME
        assert ds.source is None

    def test_name_is_also_source(self):
        ds = load_csv_text("a\n1\n", name="upload.csv")
        assert ds.name == "upload.csv"
        assert ds.source == "upload.csv"

    def test_cells_and_headers_are_trimmed(self):
        ds = load_csv_text(" Region , Sales \n  East ,  100 \n")
        assert ds.rows == [{"Region": "East", "Sales": "100"}]

    def test_blank_lines_skipped(self):
        ds = load_csv_text("a,b\n1,2\n\n,\n3,4\n")
        assert ds.values("a") == ["1", "3"]

    def test_short_rows_fill_with_empty(self):
        ds = load_csv_text("a,b\n1\n2,3\n")
        assert ds.rows[0] == {"a": "1", "b": ""}

    def test_na_markers_are_kept_as_text(self):
        ds = load_csv_text("a\nNA\n1\n")
        assert ds.values("a") == ["NA", "1"]

    def test_quoted_delimiters(self):
        ds = load_csv_text('name,city\n"Doe, Jane",Paris\n')
        assert ds.values("name") == ["Doe, Jane"]

    def test_empty_input(self):
        with pytest.raises(EmptyDatasetError, match="No data found"):
            load_csv_text("")

    def test_header_only(self):
        with pytest.raises(EmptyDatasetError):
            load_csv_text("a,b\n")

    def test_malformed_rows(self):
        with pytest.raises(IngestionError, match="CSV parsing errors"):
            load_csv_text("a,b\n1,2\n3,4,5\n")

    def test_extra_field_on_every_row(self):
        with pytest.raises(IngestionError, match="more fields than the 2-column header"):
            load_csv_text("region,sales\nEast,100,extra\nWest,200,extra\n")


class TestLoadCsvFile:
    def test_file_name_becomes_dataset_name(self, sales_csv_file):
        ds = load_csv_file(sales_csv_file)
        assert ds.name == "sales.csv"
        assert ds.record_count == 8

    def test_byte_order_mark_stripped(self, tmp_path):
        path = tmp_path / "bom.csv"
        path.write_bytes("\ufeffa,b\n1,2\n".encode("utf-8"))
        assert load_csv_file(path).column_names == ["a", "b"]

    def test_missing_file(self, tmp_path):
        with pytest.raises(IngestionError, match="CSV file not found"):
            load_csv_file(tmp_path / "nope.csv")


class TestDataset:
    def test_column_lookup(self, sales_dataset):
        assert sales_dataset.column("sales").type == ColumnType.NUMERIC
        assert sales_dataset.values("region")[:2] == ["East", "West"]

    def test_unknown_column(self, sales_dataset):
        with pytest.raises(ColumnNotFoundError, match="Column not found: revenue"):
            sales_dataset.column("revenue")

    def test_require_columns(self, sales_dataset):
        sales_dataset.require_columns(["sales", "region"])
        with pytest.raises(ColumnNotFoundError):
            sales_dataset.require_columns(["sales", "revenue"])

    def test_build_requires_records(self):
        with pytest.raises(EmptyDatasetError):
            build_dataset([], ["a"])

    def test_build_fills_missing_cells(self):
        ds = build_dataset([{"a": "1"}, {"a": None, "b": " x "}], ["a", "b"])
        assert ds.rows == [{"a": "1", "b": ""}, {"a": "", "b": "x"}]
