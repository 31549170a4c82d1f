"""Tests for chart bundle building."""

from __future__ import annotations

import json

import pytest

from magic_charts.charts.render import ChartKind, build_chart, build_gallery
from magic_charts.config import DEFAULT_PALETTE
from magic_charts.data.ingest import build_dataset
from magic_charts.exceptions import ChartRenderError, ColumnNotFoundError, UnknownChartFamilyError


class TestBar:
    def test_single_sums_per_category(self, sales_dataset):
        bundle = build_chart("Bar", "single", ["sales", "region"], sales_dataset)
        assert bundle.title == "Sum of sales by region"
        assert bundle.data.labels == ["East", "West", "North"]
        ds = bundle.data.datasets[0]
        assert ds.data == [370.0, 750.0, 130.0]
        assert ds.color == DEFAULT_PALETTE[0]
        assert bundle.options.chart_kind == ChartKind.BAR
        assert bundle.options.tick_suffix == ""

    def test_multi_colours_each_bar(self, sales_dataset):
        bundle = build_chart("Bar", "multi", ["region", "sales"], sales_dataset)
        assert bundle.data.datasets[0].colors == list(DEFAULT_PALETTE[:3])

    def test_count_horizontal(self, sales_dataset):
        bundle = build_chart("Bar", "count_horizontal", ["region"], sales_dataset)
        assert bundle.data.datasets[0].data == [3, 3, 2]
        assert bundle.options.horizontal

    def test_grouped_measures(self, sales_dataset):
        bundle = build_chart("Bar", "grouped", ["region", "sales", "profit"], sales_dataset)
        assert bundle.data.labels == ["East", "West", "North"]
        assert [d.label for d in bundle.data.datasets] == ["sales", "profit"]
        assert bundle.data.datasets[0].data == [370.0, 750.0, 130.0]
        assert bundle.data.datasets[1].data == [42.0, 130.0, 13.0]
        assert not bundle.options.stacked
        assert bundle.options.show_legend

    def test_stacked_by_date_and_category(self, sales_dataset):
        bundle = build_chart("Bar", "stacked", ["date", "region", "sales"], sales_dataset)
        assert bundle.data.labels == ["2024-01-01", "2024-01-02", "2024-01-03", "2024-01-04"]
        series = {d.label: d.data for d in bundle.data.datasets}
        assert series == {
            "East": [100.0, 150.0, 120.0, 0.0],
            "West": [200.0, 0.0, 300.0, 250.0],
            "North": [0.0, 50.0, 0.0, 80.0],
        }
        assert bundle.options.stacked

    def test_proportional_sums_to_one_hundred(self, sales_dataset):
        bundle = build_chart("Bar", "proportional", ["region", "sales", "profit"], sales_dataset)
        for i in range(len(bundle.data.labels)):
            assert sum(d.data[i] for d in bundle.data.datasets) == pytest.approx(100.0)
        assert bundle.options.stacked
        assert bundle.options.tick_suffix == "%"

    def test_large_values_pick_a_unit(self):
        ds = build_dataset(
            [{"k": c, "v": v} for c, v in [("a", "1500"), ("b", "2500")] * 3],
            ["k", "v"],
        )
        bundle = build_chart("Bar", "single", ["k", "v"], ds)
        assert bundle.options.tick_divisor == 1000
        assert bundle.options.tick_suffix == "k"


class TestLine:
    def test_simple_averages_per_date(self, sales_dataset):
        bundle = build_chart("Line", "simple", ["date", "sales"], sales_dataset)
        assert bundle.data.labels == ["2024-01-01", "2024-01-02", "2024-01-03", "2024-01-04"]
        assert bundle.data.datasets[0].data == [150.0, 100.0, 210.0, 165.0]
        assert not bundle.options.fill
        assert not bundle.options.show_legend

    def test_area_fills(self, sales_dataset):
        assert build_chart("Line", "area", ["date", "sales"], sales_dataset).options.fill

    def test_multi_by_category_keeps_gaps(self, sales_dataset):
        bundle = build_chart("Line", "multi", ["date", "region", "sales"], sales_dataset)
        series = {d.label: d.data for d in bundle.data.datasets}
        assert series["North"] == [None, 50.0, None, 80.0]
        assert bundle.options.show_legend


class TestPie:
    def test_standard(self, sales_dataset):
        bundle = build_chart("Pie", "standard", ["sales", "region"], sales_dataset)
        assert bundle.title == "Share of sales by region"
        assert bundle.data.labels == ["East", "West", "North"]
        assert len(bundle.data.datasets[0].colors) == 3
        assert bundle.options.cutout is None

    def test_donut_cutout(self, sales_dataset):
        assert build_chart("Pie", "donut", ["region"], sales_dataset).options.cutout == "60%"

    def test_too_many_slices(self):
        # first rows repeat five labels so the column types as categorical
        labels = [f"c{i % 5}" for i in range(10)] + [f"c{i}" for i in range(5, 25)]
        ds = build_dataset([{"cat": c} for c in labels], ["cat"])
        with pytest.raises(ChartRenderError, match="too many slices"):
            build_chart("Pie", "count", ["cat"], ds)


class TestScatterAndHistogram:
    def test_scatter_points(self, sales_dataset):
        bundle = build_chart("Scatter", "simple", ["sales", "profit"], sales_dataset)
        points = bundle.data.datasets[0].data
        assert len(points) == 8
        assert (points[0].x, points[0].y) == (100.0, 10.0)
        assert bundle.data.datasets[0].color == DEFAULT_PALETTE[1]

    def test_dot_plot_for_category(self, sales_dataset):
        bundle = build_chart("Scatter", "simple", ["region", "sales"], sales_dataset)
        assert bundle.data.labels == ["East", "West", "North"]
        assert [p.x for p in bundle.data.datasets[0].data[:4]] == [0, 1, 0, 2]

    def test_bubble_radius_scales(self, sales_dataset):
        bundle = build_chart("Scatter", "bubble", ["sales", "profit", "units"], sales_dataset)
        radii = [p.r for p in bundle.data.datasets[0].data]
        assert radii[0] == 5.0
        assert radii[-1] == 25.0
        assert bundle.options.chart_kind == ChartKind.BUBBLE

    def test_histogram(self, sales_dataset):
        bundle = build_chart("Histogram", "standard", ["sales"], sales_dataset)
        assert len(bundle.data.labels) == 5
        assert sum(bundle.data.datasets[0].data) == 8
        assert bundle.data.datasets[0].color == DEFAULT_PALETTE[2]


class TestBuildChart:
    def test_incompatible_selection(self, sales_dataset):
        with pytest.raises(ChartRenderError, match="incompatible column selection"):
            build_chart("Histogram", "standard", ["region"], sales_dataset)

    def test_unknown_variant(self, sales_dataset):
        with pytest.raises(UnknownChartFamilyError):
            build_chart("Bar", "exploded", ["region"], sales_dataset)

    def test_missing_column(self, sales_dataset):
        with pytest.raises(ColumnNotFoundError, match="revenue"):
            build_chart("Histogram", "standard", ["revenue"], sales_dataset)

    def test_custom_palette_cycles(self, sales_dataset):
        bundle = build_chart("Bar", "multi", ["region", "sales"], sales_dataset, palette=["#000000"])
        assert bundle.data.datasets[0].colors == ["#000000"] * 3

    def test_empty_palette(self, sales_dataset):
        with pytest.raises(ChartRenderError, match="palette is empty"):
            build_chart("Bar", "single", ["region", "sales"], sales_dataset, palette=[])

    def test_bundle_serialises(self, sales_dataset):
        bundle = build_chart("Scatter", "bubble", ["sales", "profit", "units"], sales_dataset)
        payload = json.loads(json.dumps(bundle.model_dump(mode="json")))
        assert payload["options"]["chart_kind"] == "bubble"
        assert payload["columns"] == ["sales", "profit", "units"]


class TestGallery:
    def test_one_chart_per_family(self, sales_dataset):
        bundles = build_gallery(sales_dataset)
        assert [b.family for b in bundles] == ["Bar", "Line", "Pie", "Scatter", "Histogram"]

    def test_limit(self, sales_dataset):
        assert len(build_gallery(sales_dataset, limit=2)) == 2
