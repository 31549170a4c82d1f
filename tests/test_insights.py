"""Tests for descriptive-statistics insights."""

from __future__ import annotations

import pytest

from magic_charts.data.ingest import build_dataset
from magic_charts.insights import (
    Importance,
    InsightType,
    find_outliers,
    generate_insights,
    mean,
    pearson,
)


def _by_id(insights):
    return {i.id: i for i in insights}


class TestHelpers:
    def test_mean(self):
        assert mean([1, 2, 3]) == 2
        assert mean([]) == 0.0

    def test_pearson(self):
        assert pearson([1, 2, 3], [2, 4, 6]) == pytest.approx(1.0)
        assert pearson([1, 2, 3], [6, 4, 2]) == pytest.approx(-1.0)
        assert pearson([1, 1, 1], [1, 2, 3]) == 0.0
        assert pearson([1, 2], [1]) == 0.0

    def test_find_outliers(self):
        assert find_outliers([1, 2, 3, 4, 100]) == [100]
        assert find_outliers([1, 2, 100]) == []
        assert find_outliers([5, 5, 5, 5]) == []


class TestGenerateInsights:
    def test_statistics_come_first(self, sales_dataset):
        insights = generate_insights(sales_dataset)
        assert [i.id for i in insights[:2]] == ["stat-sales", "minmax-sales"]
        found = _by_id(insights)
        assert found["stat-sales"].value == "156.25"
        assert found["minmax-sales"].value == "50 / 300"
        assert found["minmax-sales"].importance == Importance.LOW

    def test_correlation(self, sales_dataset):
        corr = _by_id(generate_insights(sales_dataset))["corr-sales-profit"]
        assert corr.type == InsightType.CORRELATION
        assert "positive" in corr.description
        assert corr.relevant_columns == ["sales", "profit"]

    def test_group_comparison(self, sales_dataset):
        found = _by_id(generate_insights(sales_dataset))
        assert found["top-region-sales"].value == "West"
        assert found["top-region-sales"].importance == Importance.HIGH
        assert found["bottom-region-sales"].value == "North"

    def test_trend_uses_date_order(self, sales_dataset):
        trend = _by_id(generate_insights(sales_dataset))["trend-sales"]
        assert trend.value == "150.0%"
        assert trend.relevant_columns == ["date", "sales"]

    def test_no_outliers_in_even_data(self, sales_dataset):
        assert not [i for i in generate_insights(sales_dataset) if i.type == InsightType.OUTLIER]

    def test_outlier_detected(self):
        ds = build_dataset([{"v": v} for v in ["1", "2", "3", "4", "100"]], ["v"])
        outlier = _by_id(generate_insights(ds))["outlier-v"]
        assert outlier.value == "100"
        assert outlier.importance == Importance.HIGH

    def test_negative_correlation(self):
        ds = build_dataset([{"a": str(i), "b": str(10 - i)} for i in range(6)], ["a", "b"])
        assert "negative" in _by_id(generate_insights(ds))["corr-a-b"].description

    def test_categorical_only_dataset(self):
        ds = build_dataset([{"c": c} for c in ["a", "b", "a", "b"]], ["c"])
        assert generate_insights(ds) == []
