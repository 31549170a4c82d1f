"""Tests for the column classifier."""

from __future__ import annotations

from datetime import date, datetime

import pytest

from magic_charts.analysis.classifier import (
    CardinalityTier,
    Classification,
    SemanticType,
    cardinality_tier,
    classify,
    is_null,
    parse_date,
    to_number,
)


class TestIsNull:
    @pytest.mark.parametrize("value", [None, "", "   ", float("nan")])
    def test_null_values(self, value):
        assert is_null(value)

    @pytest.mark.parametrize("value", [0, "0", "x", False])
    def test_present_values(self, value):
        assert not is_null(value)


class TestToNumber:
    def test_parses_numeric_strings(self):
        assert to_number("42") == 42.0
        assert to_number(" 3.5 ") == 3.5
        assert to_number(7) == 7.0

    @pytest.mark.parametrize("value", ["abc", "", "inf", "nan", True, None])
    def test_rejects_non_finite_and_non_numeric(self, value):
        assert to_number(value) is None


class TestParseDate:
    def test_iso_day(self):
        assert parse_date("2024-01-15") == datetime(2024, 1, 15)

    def test_iso_timestamp_with_zulu(self):
        parsed = parse_date("2024-01-15T10:30:00Z")
        assert parsed is not None
        assert parsed.tzinfo is not None

    def test_month_name_formats(self):
        assert parse_date("Jan 15, 2024") == datetime(2024, 1, 15)
        assert parse_date("15 January 2024") == datetime(2024, 1, 15)

    def test_date_object(self):
        assert parse_date(date(2024, 3, 1)) == datetime(2024, 3, 1)

    @pytest.mark.parametrize("value", ["2024", "20240115", "hello", "", None, 45000])
    def test_bare_numbers_and_text_are_not_dates(self, value):
        assert parse_date(value) is None


class TestCardinalityTier:
    @pytest.mark.parametrize(
        "count,tier",
        [
            (0, CardinalityTier.LOW),
            (20, CardinalityTier.LOW),
            (21, CardinalityTier.MEDIUM),
            (100, CardinalityTier.MEDIUM),
            (101, CardinalityTier.HIGH),
        ],
    )
    def test_boundaries(self, count, tier):
        assert cardinality_tier(count) == tier

    def test_monotonic(self):
        order = [CardinalityTier.LOW, CardinalityTier.MEDIUM, CardinalityTier.HIGH]
        ranks = [order.index(cardinality_tier(n)) for n in range(300)]
        assert ranks == sorted(ranks)


class TestClassify:
    def test_empty_column_is_dimension(self):
        assert classify([]) == Classification(SemanticType.DIMENSION, 0)

    def test_all_null_column_is_dimension(self):
        assert classify([None, "", "  "]) == Classification(SemanticType.DIMENSION, 0)

    @pytest.mark.parametrize("distinct", [1, 5, 20])
    def test_small_integer_codes_are_dimensions(self, distinct):
        values = [str(i % distinct) for i in range(100)]
        assert classify(values).semantic_type == SemanticType.DIMENSION

    def test_twenty_one_integers_is_measure(self):
        values = [str(i) for i in range(21)]
        assert classify(values).semantic_type == SemanticType.MEASURE

    def test_fractional_numbers_are_measures(self):
        assert classify(["1.5", "2.5"]).semantic_type == SemanticType.MEASURE

    def test_mostly_dates_with_a_number_is_date(self):
        values = [f"2024-01-{d:02d}" for d in range(1, 10)] + ["42"]
        assert classify(values).semantic_type == SemanticType.DATE

    def test_exactly_eighty_percent_numeric_is_not_a_measure(self):
        values = ["1.5", "2.5", "3.5", "4.5", "5.5", "6.5", "7.5", "8.5", "n/a", "unknown"]
        assert classify(values).semantic_type == SemanticType.DIMENSION

    def test_text_is_dimension(self):
        assert classify(["East", "West", "East"]).semantic_type == SemanticType.DIMENSION

    def test_cardinality_counts_distinct_non_null_values(self):
        result = classify(["a", "a", "b", None, ""])
        assert result.cardinality == 2
        assert result.cardinality_tier == CardinalityTier.LOW

    def test_cardinality_is_exact_for_large_columns(self):
        result = classify([f"user-{i}" for i in range(500)])
        assert result.cardinality == 500
        assert result.cardinality_tier == CardinalityTier.HIGH

    def test_is_deterministic(self):
        values = ["2024-01-01", "12.5", "East", None]
        assert classify(values) == classify(values)
