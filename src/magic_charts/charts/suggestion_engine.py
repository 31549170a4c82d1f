"""Rule-based chart type suggestion engine.

Works at the level of chart families: given a column selection already
partitioned into dimensions, measures and dates, every rule in an ordered
table is tested and each matching rule contributes its suggestions. The
collected list is sorted by priority (1 = best); ties keep table order.

Rules:
 1. 1 measure only → histogram
 2. 1 low-cardinality dimension only → bar
 3. 1 low-cardinality dimension + 1 measure → bar, pie (≤7 categories)
 4. 1 date + 1 measure → line, bar
 5. 2 measures only → scatter
 6. 2+ measures + 1 dimension → grouped_bar, line
 7. 2+ measures + 1 date → line, stacked_area
 8. 2 dimensions + 1 measure → grouped_bar, stacked_bar, heatmap
 9. date + dimension + measure → line, stacked_area, grouped_bar
10. date + dimension + 2+ measures → line, stacked_area
11. 2 dimensions + 2+ measures → grouped_bar, heatmap
12. 3+ measures → line/stacked_area, radar/grouped_bar or parallel_coordinates
13. 2 measures + 1 dimension → scatter, grouped_bar
14. measures named like parts of a whole → stacked_bar
15. high-cardinality dimension + measure → treemap
16. more than 10,000 records + 2+ measures → density
17. geographic dimension + measure → map
Fallback → table
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Sequence

from magic_charts.analysis.classifier import CardinalityTier
from magic_charts.analysis.field_analyzer import FieldDescriptor, FieldSet, build_field_set

logger = logging.getLogger(__name__)

NO_FIELDS_REASON = "No fields selected"

PIE_MAX_CATEGORIES = 7
LARGE_DATASET_RECORDS = 10_000
SCATTER_MIN_RECORDS = 10

PART_OF_WHOLE_KEYWORDS = ("percentage", "percent", "share", "proportion", "ratio")
GEO_NAME_KEYWORDS = (
    "country", "state", "city", "region", "location", "lat", "lng", "longitude", "latitude",
)
GEO_VALUES = frozenset({"usa", "uk", "canada", "australia", "germany", "france", "japan", "china"})


@dataclass
class ChartSuggestion:
    """A suggested chart type with its priority and reasoning."""

    type: str
    priority: int  # 1 = highest
    reason: str


@dataclass
class SuggestionResult:
    """Sorted suggestions plus the field partition they were derived from."""

    suggestions: list[ChartSuggestion] = field(default_factory=list)
    field_analysis: FieldSet | None = None
    reason: str | None = None

    @property
    def types(self) -> list[str]:
        return [s.type for s in self.suggestions]


@dataclass(frozen=True)
class RuleContext:
    """Counts and fields a rule predicate can look at."""

    dimensions: Sequence[FieldDescriptor]
    measures: Sequence[FieldDescriptor]
    dates: Sequence[FieldDescriptor]
    record_count: int

    @property
    def n_dims(self) -> int:
        return len(self.dimensions)

    @property
    def n_measures(self) -> int:
        return len(self.measures)

    @property
    def n_dates(self) -> int:
        return len(self.dates)

    @property
    def all_dims_low(self) -> bool:
        return all(d.cardinality_tier == CardinalityTier.LOW for d in self.dimensions)

    def shape(self, dims: int, measures: int, dates: int) -> bool:
        return (self.n_dims, self.n_measures, self.n_dates) == (dims, measures, dates)


@dataclass(frozen=True)
class SuggestionRule:
    """One row of the rule table: a predicate and the suggestions it adds."""

    name: str
    when: Callable[[RuleContext], bool]
    suggestions: tuple[tuple[str, int, str], ...]

    def apply(self, ctx: RuleContext) -> list[ChartSuggestion]:
        if not self.when(ctx):
            return []
        return [ChartSuggestion(type=t, priority=p, reason=r) for t, p, r in self.suggestions]


def _parts_of_whole(measures: Sequence[FieldDescriptor]) -> bool:
    return any(
        keyword in m.name.lower()
        for m in measures
        for keyword in PART_OF_WHOLE_KEYWORDS
    )


def _is_geographic(dim: FieldDescriptor) -> bool:
    name = dim.name.lower()
    if any(keyword in name for keyword in GEO_NAME_KEYWORDS):
        return True
    return any(str(v).lower() in GEO_VALUES for v in dim.unique_values_sample)


SUGGESTION_RULES: tuple[SuggestionRule, ...] = (
    SuggestionRule(
        "single_measure",
        lambda c: c.shape(0, 1, 0),
        (("histogram", 1, "Single continuous measure - show distribution"),),
    ),
    SuggestionRule(
        "single_dimension",
        lambda c: c.shape(1, 0, 0) and c.all_dims_low,
        (("bar", 1, "Single categorical dimension - show frequency"),),
    ),
    SuggestionRule(
        "dimension_measure",
        lambda c: c.shape(1, 1, 0) and c.all_dims_low,
        (("bar", 1, "Categorical dimension with measure - compare values across categories"),),
    ),
    SuggestionRule(
        "dimension_measure_few_categories",
        lambda c: c.shape(1, 1, 0) and c.all_dims_low and c.dimensions[0].cardinality <= PIE_MAX_CATEGORIES,
        (("pie", 2, "Few categories - can show parts of whole"),),
    ),
    SuggestionRule(
        "date_measure",
        lambda c: c.shape(0, 1, 1),
        (
            ("line", 1, "Time series data - show trend over time"),
            ("bar", 2, "Time periods - compare values across time periods"),
        ),
    ),
    SuggestionRule(
        "two_measures",
        lambda c: c.shape(0, 2, 0),
        (("scatter", 1, "Two continuous measures - show correlation"),),
    ),
    SuggestionRule(
        "measures_by_dimension",
        lambda c: c.n_measures >= 2 and c.n_dims == 1 and c.n_dates == 0 and c.all_dims_low,
        (
            ("grouped_bar", 1, "Multiple measures with categorical dimension - compare measures across categories"),
            ("line", 2, "Multiple measures over categories - show trends for each measure"),
        ),
    ),
    SuggestionRule(
        "measures_over_time",
        lambda c: c.n_measures >= 2 and c.n_dims == 0 and c.n_dates == 1,
        (
            ("line", 1, "Multiple measures over time - show trends for each measure"),
            ("stacked_area", 2, "Multiple measures over time - show cumulative contribution"),
        ),
    ),
    SuggestionRule(
        "two_dimensions_measure",
        lambda c: c.shape(2, 1, 0) and c.all_dims_low,
        (
            ("grouped_bar", 1, "Two categorical dimensions with measure - group by one dimension"),
            ("stacked_bar", 2, "Two categorical dimensions with measure - stack by secondary dimension"),
            ("heatmap", 3, "Two categorical dimensions with measure - show intensity across categories"),
        ),
    ),
    SuggestionRule(
        "date_dimension_measure",
        lambda c: c.shape(1, 1, 1) and c.all_dims_low,
        (
            ("line", 1, "Time series by category - show trends for each group"),
            ("stacked_area", 2, "Stacked area - show contribution over time"),
            ("grouped_bar", 3, "Grouped bars over time - compare categories within time periods"),
        ),
    ),
    SuggestionRule(
        "date_dimension_measures",
        lambda c: c.n_dates == 1 and c.n_dims == 1 and c.n_measures >= 2 and c.all_dims_low,
        (
            ("line", 1, "Multiple time series by category - show trends for each measure and group"),
            ("stacked_area", 2, "Stacked area by category - show measure contributions over time"),
        ),
    ),
    SuggestionRule(
        "two_dimensions_measures",
        lambda c: c.n_dims == 2 and c.n_measures >= 2 and c.n_dates == 0 and c.all_dims_low,
        (
            ("grouped_bar", 1, "Multiple measures with two dimensions - group and compare measures"),
            ("heatmap", 2, "Multiple measures - create separate heatmaps for each measure"),
        ),
    ),
    SuggestionRule(
        "many_measures_over_time",
        lambda c: c.n_measures >= 3 and c.n_dims <= 1 and c.n_dates == 1,
        (
            ("line", 1, "Multiple measures over time - parallel time series"),
            ("stacked_area", 2, "Multiple measures over time - show cumulative values"),
        ),
    ),
    SuggestionRule(
        "many_measures_by_category",
        lambda c: c.n_measures >= 3 and c.n_dims == 1 and c.n_dates <= 1 and c.all_dims_low,
        (
            ("radar", 1, "Multiple measures by category - radar chart shows multidimensional comparison"),
            ("grouped_bar", 2, "Multiple measures by category - grouped bars for detailed comparison"),
        ),
    ),
    SuggestionRule(
        "many_measures_only",
        lambda c: c.n_measures >= 3 and c.n_dims == 0 and c.n_dates == 0,
        (("parallel_coordinates", 1, "Multiple measures only - parallel coordinates show relationships"),),
    ),
    SuggestionRule(
        "two_measures_dimension",
        lambda c: c.shape(1, 2, 0) and c.all_dims_low,
        (
            ("scatter", 1, "Two measures with categorical dimension - scatter plot colored by category"),
            ("grouped_bar", 2, "Two measures with categorical dimension - grouped bars to compare both measures"),
        ),
    ),
    SuggestionRule(
        "parts_of_whole",
        lambda c: c.n_measures >= 2 and _parts_of_whole(c.measures),
        (("stacked_bar", 2, "Stackable data structure - stacked_bar shows composition"),),
    ),
    # The LOW-tier shapes already carry these from the rules above.
    SuggestionRule(
        "stack_over_time",
        lambda c: c.shape(1, 1, 1) and not c.all_dims_low,
        (("stacked_area", 2, "Stackable data structure - stacked_area shows composition"),),
    ),
    SuggestionRule(
        "stack_by_subcategory",
        lambda c: c.shape(2, 1, 0) and not c.all_dims_low,
        (("stacked_bar", 2, "Stackable data structure - stacked_bar shows composition"),),
    ),
    SuggestionRule(
        "high_cardinality_dimension",
        lambda c: c.n_measures >= 1 and any(d.cardinality_tier == CardinalityTier.HIGH for d in c.dimensions),
        (("treemap", 3, "High cardinality dimension - treemap shows hierarchy"),),
    ),
    SuggestionRule(
        "large_dataset",
        lambda c: c.record_count > LARGE_DATASET_RECORDS and c.n_measures >= 2,
        (("density", 2, "Large dataset - density plot shows patterns better than individual points"),),
    ),
    SuggestionRule(
        "geographic_dimension",
        lambda c: c.n_measures >= 1 and any(_is_geographic(d) for d in c.dimensions),
        (("map", 1, "Geographic dimension detected - map visualization"),),
    ),
)

FALLBACK_SUGGESTION = ("table", 1, "Complex data structure - tabular view recommended")


def _validate_pie(fs: FieldSet, record_count: int) -> bool:
    return (
        len(fs.measures) == 1
        and len(fs.dimensions) == 1
        and fs.dimensions[0].cardinality <= PIE_MAX_CATEGORIES
    )


def _validate_histogram(fs: FieldSet, record_count: int) -> bool:
    return len(fs.measures) == 1 and not fs.dimensions and not fs.dates


def _validate_scatter(fs: FieldSet, record_count: int) -> bool:
    return len(fs.measures) >= 2 and record_count >= SCATTER_MIN_RECORDS


def _validate_line(fs: FieldSet, record_count: int) -> bool:
    return len(fs.measures) == 1 and len(fs.dates) == 1


def _validate_heatmap(fs: FieldSet, record_count: int) -> bool:
    return (
        len(fs.dimensions) == 2
        and len(fs.measures) == 1
        and not any(d.cardinality_tier == CardinalityTier.HIGH for d in fs.dimensions)
    )


VALIDATION_RULES: dict[str, Callable[[FieldSet, int], bool]] = {
    "pie": _validate_pie,
    "histogram": _validate_histogram,
    "scatter": _validate_scatter,
    "line": _validate_line,
    "heatmap": _validate_heatmap,
}


class ChartSuggestionEngine:
    """Evaluate the suggestion rule table against a field set.

    Rules are data, so a custom table can be passed in without touching
    the engine.
    """

    def __init__(self, rules: Sequence[SuggestionRule] = SUGGESTION_RULES):
        self._rules = tuple(rules)

    @property
    def rules(self) -> tuple[SuggestionRule, ...]:
        return self._rules

    def suggest(self, field_set: FieldSet, record_count: int) -> SuggestionResult:
        """Suggest chart types for a partitioned selection.

        An empty selection is not an error: it yields no suggestions and
        the reason "No fields selected".
        """
        if field_set.is_empty:
            return SuggestionResult(suggestions=[], reason=NO_FIELDS_REASON)

        ctx = RuleContext(
            dimensions=field_set.dimensions,
            measures=field_set.measures,
            dates=field_set.dates,
            record_count=record_count,
        )

        suggestions: list[ChartSuggestion] = []
        for rule in self._rules:
            hits = rule.apply(ctx)
            if hits:
                logger.debug("Rule %s matched: %s", rule.name, [h.type for h in hits])
                suggestions.extend(hits)

        if not suggestions:
            chart_type, priority, reason = FALLBACK_SUGGESTION
            suggestions.append(ChartSuggestion(type=chart_type, priority=priority, reason=reason))

        suggestions.sort(key=lambda s: s.priority)
        return SuggestionResult(suggestions=suggestions, field_analysis=field_set)

    def suggest_for_rows(self, rows: Sequence[Mapping[str, Any]], columns: Sequence[str]) -> SuggestionResult:
        """Classify the selected columns over ``rows`` and suggest charts."""
        if not columns:
            return SuggestionResult(suggestions=[], reason=NO_FIELDS_REASON)
        return self.suggest(build_field_set(rows, columns), len(rows))

    def validate(self, chart_type: str, field_set: FieldSet, record_count: int) -> bool:
        """Stricter structural check of one chart type; unknown types pass."""
        check = VALIDATION_RULES.get(chart_type)
        if check is None:
            return True
        return check(field_set, record_count)


def suggest_charts(rows: Sequence[Mapping[str, Any]], columns: Sequence[str]) -> SuggestionResult:
    """Suggest charts for a column selection using the default rule table."""
    return ChartSuggestionEngine().suggest_for_rows(rows, columns)
