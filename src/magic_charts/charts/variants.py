"""Chart variant compatibility table.

Exact, variant-level counterpart of the suggestion engine: once concrete
columns are picked, each variant's predicate decides whether it can draw
that exact selection. Predicates are pure functions of
``(columns, types, rows)``; ``types`` maps column name to its
ingestion-time ColumnType and ``rows`` is an optional row sample.

Bar:
  count / count_horizontal   1 categorical (or date, vertical only), ≤20 values
  single / single_horizontal 1 categorical (or date, vertical only) + 1 numeric
  multi / multi_horizontal   1 categorical (≤7 values) + 1 numeric
  grouped / stacked / proportional
                             [date|categorical, categorical, numeric] or
                             [date|categorical, numeric, numeric, ...]
Line:
  simple / area              date or ordinal x + 1 or more columns
  multi                      date or ordinal x + 2 or more columns
Pie:
  standard / donut           1 categorical, or 1 categorical + 1 numeric
  count                      1 categorical
Scatter:
  simple                     2 numeric, or numeric + categorical (dot plot)
  bubble                     3 numeric (third is size)
Histogram:
  standard                   1 numeric
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass
from typing import Any, Callable, Iterator, Mapping, Sequence

from magic_charts.analysis.classifier import is_null, to_number
from magic_charts.data.ingest import ColumnType
from magic_charts.exceptions import UnknownChartFamilyError

Row = Mapping[str, Any]
TypeMap = Mapping[str, str]
Predicate = Callable[..., bool]

ALL_FAMILIES = "All"
MAX_AUTO_SELECT_COLUMNS = 4
MAX_GALLERY_COLUMNS = 3
COUNT_BAR_MAX_VALUES = 20
MULTI_COLOR_MAX_VALUES = 7
ORDINAL_MIN_VALUES = 2
ORDINAL_MAX_VALUES = 10

NUMERIC = ColumnType.NUMERIC.value
CATEGORICAL = ColumnType.CATEGORICAL.value
DATE = ColumnType.DATE.value


@dataclass(frozen=True)
class ChartVariant:
    """A specific rendering of a chart family."""

    key: str
    label: str
    is_compatible: Predicate

    def __call__(self, columns: Sequence[str], types: TypeMap, rows: Sequence[Row] | None = None) -> bool:
        return self.is_compatible(columns, types, rows)


def _type(types: TypeMap, column: str) -> str | None:
    t = types.get(column)
    return t.value if isinstance(t, ColumnType) else t


def _distinct_count(rows: Sequence[Row], column: str) -> int:
    return len({row.get(column) for row in rows})


def is_numeric_ordinal(values: Sequence[Any]) -> bool:
    """True when every non-empty value is an integer and there are 2-10 of them."""
    present = [v for v in values if not is_null(v)]
    if not present:
        return False
    numbers = [to_number(v) for v in present]
    if any(n is None or not n.is_integer() for n in numbers):
        return False
    return ORDINAL_MIN_VALUES <= len(set(numbers)) <= ORDINAL_MAX_VALUES


def _split_category_numeric(
    columns: Sequence[str], types: TypeMap, category_types: tuple[str, ...]
) -> tuple[str, str] | None:
    """Find the (category, numeric) pair in a two-column selection, either order."""
    if len(columns) != 2:
        return None
    first, second = columns
    if _type(types, first) in category_types and _type(types, second) == NUMERIC:
        return first, second
    if _type(types, second) in category_types and _type(types, first) == NUMERIC:
        return second, first
    return None


# -- Predicate factories --


def _count_bar(category_types: tuple[str, ...]) -> Predicate:
    def check(columns, types, rows=None):
        if len(columns) != 1 or _type(types, columns[0]) not in category_types:
            return False
        if rows is None:
            return True
        return _distinct_count(rows, columns[0]) <= COUNT_BAR_MAX_VALUES

    return check


def _single_bar(category_types: tuple[str, ...]) -> Predicate:
    def check(columns, types, rows=None):
        return _split_category_numeric(columns, types, category_types) is not None

    return check


def _multi_color_bar(columns, types, rows=None):
    pair = _split_category_numeric(columns, types, (CATEGORICAL,))
    if pair is None or rows is None:
        return False
    return _distinct_count(rows, pair[0]) <= MULTI_COLOR_MAX_VALUES


def _grouped_bar(columns, types, rows=None):
    if len(columns) < 3:
        return False
    kinds = [_type(types, c) for c in columns]
    if kinds[0] not in (DATE, CATEGORICAL):
        return False
    if len(columns) == 3 and kinds[1] == CATEGORICAL and kinds[2] == NUMERIC:
        return True
    return all(k == NUMERIC for k in kinds[1:])


def _line(min_columns: int) -> Predicate:
    def check(columns, types, rows=None):
        if len(columns) < min_columns:
            return False
        x_type = _type(types, columns[0])
        if x_type == DATE:
            return True
        if x_type == NUMERIC and rows is not None:
            return is_numeric_ordinal([row.get(columns[0]) for row in rows])
        return False

    return check


def _pie(columns, types, rows=None):
    if len(columns) == 1:
        return _type(types, columns[0]) == CATEGORICAL
    return _split_category_numeric(columns, types, (CATEGORICAL,)) is not None


def _count_pie(columns, types, rows=None):
    return len(columns) == 1 and _type(types, columns[0]) == CATEGORICAL


def _scatter(columns, types, rows=None):
    if len(columns) != 2:
        return False
    kinds = {_type(types, columns[0]), _type(types, columns[1])}
    return kinds == {NUMERIC} or kinds == {NUMERIC, CATEGORICAL}


def _bubble(columns, types, rows=None):
    return len(columns) == 3 and all(_type(types, c) == NUMERIC for c in columns)


def _histogram(columns, types, rows=None):
    return len(columns) == 1 and _type(types, columns[0]) == NUMERIC


CHART_VARIANTS: dict[str, tuple[ChartVariant, ...]] = {
    "Bar": (
        ChartVariant("count", "Count Bar", _count_bar((CATEGORICAL, DATE))),
        ChartVariant("count_horizontal", "Count Horizontal Bar", _count_bar((CATEGORICAL,))),
        ChartVariant("single", "Single Colour Bar", _single_bar((CATEGORICAL, DATE))),
        ChartVariant("single_horizontal", "Single Colour Horizontal Bar", _single_bar((CATEGORICAL,))),
        ChartVariant("multi", "Multi Colour Bar", _multi_color_bar),
        ChartVariant("multi_horizontal", "Multi Colour Horizontal Bar", _multi_color_bar),
        ChartVariant("grouped", "Grouped Bar", _grouped_bar),
        ChartVariant("stacked", "Stacked Bar", _grouped_bar),
        ChartVariant("proportional", "Proportional Stacked Bar", _grouped_bar),
    ),
    "Line": (
        ChartVariant("simple", "Simple Line", _line(2)),
        ChartVariant("multi", "Multi-series Line", _line(3)),
        ChartVariant("area", "Area Line", _line(2)),
    ),
    "Pie": (
        ChartVariant("standard", "Standard Pie", _pie),
        ChartVariant("donut", "Donut", _pie),
        ChartVariant("count", "Count Pie", _count_pie),
    ),
    "Scatter": (
        ChartVariant("simple", "Simple Scatter", _scatter),
        ChartVariant("bubble", "Bubble", _bubble),
    ),
    "Histogram": (
        ChartVariant("standard", "Standard Histogram", _histogram),
    ),
}

FAMILY_REQUIREMENTS: dict[str, str] = {
    "Bar": "Select one categorical and one or more numeric columns.",
    "Line": "Select a date or ordinal column and one or more numeric columns.",
    "Pie": "Select one categorical and one numeric column.",
    "Scatter": "Select two numeric columns.",
    "Histogram": "Select one numeric column.",
    ALL_FAMILIES: "Select columns to see available chart types.",
}


def chart_families() -> list[str]:
    return list(CHART_VARIANTS)


def get_variant(family: str, key: str) -> ChartVariant:
    """Look up a variant, raising UnknownChartFamilyError if absent."""
    if family not in CHART_VARIANTS:
        raise UnknownChartFamilyError(family)
    for variant in CHART_VARIANTS[family]:
        if variant.key == key:
            return variant
    raise UnknownChartFamilyError(family, key)


def _variants_for(family: str | None) -> list[tuple[str, ChartVariant]]:
    if family is None or family == ALL_FAMILIES:
        return [(f, v) for f, variants in CHART_VARIANTS.items() for v in variants]
    if family not in CHART_VARIANTS:
        raise UnknownChartFamilyError(family)
    return [(family, v) for v in CHART_VARIANTS[family]]


def is_compatible(
    family: str,
    key: str,
    columns: Sequence[str],
    types: TypeMap,
    rows: Sequence[Row] | None = None,
) -> bool:
    return get_variant(family, key)(columns, types, rows)


def compatible_variants(
    columns: Sequence[str],
    types: TypeMap,
    rows: Sequence[Row] | None = None,
    family: str | None = None,
) -> list[tuple[str, ChartVariant]]:
    """Every (family, variant) that can draw exactly this selection, in table order."""
    if not columns:
        return []
    return [(f, v) for f, v in _variants_for(family) if v(columns, types, rows)]


def is_column_addable(
    column: str,
    selected: Sequence[str],
    types: TypeMap,
    rows: Sequence[Row] | None = None,
) -> bool:
    """Whether adding ``column`` to the selection makes any variant compatible.

    Already-selected columns always count as addable so they stay enabled.
    """
    if column in selected:
        return True
    candidate = [*selected, column]
    return any(v(candidate, types, rows) for _, v in _variants_for(None))


def combinations(columns: Sequence[str], k: int) -> Iterator[list[str]]:
    """All k-column combinations, preserving the columns' natural order."""
    for combo in itertools.combinations(columns, k):
        yield list(combo)


def auto_select_columns(
    family: str,
    columns: Sequence[str],
    types: TypeMap,
    rows: Sequence[Row] | None = None,
) -> list[str] | None:
    """Find the first column combination some variant of ``family`` accepts.

    Searches combination sizes 1 to 4, then column order, then variant
    order. ``family`` may be "All". Returns None when nothing fits.
    """
    variants = _variants_for(family)
    for k in range(1, min(MAX_AUTO_SELECT_COLUMNS, len(columns)) + 1):
        for combo in combinations(columns, k):
            for _, variant in variants:
                if variant(combo, types, rows):
                    return combo
    return None


@dataclass(frozen=True)
class ChartBinding:
    """A variant bound to the concrete columns it will draw."""

    family: str
    variant: ChartVariant
    columns: list[str]


def gallery_bindings(
    columns: Sequence[str],
    types: TypeMap,
    rows: Sequence[Row] | None = None,
    limit: int = 9,
) -> list[ChartBinding]:
    """One default binding per family for a dataset overview."""
    bindings: list[ChartBinding] = []
    for family, variants in CHART_VARIANTS.items():
        binding = _first_binding(family, variants, columns, types, rows)
        if binding is not None:
            bindings.append(binding)
    return bindings[:limit]


def _first_binding(
    family: str,
    variants: Sequence[ChartVariant],
    columns: Sequence[str],
    types: TypeMap,
    rows: Sequence[Row] | None,
) -> ChartBinding | None:
    for variant in variants:
        for k in range(1, MAX_GALLERY_COLUMNS + 1):
            for combo in combinations(columns, k):
                if variant(combo, types, rows):
                    return ChartBinding(family, variant, combo)
    return None


def chart_title(family: str, columns: Sequence[str], types: TypeMap) -> str:
    """Descriptive title for a family bound to ``columns``."""
    kinds = [_type(types, c) for c in columns]

    if family == "Pie":
        if len(columns) == 1 and kinds[0] == CATEGORICAL:
            return f"Distribution of {columns[0]}"
        if len(columns) == 2:
            cat, num = (columns[0], columns[1]) if kinds[0] == CATEGORICAL else (columns[1], columns[0])
            return f"Share of {num} by {cat}"
    if family == "Bar":
        if len(columns) == 1:
            return f"Count of {columns[0]}"
        if len(columns) == 2:
            cat, num = (columns[0], columns[1]) if kinds[0] in (CATEGORICAL, DATE) else (columns[1], columns[0])
            return f"Sum of {num} by {cat}"
        if len(columns) > 2:
            nums = [c for c, k in zip(columns, kinds) if k == NUMERIC]
            return f"Comparison of {', '.join(nums)} by {columns[0]}"
    if family == "Line":
        if len(columns) == 2:
            return f"Trend of {columns[1]} over {columns[0]}"
        if len(columns) == 3:
            if kinds[1] == CATEGORICAL:
                return f"Trends of {columns[2]} by {columns[1]} over {columns[0]}"
            return f"Trends of {', '.join(columns[1:])} over {columns[0]}"
    if family == "Scatter":
        if len(columns) == 2:
            return f"Relationship between {columns[0]} and {columns[1]}"
        if len(columns) == 3:
            return f"Relationship between {columns[0]} and {columns[1]} (bubble size: {columns[2]})"
    if family == "Histogram" and columns:
        return f"Distribution of {columns[0]}"
    return f"{family} chart: {', '.join(columns)}"
