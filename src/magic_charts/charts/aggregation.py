"""Aggregation and binning helpers that turn rows into chart-ready series.

All functions are pure: they read ``rows`` (mappings of column name to
cell value) and return new lists. Non-numeric cells in a value column are
skipped rather than treated as errors.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Mapping, Sequence

from magic_charts.analysis.classifier import is_null, parse_date, to_number

Row = Mapping[str, Any]

MIN_BINS = 5
MAX_BINS = 30


@dataclass
class CategoryAggregate:
    """Per-category counts or sums, in first-seen category order."""

    labels: list[str] = field(default_factory=list)
    values: list[float] = field(default_factory=list)


@dataclass
class Series:
    label: str
    values: list[float | None] = field(default_factory=list)


@dataclass
class PivotTable:
    """Series aligned to a shared axis."""

    axis: list[Any] = field(default_factory=list)
    series: list[Series] = field(default_factory=list)

    @property
    def max_value(self) -> float:
        present = [v for s in self.series for v in s.values if v is not None]
        return max(present, default=0.0)


@dataclass
class HistogramBins:
    counts: list[int] = field(default_factory=list)
    edges: list[float] = field(default_factory=list)  # bin_count + 1 boundaries
    labels: list[str] = field(default_factory=list)
    minimum: float = 0.0
    maximum: float = 0.0

    @property
    def bin_count(self) -> int:
        return len(self.counts)


@dataclass(frozen=True)
class Unit:
    divisor: float
    suffix: str


def _label(value: Any) -> str:
    return "" if value is None else str(value)


def _sort_axis(values: Sequence[Any]) -> list[Any]:
    """Sort axis values numerically, chronologically, or as text."""
    numbers = [to_number(v) for v in values]
    if all(n is not None for n in numbers):
        return [v for _, v in sorted(zip(numbers, values), key=lambda p: p[0])]
    dates = [parse_date(v) for v in values]
    if all(d is not None for d in dates):
        try:
            return [v for _, v in sorted(zip(dates, values), key=lambda p: p[0])]
        except TypeError:
            # naive and aware datetimes mixed
            pass
    return sorted(values, key=str)


def _distinct(values: Sequence[Any]) -> list[Any]:
    return list(dict.fromkeys(values))


def group_by_category(rows: Sequence[Row], category: str, value: str | None = None) -> CategoryAggregate:
    """Count rows per category, or sum ``value`` per category.

    With a value column, a category only appears once it has at least one
    numeric value.
    """
    totals: dict[str, float] = {}
    for row in rows:
        key = _label(row.get(category))
        if value is None:
            totals[key] = totals.get(key, 0) + 1
            continue
        number = to_number(row.get(value))
        if number is not None:
            totals[key] = totals.get(key, 0.0) + number
    return CategoryAggregate(labels=list(totals), values=list(totals.values()))


def sturges_bin_count(n: int) -> int:
    """Sturges' rule, clamped to [5, 30]."""
    if n <= 0:
        return 0
    return max(MIN_BINS, min(MAX_BINS, math.ceil(math.log2(n) + 1)))


def histogram_bins(values: Sequence[Any]) -> HistogramBins:
    """Bin the numeric values of a column.

    The maximum value is clamped into the last bin. A column where every
    value is equal collapses to a single bin; a column with no numeric
    values yields no bins.
    """
    numbers = [n for n in (to_number(v) for v in values) if n is not None]
    if not numbers:
        return HistogramBins()

    lo, hi = min(numbers), max(numbers)
    unit = unit_for(hi)
    if hi == lo:
        return HistogramBins(
            counts=[len(numbers)],
            edges=[lo, hi],
            labels=[_bin_label(lo, hi, unit)],
            minimum=lo,
            maximum=hi,
        )

    bin_count = sturges_bin_count(len(numbers))
    # Spans wider than the float range are binned at half scale
    scale = 1.0 if math.isfinite(hi - lo) else 0.5
    width = (hi * scale - lo * scale) / bin_count
    counts = [0] * bin_count
    for n in numbers:
        idx = math.floor((n * scale - lo * scale) / width)
        counts[min(max(idx, 0), bin_count - 1)] += 1

    edges = [_bin_edge(lo, width, i, scale) for i in range(bin_count)] + [hi]
    labels = [_bin_label(edges[i], edges[i + 1], unit) for i in range(bin_count)]
    return HistogramBins(counts=counts, edges=edges, labels=labels, minimum=lo, maximum=hi)


def _bin_edge(lo: float, width: float, i: int, scale: float) -> float:
    offset = i * width
    if scale == 1.0:
        return lo + offset
    return lo + offset + offset


def _bin_label(start: float, end: float, unit: Unit) -> str:
    return f"{_trim(start / unit.divisor)}–{_trim(end / unit.divisor)}{unit.suffix}"


def pivot_series(rows: Sequence[Row], axis: str, category: str, value: str) -> PivotTable:
    """One series per category over the sorted axis domain.

    Repeated (axis, category) pairs are averaged; a pair absent from the
    rows is None so renderers can draw a gap instead of a false zero.
    """
    sums: dict[tuple[Any, Any], list[float]] = {}
    axis_values: list[Any] = []
    categories: list[Any] = []
    for row in rows:
        x, cat = row.get(axis), row.get(category)
        if is_null(x) or is_null(cat):
            continue
        axis_values.append(x)
        categories.append(cat)
        number = to_number(row.get(value))
        if number is None:
            continue
        acc = sums.setdefault((x, cat), [0.0, 0])
        acc[0] += number
        acc[1] += 1

    domain = _sort_axis(_distinct(axis_values))
    series = []
    for cat in _distinct(categories):
        points: list[float | None] = []
        for x in domain:
            acc = sums.get((x, cat))
            points.append(acc[0] / acc[1] if acc else None)
        series.append(Series(label=_label(cat), values=points))
    return PivotTable(axis=domain, series=series)


def mean_by_axis(rows: Sequence[Row], axis: str, value_columns: Sequence[str]) -> PivotTable:
    """Average each value column per axis position, sorted; gaps are None."""
    sums: dict[tuple[Any, str], list[float]] = {}
    axis_values: list[Any] = []
    for row in rows:
        x = row.get(axis)
        if is_null(x):
            continue
        axis_values.append(x)
        for col in value_columns:
            number = to_number(row.get(col))
            if number is None:
                continue
            acc = sums.setdefault((x, col), [0.0, 0])
            acc[0] += number
            acc[1] += 1

    domain = _sort_axis(_distinct(axis_values))
    series = []
    for col in value_columns:
        points: list[float | None] = []
        for x in domain:
            acc = sums.get((x, col))
            points.append(acc[0] / acc[1] if acc else None)
        series.append(Series(label=col, values=points))
    return PivotTable(axis=domain, series=series)


def sum_by_group(rows: Sequence[Row], group: str, value_columns: Sequence[str]) -> PivotTable:
    """Sum each value column per group (first-seen order), one series per column."""
    groups = _distinct(_label(row.get(group)) for row in rows)
    index = {g: i for i, g in enumerate(groups)}
    series = [Series(label=col, values=[0.0] * len(groups)) for col in value_columns]
    for row in rows:
        i = index[_label(row.get(group))]
        for s in series:
            number = to_number(row.get(s.label))
            if number is not None:
                s.values[i] += number
    return PivotTable(axis=groups, series=series)


def sum_by_axis_and_category(
    rows: Sequence[Row],
    axis: str,
    category: str,
    value: str | None = None,
    sort_axis: bool = True,
) -> PivotTable:
    """Sum ``value`` (or count rows) per (axis, category); missing pairs are zero.

    This is the stacked-bar counterpart of pivot_series, where a missing
    segment contributes nothing to the stack.
    """
    sums: dict[tuple[str, str], float] = {}
    axis_values: list[str] = []
    categories: list[str] = []
    for row in rows:
        x, cat = _label(row.get(axis)), _label(row.get(category))
        axis_values.append(x)
        categories.append(cat)
        number = 1.0 if value is None else to_number(row.get(value))
        if number is not None:
            sums[(x, cat)] = sums.get((x, cat), 0.0) + number

    domain = _distinct(axis_values)
    if sort_axis:
        domain = _sort_axis(domain)
    series = [
        Series(label=cat, values=[sums.get((x, cat), 0.0) for x in domain])
        for cat in _distinct(categories)
    ]
    return PivotTable(axis=domain, series=series)


def normalize_proportional(series: Sequence[Sequence[float | None]]) -> list[list[float]]:
    """Rescale aligned series so each axis position sums to 100.

    None counts as 0. A position whose total is 0 stays 0 in every series.
    """
    if not series:
        return []
    length = max(len(s) for s in series)
    padded = [[(v or 0.0) for v in s] + [0.0] * (length - len(s)) for s in series]
    result = [[0.0] * length for _ in padded]
    for i in range(length):
        total = sum(s[i] for s in padded)
        if total == 0:
            continue
        for j, s in enumerate(padded):
            result[j][i] = 100 * s[i] / total
    return result


def unit_for(max_value: float) -> Unit:
    """Pick the axis unit for values up to ``max_value``."""
    if max_value >= 1e9:
        return Unit(1e9, "b")
    if max_value >= 1e6:
        return Unit(1e6, "m")
    if max_value >= 1e3:
        return Unit(1e3, "k")
    return Unit(1, "")


def _trim(value: float) -> str:
    text = f"{value:.1f}"
    return text[:-2] if text.endswith(".0") else text


def plain_number(value: float) -> str:
    """Integers without a decimal point, everything else as-is."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def format_number(value: float) -> str:
    """Compact number: 1500 -> "1.5k", 2000000 -> "2m", 12.5 -> "12.5"."""
    unit = unit_for(value)
    if unit.divisor == 1:
        return plain_number(value)
    return _trim(value / unit.divisor) + unit.suffix


def format_scaled(value: float, unit: Unit) -> str:
    """Format an axis tick in a fixed unit."""
    return _trim(value / unit.divisor) + unit.suffix


def truncate_label(label: Any, max_len: int = 7) -> str:
    text = str(label)
    return text[:max_len] + "…" if len(text) > max_len else text
