"""Chart bundle builder.

Turns a (family, variant, columns) binding over a dataset into a
renderer-neutral bundle: ``{labels, datasets}`` plus the display options
the drawing layer needs. Nothing here draws; bundles serialise with
``model_dump()``.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Callable, Sequence

from pydantic import BaseModel, Field

from magic_charts.analysis.classifier import to_number
from magic_charts.charts.aggregation import (
    PivotTable,
    Unit,
    group_by_category,
    histogram_bins,
    mean_by_axis,
    normalize_proportional,
    pivot_series,
    sum_by_axis_and_category,
    sum_by_group,
    unit_for,
)
from magic_charts.charts.variants import (
    CATEGORICAL,
    DATE,
    NUMERIC,
    ChartBinding,
    chart_title,
    gallery_bindings,
    get_variant,
)
from magic_charts.config import DEFAULT_PALETTE
from magic_charts.data.ingest import Dataset
from magic_charts.exceptions import ChartRenderError

logger = logging.getLogger(__name__)

MAX_PIE_SLICES = 20
DONUT_CUTOUT = "60%"
PERCENT_SUFFIX = "%"

# Bubble radius range in pixels
BUBBLE_MIN_RADIUS = 5.0
BUBBLE_RADIUS_SPAN = 20.0
BUBBLE_EQUAL_RADIUS = 15.0


class ChartKind(str, Enum):
    """Drawing primitive the renderer should use."""

    BAR = "bar"
    LINE = "line"
    PIE = "pie"
    SCATTER = "scatter"
    BUBBLE = "bubble"
    HISTOGRAM = "histogram"


class ChartPoint(BaseModel):
    x: float
    y: float
    r: float | None = None


class ChartDataset(BaseModel):
    """One drawn series.

    ``color`` is set for single-colour series, ``colors`` when every bar
    or slice gets its own palette entry.
    """

    label: str
    data: list[float | None | ChartPoint] = Field(default_factory=list)
    color: str | None = None
    colors: list[str] | None = None


class ChartData(BaseModel):
    labels: list[str] = Field(default_factory=list)
    datasets: list[ChartDataset] = Field(default_factory=list)


class RenderOptions(BaseModel):
    chart_kind: ChartKind
    stacked: bool = False
    show_legend: bool = False
    horizontal: bool = False
    fill: bool = False
    cutout: str | None = None
    tick_divisor: float = 1
    tick_suffix: str = ""

    def with_unit(self, unit: Unit) -> RenderOptions:
        return self.model_copy(update={"tick_divisor": unit.divisor, "tick_suffix": unit.suffix})


class ChartBundle(BaseModel):
    """Everything a renderer needs for one chart card."""

    family: str
    variant: str
    columns: list[str]
    title: str
    data: ChartData
    options: RenderOptions


class _Palette:
    def __init__(self, colors: Sequence[str]):
        self._colors = list(colors)

    def __getitem__(self, index: int) -> str:
        return self._colors[index % len(self._colors)]

    def cycle(self, n: int) -> list[str]:
        return [self[i] for i in range(n)]


def _labels(values: Sequence[Any]) -> list[str]:
    return ["" if v is None else str(v) for v in values]


def _category_and_value(columns: Sequence[str], types: dict[str, str], category_types: tuple[str, ...]) -> tuple[str, str]:
    first, second = columns
    if types.get(first) in category_types:
        return first, second
    return second, first


def _type_map(dataset: Dataset) -> dict[str, str]:
    return {name: t.value for name, t in dataset.column_types.items()}


# -- Family builders --
# Each takes (key, columns, rows, types, palette) and returns (ChartData, RenderOptions).

BuildResult = tuple[ChartData, RenderOptions]


def _build_pie(key, columns, rows, types, palette) -> BuildResult:
    if len(columns) == 1:
        agg = group_by_category(rows, columns[0])
        label = columns[0]
    else:
        category, value = _category_and_value(columns, types, (CATEGORICAL,))
        agg = group_by_category(rows, category, value)
        label = value
    if len(agg.labels) > MAX_PIE_SLICES:
        raise ChartRenderError("Pie", key, f"{len(agg.labels)} categories is too many slices (max {MAX_PIE_SLICES})")
    if not agg.labels:
        raise ChartRenderError("Pie", key, "no values to draw")

    data = ChartData(
        labels=agg.labels,
        datasets=[ChartDataset(label=label, data=agg.values, colors=palette.cycle(len(agg.labels)))],
    )
    options = RenderOptions(
        chart_kind=ChartKind.PIE,
        show_legend=True,
        cutout=DONUT_CUTOUT if key == "donut" else None,
    )
    return data, options


def _build_bar(key, columns, rows, types, palette) -> BuildResult:
    horizontal = key.endswith("_horizontal")
    base = key.removesuffix("_horizontal")

    if base == "count":
        agg = group_by_category(rows, columns[0])
        dataset = ChartDataset(label=columns[0], data=agg.values, colors=palette.cycle(len(agg.labels)))
    elif base in ("single", "multi"):
        category_types = (CATEGORICAL, DATE) if base == "single" else (CATEGORICAL,)
        category, value = _category_and_value(columns, types, category_types)
        agg = group_by_category(rows, category, value)
        if base == "single":
            dataset = ChartDataset(label=value, data=agg.values, color=palette[0])
        else:
            dataset = ChartDataset(label=value, data=agg.values, colors=palette.cycle(len(agg.labels)))
    else:
        return _build_grouped_bar(key, columns, rows, types, palette)

    if not agg.labels:
        raise ChartRenderError("Bar", key, "no values to draw")
    options = RenderOptions(chart_kind=ChartKind.BAR, horizontal=horizontal)
    return ChartData(labels=agg.labels, datasets=[dataset]), options.with_unit(unit_for(max(agg.values)))


def _build_grouped_bar(key, columns, rows, types, palette) -> BuildResult:
    if all(types.get(c) == NUMERIC for c in columns[1:]):
        table = sum_by_group(rows, columns[0], columns[1:])
    else:
        table = sum_by_axis_and_category(
            rows, columns[0], columns[1], columns[2], sort_axis=types.get(columns[0]) == DATE
        )
    if not table.axis:
        raise ChartRenderError("Bar", key, "no values to draw")

    stacked = key in ("stacked", "proportional")
    options = RenderOptions(chart_kind=ChartKind.BAR, stacked=stacked, show_legend=True)
    if key == "proportional":
        shares = normalize_proportional([s.values for s in table.series])
        for s, normalized in zip(table.series, shares):
            s.values = normalized
        options = options.with_unit(Unit(1, PERCENT_SUFFIX))
    else:
        options = options.with_unit(unit_for(table.max_value))
    return _pivot_data(table, palette), options


def _build_line(key, columns, rows, types, palette) -> BuildResult:
    x = columns[0]
    rest = list(columns[1:])
    rest_types = [types.get(c) for c in rest]

    if len(rest) == 2 and rest_types == [CATEGORICAL, NUMERIC]:
        table = pivot_series(rows, x, rest[0], rest[1])
    elif len(rest) == 1 and rest_types[0] == CATEGORICAL:
        # occurrences of each category per x position
        table = sum_by_axis_and_category(rows, x, rest[0])
    else:
        numeric = [c for c, t in zip(rest, rest_types) if t == NUMERIC]
        if not numeric:
            raise ChartRenderError("Line", key, "no numeric series to plot")
        table = mean_by_axis(rows, x, numeric)

    if not table.axis:
        raise ChartRenderError("Line", key, "no values to draw")
    options = RenderOptions(
        chart_kind=ChartKind.LINE,
        show_legend=len(table.series) > 1,
        fill=key == "area",
    )
    return _pivot_data(table, palette), options.with_unit(unit_for(table.max_value))


def _build_scatter(key, columns, rows, types, palette) -> BuildResult:
    if key == "bubble":
        return _build_bubble(columns, rows, palette)

    kinds = [types.get(c) for c in columns]
    if CATEGORICAL in kinds:
        # dot plot: categories along x, one point per row
        category, value = _category_and_value(columns, types, (CATEGORICAL,))
        order = list(dict.fromkeys(str(row.get(category, "")) for row in rows))
        index = {c: i for i, c in enumerate(order)}
        points = [
            ChartPoint(x=index[str(row.get(category, ""))], y=y)
            for row in rows
            if (y := to_number(row.get(value))) is not None
        ]
        labels, label = order, f"{value} by {category}"
    else:
        points = [
            ChartPoint(x=x, y=y)
            for row in rows
            if (x := to_number(row.get(columns[0]))) is not None
            and (y := to_number(row.get(columns[1]))) is not None
        ]
        labels, label = [], f"{columns[0]} vs {columns[1]}"

    if not points:
        raise ChartRenderError("Scatter", key, "no numeric points to plot")
    data = ChartData(labels=labels, datasets=[ChartDataset(label=label, data=points, color=palette[1])])
    return data, RenderOptions(chart_kind=ChartKind.SCATTER)


def _bubble_scale(sizes: Sequence[float]) -> Callable[[float | None], float]:
    lo, hi = (min(sizes), max(sizes)) if sizes else (0.0, 0.0)

    def radius(v: float | None) -> float:
        if v is None:
            return BUBBLE_MIN_RADIUS
        if hi == lo:
            return BUBBLE_EQUAL_RADIUS
        return BUBBLE_MIN_RADIUS + BUBBLE_RADIUS_SPAN * (v - lo) / (hi - lo)

    return radius


def _build_bubble(columns, rows, palette) -> BuildResult:
    x_col, y_col, size_col = columns
    sizes = [n for n in (to_number(row.get(size_col)) for row in rows) if n is not None]
    radius = _bubble_scale(sizes)
    points = [
        ChartPoint(x=x, y=y, r=radius(to_number(row.get(size_col))))
        for row in rows
        if (x := to_number(row.get(x_col))) is not None and (y := to_number(row.get(y_col))) is not None
    ]
    if not points:
        raise ChartRenderError("Scatter", "bubble", "no numeric points to plot")
    label = f"{x_col} vs {y_col} (bubble: {size_col})"
    data = ChartData(datasets=[ChartDataset(label=label, data=points, color=palette[1])])
    return data, RenderOptions(chart_kind=ChartKind.BUBBLE, show_legend=True)


def _build_histogram(key, columns, rows, types, palette) -> BuildResult:
    column = columns[0]
    bins = histogram_bins([row.get(column) for row in rows])
    if bins.bin_count == 0:
        raise ChartRenderError("Histogram", key, f"column {column} has no numeric values")
    data = ChartData(
        labels=bins.labels,
        datasets=[ChartDataset(label=column, data=[float(c) for c in bins.counts], color=palette[2])],
    )
    return data, RenderOptions(chart_kind=ChartKind.HISTOGRAM)


def _pivot_data(table: PivotTable, palette: _Palette) -> ChartData:
    return ChartData(
        labels=_labels(table.axis),
        datasets=[
            ChartDataset(label=s.label, data=list(s.values), color=palette[i])
            for i, s in enumerate(table.series)
        ],
    )


_BUILDERS: dict[str, Callable[..., BuildResult]] = {
    "Bar": _build_bar,
    "Line": _build_line,
    "Pie": _build_pie,
    "Scatter": _build_scatter,
    "Histogram": _build_histogram,
}


def build_chart(
    family: str,
    variant: str,
    columns: Sequence[str],
    dataset: Dataset,
    palette: Sequence[str] | None = None,
) -> ChartBundle:
    """Build the bundle for one variant over ``dataset``.

    Raises:
        UnknownChartFamilyError: family/variant is not in the variant table.
        ColumnNotFoundError: a column is not in the dataset.
        ChartRenderError: the variant cannot draw this selection, or the
            data leaves nothing to draw.
    """
    chart_variant = get_variant(family, variant)
    columns = list(columns)
    dataset.require_columns(columns)

    colors = list(palette) if palette is not None else list(DEFAULT_PALETTE)
    if not colors:
        raise ChartRenderError(family, variant, "palette is empty")

    types = _type_map(dataset)
    if not chart_variant(columns, types, dataset.rows):
        raise ChartRenderError(family, variant, f"incompatible column selection: {', '.join(columns)}")

    data, options = _BUILDERS[family](variant, columns, dataset.rows, types, _Palette(colors))
    logger.debug("Built %s/%s over %s (%d datasets)", family, variant, columns, len(data.datasets))
    return ChartBundle(
        family=family,
        variant=variant,
        columns=columns,
        title=chart_title(family, columns, types),
        data=data,
        options=options,
    )


def build_binding(binding: ChartBinding, dataset: Dataset, palette: Sequence[str] | None = None) -> ChartBundle:
    return build_chart(binding.family, binding.variant.key, binding.columns, dataset, palette)


def build_gallery(
    dataset: Dataset,
    palette: Sequence[str] | None = None,
    limit: int = 9,
) -> list[ChartBundle]:
    """Default overview: one chart per family the dataset can support."""
    bundles: list[ChartBundle] = []
    types = _type_map(dataset)
    for binding in gallery_bindings(dataset.column_names, types, dataset.rows, limit=limit):
        try:
            bundles.append(build_binding(binding, dataset, palette))
        except ChartRenderError as e:
            logger.debug("Skipping gallery chart: %s", e)
    return bundles
