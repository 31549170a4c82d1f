"""Descriptive-statistics insights over an ingested dataset.

Works from the ingestion-time column types: numeric columns get mean and
range statistics plus IQR outlier checks, numeric pairs are tested for
Pearson correlation, categorical x numeric pairs yield the best and worst
group by mean, and a date column turns numeric columns into trends.
"""

from __future__ import annotations

import logging
import math
from enum import Enum
from typing import Any, Sequence

from pydantic import BaseModel, Field

from magic_charts.analysis.classifier import parse_date, to_number
from magic_charts.charts.aggregation import plain_number
from magic_charts.data.ingest import ColumnType, Dataset

logger = logging.getLogger(__name__)

CORRELATION_THRESHOLD = 0.5
OUTLIER_IQR_FACTOR = 1.5
MIN_OUTLIER_SAMPLE = 4
CALCULATION_PREVIEW = 5


class InsightType(str, Enum):
    STATISTIC = "statistic"
    TREND = "trend"
    COMPARISON = "comparison"
    CORRELATION = "correlation"
    OUTLIER = "outlier"


class Importance(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class Insight(BaseModel):
    """A single finding about the dataset."""

    id: str
    type: InsightType
    title: str
    description: str
    value: str | None = None
    calculation: str | None = None
    importance: Importance = Importance.MEDIUM
    relevant_columns: list[str] = Field(default_factory=list)


def mean(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def pearson(x: Sequence[float], y: Sequence[float]) -> float:
    """Pearson correlation coefficient; 0 when undefined."""
    n = len(x)
    if n != len(y) or n == 0:
        return 0.0
    mx, my = mean(x), mean(y)
    num = sum((a - mx) * (b - my) for a, b in zip(x, y))
    den = math.sqrt(sum((a - mx) ** 2 for a in x) * sum((b - my) ** 2 for b in y))
    return 0.0 if den == 0 else num / den


def find_outliers(values: Sequence[float]) -> list[float]:
    """Values outside [Q1 - 1.5*IQR, Q3 + 1.5*IQR], in input order.

    Quartiles are taken by index into the sorted sample; fewer than four
    values never produce outliers.
    """
    if len(values) < MIN_OUTLIER_SAMPLE:
        return []
    ordered = sorted(values)
    q1 = ordered[len(ordered) // 4]
    q3 = ordered[(len(ordered) * 3) // 4]
    spread = q3 - q1
    lower, upper = q1 - OUTLIER_IQR_FACTOR * spread, q3 + OUTLIER_IQR_FACTOR * spread
    return [v for v in values if v < lower or v > upper]


def _numbers(values: Sequence[Any]) -> list[float]:
    return [n for n in (to_number(v) for v in values) if n is not None]


def _preview(values: Sequence[float]) -> str:
    return ", ".join(plain_number(v) for v in values[:CALCULATION_PREVIEW])


def _statistics(column: str, values: list[float]) -> list[Insight]:
    avg = mean(values)
    lo, hi = plain_number(min(values)), plain_number(max(values))
    return [
        Insight(
            id=f"stat-{column}",
            type=InsightType.STATISTIC,
            title=f"Average {column}",
            description=f"The average {column} is {avg:.2f}.",
            value=f"{avg:.2f}",
            calculation=f"mean([{_preview(values)}...])",
            importance=Importance.MEDIUM,
            relevant_columns=[column],
        ),
        Insight(
            id=f"minmax-{column}",
            type=InsightType.STATISTIC,
            title=f"Min/Max {column}",
            description=f"The minimum is {lo}, the maximum is {hi}.",
            value=f"{lo} / {hi}",
            calculation=f"min/max([{_preview(values)}...])",
            importance=Importance.LOW,
            relevant_columns=[column],
        ),
    ]


def _outliers(column: str, values: list[float]) -> Insight | None:
    outliers = find_outliers(values)
    if not outliers:
        return None
    listed = ", ".join(plain_number(v) for v in outliers)
    return Insight(
        id=f"outlier-{column}",
        type=InsightType.OUTLIER,
        title=f"Outliers in {column}",
        description=f"Unusually high/low values detected: {listed}",
        value=listed,
        calculation="IQR method",
        importance=Importance.HIGH,
        relevant_columns=[column],
    )


def _correlation(dataset: Dataset, a: str, b: str) -> Insight | None:
    pairs = [
        (x, y)
        for row in dataset.rows
        if (x := to_number(row.get(a))) is not None and (y := to_number(row.get(b))) is not None
    ]
    if len(pairs) < 2:
        return None
    corr = pearson([p[0] for p in pairs], [p[1] for p in pairs])
    if abs(corr) <= CORRELATION_THRESHOLD:
        return None
    direction = "positive" if corr > 0 else "negative"
    return Insight(
        id=f"corr-{a}-{b}",
        type=InsightType.CORRELATION,
        title=f"Correlation between {a} and {b}",
        description=f"There is a {direction} correlation ({corr:.2f}) between {a} and {b}.",
        value=f"{corr:.2f}",
        calculation="Pearson correlation",
        importance=Importance.MEDIUM,
        relevant_columns=[a, b],
    )


def _group_extremes(dataset: Dataset, category: str, numeric: str) -> list[Insight]:
    groups: dict[str, list[float]] = {}
    for row in dataset.rows:
        number = to_number(row.get(numeric))
        if number is not None:
            groups.setdefault(row.get(category, ""), []).append(number)
    if len(groups) < 2:
        return []

    means = {cat: mean(nums) for cat, nums in groups.items()}
    top = max(means, key=means.__getitem__)
    bottom = min(means, key=means.__getitem__)
    calculation = f"mean({numeric} by {category})"
    return [
        Insight(
            id=f"top-{category}-{numeric}",
            type=InsightType.COMPARISON,
            title=f"Top {category} by {numeric}",
            description=f"{top} has the highest average {numeric} ({means[top]:.2f}).",
            value=top,
            calculation=calculation,
            importance=Importance.HIGH,
            relevant_columns=[category, numeric],
        ),
        Insight(
            id=f"bottom-{category}-{numeric}",
            type=InsightType.COMPARISON,
            title=f"Lowest {category} by {numeric}",
            description=f"{bottom} has the lowest average {numeric} ({means[bottom]:.2f}).",
            value=bottom,
            calculation=calculation,
            importance=Importance.MEDIUM,
            relevant_columns=[category, numeric],
        ),
    ]


def _trend(dataset: Dataset, date_column: str, numeric: str) -> Insight | None:
    dated = [
        (d, n)
        for row in dataset.rows
        if (d := parse_date(row.get(date_column))) is not None and (n := to_number(row.get(numeric))) is not None
    ]
    if len(dated) < 2:
        return None
    try:
        dated.sort(key=lambda p: p[0])
    except TypeError:
        # naive and aware timestamps mixed: keep row order
        pass
    first, last = dated[0][1], dated[-1][1]
    growth = (last - first) / abs(first or 1) * 100
    return Insight(
        id=f"trend-{numeric}",
        type=InsightType.TREND,
        title=f"Trend in {numeric}",
        description=f"{numeric} changed by {growth:.1f}% from start to end of the dataset.",
        value=f"{growth:.1f}%",
        calculation=f"({plain_number(last)} - {plain_number(first)}) / {plain_number(first)} * 100",
        importance=Importance.HIGH,
        relevant_columns=[date_column, numeric],
    )


def generate_insights(dataset: Dataset) -> list[Insight]:
    """Run every insight check, grouped by kind in a stable order."""
    by_type: dict[ColumnType, list[str]] = {t: [] for t in ColumnType}
    for column in dataset.columns:
        by_type[column.type].append(column.name)
    numeric = by_type[ColumnType.NUMERIC]
    categorical = by_type[ColumnType.CATEGORICAL]
    dates = by_type[ColumnType.DATE]

    insights: list[Insight] = []
    values = {name: _numbers(dataset.values(name)) for name in numeric}
    for name in numeric:
        if values[name]:
            insights.extend(_statistics(name, values[name]))
    for name in numeric:
        outlier = _outliers(name, values[name])
        if outlier:
            insights.append(outlier)
    for i, a in enumerate(numeric):
        for b in numeric[i + 1:]:
            corr = _correlation(dataset, a, b)
            if corr:
                insights.append(corr)
    for category in categorical:
        for name in numeric:
            insights.extend(_group_extremes(dataset, category, name))
    if dates:
        for name in numeric:
            trend = _trend(dataset, dates[0], name)
            if trend:
                insights.append(trend)

    logger.debug("Generated %d insights for %s", len(insights), dataset.name)
    return insights
