"""Chart suggestion, variant compatibility, aggregation and bundle building."""

from magic_charts.charts.render import ChartBundle, build_chart, build_gallery
from magic_charts.charts.suggestion_engine import ChartSuggestionEngine, suggest_charts
from magic_charts.charts.variants import CHART_VARIANTS, auto_select_columns, compatible_variants

__all__ = [
    "CHART_VARIANTS",
    "ChartBundle",
    "ChartSuggestionEngine",
    "auto_select_columns",
    "build_chart",
    "build_gallery",
    "compatible_variants",
    "suggest_charts",
]
