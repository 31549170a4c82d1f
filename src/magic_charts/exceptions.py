"""Custom exception hierarchy for magic-charts."""

from __future__ import annotations


class MagicChartsError(Exception):
    """Base exception for all magic-charts errors."""


class ConfigurationError(MagicChartsError):
    """Invalid or missing configuration."""


class IngestionError(MagicChartsError):
    """Delimited-text input could not be turned into a dataset."""


class EmptyDatasetError(IngestionError):
    """The input parsed but contained no data rows."""

    def __init__(self, source: str | None = None):
        self.source = source
        msg = "No data found in CSV file"
        if source:
            msg += f": {source}"
        super().__init__(msg)


class SampleDatasetNotFoundError(MagicChartsError):
    """Requested sample dataset is not in the catalog."""

    def __init__(self, sample_id: str, available: list[str] | None = None):
        self.sample_id = sample_id
        self.available = available
        msg = f"Sample dataset not found: {sample_id}"
        if available:
            from difflib import get_close_matches

            suggestions = get_close_matches(sample_id, available, n=3, cutoff=0.4)
            if suggestions:
                msg += f". Did you mean: {', '.join(suggestions)}?"
        super().__init__(msg)


class ColumnNotFoundError(MagicChartsError):
    """A selected column does not exist in the active dataset."""

    def __init__(self, column: str, available: list[str] | None = None):
        self.column = column
        self.available = available
        msg = f"Column not found: {column}"
        if available:
            msg += f" (available: {', '.join(available)})"
        super().__init__(msg)


class UnknownChartFamilyError(MagicChartsError):
    """Chart family (or family/variant pair) is not in the variant table."""

    def __init__(self, family: str, variant: str | None = None):
        self.family = family
        self.variant = variant
        if variant is None:
            super().__init__(f"Unknown chart family: {family}")
        else:
            super().__init__(f"Unknown chart variant: {family}/{variant}")


class ChartRenderError(MagicChartsError):
    """A chart bundle could not be built for the given selection."""

    def __init__(self, family: str, variant: str, reason: str):
        self.family = family
        self.variant = variant
        self.reason = reason
        super().__init__(f"Cannot render {family}/{variant}: {reason}")


class NoDatasetError(MagicChartsError):
    """An operation needs an active dataset but none is loaded."""

    def __init__(self) -> None:
        super().__init__("No dataset loaded")
