"""magic-charts: column classification and chart recommendation for tabular data."""

__version__ = "0.1.0"
