"""Shared test fixtures for magic-charts tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from magic_charts.config import reset_settings
from magic_charts.data.ingest import Dataset, build_dataset, load_csv_text

SALES_COLUMNS = ["date", "region", "channel", "sales", "profit", "units"]

FOLLOWER_DATES = [f"2024-01-0{d}" for d in range(1, 9)]
FOLLOWER_PLATFORMS = ["Instagram", "TikTok", "LinkedIn"]
# (date, platform) pairs with no row, so the pivot has gaps
FOLLOWER_GAPS = {("2024-01-03", "TikTok"), ("2024-01-06", "LinkedIn")}


@pytest.fixture(autouse=True)
def _reset_settings(monkeypatch):
    """Reset settings singleton between tests."""
    for var in ("MAGIC_CHARTS_PALETTE", "MAGIC_CHARTS_SAMPLE_DIRS", "MAGIC_CHARTS_LOG_LEVEL"):
        monkeypatch.delenv(var, raising=False)
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def sales_records() -> list[dict[str, str]]:
    return [
        {"date": "2024-01-01", "region": "East", "channel": "Web", "sales": "100", "profit": "10", "units": "1"},
        {"date": "2024-01-01", "region": "West", "channel": "Store", "sales": "200", "profit": "30", "units": "2"},
        {"date": "2024-01-02", "region": "East", "channel": "Store", "sales": "150", "profit": "20", "units": "3"},
        {"date": "2024-01-02", "region": "North", "channel": "Web", "sales": "50", "profit": "5", "units": "4"},
        {"date": "2024-01-03", "region": "West", "channel": "Web", "sales": "300", "profit": "60", "units": "5"},
        {"date": "2024-01-03", "region": "East", "channel": "Web", "sales": "120", "profit": "12", "units": "6"},
        {"date": "2024-01-04", "region": "North", "channel": "Store", "sales": "80", "profit": "8", "units": "7"},
        {"date": "2024-01-04", "region": "West", "channel": "Web", "sales": "250", "profit": "40", "units": "8"},
    ]


@pytest.fixture
def sales_dataset(sales_records) -> Dataset:
    """Eight sales rows: date, two categoricals and three numeric columns."""
    return build_dataset(sales_records, SALES_COLUMNS, name="Sales")


@pytest.fixture
def follower_rows() -> list[dict[str, str]]:
    """Daily follower counts per platform, with two missing (date, platform) pairs."""
    rows = []
    for d, day in enumerate(FOLLOWER_DATES):
        for p, platform in enumerate(FOLLOWER_PLATFORMS):
            if (day, platform) in FOLLOWER_GAPS:
                continue
            rows.append({"Date": day, "Platform": platform, "Followers": f"{1000.5 + 10 * d + 250 * p}"})
    return rows


@pytest.fixture
def follower_csv(follower_rows) -> str:
    lines = ["Date,Platform,Followers"]
    lines += [f"{r['Date']},{r['Platform']},{r['Followers']}" for r in follower_rows]
    return "\n".join(lines) + "\n"


@pytest.fixture
def follower_dataset(follower_csv) -> Dataset:
    return load_csv_text(follower_csv, name="Followers")


@pytest.fixture
def sales_csv_file(tmp_path: Path, sales_records) -> Path:
    """The sales rows written to a CSV file."""
    path = tmp_path / "sales.csv"
    lines = [",".join(SALES_COLUMNS)]
    lines += [",".join(r[c] for c in SALES_COLUMNS) for r in sales_records]
    path.write_text("\n".join(lines) + "\n")
    return path


@pytest.fixture
def user_sample_dir(tmp_path: Path) -> Path:
    """A user sample directory with one file-backed and one inline sample."""
    directory = tmp_path / "samples"
    directory.mkdir()
    (directory / "teams.csv").write_text("Team,Score\nRed,10\nBlue,12\nRed,8\n")
    (directory / "catalog.yml").write_text(
        """datasets:
  - id: team-scores
    name: Team Scores
    category: Sports
    csv_file: teams.csv
  - id: inline-colors
    name: Inline Colors
    csv_data: |
      Color,Count
      red,3
      blue,5
"""
    )
    return directory
