"""Configuration management for magic-charts.

Loads settings from environment variables or a .env file. Nothing here is
required: every setting has a working default.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Annotated

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from magic_charts.exceptions import ConfigurationError

DEFAULT_PALETTE: tuple[str, ...] = (
    "#5C7CFA",
    "#FDA7DF",
    "#72026C",
    "#FF5E5B",
    "#2ECC71",
    "#FFD600",
    "#003049",
    "#00CFEA",
)

_HEX_COLOR = re.compile(r"^#[0-9A-Fa-f]{6}$")


class MagicChartsSettings(BaseSettings):
    """Application settings loaded from environment variables and .env files.

    Priority (highest to lowest):
      1. Explicit constructor arguments
      2. Environment variables (MAGIC_CHARTS_PALETTE, etc.)
      3. .env file in current directory
    """

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Theme override for the chart palette
    magic_charts_palette: Annotated[
        str, Field(default="", description="Comma-separated #RRGGBB colors replacing the default palette")
    ] = ""

    # Sample catalog
    magic_charts_sample_dirs: Annotated[
        str,
        Field(default="", description="Comma-separated additional sample dataset directories"),
    ] = ""

    magic_charts_gallery_limit: Annotated[
        int, Field(default=9, description="Maximum number of charts in the default gallery")
    ] = 9

    magic_charts_log_level: Annotated[
        str, Field(default="WARNING", description="Root log level for the CLI")
    ] = "WARNING"

    @field_validator("magic_charts_palette")
    @classmethod
    def validate_palette(cls, v: str) -> str:
        if not v:
            return v
        colors = [c.strip() for c in v.split(",") if c.strip()]
        bad = [c for c in colors if not _HEX_COLOR.match(c)]
        if bad:
            raise ValueError(f"palette colors must be #RRGGBB, got: {', '.join(bad)}")
        return ",".join(colors)

    @field_validator("magic_charts_gallery_limit")
    @classmethod
    def validate_gallery_limit(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"gallery limit must be >= 1, got {v}")
        return v

    @field_validator("magic_charts_log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        return v.strip().upper() or "WARNING"

    @property
    def palette(self) -> list[str]:
        if not self.magic_charts_palette:
            return list(DEFAULT_PALETTE)
        return self.magic_charts_palette.split(",")

    @property
    def sample_dirs(self) -> list[Path]:
        dirs: list[Path] = []
        if self.magic_charts_sample_dirs:
            for d in self.magic_charts_sample_dirs.split(","):
                d = d.strip()
                if d:
                    dirs.append(Path(d).expanduser())
        return dirs

    @property
    def log_level(self) -> int:
        level = logging.getLevelName(self.magic_charts_log_level)
        if not isinstance(level, int):
            raise ConfigurationError(
                f"MAGIC_CHARTS_LOG_LEVEL is not a valid level: {self.magic_charts_log_level}"
            )
        return level


# Singleton-ish: lazily loaded on first access
_settings: MagicChartsSettings | None = None


def get_settings(**overrides: str) -> MagicChartsSettings:
    """Get or create the application settings singleton."""
    global _settings
    if _settings is None or overrides:
        _settings = MagicChartsSettings(**overrides)
    return _settings


def reset_settings() -> None:
    """Reset cached settings (useful for testing)."""
    global _settings
    _settings = None
