"""Column classifier: semantic type and cardinality tier from raw values.

A column is a DATE when more than 80% of its non-null values are dates, a
MEASURE when more than 80% are finite numbers (unless they are a small set
of integers, which reads as a coded category), and a DIMENSION otherwise.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Iterable

TYPE_THRESHOLD = 0.8
MAX_CODED_INTEGERS = 20

# Cardinality tier upper bounds (inclusive)
LOW_CARDINALITY_MAX = 20
MEDIUM_CARDINALITY_MAX = 100

_DATE_FORMATS = (
    "%Y/%m/%d",
    "%Y/%m/%d %H:%M",
    "%Y/%m/%d %H:%M:%S",
    "%m/%d/%Y",
    "%d %b %Y",
    "%d %B %Y",
    "%b %d, %Y",
    "%B %d, %Y",
    "%b %Y",
    "%B %Y",
)


class SemanticType(str, Enum):
    """Analysis-time column role."""

    DIMENSION = "DIMENSION"
    MEASURE = "MEASURE"
    DATE = "DATE"


class CardinalityTier(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


@dataclass(frozen=True)
class Classification:
    """Result of classifying one column."""

    semantic_type: SemanticType
    cardinality: int

    @property
    def cardinality_tier(self) -> CardinalityTier:
        return cardinality_tier(self.cardinality)


def is_null(value: Any) -> bool:
    """True for None, empty/blank strings and float NaN."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, float):
        return math.isnan(value)
    return False


def to_number(value: Any) -> float | None:
    """Parse a cell as a finite number, or return None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def parse_date(value: Any) -> datetime | None:
    """Parse a cell as a date when it is unambiguously one.

    Accepts date/datetime objects, ISO-8601 strings and a short list of
    month-name and slash formats. Bare numbers are never dates.
    """
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if not isinstance(value, str):
        return None
    text = value.strip()
    if not text or to_number(text) is not None:
        return None
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        pass
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    return None


def cardinality_tier(count: int) -> CardinalityTier:
    """Bucket a distinct-value count into LOW / MEDIUM / HIGH."""
    if count <= LOW_CARDINALITY_MAX:
        return CardinalityTier.LOW
    if count <= MEDIUM_CARDINALITY_MAX:
        return CardinalityTier.MEDIUM
    return CardinalityTier.HIGH


def classify(values: Iterable[Any]) -> Classification:
    """Classify a column from its raw values.

    Never raises: an empty or all-null column is a DIMENSION with
    cardinality 0.
    """
    present = [v for v in values if not is_null(v)]
    cardinality = len(set(present))
    if not present:
        return Classification(SemanticType.DIMENSION, 0)

    total = len(present)
    date_count = sum(1 for v in present if parse_date(v) is not None)
    if date_count > total * TYPE_THRESHOLD:
        return Classification(SemanticType.DATE, cardinality)

    numbers = [n for n in (to_number(v) for v in present) if n is not None]
    if len(numbers) > total * TYPE_THRESHOLD:
        distinct = set(numbers)
        if len(distinct) <= MAX_CODED_INTEGERS and all(n.is_integer() for n in numbers):
            # Ratings, star counts and other small integer codes read as categories
            return Classification(SemanticType.DIMENSION, cardinality)
        return Classification(SemanticType.MEASURE, cardinality)

    return Classification(SemanticType.DIMENSION, cardinality)
