"""Per-field descriptors built on top of the column classifier."""

from __future__ import annotations

import logging
from typing import Any, Mapping, Sequence

from pydantic import BaseModel, Field

from magic_charts.analysis.classifier import (
    CardinalityTier,
    SemanticType,
    classify,
    is_null,
)

logger = logging.getLogger(__name__)

PREVIEW_SIZE = 10

Row = Mapping[str, Any]


class FieldDescriptor(BaseModel):
    """Classification and diagnostics for a single column."""

    name: str
    semantic_type: SemanticType
    cardinality: int
    cardinality_tier: CardinalityTier
    has_nulls: bool = False
    sample_values: list[Any] = Field(default_factory=list)
    unique_values_sample: list[Any] = Field(default_factory=list)

    @property
    def is_low_cardinality(self) -> bool:
        return self.cardinality_tier == CardinalityTier.LOW


class FieldSet(BaseModel):
    """A column selection partitioned by semantic type."""

    dimensions: list[FieldDescriptor] = Field(default_factory=list)
    measures: list[FieldDescriptor] = Field(default_factory=list)
    dates: list[FieldDescriptor] = Field(default_factory=list)

    @classmethod
    def from_descriptors(cls, descriptors: Sequence[FieldDescriptor]) -> FieldSet:
        return cls(
            dimensions=[d for d in descriptors if d.semantic_type == SemanticType.DIMENSION],
            measures=[d for d in descriptors if d.semantic_type == SemanticType.MEASURE],
            dates=[d for d in descriptors if d.semantic_type == SemanticType.DATE],
        )

    @property
    def is_empty(self) -> bool:
        return not (self.dimensions or self.measures or self.dates)

    @property
    def all_fields(self) -> list[FieldDescriptor]:
        return [*self.dimensions, *self.measures, *self.dates]


def analyze_field(rows: Sequence[Row], column: str) -> FieldDescriptor:
    """Build the descriptor for one column over every row.

    The cardinality is exact over the full column; only the two preview
    lists are truncated.
    """
    raw = [row.get(column) for row in rows]
    result = classify(raw)

    present = [v for v in raw if not is_null(v)]
    unique: list[Any] = []
    seen: set[Any] = set()
    for v in present:
        if v not in seen:
            seen.add(v)
            unique.append(v)
            if len(unique) >= PREVIEW_SIZE:
                break

    descriptor = FieldDescriptor(
        name=column,
        semantic_type=result.semantic_type,
        cardinality=result.cardinality,
        cardinality_tier=result.cardinality_tier,
        has_nulls=len(present) < len(raw),
        sample_values=present[:PREVIEW_SIZE],
        unique_values_sample=unique,
    )
    logger.debug(
        "Classified %s as %s (cardinality=%d, tier=%s)",
        column,
        descriptor.semantic_type.value,
        descriptor.cardinality,
        descriptor.cardinality_tier.value,
    )
    return descriptor


def analyze_fields(rows: Sequence[Row], columns: Sequence[str]) -> list[FieldDescriptor]:
    """Descriptors for each selected column, in selection order."""
    return [analyze_field(rows, c) for c in columns]


def build_field_set(rows: Sequence[Row], columns: Sequence[str]) -> FieldSet:
    """Classify a column selection and partition it into a fresh FieldSet."""
    return FieldSet.from_descriptors(analyze_fields(rows, columns))
